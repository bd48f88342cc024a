"""Shared request/response model configuration."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model exchanging camelCase JSON while keeping snake_case attributes.

    Accepts either spelling on input so rows read from the database (snake_case
    keys) validate directly.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Dump with camelCase keys and JSON-native values."""
        return self.model_dump(mode="json", by_alias=True)


class ErrorResponse(BaseModel):
    """Body of every structured error response."""

    success: bool = False
    error: str = Field(..., description="Human-readable error message")
