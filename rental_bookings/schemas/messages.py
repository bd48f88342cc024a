from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from rental_bookings.schemas.common import CamelModel


class MessageCreatePayload(CamelModel):
    """A chat message; at least one of message, image or voice is required."""

    conversation_id: int = Field(..., description="Target conversation")
    message: Optional[str] = Field(None, description="Text body")
    image: Optional[str] = Field(None, description="Uploaded image URL")
    voice: Optional[str] = Field(None, description="Uploaded voice note URL")

    @model_validator(mode="after")
    def check_not_empty(self) -> "MessageCreatePayload":
        if not (self.message or self.image or self.voice):
            raise ValueError("A message needs text, an image or a voice note")
        return self


class MessageSenderOut(CamelModel):
    id: int
    name: Optional[str] = None
    email: str
    image: Optional[str] = None


class MessageOut(CamelModel):
    id: int
    conversation_id: int
    body: Optional[str] = None
    image: Optional[str] = None
    voice: Optional[str] = None
    created_at: datetime
    sender: MessageSenderOut


class ConversationUpdateOut(CamelModel):
    """Payload of conversation:update events."""

    id: int
    last_message_at: datetime
    messages: list[MessageOut]
