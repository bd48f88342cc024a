from datetime import datetime
from typing import Literal

from pydantic import Field

from rental_bookings.schemas.common import CamelModel


class NotificationCreatePayload(CamelModel):
    """Schema for an admin/system message to a user."""

    user_id: int = Field(..., description="Recipient user id")
    message: str = Field(..., min_length=1, description="Notification text")
    type: Literal["info", "success", "error"] = Field("info", description="Severity")


class NotificationOut(CamelModel):
    id: int
    user_id: int
    message: str
    type: str
    is_read: bool = False
    created_at: datetime
