from datetime import datetime
from typing import Optional

from pydantic import Field

from rental_bookings.schemas.common import CamelModel


class WalletTransactionOut(CamelModel):
    id: int
    amount: float
    type: str
    description: Optional[str] = None
    created_at: datetime


class WalletOut(CamelModel):
    id: int
    user_id: int
    balance: float
    transactions: list[WalletTransactionOut] = Field(default_factory=list)
