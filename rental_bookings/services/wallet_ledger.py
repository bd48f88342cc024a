"""
Wallet ledger: lazily created per-user balances that are credited on refunds.

Every balance change writes a WalletTransaction in the same transaction, so
the balance always equals the sum of the ledger.
"""

from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Connection

from rental_bookings.db.readers.wallets import get_wallet
from rental_bookings.db.writers.wallets import (
    increment_balance,
    insert_wallet_if_missing,
    insert_wallet_transaction,
)
from rental_bookings.errors import ValidationError
from rental_bookings.models.wallets import TRANSACTION_CREDIT

logger = structlog.get_logger(__name__)


def get_or_create_wallet(conn: Connection, user_id: int) -> dict[str, Any]:
    """
    Return the user's wallet, creating an empty one on first access.

    Args:
        conn: Active connection (within transaction)
        user_id: Wallet owner

    Returns:
        dict[str, Any]: Wallet row (id, user_id, balance, ...)
    """
    wallet = get_wallet(conn, user_id)
    if wallet is not None:
        return wallet

    insert_wallet_if_missing(conn, user_id)
    wallet = get_wallet(conn, user_id)
    if wallet is None:
        raise RuntimeError(f"Failed to get or create wallet for user_id={user_id}")

    logger.info("wallet_created", user_id=user_id, wallet_id=wallet["id"])
    return wallet


def credit_wallet(
    conn: Connection, user_id: int, amount: Decimal, description: Optional[str] = None
) -> dict[str, Any]:
    """
    Increase a user's balance by amount and record the credit in the ledger.

    Args:
        conn: Active connection (within transaction)
        user_id: Wallet owner
        amount: Positive amount to add
        description: Ledger description

    Returns:
        dict[str, Any]: Wallet row after the credit

    Raises:
        ValidationError: If amount is not positive
    """
    amount = Decimal(amount)
    if amount <= 0:
        raise ValidationError("Credit amount must be positive")

    wallet = get_or_create_wallet(conn, user_id)
    increment_balance(conn, wallet["id"], amount)
    insert_wallet_transaction(conn, wallet["id"], amount, TRANSACTION_CREDIT, description)

    updated = get_wallet(conn, user_id)
    if updated is None:
        raise RuntimeError(f"Wallet for user_id={user_id} vanished during credit")

    logger.info(
        "wallet_credited",
        user_id=user_id,
        wallet_id=updated["id"],
        amount=str(amount),
        balance=str(updated["balance"]),
    )
    return updated
