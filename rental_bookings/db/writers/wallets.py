from decimal import Decimal
from typing import Optional

from sqlalchemy import insert, update
from sqlalchemy.engine import Connection

from rental_bookings.db.writers._dialect import dialect_insert
from rental_bookings.models.wallets import Wallet, WalletTransaction
from rental_bookings.utils.datetime import utc_now


def insert_wallet_if_missing(conn: Connection, user_id: int) -> None:
    """
    Create an empty wallet for user_id unless one already exists.

    Uses ON CONFLICT DO NOTHING on the unique user_id so two requests racing
    to create the same wallet both succeed and end up sharing one row.

    Args:
        conn (Connection): Active connection (within transaction).
        user_id (int): Wallet owner.
    """
    now = utc_now()
    stmt = (
        dialect_insert(conn, Wallet)
        .values(user_id=user_id, balance=Decimal("0"), created_at=now, updated_at=now)
        .on_conflict_do_nothing(index_elements=["user_id"])
    )
    conn.execute(stmt)


def increment_balance(conn: Connection, wallet_id: int, amount: Decimal) -> int:
    """
    Add amount to a wallet balance in place.

    Returns:
        int: Rows updated (1 when the wallet exists).
    """
    result = conn.execute(
        update(Wallet)
        .where(Wallet.id == wallet_id)
        .values(balance=Wallet.balance + amount, updated_at=utc_now())
    )
    return result.rowcount


def insert_wallet_transaction(
    conn: Connection,
    wallet_id: int,
    amount: Decimal,
    type_: str,
    description: Optional[str] = None,
) -> int:
    """Append a ledger entry. Returns its id."""
    result = conn.execute(
        insert(WalletTransaction).values(
            wallet_id=wallet_id,
            amount=amount,
            type=type_,
            description=description,
            created_at=utc_now(),
        )
    )
    return int(result.inserted_primary_key[0])
