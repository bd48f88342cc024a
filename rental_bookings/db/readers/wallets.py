from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from rental_bookings.models.wallets import Wallet, WalletTransaction


def get_wallet(conn: Connection, user_id: int) -> Optional[dict[str, Any]]:
    """Fetch the wallet owned by user_id, or None if it was never created."""
    row = conn.execute(select(Wallet).where(Wallet.user_id == user_id)).mappings().fetchone()
    return dict(row) if row else None


def list_wallet_transactions(
    conn: Connection, wallet_id: int, limit: int = 50
) -> list[dict[str, Any]]:
    """Most recent ledger entries for a wallet."""
    result = conn.execute(
        select(WalletTransaction)
        .where(WalletTransaction.wallet_id == wallet_id)
        .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
        .limit(limit)
    )
    return [dict(row) for row in result.mappings()]
