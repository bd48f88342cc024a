import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from rental_bookings.db.readers.wallets import list_wallet_transactions
from rental_bookings.dependencies import get_current_user, get_db_engine
from rental_bookings.routes._helpers import success_response
from rental_bookings.schemas.wallets import WalletOut
from rental_bookings.services.wallet_ledger import get_or_create_wallet

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/wallet", status_code=status.HTTP_200_OK)
def get_wallet_endpoint(
    limit: int = Query(50, ge=1, le=500, description="Number of recent transactions"),
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Current user's wallet balance and most recent ledger entries.

    The wallet is created empty on first access.
    """
    try:
        with db_engine.begin() as conn:
            wallet = get_or_create_wallet(conn, user["id"])
            transactions = list_wallet_transactions(conn, wallet["id"], limit=limit)

        data = WalletOut.model_validate({**wallet, "transactions": transactions}).to_json_dict()
        return success_response(data)

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("wallet_read_failed", user_id=user["id"], error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
