import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from rental_bookings.dependencies import get_current_user, get_db_engine, get_publisher
from rental_bookings.errors import BookingError
from rental_bookings.metrics import reservations_created
from rental_bookings.realtime.publisher import RealtimePublisher
from rental_bookings.routes._helpers import (
    booking_error_response,
    error_response,
    success_response,
    validate_role_or_400,
)
from rental_bookings.schemas.listings import ListingOut
from rental_bookings.schemas.reservations import (
    CancelledReservationOut,
    ReservationCreatePayload,
    ReservationSummaryOut,
)
from rental_bookings.services.reservations import (
    cancel_reservation,
    create_reservation,
    get_cancelled_reservations,
    get_user_reservations,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/reservations", status_code=status.HTTP_201_CREATED)
def create_reservation_endpoint(
    payload: ReservationCreatePayload,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Book a listing for the current user.

    Args:
        payload: listingId, inclusive startDate/endDate, totalPrice and payment ids
        user: Acting user
        db_engine: Database engine

    Returns:
        JSONResponse: 201 with the listing and its new reservation, or 409 if
        the dates are taken
    """
    try:
        listing = create_reservation(
            db_engine,
            user_id=user["id"],
            listing_id=payload.listing_id,
            start_date=payload.start_date,
            end_date=payload.end_date,
            total_price=payload.total_price,
            order_id=payload.order_id,
            payment_id=payload.payment_id,
            status=payload.status,
        )
        data = ListingOut.model_validate(listing).to_json_dict()
        return success_response(data, status_code=status.HTTP_201_CREATED)

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        reservations_created.labels(outcome="error").inc()
        logger.exception(
            "reservation_creation_failed", listing_id=payload.listing_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_200_OK)
def cancel_reservation_endpoint(
    reservation_id: int,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
    publisher: RealtimePublisher = Depends(get_publisher),
) -> JSONResponse:
    """
    Cancel a reservation as its guest or as the listing's host.

    The guest is refunded the full total price into their wallet. Any failure
    inside the transaction rolls everything back and is reported with its
    message.

    Returns:
        JSONResponse: ``{"success": true, "refundedAmount", "newBalance"}``
    """
    try:
        result = cancel_reservation(db_engine, publisher, user["id"], reservation_id)
        return success_response(
            refundedAmount=float(result.refunded_amount),
            newBalance=float(result.new_balance),
        )

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            "reservation_cancellation_failed", reservation_id=reservation_id, error=str(e)
        )
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))


@router.get("/reservations", status_code=status.HTTP_200_OK)
def list_reservations_endpoint(
    role: str = Query("guest", description="guest (trips) or host (reservations on my listings)"),
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """List the current user's trips or the reservations on their listings."""
    validate_role_or_400(role)
    try:
        rows = get_user_reservations(db_engine, user["id"], role)
        data = [ReservationSummaryOut.model_validate(row).to_json_dict() for row in rows]
        return success_response(data)

    except BookingError as e:
        return booking_error_response(e)
    except Exception as e:
        logger.exception("reservation_listing_failed", user_id=user["id"], error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/reservations/cancelled", status_code=status.HTTP_200_OK)
def list_cancelled_reservations_endpoint(
    role: str = Query("guest", description="guest or host"),
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """List cancellation audit records where the current user was guest or host."""
    validate_role_or_400(role)
    try:
        rows = get_cancelled_reservations(db_engine, user["id"], role)
        data = [CancelledReservationOut.model_validate(row).to_json_dict() for row in rows]
        return success_response(data)

    except BookingError as e:
        return booking_error_response(e)
    except Exception as e:
        logger.exception("cancelled_listing_failed", user_id=user["id"], error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
