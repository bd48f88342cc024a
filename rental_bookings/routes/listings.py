import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from rental_bookings.dependencies import get_current_user, get_db_engine, get_publisher
from rental_bookings.errors import BookingError
from rental_bookings.realtime.publisher import RealtimePublisher
from rental_bookings.routes._helpers import booking_error_response, success_response
from rental_bookings.schemas.listings import (
    ListingOfferPayload,
    ListingOut,
    ListingPricePayload,
)
from rental_bookings.schemas.reservations import ReservationOut
from rental_bookings.services.listings import set_listing_offer, set_listing_price
from rental_bookings.services.reservations import (
    delete_listing_with_reservations,
    get_current_listing_reservations,
)
from rental_bookings.utils.datetime import utc_today

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/listings/{listing_id}/reservations", status_code=status.HTTP_200_OK)
def listing_reservations_endpoint(
    listing_id: int,
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Current reservations of a listing (ending today or later), for calendars.

    Public: the booking calendar greys out these ranges for every visitor.
    """
    try:
        rows = get_current_listing_reservations(db_engine, listing_id, utc_today())
        data = [ReservationOut.model_validate(row).to_json_dict() for row in rows]
        return success_response(data)

    except BookingError as e:
        return booking_error_response(e)
    except Exception as e:
        logger.exception("listing_reservations_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/listings/{listing_id}", status_code=status.HTTP_200_OK)
def delete_listing_endpoint(
    listing_id: int,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
    publisher: RealtimePublisher = Depends(get_publisher),
) -> JSONResponse:
    """
    Delete one of the current user's listings.

    Guests holding reservations are notified (and refunded when the deletion
    policy says so).
    """
    try:
        result = delete_listing_with_reservations(db_engine, publisher, user["id"], listing_id)
        return success_response(
            cancelledReservations=result.cancelled_reservations,
            refundedTotal=float(result.refunded_total),
        )

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("listing_deletion_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/listings/{listing_id}/price", status_code=status.HTTP_200_OK)
def update_price_endpoint(
    listing_id: int,
    payload: ListingPricePayload,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    try:
        listing = set_listing_price(db_engine, user["id"], listing_id, payload.price)
        return success_response(ListingOut.model_validate(listing).to_json_dict())

    except BookingError as e:
        return booking_error_response(e)
    except Exception as e:
        logger.exception("listing_price_update_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/listings/{listing_id}/offer", status_code=status.HTTP_200_OK)
def update_offer_endpoint(
    listing_id: int,
    payload: ListingOfferPayload,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """Set the discounted offer price, or clear it with ``{"offerPrice": null}``."""
    try:
        listing = set_listing_offer(db_engine, user["id"], listing_id, payload.offer_price)
        return success_response(ListingOut.model_validate(listing).to_json_dict())

    except BookingError as e:
        return booking_error_response(e)
    except Exception as e:
        logger.exception("listing_offer_update_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
