import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from rental_bookings.dependencies import get_current_user, get_db_engine
from rental_bookings.errors import BookingError
from rental_bookings.routes._helpers import booking_error_response, success_response
from rental_bookings.schemas.reviews import ReviewContentPayload, ReviewCreatePayload
from rental_bookings.services.reviews import (
    edit_review,
    get_listing_reviews,
    post_review,
    remove_review,
    review_payload,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/reviews", status_code=status.HTTP_200_OK)
def list_reviews_endpoint(
    listing_id: int = Query(..., alias="listingId"),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """A listing's reviews, newest first. Public."""
    try:
        rows = get_listing_reviews(db_engine, listing_id)
        return success_response([review_payload(row) for row in rows])

    except BookingError as e:
        return booking_error_response(e)
    except Exception as e:
        logger.exception("review_listing_failed", listing_id=listing_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/reviews", status_code=status.HTTP_201_CREATED)
def create_review_endpoint(
    payload: ReviewCreatePayload,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Review one of the current user's reservations.

    A second review of the same reservation is rejected with 409.
    """
    try:
        review = post_review(
            db_engine,
            user["id"],
            payload.listing_id,
            payload.reservation_id,
            payload.rating,
            payload.title,
            payload.content,
        )
        return success_response(review_payload(review), status_code=status.HTTP_201_CREATED)

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("review_creation_failed", user_id=user["id"], error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/reviews/{review_id}", status_code=status.HTTP_200_OK)
def update_review_endpoint(
    review_id: int,
    payload: ReviewContentPayload,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """Edit the current user's own review."""
    try:
        review = edit_review(
            db_engine, user["id"], review_id, payload.rating, payload.title, payload.content
        )
        return success_response(review_payload(review))

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("review_update_failed", review_id=review_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/reviews/{review_id}", status_code=status.HTTP_200_OK)
def delete_review_endpoint(
    review_id: int,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """Delete the current user's own review."""
    try:
        remove_review(db_engine, user["id"], review_id)
        return success_response(message="Review deleted successfully")

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("review_deletion_failed", review_id=review_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
