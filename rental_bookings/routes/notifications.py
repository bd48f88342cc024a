import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from rental_bookings.dependencies import get_current_user, get_db_engine, get_publisher
from rental_bookings.errors import BookingError
from rental_bookings.realtime.publisher import RealtimePublisher
from rental_bookings.routes._helpers import booking_error_response, success_response
from rental_bookings.schemas.notifications import NotificationCreatePayload
from rental_bookings.services.notifications import (
    create_user_notification,
    get_user_notifications,
    notification_payload,
    remove_user_notification,
)

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/notifications", status_code=status.HTTP_200_OK)
def list_notifications_endpoint(
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """Current user's notifications, newest first."""
    try:
        rows = get_user_notifications(db_engine, user["id"])
        return success_response([notification_payload(row) for row in rows])

    except Exception as e:
        logger.exception("notification_listing_failed", user_id=user["id"], error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/notifications", status_code=status.HTTP_201_CREATED)
def create_notification_endpoint(
    payload: NotificationCreatePayload,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
    publisher: RealtimePublisher = Depends(get_publisher),
) -> JSONResponse:
    """
    Send a system message to a user.

    The notification is stored first and then pushed on the recipient's
    notification channel.
    """
    try:
        notification = create_user_notification(
            db_engine, publisher, payload.user_id, payload.message, payload.type
        )
        logger.info(
            "notification_sent",
            sender_id=user["id"],
            recipient_id=payload.user_id,
            notification_id=notification["id"],
        )
        return success_response(
            notification_payload(notification), status_code=status.HTTP_201_CREATED
        )

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("notification_creation_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/notifications/{notification_id}", status_code=status.HTTP_200_OK)
def delete_notification_endpoint(
    notification_id: int,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
    publisher: RealtimePublisher = Depends(get_publisher),
) -> JSONResponse:
    """Delete one of the current user's notifications."""
    try:
        remove_user_notification(db_engine, publisher, user, notification_id)
        return success_response()

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            "notification_deletion_failed", notification_id=notification_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")
