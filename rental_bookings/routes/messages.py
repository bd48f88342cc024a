import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from rental_bookings.dependencies import get_current_user, get_db_engine, get_publisher
from rental_bookings.errors import BookingError
from rental_bookings.realtime.publisher import RealtimePublisher
from rental_bookings.routes._helpers import booking_error_response, success_response
from rental_bookings.schemas.messages import MessageCreatePayload
from rental_bookings.services.messages import mark_seen, post_message, unseen_count

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.post("/messages", status_code=status.HTTP_201_CREATED)
def post_message_endpoint(
    payload: MessageCreatePayload,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
    publisher: RealtimePublisher = Depends(get_publisher),
) -> JSONResponse:
    """Post a chat message to a conversation the current user takes part in."""
    try:
        message = post_message(
            db_engine,
            publisher,
            sender_id=user["id"],
            conversation_id=payload.conversation_id,
            body=payload.message,
            image=payload.image,
            voice=payload.voice,
        )
        return success_response(message, status_code=status.HTTP_201_CREATED)

    except BookingError as e:
        return booking_error_response(e)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(
            "message_post_failed", conversation_id=payload.conversation_id, error=str(e)
        )
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/conversations/unseen-count", status_code=status.HTTP_200_OK)
def unseen_count_endpoint(
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    """
    Number of messages from others the current user has not seen yet.

    Returns:
        JSONResponse: ``{"success": true, "count": n, "hasUnseen": bool}``
    """
    try:
        count = unseen_count(db_engine, user["id"])
        return success_response(count=count, hasUnseen=count > 0)

    except Exception as e:
        logger.exception("unseen_count_failed", user_id=user["id"], error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/conversations/{conversation_id}/seen", status_code=status.HTTP_200_OK)
def mark_seen_endpoint(
    conversation_id: int,
    user: dict = Depends(get_current_user),
    db_engine: Engine = Depends(get_db_engine),
) -> JSONResponse:
    try:
        mark_seen(db_engine, user["id"], conversation_id)
        return success_response()

    except BookingError as e:
        return booking_error_response(e)
    except Exception as e:
        logger.exception("mark_seen_failed", conversation_id=conversation_id, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
