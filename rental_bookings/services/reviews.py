"""
Guest reviews of stays.

A review is tied to one of the author's own reservations on the reviewed
listing; a user reviews a given reservation once. Only the author may edit or
delete a review.
"""

from typing import Any

import structlog
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from rental_bookings.db.readers.listings import get_listing
from rental_bookings.db.readers.reservations import get_reservation
from rental_bookings.db.readers.reviews import (
    find_user_review_for_reservation,
    get_review,
    get_review_with_author,
    list_listing_reviews,
)
from rental_bookings.db.writers.reviews import delete_review, insert_review, update_review
from rental_bookings.errors import (
    DuplicateReviewError,
    ListingNotFoundError,
    NotAuthorizedError,
    ReservationNotFoundError,
    ReviewNotFoundError,
    ValidationError,
)
from rental_bookings.models.reservations import STATUS_FAILED, STATUS_SUCCESS
from rental_bookings.models.reviews import MAX_RATING, MIN_RATING
from rental_bookings.schemas.reviews import ReviewOut

logger = structlog.get_logger(__name__)

ANONYMOUS_AUTHOR = "Anonymous"


def review_payload(row: dict[str, Any]) -> dict[str, Any]:
    """Serialise a review row (optionally carrying ``author_name``) for clients."""
    return ReviewOut.model_validate(
        {**row, "author": row.get("author_name") or ANONYMOUS_AUTHOR}
    ).to_json_dict()


def _validate_review_fields(rating: int, title: str, content: str) -> None:
    if rating is None or not MIN_RATING <= int(rating) <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    if not title or not title.strip():
        raise ValidationError("Title is required")
    if not content or not content.strip():
        raise ValidationError("Content is required")


def _authored_review_for_update(
    conn: Connection, review_id: int, user_id: int, action: str
) -> dict[str, Any]:
    review = get_review(conn, review_id, for_update=True)
    if review is None:
        raise ReviewNotFoundError()
    if review["user_id"] != user_id:
        raise NotAuthorizedError(f"You can only {action} your own reviews")
    return review


def post_review(
    engine: Engine,
    user_id: int,
    listing_id: int,
    reservation_id: int,
    rating: int,
    title: str,
    content: str,
) -> dict[str, Any]:
    """
    Review one of the user's reservations.

    The review is marked verified when the reservation's payment succeeded.

    Returns:
        dict[str, Any]: The stored review row

    Raises:
        ValidationError: Bad rating or blank text, reservation on another
            listing, or a failed reservation
        ReservationNotFoundError: Unknown reservation
        NotAuthorizedError: Reservation belongs to someone else
        DuplicateReviewError: The user already reviewed this reservation
    """
    _validate_review_fields(rating, title, content)

    try:
        with engine.begin() as conn:
            reservation = get_reservation(conn, reservation_id)
            if reservation is None:
                raise ReservationNotFoundError()
            if reservation["user_id"] != user_id:
                raise NotAuthorizedError("You can only review your own reservations")
            if reservation["listing_id"] != listing_id:
                raise ValidationError("Reservation does not belong to this listing")
            if reservation["status"] == STATUS_FAILED:
                raise ValidationError("Failed reservations cannot be reviewed")

            if find_user_review_for_reservation(conn, user_id, reservation_id) is not None:
                raise DuplicateReviewError()

            review_id = insert_review(
                conn,
                user_id=user_id,
                listing_id=listing_id,
                reservation_id=reservation_id,
                rating=int(rating),
                title=title.strip(),
                content=content.strip(),
                verified=reservation["status"] == STATUS_SUCCESS,
            )
            review = get_review_with_author(conn, review_id)
    except IntegrityError as e:
        # a concurrent request inserted the same (user, reservation) first
        raise DuplicateReviewError() from e

    assert review is not None
    logger.info(
        "review_posted",
        review_id=review_id,
        listing_id=listing_id,
        reservation_id=reservation_id,
        rating=review["rating"],
    )
    return review


def get_listing_reviews(engine: Engine, listing_id: int) -> list[dict[str, Any]]:
    """
    A listing's reviews, newest first.

    Raises:
        ListingNotFoundError: Unknown listing
    """
    with engine.connect() as conn:
        if get_listing(conn, listing_id) is None:
            raise ListingNotFoundError()
        return list_listing_reviews(conn, listing_id)


def edit_review(
    engine: Engine, user_id: int, review_id: int, rating: int, title: str, content: str
) -> dict[str, Any]:
    """
    Change rating, title and content of the user's own review.

    Raises:
        ValidationError: Bad rating or blank text
        ReviewNotFoundError: Unknown review
        NotAuthorizedError: Review written by someone else
    """
    _validate_review_fields(rating, title, content)

    with engine.begin() as conn:
        _authored_review_for_update(conn, review_id, user_id, "edit")
        update_review(
            conn,
            review_id,
            user_id,
            rating=int(rating),
            title=title.strip(),
            content=content.strip(),
        )
        review = get_review_with_author(conn, review_id)

    logger.info("review_updated", review_id=review_id, rating=int(rating))
    assert review is not None
    return review


def remove_review(engine: Engine, user_id: int, review_id: int) -> None:
    """
    Delete the user's own review.

    Raises:
        ReviewNotFoundError: Unknown review, or already deleted
        NotAuthorizedError: Review written by someone else
    """
    with engine.begin() as conn:
        _authored_review_for_update(conn, review_id, user_id, "delete")
        if delete_review(conn, review_id, user_id) == 0:
            raise ReviewNotFoundError()

    logger.info("review_deleted", review_id=review_id, user_id=user_id)
