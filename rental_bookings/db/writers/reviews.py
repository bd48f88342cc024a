from typing import Any

from sqlalchemy import delete, insert, update
from sqlalchemy.engine import Connection

from rental_bookings.models.reviews import Review
from rental_bookings.utils.datetime import utc_now


def insert_review(
    conn: Connection,
    user_id: int,
    listing_id: int,
    reservation_id: int,
    rating: int,
    title: str,
    content: str,
    verified: bool,
) -> int:
    """
    Insert a review.

    Raises:
        IntegrityError: The user already reviewed this reservation

    Returns:
        int: New review id
    """
    now = utc_now()
    result = conn.execute(
        insert(Review).values(
            user_id=user_id,
            listing_id=listing_id,
            reservation_id=reservation_id,
            rating=rating,
            title=title,
            content=content,
            helpful_count=0,
            verified=verified,
            created_at=now,
            updated_at=now,
        )
    )
    return int(result.inserted_primary_key[0])


def update_review(conn: Connection, review_id: int, author_id: int, **values: Any) -> int:
    """Update rating/title/content of a review written by author_id. Returns rows updated."""
    result = conn.execute(
        update(Review)
        .where(Review.id == review_id, Review.user_id == author_id)
        .values(**values, updated_at=utc_now())
    )
    return result.rowcount


def delete_review(conn: Connection, review_id: int, author_id: int) -> int:
    result = conn.execute(
        delete(Review).where(Review.id == review_id, Review.user_id == author_id)
    )
    return result.rowcount
