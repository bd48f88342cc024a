from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.engine import Connection

from rental_bookings.models.reviews import Review
from rental_bookings.models.users import User


def get_review(
    conn: Connection, review_id: int, for_update: bool = False
) -> Optional[dict[str, Any]]:
    stmt = select(Review).where(Review.id == review_id)
    if for_update:
        stmt = stmt.with_for_update()
    row = conn.execute(stmt).mappings().fetchone()
    return dict(row) if row else None


def find_user_review_for_reservation(
    conn: Connection, user_id: int, reservation_id: int
) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(
            select(Review).where(
                Review.user_id == user_id, Review.reservation_id == reservation_id
            )
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None


def list_listing_reviews(conn: Connection, listing_id: int) -> list[dict[str, Any]]:
    """
    A listing's reviews with the author's name, newest first.

    Returns:
        list[dict[str, Any]]: Review columns plus ``author_name``
    """
    result = conn.execute(
        select(Review, User.name.label("author_name"))
        .join(User, User.id == Review.user_id)
        .where(Review.listing_id == listing_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return [dict(row) for row in result.mappings()]


def get_review_with_author(conn: Connection, review_id: int) -> Optional[dict[str, Any]]:
    row = (
        conn.execute(
            select(Review, User.name.label("author_name"))
            .join(User, User.id == Review.user_id)
            .where(Review.id == review_id)
        )
        .mappings()
        .fetchone()
    )
    return dict(row) if row else None
