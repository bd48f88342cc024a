"""
Reservation lifecycle: overlap-checked creation, transactional cancellation
with wallet refund and audit trail, and listing removal.

Every mutation runs inside a single ``engine.begin()`` transaction; real-time
pushes are issued only after that transaction has committed.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

import structlog
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from rental_bookings.config import (
    CANCELLATION_WINDOW_HOURS,
    CURRENCY_SYMBOL,
    LISTING_DELETION_POLICY,
    LISTING_DELETION_POLICY_REFUND,
    MAX_STAY_DAYS,
)
from rental_bookings.db.readers.listings import get_listing
from rental_bookings.db.readers.reservations import (
    get_reservation,
    get_reservation_for_cancellation,
    list_cancelled_reservations,
    list_current_listing_reservations,
    list_listing_reservations_with_guests,
    list_reservations,
)
from rental_bookings.db.writers.listings import delete_listing
from rental_bookings.db.writers.notifications import insert_notification
from rental_bookings.db.writers.reservations import (
    claim_reserved_dates,
    delete_listing_reservations,
    delete_reservation,
    insert_cancelled_reservation,
    insert_reservation,
)
from rental_bookings.errors import (
    BookingError,
    DatesUnavailableError,
    ListingNotFoundError,
    NotAuthorizedError,
    ReservationNotFoundError,
    ValidationError,
)
from rental_bookings.metrics import (
    reservations_cancelled,
    reservations_created,
    transaction_duration,
    wallet_credited_amount,
    wallet_credits,
)
from rental_bookings.models.reservations import RESERVATION_STATUSES, STATUS_FAILED
from rental_bookings.realtime.publisher import RealtimePublisher
from rental_bookings.services.availability import has_overlap, validate_date_range
from rental_bookings.services.notifications import publish_new_notification
from rental_bookings.services.wallet_ledger import credit_wallet, get_or_create_wallet
from rental_bookings.utils.datetime import as_utc, utc_now

logger = structlog.get_logger(__name__)

REASON_GUEST = "Cancelled by guest"
REASON_HOST = "Cancelled by host"
REASON_LISTING_REMOVED = "Listing removed by host"

MONEY_QUANTUM = Decimal("0.01")
MAX_TOTAL_PRICE = Decimal("9999999999.99")


@dataclass
class CancellationResult:
    reservation_id: int
    refunded_amount: Decimal
    new_balance: Decimal
    cancelled_by_guest: bool
    notification: Optional[dict[str, Any]] = None


@dataclass
class ListingDeletionResult:
    listing_id: int
    cancelled_reservations: int
    refunded_total: Decimal
    notifications: list[dict[str, Any]] = field(default_factory=list)


def host_cancellation_message(reservation: dict[str, Any]) -> str:
    return (
        f'Unfortunately, your reservation for "{reservation["listing_title"]}" has been '
        "canceled due to an unexpected issue. The total amount of "
        f"{CURRENCY_SYMBOL}{reservation['total_price']} will be refunded to your wallet. "
        "We apologize for any inconvenience caused and appreciate your understanding."
    )


def listing_removed_message(reservation: dict[str, Any], refunded: bool) -> str:
    message = (
        f'We\'re truly sorry to inform you that your reservation for "{reservation["listing_title"]}" '
        "has been canceled as the property is no longer available."
    )
    if refunded:
        message += (
            f" The total amount of {CURRENCY_SYMBOL}{reservation['total_price']} "
            "has been refunded to your wallet."
        )
    return message + " We sincerely apologize for any inconvenience this may have caused."


def _validate_new_reservation(
    start_date: date, end_date: date, total_price: Decimal, order_id: str, status: Optional[str]
) -> None:
    validate_date_range(start_date, end_date)
    if total_price is None:
        raise ValidationError("totalPrice is required")
    amount = total_price if isinstance(total_price, Decimal) else Decimal(str(total_price))
    if amount <= 0:
        raise ValidationError("totalPrice must be positive")
    if amount > MAX_TOTAL_PRICE:
        raise ValidationError(f"totalPrice must not exceed {MAX_TOTAL_PRICE}")
    # stored as Numeric(12, 2); sub-cent amounts would round to a different refund
    if amount != amount.quantize(MONEY_QUANTUM):
        raise ValidationError("totalPrice must have at most two decimal places")
    if not order_id:
        raise ValidationError("orderId is required")
    if status is not None and status not in RESERVATION_STATUSES:
        raise ValidationError(f"Unknown reservation status {status!r}")
    nights = (end_date - start_date).days + 1
    if nights > MAX_STAY_DAYS:
        raise ValidationError(f"Reservations are limited to {MAX_STAY_DAYS} days")


def create_reservation(
    engine: Engine,
    user_id: int,
    listing_id: int,
    start_date: date,
    end_date: date,
    total_price: Decimal,
    order_id: str,
    payment_id: Optional[str] = None,
    status: Optional[str] = None,
) -> dict[str, Any]:
    """
    Book a listing for an inclusive date range.

    The listing row is locked, the overlap check runs and the reservation plus
    its per-day calendar rows are inserted, all in one transaction. A unique
    violation on the calendar rows is treated exactly like a failed overlap
    check, so two racing requests can never both succeed.

    Args:
        engine: SQLAlchemy engine
        user_id: Booking guest
        listing_id: Listing to book
        start_date: First day (inclusive)
        end_date: Last day (inclusive)
        total_price: Price computed by the checkout flow
        order_id: Payment gateway order id
        payment_id: Payment gateway payment id
        status: pending, success or failed

    Returns:
        dict[str, Any]: The listing with ``reservations`` holding the new reservation

    Raises:
        ValidationError: Missing or malformed input
        ListingNotFoundError: Listing does not exist
        DatesUnavailableError: Range overlaps a non-failed reservation
    """
    try:
        _validate_new_reservation(start_date, end_date, total_price, order_id, status)

        with transaction_duration.labels(operation="create_reservation").time():
            with engine.begin() as conn:
                listing = get_listing(conn, listing_id, for_update=True)
                if listing is None:
                    raise ListingNotFoundError()

                if has_overlap(conn, listing_id, start_date, end_date):
                    raise DatesUnavailableError()

                reservation_id = insert_reservation(
                    conn,
                    listing_id=listing_id,
                    user_id=user_id,
                    start_date=start_date,
                    end_date=end_date,
                    total_price=Decimal(total_price),
                    order_id=order_id,
                    payment_id=payment_id,
                    status=status,
                )

                if status != STATUS_FAILED:
                    try:
                        claim_reserved_dates(conn, listing_id, reservation_id, start_date, end_date)
                    except IntegrityError as e:
                        raise DatesUnavailableError() from e

                reservation = get_reservation(conn, reservation_id)

    except DatesUnavailableError:
        reservations_created.labels(outcome="conflict").inc()
        logger.info(
            "reservation_rejected_dates_unavailable",
            listing_id=listing_id,
            start_date=str(start_date),
            end_date=str(end_date),
        )
        raise
    except BookingError as e:
        reservations_created.labels(outcome="invalid").inc()
        logger.info("reservation_rejected", listing_id=listing_id, error=e.message)
        raise

    reservations_created.labels(outcome="created").inc()
    logger.info(
        "reservation_created",
        reservation_id=reservation_id,
        listing_id=listing_id,
        user_id=user_id,
        start_date=str(start_date),
        end_date=str(end_date),
    )
    return {**listing, "reservations": [reservation]}


def cancel_reservation(
    engine: Engine,
    publisher: RealtimePublisher,
    acting_user_id: int,
    reservation_id: int,
) -> CancellationResult:
    """
    Cancel a reservation with a full refund to the guest's wallet.

    Steps, all in one transaction:
        1. Load the reservation with its listing and guest, row-locked
        2. Authorize: only the guest or the listing's host may cancel
        3. Obtain or create the guest's wallet
        4. Credit the full total price (with a ledger entry)
        5. Write the audit row
        6. Delete the reservation; nothing deleted means a concurrent
           cancellation won, so the whole transaction is aborted
        7. Host-initiated only: store a notification for the guest

    After commit the notification is pushed to the guest; a failed push does
    not affect the cancellation.

    Args:
        engine: SQLAlchemy engine
        publisher: Real-time publisher for the post-commit push
        acting_user_id: Current user
        reservation_id: Reservation to cancel

    Returns:
        CancellationResult: Refunded amount and the guest's new balance

    Raises:
        ReservationNotFoundError: Missing or already cancelled
        NotAuthorizedError: Acting user is neither guest nor host
    """
    with transaction_duration.labels(operation="cancel_reservation").time():
        with engine.begin() as conn:
            reservation = get_reservation_for_cancellation(conn, reservation_id)
            if reservation is None:
                raise ReservationNotFoundError()

            guest_id = reservation["user_id"]
            cancelled_by_guest = acting_user_id == guest_id
            if not cancelled_by_guest and acting_user_id != reservation["host_id"]:
                raise NotAuthorizedError("Unauthorized")

            get_or_create_wallet(conn, guest_id)
            wallet = credit_wallet(
                conn,
                guest_id,
                reservation["total_price"],
                description=f"Refund for reservation #{reservation_id}",
            )

            insert_cancelled_reservation(
                conn,
                reservation,
                cancelled_by=acting_user_id,
                reason=REASON_GUEST if cancelled_by_guest else REASON_HOST,
            )

            if delete_reservation(conn, reservation_id) == 0:
                raise ReservationNotFoundError("Reservation already cancelled")

            notification = None
            if not cancelled_by_guest:
                notification = insert_notification(
                    conn, guest_id, host_cancellation_message(reservation), "info"
                )

    refunded = Decimal(reservation["total_price"])
    reservations_cancelled.labels(initiator="guest" if cancelled_by_guest else "host").inc()
    wallet_credits.inc()
    wallet_credited_amount.inc(float(refunded))
    logger.info(
        "reservation_cancelled",
        reservation_id=reservation_id,
        listing_id=reservation["listing_id"],
        guest_id=guest_id,
        cancelled_by=acting_user_id,
        refunded_amount=str(refunded),
    )

    if notification is not None:
        publish_new_notification(publisher, reservation["guest_email"], notification)

    return CancellationResult(
        reservation_id=reservation_id,
        refunded_amount=refunded,
        new_balance=Decimal(wallet["balance"]),
        cancelled_by_guest=cancelled_by_guest,
        notification=notification,
    )


def delete_listing_with_reservations(
    engine: Engine,
    publisher: RealtimePublisher,
    owner_id: int,
    listing_id: int,
    policy: str = LISTING_DELETION_POLICY,
) -> ListingDeletionResult:
    """
    Remove a listing, cancelling and notifying every guest holding a reservation.

    Each affected reservation gets an audit row and an error notification for
    its guest. Guests are refunded only under the "refund" policy; the default
    "notify_only" leaves money matters to be settled out of band.

    Args:
        engine: SQLAlchemy engine
        publisher: Real-time publisher for the post-commit pushes
        owner_id: Current user, who must own the listing
        listing_id: Listing to remove
        policy: "notify_only" or "refund"

    Returns:
        ListingDeletionResult: Counts, refunded total and stored notifications

    Raises:
        ListingNotFoundError: Missing listing or not owned by owner_id
    """
    refund = policy == LISTING_DELETION_POLICY_REFUND
    pushes: list[tuple[Optional[str], dict[str, Any]]] = []
    refunded_total = Decimal("0")

    with transaction_duration.labels(operation="delete_listing").time():
        with engine.begin() as conn:
            listing = get_listing(conn, listing_id, for_update=True)
            if listing is None or listing["user_id"] != owner_id:
                raise ListingNotFoundError("Listing not found or unauthorized")

            reservations = list_listing_reservations_with_guests(conn, listing_id)
            for reservation in reservations:
                refunded = refund and reservation["status"] != STATUS_FAILED
                if refunded:
                    credit_wallet(
                        conn,
                        reservation["user_id"],
                        reservation["total_price"],
                        description=f"Refund for reservation #{reservation['id']} (listing removed)",
                    )
                    refunded_total += Decimal(reservation["total_price"])

                insert_cancelled_reservation(
                    conn, reservation, cancelled_by=owner_id, reason=REASON_LISTING_REMOVED
                )
                notification = insert_notification(
                    conn,
                    reservation["user_id"],
                    listing_removed_message(reservation, refunded),
                    "error",
                )
                pushes.append((reservation["guest_email"], notification))

            delete_listing_reservations(conn, listing_id)
            delete_listing(conn, listing_id, owner_id)

    reservations_cancelled.labels(initiator="listing_deleted").inc(len(pushes))
    logger.info(
        "listing_deleted",
        listing_id=listing_id,
        owner_id=owner_id,
        cancelled_reservations=len(pushes),
        policy=policy,
        refunded_total=str(refunded_total),
    )

    for email, notification in pushes:
        publish_new_notification(publisher, email, notification)

    return ListingDeletionResult(
        listing_id=listing_id,
        cancelled_reservations=len(pushes),
        refunded_total=refunded_total,
        notifications=[notification for _, notification in pushes],
    )


def can_cancel(created_at: Optional[datetime], now: datetime) -> bool:
    """Whether a reservation is still inside the free-cancellation window."""
    if created_at is None:
        return False
    return as_utc(created_at) >= now - timedelta(hours=CANCELLATION_WINDOW_HOURS)


def _summarize(row: dict[str, Any], now: datetime) -> dict[str, Any]:
    return {
        **row,
        "can_cancel": can_cancel(row.get("created_at"), now),
        "listing": {
            "id": row["listing_id"],
            "title": row.get("listing_title"),
            "price": row.get("listing_price"),
            "category": row.get("listing_category"),
            "user_id": row.get("host_id"),
        },
        "user": {
            "id": row["user_id"],
            "name": row.get("guest_name"),
            "email": row.get("guest_email"),
        },
    }


def get_user_reservations(engine: Engine, user_id: int, role: str) -> list[dict[str, Any]]:
    """
    Reservations made by the user (role "guest") or on the user's listings ("host").

    Raises:
        ValidationError: Unknown role
    """
    if role not in ("guest", "host"):
        raise ValidationError("role must be 'guest' or 'host'")
    with engine.connect() as conn:
        if role == "guest":
            rows = list_reservations(conn, guest_id=user_id)
        else:
            rows = list_reservations(conn, host_id=user_id)
    now = utc_now()
    return [_summarize(row, now) for row in rows]


def get_cancelled_reservations(engine: Engine, user_id: int, role: str) -> list[dict[str, Any]]:
    if role not in ("guest", "host"):
        raise ValidationError("role must be 'guest' or 'host'")
    with engine.connect() as conn:
        if role == "guest":
            return list_cancelled_reservations(conn, guest_id=user_id)
        return list_cancelled_reservations(conn, host_id=user_id)


def get_current_listing_reservations(
    engine: Engine, listing_id: int, today: date
) -> list[dict[str, Any]]:
    """Reservations of a listing that end today or later, by start date."""
    with engine.connect() as conn:
        if get_listing(conn, listing_id) is None:
            raise ListingNotFoundError()
        return list_current_listing_reservations(conn, listing_id, today)
