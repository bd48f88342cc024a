"""
Prometheus metrics for the booking lifecycle, wallet refunds and real-time fan-out.

Metrics are exposed via the /metrics endpoint for scraping by Prometheus.

Example:
    >>> from rental_bookings.metrics import reservations_created
    >>> reservations_created.labels(outcome="created").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Reservation Metrics
# =============================================================================

reservations_created = Counter(
    "rentals_reservation_requests_total",
    "Total reservation creation attempts by outcome",
    ["outcome"],
)
"""
Counter for reservation creation attempts.

Labels:
    outcome: created, conflict, invalid or error
"""

reservations_cancelled = Counter(
    "rentals_reservations_cancelled_total",
    "Total reservations cancelled",
    ["initiator"],
)
"""
Counter for committed cancellations.

Labels:
    initiator: guest, host or listing_deleted
"""

transaction_duration = Histogram(
    "rentals_transaction_duration_seconds",
    "Duration of booking transactions in seconds",
    ["operation"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, float("inf")),
)
"""
Histogram for transaction duration.

Labels:
    operation: create_reservation, cancel_reservation, delete_listing
"""

# =============================================================================
# Wallet Metrics
# =============================================================================

wallet_credits = Counter(
    "rentals_wallet_credits_total",
    "Total wallet credit operations",
)

wallet_credited_amount = Counter(
    "rentals_wallet_credited_amount_total",
    "Total amount credited to wallets",
)

# =============================================================================
# Real-time Metrics
# =============================================================================

realtime_publishes = Counter(
    "rentals_realtime_publishes_total",
    "Total real-time publish attempts",
    ["event", "status"],
)
"""
Counter for real-time pushes.

Labels:
    event: Event name (notification:new, messages:new, ...)
    status: success, failure or skipped
"""

realtime_latency = Histogram(
    "rentals_realtime_publish_latency_seconds",
    "Real-time publish request latency in seconds",
    ["event"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, float("inf")),
)
