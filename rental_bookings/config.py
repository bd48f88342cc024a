import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

SCHEMA = "rentals"

# Milliseconds a PostgreSQL statement may wait for a row lock
DB_LOCK_TIMEOUT_MS = int(os.getenv("DB_LOCK_TIMEOUT_MS", "5000"))

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Hosted real-time transport (Pusher). Set REALTIME_HOST only for a
# self-hosted Pusher-compatible server; otherwise the cluster picks the host.
# Publishing is disabled when any credential is missing.
REALTIME_APP_ID = os.getenv("REALTIME_APP_ID")
REALTIME_KEY = os.getenv("REALTIME_KEY")
REALTIME_SECRET = os.getenv("REALTIME_SECRET")
REALTIME_CLUSTER = os.getenv("REALTIME_CLUSTER", "mt1")
REALTIME_HOST = os.getenv("REALTIME_HOST") or None
REALTIME_TIMEOUT_SECONDS = float(os.getenv("REALTIME_TIMEOUT_SECONDS", "5"))

# What happens to guests' money when a host deletes a listing that still has
# reservations: "notify_only" (guests are told, no refund) or "refund".
LISTING_DELETION_POLICY_NOTIFY_ONLY = "notify_only"
LISTING_DELETION_POLICY_REFUND = "refund"
LISTING_DELETION_POLICY = os.getenv(
    "LISTING_DELETION_POLICY", LISTING_DELETION_POLICY_NOTIFY_ONLY
).lower()
if LISTING_DELETION_POLICY not in (
    LISTING_DELETION_POLICY_NOTIFY_ONLY,
    LISTING_DELETION_POLICY_REFUND,
):
    raise ValueError(
        "LISTING_DELETION_POLICY must be 'notify_only' or 'refund', "
        f"got {LISTING_DELETION_POLICY!r}"
    )

CANCELLATION_WINDOW_HOURS = int(os.getenv("CANCELLATION_WINDOW_HOURS", "24"))
MAX_STAY_DAYS = int(os.getenv("MAX_STAY_DAYS", "365"))
NOTIFICATION_POLL_INTERVAL_SECONDS = int(os.getenv("NOTIFICATION_POLL_INTERVAL_SECONDS", "60"))
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
