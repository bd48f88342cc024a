"""
Publisher for the hosted real-time transport.

Wraps the Pusher server SDK. Delivery is at-most-once: a failed push is
logged, counted and dropped. Callers must never depend on a push for
correctness.
"""

from __future__ import annotations

import json
import time
from typing import Any, Iterable, Optional

import pusher
import requests
import structlog
from pusher.errors import PusherError

from rental_bookings.config import (
    REALTIME_APP_ID,
    REALTIME_CLUSTER,
    REALTIME_HOST,
    REALTIME_KEY,
    REALTIME_SECRET,
    REALTIME_TIMEOUT_SECONDS,
)
from rental_bookings.metrics import realtime_latency, realtime_publishes

logger = structlog.get_logger(__name__)

# Pusher rejects a single trigger addressed to more channels than this
MAX_CHANNELS_PER_EVENT = 100


class PayloadEncoder(json.JSONEncoder):
    """Encode Decimal, date and other non-JSON values as strings."""

    def default(self, o: Any) -> Any:
        return str(o)


class RealtimePublisher:
    """
    Fire-and-forget publisher of real-time events.

    Example:
        >>> publisher = RealtimePublisher("123", "key", "secret")
        >>> publisher.trigger("user-a@example.com-notifications", "notification:new", {"id": 1})
        True
    """

    def __init__(
        self,
        app_id: str | None,
        key: str | None,
        secret: str | None,
        cluster: str | None = "mt1",
        host: str | None = None,
        timeout: float = 5.0,
        client: Optional[pusher.Pusher] = None,
    ):
        self.app_id = app_id
        self.key = key
        self.secret = secret
        self.client = client
        if self.client is None and self.enabled:
            self.client = pusher.Pusher(
                app_id=app_id,
                key=key,
                secret=secret,
                cluster=cluster,
                host=host,
                ssl=True,
                timeout=timeout,
                json_encoder=PayloadEncoder,
            )

    @property
    def enabled(self) -> bool:
        return bool(self.app_id and self.key and self.secret)

    def trigger(self, channels: str | Iterable[str], event: str, payload: Any) -> bool:
        """
        Push one event to one or more channels.

        Args:
            channels: Channel name or names
            event: Event name, e.g. "notification:new"
            payload: JSON-serialisable data (non-JSON values are stringified)

        Returns:
            bool: True if the transport accepted the event, False if it was
            skipped or failed. Never raises for transport errors.
        """
        channel_list = [channels] if isinstance(channels, str) else list(channels)
        if not channel_list:
            return False

        if self.client is None:
            logger.debug("realtime_publish_skipped", event=event, reason="not_configured")
            realtime_publishes.labels(event=event, status="skipped").inc()
            return False

        delivered = True
        for start in range(0, len(channel_list), MAX_CHANNELS_PER_EVENT):
            batch = channel_list[start : start + MAX_CHANNELS_PER_EVENT]
            delivered = self._send(batch, event, payload) and delivered
        return delivered

    def _send(self, channels: list[str], event: str, payload: Any) -> bool:
        assert self.client is not None
        try:
            start_time = time.time()
            self.client.trigger(channels, event, payload)
            realtime_latency.labels(event=event).observe(time.time() - start_time)
        except (PusherError, requests.RequestException, ValueError) as e:
            # ValueError: the SDK rejected a channel name or an oversized payload
            logger.warning(
                "realtime_publish_failed",
                event=event,
                channels=channels,
                error=str(e),
            )
            realtime_publishes.labels(event=event, status="failure").inc()
            return False

        realtime_publishes.labels(event=event, status="success").inc()
        logger.debug("realtime_published", event=event, channels=channels)
        return True


publisher = RealtimePublisher(
    app_id=REALTIME_APP_ID,
    key=REALTIME_KEY,
    secret=REALTIME_SECRET,
    cluster=REALTIME_CLUSTER,
    host=REALTIME_HOST,
    timeout=REALTIME_TIMEOUT_SECONDS,
)
