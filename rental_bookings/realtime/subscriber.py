"""
Client-side consumption of real-time events.

EventBus is an in-process stand-in for the hosted transport's client
library: code subscribes to channels and binds handlers to event names on
them, and the transport adapter calls dispatch() for each incoming event.

NotificationInbox owns one user's notification and chat state. Events are
applied as hints; refresh() re-reads the HTTP API, which is the source of
truth, so a missed or duplicated push heals on the next poll.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Any, Callable, Optional

import requests
import structlog

from rental_bookings.config import NOTIFICATION_POLL_INTERVAL_SECONDS
from rental_bookings.realtime.channels import (
    CONVERSATION_UPDATE,
    MESSAGES_NEW,
    NOTIFICATION_NEW,
    NOTIFICATION_REMOVE,
    conversation_channel,
    conversation_updates_channel,
    notification_channel,
)

logger = structlog.get_logger(__name__)

Handler = Callable[[Any], None]


class EventBus:
    """Thread-safe channel subscriptions and per-event handler bindings."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subscribed: set[str] = set()
        self._handlers: dict[tuple[str, str], list[Handler]] = defaultdict(list)

    def subscribe(self, channel: str) -> None:
        with self._lock:
            self._subscribed.add(channel)

    def unsubscribe(self, channel: str) -> None:
        """Stop receiving a channel and drop every handler bound on it."""
        with self._lock:
            self._subscribed.discard(channel)
            for key in [key for key in self._handlers if key[0] == channel]:
                del self._handlers[key]

    def is_subscribed(self, channel: str) -> bool:
        with self._lock:
            return channel in self._subscribed

    def bind(self, channel: str, event: str, handler: Handler) -> None:
        with self._lock:
            self._handlers[(channel, event)].append(handler)

    def unbind(self, channel: str, event: str, handler: Optional[Handler] = None) -> None:
        """Remove one handler, or every handler for the event when handler is None."""
        with self._lock:
            handlers = self._handlers.get((channel, event))
            if not handlers:
                return
            if handler is None:
                handlers.clear()
            elif handler in handlers:
                handlers.remove(handler)

    def dispatch(self, channel: str, event: str, data: Any) -> int:
        """
        Deliver an incoming event to the handlers bound on a subscribed channel.

        A failing handler is logged and does not stop the others.

        Returns:
            int: Number of handlers that ran successfully
        """
        with self._lock:
            if channel not in self._subscribed:
                return 0
            handlers = list(self._handlers.get((channel, event), ()))

        delivered = 0
        for handler in handlers:
            try:
                handler(data)
                delivered += 1
            except Exception as e:
                logger.exception("realtime_handler_failed", channel=channel, event=event, error=str(e))
        return delivered


class NotificationInbox:
    """
    One user's notifications, unread badge and chat messages.

    Example:
        >>> bus = EventBus()
        >>> inbox = NotificationInbox(bus, user_id=1, email="guest@example.com",
        ...                           base_url="http://localhost:8000")
        >>> inbox.attach()
        >>> bus.dispatch("user-guest@example.com-notifications", "notification:new",
        ...              {"id": 7, "message": "hi", "isRead": False})
        1
        >>> inbox.unread_count
        1
    """

    def __init__(
        self,
        bus: EventBus,
        user_id: int,
        email: str,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
    ):
        self.bus = bus
        self.user_id = user_id
        self.email = email
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

        self._lock = threading.Lock()
        self.notifications: list[dict[str, Any]] = []
        self.unread_count = 0
        self.has_unseen_messages = False
        self.messages: dict[int, list[dict[str, Any]]] = {}

    # -- subscriptions -------------------------------------------------------

    def attach(self) -> None:
        """Subscribe to the user's notification and conversation-update channels."""
        own = notification_channel(self.email)
        updates = conversation_updates_channel(self.email)
        self.bus.subscribe(own)
        self.bus.bind(own, NOTIFICATION_NEW, self.on_notification_new)
        self.bus.bind(own, NOTIFICATION_REMOVE, self.on_notification_remove)
        self.bus.subscribe(updates)
        self.bus.bind(updates, CONVERSATION_UPDATE, self.on_conversation_update)

    def detach(self) -> None:
        self.bus.unsubscribe(notification_channel(self.email))
        self.bus.unsubscribe(conversation_updates_channel(self.email))
        for conversation_id in list(self.messages):
            self.close_conversation(conversation_id)

    def open_conversation(
        self, conversation_id: int, initial: Optional[list[dict[str, Any]]] = None
    ) -> None:
        """Start following messages:new for a conversation shown on screen."""
        with self._lock:
            self.messages[conversation_id] = list(initial or [])
        channel = conversation_channel(conversation_id)
        self.bus.subscribe(channel)
        self.bus.bind(channel, MESSAGES_NEW, self.on_message_new)

    def close_conversation(self, conversation_id: int) -> None:
        self.bus.unsubscribe(conversation_channel(conversation_id))
        with self._lock:
            self.messages.pop(conversation_id, None)

    # -- event handlers ------------------------------------------------------

    def on_notification_new(self, data: dict[str, Any]) -> None:
        with self._lock:
            if any(n.get("id") == data.get("id") for n in self.notifications):
                return
            self.notifications.insert(0, data)
            if not data.get("isRead", False):
                self.unread_count += 1

    def on_notification_remove(self, notification_id: Any) -> None:
        with self._lock:
            removed = [n for n in self.notifications if n.get("id") == notification_id]
            if not removed:
                return
            self.notifications = [n for n in self.notifications if n.get("id") != notification_id]
            if any(not n.get("isRead", False) for n in removed):
                self.unread_count = max(0, self.unread_count - 1)

    def on_conversation_update(self, data: dict[str, Any]) -> None:
        with self._lock:
            self.has_unseen_messages = True
            conversation_id = data.get("id")
            if conversation_id in self.messages:
                for message in data.get("messages", []):
                    self._append_message(conversation_id, message)

    def on_message_new(self, data: dict[str, Any]) -> None:
        with self._lock:
            conversation_id = data.get("conversationId")
            if conversation_id in self.messages:
                self._append_message(conversation_id, data)

    def _append_message(self, conversation_id: int, message: dict[str, Any]) -> None:
        existing = self.messages[conversation_id]
        if all(m.get("id") != message.get("id") for m in existing):
            existing.append(message)

    # -- reconciliation ------------------------------------------------------

    def _get(self, path: str) -> dict[str, Any]:
        res = self.session.get(
            f"{self.base_url}{path}",
            headers={"X-User-Id": str(self.user_id)},
            timeout=self.timeout,
        )
        res.raise_for_status()
        return res.json()

    def refresh(self) -> bool:
        """
        Replace local state with the server's view.

        Returns:
            bool: False if either request failed (state left untouched)
        """
        try:
            notifications = self._get("/notifications").get("data", [])
            unseen = self._get("/conversations/unseen-count")
        except (requests.RequestException, ValueError) as e:
            logger.warning("inbox_refresh_failed", user_id=self.user_id, error=str(e))
            return False

        with self._lock:
            self.notifications = list(notifications)
            self.unread_count = sum(1 for n in notifications if not n.get("isRead", False))
            self.has_unseen_messages = bool(unseen.get("hasUnseen", unseen.get("count", 0)))

        logger.debug(
            "inbox_refreshed",
            user_id=self.user_id,
            notifications=len(notifications),
            unread=self.unread_count,
        )
        return True

    def poll_forever(
        self,
        stop_event: threading.Event,
        interval: float = NOTIFICATION_POLL_INTERVAL_SECONDS,
    ) -> None:
        """Refresh immediately and then every interval seconds until stop_event is set."""
        logger.info("inbox_polling_started", user_id=self.user_id, interval=interval)
        while not stop_event.is_set():
            self.refresh()
            stop_event.wait(interval)
        logger.info("inbox_polling_stopped", user_id=self.user_id)
