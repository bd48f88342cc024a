"""
Real-time channel and event names.

Channels are keyed by user email or conversation id so that a browser can
subscribe with nothing more than the identity it already holds.
"""

NOTIFICATION_NEW = "notification:new"
NOTIFICATION_REMOVE = "notification:remove"
CONVERSATION_UPDATE = "conversation:update"
MESSAGES_NEW = "messages:new"


def notification_channel(email: str) -> str:
    """Per-user channel carrying notification:new / notification:remove."""
    return f"user-{email}-notifications"


def conversation_updates_channel(email: str) -> str:
    """Per-user channel carrying conversation:update."""
    return email


def conversation_channel(conversation_id: int | str) -> str:
    """Per-conversation channel carrying messages:new."""
    return str(conversation_id)
