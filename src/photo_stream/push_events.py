"""Push channel event names and message framing."""

from enum import Enum


class PushEvent(str, Enum):
    """Event names exchanged over the push channel (single source of truth)."""

    JOIN_STREAM = "joinStream"
    LEAVE_STREAM = "leaveStream"
    PING = "ping"
    PONG = "pong"
    JOINED_STREAM = "joinedStream"
    PHOTO_ADDED = "photoAdded"
    STREAM_CLEARED = "streamCleared"


REFRESH_EVENTS: frozenset[str] = frozenset(
    {PushEvent.PHOTO_ADDED.value, PushEvent.STREAM_CLEARED.value}
)


def push_message(event: PushEvent | str, data: dict[str, object] | None = None) -> dict:
    """Frame an event as a push channel message."""
    name = event.value if isinstance(event, PushEvent) else event
    message: dict[str, object] = {"type": name}
    if data is not None:
        message["data"] = data
    return message
