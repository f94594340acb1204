"""Room membership and event fan-out for push sessions."""

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from photo_stream.domain.events import JoinedStream
from photo_stream.domain.identifiers import is_valid_stream_id
from photo_stream.push_events import push_message

logger = logging.getLogger(__name__)


class PushSession(Protocol):
    """A connected push session able to receive JSON messages."""

    async def send_json(self, data: Any) -> None:
        """Send a JSON-serializable message to the session."""


@dataclass
class RoomBroadcaster:
    """Tracks which sessions watch which stream and publishes to them.

    Membership is only mutated from the event loop that dispatches push
    traffic, so no lock is taken. Delivery is one-shot: sessions that are
    gone at send time are dropped and miss the event.
    """

    _rooms: dict[str, set[PushSession]] = field(default_factory=dict)

    async def join(self, session: PushSession, stream_id: object) -> bool:
        """Add the session to a stream's room and acknowledge it."""
        if not isinstance(stream_id, str) or not is_valid_stream_id(stream_id):
            logger.debug("Ignoring join for invalid stream id %r", stream_id)
            return False
        self._rooms.setdefault(stream_id, set()).add(session)
        ack = JoinedStream(stream_id=stream_id)
        await self._deliver(session, push_message(ack.event, ack.payload()))
        return True

    def leave(self, session: PushSession, stream_id: str | None = None) -> None:
        """Remove the session from one room, or from every room."""
        names = [stream_id] if stream_id is not None else list(self._rooms)
        for name in names:
            members = self._rooms.get(name)
            if members is None:
                continue
            members.discard(session)
            if not members:
                del self._rooms[name]

    async def publish(
        self, stream_id: str, event: str, payload: dict[str, object]
    ) -> int:
        """Send an event to every session in the room; return how many got it."""
        message = push_message(event, payload)
        delivered = 0
        for session in list(self._rooms.get(stream_id, ())):
            if await self._deliver(session, message):
                delivered += 1
        logger.info(
            "Published %s to %s (%d sessions)", event, stream_id, delivered
        )
        return delivered

    def member_count(self, stream_id: str) -> int:
        """Return the number of sessions currently in a room."""
        return len(self._rooms.get(stream_id, ()))

    def rooms_of(self, session: PushSession) -> list[str]:
        """Return the rooms a session belongs to."""
        return [name for name, members in self._rooms.items() if session in members]

    async def _deliver(self, session: PushSession, message: dict) -> bool:
        try:
            await session.send_json(message)
        except Exception:
            logger.warning("Dropping unreachable push session", exc_info=True)
            self.leave(session)
            return False
        return True
