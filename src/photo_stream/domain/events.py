"""Events published to stream rooms."""

from dataclasses import dataclass
from datetime import datetime

from photo_stream.domain.photos import format_timestamp
from photo_stream.push_events import PushEvent


@dataclass(frozen=True)
class PhotoAdded:
    """A phone reported a finished upload."""

    stream_id: str
    key: str
    filename: str
    at: datetime

    event = PushEvent.PHOTO_ADDED

    def payload(self) -> dict[str, object]:
        return {
            "streamId": self.stream_id,
            "key": self.key,
            "filename": self.filename,
            "at": format_timestamp(self.at),
        }


@dataclass(frozen=True)
class StreamCleared:
    """All photos of a stream were deleted."""

    stream_id: str
    at: datetime

    event = PushEvent.STREAM_CLEARED

    def payload(self) -> dict[str, object]:
        return {"streamId": self.stream_id, "at": format_timestamp(self.at)}


@dataclass(frozen=True)
class JoinedStream:
    """Acknowledgement sent to a session that joined a room."""

    stream_id: str

    event = PushEvent.JOINED_STREAM

    def payload(self) -> dict[str, object]:
        return {"streamId": self.stream_id}
