"""Domain models for stream photos."""

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True)
class StoredObject:
    """Raw object listing entry returned by the storage backend."""

    key: str
    last_modified: datetime | None
    size: int


@dataclass(frozen=True)
class PhotoObject:
    """An uploaded photo in a stream."""

    key: str
    filename: str
    last_modified: datetime | None
    size: int

    def to_payload(self) -> dict[str, object]:
        """Return the JSON shape used by the HTTP API."""
        return {
            "key": self.key,
            "filename": self.filename,
            "lastModified": (
                format_timestamp(self.last_modified) if self.last_modified else None
            ),
            "size": self.size,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "PhotoObject":
        """Build a photo from the HTTP API JSON shape."""
        key = payload["key"]
        if not isinstance(key, str):
            raise TypeError("Photo key must be a string")
        raw_modified = payload.get("lastModified")
        raw_size = payload.get("size") or 0
        return cls(
            key=key,
            filename=str(payload.get("filename") or key.rsplit("/", 1)[-1]),
            last_modified=(
                parse_timestamp(raw_modified) if isinstance(raw_modified, str) else None
            ),
            size=int(raw_size),  # type: ignore[call-overload]
        )


@dataclass(frozen=True)
class UploadTicket:
    """Presigned upload issued to a phone."""

    upload_url: str
    key: str
    filename: str

    def to_payload(self) -> dict[str, str]:
        """Return the JSON shape used by the HTTP API."""
        return {"uploadUrl": self.upload_url, "key": self.key, "filename": self.filename}


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as ISO-8601 UTC with milliseconds and a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return (
        value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    )


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp, returning None when it is unreadable."""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
