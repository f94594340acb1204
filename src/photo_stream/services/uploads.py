"""Upload coordination: presign, completion notices, listing and clearing."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from photo_stream.domain.errors import (
    DeleteFailed,
    InvalidIdentifier,
    ListingFailed,
    UploadPreparationFailed,
)
from photo_stream.domain.events import PhotoAdded, StreamCleared
from photo_stream.domain.identifiers import is_valid_stream_id
from photo_stream.domain.photos import PhotoObject, StoredObject, UploadTicket
from photo_stream.services.keys import KeyNamespace

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"
PRESIGN_TTL_SECONDS = 300
IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


class StorageGateway(Protocol):
    """Object storage operations used by the coordinator."""

    async def list_objects(self, prefix: str) -> list[StoredObject]:
        """Return every object under the prefix, in any order."""

    async def presign_put(self, key: str, content_type: str, ttl_seconds: int) -> str:
        """Return a URL allowing one direct PUT of the object."""

    async def delete_objects(self, keys: list[str]) -> None:
        """Delete the given keys, best effort."""


class RoomPublisher(Protocol):
    """Publishes events to everyone watching a stream."""

    async def publish(
        self, stream_id: str, event: str, payload: dict[str, object]
    ) -> int:
        """Deliver the payload to the stream's room and return the reach."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class UploadCoordinator:
    """Stateless orchestration of the three-phase upload flow."""

    storage: StorageGateway
    publisher: RoomPublisher
    keys: KeyNamespace = field(default_factory=KeyNamespace)
    presign_ttl_seconds: int = PRESIGN_TTL_SECONDS
    clock: Callable[[], datetime] = field(default=_utcnow)

    async def request_upload(
        self, stream_id: object, content_type: str | None
    ) -> UploadTicket:
        """Issue a presigned PUT for a new object in the stream."""
        stream = _require_stream_id(stream_id)
        key = self.keys.new_key(stream, content_type)
        filename = self.keys.filename_for(stream, key)
        try:
            upload_url = await self.storage.presign_put(
                key,
                content_type or DEFAULT_CONTENT_TYPE,
                self.presign_ttl_seconds,
            )
        except Exception as exc:
            logger.exception("Presign failed", extra={"key": key})
            raise UploadPreparationFailed() from exc
        return UploadTicket(upload_url=upload_url, key=key, filename=filename)

    async def list_photos(self, stream_id: object) -> list[PhotoObject]:
        """Return the stream's photos, oldest first."""
        stream = _require_stream_id(stream_id)
        prefix = self.keys.prefix_for(stream)
        try:
            objects = await self.storage.list_objects(prefix)
        except Exception as exc:
            logger.exception("Listing failed", extra={"prefix": prefix})
            raise ListingFailed() from exc
        photos = [
            PhotoObject(
                key=item.key,
                filename=self.keys.filename_for(stream, item.key),
                last_modified=item.last_modified,
                size=item.size,
            )
            for item in objects
            if item.key and item.key != prefix
        ]
        return sort_photos(photos)

    async def complete_upload(
        self, stream_id: object, key: object, filename: object = None
    ) -> PhotoAdded:
        """Announce a self-reported finished upload to the stream's room.

        The object is not looked up in storage. A viewer that reacts before
        the object becomes listable catches up on its next poll.
        """
        if not isinstance(stream_id, str) or not is_valid_stream_id(stream_id):
            raise InvalidIdentifier("Invalid payload")
        if not isinstance(key, str) or not key:
            raise InvalidIdentifier("Invalid payload")
        display_name = (
            filename
            if isinstance(filename, str) and filename
            else key.rsplit("/", 1)[-1]
        )
        event = PhotoAdded(
            stream_id=stream_id, key=key, filename=display_name, at=self.clock()
        )
        await self.publisher.publish(stream_id, event.event.value, event.payload())
        return event

    async def clear_stream(self, stream_id: object) -> int:
        """Delete every object in the stream and return how many were removed."""
        stream = _require_stream_id(stream_id)
        prefix = self.keys.prefix_for(stream)
        try:
            objects = await self.storage.list_objects(prefix)
            keys = [item.key for item in objects if item.key]
            if not keys:
                return 0
            await self.storage.delete_objects(keys)
        except Exception as exc:
            logger.exception("Clear stream failed", extra={"prefix": prefix})
            raise DeleteFailed() from exc
        event = StreamCleared(stream_id=stream, at=self.clock())
        await self.publisher.publish(stream, event.event.value, event.payload())
        logger.info("Cleared stream %s (%d objects)", stream, len(keys))
        return len(keys)


def sort_photos(photos: list[PhotoObject]) -> list[PhotoObject]:
    """Sort by last modified ascending; undated photos go last, ties by key."""
    return sorted(
        photos,
        key=lambda photo: (
            photo.last_modified is None,
            photo.last_modified or datetime.min.replace(tzinfo=UTC),
            photo.key,
        ),
    )


def _require_stream_id(stream_id: object) -> str:
    if not isinstance(stream_id, str) or not is_valid_stream_id(stream_id):
        raise InvalidIdentifier()
    return stream_id
