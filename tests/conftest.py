"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest

from photo_stream.adapters.photo_stream_client import (
    PhotoListingClient,
    UploadApiClient,
)
from photo_stream.config import Settings
from photo_stream.containers import AppContainer, wire_container
from photo_stream.domain.errors import PollError
from photo_stream.domain.photos import PhotoObject, StoredObject, UploadTicket
from photo_stream.services.uploads import StorageGateway


@dataclass
class InMemoryStorageGateway(StorageGateway):
    """In-memory object store for tests."""

    objects: dict[str, StoredObject] = field(default_factory=dict)
    presigned: list[tuple[str, str, int]] = field(default_factory=list)
    deleted: list[list[str]] = field(default_factory=list)
    list_calls: int = 0
    fail_on: set[str] = field(default_factory=set)

    def add(
        self, key: str, last_modified: datetime | None = None, size: int = 0
    ) -> StoredObject:
        stored = StoredObject(key=key, last_modified=last_modified, size=size)
        self.objects[key] = stored
        return stored

    async def list_objects(self, prefix: str) -> list[StoredObject]:
        self.list_calls += 1
        if "list" in self.fail_on:
            raise RuntimeError("listing unavailable")
        return [obj for key, obj in self.objects.items() if key.startswith(prefix)]

    async def presign_put(self, key: str, content_type: str, ttl_seconds: int) -> str:
        if "presign" in self.fail_on:
            raise RuntimeError("presign unavailable")
        self.presigned.append((key, content_type, ttl_seconds))
        return f"https://storage.test/{key}?signature=fake"

    async def delete_objects(self, keys: list[str]) -> None:
        if "delete" in self.fail_on:
            raise RuntimeError("delete unavailable")
        self.deleted.append(list(keys))
        for key in keys:
            self.objects.pop(key, None)


@dataclass(eq=False)
class FakePushSession:
    """Push session that records every message it is sent."""

    messages: list[dict] = field(default_factory=list)
    broken: bool = False

    async def send_json(self, data: dict) -> None:
        if self.broken:
            raise ConnectionError("session gone")
        self.messages.append(data)


@dataclass
class RecordingPublisher:
    """Room publisher that records instead of delivering."""

    published: list[tuple[str, str, dict[str, object]]] = field(default_factory=list)

    async def publish(
        self, stream_id: str, event: str, payload: dict[str, object]
    ) -> int:
        self.published.append((stream_id, event, payload))
        return 0


@dataclass
class ScriptedListingClient(PhotoListingClient):
    """Listing client that replays queued results, then repeats the last one."""

    responses: list[list[PhotoObject] | Exception] = field(default_factory=list)
    calls: int = 0

    async def list_photos(self, stream_id: str) -> list[PhotoObject]:
        index = min(self.calls, len(self.responses) - 1)
        self.calls += 1
        result = self.responses[index]
        if isinstance(result, Exception):
            raise result
        return result


@dataclass
class FakeUploadApiClient(UploadApiClient):
    """Upload API client that records each step."""

    steps: list[str] = field(default_factory=list)
    failing_step: str | None = None
    put_bodies: list[tuple[str, bytes, str]] = field(default_factory=list)
    completed: list[tuple[str, str, str | None]] = field(default_factory=list)

    async def presign(self, stream_id: str, content_type: str) -> UploadTicket:
        self._step("presign")
        return UploadTicket(
            upload_url="https://storage.test/put",
            key=f"photo-stream/{stream_id}/1700000000000-0123456789abcdef.jpg",
            filename="1700000000000-0123456789abcdef.jpg",
        )

    async def put_object(self, upload_url: str, body: bytes, content_type: str) -> None:
        self._step("put")
        self.put_bodies.append((upload_url, body, content_type))

    async def complete(self, stream_id: str, key: str, filename: str | None) -> None:
        self._step("complete")
        self.completed.append((stream_id, key, filename))

    def _step(self, name: str) -> None:
        self.steps.append(name)
        if self.failing_step == name:
            raise RuntimeError(f"{name} failed")


def photo(key: str, minute: int | None = None, size: int = 100) -> PhotoObject:
    """Build a photo stamped at the given minute of a fixed hour."""
    return PhotoObject(
        key=key,
        filename=key.rsplit("/", 1)[-1],
        last_modified=(
            datetime(2024, 5, 1, 12, minute, tzinfo=UTC) if minute is not None else None
        ),
        size=size,
    )


def poll_error() -> PollError:
    return PollError("network down")


@pytest.fixture
def settings() -> Settings:
    return Settings(s3_bucket="test-bucket")


@pytest.fixture
def storage_gateway() -> InMemoryStorageGateway:
    return InMemoryStorageGateway()


@pytest.fixture
def container(
    settings: Settings, storage_gateway: InMemoryStorageGateway
) -> AppContainer:
    return wire_container(settings, storage_gateway)
