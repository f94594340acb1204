"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from photo_stream.adapters.s3_storage_gateway import S3StorageGateway
from photo_stream.config import Settings
from photo_stream.services.keys import KeyNamespace
from photo_stream.services.rooms import RoomBroadcaster
from photo_stream.services.uploads import StorageGateway, UploadCoordinator


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    storage_gateway: StorageGateway
    key_namespace: KeyNamespace
    broadcaster: RoomBroadcaster
    upload_coordinator: UploadCoordinator
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    storage_gateway = S3StorageGateway.create(
        bucket=resolved_settings.s3_bucket,
        region=resolved_settings.aws_region,
    )
    return wire_container(
        resolved_settings, storage_gateway, close_resources=storage_gateway.close
    )


def wire_container(
    settings: Settings,
    storage_gateway: StorageGateway,
    close_resources: Callable[[], Awaitable[None]] | None = None,
) -> AppContainer:
    """Wire services around an already-built storage gateway."""
    key_namespace = KeyNamespace(base_prefix=settings.base_prefix)
    broadcaster = RoomBroadcaster()
    upload_coordinator = UploadCoordinator(
        storage=storage_gateway,
        publisher=broadcaster,
        keys=key_namespace,
        presign_ttl_seconds=settings.presign_ttl_seconds,
    )

    async def _noop() -> None:
        return None

    return AppContainer(
        settings=settings,
        storage_gateway=storage_gateway,
        key_namespace=key_namespace,
        broadcaster=broadcaster,
        upload_coordinator=upload_coordinator,
        close_resources=close_resources or _noop,
    )
