"""Storage key layout for streams."""

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass, field

_EXTENSION_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("png",), "png"),
    (("webp",), "webp"),
    (("heic", "heif"), "heic"),
)
DEFAULT_EXTENSION = "jpg"
KNOWN_EXTENSIONS: frozenset[str] = frozenset(
    [ext for _, ext in _EXTENSION_RULES] + [DEFAULT_EXTENSION]
)


def extension_for(content_type: str | None) -> str:
    """Map a declared content type to a file extension."""
    if not content_type:
        return DEFAULT_EXTENSION
    lowered = content_type.lower()
    for needles, extension in _EXTENSION_RULES:
        if any(needle in lowered for needle in needles):
            return extension
    return DEFAULT_EXTENSION


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class KeyNamespace:
    """Maps stream ids to key prefixes and mints upload keys."""

    base_prefix: str = "photo-stream"
    clock: Callable[[], int] = field(default=_epoch_millis)

    def prefix_for(self, stream_id: str) -> str:
        """Return the key prefix holding a stream's objects."""
        return f"{self.base_prefix.rstrip('/')}/{stream_id}/"

    def new_filename(self, content_type: str | None) -> str:
        """Return ``<epochMillis>-<16 hex>.<ext>`` for a new upload."""
        return f"{self.clock()}-{secrets.token_hex(8)}.{extension_for(content_type)}"

    def new_key(self, stream_id: str, content_type: str | None) -> str:
        """Return a fresh object key under the stream prefix."""
        return self.prefix_for(stream_id) + self.new_filename(content_type)

    def filename_for(self, stream_id: str, key: str) -> str:
        """Return the key with the stream prefix stripped."""
        return key.removeprefix(self.prefix_for(stream_id))
