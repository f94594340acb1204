"""Viewer-side reconciliation of the displayed photo set."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import quote

from photo_stream.adapters.photo_stream_client import PhotoListingClient
from photo_stream.domain.errors import PollError
from photo_stream.domain.photos import PhotoObject
from photo_stream.push_events import REFRESH_EVENTS

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 15.0
QR_SERVICE_URL = "https://api.qrserver.com/v1/create-qr-code/"


class ViewerPhase(str, Enum):
    """Where the viewer is in its poll cycle."""

    IDLE = "idle"
    POLLING = "polling"
    RECONCILED = "reconciled"
    ERROR = "error"


@dataclass
class ViewerState:
    """Everything the viewer displays, owned by one reconciliation loop."""

    stream_id: str
    photos: list[PhotoObject] = field(default_factory=list)
    active_index: int = -1
    last_signature: str = ""
    phase: ViewerPhase = ViewerPhase.IDLE
    status: str = ""

    @property
    def active_photo(self) -> PhotoObject | None:
        if 0 <= self.active_index < len(self.photos):
            return self.photos[self.active_index]
        return None


def signature_for(photos: list[PhotoObject]) -> str:
    """Return an order-sensitive fingerprint of the photo keys."""
    return "|".join(photo.key for photo in photos)


def reconcile(state: ViewerState, photos: list[PhotoObject]) -> bool:
    """Apply a fresh listing to the state; return False when nothing changed."""
    new_signature = signature_for(photos)
    if new_signature == state.last_signature:
        return False

    state.last_signature = new_signature
    previous_keys = {photo.key for photo in state.photos}
    added = [photo for photo in photos if photo.key not in previous_keys]
    state.photos = list(photos)

    if not state.photos:
        state.active_index = -1
    elif added or not 0 <= state.active_index < len(state.photos):
        state.active_index = len(state.photos) - 1
    return True


def status_text(state: ViewerState) -> str:
    return f"Stream {state.stream_id} • {len(state.photos)} photo(s)"


def phone_link(base_url: str, stream_id: str) -> str:
    """Return the link phones open to upload into a stream."""
    return f"{base_url.rstrip('/')}/phone.html?stream={stream_id}"


def qr_code_url(text: str, size: int = 160) -> str:
    """Return a third-party QR image URL encoding the text."""
    return f"{QR_SERVICE_URL}?data={quote(text, safe='')}&size={size}x{size}"


def public_object_url(bucket: str, key: str) -> str:
    """Return the public URL of an object in a public-read bucket."""
    return f"https://{bucket}.s3.amazonaws.com/{key}"


@dataclass
class ReconciliationLoop:
    """Polls the photo list on a timer and on push hints.

    Polls are not serialized: a push-triggered refresh may overlap a timed
    one, and whichever response lands last decides the displayed state.
    """

    client: PhotoListingClient
    state: ViewerState
    interval_seconds: float = POLL_INTERVAL_SECONDS
    on_change: Callable[[ViewerState], None] | None = None
    _tasks: set[asyncio.Task] = field(default_factory=set)
    _stopped: bool = False

    async def refresh(self) -> bool:
        """Poll once; return True when the displayed set changed."""
        self.state.phase = ViewerPhase.POLLING
        try:
            photos = await self.client.list_photos(self.state.stream_id)
            changed = reconcile(self.state, photos)
            self.state.phase = ViewerPhase.RECONCILED
            self.state.status = status_text(self.state)
            if changed and self.on_change is not None:
                self.on_change(self.state)
        except PollError as exc:
            logger.warning("Poll failed for %s: %s", self.state.stream_id, exc)
            self._mark_error()
            return False
        except Exception:
            logger.exception("Refresh failed for %s", self.state.stream_id)
            self._mark_error()
            return False
        return changed

    def _mark_error(self) -> None:
        self.state.phase = ViewerPhase.ERROR
        self.state.status = PollError.message

    def trigger(self) -> asyncio.Task:
        """Start a refresh in the background without waiting for others."""
        task = asyncio.create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def handle_push_event(self, message: dict[str, object]) -> None:
        """Refresh early when the room announces a change."""
        if message.get("type") in REFRESH_EVENTS:
            self.trigger()

    def select(self, index: int) -> bool:
        """Make the photo at index active; out-of-range picks are ignored."""
        if not 0 <= index < len(self.state.photos):
            return False
        self.state.active_index = index
        if self.on_change is not None:
            self.on_change(self.state)
        return True

    async def run(self) -> None:
        """Refresh now, then on every interval tick until stopped."""
        while not self._stopped:
            self.trigger()
            await asyncio.sleep(self.interval_seconds)

    def stop(self) -> None:
        self._stopped = True

    async def wait_idle(self) -> None:
        """Wait for in-flight refreshes to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
