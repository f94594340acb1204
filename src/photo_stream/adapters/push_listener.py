"""WebSocket listener for stream push events."""

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import websockets

from photo_stream.push_events import PushEvent, push_message

logger = logging.getLogger(__name__)

EventCallback = Callable[[dict[str, object]], Awaitable[None] | None]


@dataclass
class PushListener:
    """Joins a stream room and forwards every event to a callback.

    Reconnects forever with exponential backoff. Polling does not depend on
    this channel, so failures here are only logged.
    """

    url: str
    stream_id: str
    on_event: EventCallback
    initial_retry_delay: float = 5.0
    max_retry_delay: float = 30.0
    _stopped: bool = False

    async def run(self) -> None:
        """Connect, join and dispatch events until stopped."""
        retry_delay = self.initial_retry_delay
        while not self._stopped:
            try:
                async with websockets.connect(self.url) as ws:
                    logger.info("Connected to push channel at %s", self.url)
                    retry_delay = self.initial_retry_delay
                    await ws.send(
                        json.dumps(
                            push_message(
                                PushEvent.JOIN_STREAM, {"streamId": self.stream_id}
                            )
                        )
                    )
                    async for raw in ws:
                        await self.dispatch(raw)
                        if self._stopped:
                            break
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.info(
                    "Push channel unavailable (%s); retrying in %.0fs",
                    str(exc) or exc.__class__.__name__,
                    retry_delay,
                )
            if self._stopped:
                break
            await asyncio.sleep(retry_delay)
            retry_delay = min(retry_delay * 2, self.max_retry_delay)

    async def dispatch(self, raw: str | bytes) -> None:
        """Decode one frame and hand it to the callback; bad frames are skipped."""
        try:
            message = json.loads(raw)
        except ValueError:
            logger.debug("Skipping undecodable push frame")
            return
        if not isinstance(message, dict) or not isinstance(message.get("type"), str):
            logger.debug("Skipping malformed push frame")
            return
        result = self.on_event(message)
        if asyncio.iscoroutine(result):
            await result

    def stop(self) -> None:
        """Ask the listener to stop after the current frame or retry wait."""
        self._stopped = True
