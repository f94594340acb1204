"""WebSocket push endpoint: room joins and event delivery."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from photo_stream.push_events import PushEvent, push_message

if TYPE_CHECKING:
    from photo_stream.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["push"])


@router.websocket("/ws")
async def push_channel(websocket: WebSocket) -> None:
    """Viewer push channel.

    Clients send ``joinStream``/``leaveStream`` with a ``streamId`` and
    ``ping``. They receive ``joinedStream``, ``photoAdded`` and
    ``streamCleared`` for the rooms they joined.
    """
    container: AppContainer = websocket.app.state.container
    broadcaster = container.broadcaster
    await websocket.accept()
    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break
            raw = frame.get("text")
            if raw is None:
                logger.debug("Ignoring binary push frame")
                continue
            try:
                message = json.loads(raw)
            except ValueError:
                logger.debug("Ignoring undecodable push frame")
                continue
            if not isinstance(message, dict):
                continue
            data = message.get("data")
            stream_id = data.get("streamId") if isinstance(data, dict) else None
            msg_type = message.get("type")

            if msg_type == PushEvent.JOIN_STREAM.value:
                await broadcaster.join(websocket, stream_id)
            elif msg_type == PushEvent.LEAVE_STREAM.value:
                if isinstance(stream_id, str):
                    broadcaster.leave(websocket, stream_id)
            elif msg_type == PushEvent.PING.value:
                await websocket.send_json(push_message(PushEvent.PONG))
    except WebSocketDisconnect:
        logger.debug("Push session disconnected")
    finally:
        broadcaster.leave(websocket)
