"""Process entrypoints for the server, the headless viewer and the uploader."""

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path

import httpx
import uvicorn
from pydantic import ValidationError

from photo_stream.adapters.photo_stream_client import HttpxPhotoStreamClient
from photo_stream.adapters.push_listener import PushListener
from photo_stream.api.app import create_app
from photo_stream.app_logging import configure_logging
from photo_stream.config import (
    Settings,
    ViewerSettings,
    api_base_for_link,
    push_url_for,
)
from photo_stream.containers import build_container
from photo_stream.domain.errors import UploadFailed
from photo_stream.domain.identifiers import (
    generate_stream_id,
    is_valid_stream_id,
    parse_stream_id,
)
from photo_stream.domain.photos import UploadTicket
from photo_stream.services.uploader import PhotoUploader
from photo_stream.services.uploads import DEFAULT_CONTENT_TYPE
from photo_stream.services.viewer import (
    ReconciliationLoop,
    ViewerState,
    phone_link,
    public_object_url,
    qr_code_url,
)

logger = logging.getLogger("photo_stream.main")


def serve() -> None:
    """Run the HTTP and push server."""
    configure_logging()
    try:
        settings = Settings()
    except ValidationError:
        logger.error("Missing env var S3_BUCKET")
        sys.exit(1)
    app = create_app(build_container(settings))
    logger.info(
        "Photo stream server running on http://localhost:%d", settings.port
    )
    uvicorn.run(app, host=settings.host, port=settings.port)


def view() -> None:
    """Run a headless viewer that logs every reconciled state."""
    configure_logging()
    asyncio.run(run_viewer(ViewerSettings()))


async def run_viewer(settings: ViewerSettings) -> None:
    """Poll and listen for one stream until cancelled."""
    stream_id = settings.stream_id
    if not is_valid_stream_id(stream_id):
        stream_id = generate_stream_id()
    link = phone_link(settings.api_base_url, stream_id)
    logger.info("Stream %s: open %s (QR: %s)", stream_id, link, qr_code_url(link))

    def log_state(state: ViewerState) -> None:
        active = state.active_photo
        if active is None:
            logger.info("%s (empty)", state.status or stream_id)
            return
        shown = (
            public_object_url(settings.public_bucket, active.key)
            if settings.public_bucket
            else active.key
        )
        logger.info("%s, showing %s", state.status, shown)

    client = HttpxPhotoStreamClient.create(settings.api_base_url)
    loop = ReconciliationLoop(
        client=client,
        state=ViewerState(stream_id=stream_id),
        interval_seconds=settings.poll_interval_seconds,
        on_change=log_state,
    )
    listener = PushListener(
        url=push_url_for(settings.api_base_url),
        stream_id=stream_id,
        on_event=loop.handle_push_event,
    )
    try:
        await asyncio.gather(loop.run(), listener.run())
    finally:
        loop.stop()
        listener.stop()
        await client.close()


def upload(argv: list[str] | None = None) -> None:
    """Upload image files into the stream named by a phone link."""
    parser = argparse.ArgumentParser(
        prog="photo-stream-upload",
        description="Upload photos into a photo stream.",
    )
    parser.add_argument(
        "link",
        help="Phone link shown by the viewer, e.g. "
        "http://localhost:8080/phone.html?stream=ABCD-EFGH",
    )
    parser.add_argument("files", nargs="*", type=Path, help="Image files to upload")
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Delete every photo in the stream before uploading",
    )
    args = parser.parse_args(argv)
    if not args.files and not args.clear:
        parser.error("nothing to do: pass image files or --clear")

    configure_logging()
    stream_id = parse_stream_id(args.link)
    if stream_id is None or not is_valid_stream_id(stream_id):
        logger.error("No stream id found in %s", args.link)
        sys.exit(2)

    try:
        asyncio.run(
            run_upload(
                api_base_for_link(args.link), stream_id, args.files, clear=args.clear
            )
        )
    except UploadFailed as exc:
        logger.error("%s", exc.message)
        sys.exit(1)
    except (httpx.HTTPError, OSError) as exc:
        logger.error("Upload aborted: %s", exc)
        sys.exit(1)


async def run_upload(
    base_url: str, stream_id: str, paths: list[Path], clear: bool = False
) -> list[UploadTicket]:
    """Optionally clear the stream, then upload each file in order."""
    client = HttpxPhotoStreamClient.create(base_url)
    uploader = PhotoUploader(client=client)
    tickets: list[UploadTicket] = []
    try:
        if clear:
            deleted = await client.clear(stream_id)
            logger.info("Cleared stream %s (%d photos)", stream_id, deleted)
        for path in paths:
            content_type = mimetypes.guess_type(path.name)[0] or DEFAULT_CONTENT_TYPE
            ticket = await uploader.upload(stream_id, path.read_bytes(), content_type)
            logger.info("Uploaded %s as %s", path.name, ticket.filename)
            tickets.append(ticket)
    finally:
        await client.close()
    return tickets
