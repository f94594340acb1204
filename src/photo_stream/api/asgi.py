"""ASGI entrypoint for the photo stream API."""

from photo_stream.api.app import create_app
from photo_stream.containers import build_container

app = create_app(build_container())
