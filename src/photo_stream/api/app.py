"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from photo_stream.api.body_limit import BodySizeLimitMiddleware
from photo_stream.api.models import CompleteRequest, PresignRequest
from photo_stream.api.push import router as push_router
from photo_stream.app_logging import configure_logging
from photo_stream.containers import AppContainer
from photo_stream.domain.errors import InvalidIdentifier, StorageFailure


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    max_body_bytes = container.settings.max_body_bytes

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = app.state.container.settings
        logger.info(
            "Photo stream server using bucket %s in region %s",
            settings.s3_bucket,
            settings.aws_region,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(push_router)

    @app.exception_handler(InvalidIdentifier)
    async def invalid_identifier_handler(
        request: Request, exc: InvalidIdentifier
    ) -> JSONResponse:
        return JSONResponse(
            {"error": exc.message}, status_code=status.HTTP_400_BAD_REQUEST
        )

    @app.exception_handler(StorageFailure)
    async def storage_failure_handler(
        request: Request, exc: StorageFailure
    ) -> JSONResponse:
        return JSONResponse(
            {"error": exc.message},
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            {"error": "Invalid payload"}, status_code=status.HTTP_400_BAD_REQUEST
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/photos/{stream_id}")
    async def list_photos(stream_id: str, request: Request) -> dict[str, object]:
        """Return the stream's photos, oldest first."""
        state_container: AppContainer = request.app.state.container
        photos = await state_container.upload_coordinator.list_photos(stream_id)
        return {
            "streamId": stream_id,
            "photos": [photo.to_payload() for photo in photos],
        }

    @app.post("/api/presign")
    async def presign(body: PresignRequest, request: Request) -> dict[str, str]:
        """Issue a presigned PUT URL for a new photo."""
        state_container: AppContainer = request.app.state.container
        ticket = await state_container.upload_coordinator.request_upload(
            body.stream_id, body.content_type
        )
        return ticket.to_payload()

    @app.post("/api/complete")
    async def complete(body: CompleteRequest, request: Request) -> dict[str, bool]:
        """Announce a finished upload to the stream's viewers."""
        state_container: AppContainer = request.app.state.container
        await state_container.upload_coordinator.complete_upload(
            body.stream_id, body.key, body.filename
        )
        return {"ok": True}

    @app.post("/api/clear/{stream_id}")
    async def clear(stream_id: str, request: Request) -> dict[str, object]:
        """Delete every photo in the stream."""
        state_container: AppContainer = request.app.state.container
        deleted = await state_container.upload_coordinator.clear_stream(stream_id)
        return {"ok": True, "deleted": deleted}

    return app
