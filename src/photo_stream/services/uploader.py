"""Phone-side upload flow: presign, direct PUT, completion notice."""

import logging
from dataclasses import dataclass

from photo_stream.adapters.photo_stream_client import UploadApiClient
from photo_stream.domain.errors import UploadFailed
from photo_stream.domain.photos import UploadTicket
from photo_stream.services.uploads import DEFAULT_CONTENT_TYPE

logger = logging.getLogger(__name__)


@dataclass
class PhotoUploader:
    """Runs the three upload steps against the API and storage."""

    client: UploadApiClient

    async def upload(
        self, stream_id: str, body: bytes, content_type: str | None = None
    ) -> UploadTicket:
        """Upload one photo into the stream and return its ticket."""
        resolved_type = content_type or DEFAULT_CONTENT_TYPE

        logger.info("Preparing upload for %s", stream_id)
        try:
            ticket = await self.client.presign(stream_id, resolved_type)
        except Exception as exc:
            raise UploadFailed("presign") from exc

        logger.info("Uploading %s (%d bytes)", ticket.key, len(body))
        try:
            await self.client.put_object(ticket.upload_url, body, resolved_type)
        except Exception as exc:
            raise UploadFailed("put") from exc

        try:
            await self.client.complete(stream_id, ticket.key, ticket.filename)
        except Exception as exc:
            raise UploadFailed("complete") from exc
        logger.info("Uploaded %s", ticket.key)
        return ticket
