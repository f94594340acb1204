"""HTTP client for the photo stream API."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from photo_stream.domain.errors import PollError
from photo_stream.domain.photos import PhotoObject, UploadTicket
from photo_stream.services.uploads import IMMUTABLE_CACHE_CONTROL


class PhotoListingClient(Protocol):
    """Interface used by viewers to fetch a stream's photos."""

    async def list_photos(self, stream_id: str) -> list[PhotoObject]:
        """Return the stream's photos in server order."""


class UploadApiClient(Protocol):
    """Interface used by phones to run the upload flow."""

    async def presign(self, stream_id: str, content_type: str) -> UploadTicket:
        """Request a presigned upload."""

    async def put_object(self, upload_url: str, body: bytes, content_type: str) -> None:
        """PUT the object body straight to storage."""

    async def complete(self, stream_id: str, key: str, filename: str | None) -> None:
        """Report a finished upload."""


@dataclass
class HttpxPhotoStreamClient(PhotoListingClient, UploadApiClient):
    """httpx-backed client for the photo stream HTTP API."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxPhotoStreamClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def list_photos(self, stream_id: str) -> list[PhotoObject]:
        """Fetch the photo list, raising PollError on any transport or shape issue."""
        url = f"{self.base_url}/api/photos/{stream_id}"
        try:
            response = await self.http_client.get(url, timeout=10)
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PollError(f"Error loading photos: {exc}") from exc
        photos = data.get("photos") if isinstance(data, dict) else None
        if not isinstance(photos, list):
            raise PollError("Bad response")
        try:
            return [PhotoObject.from_payload(item) for item in photos]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise PollError("Bad response") from exc

    async def presign(self, stream_id: str, content_type: str) -> UploadTicket:
        """Request a presigned upload for the stream."""
        response = await self.http_client.post(
            f"{self.base_url}/api/presign",
            json={"streamId": stream_id, "contentType": content_type},
            timeout=10,
        )
        response.raise_for_status()
        data = response.json()
        return UploadTicket(
            upload_url=data["uploadUrl"], key=data["key"], filename=data["filename"]
        )

    async def put_object(self, upload_url: str, body: bytes, content_type: str) -> None:
        """Upload the body to the presigned URL."""
        response = await self.http_client.put(
            upload_url,
            content=body,
            headers={
                "Content-Type": content_type,
                "Cache-Control": IMMUTABLE_CACHE_CONTROL,
            },
            timeout=60,
        )
        response.raise_for_status()

    async def complete(self, stream_id: str, key: str, filename: str | None) -> None:
        """Tell the server the upload landed."""
        payload: dict[str, object] = {"streamId": stream_id, "key": key}
        if filename is not None:
            payload["filename"] = filename
        response = await self.http_client.post(
            f"{self.base_url}/api/complete", json=payload, timeout=10
        )
        response.raise_for_status()

    async def clear(self, stream_id: str) -> int:
        """Clear the stream and return the number of deleted objects."""
        response = await self.http_client.post(
            f"{self.base_url}/api/clear/{stream_id}", timeout=30
        )
        response.raise_for_status()
        return int(response.json().get("deleted", 0))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
