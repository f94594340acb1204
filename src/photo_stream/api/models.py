"""Request bodies accepted by the HTTP API.

Identifier and key fields accept any JSON value; the upload coordinator
validates them.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PresignRequest(BaseModel):
    """Body of POST /api/presign."""

    model_config = ConfigDict(populate_by_name=True)

    stream_id: Any = Field(default=None, alias="streamId")
    content_type: str | None = Field(default=None, alias="contentType")


class CompleteRequest(BaseModel):
    """Body of POST /api/complete."""

    model_config = ConfigDict(populate_by_name=True)

    stream_id: Any = Field(default=None, alias="streamId")
    key: Any = None
    filename: Any = None
