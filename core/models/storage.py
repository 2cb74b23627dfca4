# =============================================================================
# core/models/storage.py - Attachment Storage Schemas
# =============================================================================
# These models mirror rows of the attachment storage tables:
# - Blob: a stored file and its metadata (storage_blobs)
# - Attachment: a named link from any record to a blob (storage_attachments)
# =============================================================================

import json
from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, Field


class Blob(BaseModel):
    """
    A stored file.

    The key identifies the file inside the storage service; everything else
    describes it.

    Example:
        {
            "id": 1,
            "key": "k3b1x9d0q2...",
            "filename": "avatar.png",
            "content_type": "image/png",
            "metadata": {"analyzed": true, "identified": true},
            "service_name": "local",
            "byte_size": 2048,
            "checksum": "1B2M2Y8AsgTpgAmY7PhCfg=="
        }
    """

    id: int
    key: str = Field(..., description="Unique key inside the storage service")
    filename: str
    content_type: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    service_name: str
    byte_size: int = Field(..., ge=0)
    checksum: str | None = Field(default=None, description="Base64 MD5 digest")
    created_at: datetime | None = None

    @property
    def analyzed(self) -> bool:
        return bool(self.metadata.get("analyzed"))

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Blob":
        """Build a Blob from a storage_blobs row (metadata is stored as JSON text)."""
        data = dict(row)
        raw_metadata = data.get("metadata")
        data["metadata"] = json.loads(raw_metadata) if raw_metadata else {}
        return cls(**data)


class Attachment(BaseModel):
    """
    A named attachment of a blob to a record.

    record_type/record_id identify the owner, e.g. ("User", "42"), and name
    the attachment slot, e.g. "avatar".
    """

    id: int
    name: str
    record_type: str
    record_id: str
    blob_id: int
    created_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Attachment":
        return cls(**dict(row))
