# =============================================================================
# core/services/storage_service.py - Attachment Storage
# =============================================================================
# Handles files attached to records:
# - DiskService keeps the bytes on the local filesystem
# - StorageService keeps the blob/attachment rows and ties both together
#
# Usage:
#   storage = build_storage_service(settings, database.engine, enqueue=perform_later)
#   blob = storage.create_and_upload(b"hello", "hello.txt")
#   storage.attach("User", "42", "avatar", blob)
# =============================================================================

from __future__ import annotations

import base64
import hashlib
import json
import logging
import mimetypes
import secrets
import string
from pathlib import Path
from typing import Any, BinaryIO, Callable

from jose import JWTError, jwt
from sqlalchemy import MetaData, Table, select
from sqlalchemy.engine import Engine

from app.config import Settings
from app.exceptions import (
    BlobNotFoundError,
    ConfigurationError,
    InvalidSignatureError,
    StorageIntegrityError,
)
from core.database import engine_from_url
from core.models import Attachment, Blob

logger = logging.getLogger(__name__)

KEY_ALPHABET = string.ascii_lowercase + string.digits
KEY_LENGTH = 28

DEFAULT_CONTENT_TYPE = "application/octet-stream"

ANALYZE_JOB = "workers.tasks.analyze_blob"
PURGE_JOB = "workers.tasks.purge_blob"

SIGNING_ALGORITHM = "HS256"
BLOB_PURPOSE = "blob_key"

# enqueue(task_name, *args) hands a job to the queue adapter
Enqueue = Callable[..., Any]


def generate_key() -> str:
    """Random lowercase base36 key for a new blob."""
    return "".join(secrets.choice(KEY_ALPHABET) for _ in range(KEY_LENGTH))


def compute_checksum(data: bytes) -> str:
    """Base64-encoded MD5 digest, the checksum format stored on blobs."""
    return base64.b64encode(hashlib.md5(data).digest()).decode("ascii")


class DiskService:
    """
    Storage service backed by a local directory.

    Files are spread over two levels of subfolders taken from the key,
    so "abcdef..." is stored at <root>/ab/cd/abcdef...
    """

    def __init__(self, root: Path | str, name: str = "local"):
        self.root = Path(root).expanduser().resolve()
        self.name = name

    def path_for(self, key: str) -> Path:
        return self.root / key[0:2] / key[2:4] / key

    def upload(self, key: str, data: bytes, checksum: str | None = None) -> Path:
        """
        Write bytes for a key.

        Raises:
            StorageIntegrityError: If checksum is given and doesn't match
        """
        if checksum is not None:
            actual = compute_checksum(data)
            if actual != checksum:
                raise StorageIntegrityError(key, checksum, actual)

        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_bytes(data)
        tmp.replace(path)

        logger.info(f"Uploaded file to disk: {key} ({len(data)} bytes)")
        return path

    def download(self, key: str) -> bytes:
        path = self.path_for(key)
        if not path.is_file():
            raise BlobNotFoundError(key)
        return path.read_bytes()

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)
        logger.info(f"Deleted file from disk: {key}")

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()


class StorageService:
    """
    Blob and attachment records on top of a storage service.

    Analysis and purging can run as background jobs when an enqueue
    callable is provided.
    """

    def __init__(
        self,
        engine: Engine,
        service: DiskService,
        enqueue: Enqueue | None = None,
        secret_key: str = "",
    ):
        self.engine = engine
        self.service = service
        self.enqueue = enqueue
        self.secret_key = secret_key
        self._tables: dict[str, Table] = {}

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    def describe(self) -> dict[str, str]:
        """Serializable description used to rebuild the service inside a job."""
        return {
            "database_url": self.engine.url.render_as_string(hide_password=False),
            "service_name": self.service.name,
            "root": str(self.service.root),
        }

    @classmethod
    def from_description(cls, description: dict[str, str]) -> StorageService:
        engine = engine_from_url(description["database_url"])
        service = DiskService(description["root"], name=description["service_name"])
        return cls(engine, service)

    # -------------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------------

    def _table(self, name: str) -> Table:
        # Reflected lazily: the tables only exist once the storage migration ran
        if name not in self._tables:
            self._tables[name] = Table(name, MetaData(), autoload_with=self.engine)
        return self._tables[name]

    @property
    def blobs(self) -> Table:
        return self._table("storage_blobs")

    @property
    def attachments(self) -> Table:
        return self._table("storage_attachments")

    @property
    def variant_records(self) -> Table:
        return self._table("storage_variant_records")

    # -------------------------------------------------------------------------
    # Blobs
    # -------------------------------------------------------------------------

    def create_and_upload(
        self,
        data: bytes | BinaryIO,
        filename: str,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Blob:
        """
        Store bytes and create the blob record for them.

        Args:
            data: File content or a binary file object
            filename: Original filename
            content_type: MIME type, guessed from filename when omitted
            metadata: Initial blob metadata

        Returns:
            Blob: The new blob
        """
        if not isinstance(data, (bytes, bytearray)):
            data = data.read()
        data = bytes(data)

        key = generate_key()
        checksum = compute_checksum(data)
        content_type = content_type or mimetypes.guess_type(filename)[0] or DEFAULT_CONTENT_TYPE

        self.service.upload(key, data, checksum=checksum)

        with self.engine.begin() as conn:
            result = conn.execute(
                self.blobs.insert().values(
                    key=key,
                    filename=filename,
                    content_type=content_type,
                    metadata=json.dumps(metadata or {}),
                    service_name=self.service.name,
                    byte_size=len(data),
                    checksum=checksum,
                )
            )
            blob_id = result.inserted_primary_key[0]

        logger.info(f"Created blob {key} for {filename}")
        return self.get_blob(blob_id)

    def get_blob(self, blob_id: int) -> Blob:
        with self.engine.connect() as conn:
            row = conn.execute(
                select(self.blobs).where(self.blobs.c.id == blob_id)
            ).mappings().first()
        if row is None:
            raise BlobNotFoundError(str(blob_id))
        return Blob.from_row(row)

    def find_blob(self, key: str) -> Blob:
        with self.engine.connect() as conn:
            row = conn.execute(
                select(self.blobs).where(self.blobs.c.key == key)
            ).mappings().first()
        if row is None:
            raise BlobNotFoundError(key)
        return Blob.from_row(row)

    def download(self, blob: Blob) -> bytes:
        return self.service.download(blob.key)

    def analyze(self, blob: Blob) -> Blob:
        """
        Fill in blob metadata and mark the blob as analyzed.

        Returns:
            Blob: The updated blob
        """
        data = self.service.download(blob.key)

        metadata = dict(blob.metadata)
        metadata["identified"] = True
        metadata["analyzed"] = True
        metadata["checksum_ok"] = blob.checksum is None or compute_checksum(data) == blob.checksum

        with self.engine.begin() as conn:
            conn.execute(
                self.blobs.update()
                .where(self.blobs.c.id == blob.id)
                .values(metadata=json.dumps(metadata))
            )

        logger.info(f"Analyzed blob {blob.key}")
        return self.get_blob(blob.id)

    def analyze_later(self, blob: Blob) -> Any:
        return self._enqueue(ANALYZE_JOB, blob)

    def purge(self, blob: Blob) -> None:
        """Delete the blob's attachments, records and file."""
        with self.engine.begin() as conn:
            conn.execute(
                self.attachments.delete().where(self.attachments.c.blob_id == blob.id)
            )
            conn.execute(
                self.variant_records.delete().where(self.variant_records.c.blob_id == blob.id)
            )
            conn.execute(self.blobs.delete().where(self.blobs.c.id == blob.id))

        self.service.delete(blob.key)
        logger.info(f"Purged blob {blob.key}")

    def purge_later(self, blob: Blob) -> Any:
        return self._enqueue(PURGE_JOB, blob)

    def _enqueue(self, task_name: str, blob: Blob) -> Any:
        if self.enqueue is None:
            raise RuntimeError(f"No queue adapter configured, cannot enqueue {task_name}")
        return self.enqueue(task_name, blob.key, self.describe())

    # -------------------------------------------------------------------------
    # Attachments
    # -------------------------------------------------------------------------

    def attach(self, record_type: str, record_id: str | int, name: str, blob: Blob) -> Attachment:
        """
        Attach a blob to a record.

        Unanalyzed blobs are sent for analysis when a queue is available.
        """
        with self.engine.begin() as conn:
            result = conn.execute(
                self.attachments.insert().values(
                    name=name,
                    record_type=record_type,
                    record_id=str(record_id),
                    blob_id=blob.id,
                )
            )
            attachment_id = result.inserted_primary_key[0]
            row = conn.execute(
                select(self.attachments).where(self.attachments.c.id == attachment_id)
            ).mappings().one()

        if not blob.analyzed and self.enqueue is not None:
            self.analyze_later(blob)

        return Attachment.from_row(row)

    def attachments_for(
        self,
        record_type: str,
        record_id: str | int,
        name: str | None = None,
    ) -> list[Attachment]:
        query = select(self.attachments).where(
            self.attachments.c.record_type == record_type,
            self.attachments.c.record_id == str(record_id),
        )
        if name is not None:
            query = query.where(self.attachments.c.name == name)

        with self.engine.connect() as conn:
            rows = conn.execute(query.order_by(self.attachments.c.id)).mappings().all()
        return [Attachment.from_row(row) for row in rows]

    # -------------------------------------------------------------------------
    # Signed keys (blob URLs)
    # -------------------------------------------------------------------------

    def signed_key(self, blob: Blob) -> str:
        """HS256 token carrying the blob key, signed with the secret key base."""
        return jwt.encode(
            {"key": blob.key, "purpose": BLOB_PURPOSE},
            self.secret_key,
            algorithm=SIGNING_ALGORITHM,
        )

    def verify_signed_key(self, signed_key: str) -> str:
        """
        Return the blob key inside a signed key.

        Raises:
            InvalidSignatureError: If the token was tampered with, signed with
                another secret or not issued for a blob
        """
        try:
            payload = jwt.decode(signed_key, self.secret_key, algorithms=[SIGNING_ALGORITHM])
        except JWTError as e:
            logger.warning(f"Rejected blob signature: {e}")
            raise InvalidSignatureError(signed_key) from e

        key = payload.get("key")
        if payload.get("purpose") != BLOB_PURPOSE or not key:
            raise InvalidSignatureError(signed_key)
        return key


def build_storage_service(
    settings: Settings,
    engine: Engine,
    enqueue: Enqueue | None = None,
) -> StorageService:
    """
    Build the storage service named by settings.STORAGE_SERVICE.

    Raises:
        ConfigurationError: If the service name or its backend is unknown
    """
    configurations = settings.storage_configurations
    config = configurations.get(settings.STORAGE_SERVICE)
    if config is None:
        raise ConfigurationError("storage service", settings.STORAGE_SERVICE, sorted(configurations))
    if config["service"] != "Disk":
        raise ConfigurationError("storage backend", config["service"], ["Disk"])

    service = DiskService(config["root"], name=settings.STORAGE_SERVICE)
    return StorageService(engine, service, enqueue=enqueue, secret_key=settings.SECRET_KEY_BASE)
