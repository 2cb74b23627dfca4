# =============================================================================
# 001_create_storage_tables.py - Attachment Storage Tables
# =============================================================================
# storage_blobs            - one row per stored file
# storage_attachments      - joins a blob to (record_type, record_id, name)
# storage_variant_records  - processed variants of a blob
# =============================================================================

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
)

from core.migrations import Migration

metadata = MetaData()

storage_blobs = Table(
    "storage_blobs",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("key", String(255), nullable=False, unique=True),
    Column("filename", String(255), nullable=False),
    Column("content_type", String(255)),
    Column("metadata", Text),
    Column("service_name", String(255), nullable=False),
    Column("byte_size", BigInteger, nullable=False),
    Column("checksum", String(255)),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

storage_attachments = Table(
    "storage_attachments",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(255), nullable=False),
    Column("record_type", String(255), nullable=False),
    Column("record_id", String(255), nullable=False),
    Column("blob_id", Integer, ForeignKey("storage_blobs.id"), nullable=False, index=True),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    UniqueConstraint(
        "record_type", "record_id", "name", "blob_id",
        name="index_storage_attachments_uniqueness",
    ),
)

storage_variant_records = Table(
    "storage_variant_records",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("blob_id", Integer, ForeignKey("storage_blobs.id"), nullable=False),
    Column("variation_digest", String(255), nullable=False),
    UniqueConstraint(
        "blob_id", "variation_digest",
        name="index_storage_variant_records_uniqueness",
    ),
)


class CreateStorageTables(Migration):
    def up(self, connection):
        metadata.create_all(connection)

    def down(self, connection):
        metadata.drop_all(connection)
