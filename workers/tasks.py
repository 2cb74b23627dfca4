# =============================================================================
# workers/tasks.py - Harness Jobs
# =============================================================================
# Jobs owned by the harness itself. Each job receives the blob key plus the
# storage service description, so the job record stays JSON-serializable.
# =============================================================================

import logging
from typing import Any

from core.services.storage_service import StorageService
from workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="workers.tasks.analyze_blob")
def analyze_blob(key: str, service: dict[str, str]) -> dict[str, Any]:
    """
    Analyze a blob and store the result in its metadata.

    Args:
        key: Blob key
        service: StorageService.describe() output

    Returns:
        The blob's new metadata
    """
    storage = StorageService.from_description(service)
    blob = storage.analyze(storage.find_blob(key))
    return blob.metadata


@celery_app.task(name="workers.tasks.purge_blob")
def purge_blob(key: str, service: dict[str, str]) -> str:
    """
    Delete a blob, its attachments and its file.

    Returns:
        The purged key
    """
    storage = StorageService.from_description(service)
    storage.purge(storage.find_blob(key))
    return key
