# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .storage_service import DiskService, StorageService, build_storage_service

__all__ = [
    "DiskService",
    "StorageService",
    "build_storage_service",
]
