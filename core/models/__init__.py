# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - storage.py: Blob and Attachment rows of the attachment storage tables
# =============================================================================

from .storage import Attachment, Blob

__all__ = [
    "Attachment",
    "Blob",
]
