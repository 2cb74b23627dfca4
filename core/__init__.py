# =============================================================================
# core/ - Persistence Package
# =============================================================================
# This package contains the data side of the harness:
# - database.py: SQLite bootstrap and the shared engine
# - schema.py: Schema definition through chapter extensions
# - migrations/: Bundled attachment storage migration
# - models/: Pydantic schemas for storage rows
# - services/: Attachment storage service
# =============================================================================
