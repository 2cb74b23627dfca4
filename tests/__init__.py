# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the chapter harness:
# - test_config.py: Settings, settings overlays, credentials and log routing
# - test_chapters.py: Chapter discovery and path precedence
# - test_examples.py: Example and extension registries
# - test_application.py: Boot sequence and HTTP endpoints
# - test_migrations.py / test_storage_service.py: Attachment storage
# - test_queue_adapters.py / test_broadcast.py: Jobs and channel broadcasts
#
# Run tests with: pytest
# =============================================================================
