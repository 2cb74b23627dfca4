# =============================================================================
# app/ - FastAPI Harness Package
# =============================================================================
# This package contains the web side of the harness:
# - main.py: App entry point, middleware setup, error handlers
# - application.py: Harness configuration object and boot sequence
# - chapters.py: Chapter discovery and view/config path wiring
# - config.py: Environment variable loading and settings
# - routers/: Endpoint definitions organized by feature
# - websocket/: Channel broadcasting
#
# Chapters plug in through app.extensions.chapter_helpers.
# =============================================================================
