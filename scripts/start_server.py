#!/usr/bin/env python3
# =============================================================================
# scripts/start_server.py - Harness Server Entry Point
# =============================================================================
# Starts the harness without a chapter (shared views and config only).
# Chapters start it from their prelude.py through app.main.boot().
#
# Usage:
#   python scripts/start_server.py
#   LOG=1 python scripts/start_server.py
# =============================================================================

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import uvicorn

from app.config import get_settings


def main():
    """Start the harness web server."""
    settings = get_settings()

    print("=" * 60)
    print("Chapter Harness")
    print("=" * 60)
    print()
    print(f"Listening on http://{settings.API_HOST}:{settings.API_PORT}")
    print("Press Ctrl+C to stop")
    print()

    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
    )


if __name__ == "__main__":
    main()
