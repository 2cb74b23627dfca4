# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up a quiet test environment before any imports
# - Builds throwaway databases, storage roots and chapter directories
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# Settings read the environment when they are built

os.environ.setdefault("LOG", "0")
os.environ.setdefault("CABLE_ADAPTER", "test_print")
os.environ.setdefault("JOB_QUEUE_ADAPTER", "async_inline")

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.application import HarnessApplication
from app.chapters import ChapterManifest
from app.config import Settings
from app.extensions import ExtensionRegistry
from app.main import build_app


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def settings(tmp_path):
    """Settings pointing every file the harness writes into tmp_path."""
    return Settings(
        DATABASE_PATH=tmp_path / "db" / "test.sqlite3",
        STORAGE_ROOT=tmp_path / "storage",
        CREDENTIALS_PATH=tmp_path / "config" / "credentials.env",
        MASTER_KEY_PATH=tmp_path / "config" / "master.key",
        CABLE_ADAPTER="test_print",
        JOB_QUEUE_ADAPTER="async_inline",
    )


@pytest.fixture
def extensions():
    """A fresh extension registry so tests don't leak hooks into each other."""
    return ExtensionRegistry()


def write(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def chapter_dir(tmp_path):
    """
    A chapter with two examples.

    Only example "02" has its own views, config and components.
    """
    root = tmp_path / "Chapter03"
    write(root / "prelude.py", "# boots the harness\n")
    write(root / "01-basics.py", "# example 01\n")
    write(root / "02-callbacks.py", "# example 02\n")
    write(root / "notes.md", "not an example\n")

    write(root / "views" / "welcome" / "index.html", "chapter index: {{ current.id if current else 'none' }}")
    write(root / "views" / "02" / "welcome" / "index.html", "example 02 index")
    (root / "views" / "components").mkdir(parents=True)
    (root / "views" / "02" / "components").mkdir(parents=True)
    write(root / "config" / "settings.env", "DEFAULT_URL_HOST=chapter.test\n")
    write(root / "config" / "02" / "settings.env", "DEFAULT_URL_HOST=example.test\n")
    return root


@pytest.fixture
def manifest(chapter_dir):
    return ChapterManifest(root=chapter_dir)


@pytest.fixture
def harness(settings, manifest, extensions):
    """An initialized harness serving the test chapter."""
    return HarnessApplication(settings=settings, manifest=manifest, extensions=extensions).initialize()


@pytest.fixture
def client(harness):
    """TestClient for the harness web application."""
    with TestClient(build_app(harness)) as test_client:
        yield test_client


def tamper_signature(token: str) -> str:
    """Flip the first character of a compact token's signature segment."""
    header, payload, signature = token.split(".")
    replacement = "A" if signature[0] != "A" else "B"
    return f"{header}.{payload}.{replacement}{signature[1:]}"
