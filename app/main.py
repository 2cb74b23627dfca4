# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# Assembles the web application around an initialized HarnessApplication:
# middleware, exception handlers, harness routes, then chapter routes.
#
# Usage:
#   # From a chapter's prelude.py
#   from app.main import boot
#   app = boot()
#
#   # Or from the command line
#   uvicorn app.main:create_app --factory --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from starlette.middleware.trustedhost import TrustedHostMiddleware

from app.application import HarnessApplication
from app.chapters import STACK_DEPTH, ChapterManifest, discover_chapter
from app.config import Settings
from app.exceptions import HarnessException, harness_exception_handler
from app.extensions import ExtensionRegistry
from app.routers import health, storage, welcome
from app.websocket import routes as websocket_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup only logs; shutdown drops every channel subscriber.
    """
    harness: HarnessApplication = app.state.harness
    logger.info(f"Serving harness on {harness.default_url_options['host']}")

    yield

    logger.info("Shutting down harness")
    harness.cable.shutdown()


def build_app(harness: HarnessApplication) -> FastAPI:
    """
    Build the FastAPI application for an initialized harness.

    Args:
        harness: Harness whose boot sequence already ran

    Returns:
        FastAPI: The web application
    """
    app = FastAPI(
        title="Chapter Harness",
        description="Shared runtime for book exercises",
        version="1.0.0",
        # Full tracebacks instead of a generic error page
        debug=harness.settings.CONSIDER_ALL_REQUESTS_LOCAL,
        lifespan=lifespan,
    )
    app.state.harness = harness

    # =========================================================================
    # Middleware
    # =========================================================================

    # An empty allow-list accepts every host
    if harness.settings.allowed_hosts_list:
        app.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=harness.settings.allowed_hosts_list,
        )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    app.add_exception_handler(HarnessException, harness_exception_handler)

    # =========================================================================
    # Routers
    # =========================================================================

    # Index and example control endpoints
    app.include_router(welcome.router, tags=["Welcome"])

    # Blob downloads
    app.include_router(storage.router, prefix="/storage", tags=["Storage"])

    # Health check endpoints
    app.include_router(health.router, tags=["Health"])

    # WebSocket endpoints (channel broadcasts)
    app.include_router(websocket_routes.router, tags=["Cable"])

    # Chapter routes, after the harness's own
    chapter_router = APIRouter()
    harness.extensions.run("routes", chapter_router)
    app.include_router(chapter_router, tags=["Chapter"])

    harness.run_after_initialize()
    return app


def create_app(
    settings: Settings | None = None,
    manifest: ChapterManifest | None = None,
    extensions: ExtensionRegistry | None = None,
) -> FastAPI:
    """
    Initialize a harness and build its web application.

    Args:
        settings: Harness settings (defaults to the environment)
        manifest: Chapter to serve, if any
        extensions: Chapter extensions (defaults to app.extensions.chapter_helpers)
    """
    harness = HarnessApplication(settings=settings, manifest=manifest, extensions=extensions)
    return build_app(harness.initialize())


def boot(
    settings: Settings | None = None,
    extensions: ExtensionRegistry | None = None,
    depth: int = STACK_DEPTH,
) -> FastAPI:
    """
    Create the application for the chapter that called boot().

    Meant to be called from a chapter's prelude.py: the prelude (and the
    example file importing it, if any) is found on the call stack.
    """
    manifest = discover_chapter(depth=depth, skip=1)
    return create_app(settings=settings, manifest=manifest, extensions=extensions)
