# =============================================================================
# app/application.py - Harness Application
# =============================================================================
# The configuration object of the harness. It is built once per process,
# wires the shared services together and knows which chapter it serves.
#
# Boot order (initialize):
#   1. settings overlaid with the settings.env files on the config paths
#   2. logging, database connection, schema (with "schema" extensions)
#   3. queue adapter, subscription adapter, credentials
#   4. attachment storage tables and service
#   5. templates, examples, autoload paths
#   6. "config" extensions, then the example the process was booted from
#
# Usage:
#   harness = HarnessApplication(settings, ChapterManifest(Path("Chapter03")))
#   harness.initialize()
#   harness.perform_later("workers.healthcheck")
# =============================================================================

import importlib
import logging
import pkgutil
import sys
from pathlib import Path
from typing import Any, Callable
from urllib.parse import quote

from fastapi import Request
from jinja2 import FileSystemLoader
from starlette.templating import Jinja2Templates

from app.chapters import STACK_DEPTH, ChapterManifest, PathSet, discover_chapter, resolve_paths
from app.config import ROOT_DIR, Settings, get_settings, overlay_settings
from app.credentials import Credentials
from app.examples import ExampleRegistry
from app.extensions import ExtensionRegistry, chapter_helpers
from app.websocket import ConnectionManager, build_subscription_adapter
from core.database import Database, establish_connection
from core.migrations import ensure_storage_tables
from core.models import Blob
from core.schema import define_schema
from core.services.storage_service import StorageService, build_storage_service
from lib.log import configure_logging
from workers import build_queue_adapter, celery_app

logger = logging.getLogger(__name__)

CONFIG_ENV_FILENAME = "settings.env"


class HarnessApplication:
    """
    Harness configuration and shared services.

    Attributes set by initialize():
        database, queue_adapter, cable, connections, credentials, storage,
        templates, examples
    """

    def __init__(
        self,
        settings: Settings | None = None,
        manifest: ChapterManifest | None = None,
        extensions: ExtensionRegistry | None = None,
        root: Path = ROOT_DIR,
    ):
        self.root = Path(root)
        # Settings before any settings.env overlay; remounting re-applies overlays to these
        self.base_settings = settings or get_settings()
        self.settings = self.base_settings
        self.manifest = manifest
        self.extensions = extensions if extensions is not None else chapter_helpers
        self.paths: PathSet = resolve_paths(self.root, manifest)
        self.default_url_options = {"host": self.settings.DEFAULT_URL_HOST}

        self.logger: logging.Logger | None = None
        self.database: Database | None = None
        self.storage: StorageService | None = None
        self.templates: Jinja2Templates | None = None
        self.examples = ExampleRegistry(on_change=self.mount_example)

        self.initialized = False
        self._after_initialize: list[Callable[["HarnessApplication"], Any]] = []
        self._autoload_installed: list[str] = []

    @classmethod
    def from_caller(
        cls,
        settings: Settings | None = None,
        extensions: ExtensionRegistry | None = None,
        depth: int = STACK_DEPTH,
    ) -> "HarnessApplication":
        """Build the application for the chapter found on the call stack."""
        manifest = discover_chapter(depth=depth, skip=1)
        return cls(settings=settings, manifest=manifest, extensions=extensions)

    @property
    def eager_load(self) -> bool:
        return self.settings.EAGER_LOAD

    # -------------------------------------------------------------------------
    # Boot
    # -------------------------------------------------------------------------

    def initialize(self) -> "HarnessApplication":
        """Run the boot sequence. Calling it again does nothing."""
        if self.initialized:
            return self

        self._apply_config_paths()
        self.logger = configure_logging(self.settings.LOG)

        self.database = establish_connection(self.settings)
        define_schema(self.database, self.extensions)

        self.queue_adapter = build_queue_adapter(self.settings.JOB_QUEUE_ADAPTER, celery_app)
        self.cable = build_subscription_adapter(self.settings.CABLE_ADAPTER)
        self.connections = ConnectionManager(self.cable)
        self.credentials = Credentials(self.settings.CREDENTIALS_PATH, self.settings.MASTER_KEY_PATH)

        ensure_storage_tables(self.database.engine)
        self.storage = build_storage_service(
            self.settings, self.database.engine, enqueue=self.perform_later
        )

        self.templates = Jinja2Templates(directory=[str(path) for path in self.paths.views])
        self._register_examples()
        self._install_autoload_paths()

        self.extensions.run("config", self)
        self._mount_boot_example()

        self.initialized = True
        self.logger.info(
            f"Harness initialized (chapter: {self.manifest.root if self.manifest else 'none'})"
        )
        return self

    def after_initialize(self, callback: Callable[["HarnessApplication"], Any]):
        """Register a callback to run once the web application is assembled."""
        self._after_initialize.append(callback)
        return callback

    def run_after_initialize(self) -> None:
        """Run after-initialize callbacks, then load the domain code module."""
        for callback in self._after_initialize:
            callback(self)

        if self.settings.APP_MODULE:
            logger.info(f"Loading application module: {self.settings.APP_MODULE}")
            importlib.import_module(self.settings.APP_MODULE)

    def _config_env_files(self) -> list[Path]:
        # Lowest precedence first, so chapter files override shared ones
        return [path / CONFIG_ENV_FILENAME for path in reversed(self.paths.config)]

    def _apply_config_paths(self) -> None:
        """Rebuild settings from the base settings and the current config paths."""
        self.settings = overlay_settings(self.base_settings, self._config_env_files())
        self.default_url_options = {"host": self.settings.DEFAULT_URL_HOST}

    def _register_examples(self) -> None:
        if self.manifest is None:
            return

        for example_id, title, path in self.manifest.example_files():
            self.examples.register(example_id, title, path=path)

    def _mount_boot_example(self) -> None:
        """
        Mount the example the process was booted from.

        Runs after the config extensions, so an example they registered
        (with its setup and teardown) is the one that gets mounted.
        """
        if self.manifest is None or not self.manifest.example:
            return
        if self.manifest.example in self.examples:
            self.examples.load(self.manifest.example)

    def _install_autoload_paths(self) -> None:
        """Make view components importable, most specific directory first."""
        wanted = [str(path) for path in self.paths.autoload]

        for entry in self._autoload_installed:
            if entry not in wanted and entry in sys.path:
                sys.path.remove(entry)

        for entry in reversed(wanted):
            if entry not in sys.path:
                sys.path.insert(0, entry)
        self._autoload_installed = wanted

        if self.eager_load:
            existing = [entry for entry in wanted if Path(entry).is_dir()]
            for module in pkgutil.iter_modules(existing):
                importlib.import_module(module.name)

    # -------------------------------------------------------------------------
    # Examples
    # -------------------------------------------------------------------------

    def mount_example(self, example_id: str | None) -> None:
        """
        Rewire paths and settings for an example (None unmounts).

        Example directories that don't exist are skipped.
        """
        manifest = self.manifest.with_example(example_id) if self.manifest else None
        self.paths = resolve_paths(self.root, manifest)
        self._apply_config_paths()

        if self.templates is not None:
            self.templates.env.loader = FileSystemLoader([str(path) for path in self.paths.views])
        self._install_autoload_paths()

    # -------------------------------------------------------------------------
    # Jobs
    # -------------------------------------------------------------------------

    def perform_later(self, task_name: str, *args, **kwargs) -> Any:
        """Enqueue a job by task name through the configured queue adapter."""
        signature = celery_app.signature(task_name, args=args, kwargs=kwargs)
        return self.queue_adapter.enqueue(signature)

    # -------------------------------------------------------------------------
    # Views & URLs
    # -------------------------------------------------------------------------

    def render(
        self,
        request: Request,
        template: str,
        context: dict[str, Any] | None = None,
        status_code: int = 200,
    ):
        """Render a template found on the view paths."""
        context = {"harness": self, **(context or {})}
        return self.templates.TemplateResponse(request, template, context, status_code=status_code)

    def url_for_path(self, path: str) -> str:
        """Absolute URL for a path, using the default host."""
        return f"http://{self.default_url_options['host']}{path}"

    def blob_path(self, blob: Blob) -> str:
        return f"/storage/blobs/{self.storage.signed_key(blob)}/{quote(blob.filename)}"
