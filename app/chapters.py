# =============================================================================
# app/chapters.py - Chapter Discovery & Path Wiring
# =============================================================================
# A chapter is a directory holding a prelude.py plus numbered example files:
#
#   Chapter03/
#     prelude.py          <- boots the harness
#     01-basics.py        <- example "01"
#     02-callbacks.py     <- example "02"
#     views/              <- chapter templates
#       components/       <- chapter view components (importable modules)
#       02/               <- templates used only by example "02"
#     config/
#       settings.env      <- settings overrides for the chapter
#       02/settings.env   <- overrides for example "02"
#
# The chapter can be declared with a ChapterManifest or found by looking at
# who called into the harness (discover_chapter).
# =============================================================================

import inspect
import logging
import re
from dataclasses import dataclass, field, replace
from pathlib import Path

logger = logging.getLogger(__name__)

PRELUDE_FILENAME = "prelude.py"

# Chapter<N>/<NN>-<name>.py, the two digits being the example number
EXAMPLE_PATH_PATTERN = re.compile(r"Chapter\d+/(\d{2})-[^/]+\.py$")
EXAMPLE_FILE_PATTERN = re.compile(r"^(\d{2})-(.+)\.py$")

STACK_DEPTH = 10


@dataclass(frozen=True)
class ChapterManifest:
    """Where a chapter lives and which of its examples is selected."""

    root: Path
    example: str | None = None

    @property
    def views_dir(self) -> Path:
        return self.root / "views"

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    @property
    def components_dir(self) -> Path:
        return self.views_dir / "components"

    def with_example(self, example: str | None) -> "ChapterManifest":
        return replace(self, example=example)

    def example_files(self) -> list[tuple[str, str, Path]]:
        """
        List the chapter's example files.

        Returns:
            (id, title, path) tuples sorted by id, e.g. ("01", "basics", ...)
        """
        if not self.root.is_dir():
            return []

        examples = []
        for path in sorted(self.root.iterdir()):
            match = EXAMPLE_FILE_PATTERN.match(path.name)
            if match and path.is_file():
                examples.append((match.group(1), match.group(2).replace("_", " "), path))
        return examples


@dataclass
class PathSet:
    """Ordered lookup paths; earlier entries win."""

    views: list[Path] = field(default_factory=list)
    config: list[Path] = field(default_factory=list)
    autoload: list[Path] = field(default_factory=list)


def _normalize(filename: str) -> str:
    return filename.replace("\\", "/")


def discover_chapter(depth: int = STACK_DEPTH, skip: int = 0) -> ChapterManifest | None:
    """
    Find the calling chapter by inspecting the call stack.

    Looks at up to `depth` frames above the caller. The first frame whose
    file path contains prelude.py gives the chapter root; the first frame
    whose file is a Chapter<N>/<NN>-<name>.py gives the example number.

    Args:
        depth: Number of frames to inspect
        skip: Extra frames to skip above the direct caller (for wrappers)

    Returns:
        ChapterManifest, or None when no prelude is on the stack
    """
    # [0] is this function, [1] its caller
    start = 1 + skip
    frames = inspect.stack(context=0)[start:start + depth]
    filenames = [_normalize(frame.filename) for frame in frames]
    del frames

    prelude = next((name for name in filenames if PRELUDE_FILENAME in name), None)
    if prelude is None:
        return None

    example = None
    for name in filenames:
        match = EXAMPLE_PATH_PATTERN.search(name)
        if match:
            example = match.group(1)
            break

    manifest = ChapterManifest(root=Path(prelude).parent, example=example)
    logger.debug(f"Discovered chapter at {manifest.root} (example: {example})")
    return manifest


def resolve_paths(root: Path, manifest: ChapterManifest | None = None) -> PathSet:
    """
    Build the view/config/autoload path lists.

    Shared defaults come from the harness root. A chapter's directories are
    placed in front of them, and an example's directories in front of the
    chapter's, so the most specific directory wins. Example directories
    are only added when they exist.

    Args:
        root: Harness root directory
        manifest: Chapter to wire in, if any

    Returns:
        PathSet: Ordered path lists
    """
    paths = PathSet(
        views=[root / "app" / "views"],
        config=[root / "config"],
        autoload=[],
    )

    if manifest is None:
        return paths

    paths.views.insert(0, manifest.views_dir)
    paths.config.insert(0, manifest.config_dir)
    paths.autoload.append(manifest.components_dir)

    if manifest.example:
        example_views = manifest.views_dir / manifest.example
        example_config = manifest.config_dir / manifest.example
        example_components = example_views / "components"

        if example_views.is_dir():
            paths.views.insert(0, example_views)
        if example_config.is_dir():
            paths.config.insert(0, example_config)
        if example_components.is_dir():
            paths.autoload.insert(0, example_components)

    return paths
