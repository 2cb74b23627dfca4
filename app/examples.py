# =============================================================================
# app/examples.py - Example Registry
# =============================================================================
# Tracks the chapter's examples and which one is currently mounted.
# Only one example is mounted at a time: loading an example always unmounts
# the previous one first.
# =============================================================================

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from app.exceptions import ExampleNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Example:
    """A numbered example of a chapter."""

    id: str
    title: str
    path: Path | None = None
    setup: Callable[[], None] | None = None
    teardown: Callable[[], None] | None = None


class ExampleRegistry:
    """
    Known examples plus the mounted one.

    on_change is called with the new example id (or None) every time the
    mounted example changes, so the application can rewire its paths.
    """

    def __init__(self, on_change: Callable[[str | None], None] | None = None):
        self._examples: dict[str, Example] = {}
        self._on_change = on_change
        self.current: Example | None = None

    def register(
        self,
        example_id: str,
        title: str,
        path: Path | None = None,
        setup: Callable[[], None] | None = None,
        teardown: Callable[[], None] | None = None,
    ) -> Example:
        example = Example(id=example_id, title=title, path=path, setup=setup, teardown=teardown)
        self._examples[example_id] = example
        return example

    def __contains__(self, example_id: str) -> bool:
        return example_id in self._examples

    def all(self) -> list[Example]:
        return [self._examples[key] for key in sorted(self._examples)]

    def get(self, example_id: str) -> Example:
        example = self._examples.get(example_id)
        if example is None:
            raise ExampleNotFoundError(example_id, sorted(self._examples))
        return example

    def load(self, example_id: str) -> Example:
        """
        Mount an example, unmounting the current one first.

        Raises:
            ExampleNotFoundError: If the chapter has no such example
        """
        example = self.get(example_id)
        self.reset()

        if example.setup is not None:
            example.setup()
        self.current = example

        logger.info(f"Mounted example {example.id} ({example.title})")
        if self._on_change is not None:
            self._on_change(example.id)
        return example

    def reset(self) -> None:
        """Unmount the current example, if any."""
        example = self.current
        if example is None:
            return

        if example.teardown is not None:
            example.teardown()
        self.current = None

        logger.info(f"Unmounted example {example.id}")
        if self._on_change is not None:
            self._on_change(None)
