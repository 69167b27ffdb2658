"""
Fixture loader - reads JSON payload templates from fixture directories.

Search paths are tried in order, so a project directory placed first
overrides the bundled fixture of the same name.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from stripe_double.errors import FixtureNotFoundError

logger = logging.getLogger(__name__)

FIXTURE_EXTENSION = ".json"


def bundled_fixture_dir() -> Path:
    """Get the directory holding the bundled webhook fixtures."""
    return Path(__file__).parent / "webhook_fixtures"


class FixtureLoader:
    """Loads fixtures by name from an ordered list of directories.

    Nothing is cached, so every ``load`` returns a fresh mapping read from
    disk and callers may mutate it freely.
    """

    def __init__(self, search_paths: Iterable[str | Path]) -> None:
        self.search_paths = [Path(p) for p in search_paths]

    def find(self, name: str) -> Path | None:
        """Return the first fixture file for ``name``, or None."""
        for directory in self.search_paths:
            candidate = directory / f"{name}{FIXTURE_EXTENSION}"
            if candidate.is_file():
                return candidate
        return None

    def exists(self, name: str) -> bool:
        return self.find(name) is not None

    def load(self, name: str) -> dict[str, Any]:
        """Load and parse the fixture for ``name``.

        Raises:
            FixtureNotFoundError: If no search path has the file.
        """
        path = self.find(name)
        if path is None:
            raise FixtureNotFoundError(name, [str(p) for p in self.search_paths])

        logger.debug("Loading fixture %s from %s", name, path)
        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)
        return data

    def available(self) -> set[str]:
        """Names of all fixtures present across the search paths."""
        names: set[str] = set()
        for directory in self.search_paths:
            if not directory.is_dir():
                continue
            for path in directory.glob(f"*{FIXTURE_EXTENSION}"):
                names.add(path.name.removesuffix(FIXTURE_EXTENSION))
        return names
