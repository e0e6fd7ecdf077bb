"""Directory exclusion rules for the watch walk.

Two tiers:

DEFAULT_IGNORE_DIRS: matched by base name, never walked, not configurable.
    - VCS internals and dependency trees that change constantly

User prefixes (--ignore): matched against the normalized directory path.
    - "backend/tmp" skips backend/tmp and everything below it
"""

from __future__ import annotations

import os
from collections.abc import Iterable

DEFAULT_IGNORE_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".hg",
        ".svn",
        # Dependency trees
        "node_modules",
    )
)


def is_default_ignored(dirname: str) -> bool:
    """Check if a directory base name is in the default ignore set."""
    return dirname in DEFAULT_IGNORE_DIRS


def normalize_prefixes(prefixes: Iterable[str]) -> tuple[str, ...]:
    """Normalize user ignore prefixes so "./tmp/" and "tmp" compare equal.

    Prefixes are made absolute against the working directory, so they also
    match the absolute paths reported by the file watcher.
    """
    return tuple(os.path.abspath(p) for p in prefixes if p)


def is_ignored_path(path: str, prefixes: Iterable[str]) -> bool:
    """Check a directory path against default names and user prefixes.

    Prefixes must already be normalized (see normalize_prefixes).
    """
    normalized = os.path.abspath(path)
    if is_default_ignored(os.path.basename(normalized)):
        return True
    return any(normalized.startswith(prefix) for prefix in prefixes)
