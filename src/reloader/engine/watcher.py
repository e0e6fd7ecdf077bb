"""Filesystem watcher using watchfiles for async change notification.

Design:
- Python walks each watched root, pruning ignored directories
- The explicit directory list goes to awatch with recursive=False
  (one native watch per directory, ignored trees never traversed)
- Changed file paths are pushed one by one into a shared asyncio.Queue
- A newly created directory restarts awatch with a fresh walk; files
  already inside the new directories are queued once after the walk
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable, Sequence

import structlog
from watchfiles import Change, awatch

from reloader.core.errors import WatchError
from reloader.core.excludes import is_ignored_path, normalize_prefixes
from reloader.core.progress import pluralize

logger = structlog.get_logger()


def collect_watch_dirs(root: str, ignore: Iterable[str] = ()) -> list[str]:
    """Walk root and collect every directory to watch.

    Skips DEFAULT_IGNORE_DIRS by base name and any directory whose path
    starts with one of the ignore prefixes. A root that does not exist
    yields an empty list. Directories vanishing mid-walk are skipped.

    Raises:
        WatchError: Any other OS error while walking.
    """
    prefixes = normalize_prefixes(ignore)
    if not os.path.isdir(root) or is_ignored_path(root, prefixes):
        return []

    def _on_error(err: OSError) -> None:
        if isinstance(err, FileNotFoundError):
            return
        raise WatchError.walk_failed(str(err.filename or root), err.strerror or str(err))

    dirs: list[str] = []
    for dirpath, dirnames, _filenames in os.walk(root, onerror=_on_error):
        dirs.append(dirpath)
        # Prune in-place: remove dirs we should skip
        dirnames[:] = [
            d for d in dirnames if not is_ignored_path(os.path.join(dirpath, d), prefixes)
        ]
    return dirs


async def watch_paths(
    changes: asyncio.Queue[str],
    paths: Sequence[str],
    *,
    ignore: Iterable[str] = (),
) -> bool:
    """Push absolute changed-file paths into changes.

    Runs until cancelled. Returns True early when a new directory shows
    up that is not ignored, so the caller can walk again and include it.

    Raises:
        WatchError: The native watcher could not be set up.
    """
    prefixes = normalize_prefixes(ignore)
    watched = [os.path.abspath(p) for p in paths]
    known = set(watched)

    try:
        async for batch in awatch(*watched, recursive=False, ignore_permission_denied=True):
            needs_restart = False
            for change_type, path in sorted(batch, key=lambda item: item[1]):
                if change_type == Change.added and os.path.isdir(path):
                    if path not in known and not is_ignored_path(path, prefixes):
                        logger.debug("new_directory_detected", path=path)
                        needs_restart = True
                    continue
                await changes.put(path)
            if needs_restart:
                return True
    except (FileNotFoundError, PermissionError, RuntimeError) as e:
        raise WatchError.setup_failed(list(paths), str(e)) from e
    return False


async def queue_existing_files(changes: asyncio.Queue[str], dirs: Iterable[str]) -> int:
    """Push the regular files already present in dirs into changes.

    Files written into a new directory before its native watch exists
    produce no event; this reports them once after the re-walk.
    """
    count = 0
    for directory in dirs:
        try:
            with os.scandir(directory) as entries:
                files = sorted(e.path for e in entries if e.is_file(follow_symlinks=False))
        except (FileNotFoundError, NotADirectoryError):
            continue
        except OSError as e:
            raise WatchError.walk_failed(directory, e.strerror or str(e)) from e
        for path in files:
            await changes.put(os.path.abspath(path))
        count += len(files)
    return count


async def watch_folder(
    changes: asyncio.Queue[str],
    folder: str,
    ignore: Iterable[str] = (),
) -> None:
    """Watch folder recursively, re-walking whenever a directory is added."""
    ignore = tuple(ignore)
    known: set[str] | None = None
    while True:
        dirs = collect_watch_dirs(folder, ignore)
        if not dirs:
            logger.warning("no_watchable_dirs", path=folder)
            return

        current = {os.path.abspath(d) for d in dirs}
        if known is not None:
            added = sorted(current - known)
            queued = await queue_existing_files(changes, added)
            if queued:
                logger.debug("new_directory_files_queued", path=folder, files=queued)
        known = current

        logger.debug(
            "watching_changes",
            path=folder,
            dirs=pluralize(len(dirs), "directory", "directories"),
        )
        if not await watch_paths(changes, dirs, ignore=ignore):
            return
        logger.info("watcher_restart_requested", path=folder, reason="new_directory")
