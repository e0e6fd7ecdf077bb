"""Change aggregation: classify raw file events and debounce bursts.

Atomic saves and editors produce several events per logical edit. The
aggregator folds a burst into one decision taken after a quiet period:

- any source change in the burst -> rebuild (which restarts on success)
- only restart-extension changes -> restart, skipping the build
- everything else is ignored and does not extend the quiet period
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

import structlog

from reloader.config.models import normalize_extension
from reloader.engine.signals import Signal

logger = structlog.get_logger()

DEFAULT_DEBOUNCE_SEC = 0.05


class ChangeKind(Enum):
    """What a single changed file asks for."""

    BUILD = "rebuild"
    RESTART = "restart"
    IGNORE = "no action"


@dataclass
class ChangeAggregator:
    """Single consumer of the change queue.

    Classification and deadline updates happen only inside run(), so the
    pending-build flag and the debounce deadline have a single owner.
    """

    changes: asyncio.Queue[str]
    rebuild: Signal
    restart: Signal
    source_extensions: Iterable[str] = (".go",)
    restart_extensions: Iterable[str] = ()
    restart_all: bool = False  # Non-source changes all restart (test mode)
    debounce_sec: float = DEFAULT_DEBOUNCE_SEC

    _source_exts: frozenset[str] = field(init=False)
    _restart_exts: frozenset[str] = field(init=False)
    # Debouncing state
    _build_pending: bool = field(default=False, init=False)
    _deadline: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._source_exts = frozenset(normalize_extension(e) for e in self.source_extensions)
        self._restart_exts = frozenset(normalize_extension(e) for e in self.restart_extensions)

    def classify(self, path: str) -> ChangeKind:
        ext = os.path.splitext(path)[1]
        if ext in self._source_exts:
            return ChangeKind.BUILD
        if self.restart_all or ext in self._restart_exts:
            return ChangeKind.RESTART
        return ChangeKind.IGNORE

    @property
    def pending(self) -> bool:
        """Whether a decision is waiting for the quiet period to end."""
        return self._deadline is not None

    def observe(self, path: str) -> ChangeKind:
        """Classify one change and (re)arm the debounce deadline."""
        kind = self.classify(path)
        logger.debug("file_change_detected", path=path, action=kind.value)
        if kind is ChangeKind.IGNORE:
            return kind

        if kind is ChangeKind.BUILD:
            self._build_pending = True
        self._deadline = asyncio.get_running_loop().time() + self.debounce_sec
        return kind

    def flush(self) -> ChangeKind | None:
        """Emit the decision for the current burst and reset the state."""
        if self._deadline is None:
            return None
        self._deadline = None

        if self._build_pending:
            self._build_pending = False
            self.rebuild.try_set()
            return ChangeKind.BUILD

        self.restart.try_set()
        return ChangeKind.RESTART

    async def run(self) -> None:
        """Consume changes until cancelled."""
        while True:
            try:
                async with asyncio.timeout_at(self._deadline):
                    path = await self.changes.get()
            except TimeoutError:
                decision = self.flush()
                logger.debug("changes_flushed", decision=decision.value if decision else None)
                continue
            self.observe(path)
