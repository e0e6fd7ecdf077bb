"""Coalescing single-slot signals between engine tasks.

A Signal carries no payload, only intent. Setting an already-set signal
is a no-op, so any number of requests made while the receiver is busy
collapse into one. Senders never block.
"""

from __future__ import annotations

import asyncio


class Signal:
    """Single-slot mailbox with try_set()/take() semantics."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._event = asyncio.Event()

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, pending={self.pending})"

    @property
    def pending(self) -> bool:
        return self._event.is_set()

    def try_set(self) -> bool:
        """Raise the signal. Returns False if it was already pending (dropped)."""
        if self._event.is_set():
            return False
        self._event.set()
        return True

    def take(self) -> bool:
        """Clear the signal without waiting. Returns whether it was pending."""
        was_pending = self._event.is_set()
        self._event.clear()
        return was_pending

    async def wait(self) -> None:
        """Wait until the signal is pending without consuming it."""
        await self._event.wait()

    async def receive(self) -> None:
        """Wait for the signal and consume it."""
        await self._event.wait()
        self._event.clear()
