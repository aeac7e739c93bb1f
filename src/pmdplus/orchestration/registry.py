# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-target serialisation of analysis runs."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from ..cancellation import CancellationToken


@dataclass(slots=True)
class _TargetEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    latest: CancellationToken | None = None
    waiters: int = 0


class RunRegistry:
    """Ensure the most recent run for a target is the one whose results stick.

    Registering a run cancels the token of whichever run for the same target
    registered before it, then waits for that run to release the target. Runs
    for different targets never block each other.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, _TargetEntry] = {}

    @asynccontextmanager
    async def acquire(
        self,
        target: Path,
        token: CancellationToken | None = None,
    ) -> AsyncIterator[CancellationToken]:
        """Hold ``target`` exclusively for the duration of the block.

        Args:
            target: Resolved path being analysed.
            token: Optional caller token; cancelling it also cancels the run.

        Yields:
            CancellationToken: Token the run must observe. It fires when the
            caller cancels or when a newer run for ``target`` registers.
        """

        entry = self._entries.setdefault(target, _TargetEntry())
        if entry.latest is not None:
            entry.latest.cancel()
        run_token, detach = token.linked() if token is not None else (CancellationToken(), None)
        entry.latest = run_token
        entry.waiters += 1
        try:
            async with entry.lock:
                yield run_token
        finally:
            if detach is not None:
                detach()
            entry.waiters -= 1
            if entry.latest is run_token:
                entry.latest = None
            if entry.waiters == 0:
                self._entries.pop(target, None)

    def is_active(self, target: Path) -> bool:
        """Return ``True`` while any run holds or waits for ``target``."""

        return target in self._entries

    def cancel(self, target: Path) -> bool:
        """Cancel the newest run registered for ``target``, if any."""

        entry = self._entries.get(target)
        if entry is None or entry.latest is None:
            return False
        entry.latest.cancel()
        return True

    def cancel_all(self) -> None:
        for entry in self._entries.values():
            if entry.latest is not None:
                entry.latest.cancel()


__all__ = ["RunRegistry"]
