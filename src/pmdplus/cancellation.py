# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cooperative cancellation primitive shared by runners and the orchestrator."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

CancellationCallback = Callable[[], None]


class CancellationToken:
    """One-shot cancellation signal that callers can poll, await or observe.

    Cancellation is advisory: nothing is interrupted preemptively. Runners
    await :meth:`wait` alongside their own work and the orchestrator polls
    :attr:`is_cancellation_requested` between commits.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._callbacks: list[CancellationCallback] = []

    @property
    def is_cancellation_requested(self) -> bool:
        """Return ``True`` once :meth:`cancel` has been called."""

        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation and notify subscribers exactly once."""

        if self._event.is_set():
            return
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def on_cancellation_requested(self, callback: CancellationCallback) -> CancellationCallback:
        """Register ``callback`` and return a function that unregisters it.

        The callback fires immediately when the token is already cancelled.
        """

        if self._event.is_set():
            callback()
            return _noop
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    async def wait(self) -> None:
        """Suspend until cancellation is requested."""

        await self._event.wait()

    def linked(self) -> tuple[CancellationToken, CancellationCallback]:
        """Return a child token that is cancelled whenever this one is.

        The second element detaches the child; callers holding a long-lived
        parent must call it once the child is no longer needed.
        """

        child = CancellationToken()
        return child, self.on_cancellation_requested(child.cancel)


def _noop() -> None:
    return None


__all__ = ["CancellationCallback", "CancellationToken"]
