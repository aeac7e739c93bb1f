# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich progress rendering for diagnostic commits."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

PROGRESS_TOTAL: float = 100.0


@dataclass(slots=True)
class RichProgressSink:
    """Adapt orchestrator progress reports onto a rich progress task."""

    progress: Progress
    task_id: TaskID

    def report(self, *, message: str | None = None, increment: float | None = None) -> None:
        if message is not None:
            self.progress.update(self.task_id, description=message.strip())
        if increment is not None:
            self.progress.advance(self.task_id, increment)


@contextmanager
def progress_sink(console: Console, *, enabled: bool) -> Iterator[RichProgressSink | None]:
    """Yield a progress sink bound to ``console`` when ``enabled``.

    The bar is transient so it disappears once the run completes.
    """

    if not enabled:
        yield None
        return
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task_id = progress.add_task("PMD+ is thinking...", total=PROGRESS_TOTAL)
    with progress:
        yield RichProgressSink(progress=progress, task_id=task_id)


__all__ = ["RichProgressSink", "progress_sink"]
