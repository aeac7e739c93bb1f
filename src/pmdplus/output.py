# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Operator-facing output channel capturing verbatim PMD traffic."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Final

LOGGER: Final[logging.Logger] = logging.getLogger("pmdplus.output")

DEFAULT_CHANNEL_NAME: Final[str] = "PMD+ Output"


@dataclass(slots=True)
class OutputChannel:
    """Append-only log of diagnostic lines for a running session.

    Every line is retained in memory, mirrored to the ``pmdplus.output``
    logger at debug level and optionally forwarded to ``sink`` (the CLI uses
    this to echo the channel when ``--debug`` is active).
    """

    name: str = DEFAULT_CHANNEL_NAME
    sink: Callable[[str], None] | None = None
    lines: list[str] = field(default_factory=list)

    def append_line(self, text: str) -> None:
        """Record ``text`` as a single channel entry."""

        self.lines.append(text)
        LOGGER.debug("%s", text)
        if self.sink is not None:
            self.sink(text)

    def text(self) -> str:
        """Return the channel contents joined with newlines."""

        return "\n".join(self.lines)

    def clear(self) -> None:
        self.lines.clear()


__all__ = ["DEFAULT_CHANNEL_NAME", "OutputChannel"]
