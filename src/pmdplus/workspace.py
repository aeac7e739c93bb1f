# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Utilities for reasoning about the active project workspace."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Final

DEFAULT_IGNORE_FILE: Final[str] = ".forceignore"
COMMENT_PREFIX: Final[str] = "#"
NEGATION_PREFIX: Final[str] = "!"


async def file_exists(path: Path) -> bool:
    """Return ``True`` when ``path`` is an existing regular file."""

    return await asyncio.to_thread(path.is_file)


async def dir_exists(path: Path) -> bool:
    """Return ``True`` when ``path`` is an existing directory."""

    return await asyncio.to_thread(path.is_dir)


def parse_ignore_patterns(content: str) -> list[str]:
    """Return exclusion entries from ignore-file ``content``.

    Blank lines and ``#`` comments are skipped. Negation lines (``!pattern``)
    are dropped as well: every remaining line is an exact-match exclusion and
    nothing re-includes a path.

    Args:
        content: Raw text of the ignore file.

    Returns:
        list[str]: Stripped exclusion entries in file order.
    """

    entries: list[str] = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX) or line.startswith(NEGATION_PREFIX):
            continue
        entries.append(line)
    return entries


def read_ignore_file(workspace_root: Path, filename: str = DEFAULT_IGNORE_FILE) -> list[str]:
    """Read the workspace ignore file, returning an empty list when absent.

    Args:
        workspace_root: Directory containing the ignore file.
        filename: Name of the ignore file relative to ``workspace_root``.

    Returns:
        list[str]: Exclusion entries parsed from the file.
    """

    try:
        content = (workspace_root / filename).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return []
    return parse_ignore_patterns(content)


def workspace_relative(path: str, workspace_root: Path) -> str | None:
    """Return ``path`` relative to ``workspace_root`` in POSIX form, if inside it."""

    try:
        relative = os.path.relpath(path, workspace_root)
    except ValueError:
        return None
    if relative == os.pardir or relative.startswith(os.pardir + os.sep):
        return None
    return Path(relative).as_posix()


__all__ = [
    "DEFAULT_IGNORE_FILE",
    "dir_exists",
    "file_exists",
    "parse_ignore_patterns",
    "read_ignore_file",
    "workspace_relative",
]
