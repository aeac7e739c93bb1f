# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Resolve and validate settings into a :class:`RunConfiguration`."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Final

from ..errors import ExecutableNotFoundError, NoValidRulesetsError
from ..logging import fail
from ..output import OutputChannel
from ..workspace import dir_exists, file_exists
from .models import CACHE_DIR_NAME, PmdPlusSettings, RunConfiguration

PACKAGE_ROOT: Final[Path] = Path(__file__).resolve().parents[1]
BUNDLED_RULESET: Final[Path] = PACKAGE_ROOT / "rulesets" / "apex_ruleset.xml"
BUNDLED_PMD_HOME: Final[Path] = PACKAGE_ROOT / "bin" / "pmd"
DEFAULT_RULESET_TOKEN: Final[str] = "default"
WORKSPACE_RULESET: Final[Path] = Path("rulesets") / "apex_ruleset.xml"
PMD_HOME_ENV: Final[str] = "PMD_HOME"


def _anchor(value: str, workspace_root: Path) -> Path:
    """Return ``value`` as a path, anchored at ``workspace_root`` when relative."""

    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else workspace_root / candidate


def resolve_ruleset_path(value: str, *, workspace_root: Path) -> Path:
    """Resolve a configured ruleset entry to a filesystem path.

    Args:
        value: Ruleset entry as written in the settings.
        workspace_root: Workspace directory used for relative entries.

    Returns:
        Path: The bundled default ruleset for ``"default"`` (any case), the
        entry joined onto ``workspace_root`` when relative, otherwise the entry
        unchanged.
    """

    if value.strip().lower() == DEFAULT_RULESET_TOKEN:
        return BUNDLED_RULESET
    return _anchor(value, workspace_root)


def resolve_rulesets(settings: PmdPlusSettings, *, workspace_root: Path) -> tuple[Path, ...]:
    """Return every configured ruleset resolved, falling back to the workspace default."""

    if not settings.rulesets:
        return (workspace_root / WORKSPACE_RULESET,)
    return tuple(resolve_ruleset_path(entry, workspace_root=workspace_root) for entry in settings.rulesets)


def resolve_executable_path(
    settings: PmdPlusSettings,
    *,
    workspace_root: Path,
    env: Mapping[str, str] | None = None,
) -> Path:
    """Return the PMD installation directory implied by ``settings``.

    The configured value wins, then ``$PMD_HOME``, then the directory bundled
    with the package.
    """

    environ = os.environ if env is None else env
    if settings.path_to_pmd_executable:
        return _anchor(settings.path_to_pmd_executable, workspace_root)
    pmd_home = environ.get(PMD_HOME_ENV)
    if pmd_home:
        return Path(pmd_home).expanduser()
    return BUNDLED_PMD_HOME


def _report_invalid(message: str, channel: OutputChannel | None, *, quiet: bool) -> None:
    if channel is not None:
        channel.append_line(message)
    if not quiet:
        fail(message, use_emoji=False)


async def build_run_configuration(
    settings: PmdPlusSettings,
    *,
    workspace_root: Path,
    channel: OutputChannel | None = None,
    env: Mapping[str, str] | None = None,
    quiet: bool = False,
) -> RunConfiguration:
    """Validate ``settings`` and return a ready-to-run configuration.

    The executable directory and every ruleset file are checked concurrently.
    Each missing path is reported on its own before the aggregate error is
    raised, so the caller never observes a partially valid configuration.

    Args:
        settings: Raw user settings.
        workspace_root: Workspace directory anchoring relative paths.
        channel: Optional output channel receiving validation messages.
        env: Environment consulted for ``PMD_HOME``; defaults to ``os.environ``.
        quiet: Suppress console messages; the channel still receives them.

    Returns:
        RunConfiguration: Immutable configuration with only valid rulesets.

    Raises:
        ExecutableNotFoundError: If the PMD installation directory is missing.
        NoValidRulesetsError: If none of the rulesets exist as files.
    """

    root = workspace_root.expanduser().resolve()
    executable = resolve_executable_path(settings, workspace_root=root, env=env)
    rulesets = resolve_rulesets(settings, workspace_root=root)

    executable_ok, *ruleset_checks = await asyncio.gather(
        dir_exists(executable),
        *(file_exists(ruleset) for ruleset in rulesets),
    )

    valid_rulesets: list[Path] = []
    for ruleset, exists in zip(rulesets, ruleset_checks, strict=True):
        if exists:
            valid_rulesets.append(ruleset)
        else:
            _report_invalid(f"PMD+ could not find or access the ruleset file at {ruleset}", channel, quiet=quiet)

    if not executable_ok:
        error = ExecutableNotFoundError(executable)
        _report_invalid(str(error), channel, quiet=quiet)
        raise error
    if not valid_rulesets:
        error = NoValidRulesetsError(rulesets)
        _report_invalid(str(error), channel, quiet=quiet)
        raise error

    jre_path = _anchor(settings.jre_path, root) if settings.jre_path else None
    return RunConfiguration(
        workspace_root=root,
        executable_path=executable,
        jre_path=jre_path,
        rulesets=tuple(valid_rulesets),
        additional_class_paths=tuple(_anchor(entry, root) for entry in settings.additional_class_paths),
        enable_cache=settings.enable_cache,
        cache_path=root / CACHE_DIR_NAME,
        error_threshold=settings.priority_error_threshold,
        warn_threshold=settings.priority_warn_threshold,
        command_buffer_size=settings.command_buffer_size,
        debounce_interval_ms=settings.on_file_change_debounce,
    )


__all__ = [
    "BUNDLED_PMD_HOME",
    "BUNDLED_RULESET",
    "PMD_HOME_ENV",
    "build_run_configuration",
    "resolve_executable_path",
    "resolve_ruleset_path",
    "resolve_rulesets",
]
