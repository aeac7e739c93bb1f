# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across the PMD+ analysis pipeline."""

from __future__ import annotations

from pathlib import Path


class PmdPlusError(Exception):
    """Base class for every error raised by the analysis pipeline."""


class ConfigError(PmdPlusError):
    """Raised when a settings document cannot be read or validated."""


class ConfigurationError(PmdPlusError):
    """Raised when a run configuration fails validation before execution."""


class NoValidRulesetsError(ConfigurationError):
    """Raised when none of the configured rulesets exist on disk."""

    def __init__(self, checked: tuple[Path, ...] = ()) -> None:
        """Initialise the error with the rulesets that were rejected.

        Args:
            checked: Ruleset paths that failed the existence check.
        """

        super().__init__("PMD+ could not find any valid rulesets in the configuration.")
        self.checked = checked


class ExecutableNotFoundError(ConfigurationError):
    """Raised when the PMD installation directory cannot be found."""

    def __init__(self, path: Path) -> None:
        """Initialise the error with the directory that was checked.

        Args:
            path: PMD installation directory that does not exist.
        """

        super().__init__(f"PMD+ could not find or access the PMD executable at {path}")
        self.path = path


class ProcessSpawnError(PmdPlusError):
    """Raised when the PMD process cannot be started at all."""

    def __init__(self, command: tuple[str, ...], reason: str) -> None:
        super().__init__(f"PMD+ failed to start '{command[0] if command else '<empty>'}': {reason}")
        self.command = command
        self.reason = reason


class ExecutionError(PmdPlusError):
    """Raised when PMD ran but its outcome cannot be used."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        """Initialise the error with process metadata.

        Args:
            message: Human-readable description pointing the user at the logs.
            returncode: Exit status reported by the process, if any.
            stderr: Captured standard error stream.
        """

        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class RulesetLoadError(ExecutionError):
    """Raised when PMD reports that a ruleset could not be loaded."""


class GenericExecutionError(ExecutionError):
    """Raised when PMD fails and produced no output at all."""


class BufferOverflowError(ExecutionError):
    """Raised when PMD output exceeds the configured buffer ceiling."""


class ParseError(PmdPlusError):
    """Raised when PMD output cannot be tokenised as CSV."""


class RunCancelledError(PmdPlusError):
    """Raised when a run is cancelled while PMD is still executing."""


__all__ = [
    "BufferOverflowError",
    "ConfigError",
    "ConfigurationError",
    "ExecutableNotFoundError",
    "ExecutionError",
    "GenericExecutionError",
    "NoValidRulesetsError",
    "ParseError",
    "PmdPlusError",
    "ProcessSpawnError",
    "RulesetLoadError",
    "RunCancelledError",
]
