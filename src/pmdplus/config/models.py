# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Settings and run configuration models for PMD+."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from ..severity import DEFAULT_ERROR_THRESHOLD, DEFAULT_WARN_THRESHOLD
from ..workspace import DEFAULT_IGNORE_FILE

DEFAULT_COMMAND_BUFFER_MIB: Final[int] = 64
MIN_COMMAND_BUFFER_MIB: Final[int] = 1
DEFAULT_DEBOUNCE_MS: Final[int] = 3000
CACHE_DIR_NAME: Final[str] = ".pmdcache"
DEFAULT_IGNORED_MARKERS: Final[tuple[str, ...]] = (".sfdx",)


def _alias(name: str, camel: str) -> AliasChoices:
    return AliasChoices(name, camel)


class PmdPlusSettings(BaseModel):
    """User-controlled settings as read from configuration files.

    Keys may be spelled in snake_case or in the camelCase used by the editor
    settings (``priorityErrorThreshold`` and friends). Paths are kept as the
    user wrote them; resolution happens in
    :func:`pmdplus.config.validator.build_run_configuration`.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    rulesets: tuple[str, ...] = ()
    additional_class_paths: tuple[str, ...] = Field(
        default=(),
        validation_alias=_alias("additional_class_paths", "additionalClassPaths"),
    )
    path_to_pmd_executable: str = Field(
        default="",
        validation_alias=_alias("path_to_pmd_executable", "pathToPmdExecutable"),
    )
    enable_cache: bool = Field(default=True, validation_alias=_alias("enable_cache", "enableCache"))
    jre_path: str = Field(default="", validation_alias=_alias("jre_path", "jrePath"))
    priority_error_threshold: int = Field(
        default=DEFAULT_ERROR_THRESHOLD,
        validation_alias=_alias("priority_error_threshold", "priorityErrorThreshold"),
    )
    priority_warn_threshold: int = Field(
        default=DEFAULT_WARN_THRESHOLD,
        validation_alias=_alias("priority_warn_threshold", "priorityWarnThreshold"),
    )
    run_on_file_open: bool = Field(default=True, validation_alias=_alias("run_on_file_open", "runOnFileOpen"))
    run_on_file_save: bool = Field(default=True, validation_alias=_alias("run_on_file_save", "runOnFileSave"))
    run_on_file_change: bool = Field(
        default=False,
        validation_alias=_alias("run_on_file_change", "runOnFileChange"),
    )
    on_file_change_debounce: int = Field(
        default=DEFAULT_DEBOUNCE_MS,
        ge=0,
        validation_alias=_alias("on_file_change_debounce", "onFileChangeDebounce"),
    )
    command_buffer_size: int = Field(
        default=DEFAULT_COMMAND_BUFFER_MIB,
        validation_alias=_alias("command_buffer_size", "commandBufferSize"),
    )

    @classmethod
    def canonical_keys(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        """Return ``data`` with camelCase keys renamed to their field names."""

        aliases: dict[str, str] = {}
        for name, info in cls.model_fields.items():
            if isinstance(info.validation_alias, AliasChoices):
                aliases.update({choice: name for choice in info.validation_alias.choices if isinstance(choice, str)})
        return {aliases.get(key, key): value for key, value in data.items()}

    @field_validator("rulesets", "additional_class_paths", mode="before")
    @classmethod
    def _coerce_sequence(cls, value: Any) -> Any:
        """Allow a single string where a list of paths is expected."""

        if isinstance(value, str):
            return (value,)
        return value

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible representation of the settings."""

        return self.model_dump(mode="json")


class RunConfiguration(BaseModel):
    """Fully validated, immutable snapshot used for exactly one run.

    Instances are produced by
    :func:`pmdplus.config.validator.build_run_configuration`; the ruleset list
    is guaranteed non-empty and every path has already been checked.
    """

    model_config = ConfigDict(frozen=True)

    workspace_root: Path
    executable_path: Path
    jre_path: Path | None = None
    rulesets: tuple[Path, ...]
    additional_class_paths: tuple[Path, ...] = ()
    enable_cache: bool = True
    cache_path: Path
    error_threshold: int = DEFAULT_ERROR_THRESHOLD
    warn_threshold: int = DEFAULT_WARN_THRESHOLD
    command_buffer_size: int = DEFAULT_COMMAND_BUFFER_MIB
    debounce_interval_ms: int = DEFAULT_DEBOUNCE_MS
    ignore_file: str = DEFAULT_IGNORE_FILE
    ignored_markers: tuple[str, ...] = DEFAULT_IGNORED_MARKERS

    @field_validator("rulesets")
    @classmethod
    def _require_rulesets(cls, value: tuple[Path, ...]) -> tuple[Path, ...]:
        if not value:
            raise ValueError("a run configuration requires at least one ruleset")
        return value

    @property
    def buffer_limit_bytes(self) -> int:
        """Return the output ceiling in bytes, never below 1 MiB."""

        return max(self.command_buffer_size, MIN_COMMAND_BUFFER_MIB) * 1024 * 1024


__all__ = [
    "CACHE_DIR_NAME",
    "DEFAULT_COMMAND_BUFFER_MIB",
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_IGNORED_MARKERS",
    "MIN_COMMAND_BUFFER_MIB",
    "PmdPlusSettings",
    "RunConfiguration",
]
