# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration inspection commands."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer

from ..config import build_run_configuration, load_settings
from ..config.models import PmdPlusSettings, RunConfiguration
from ..errors import ConfigError, ConfigurationError
from .shared import EXIT_CONFIGURATION, CLIError, build_cli_logger

config_app = typer.Typer(help="Inspect and validate PMD+ settings.", no_args_is_help=True)


def _load(root: Path, config_file: Path | None) -> PmdPlusSettings:
    try:
        return load_settings(root, config_file=config_file)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_CONFIGURATION) from exc


def render_config_payload(
    settings: PmdPlusSettings,
    run_config: RunConfiguration | None,
    error: str | None,
) -> dict[str, Any]:
    """Return the JSON payload printed by ``config show``."""

    return {
        "settings": settings.to_dict(),
        "run_configuration": run_config.model_dump(mode="json") if run_config is not None else None,
        "error": error,
    }


@config_app.command("show")
def config_show(
    root: Path = typer.Option(Path.cwd(), "--root", "-r", help="Workspace root."),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Settings file replacing .pmdplus.toml."),
) -> None:
    """Print the effective settings and resolved run configuration as JSON."""

    logger = build_cli_logger(emoji=False)
    resolved_root = root.expanduser().resolve()
    try:
        settings = _load(resolved_root, config_file)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    run_config: RunConfiguration | None = None
    error: str | None = None
    try:
        run_config = asyncio.run(build_run_configuration(settings, workspace_root=resolved_root, quiet=True))
    except ConfigurationError as exc:
        error = str(exc)
    logger.echo(json.dumps(render_config_payload(settings, run_config, error), indent=2, sort_keys=True))


@config_app.command("validate")
def config_validate(
    root: Path = typer.Option(Path.cwd(), "--root", "-r", help="Workspace root."),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Settings file replacing .pmdplus.toml."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in output."),
) -> None:
    """Check that the PMD installation and at least one ruleset are usable."""

    logger = build_cli_logger(emoji=emoji)
    resolved_root = root.expanduser().resolve()
    try:
        settings = _load(resolved_root, config_file)
        run_config = asyncio.run(build_run_configuration(settings, workspace_root=resolved_root))
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    except ConfigurationError as exc:
        raise typer.Exit(code=EXIT_CONFIGURATION) from exc
    logger.ok(f"PMD+ configuration is valid ({len(run_config.rulesets)} ruleset(s)).")


__all__ = ["config_app", "config_show", "config_validate", "render_config_payload"]
