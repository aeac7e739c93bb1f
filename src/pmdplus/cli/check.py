# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""``pmdplus check``: analyse a file or the whole workspace."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import typer

from ..config import load_settings
from ..diagnostics import InMemoryDiagnosticStore, diagnostics_to_json, dump_diagnostics
from ..errors import ConfigError, ConfigurationError, PmdPlusError
from ..logging import detect_tty, section
from ..models import RunOutcome
from ..orchestration import Orchestrator, OrchestratorHooks
from ..output import OutputChannel
from ..severity import Severity
from ..status import RichStatusRenderer, StatusIndicator
from .progress import progress_sink
from .shared import EXIT_CONFIGURATION, EXIT_EXECUTION, EXIT_ISSUES, CLIError, CLILogger, build_cli_logger


@dataclass(slots=True)
class CheckOptions:
    """Options collected from the ``check`` command line."""

    target: Path | None
    root: Path
    config_file: Path | None = None
    json_output: bool = False
    emoji: bool = True
    color: bool = True
    debug: bool = False


def _report_error(logger: CLILogger, errors: list[str]) -> Callable[[Path, PmdPlusError], None]:
    def _on_error(target: Path, exc: PmdPlusError) -> None:
        errors.append(str(exc))
        logger.debug(f"run failed target={target} error={type(exc).__name__}")

    return _on_error


def run_check(options: CheckOptions, logger: CLILogger) -> int:
    """Run one analysis and render its diagnostics.

    Returns:
        int: ``0`` when no error-severity diagnostics were committed,
        ``1`` otherwise.

    Raises:
        CLIError: If configuration or execution fails.
    """

    root = options.root.expanduser().resolve()
    try:
        settings = load_settings(root, config_file=options.config_file)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_CONFIGURATION) from exc

    interactive = not options.json_output
    channel = OutputChannel(sink=logger.debug)
    store = InMemoryDiagnosticStore()
    status = StatusIndicator(
        renderer=RichStatusRenderer(console=logger.console, color=options.color) if interactive else None,
        visible=interactive,
    )
    errors: list[str] = []
    orchestrator = Orchestrator(
        settings,
        workspace_root=root,
        store=store,
        status=status,
        channel=channel,
        hooks=OrchestratorHooks(on_error=_report_error(logger, errors)),
    )
    target = options.target if options.target is not None else root
    if interactive:
        logger.info(f"PMD+ is analysing {target}")

    with progress_sink(logger.console, enabled=interactive and options.color and detect_tty()) as progress:
        try:
            outcome: RunOutcome = asyncio.run(orchestrator.run(target, progress=progress))
        except ConfigurationError as exc:
            raise CLIError(str(exc), exit_code=EXIT_CONFIGURATION) from exc

    if errors:
        raise CLIError(f"PMD+ run failed: {errors[-1]}", exit_code=EXIT_EXECUTION)

    batch = dict(store.items())
    if options.json_output:
        logger.echo(diagnostics_to_json(batch))
    else:
        if len(store):
            section("PMD+ diagnostics", use_color=options.color)
        dump_diagnostics(store.all(), color=options.color, emoji=options.emoji)
        if outcome.issue_count:
            logger.warn(f"PMD+ found {outcome.issue_count} issue(s) in {len(outcome.committed_files)} file(s).")
        else:
            logger.ok("PMD+ found no issues.")
    return EXIT_ISSUES if store.count(Severity.ERROR) else 0


def check_command(
    target: Path | None = typer.Argument(None, help="File or directory to analyse (defaults to the workspace)."),
    root: Path = typer.Option(Path.cwd(), "--root", "-r", help="Workspace root."),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Settings file replacing .pmdplus.toml."),
    json_output: bool = typer.Option(False, "--json", help="Emit diagnostics as JSON."),
    emoji: bool = typer.Option(True, "--emoji/--no-emoji", help="Toggle emoji in output."),
    color: bool = typer.Option(True, "--color/--no-color", help="Toggle coloured output."),
    debug: bool = typer.Option(False, "--debug", help="Echo the PMD+ output channel."),
) -> None:
    """Run PMD against TARGET and print the resulting diagnostics."""

    logger = build_cli_logger(emoji=emoji, debug=debug, no_color=not color)
    options = CheckOptions(
        target=target,
        root=root,
        config_file=config_file,
        json_output=json_output,
        emoji=emoji,
        color=color,
        debug=debug,
    )
    try:
        exit_code = run_check(options, logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=exit_code)


__all__ = ["CheckOptions", "check_command", "run_check"]
