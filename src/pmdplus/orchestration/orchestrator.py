# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Coordinate validation, PMD execution, parsing and diagnostic commits."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Protocol

from ..cancellation import CancellationToken
from ..config.models import PmdPlusSettings, RunConfiguration
from ..config.validator import build_run_configuration
from ..diagnostics.store import DiagnosticStore
from ..errors import ConfigError, ConfigurationError, PmdPlusError, RunCancelledError
from ..models import DiagnosticBatch, RunOutcome, RunState
from ..output import OutputChannel
from ..parsers.csv_results import PmdCsvResultParser
from ..process import PmdProcessRunner, ProcessRunner
from ..status import StatusIndicator
from .registry import RunRegistry

LOGGER: Final[logging.Logger] = logging.getLogger(__name__)

HEADER_RULE: Final[str] = "=================="


class ResultParser(Protocol):
    """Turn raw PMD output into a diagnostic batch."""

    async def parse(self, raw_text: str, config: RunConfiguration) -> DiagnosticBatch:
        """Return diagnostics keyed by file."""
        ...


class ProgressSink(Protocol):
    """Receive progress updates while diagnostics are committed."""

    def report(self, *, message: str | None = None, increment: float | None = None) -> None:
        """Record a progress message and/or a percentage increment."""
        ...


@dataclass(slots=True)
class OrchestratorHooks:
    """Optional callbacks observing the orchestrator lifecycle."""

    before_run: Callable[[Path], None] | None = None
    after_commit: Callable[[str, int], None] | None = None
    after_run: Callable[[RunOutcome], None] | None = None
    on_error: Callable[[Path, PmdPlusError], None] | None = None


@dataclass(slots=True)
class RunContext:
    """State carried through a single run."""

    target: Path
    config: RunConfiguration
    token: CancellationToken
    outcome: RunOutcome
    cancelled: bool = False
    _unsubscribe: Callable[[], None] | None = field(default=None, repr=False)

    def observe(self) -> None:
        """Mirror the run token into :attr:`cancelled`."""

        self._unsubscribe = self.token.on_cancellation_requested(self._mark_cancelled)

    def release(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _mark_cancelled(self) -> None:
        self.cancelled = True


class Orchestrator:
    """Run PMD against a target and keep the diagnostic store in sync."""

    def __init__(
        self,
        settings: PmdPlusSettings,
        *,
        workspace_root: Path,
        store: DiagnosticStore,
        status: StatusIndicator,
        channel: OutputChannel | None = None,
        runner: ProcessRunner | None = None,
        parser: ResultParser | None = None,
        hooks: OrchestratorHooks | None = None,
        registry: RunRegistry | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Create an orchestrator with the supplied collaborators.

        Args:
            settings: Settings snapshot used for new runs.
            workspace_root: Workspace directory anchoring relative paths.
            store: Diagnostic store written by commits and clears.
            status: Status indicator reflecting run progress.
            channel: Output channel receiving operator logs.
            runner: Process runner; defaults to :class:`PmdProcessRunner`.
            parser: Result parser; defaults to :class:`PmdCsvResultParser`.
            hooks: Optional lifecycle callbacks.
            registry: Per-target run registry; one is created when omitted.
            env: Environment consulted while validating the configuration.
        """

        self._settings = settings
        self._workspace_root = workspace_root.expanduser().resolve()
        self._store = store
        self._status = status
        self._channel = channel or OutputChannel()
        self._runner = runner or PmdProcessRunner(channel=self._channel)
        self._parser = parser or PmdCsvResultParser(channel=self._channel)
        self._hooks = hooks or OrchestratorHooks()
        self._registry = registry or RunRegistry()
        self._env = env

    @property
    def settings(self) -> PmdPlusSettings:
        return self._settings

    @property
    def workspace_root(self) -> Path:
        return self._workspace_root

    @property
    def registry(self) -> RunRegistry:
        return self._registry

    def update_settings(self, settings: PmdPlusSettings) -> None:
        """Use ``settings`` for runs started from now on."""

        self._settings = settings

    def resolve_target(self, target: Path | str) -> Path:
        """Return ``target`` as an absolute path anchored at the workspace."""

        candidate = Path(target).expanduser()
        if not candidate.is_absolute():
            candidate = self._workspace_root / candidate
        return candidate.resolve()

    async def run_workspace(
        self,
        *,
        progress: ProgressSink | None = None,
        token: CancellationToken | None = None,
    ) -> RunOutcome:
        """Analyse the entire workspace."""

        return await self.run(self._workspace_root, progress=progress, token=token)

    async def run(
        self,
        target: Path | str,
        *,
        progress: ProgressSink | None = None,
        token: CancellationToken | None = None,
    ) -> RunOutcome:
        """Analyse ``target`` and commit the resulting diagnostics.

        Runner and parser failures end with the target's diagnostics cleared
        and the status reset; they are reported through the output channel,
        the module logger and :attr:`OrchestratorHooks.on_error` instead of
        being raised.

        Args:
            target: File or directory to analyse.
            progress: Optional sink receiving commit progress.
            token: Optional cancellation signal for this run.

        Returns:
            RunOutcome: Summary of what the run did.

        Raises:
            ConfigurationError: If the settings do not describe a runnable
                configuration. Existing diagnostics are left untouched.
        """

        resolved = self.resolve_target(target)
        settings = self._settings
        async with self._registry.acquire(resolved, token) as run_token:
            outcome = RunOutcome(target=resolved)
            if run_token.is_cancellation_requested:
                outcome.cancelled = True
                return self._finish(outcome)
            if self._hooks.before_run is not None:
                self._hooks.before_run(resolved)

            outcome.state = RunState.VALIDATING
            try:
                config = await build_run_configuration(
                    settings,
                    workspace_root=self._workspace_root,
                    channel=self._channel,
                    env=self._env,
                )
            except (ConfigurationError, ConfigError) as exc:
                outcome.state = RunState.IDLE
                outcome.error = str(exc)
                raise

            context = RunContext(target=resolved, config=config, token=run_token, outcome=outcome)
            context.observe()
            try:
                await self._execute(context, progress)
            finally:
                context.release()
            return self._finish(outcome)

    async def _execute(self, context: RunContext, progress: ProgressSink | None) -> None:
        outcome = context.outcome
        outcome.state = RunState.RUNNING
        self._status.thinking()
        self._log_header(context.target)
        try:
            raw_output = await self._runner.execute(context.target, context.config, context.token)
            batch = await self._parser.parse(raw_output, context.config)
        except RunCancelledError:
            outcome.cancelled = True
            self._status.ok()
            return
        except PmdPlusError as exc:
            self._report_failure(context, exc)
            self._clear(context)
            return

        if context.cancelled:
            outcome.cancelled = True
            self._status.ok()
            return
        if batch:
            await self._commit(context, batch, progress)
        else:
            self._clear(context)

    async def _commit(self, context: RunContext, batch: DiagnosticBatch, progress: ProgressSink | None) -> None:
        outcome = context.outcome
        outcome.state = RunState.COMMITTING
        self._status.errors()
        if progress is not None:
            progress.report(message=f"PMD+ is processing {len(batch)} issues. ")
        increment = 100 / len(batch)
        for filename, diagnostics in batch.items():
            if context.cancelled:
                outcome.cancelled = True
                self._channel.append_line(
                    f"PMD+ run for {context.target} was cancelled after {len(outcome.committed_files)} file(s).",
                )
                return
            if progress is not None:
                progress.report(increment=increment)
            self._store.set(filename, diagnostics)
            outcome.committed_files.append(filename)
            outcome.issue_count += len(diagnostics)
            if self._hooks.after_commit is not None:
                self._hooks.after_commit(filename, len(diagnostics))
            # Yield so cancellation requested by other tasks is observed between files.
            await asyncio.sleep(0)

    def _clear(self, context: RunContext) -> None:
        context.outcome.state = RunState.CLEARING
        self._store.delete(str(context.target))
        self._status.ok()

    def _report_failure(self, context: RunContext, exc: PmdPlusError) -> None:
        context.outcome.error = str(exc)
        self._channel.append_line(f"PMD+ encountered an error while analysing {context.target}: {exc}")
        LOGGER.warning("PMD+ run for %s failed: %s", context.target, exc, exc_info=exc)
        if self._hooks.on_error is not None:
            self._hooks.on_error(context.target, exc)

    def _finish(self, outcome: RunOutcome) -> RunOutcome:
        if self._hooks.after_run is not None:
            self._hooks.after_run(outcome)
        return outcome

    def _log_header(self, target: Path) -> None:
        self._channel.append_line(
            f" {HEADER_RULE} Starting PMD+ analysis of {HEADER_RULE} \n {HEADER_RULE} {target} {HEADER_RULE} ",
        )


__all__ = [
    "Orchestrator",
    "OrchestratorHooks",
    "ProgressSink",
    "ResultParser",
    "RunContext",
]
