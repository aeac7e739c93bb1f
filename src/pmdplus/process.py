# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build and execute PMD command lines with bounded, cancellable I/O."""

from __future__ import annotations

import asyncio
import codecs
import json
import os
import shlex
import sys

# Bandit: subprocess usage is intentional; arguments are passed as a list and
# never routed through a shell.
from asyncio.subprocess import DEVNULL, PIPE, Process  # nosec B404
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Literal, Protocol

from .cancellation import CancellationToken
from .config.models import RunConfiguration
from .errors import (
    BufferOverflowError,
    GenericExecutionError,
    ProcessSpawnError,
    RulesetLoadError,
    RunCancelledError,
)
from .output import OutputChannel

PMD_LAUNCHER: Final[str] = "pmd"
WINDOWS_LAUNCHER: Final[str] = "pmd.bat"
WINDOWS_PLATFORM: Final[str] = "win32"
SUCCESS_EXIT_CODES: Final[frozenset[int]] = frozenset({0, 4})
RULESET_FAILURE_MARKER: Final[str] = "Cannot load ruleset"
READ_CHUNK_SIZE: Final[int] = 64 * 1024
CLASSPATH_ENV: Final[str] = "CLASSPATH"
PATH_ENV: Final[str] = "PATH"
WINDOWS_PATH_ENV: Final[str] = "Path"

StreamName = Literal["stdout", "stderr"]


class ProcessRunner(Protocol):
    """Execute PMD against a target and return its raw CSV output."""

    async def execute(
        self,
        target: Path,
        config: RunConfiguration,
        token: CancellationToken | None = None,
    ) -> str:
        """Run PMD for ``target`` and return stdout."""
        ...


def _is_windows(platform: str) -> bool:
    return platform == WINDOWS_PLATFORM


def classpath_separator(platform: str = sys.platform) -> str:
    """Return the path-list separator used for ``CLASSPATH`` on ``platform``."""

    return ";" if _is_windows(platform) else ":"


def launcher_path(config: RunConfiguration, *, platform: str = sys.platform) -> Path:
    """Return the PMD launcher script inside the configured installation."""

    name = WINDOWS_LAUNCHER if _is_windows(platform) else PMD_LAUNCHER
    return config.executable_path / "bin" / name


def build_command(target: Path, config: RunConfiguration, *, platform: str = sys.platform) -> list[str]:
    """Return the PMD argument vector for analysing ``target``.

    Every path is a separate list element (rulesets are comma-joined into a
    single element), so spaces survive without any manual quoting.

    Args:
        target: File or directory handed to PMD via ``-d``.
        config: Validated run configuration.
        platform: Platform identifier, defaults to :data:`sys.platform`.

    Returns:
        list[str]: Command suitable for :func:`asyncio.create_subprocess_exec`.
    """

    command = [str(launcher_path(config, platform=platform)), "check", "--no-progress"]
    if config.enable_cache:
        command.extend(["--cache", str(config.cache_path)])
    else:
        command.append("--no-cache")
    command.extend(["--format", "csv", "-d", str(target)])
    command.extend(["-R", ",".join(str(ruleset) for ruleset in config.rulesets)])
    return command


def environment_overrides(
    config: RunConfiguration,
    *,
    base_env: Mapping[str, str],
    platform: str = sys.platform,
) -> dict[str, str]:
    """Return the environment variables PMD+ sets on top of ``base_env``.

    ``CLASSPATH`` always holds the workspace wildcard followed by the
    additional class path entries. With a custom JRE, ``<jre>/bin`` is put in
    front of the inherited ``PATH``; on Windows the existing variable is
    matched case-insensitively so ``Path`` is not duplicated.
    """

    classpath_entries = [str(config.workspace_root / "*"), *(str(entry) for entry in config.additional_class_paths)]
    overrides = {CLASSPATH_ENV: classpath_separator(platform).join(classpath_entries)}
    if config.jre_path is not None:
        path_key = PATH_ENV
        if _is_windows(platform):
            path_key = next((key for key in base_env if key.upper() == PATH_ENV), WINDOWS_PATH_ENV)
        inherited = base_env.get(path_key, "")
        jre_bin = str(config.jre_path / "bin")
        separator = classpath_separator(platform)
        overrides[path_key] = f"{jre_bin}{separator}{inherited}" if inherited else jre_bin
    return overrides


def build_environment(
    config: RunConfiguration,
    *,
    base_env: Mapping[str, str] | None = None,
    platform: str = sys.platform,
) -> dict[str, str]:
    """Return the full environment for the PMD process."""

    inherited = dict(os.environ if base_env is None else base_env)
    inherited.update(environment_overrides(config, base_env=inherited, platform=platform))
    return inherited


def interpret_exit(returncode: int | None, stdout: str, stderr: str) -> str:
    """Apply the PMD exit-code contract to a finished process.

    Args:
        returncode: Exit status reported by PMD.
        stdout: Collected standard output.
        stderr: Collected standard error.

    Returns:
        str: ``stdout`` for exit codes 0 and 4, and for other codes when PMD
        still produced output.

    Raises:
        RulesetLoadError: If PMD failed and stderr reports a ruleset problem.
        GenericExecutionError: If PMD failed without producing any output.
    """

    if returncode in SUCCESS_EXIT_CODES:
        return stdout
    if RULESET_FAILURE_MARKER in stderr:
        raise RulesetLoadError(
            "PMD+ failed to execute PMD due to a problem with a Ruleset. Please read the plugin logs for details.",
            returncode=returncode,
            stderr=stderr,
        )
    if not stdout:
        raise GenericExecutionError(
            "PMD+ failed to execute PMD. Please read the plugin logs for details.",
            returncode=returncode,
            stderr=stderr,
        )
    return stdout


@dataclass(slots=True)
class _StreamCapture:
    """Accumulate both process streams under a shared byte ceiling."""

    limit: int
    channel: OutputChannel
    size: int = 0
    overflowed: bool = False
    chunks: dict[str, list[str]] = field(default_factory=lambda: {"stdout": [], "stderr": []})
    decoders: dict[str, codecs.IncrementalDecoder] = field(
        default_factory=lambda: {
            name: codecs.getincrementaldecoder("utf-8")(errors="replace") for name in ("stdout", "stderr")
        },
    )

    def feed(self, name: StreamName, data: bytes, *, final: bool = False) -> None:
        if self.overflowed:
            return
        self.size += len(data)
        if self.size > self.limit:
            self.overflowed = True
            raise BufferOverflowError(
                f"PMD+ output exceeded the configured buffer of {self.limit // (1024 * 1024)} MiB.",
            )
        text = self.decoders[name].decode(data, final=final)
        if text:
            self.channel.append_line(f"{name}: {text}")
            self.chunks[name].append(text)

    def text(self, name: StreamName) -> str:
        return "".join(self.chunks[name])


def _terminate(process: Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass


async def _discard(stream: asyncio.StreamReader | None) -> None:
    if stream is None:
        return
    while await stream.read(READ_CHUNK_SIZE):
        pass


class PmdProcessRunner:
    """Run PMD as a subprocess, streaming its output into an :class:`OutputChannel`."""

    def __init__(
        self,
        *,
        channel: OutputChannel | None = None,
        base_env: Mapping[str, str] | None = None,
        platform: str = sys.platform,
    ) -> None:
        """Create a runner.

        Args:
            channel: Channel receiving diagnostic info and verbatim output.
            base_env: Environment inherited by PMD; defaults to ``os.environ``.
            platform: Platform identifier used for launcher and env rules.
        """

        self._channel = channel or OutputChannel()
        self._base_env = base_env
        self._platform = platform

    async def execute(
        self,
        target: Path,
        config: RunConfiguration,
        token: CancellationToken | None = None,
    ) -> str:
        """Run PMD for ``target`` and return its CSV output.

        Args:
            target: File or directory to analyse.
            config: Validated run configuration.
            token: Optional cancellation signal; firing it kills PMD.

        Returns:
            str: Collected standard output.

        Raises:
            ProcessSpawnError: If the launcher cannot be started.
            BufferOverflowError: If the output exceeds the configured ceiling.
            RulesetLoadError: If PMD reports a ruleset loading failure.
            GenericExecutionError: If PMD fails without output.
            RunCancelledError: If ``token`` fires before PMD exits.
        """

        command = build_command(target, config, platform=self._platform)
        base_env = dict(os.environ if self._base_env is None else self._base_env)
        overrides = environment_overrides(config, base_env=base_env, platform=self._platform)
        self._channel.append_line(f"Diagnostic Info: Python Version: {sys.version.split()[0]}")
        self._channel.append_line(f"Diagnostic Info: Env overrides: {json.dumps(overrides)}")
        self._channel.append_line(f"Diagnostic Info: PMD cmd: {shlex.join(command)}")

        if token is not None and token.is_cancellation_requested:
            raise RunCancelledError(f"PMD+ run for {target} was cancelled before PMD started.")

        try:
            # Bandit: argument vector built by build_command, no shell expansion.
            process = await asyncio.create_subprocess_exec(  # nosec B603
                *command,
                env=build_environment(config, base_env=base_env, platform=self._platform),
                stdin=DEVNULL,
                stdout=PIPE,
                stderr=PIPE,
            )
        except OSError as exc:
            self._channel.append_line(f"PMD+ encountered an error: {exc}")
            raise ProcessSpawnError(tuple(command), str(exc)) from exc

        capture = _StreamCapture(limit=config.buffer_limit_bytes, channel=self._channel)
        returncode = await self._wait_for_exit(process, capture, token, target)
        stdout = capture.text("stdout")
        stderr = capture.text("stderr")
        if returncode not in SUCCESS_EXIT_CODES:
            self._channel.append_line(f"PMD+ got a failed error code: {returncode}")
        return interpret_exit(returncode, stdout, stderr)

    async def _wait_for_exit(
        self,
        process: Process,
        capture: _StreamCapture,
        token: CancellationToken | None,
        target: Path,
    ) -> int | None:
        """Wait for ``process`` to finish or for ``token`` to fire."""

        work = asyncio.ensure_future(self._collect(process, capture))
        cancel_waiter = asyncio.ensure_future(token.wait()) if token is not None else None
        waiters = {work} if cancel_waiter is None else {work, cancel_waiter}
        try:
            done, _pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            _terminate(process)
            work.cancel()
            raise
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()

        if work not in done:
            _terminate(process)
            work.cancel()
            await asyncio.gather(work, return_exceptions=True)
            await self._reap(process)
            self._channel.append_line(f"PMD+ run for {target} was cancelled; PMD was terminated.")
            raise RunCancelledError(f"PMD+ run for {target} was cancelled.")
        try:
            return work.result()
        except BufferOverflowError as exc:
            self._channel.append_line(str(exc))
            raise

    async def _collect(self, process: Process, capture: _StreamCapture) -> int | None:
        pumps = [
            asyncio.ensure_future(self._pump(process.stdout, "stdout", capture)),
            asyncio.ensure_future(self._pump(process.stderr, "stderr", capture)),
        ]
        try:
            await asyncio.gather(*pumps)
        except BufferOverflowError:
            for pump in pumps:
                pump.cancel()
            _terminate(process)
            await asyncio.gather(*pumps, return_exceptions=True)
            await self._reap(process)
            raise
        return await process.wait()

    @staticmethod
    async def _reap(process: Process) -> None:
        """Discard unread output of a killed process and wait for it to exit.

        The pipe transports only close once both streams reach EOF, and
        ``Process.wait`` does not return before that.
        """

        await asyncio.gather(_discard(process.stdout), _discard(process.stderr))
        await process.wait()

    @staticmethod
    async def _pump(stream: asyncio.StreamReader | None, name: StreamName, capture: _StreamCapture) -> None:
        if stream is None:
            return
        while chunk := await stream.read(READ_CHUNK_SIZE):
            capture.feed(name, chunk)
        capture.feed(name, b"", final=True)


__all__ = [
    "PMD_LAUNCHER",
    "RULESET_FAILURE_MARKER",
    "SUCCESS_EXIT_CODES",
    "PmdProcessRunner",
    "ProcessRunner",
    "build_command",
    "build_environment",
    "classpath_separator",
    "environment_overrides",
    "interpret_exit",
    "launcher_path",
]
