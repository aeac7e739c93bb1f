# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

import typer

from .check import check_command
from .config_cmd import config_app

app = typer.Typer(help="Run PMD static analysis and report diagnostics.", no_args_is_help=True)
app.command("check")(check_command)
app.add_typer(config_app, name="config")

__all__ = ["app"]
