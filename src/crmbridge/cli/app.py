"""CLI app setup and common utilities.

This module creates the main Typer app and provides the shared state
used by all commands: the resolved Config and a lazily built client.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import typer
from typer import Context, Typer

from crmbridge.client import CRMClient
from crmbridge.config import Config

# Initialize Typer app
app = Typer(
    name="crmbridge",
    help="Command-line access to CRM records through crmbridge.",
)


class CLIState:
    """Shared state object for CLI commands.

    Tests pass a pre-built state (with an offline transport) through
    ``CliRunner.invoke(..., obj=CLIState(...))``.
    """

    def __init__(self, config: Optional[Config] = None, transport: Optional[Any] = None):
        self.config = config
        self.transport = transport
        self._client: Optional[CRMClient] = None

    def client(self) -> CRMClient:
        if self._client is None:
            self._client = CRMClient.from_config(self.config, transport=self.transport)
        return self._client


def get_state(ctx: Context) -> CLIState:
    state = ctx.find_object(CLIState)
    if state is None or state.config is None:
        raise RuntimeError("CLI state not initialized - this is a bug")
    return state


def echo_json(value: Any) -> None:
    typer.echo(json.dumps(value, indent=2, default=str))


def fail(error: Exception) -> None:
    """Print a one-line error and exit with status 1."""
    typer.echo(f"❌ {type(error).__name__}: {error}", err=True)
    raise typer.Exit(1)


@app.callback()
def init_app(
    ctx: Context,
    debug: bool = typer.Option(False, "--debug", help="Log every HTTP exchange"),
):
    """Resolve configuration from the environment and set up logging."""
    state = ctx.ensure_object(CLIState)
    if state.config is None:
        state.config = Config.from_env()
    if debug:
        state.config.debug = True

    level = "DEBUG" if state.config.debug else state.config.log_level
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO))
