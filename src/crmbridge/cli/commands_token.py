"""Token commands.

- token refresh: Exchange the configured refresh token for a new access token
"""

from __future__ import annotations

import typer
from typer import Context, Typer

from crmbridge.auth import TokenAuthority
from crmbridge.cli.app import app, echo_json, fail, get_state
from crmbridge.errors import CRMError

token_app = Typer(help="OAuth token commands")
app.add_typer(token_app, name="token")


@token_app.command(name="refresh")
def token_refresh(ctx: Context):
    """Exchange CRM_REFRESH_TOKEN for a new access token and print the grant.

    Examples:
        crmbridge token refresh
    """
    state = get_state(ctx)
    if not state.config.refresh_token:
        typer.echo("❌ No refresh token configured (set CRM_REFRESH_TOKEN)", err=True)
        raise typer.Exit(1)

    authority = TokenAuthority(state.config)
    if state.transport is not None:
        authority.http_client.transport = state.transport

    try:
        grant = authority.refresh(state.config.refresh_token)
    except CRMError as e:
        fail(e)

    echo_json(grant.model_dump())
