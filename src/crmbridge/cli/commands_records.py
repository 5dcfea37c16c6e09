"""Record commands.

- records get: Fetch one record by id
- records list: Fetch several records by id
- records search: Search records by field values or built-in keys
- records delete: Delete records by id
- records tag: Add tags to records
"""

from __future__ import annotations

from typing import Dict, List, Optional

import typer
from typer import Context, Typer

from crmbridge.cli.app import app, echo_json, fail, get_state
from crmbridge.errors import CRMError

records_app = Typer(help="Record commands")
app.add_typer(records_app, name="records")


def _parse_pairs(pairs: List[str]) -> Dict[str, str]:
    criteria: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            typer.echo(f"❌ Expected key=value, got: {pair}", err=True)
            raise typer.Exit(1)
        criteria[key.strip()] = value
    return criteria


def _engine(ctx: Context, module: str):
    try:
        return get_state(ctx).client().records(module)
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


@records_app.command(name="get")
def records_get(
    ctx: Context,
    module: str = typer.Argument(..., help="Module name, e.g. Leads"),
    record_id: str = typer.Argument(..., help="Record id"),
):
    """Fetch one record.

    Examples:
        crmbridge records get Leads 1234567890
    """
    engine = _engine(ctx, module)
    try:
        record = engine.find(record_id)
    except CRMError as e:
        fail(e)
    echo_json(record.model_dump())


@records_app.command(name="list")
def records_list(
    ctx: Context,
    module: str = typer.Argument(..., help="Module name, e.g. Leads"),
    ids: List[str] = typer.Argument(..., help="Record ids"),
):
    """Fetch several records by id (batched 100 per request)."""
    engine = _engine(ctx, module)
    try:
        records = engine.find_all(ids)
    except CRMError as e:
        fail(e)
    echo_json([record.model_dump() for record in records])


@records_app.command(name="search")
def records_search(
    ctx: Context,
    module: str = typer.Argument(..., help="Module name, e.g. Leads"),
    where: List[str] = typer.Option([], "--where", "-w", help="Field criterion as key=value"),
    email: Optional[str] = typer.Option(None, "--email", help="Search by email"),
    phone: Optional[str] = typer.Option(None, "--phone", help="Search by phone"),
    word: Optional[str] = typer.Option(None, "--word", help="Full-text search word"),
):
    """Search records.

    Examples:
        crmbridge records search Leads --email jane@example.com
        crmbridge records search Leads -w last_name=Burns -w company=Acme
    """
    criteria = _parse_pairs(where)
    for key, value in (("email", email), ("phone", phone), ("word", word)):
        if value is not None:
            criteria[key] = value
    if not criteria:
        typer.echo("❌ Give at least one --where, --email, --phone or --word", err=True)
        raise typer.Exit(1)

    engine = _engine(ctx, module)
    try:
        records = engine.where(**criteria)
    except CRMError as e:
        fail(e)
    echo_json([record.model_dump() for record in records])


@records_app.command(name="delete")
def records_delete(
    ctx: Context,
    module: str = typer.Argument(..., help="Module name, e.g. Leads"),
    ids: List[str] = typer.Argument(..., help="Record ids"),
):
    """Delete records by id (batched 100 per request)."""
    engine = _engine(ctx, module)
    try:
        results = engine.delete_all(ids)
    except CRMError as e:
        fail(e)
    echo_json(results)


@records_app.command(name="tag")
def records_tag(
    ctx: Context,
    module: str = typer.Argument(..., help="Module name, e.g. Leads"),
    ids: List[str] = typer.Argument(..., help="Record ids"),
    tags: List[str] = typer.Option(..., "--tag", "-t", help="Tag name (repeatable)"),
):
    """Add tags to records."""
    engine = _engine(ctx, module)
    try:
        results = engine.associate_tags(ids, tags)
    except CRMError as e:
        fail(e)
    echo_json(results)
