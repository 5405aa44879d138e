from __future__ import annotations

import logging

import typer

from formbuilder.autosave import is_fresh
from formbuilder.config import Settings
from formbuilder.errors import PersistenceError
from formbuilder.history import EditHistory
from formbuilder.storage import init_session_store
from formbuilder.utils import now_utc

cli = typer.Typer(add_completion=False)


def run_server(host: str | None, port: int | None) -> None:
    import uvicorn

    from formbuilder.app import create_app

    settings = Settings()
    resolved_host = host or settings.host
    resolved_port = port if port is not None else settings.port
    uvicorn.run(create_app(settings), host=resolved_host, port=resolved_port)


@cli.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
    log_level: str = typer.Option("info", help="Logging level"),
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"host": host, "port": port}
    if ctx.invoked_subcommand is None:
        run_server(host, port)


@cli.command()
def run(
    ctx: typer.Context,
    host: str | None = typer.Option(None, help="Address to bind"),
    port: int | None = typer.Option(None, help="Port to bind"),
) -> None:
    base = ctx.obj or {}
    resolved_host = host or base.get("host")
    resolved_port = port if port is not None else base.get("port")
    run_server(resolved_host, resolved_port)


@cli.command("inspect-session")
def inspect_session(key: str = typer.Argument(..., help="Session key, e.g. form-builder-new-form")) -> None:
    """Print a summary of a stored editor session."""
    settings = Settings()
    store = init_session_store(settings)
    try:
        blob = store.load(key)
    except PersistenceError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)
    if not blob:
        typer.echo(f"no session stored under {key}", err=True)
        raise typer.Exit(code=1)

    history = EditHistory.from_record(blob)
    current = history.current
    fresh = is_fresh(blob, now_utc())
    typer.echo(f"form:      {current.form_name}")
    typer.echo(f"fields:    {len(current.fields)}")
    for field in current.fields:
        marker = "*" if field.required else " "
        typer.echo(f"  {marker} {field.type:<9} {field.label}")
    typer.echo(f"history:   {history.cursor + 1}/{len(history)}")
    typer.echo(f"saved:     {blob.get('lastSaved')} ({'fresh' if fresh else 'stale'})")


@cli.command("sessions")
def list_sessions() -> None:
    """List the keys of stored editor sessions."""
    store = init_session_store(Settings())
    try:
        keys = store.keys()
    except PersistenceError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)
    for key in keys:
        typer.echo(key)


@cli.command("discard-session")
def discard_session(key: str = typer.Argument(..., help="Session key to remove")) -> None:
    store = init_session_store(Settings())
    try:
        store.delete(key)
    except PersistenceError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"discarded {key}")
