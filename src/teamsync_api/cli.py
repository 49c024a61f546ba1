"""`teamsync-api` command implementations."""

from __future__ import annotations

import asyncio

import typer
import uvicorn
from sqlalchemy.exc import SQLAlchemyError

from teamsync_api.app.lifecycles import connect_database
from teamsync_api.common.logging import setup_logging
from teamsync_api.db import dispose_engine, get_sessionmaker
from teamsync_api.features.bootstrap import BootstrapError, BootstrapReport, run_bootstrap
from teamsync_api.settings import Settings, get_settings

app = typer.Typer(
    add_completion=False,
    invoke_without_command=True,
    help="TeamSync API CLI (start, bootstrap).",
)


def run_start(*, host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    settings = get_settings()
    host = host or settings.server_host
    port = port or settings.server_port

    typer.echo(f"Starting TeamSync API on http://{host}:{port}")
    uvicorn.run(
        "teamsync_api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.logging_level.lower(),
        log_config=None,
    )


async def _bootstrap_once(settings: Settings) -> BootstrapReport:
    try:
        await connect_database(settings)
        return await run_bootstrap(get_sessionmaker(settings), settings)
    finally:
        await dispose_engine()


def _echo_report(report: BootstrapReport) -> None:
    created = ", ".join(role.value for role in report.roles_created) or "-"
    existing = ", ".join(role.value for role in report.roles_existing) or "-"
    typer.echo(f"roles created:  {created}")
    typer.echo(f"roles existing: {existing}")
    typer.echo(f"admin created:  {'yes' if report.admin_created else 'no'}")
    typer.echo(f"admin user id:  {report.admin_user_id or '-'}")
    typer.echo(f"workspace id:   {report.workspace_id or '-'}")


def run_bootstrap_command() -> None:
    settings = get_settings()
    setup_logging(settings)
    try:
        report = asyncio.run(_bootstrap_once(settings))
    except BootstrapError as exc:
        typer.echo(f"error: bootstrap failed at {exc.stage}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except (RuntimeError, SQLAlchemyError) as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    _echo_report(report)


@app.callback()
def _main(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(name="start", help="Start the API server (migrates and seeds on startup).")
def start(
    host: str | None = typer.Option(
        None,
        "--host",
        help="Host/interface for the API server.",
        envvar="TEAMSYNC_SERVER_HOST",
    ),
    port: int | None = typer.Option(
        None,
        "--port",
        help="Port for the API server.",
        envvar="TEAMSYNC_SERVER_PORT",
        min=1,
        max=65535,
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        help="Reload on source changes (development only).",
    ),
) -> None:
    run_start(host=host, port=port, reload=reload)


@app.command(name="bootstrap", help="Apply migrations and seed roles and the admin identity.")
def bootstrap() -> None:
    run_bootstrap_command()


__all__ = ["app"]
