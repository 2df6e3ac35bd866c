"""Mini README: Entry point CLI for the Fundwise fund tracker.

Commands:
    * run - start the FastAPI application with uvicorn.
    * summary - print a fiscal year's totals from the stored ledger.

Host, port and the data directory default to ``FUNDWISE_*`` environment
variables (see ``fundwise.configuration``).
"""

from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from fundwise.configuration import get_settings
from fundwise.ledger import FundLedger, JsonFileRepository, LedgerError
from fundwise.logging_utils import configure_root_logger, level_for_environment

cli = typer.Typer(help="Launch and inspect the Fundwise fund tracker.")


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger(level_for_environment(settings.environment))

    # 0.0.0.0 is a bind address, browsers need a routable host.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting Fundwise on {effective_host}:{effective_port}.\n"
        f"Open your browser at http://{browser_host}:{effective_port}"
    )
    uvicorn.run(
        "fundwise.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def summary(year: Optional[str] = typer.Option(None, help="Fiscal year id, defaults to the latest.")) -> None:
    """Print opening balance, totals and current balance for a year."""

    settings = get_settings()
    ledger = FundLedger(JsonFileRepository(settings.ledger_path))
    try:
        selected = ledger.get_year(year) if year else ledger.latest_year()
    except LedgerError as error:
        typer.echo(str(error))
        raise typer.Exit(code=1) from error
    if selected is None:
        typer.echo("No fiscal years recorded yet.")
        raise typer.Exit(code=1)
    stats = ledger.stats(selected.id)
    typer.echo(f"Fiscal year {selected.id}{' (closed)' if selected.is_closed else ''}")
    typer.echo(f"  Opening balance:  {stats.opening_balance}")
    typer.echo(f"  Total collection: {stats.total_collection}")
    typer.echo(f"  Total expense:    {stats.total_expense}")
    typer.echo(f"  Current balance:  {stats.current_balance}")


if __name__ == "__main__":
    cli()
