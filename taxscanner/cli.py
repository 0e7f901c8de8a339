"""Tax Scanner CLI.

Commands:
- init: Initialize database schema
- seed: Load sample Texas and Illinois rates
- import-rates: Download and import government rate files
- lookup: Resolve the rates of a city
- status: Show data freshness per source
- web serve: Run the API server
"""

from __future__ import annotations

import asyncio
from enum import Enum

import typer
from rich.console import Console
from rich.table import Table

from taxscanner.config import get_config
from taxscanner.core.logging import configure_logging
from taxscanner.db.connection import close_db, get_session, init_db
from taxscanner.db.repository import JurisdictionRepository
from taxscanner.errors import TaxScannerError
from taxscanner.lookup.resolver import RateResolver
from taxscanner.pipeline.importers import IMPORTERS, get_importer
from taxscanner.pipeline.seed import seed_sample_data
from taxscanner.pipeline.status import list_data_status
from taxscanner.pipeline.types import ImportResult, ImportStatus

app = typer.Typer(
    name="taxscanner",
    help="Tax Scanner - US sales-tax rate lookup",
    no_args_is_help=True,
)

web_cli = typer.Typer(help="Web API")
app.add_typer(web_cli, name="web")

console = Console()


class ImportSourceChoice(str, Enum):
    texas = "texas"
    illinois = "illinois"
    all = "all"


def _percent(rate) -> str:
    return f"{float(rate) * 100:.3f}%"


@app.callback()
def main_callback(
    log_level: str | None = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    configure_logging(level=log_level)


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")

    async def _init():
        if drop:
            console.print("[yellow]Dropping existing tables...[/yellow]")
        await init_db(drop=drop)
        await close_db()

    asyncio.run(_init())
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command()
def seed():
    """Load sample Texas and Illinois rates (safe to repeat)."""

    async def _seed():
        async with get_session() as session:
            created = await seed_sample_data(JurisdictionRepository(session))
        await close_db()
        return created

    created = asyncio.run(_seed())
    console.print(f"[bold green]✓[/bold green] Sample data loaded ({created} new cities)")


@app.command(name="import-rates")
def import_rates_cmd(
    source: ImportSourceChoice = typer.Argument(..., help="Source to import"),
):
    """Download and import government rate files."""
    config = get_config()
    names = list(IMPORTERS) if source is ImportSourceChoice.all else [source.value]

    async def _import() -> tuple[list[ImportResult], list[tuple[str, str]]]:
        results: list[ImportResult] = []
        failures: list[tuple[str, str]] = []
        for name in names:
            console.print(f"[bold]Importing:[/bold] {name}")
            try:
                async with get_session() as session:
                    importer = get_importer(name, session, config=config.imports)
                    results.append(await importer.run())
            except TaxScannerError as e:
                console.print(f"  [red]✗[/red] {e}")
                failures.append((name, str(e)))
        await close_db()
        return results, failures

    results, failures = asyncio.run(_import())

    table = Table(title="Import Results")
    table.add_column("Source", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Imported", justify="right")
    table.add_column("Updated", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Duration", justify="right")

    for result in results:
        status_style = "green" if result.status is ImportStatus.SUCCESS else "yellow"
        table.add_row(
            result.source_id,
            f"[{status_style}]{result.status.value}[/{status_style}]",
            str(result.imported),
            str(result.updated),
            str(result.errors),
            f"{result.duration_seconds:.1f}s",
        )
    for name, reason in failures:
        table.add_row(name, "[red]failed[/red]", "-", "-", "-", "-")

    console.print(table)
    if failures:
        raise typer.Exit(1)


@app.command()
def lookup(
    state: str = typer.Argument(..., help="Two-letter state code"),
    county: str = typer.Argument(..., help="County name or fragment"),
    city: str = typer.Argument(..., help="City name or fragment"),
):
    """Resolve the sales-tax rates of a city."""

    async def _lookup():
        async with get_session() as session:
            result = await RateResolver(JurisdictionRepository(session)).resolve_rates(
                state, county, city
            )
        await close_db()
        return result

    result = asyncio.run(_lookup())
    if result is None:
        console.print(f"[red]No tax data for {city}, {county}, {state.upper()}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{result.city}, {result.county}, {result.state_code}")
    table.add_column("Level", style="cyan")
    table.add_column("General", justify="right", style="green")
    if result.has_dual_rates:
        table.add_column("Food/Medicine", justify="right", style="green")

    rows = [
        ("State", result.state_tax_rate, result.state_food_tax_rate),
        ("County", result.county_tax_rate, result.county_food_tax_rate),
        ("City", result.city_tax_rate, result.city_food_tax_rate),
        ("Total", result.total_tax_rate, result.total_food_tax_rate),
    ]
    for level, general, food in rows:
        cells = [level, _percent(general)]
        if result.has_dual_rates:
            cells.append(_percent(food))
        table.add_row(*cells)

    console.print(table)
    console.print(f"Last updated: {result.last_updated:%Y-%m-%d %H:%M}")


@app.command()
def status():
    """Show when each data source was last imported."""

    async def _status():
        async with get_session() as session:
            statuses = await list_data_status(JurisdictionRepository(session))
        await close_db()
        return statuses

    statuses = asyncio.run(_status())
    if not statuses:
        console.print("[yellow]No data imported yet. Run 'taxscanner seed' or 'import-rates'.[/yellow]")
        return

    table = Table(title="Data Sources")
    table.add_column("Source", style="cyan")
    table.add_column("Status", style="bold")
    table.add_column("Records", justify="right")
    table.add_column("Last Updated")
    table.add_column("Message", style="dim")

    for item in statuses:
        table.add_row(
            item.source,
            item.status,
            str(item.record_count),
            f"{item.last_updated:%Y-%m-%d %H:%M}" if item.last_updated else "-",
            item.error_message or "",
        )

    console.print(table)


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(3001, help="Port to bind"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the Tax Scanner API server."""
    import uvicorn

    typer.echo(f"Starting Tax Scanner API on http://{host}:{port}")
    uvicorn.run("taxscanner.web.app:app", host=host, port=port, reload=reload, workers=1)


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
