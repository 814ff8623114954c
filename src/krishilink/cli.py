"""KrishiLink CLI for operators."""

import asyncio
from typing import Optional
import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

app = typer.Typer(name="krishilink", help="KrishiLink - Crop Marketplace")
console = Console()


def run_async(coro):
    """Run async function in sync context."""
    return asyncio.run(coro)


# ============================================================
# Setup Commands
# ============================================================

@app.command()
def setup():
    """Verify the database connection and create indexes."""
    from .db import open_db, setup_indexes

    async def _setup():
        console.print("[bold blue]Setting up KrishiLink...[/]")
        async with open_db() as db:
            console.print(f"Connected to MongoDB database [cyan]{db.name}[/]")
            await setup_indexes(db)
        console.print("[bold green]Setup complete![/]")

    run_async(_setup())


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address (defaults to settings)"),
    port: Optional[int] = typer.Option(None, help="Port (defaults to settings)"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn
    from .config import get_settings

    settings = get_settings()
    uvicorn.run(
        "krishilink.api:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


# ============================================================
# Marketplace Commands
# ============================================================

@app.command()
def crops(limit: int = typer.Option(6, help="Number of listings to show")):
    """Show the newest crop listings."""
    from .db import open_db
    from .listings import get_latest_listings

    async def _list():
        async with open_db() as db:
            listings = await get_latest_listings(db, limit)

        if not listings:
            console.print("[yellow]No crops listed yet.[/]")
            return

        table = Table(title="Latest Crops")
        table.add_column("ID", style="cyan")
        table.add_column("Name", style="green")
        table.add_column("Type")
        table.add_column("Price", justify="right")
        table.add_column("Available", justify="right")
        table.add_column("Interests", justify="right")
        table.add_column("Owner")

        for c in listings:
            unit = c.get("unit", "")
            table.add_row(
                c.get("id", "?"),
                c.get("name", "?"),
                c.get("type", "?"),
                f"{c.get('pricePerUnit', 0):.2f}/{unit}",
                f"{c.get('quantity', 0):g} {unit}",
                str(len(c.get("interests", []))),
                (c.get("owner") or {}).get("ownerEmail", "?"),
            )

        console.print(table)

    run_async(_list())


@app.command()
def interests(email: str = typer.Argument(..., help="Buyer email")):
    """Show every interest a buyer has submitted."""
    from .db import open_db
    from .interests import list_interests_for_user

    async def _list():
        async with open_db() as db:
            records = await list_interests_for_user(db, email)

        if not records:
            console.print(f"[yellow]No interests for {email}.[/]")
            return

        table = Table(title=f"Interests of {email}")
        table.add_column("Interest", style="cyan")
        table.add_column("Crop", style="green")
        table.add_column("Owner")
        table.add_column("Quantity", justify="right")
        table.add_column("Status")

        colors = {"accepted": "green", "rejected": "red"}
        for r in records:
            status = r.get("status", "?")
            table.add_row(
                r.get("id", "?"),
                r.get("cropName") or "?",
                r.get("ownerName") or "?",
                f"{r.get('quantity', 0):g}",
                f"[{colors.get(status, 'yellow')}]{status}[/]",
            )

        console.print(table)

    run_async(_list())


@app.command()
def decide(
    crop_id: str = typer.Argument(..., help="Crop listing ID"),
    interest_id: str = typer.Argument(..., help="Interest ID"),
    status: str = typer.Option("accepted", help="accepted or rejected"),
):
    """Accept or reject an interest on behalf of a listing owner."""
    from .db import open_db
    from .errors import KrishiLinkError
    from .interests import update_interest_status
    from .models import InterestStatus

    if status not in (InterestStatus.ACCEPTED.value, InterestStatus.REJECTED.value):
        raise typer.BadParameter("status must be 'accepted' or 'rejected'")

    async def _decide():
        async with open_db() as db:
            return await update_interest_status(db, crop_id, interest_id, status)

    try:
        result = run_async(_decide())
    except KrishiLinkError as e:
        console.print(f"[red]{e.message}[/]")
        raise typer.Exit(code=1)

    console.print(Panel(
        f"""[bold]Interest:[/] {result['interestId']}
[bold]Status:[/] {result['status']}
[bold]Changed:[/] {'yes' if result['modifiedCount'] else 'no'}
[bold]Quantity deducted:[/] {result['quantityDecremented']:g}""",
        title="[green]Decision Recorded[/]",
    ))


if __name__ == "__main__":
    app()
