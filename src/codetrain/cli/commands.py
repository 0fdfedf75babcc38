"""CLI commands for CodeTrain.

Commands:
- serve: run the web API
- init-db: create the schema and sync the module catalog
- users / tables / schema: inspect the database
- delete-user: remove an account and its progress
- modules: list the module catalog
"""

import sqlite3
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from codetrain.config.app_config import ConfigError, load_app_config
from codetrain.core.catalog import CatalogError, load_catalog
from codetrain.db.database import Database
from codetrain.db.modules_repository import sync_modules
from codetrain.db.users_repository import delete_user as do_delete_user
from codetrain.db.users_repository import get_all_users

app = typer.Typer(
    name="codetrain",
    help="Student training platform: web API and database administration.",
    no_args_is_help=True,
)

console = Console()


def _load_config_or_exit():
    try:
        return load_app_config()
    except ConfigError as e:
        console.print(f"[red]✗ Invalid configuration: {e}[/red]")
        raise typer.Exit(code=1)


def _open_existing_db(db_path: Path | None) -> Database:
    """Open the configured database, or exit if the file is missing."""
    config = _load_config_or_exit()
    db = Database(db_path or config.database_path, busy_timeout=config.busy_timeout_seconds)
    if not db.exists():
        console.print(f"[red]✗ Database file not found: {db.path}[/red]")
        console.print("  Run: codetrain init-db")
        raise typer.Exit(code=1)
    return db


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the web API with uvicorn."""
    import uvicorn

    config = _load_config_or_exit()
    console.print(
        f"[bold]CodeTrain[/bold] ({config.environment}) on "
        f"http://{host or config.host}:{port or config.port}"
    )
    uvicorn.run(
        "codetrain.web.api:create_app",
        factory=True,
        host=host or config.host,
        port=port or config.port,
        reload=reload,
    )


@app.command(name="init-db")
def init_db(
    db_path: Path | None = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Create the database schema and sync the module catalog."""
    config = _load_config_or_exit()
    db = Database(db_path or config.database_path, busy_timeout=config.busy_timeout_seconds)

    try:
        catalog = load_catalog(config.catalog_path)
        db.init()
        synced = sync_modules(db, catalog.list_modules())
    except CatalogError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)
    except sqlite3.Error as e:
        console.print(f"[red]✗ Database error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Database ready:[/green] {db.path}")
    console.print(f"  [dim]modules synced:[/dim] {synced}")


@app.command()
def users(
    db_path: Path | None = typer.Option(None, "--db", help="Database file"),
) -> None:
    """List all registered users."""
    db = _open_existing_db(db_path)
    records = get_all_users(db)

    if not records:
        console.print("[yellow]No users registered[/yellow]")
        return

    table = Table(title=f"Users ({len(records)})")
    table.add_column("id", justify="right")
    table.add_column("username", style="bold")
    table.add_column("email")
    table.add_column("created_at", style="dim")
    for user in records:
        table.add_row(str(user.id), user.username, user.email, user.created_at)
    console.print(table)


@app.command()
def tables(
    db_path: Path | None = typer.Option(None, "--db", help="Database file"),
) -> None:
    """List database tables."""
    db = _open_existing_db(db_path)
    for name in db.list_tables():
        console.print(f"  {name}")


@app.command()
def schema(
    db_path: Path | None = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Print table and index definitions."""
    db = _open_existing_db(db_path)
    for statement in db.table_definitions():
        console.print(f"{statement};\n", highlight=False)


@app.command(name="delete-user")
def delete_user(
    username: str = typer.Argument(..., help="Username to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    db_path: Path | None = typer.Option(None, "--db", help="Database file"),
) -> None:
    """Delete a user and their progress (DESTRUCTIVE)."""
    db = _open_existing_db(db_path)

    if not yes:
        confirm = typer.confirm(f"Delete user '{username}' and all their progress?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(code=0)

    if do_delete_user(db, username):
        console.print(f"[green]✓ User '{username}' deleted[/green]")
    else:
        console.print(f"[yellow]No user named '{username}'[/yellow]")
        raise typer.Exit(code=1)


@app.command()
def modules() -> None:
    """List the module catalog."""
    config = _load_config_or_exit()
    try:
        catalog = load_catalog(config.catalog_path)
    except CatalogError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"\n[bold]Modules ({len(catalog)}):[/bold]\n")
    for module in catalog.list_modules():
        console.print(f"  [bold]{module.id}. {module.title}[/bold]")
        console.print(f"    [dim]difficulty:[/dim] {module.difficulty}")
        console.print(f"    [dim]time:[/dim]       {module.estimated_time}")
        console.print(
            f"    [dim]content:[/dim]    {len(module.content.concepts)} concepts, "
            f"{len(module.content.exercises)} exercises, {len(module.content.quiz)} quiz questions"
        )
        console.print()


if __name__ == "__main__":
    app()
