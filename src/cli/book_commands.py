"""Server and database commands."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

from src.bookshelf.core.errors import BookError
from src.bookshelf.core.services import BookService, DbManageService, DbSessionService
from src.bookshelf.entities.book import SqlBookRepository
from src.bookshelf.runtime.config.config_data import ConfigData
from src.bookshelf.runtime.config.config_template import load_config
from src.bookshelf.runtime.context import get_config

console = Console()

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to a config.yaml file (defaults to the loaded configuration)",
    envvar="BOOKSHELF_CONFIG",
)


def _resolve_config(config_path: Path | None) -> ConfigData:
    if config_path is None:
        return get_config()
    try:
        return load_config(config_path)
    except ValueError as e:
        console.print(f"[red]❌ Invalid configuration in {config_path}: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e


def serve(
    host: str | None = typer.Option(None, help="Host to bind the server to"),
    port: int | None = typer.Option(None, help="Port to bind the server to"),
    config_path: Path | None = ConfigOption,
) -> None:
    """
    🚀 Start the API server.

    Host and port default to the values from the configuration file.
    """
    import uvicorn

    from src.bookshelf.api.http.app import create_app

    config = _resolve_config(config_path)
    bind_host = host or config.app.host
    bind_port = port or config.app.port

    console.print(
        Panel.fit(
            "[bold green]Starting Book Library API[/bold green]",
            border_style="green",
        )
    )
    console.print(f"[blue]Server will be available at:[/blue] http://{bind_host}:{bind_port}")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]")

    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        access_log=False,  # We handle access logging in middleware
    )


def init_db(config_path: Path | None = ConfigOption) -> None:
    """🗄️  Create the database tables."""
    config = _resolve_config(config_path)
    database_service = DbSessionService(config)
    try:
        DbManageService(database_service).create_all()
    except SQLAlchemyError as e:
        console.print(f"[red]❌ Failed to initialize database: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    console.print("[green]✅ Database tables created[/green]")


def seed(
    force: bool = typer.Option(
        False, "--force", "-f", help="Insert sample books even if the table has rows"
    ),
    config_path: Path | None = ConfigOption,
) -> None:
    """🌱 Insert the sample books."""
    config = _resolve_config(config_path)
    database_service = DbSessionService(config)
    try:
        manager = DbManageService(database_service)
        manager.create_all()
        created = manager.seed(only_if_empty=not force)
    except BookError as e:
        console.print(f"[red]❌ Failed to seed database: {e.message}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    if not created:
        console.print("[yellow]Books already present; nothing to seed[/yellow]")
        return
    console.print(f"[green]✅ Inserted {len(created)} sample books[/green]")


def list_books(config_path: Path | None = ConfigOption) -> None:
    """📖 List all books, most recently created first."""
    config = _resolve_config(config_path)
    database_service = DbSessionService(config)
    try:
        with database_service.session_scope() as session:
            books = BookService(SqlBookRepository(session)).list_books()
    except BookError as e:
        console.print(f"[red]❌ Failed to list books: {e.message}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        database_service.dispose()

    if not books:
        console.print("[yellow]No books found[/yellow]")
        return

    table = Table(title="Books")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Author")
    table.add_column("Year", justify="right")
    table.add_column("Created", style="dim")

    for book in books:
        table.add_row(
            book.id,
            book.title,
            book.author,
            str(book.year),
            book.created_at.isoformat() if book.created_at else "-",
        )

    console.print(table)
    console.print(f"\n[green]Found {len(books)} books[/green]")
