"""Main CLI application module."""

import typer

from .book_commands import init_db, list_books, seed, serve

# Create the main CLI application
app = typer.Typer(
    help="📚 Book Library CLI - run the API and manage its database",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="serve")(serve)
app.command(name="init-db")(init_db)
app.command(name="seed")(seed)
app.command(name="list")(list_books)


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
