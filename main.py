import logging
from typing import Optional

import typer
import uvicorn
from rich.console import Console

from api import create_app
from config import settings
from database import Database, DatabaseInitError

APP_NAME = "Books API"

console = Console()
logger = logging.getLogger(__name__)

app = typer.Typer(help="Books API service")


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _open_database(db_file: str) -> Database:
    """Build and initialize the database, aborting the process when that fails."""
    database = Database(db_file, max_connections=settings.database_max_connections)
    try:
        database.initialize()
    except DatabaseInitError as e:
        logger.error("Fatal: %s", e)
        console.print(f"[bold red]Cannot open database:[/] {e}")
        raise typer.Exit(code=1)
    return database


@app.command("serve")
def cli_serve(
    host: str = typer.Option(settings.api_host, "--host", help="Address to listen on"),
    port: int = typer.Option(settings.api_port, "--port", help="Port to listen on"),
    db_file: str = typer.Option(settings.database_file, "--db-file", help="SQLite database file"),
):
    """Initialize the database and serve the API with uvicorn."""
    _configure_logging()
    database = _open_database(db_file)
    api = create_app(database)
    console.print(f"[green]{APP_NAME}[/] listening on http://{host}:{port}/")
    uvicorn.run(api, host=host, port=port, log_level=settings.log_level.lower())


@app.command("init-db")
def cli_init_db(
    db_file: Optional[str] = typer.Option(None, "--db-file", help="SQLite database file"),
):
    """Create the database file and the books table if they do not exist."""
    _configure_logging()
    path = db_file or settings.database_file
    database = _open_database(path)
    database.close()
    console.print(f"[green]Database ready:[/] {path}")


if __name__ == "__main__":
    app()
