import asyncio
import json
from pathlib import Path
import subprocess
from typing import Annotated

from rich import print
import typer

from codeshare.core.config import settings

app = typer.Typer()


async def purge_expired_task(retention_hours: int) -> dict[str, int]:
    """
    Run the scheduler's purge job once, outside the scheduler.

    Args:
        retention_hours (int): How long expired records are kept before deletion.

    Returns:
        dict[str, int]: Number of rows removed per table.
    """
    from codeshare.core.db import dispose_db
    from codeshare.infrastructure.scheduler.jobs import purge_expired_records

    try:
        return await purge_expired_records(retention_hours=retention_hours)
    finally:
        await dispose_db()


@app.command()
def purgeexpired(
    retention_hours: Annotated[
        int,
        typer.Option(
            "--retention-hours",
            "-r",
            help="Keep expired records for this many hours before deleting them",
        ),
    ] = settings.CLEANUP_RETENTION_HOURS,
):
    """
    Delete expired OTP codes, sessions and share links.

    Examples:
        python manage.py purgeexpired
        python manage.py purgeexpired --retention-hours 0
    """
    counts = asyncio.run(purge_expired_task(retention_hours))
    for table, count in counts.items():
        print(f"[cyan]{table}:[/cyan] {count} deleted")
    print("[green]Purge complete[/green]")


@app.command()
def makemigrations(comment: Annotated[str, typer.Argument()] = "auto"):
    """
    Creates a new Alembic migration revision with an autogenerated migration script.

    Args:
        comment (str, optional): The message to use for the migration revision. Defaults to "auto".

    Raises:
        subprocess.CalledProcessError: If the Alembic command fails.
    """
    try:
        revision_command = f'alembic revision --autogenerate -m "{comment}"'
        print(f"Running Alembic migrations: {revision_command}")
        subprocess.run(revision_command, shell=True, check=True)
    except subprocess.CalledProcessError as e:
        print(f"[red]Error:[/red] {e}")
        raise
    print("[green]Make migrations complete[/green]")


@app.command()
def showmigrations():
    """
    Shows the Alembic migration history.
    """
    try:
        history_command = "alembic history"
        print(f"Running Alembic history: {history_command}")
        subprocess.run(history_command, shell=True, check=True)
    except subprocess.CalledProcessError as e:
        print(f"[red]Error:[/red] {e}")
        raise
    print("[green]Show migrations complete[/green]")


@app.command()
def migrate():
    """
    Runs the Alembic database migration to upgrade the schema to the latest version.
    """
    try:
        upgrade_command = "alembic upgrade head"
        print(f"Running Alembic upgrade: {upgrade_command}")
        subprocess.run(upgrade_command, shell=True, check=True)
    except subprocess.CalledProcessError as e:
        print(f"[red]Error:[/red] {e}")
        raise
    print("[green]Migration complete[/green]")


@app.command()
def runserver():
    try:
        server_command = (
            "uvicorn codeshare.main:app --host 127.0.0.1 --port 8000 --reload"
            if settings.DEBUG
            else "uvicorn codeshare.main:app --host 0.0.0.0 --port 8000"
        )
        print(f"Running FastAPI server: {server_command}")
        subprocess.run(server_command, shell=True, check=True)
    except subprocess.CalledProcessError as e:
        print(f"[red]Error:[/red] {e}")
        raise


@app.command()
def generateopenapi():
    """
    Generates the OpenAPI schema for the FastAPI application and saves it to openapi.json.
    """
    from codeshare.main import app

    openapi_path = Path("openapi.json")
    with openapi_path.open("w", encoding="utf-8") as f:
        json.dump(app.openapi(), f, ensure_ascii=False, indent=2)
    print(f"[green]OpenAPI schema generated at {openapi_path.name}[/green]")


@app.callback()
def main(ctx: typer.Context):
    print(f"Executing the command: {ctx.invoked_subcommand}")


if __name__ == "__main__":
    app()
