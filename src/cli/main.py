"""
CLI entrypoint.

Examples:
    taskflow migrate                 # Apply pending schema migrations
    taskflow migrate --sql           # Print the DDL instead of running it
    taskflow add "buy milk"          # Create a task
    taskflow list --pending          # Show open tasks
    taskflow complete 3              # Mark task 3 as completed
    taskflow                         # Interactive menu
"""

import asyncio
import logging
from typing import Any, Coroutine, TypeVar

import click
from pydantic import ValidationError
from rich.console import Console
from sqlalchemy.exc import SQLAlchemyError

from src import create_logger, set_log_level
from src.cli.menu import TaskMenu, describe_validation_error
from src.cli.render import naive_timezone, print_tasks, revisions_table, tasks_to_json
from src.config import app_config, app_settings
from src.db.models import aclose_db_pool
from src.migrations import MigrationError, MigrationRunner
from src.schemas.db.models import TaskModelSchema
from src.services import tasks as task_service

logger = create_logger("cli")
console = Console()
T = TypeVar("T")


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, closing the database pool on the same event loop."""

    async def _with_cleanup() -> T:
        try:
            return await coro
        finally:
            await aclose_db_pool()

    try:
        return asyncio.run(_with_cleanup())
    except MigrationError as e:
        raise click.ClickException(e.message) from e
    except SQLAlchemyError as e:
        logger.error(f"Database error: {e}")
        raise click.ClickException(f"Database error: {e}") from e


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Task manager backed by the `tasks` table.

    Run without a command to open the interactive menu.
    """
    set_log_level(logging.DEBUG if verbose else app_settings.LOG_LEVEL)
    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


# =========================================================
# ==================== Migrations =========================
# =========================================================
@cli.command()
@click.option("--target", default="head", show_default=True, help="Revision to upgrade to.")
@click.option("--sql", "sql_only", is_flag=True, help="Print the DDL instead of applying it.")
def migrate(target: str, sql_only: bool) -> None:
    """Apply pending schema migrations."""
    runner = MigrationRunner()
    if sql_only:
        try:
            click.echo(runner.render_sql(target))
        except MigrationError as e:
            raise click.ClickException(e.message) from e
        return

    before = _run(runner.acurrent_revision())
    after = _run(runner.aupgrade(target))
    if after == before:
        console.print(f"✅ Schema is up to date (revision {after}).")
        return
    console.print(f"✅ Upgraded schema from {before or 'base'} to {after}.")


@cli.command()
def current() -> None:
    """Show the applied schema revision."""
    revision = _run(MigrationRunner().acurrent_revision())
    console.print(revision if revision is not None else "No migrations applied.")


@cli.command()
def history() -> None:
    """List migrations and whether they are applied."""
    runner = MigrationRunner()
    revision = _run(runner.acurrent_revision())
    console.print(revisions_table(runner.history(), revision))


# =========================================================
# ==================== Tasks ==============================
# =========================================================
@cli.command()
@click.argument("description", nargs=-1, required=True)
def add(description: tuple[str, ...]) -> None:
    """Create a task."""
    try:
        task = _run(task_service.aadd_task(" ".join(description)))
    except ValidationError as e:
        raise click.ClickException(describe_validation_error(e)) from e
    console.print(f"Task '{task.description}' added successfully with ID {task.id}.", markup=False)


@cli.command(name="list")
@click.option("--pending", "status", flag_value="pending", help="Only tasks not yet completed.")
@click.option("--completed", "status", flag_value="completed", help="Only completed tasks.")
@click.option("--since", default=None, help="Only tasks created at or after this ISO 8601 time.")
@click.option("--until", default=None, help="Only tasks created at or before this ISO 8601 time.")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Maximum number of tasks.")
@click.option("--json", "json_output", is_flag=True, help="Machine-readable output.")
def list_tasks(
    status: str | None, since: str | None, until: str | None, limit: int | None, json_output: bool
) -> None:
    """List tasks, newest first."""
    completed: bool | None = None if status is None else status == "completed"

    async def _alist() -> tuple[list[TaskModelSchema], int]:
        tasks = await task_service.alist_tasks(
            completed=completed,
            created_after=since,
            created_before=until,
            limit=limit or app_config.cli_config.list_limit,
        )
        total = await task_service.acount_tasks(completed=completed, created_after=since, created_before=until)
        return tasks, total

    try:
        tasks, total = _run(_alist())
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    if json_output:
        click.echo(tasks_to_json(tasks))
        return
    print_tasks(
        console,
        tasks,
        app_config.cli_config.datetime_format,
        naive_tz=naive_timezone(app_settings.database_url),
        total=total,
    )


@cli.command()
@click.argument("task_id", type=int)
def complete(task_id: int) -> None:
    """Mark a task as completed."""
    if not _run(task_service.acomplete_task(task_id)):
        raise click.ClickException(f"No task found with ID {task_id}. Nothing updated.")
    console.print(f"Task with ID {task_id} marked as completed.")


@cli.command()
@click.argument("task_id", type=int)
def delete(task_id: int) -> None:
    """Delete a task."""
    if not _run(task_service.adelete_task(task_id)):
        raise click.ClickException(f"No task found with ID {task_id}. Nothing deleted.")
    console.print(f"Task with ID {task_id} deleted successfully.")


@cli.command()
def menu() -> None:
    """Interactive menu: add, list, complete and delete tasks."""
    task_menu = TaskMenu(
        console=console,
        config=app_config.cli_config,
        naive_tz=naive_timezone(app_settings.database_url),
    )
    _run(task_menu.arun())


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
