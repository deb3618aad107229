"""Console rendering helpers for tasks and migrations."""

from datetime import datetime, timezone, tzinfo
from typing import Any

import msgspec
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from sqlalchemy.engine import make_url

from src.migrations.runner import RevisionInfo
from src.schemas.db.models import TaskModelSchema
from src.schemas.types import TaskStatusEnum

# JSON encoder
msgspec_encoder = msgspec.json.Encoder()

_STATUS_STYLES: dict[str, str] = {
    TaskStatusEnum.PENDING: "yellow",
    TaskStatusEnum.COMPLETED: "green",
}


def naive_timezone(database_url: str) -> tzinfo | None:
    """Zone of the naive timestamps a backend hands back, or None for local time.

    SQLite's CURRENT_TIMESTAMP is UTC. MySQL's DATETIME and PostgreSQL's TIMESTAMP
    columns are filled from the session's local time.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return timezone.utc
    return None


def format_timestamp(value: datetime, fmt: str, naive_tz: tzinfo | None = None) -> str:
    """Format a timestamp in local time.

    Naive values are read in `naive_tz` when given, otherwise taken to already be local.
    """
    if value.tzinfo is None and naive_tz is not None:
        value = value.replace(tzinfo=naive_tz)
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.strftime(fmt)


def format_task_line(task: TaskModelSchema, datetime_format: str, naive_tz: tzinfo | None = None) -> str:
    """One-line summary, e.g. `ID: 3, [PENDING] Description: 'buy milk' (Created: ...)`."""
    status = str(task.status).upper()
    style = _STATUS_STYLES.get(task.status, "white")
    return (
        f"ID: {task.id}, [{style}]\\[{status}][/{style}] "
        f"Description: '{escape(task.description)}' "
        f"(Created: {format_timestamp(task.created_at, datetime_format, naive_tz)})"
    )


def tasks_table(
    tasks: list[TaskModelSchema],
    datetime_format: str,
    naive_tz: tzinfo | None = None,
    total: int | None = None,
) -> Table:
    caption: str | None = f"Showing {len(tasks)} of {total} tasks" if total is not None else None
    table = Table(title="Your Tasks", caption=caption, show_lines=False)
    table.add_column("ID", justify="right", style="cyan", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Description", overflow="fold")
    table.add_column("Created", no_wrap=True)

    for task in tasks:
        style = _STATUS_STYLES.get(task.status, "white")
        table.add_row(
            str(task.id),
            f"[{style}]{str(task.status).upper()}[/{style}]",
            escape(task.description),
            format_timestamp(task.created_at, datetime_format, naive_tz),
        )
    return table


def tasks_to_json(tasks: list[TaskModelSchema]) -> str:
    """Serialize tasks as a JSON array with ISO 8601 timestamps."""
    payload: list[dict[str, Any]] = [task.model_dump(mode="json") for task in tasks]
    return msgspec_encoder.encode(payload).decode("utf-8")


def revisions_table(revisions: list[RevisionInfo], current: str | None) -> Table:
    table = Table(title="Migrations")
    table.add_column("Revision", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Applied", justify="center")

    applied = current is not None
    for info in revisions:
        table.add_row(info.revision, escape(info.doc), "✅" if applied else "⏳")
        if info.revision == current:
            applied = False
    return table


def print_tasks(
    console: Console,
    tasks: list[TaskModelSchema],
    datetime_format: str,
    naive_tz: tzinfo | None = None,
    total: int | None = None,
) -> None:
    if not tasks:
        console.print("No tasks found.")
        return
    console.print(tasks_table(tasks, datetime_format, naive_tz=naive_tz, total=total))
