"""Task operations, each running in its own database session."""

from datetime import datetime

from src.db.models import aget_db_session
from src.db.repositories.task_repository import TaskRepository
from src.schemas.db.models import TaskModelSchema


async def aadd_task(description: str) -> TaskModelSchema:
    """Create a task and return its stored view.

    Parameters
    ----------
    description : str
        Free-form description of the task.

    Returns
    -------
    TaskModelSchema
        The task with its database-assigned `id` and `created_at`.
    """
    async with aget_db_session() as session:
        repo = TaskRepository(session)
        db_task = await repo.acreate_task(description)
        return repo.convert_dbtask_to_schema(db_task)


async def alist_tasks(
    completed: bool | None = None,
    created_after: str | datetime | None = None,
    created_before: str | datetime | None = None,
    limit: int | None = None,
) -> list[TaskModelSchema]:
    """List tasks newest first. See `TaskRepository.alist_tasks` for the filters."""
    async with aget_db_session() as session:
        repo = TaskRepository(session)
        db_tasks = await repo.alist_tasks(
            completed=completed, created_after=created_after, created_before=created_before, limit=limit
        )
        return [repo.convert_dbtask_to_schema(db_task) for db_task in db_tasks]


async def acount_tasks(
    completed: bool | None = None,
    created_after: str | datetime | None = None,
    created_before: str | datetime | None = None,
) -> int:
    """Count the tasks matching the `alist_tasks` filters, ignoring any limit."""
    async with aget_db_session() as session:
        return await TaskRepository(session).acount_tasks(
            completed=completed, created_after=created_after, created_before=created_before
        )


async def acomplete_task(id: int) -> bool:
    """Mark a task as completed. Returns False when no task has this ID."""
    async with aget_db_session() as session:
        return await TaskRepository(session).amark_task_completed(id)


async def adelete_task(id: int) -> bool:
    """Delete a task. Returns False when no task has this ID."""
    async with aget_db_session() as session:
        return await TaskRepository(session).adelete_task(id)
