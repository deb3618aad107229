"""
Crud operations for the task repository.

(Using SQLAlchemy ORM v2.x)
"""

from datetime import datetime

from dateutil.parser import parse  # Very fast, handles ISO formats well
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
)

from src import create_logger
from src.db.models import DBTask
from src.schemas.db.models import TaskCreateSchema, TaskModelSchema

logger = create_logger("repo.task_repository")


def _parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO 8601 bound, passing datetimes and None through."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return parse(value)
    except (ValueError, TypeError, OverflowError) as e:
        logger.error(f"Invalid date format passed to query: {e}")
        raise ValueError("Timestamps must be valid ISO 8601 strings.") from e


class TaskRepository:
    """CRUD operations for the Task repository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def aget_task_by_id(self, id: int) -> DBTask | None:
        """Get a task by its database ID."""
        stmt = select(DBTask).where(DBTask.id == id)
        return await self.db.scalar(stmt)

    @staticmethod
    def _filters(
        completed: bool | None,
        created_after: str | datetime | None,
        created_before: str | datetime | None,
    ) -> list:
        # Internal check: ensures the strings are at least valid dates before hitting the DB
        start: datetime | None = _parse_timestamp(created_after)
        end: datetime | None = _parse_timestamp(created_before)

        filters = []
        if completed is not None:
            filters.append(DBTask.completed.is_(completed))
        if start is not None:
            filters.append(DBTask.created_at >= start)
        if end is not None:
            filters.append(DBTask.created_at <= end)
        return filters

    async def acount_tasks(
        self,
        completed: bool | None = None,
        created_after: str | datetime | None = None,
        created_before: str | datetime | None = None,
    ) -> int:
        """Count the tasks `alist_tasks` would return without a limit."""
        filters = self._filters(completed, created_after, created_before)
        stmt = select(func.count()).select_from(DBTask).where(*filters)
        return await self.db.scalar(stmt) or 0

    async def alist_tasks(
        self,
        completed: bool | None = None,
        created_after: str | datetime | None = None,
        created_before: str | datetime | None = None,
        limit: int | None = None,
    ) -> list[DBTask]:
        """List tasks, newest first.

        Parameters
        ----------
        completed : bool | None
            Filter by completion state. If None, returns all tasks.
        created_after : str | datetime | None
            The start timestamp (inclusive). e.g. "2023-01-01T00:00:00"
        created_before : str | datetime | None
            The end timestamp (inclusive). e.g. "2023-01-31T23:59:59"
        limit : int | None
            Maximum number of tasks to return. If None, returns every match.

        Returns
        -------
        list[DBTask]
            Tasks ordered by `created_at` descending, ties broken by `id` descending.

        Raises
        ------
        ValueError
            If a timestamp bound cannot be parsed.
        """
        filters = self._filters(completed, created_after, created_before)
        stmt = select(DBTask).where(*filters).order_by(DBTask.created_at.desc(), DBTask.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            result = await self.db.scalars(stmt)
            return list(result.all())
        except Exception as e:
            logger.error(f"Error listing tasks: {e}")
            raise e

    async def acreate_task(self, description: str) -> DBTask:
        """Insert a task supplying only its description.

        Parameters
        ----------
        description : str
            Free-form description, 1 to 255 characters after stripping whitespace.

        Returns
        -------
        DBTask
            The stored task, with `id`, `completed` and `created_at` loaded from the database.

        Raises
        ------
        pydantic.ValidationError
            If the description is empty or too long.
        IntegrityError
            If the database rejects the row.
        """
        task_input = TaskCreateSchema(description=description)
        db_task = DBTask(description=task_input.description)

        try:
            self.db.add(db_task)
            await self.db.commit()
            # Load the server-side defaults (`completed`, `created_at`)
            await self.db.refresh(db_task)
            logger.info(f"Created task id={db_task.id!r}.")
            return db_task

        except IntegrityError as e:
            logger.error(f"Integrity error creating task: {e}")
            await self.db.rollback()
            raise e

        except Exception as e:
            logger.error(f"Error creating task: {e}")
            await self.db.rollback()
            raise e

    async def amark_task_completed(self, id: int) -> bool:
        """Set `completed` on a task. Other columns are left untouched.

        Returns
        -------
        bool
            True if a task was updated, False if no task has this ID.
        """
        try:
            stmt = update(DBTask).where(DBTask.id == id).values(completed=True)
            result = await self.db.execute(stmt)
            await self.db.commit()

        except Exception as e:
            logger.error(f"Error marking task id={id!r} as completed: {e}")
            await self.db.rollback()
            raise e

        if result.rowcount == 0:  # type: ignore[attr-defined]
            logger.warning(f"No task found with id={id!r}. Nothing updated.")
            return False
        logger.info(f"Marked task id={id!r} as completed.")
        return True

    async def adelete_task(self, id: int) -> bool:
        """Delete a task.

        Returns
        -------
        bool
            True if a task was deleted, False if no task has this ID.
        """
        try:
            stmt = delete(DBTask).where(DBTask.id == id)
            result = await self.db.execute(stmt)
            await self.db.commit()

        except Exception as e:
            logger.error(f"Error deleting task id={id!r}: {e}")
            await self.db.rollback()
            raise e

        if result.rowcount == 0:  # type: ignore[attr-defined]
            logger.warning(f"No task found with id={id!r}. Nothing deleted.")
            return False
        logger.info(f"Deleted task id={id!r}.")
        return True

    def convert_dbtask_to_schema(self, db_task: DBTask) -> TaskModelSchema:
        """Convert a DBTask ORM object directly to a Pydantic read schema."""
        return TaskModelSchema.model_validate(db_task)
