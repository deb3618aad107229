from datetime import datetime

from pydantic import Field, computed_field

from src.schemas.base import BaseSchema
from src.schemas.types import TaskStatusEnum

DESCRIPTION_MAX_LENGTH: int = 255


class TaskCreateSchema(BaseSchema):
    """Input accepted when creating a task. Only the description is caller-supplied."""

    description: str = Field(
        min_length=1,
        max_length=DESCRIPTION_MAX_LENGTH,
        description="Free-form description of the task.",
    )


class TaskModelSchema(BaseSchema):
    """Read view of a stored task."""

    id: int = Field(description="Database-assigned identifier of the task.")
    description: str = Field(description="Free-form description of the task.")
    completed: bool = Field(default=False, description="Whether the task has been completed.")
    created_at: datetime = Field(description="Timestamp when the task was inserted.")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> TaskStatusEnum:
        """Display status derived from `completed`."""
        return TaskStatusEnum.from_completed(self.completed)