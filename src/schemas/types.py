from enum import StrEnum


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class TaskStatusEnum(StrEnum):
    """Display status derived from the `completed` flag."""

    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def from_completed(cls, completed: bool) -> "TaskStatusEnum":
        return cls.COMPLETED if completed else cls.PENDING


class ErrorCodeEnum(StrEnum):
    MIGRATION_ERROR = "migration_error"
    SCHEMA_CONFLICT = "schema_conflict"
    INSUFFICIENT_PRIVILEGE = "insufficient_privilege"
    CONNECTIVITY_ERROR = "connectivity_error"
    SYNTAX_ERROR = "syntax_error"
    IRREVERSIBLE_MIGRATION = "irreversible_migration"


class MenuChoiceEnum(StrEnum):
    """Options of the interactive task menu."""

    ADD = "1"
    LIST = "2"
    COMPLETE = "3"
    DELETE = "4"
    EXIT = "5"

    @property
    def label(self) -> str:
        labels: dict[str, str] = {
            "1": "Add Task",
            "2": "List Tasks",
            "3": "Mark Task as Completed",
            "4": "Delete Task",
            "5": "Exit",
        }
        return labels[self.value]
