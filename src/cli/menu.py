"""Interactive task menu."""

from datetime import tzinfo

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from src import create_logger
from src.cli.render import format_task_line
from src.config.config import CLIConfig
from src.schemas.types import MenuChoiceEnum
from src.services import tasks as task_service

logger = create_logger("cli.menu")


def describe_validation_error(error: ValidationError) -> str:
    """Turn a task input validation error into a short user message."""
    error_type: str = error.errors()[0]["type"] if error.errors() else ""
    if error_type in {"string_too_short", "missing"}:
        return "Task description cannot be empty."
    if error_type == "string_too_long":
        return "Task description is too long (maximum 255 characters)."
    return f"Invalid task: {error}"


def parse_task_id(raw: str) -> int | None:
    """Parse a task ID typed by the user, or return None if it is not a number."""
    try:
        return int(raw.strip())
    except ValueError:
        return None


class EndOfInput(Exception):
    """Raised by `TaskMenu._prompt` when stdin is closed."""


class TaskMenu:
    """Numbered menu looping until the user exits."""

    def __init__(self, console: Console, config: CLIConfig, naive_tz: tzinfo | None = None) -> None:
        self.console = console
        self.config = config
        self.naive_tz = naive_tz

    def _prompt(self, text: str) -> str:
        try:
            return click.prompt(text, default="", show_default=False, prompt_suffix=" ")
        except click.Abort as e:
            raise EndOfInput from e

    def _print_menu(self) -> None:
        self.console.print("\n[bold]--- Task Management CLI ---[/bold]")
        for choice in MenuChoiceEnum:
            self.console.print(f"{choice.value}. {choice.label}")

    async def arun(self) -> None:
        """Show the menu and dispatch choices until `Exit` (or end of input)."""
        handlers = {
            MenuChoiceEnum.ADD: self.aadd_task,
            MenuChoiceEnum.LIST: self.alist_tasks,
            MenuChoiceEnum.COMPLETE: self.acomplete_task,
            MenuChoiceEnum.DELETE: self.adelete_task,
        }
        while True:
            self._print_menu()
            try:
                raw_choice = self._prompt("Enter your choice:").strip()
            except EndOfInput:
                # End of input behaves like Exit
                raw_choice = MenuChoiceEnum.EXIT.value

            try:
                choice = MenuChoiceEnum(raw_choice)
            except ValueError:
                self.console.print("Invalid choice. Please try again.")
                continue

            logger.debug(f"Menu choice: {choice.name}")
            if choice == MenuChoiceEnum.EXIT:
                self.console.print("Exiting application. Goodbye!")
                return
            try:
                await handlers[choice]()
            except EndOfInput:
                self.console.print("\nExiting application. Goodbye!")
                return

    async def aadd_task(self) -> None:
        description = self._prompt("Enter task description:")
        try:
            task = await task_service.aadd_task(description)
        except ValidationError as e:
            self.console.print(describe_validation_error(e))
            return
        self.console.print(f"Task '{escape(task.description)}' added successfully!")

    async def alist_tasks(self) -> None:
        tasks = await task_service.alist_tasks(limit=self.config.list_limit)
        if not tasks:
            self.console.print("No tasks found.")
            return
        self.console.print("\n[bold]--- Your Tasks ---[/bold]")
        for task in tasks:
            self.console.print(format_task_line(task, self.config.datetime_format, self.naive_tz))

    def _prompt_task_id(self, action: str) -> int | None:
        task_id = parse_task_id(self._prompt(f"Enter the ID of the task to {action}:"))
        if task_id is None:
            self.console.print("Invalid task ID. Please enter a number.")
        return task_id

    async def acomplete_task(self) -> None:
        task_id = self._prompt_task_id("mark as completed")
        if task_id is None:
            return
        if await task_service.acomplete_task(task_id):
            self.console.print(f"Task with ID {task_id} marked as completed.")
        else:
            self.console.print(f"No task found with ID {task_id}. Nothing updated.")

    async def adelete_task(self) -> None:
        task_id = self._prompt_task_id("delete")
        if task_id is None:
            return
        if await task_service.adelete_task(task_id):
            self.console.print(f"Task with ID {task_id} deleted successfully.")
        else:
            self.console.print(f"No task found with ID {task_id}. Nothing deleted.")
