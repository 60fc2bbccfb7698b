"""Yes/no confirmations and alerts shown to the user."""

from abc import ABC, abstractmethod

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel


class Prompter(ABC):
    """Interface for blocking user prompts."""

    @abstractmethod
    def confirm(self, message: str) -> bool:
        """Ask a yes/no question. Returns True for yes."""
        pass

    @abstractmethod
    def alert(self, message: str) -> None:
        """Show an informational message the user must see."""
        pass


class ConsolePrompter(Prompter):
    """Interactive prompts on the terminal."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def confirm(self, message: str) -> bool:
        return click.confirm(message, default=False)

    def alert(self, message: str) -> None:
        self.console.print(Panel(
            f"[yellow]{escape(message)}[/yellow]",
            title="[bold yellow]Notice[/bold yellow]",
            border_style="yellow",
        ))


class AutoPrompter(Prompter):
    """Answers every confirmation with a fixed value.

    Alerts are collected in ``alerts`` (and echoed to ``console`` if given).
    """

    def __init__(self, answer: bool, console: Console | None = None):
        self.answer = answer
        self.console = console
        self.alerts: list[str] = []
        self.questions: list[str] = []

    def confirm(self, message: str) -> bool:
        self.questions.append(message)
        if self.console is not None:
            reply = "yes" if self.answer else "no"
            self.console.print(f"[dim]{escape(message)} -> {reply}[/dim]")
        return self.answer

    def alert(self, message: str) -> None:
        self.alerts.append(message)
        if self.console is not None:
            self.console.print(f"[yellow]{escape(message)}[/yellow]")
