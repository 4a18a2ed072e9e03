"""Operator terminal I/O.

The engine and the step actions talk to the operator only through the
Operator protocol; RichOperator is the terminal implementation. Everything
coming from steps or commands is escaped before it reaches rich markup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from ..core.model import Step, StepStatus


class Operator(Protocol):
    def show_header(self, title: str, subtitle: str = "") -> None: ...

    def show_prerequisites(self, items: Sequence[str]) -> None: ...

    def show_steps_table(self, steps: Sequence[Step]) -> None: ...

    def show_step(self, step: Step, index: int, total: int) -> None: ...

    def choose(self, title: str, choices: Sequence[str]) -> str: ...

    def confirm(self, question: str, default: bool = False) -> bool: ...

    def ask(self, prompt: str) -> str: ...

    def pause(self, message: str | None = None) -> None: ...

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def show_output(self, text: str, title: str = "output") -> None: ...


_STATUS_MARKUP = {
    "pending": "[grey50]Pending[/]",
    "completed": "[green]Completed[/]",
    "skipped": "[yellow]Skipped[/]",
    "failed": "[red]Failed[/]",
}


def status_markup(status: StepStatus) -> str:
    return _STATUS_MARKUP.get(status.value, escape(status.value))


class RichOperator:
    """Operator backed by a rich Console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def show_header(self, title: str, subtitle: str = "") -> None:
        self.console.rule(f"[bold yellow]{escape(title)}[/]")
        if subtitle:
            self.console.print(f"[grey50]{escape(subtitle)}[/]\n")

    def show_prerequisites(self, items: Sequence[str]) -> None:
        if not items:
            return
        body = "\n".join(f"{i}. {escape(item)}" for i, item in enumerate(items, start=1))
        self.console.print(Panel(body, title="Prerequisites", border_style="cyan", padding=(1, 1)))

    def show_steps_table(self, steps: Sequence[Step]) -> None:
        table = Table("#", "Title", "Status")
        for s in steps:
            table.add_row(str(s.number), escape(s.title), status_markup(s.status))
        self.console.print(table)

    def show_step(self, step: Step, index: int, total: int) -> None:
        table = Table(show_header=True, expand=False)
        table.add_column(f"Step {step.number} ({index + 1}/{total})", justify="center")
        table.add_row(f"[bold]{escape(step.title)}[/]")
        details = step.render_details()
        if details:
            table.add_row(f"[grey50]{escape(details)}[/]")
        table.add_row(status_markup(step.status))
        self.console.print(table)

    def choose(self, title: str, choices: Sequence[str]) -> str:
        if not choices:
            raise ValueError("choose() needs at least one choice")
        for i, choice in enumerate(choices, start=1):
            self.console.print(f"  [cyan]{i}[/]) {escape(choice)}")
        keys = [str(i) for i in range(1, len(choices) + 1)]
        picked = Prompt.ask(escape(title), choices=keys, default=keys[0], console=self.console)
        return choices[int(picked) - 1]

    def confirm(self, question: str, default: bool = False) -> bool:
        return Confirm.ask(escape(question), default=default, console=self.console)

    def ask(self, prompt: str) -> str:
        return Prompt.ask(escape(prompt), console=self.console)

    def pause(self, message: str | None = None) -> None:
        if message:
            self.console.print(escape(message))
        Prompt.ask("[grey50]Press Enter to continue[/]", default="", show_default=False, console=self.console)

    def info(self, message: str) -> None:
        self.console.print(escape(message))

    def success(self, message: str) -> None:
        self.console.print(f"[green]{escape(message)}[/]")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/]")

    def error(self, message: str) -> None:
        self.console.print(f"[red]Error:[/] {escape(message)}")

    def show_output(self, text: str, title: str = "output") -> None:
        self.console.print(Panel(Text(text or "<no output>"), title=escape(title)))
