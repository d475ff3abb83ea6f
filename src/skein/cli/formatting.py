"""Rich formatting helpers for the Skein CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skein.orchestrator.models import EventType, RunOutcome

if TYPE_CHECKING:
    from skein.orchestrator.models import AgentEvent, OrchestratorResult
    from skein.toolkit.models import ToolDefinition


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_event(event: AgentEvent, console: Console) -> None:
    """Display one conversation event.

    ERROR events are not shown here; the caller reports the fatal error.
    """
    if event.type == EventType.USER:
        console.print(f"[bold cyan]user[/bold cyan] {escape(event.content)}")
    elif event.type == EventType.ASSISTANT:
        console.print(f"[bold green]assistant[/bold green] {escape(event.content)}")
    elif event.type == EventType.COMPLETE:
        format_result(event.content, console)


def format_result(result: OrchestratorResult, console: Console) -> None:
    """Display a run's final result and token usage."""
    if result.outcome == RunOutcome.COMPLETED:
        color = "green"
    elif result.outcome == RunOutcome.MAX_ITERATIONS:
        color = "yellow"
    else:
        color = "red"
    console.print()
    console.print(f"[bold {color}]{result.outcome.value}[/bold {color}]")
    console.print(escape(result.result))
    console.print(
        f"[dim]Tokens: {result.tokens.input_tokens} in / "
        f"{result.tokens.output_tokens} out  "
        f"Interactions: {result.interactions}[/dim]"
    )


def format_tools(tools: list[ToolDefinition], console: Console) -> None:
    """Display tool names and descriptions as a table."""
    if not tools:
        console.print("[dim]No tools.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Tool", style="cyan")
    table.add_column("Parameters", style="yellow")
    table.add_column("Description")

    for tool in tools:
        params = ", ".join(tool.parameters.get("properties", {}).keys())
        table.add_row(tool.name, escape(params), escape(tool.description))

    console.print(table)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {message}", highlight=False)
