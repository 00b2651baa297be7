"""
Rendering functions for upkeep output.

This module handles all pretty-printing for --pretty.
Services return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Iterable, List

from .domain.checkout import LocalCheckoutResult
from .domain.maintenance import StepResult, StepStatus
from .domain.version import SemanticVersion

console = Console()

STATUS_STYLES = {
    StepStatus.SUCCESS: ("[green]✓[/green]", "green"),
    StepStatus.WARNING: ("[yellow]⚠[/yellow]", "yellow"),
    StepStatus.FAILED: ("[red]✗[/red]", "red"),
    StepStatus.SKIPPED: ("[blue]-[/blue]", "blue"),
}


def print_step(message: str) -> None:
    console.print(f"[blue]==>[/blue] {message}")


def render_step(result: StepResult) -> None:
    """Print one status line as the step completes."""
    symbol, _ = STATUS_STYLES[result.status]
    text = result.message or result.name
    if result.message and result.command:
        text = f"{result.name}: {result.message}"
    console.print(f"{symbol} {text}", highlight=False)


def render_steps(results: Iterable[StepResult], title: str) -> List[StepResult]:
    """
    Stream status lines, then print a summary table.

    Returns:
        The rendered results
    """
    print_step(title)
    rendered = []
    for result in results:
        render_step(result)
        rendered.append(result)

    render_summary(rendered)
    return rendered


def render_summary(results: List[StepResult]) -> None:
    if not results:
        console.print("[yellow]No steps ran.[/yellow]")
        return

    table = Table(
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Step")
    table.add_column("Status")
    table.add_column("Details")

    for result in results:
        _, color = STATUS_STYLES[result.status]
        table.add_row(
            result.name,
            f"[{color}]{result.status.value}[/{color}]",
            result.message or "",
        )

    console.print(table)

    warnings = sum(1 for r in results if r.status == StepStatus.WARNING)
    if warnings:
        console.print(f"[yellow]{warnings} check(s) need attention[/yellow]")
    else:
        console.print("[green]All checks completed[/green]")


def render_version(version: SemanticVersion, remote_url: str) -> None:
    console.print(f"Latest release of [bold]{remote_url}[/bold]: [green]{version}[/green]")


def render_checkout(result: LocalCheckoutResult) -> None:
    prefix = "[Dry Run] " if result.dry_run else ""
    if result.changed:
        previous = result.previous_ref or result.previous_state.value
        console.print(f"{prefix}[green]✓[/green] {result.path}: {previous} → [bold]{result.tag}[/bold]")
    else:
        console.print(f"{prefix}[green]✓[/green] {result.path} already at [bold]{result.tag}[/bold]")
    console.print(f"  operations: {', '.join(result.operations)}", style="dim")
