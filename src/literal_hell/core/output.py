"""Rich terminal formatting for literal-hell output."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from literal_hell.core.config import LiteralHellConfig
from literal_hell.core.models import Candidate, RunSummary

console = Console(highlight=False)
error_console = Console(stderr=True, highlight=False)


def context_lines(text: str, line_number: int, context_size: int = 5) -> str:
    """Render the lines around *line_number* (1-based) with a marker on it."""
    lines = text.split("\n")
    start = max(0, line_number - context_size - 1)
    end = min(len(lines) - 1, line_number + context_size - 1)

    rendered = []
    for i in range(start, end + 1):
        prefix = "[green]→ [/green]" if i == line_number - 1 else "  "
        rendered.append(f"[dim]{i + 1}[/dim]:{prefix}{escape(lines[i])}")
    return "\n".join(rendered)


def format_characters(characters: tuple[str, ...]) -> str:
    return ", ".join(f"\\[  {escape(c)}  ]" for c in characters)


def print_run_options(config: LiteralHellConfig, clear_history: bool) -> None:
    console.print(
        f"[blue]Running with options: verbose={config.verbose}, "
        f"strict={config.strict}, clearHistory={clear_history}[/blue]"
    )
    if config.strict:
        console.print("[yellow]Running in strict mode - will prompt for ALL potential fixes[/yellow]")
    elif config.verbose:
        console.print("[blue]Running in normal mode - will auto-skip common patterns[/blue]")


def print_candidate(candidate: Candidate, text: str, context_size: int) -> None:
    """Print a fix preview: location, context, original and escaped text."""
    lines = [
        context_lines(text, candidate.start_line, context_size),
        "",
        f"Original: {escape(candidate.original)}",
        f"Escaped:  {escape(candidate.escaped)}",
    ]
    if candidate.outcome is not None:
        lines.append(f"[cyan]Characters to escape: {format_characters(candidate.outcome.changed_characters)}[/cyan]")

    console.print()
    console.print(Panel(
        "\n".join(lines),
        title=f"[bold]{escape(candidate.file_path)}:{candidate.start_line}:{candidate.start_column}[/bold]",
        title_align="left",
        border_style="yellow",
        padding=(0, 1),
    ))


def print_more_context(text: str, line_number: int, context_size: int) -> None:
    console.print("[yellow]\nMore context:[/yellow]")
    console.print(context_lines(text, line_number, context_size))
    console.print()


def print_notice(candidate: Candidate, text: str, context_size: int) -> None:
    """Print an informational notice for a likely-already-fixed candidate."""
    console.print(
        f"\n[magenta]Possibly already escaped ({candidate.idempotency.reason}) at "
        f"{escape(candidate.file_path)}:{candidate.start_line}:{candidate.start_column}[/magenta]"
    )
    console.print("[yellow]\nContext:[/yellow]")
    console.print(context_lines(text, candidate.start_line, context_size))


def print_summary(summary: RunSummary) -> None:
    console.print()
    if summary.fixes_applied > 0:
        console.print(
            f"[green]✓ Successfully applied {summary.fixes_applied} fixes "
            f"in {summary.files_changed} file(s)[/green]"
        )
    else:
        console.print("No fixes were applied")
    if summary.declined:
        console.print(f"[dim]{summary.declined} fix(es) declined and remembered[/dim]")
    if summary.auto_skipped:
        console.print(f"[dim]{summary.auto_skipped} candidate(s) auto-skipped by heuristics[/dim]")
    if summary.failures:
        console.print(f"[red]{summary.failures} file(s) failed to save[/red]")


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through rich on stderr; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, show_path=False, markup=False)],
        force=True,
    )
