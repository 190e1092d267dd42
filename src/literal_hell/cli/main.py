"""Click CLI entry point for literal-hell."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from literal_hell._version import __version__
from literal_hell.core.config import load_config
from literal_hell.core.errors import CollaboratorUnavailableError
from literal_hell.core.output import error_console, print_run_options, print_summary, setup_logging
from literal_hell.fix.engine import FixEngine
from literal_hell.fix.review import KeypressDecisions

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "ignore_unknown_options": True,
    "allow_extra_args": True,
}


def _resolve_targets(paths: tuple[str, ...], project_path: Path) -> list[Path]:
    targets = []
    for raw in paths:
        if raw.startswith("-"):
            continue  # unrecognized flag
        path = Path(raw)
        if not path.is_absolute():
            path = project_path / path
        if not path.exists():
            logger.warning("Path not found, skipping: %s", raw)
            continue
        targets.append(path)
    return targets


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("paths", nargs=-1)
@click.option("--verbose", is_flag=True, help="Show detailed logs during processing")
@click.option("--strict", is_flag=True, help="Force prompt for all fixes (no auto-skipping)")
@click.option(
    "--clear-history",
    is_flag=True,
    help="Clear rejection history (re-check previously skipped items)",
)
@click.option("--eslint", "use_eslint", is_flag=True, help="Find candidates with ESLint instead of the parser")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current dir)",
)
@click.version_option(
    __version__, "-v", "--version", prog_name="literal-hell", message="%(prog)s version %(version)s"
)
def cli(
    paths: tuple[str, ...],
    verbose: bool,
    strict: bool,
    clear_history: bool,
    use_eslint: bool,
    root: Path | None,
):
    """literal-hell: HTML entity escaping for string literals and JSX text.

    Walks PATHS (default: the project root) and offers each unescaped
    quote, apostrophe, ampersand or angle bracket for escaping.

    \b
    Interactive commands:
      y (or Enter)  Apply the fix
      n             Skip this fix and remember for future runs
      q             Save changes and exit
      c             Show surrounding code context before deciding
    """
    setup_logging(verbose)
    project_path = (root or Path.cwd()).resolve()

    config = load_config(project_path)
    config.verbose = verbose
    config.strict = strict or config.strict
    if use_eslint:
        config.lint.enabled = True

    print_run_options(config, clear_history)

    engine = FixEngine(KeypressDecisions(), project_path=project_path, config=config)
    if clear_history:
        engine.memory.clear()

    try:
        engine.check_collaborators()
        targets = _resolve_targets(paths, project_path) if paths else None
        summary = engine.run(targets)
    except CollaboratorUnavailableError as e:
        error_console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1)

    print_summary(summary)


if __name__ == "__main__":
    cli()
