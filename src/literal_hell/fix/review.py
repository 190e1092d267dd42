"""Interactive review of candidates, one file at a time.

The loop is driven by a :class:`DecisionSource`, so it runs the same with a
real keyboard (:class:`KeypressDecisions`) or a scripted list of answers.
Candidates are offered from the end of the file backwards: the patcher edits
lines in place, and working backwards keeps every earlier candidate's
recorded position valid.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import click
from rich.markup import escape

from literal_hell.core.config import LiteralHellConfig
from literal_hell.core.errors import ExternalModificationError
from literal_hell.core.models import Candidate, Decision, FileResult, FileStatus, SourceFile
from literal_hell.core.output import (
    console,
    print_candidate,
    print_more_context,
    print_notice,
)
from literal_hell.fix.memory import RejectionMemory
from literal_hell.fix.patcher import SafeTextPatcher

logger = logging.getLogger(__name__)

PROMPT = "Apply fix? (y/n/q/c for more context) [y]: "

KEYS = {
    "y": Decision.APPLY,
    "\r": Decision.APPLY,
    "\n": Decision.APPLY,
    "n": Decision.DECLINE,
    "q": Decision.QUIT,
    "c": Decision.SHOW_CONTEXT,
}

CTRL_C = "\x03"


class DecisionSource(ABC):
    """Where review decisions come from."""

    @abstractmethod
    def read(self, prompt: str) -> Decision:
        """Block until the user makes a decision."""
        ...

    @abstractmethod
    def acknowledge(self, message: str = "") -> None:
        """Block until the user acknowledges an informational notice."""
        ...


class KeypressDecisions(DecisionSource):
    """Single-keystroke decisions read from the terminal."""

    def __init__(self, getchar=click.getchar):
        self._getchar = getchar

    def _key(self) -> str:
        key = self._getchar()
        if key == CTRL_C:
            raise KeyboardInterrupt
        return key

    def read(self, prompt: str) -> Decision:
        click.echo(prompt, nl=False)
        while True:
            decision = KEYS.get(self._key().lower())
            if decision is not None:
                click.echo(decision.value)
                return decision

    def acknowledge(self, message: str = "") -> None:
        if message:
            console.print(f"[magenta]{message}[/magenta]")
        console.print("[cyan]Press any key to continue...[/cyan]")
        self._key()
        click.echo()


def order_for_application(candidates: list[Candidate]) -> list[Candidate]:
    """Sort by descending line, then descending column."""
    return sorted(candidates, key=lambda c: (c.start_line, c.start_column), reverse=True)


class ReviewLoop:
    """Presents each candidate of a file and applies the user's decisions."""

    def __init__(
        self,
        config: LiteralHellConfig,
        memory: RejectionMemory,
        decisions: DecisionSource,
        patcher: SafeTextPatcher | None = None,
    ):
        self.config = config
        self.memory = memory
        self.decisions = decisions
        self.patcher = patcher or SafeTextPatcher()

    def pending(self, candidates: list[Candidate]) -> list[Candidate]:
        """Drop remembered rejections and order the rest for application."""
        # Strict mode re-surfaces heuristic auto-skips, never user declines
        include_auto_skipped = not self.config.strict
        kept = []
        for candidate in candidates:
            if self.memory.is_rejected(candidate.key, include_auto_skipped=include_auto_skipped):
                logger.info(
                    "Skipping previously rejected fix in %s:%d:%d",
                    candidate.file_path, candidate.start_line, candidate.start_column,
                )
                continue
            kept.append(candidate)
        return order_for_application(kept)

    def review(self, source: SourceFile, candidates: list[Candidate]) -> FileResult:
        queue = self.pending(candidates)
        if not queue:
            return FileResult(path=source.display_path, status=FileStatus.UNCHANGED)

        logger.info("Processing %d fixes in %s", len(queue), source.display_path)
        lines = source.lines
        applied = 0
        declined = 0
        decision = None

        try:
            for candidate in queue:
                if candidate.is_informational:
                    print_notice(candidate, source.text, self.config.review.notice_context_lines)
                    self.decisions.acknowledge()
                    continue

                decision = self._ask(candidate, source)
                candidate.decision = decision

                if decision == Decision.DECLINE:
                    self.memory.reject(
                        candidate.file_path, candidate.start_line, candidate.start_column, candidate.original
                    )
                    declined += 1
                    continue

                if source.modified_externally():
                    raise ExternalModificationError(source.display_path)

                if decision == Decision.QUIT:
                    logger.info("Saving rejection history and exiting...")
                    return self._finish(source, lines, applied, declined, quit=True)

                logger.info("Applying fix: %s -> %s", candidate.original, candidate.escaped)
                result = self.patcher.apply(lines, candidate)
                if result.applied:
                    lines = result.lines
                    applied += 1
                if result.abort_file:
                    break
        except ExternalModificationError as e:
            message = f"{e}. Aborting processing of this file."
            logger.warning(message)
            return FileResult(
                path=source.display_path,
                status=FileStatus.ABORTED,
                declined=declined,
                quit=decision == Decision.QUIT,
                message=message,
            )
        except KeyboardInterrupt:
            console.print()
            logger.warning("Interrupted while reviewing %s", source.display_path)
            return self._finish(source, lines, applied, declined, quit=True)

        return self._finish(source, lines, applied, declined)

    def _ask(self, candidate: Candidate, source: SourceFile) -> Decision:
        print_candidate(candidate, source.text, self.config.review.context_lines)
        while True:
            decision = self.decisions.read(PROMPT)
            if decision != Decision.SHOW_CONTEXT:
                return decision
            print_more_context(source.text, candidate.start_line, self.config.review.more_context_lines)

    def _finish(
        self,
        source: SourceFile,
        lines: tuple[str, ...],
        applied: int,
        declined: int,
        quit: bool = False,
    ) -> FileResult:
        """Write pending edits, if any, and describe the outcome."""
        path = source.display_path
        if applied == 0:
            return FileResult(path=path, status=FileStatus.UNCHANGED, declined=declined, quit=quit)

        if source.modified_externally():
            message = f"File {path} was modified externally. Discarding {applied} pending fix(es)."
            logger.warning(message)
            return FileResult(path=path, status=FileStatus.ABORTED, declined=declined, quit=quit, message=message)

        logger.info("Writing changes to %s...", path)
        written = self.patcher.commit(source.path, source.text, lines)
        if not written.success:
            return FileResult(
                path=path, status=FileStatus.FAILED, declined=declined, quit=quit, message=written.message
            )

        source.text = "\n".join(lines)
        source.refresh_mtime()
        console.print(f"[green]✓ Successfully saved: {escape(path)}[/green]")
        return FileResult(
            path=path,
            status=FileStatus.SAVED,
            applied=applied,
            declined=declined,
            saved=True,
            quit=quit,
        )
