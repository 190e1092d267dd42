"""Shared data models used across literal-hell modules."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Union

MANAGED_CHARACTERS = ("'", '"', "&", "<", ">")

ESCAPES = {
    '"': "&quot;",
    "'": "&apos;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
}


class ContextKind(enum.Enum):
    LITERAL = "literal"
    MARKUP_TEXT = "markup_text"


class Ancestry(enum.Enum):
    """Where a node sits relative to the surrounding markup."""

    CODE = "code"
    JSX_ATTRIBUTE = "jsx_attribute"
    JSX_SPREAD_ATTRIBUTE = "jsx_spread_attribute"
    JSX_CHILD = "jsx_child"


class Decision(enum.Enum):
    APPLY = "y"
    DECLINE = "n"
    QUIT = "q"
    SHOW_CONTEXT = "c"


class FileStatus(enum.Enum):
    UNCHANGED = "unchanged"
    SAVED = "saved"
    ABORTED = "aborted"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Position:
    line: int  # 1-based
    column: int  # 0-based, in characters


@dataclass(frozen=True)
class LiteralNode:
    """A quoted string literal; ``value`` is the raw text between the quotes."""

    value: str
    start: Position
    end: Position
    ancestry: Ancestry = Ancestry.CODE


@dataclass(frozen=True)
class MarkupTextNode:
    """Text embedded directly in markup, including its surrounding whitespace."""

    value: str
    start: Position
    end: Position
    ancestry: Ancestry = Ancestry.JSX_CHILD


SyntaxNode = Union[LiteralNode, MarkupTextNode]


@dataclass(frozen=True)
class LintFinding:
    """A single finding reported by the external lint analyzer."""

    file_path: str
    line: int  # 1-based
    column: int  # 1-based, as reported by the linter
    entity: str
    message: str = ""


@dataclass(frozen=True)
class EscapeOutcome:
    """Result of the escape policy for one span of text."""

    escaped_text: str
    changed_characters: tuple[str, ...] = ()
    reason: str = ""
    auto_skipped: bool = False

    @property
    def needs_escaping(self) -> bool:
        return bool(self.changed_characters)

    @classmethod
    def unchanged(cls, text: str, reason: str = "", auto_skipped: bool = False) -> EscapeOutcome:
        return cls(escaped_text=text, reason=reason, auto_skipped=auto_skipped)


@dataclass(frozen=True)
class IdempotencyMatch:
    matched: bool
    confidence: str | None = None  # "high", "medium"
    reason: str = ""


NOT_MATCHED = IdempotencyMatch(matched=False)


def create_fix_key(file_path: str, line: int, column: int, original: str) -> str:
    """Create the unique key identifying a fix across runs."""
    return f"{file_path}:{line}:{column}:{original}"


@dataclass
class Candidate:
    """A detected span of source text that may need escaping."""

    file_path: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    kind: ContextKind
    original: str
    raw_value: str = ""
    enclosing_lines: tuple[str, ...] = ()
    outcome: EscapeOutcome | None = None
    idempotency: IdempotencyMatch = NOT_MATCHED
    decision: Decision | None = None

    @property
    def key(self) -> str:
        return create_fix_key(self.file_path, self.start_line, self.start_column, self.original)

    @property
    def escaped(self) -> str:
        return self.outcome.escaped_text if self.outcome else self.original

    @property
    def is_multiline(self) -> bool:
        return self.start_line != self.end_line or "\n" in self.raw_value or "\n" in self.original

    @property
    def is_informational(self) -> bool:
        """A likely-already-fixed candidate that is shown but not offered."""
        return self.idempotency.matched and self.idempotency.confidence == "medium"


@dataclass
class RejectedFixRecord:
    """A fix the user declined, or that was auto-skipped by a heuristic."""

    file_path: str
    line: int
    column: int
    original: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    reason: str | None = None
    auto_skipped: bool = False

    @property
    def key(self) -> str:
        return create_fix_key(self.file_path, self.line, self.column, self.original)

    def to_dict(self) -> dict:
        data = {
            "filePath": self.file_path,
            "line": self.line,
            "column": self.column,
            "original": self.original,
            "timestamp": self.timestamp,
        }
        if self.reason:
            data["reason"] = self.reason
        if self.auto_skipped:
            data["autoSkipped"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict) -> RejectedFixRecord:
        return cls(
            file_path=data["filePath"],
            line=int(data["line"]),
            column=int(data["column"]),
            original=data["original"],
            timestamp=data.get("timestamp", ""),
            reason=data.get("reason"),
            auto_skipped=bool(data.get("autoSkipped", False)),
        )


@dataclass
class SourceFile:
    """One file under review: raw text, line view, and the mtime seen at open."""

    path: Path
    display_path: str
    text: str
    mtime_ns: int = 0

    @classmethod
    def open(cls, path: Path, display_path: str, text: str) -> SourceFile:
        return cls(path=path, display_path=display_path, text=text, mtime_ns=os.stat(path).st_mtime_ns)

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self.text.split("\n"))

    def modified_externally(self) -> bool:
        try:
            return os.stat(self.path).st_mtime_ns != self.mtime_ns
        except OSError:
            return True

    def refresh_mtime(self) -> None:
        self.mtime_ns = os.stat(self.path).st_mtime_ns


@dataclass
class FileResult:
    """Outcome of reviewing one file."""

    path: str
    status: FileStatus
    applied: int = 0
    declined: int = 0
    saved: bool = False
    quit: bool = False
    message: str = ""


@dataclass
class RunSummary:
    """Totals for a whole run."""

    files_scanned: int = 0
    files_changed: int = 0
    fixes_applied: int = 0
    declined: int = 0
    auto_skipped: int = 0
    already_fixed: int = 0
    failures: int = 0
    quit: bool = False
    results: list[FileResult] = field(default_factory=list)

    def add(self, result: FileResult) -> None:
        self.results.append(result)
        self.fixes_applied += result.applied
        self.declined += result.declined
        if result.saved:
            self.files_changed += 1
        if result.status == FileStatus.FAILED:
            self.failures += 1
        if result.quit:
            self.quit = True
