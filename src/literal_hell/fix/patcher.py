"""Safe text patching of approved fixes.

Every edit is local to one line of an immutable line tuple, so applying
candidates from the end of the file backwards never invalidates the
recorded positions of the candidates still waiting.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from literal_hell.core.errors import WriteVerificationError
from literal_hell.core.files import write_with_verification
from literal_hell.core.models import Candidate, ContextKind
from literal_hell.escape.policy import escape_quotes

logger = logging.getLogger(__name__)

# &amp;apos; and friends: an entity whose ampersand got escaped again
_CORRUPTED_ENTITY_RE = re.compile(r"&amp;(quot|apos|amp|lt|gt|#\d+);")


@dataclass(frozen=True)
class PatchResult:
    lines: tuple[str, ...]
    applied: bool
    abort_file: bool = False
    message: str = ""


@dataclass(frozen=True)
class WriteResult:
    success: bool
    message: str
    size: int = 0


def count_corrupted_entities(text: str) -> int:
    return len(_CORRUPTED_ENTITY_RE.findall(text))


class SafeTextPatcher:
    """Applies one candidate at a time and commits the result to disk."""

    def apply(self, lines: tuple[str, ...], candidate: Candidate) -> PatchResult:
        if candidate.kind == ContextKind.LITERAL:
            result = self._apply_literal(lines, candidate)
        elif candidate.is_multiline:
            result = self._apply_multiline_markup(lines, candidate)
        else:
            result = self._apply_markup(lines, candidate)

        if result.applied and result.lines == lines:
            where = f"{candidate.file_path}:{candidate.start_line}:{candidate.start_column}"
            return self._skip(lines, f"Fix at {where} leaves the text unchanged")
        return result

    def _skip(self, lines: tuple[str, ...], message: str, abort_file: bool = False) -> PatchResult:
        logger.warning(message)
        return PatchResult(lines=lines, applied=False, abort_file=abort_file, message=message)

    def _apply_literal(self, lines: tuple[str, ...], candidate: Candidate) -> PatchResult:
        where = f"{candidate.file_path}:{candidate.start_line}:{candidate.start_column}"
        index = candidate.start_line - 1
        if not 0 <= index < len(lines):
            return self._skip(lines, f"Line {candidate.start_line} no longer exists at {where}")

        target = lines[index]
        column = candidate.start_column
        quote = target[column] if column < len(target) else ""
        if quote not in ("'", '"'):
            return self._skip(lines, f"No string quote at {where}")

        content_start = column + 1
        closing = _closing_quote(target, quote, content_start)
        if closing < 0:
            return self._skip(lines, f"No closing quote on the same line at {where}")

        content = target[content_start:closing]
        if content != candidate.original:
            return self._skip(
                lines,
                f'String content mismatch at {where}: expected "{candidate.original}" but found "{content}"',
            )

        patched = target[:content_start] + candidate.escaped + target[closing:]
        logger.debug("Replaced string literal at %s", where)
        return PatchResult(lines=_replace_line(lines, index, patched), applied=True)

    def _apply_markup(self, lines: tuple[str, ...], candidate: Candidate) -> PatchResult:
        where = f"{candidate.file_path}:{candidate.start_line}"
        index = candidate.start_line - 1
        if not 0 <= index < len(lines):
            return self._skip(lines, f"Line {candidate.start_line} no longer exists at {where}")

        target = lines[index]
        found = target.find(candidate.original, candidate.start_column)
        if found < 0:
            found = target.find(candidate.original)
        if found < 0:
            return self._skip(lines, f'Could not find JSX text "{candidate.original}" at {where}')

        rest = target[:found] + target[found + len(candidate.original):]
        if "<" in rest and ">" in rest:
            return self._skip(
                lines,
                f"Skipping single-line JSX with tags at {where}: {target.strip()[:50]}...",
                abort_file=True,
            )

        patched = target[:found] + escape_quotes(candidate.original) + target[found + len(candidate.original):]
        logger.debug("Replaced JSX text with quote/apostrophe escaping at %s", where)
        return PatchResult(lines=_replace_line(lines, index, patched), applied=True)

    def _apply_multiline_markup(self, lines: tuple[str, ...], candidate: Candidate) -> PatchResult:
        where = f"{candidate.file_path}:{candidate.start_line}-{candidate.end_line}"
        segments = [s.strip() for s in candidate.original.split("\n") if s.strip()]
        first = max(0, candidate.start_line - 1)
        last = min(len(lines) - 1, candidate.end_line - 1)

        edits: list[tuple[int, str]] = []
        search_from = first
        for segment in segments:
            for index in range(search_from, last + 1):
                found = lines[index].find(segment)
                if found >= 0:
                    line = lines[index]
                    edits.append((index, line[:found] + escape_quotes(segment) + line[found + len(segment):]))
                    search_from = index + 1
                    break
            else:
                return self._skip(lines, f'Could not find JSX text "{segment}" within {where}')

        patched = lines
        for index, new_line in edits:
            patched = _replace_line(patched, index, new_line)
        logger.debug("Replaced multi-line JSX text at %s", where)
        return PatchResult(lines=patched, applied=True)

    def commit(self, path: Path, original_text: str, lines: tuple[str, ...]) -> WriteResult:
        """Write patched *lines* to *path*, refusing output that looks double-escaped."""
        content = "\n".join(lines)
        if count_corrupted_entities(content) > count_corrupted_entities(original_text):
            message = f"Detected potentially corrupted escapes in {path}. Skipping file."
            logger.warning(message)
            return WriteResult(success=False, message=message)

        try:
            size = write_with_verification(path, content)
        except (OSError, WriteVerificationError) as e:
            message = f"Error saving file {path}: {e}"
            logger.error(message)
            return WriteResult(success=False, message=message)

        return WriteResult(success=True, message=f"Saved {path}", size=size)


def _replace_line(lines: tuple[str, ...], index: int, new_line: str) -> tuple[str, ...]:
    return lines[:index] + (new_line,) + lines[index + 1:]


def _closing_quote(line: str, quote: str, start: int) -> int:
    """Index of the first unescaped *quote* at or after *start*, or -1."""
    i = start
    while i < len(line):
        if line[i] == "\\":
            i += 2
            continue
        if line[i] == quote:
            return i
        i += 1
    return -1
