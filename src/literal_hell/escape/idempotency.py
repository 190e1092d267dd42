"""Detect candidates whose fix is already reflected in the file on disk.

Re-scanning a file can report text that is in fact already escaped: the
parser may normalise entities, a previous run may have fixed a structurally
similar node, or only some lines of a multi-line text were escaped. The
detector searches a window of raw lines around the reported line.
"""

from __future__ import annotations

import logging

from literal_hell.core.models import MANAGED_CHARACTERS, NOT_MATCHED, IdempotencyMatch
from literal_hell.escape.policy import escape_quotes

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = 10
NEIGHBORHOOD = 10
SIMILARITY_CHARS = 20
ESCAPED_APOSTROPHE = "&apos;"


class IdempotencyDetector:
    """Checks a window of lines for an already-escaped form of a candidate."""

    def __init__(self, window: int = DEFAULT_WINDOW):
        self.window = window

    def check(
        self,
        text: str,
        line: int,
        original: str,
        escaped: str | None = None,
    ) -> IdempotencyMatch:
        """Return how confident we are that *original* is already escaped near *line*.

        *line* is 1-based. *escaped* is the policy's fully escaped text, when
        known; the quote-only escaped form is always tried as well.
        """
        if not any(c in original for c in MANAGED_CHARACTERS):
            return NOT_MATCHED

        lines = text.split("\n")
        start = max(0, line - self.window - 1)
        end = min(len(lines) - 1, line + self.window - 1)
        if start > end:
            return NOT_MATCHED
        window_lines = lines[start:end + 1]

        needles = {escape_quotes(original)}
        if escaped:
            needles.add(escaped)
        needles.discard(original)
        for window_line in window_lines:
            if any(needle in window_line for needle in needles):
                return IdempotencyMatch(matched=True, confidence="high", reason="exact_match")

        if "'" not in original:
            return NOT_MATCHED

        window_text = "\n".join(window_lines)

        if "\n" in original and self._content_similar(original, window_text):
            return IdempotencyMatch(matched=True, confidence="medium", reason="content_similarity")

        if self._apostrophe_contexts_escaped(original, window_text):
            return IdempotencyMatch(matched=True, confidence="medium", reason="character_context")

        return NOT_MATCHED

    @staticmethod
    def _content_similar(original: str, window_text: str) -> bool:
        if window_text.count(ESCAPED_APOSTROPHE) < original.count("'"):
            return False

        stripped_original = original.replace("'", "").lower()
        stripped_window = window_text.replace(ESCAPED_APOSTROPHE, "").lower()
        head = stripped_original[:SIMILARITY_CHARS]
        tail = stripped_original[-SIMILARITY_CHARS:]
        return head in stripped_window and tail in stripped_window

    @staticmethod
    def _apostrophe_contexts_escaped(original: str, window_text: str) -> bool:
        positions = [i for i, c in enumerate(original) if c == "'"]
        if not positions:
            return False
        for pos in positions:
            neighborhood = original[max(0, pos - NEIGHBORHOOD):pos + NEIGHBORHOOD + 1]
            if escape_quotes(neighborhood) not in window_text:
                logger.debug("Apostrophe context %r not found escaped in window", neighborhood)
                return False
        return True
