"""Escape policy: decide whether a span of text needs HTML entity escaping.

The policy is a pure function of the text plus a little context (file path,
surrounding line). It returns an :class:`EscapeOutcome` that either carries
the escaped text and the distinct characters that changed, or is the
"no escaping needed" form with a reason attached.

Exclusion heuristics weed out common false positives: CSS-in-JS selectors
(``&:hover``, ``&[data-open]``), URL query fragments, operators, font-family
lists and query-parameter strings. Strict mode skips them so every candidate
reaches the user.
"""

from __future__ import annotations

import re

from literal_hell.core.models import ESCAPES, EscapeOutcome

STYLESHEET_EXTENSIONS = (".css", ".scss", ".sass", ".less", ".styl")

FONT_KEYWORDS = (
    "system",
    "serif",
    "sans-serif",
    "monospace",
    "Roboto",
    "Arial",
    "Helvetica",
    "font",
    "Font",
)

QUERY_KEYWORDS = ("query", "filter", "param")

_ENTITY_RE = re.compile(r"&(quot|apos|amp|lt|gt);")
_DOUBLE_ESCAPED_RE = re.compile(r"&amp;(quot|apos|lt|gt);")
_NUMERIC_ENTITY_RE = re.compile(r"&#(\d+|[xX][0-9a-fA-F]+);")
_SINGLE_WORD_RE = re.compile(r"^[A-Za-z-]+$")
_ENHANCED_SELECTOR_RES = (
    re.compile(r"^&[.#\[]"),
    re.compile(r"^&:"),
    re.compile(r"^&>"),
)
_ALL_MANAGED_RE = re.compile(r"[\"'&<>]")
_QUOTES_RE = re.compile(r"[\"']")


def contains_entities(text: str) -> bool:
    """Return True if *text* already holds an escaped form of a managed character."""
    return bool(
        _ENTITY_RE.search(text)
        or _DOUBLE_ESCAPED_RE.search(text)
        or _NUMERIC_ENTITY_RE.search(text)
    )


def escape_quotes(text: str) -> str:
    """Escape only quotes and apostrophes, leaving ``& < >`` alone."""
    return _QUOTES_RE.sub(lambda m: ESCAPES[m.group(0)], text)


def is_stylesheet(file_path: str) -> bool:
    return str(file_path).endswith(STYLESHEET_EXTENSIONS)


def _in_style_context(text: str, file_path: str, line_text: str) -> bool:
    if (text.startswith("&") or " &" in text) and any(
        marker in file_path for marker in ("style", "Style", ".css", ".scss")
    ):
        return True
    return (
        any(marker in line_text for marker in ("style", "Style", "className", "css"))
        and (":" in line_text or "=" in line_text)
        and ("-" in text or " " in text or "," in text)
    )


def _looks_like_font_list(text: str) -> bool:
    return any(keyword in text for keyword in FONT_KEYWORDS) and (
        "," in text or bool(_SINGLE_WORD_RE.match(text))
    )


def exclusion_reason(text: str, file_path: str = "", line_text: str = "") -> str | None:
    """Return the name of the first exclusion heuristic matching *text*, if any."""
    file_path = str(file_path)

    if ("?" in text and "&" in text and " " not in text) or (
        text.startswith("&") and "=" in text and " " not in text
    ):
        return "URL query parameters"

    if text.startswith("&") and ":" in text:
        return "CSS pseudo-selector"

    if text in ("&", "&&", ">>"):
        return "Operator or bare ampersand"

    if text.startswith("&") and any(c in text for c in (" ", "[", ":")):
        return "CSS selector pattern"

    if is_stylesheet(file_path):
        return "CSS file content"

    if _in_style_context(text, file_path, line_text):
        return "Likely CSS-in-JS pattern"

    if _looks_like_font_list(text):
        return "Font family declaration"

    if "&" in text and any(keyword in text for keyword in QUERY_KEYWORDS):
        return "Query parameter pattern"

    if any(pattern.search(text) for pattern in _ENHANCED_SELECTOR_RES) or " & " in text:
        return "CSS selector pattern (enhanced detection)"

    return None


def _escape(text: str, pattern: re.Pattern[str]) -> EscapeOutcome:
    changed: list[str] = []

    def _replace(match: re.Match[str]) -> str:
        changed.append(match.group(0))
        return ESCAPES[match.group(0)]

    escaped = pattern.sub(_replace, text)
    if not changed:
        return EscapeOutcome.unchanged(text, reason="Nothing to escape")
    return EscapeOutcome(escaped_text=escaped, changed_characters=tuple(dict.fromkeys(changed)))


def decide(
    text: str,
    *,
    file_path: str = "",
    line_text: str = "",
    strict: bool = False,
    markup: bool = False,
) -> EscapeOutcome:
    """Decide how *text* should be escaped.

    Order matters: exclusion heuristics (skipped in strict mode), then the
    already-escaped check, then the markup-protection rule for text holding
    angle brackets, and finally full escaping of all managed characters.
    JSX text (*markup*) only ever gets its quotes escaped, so a bare ``&``
    in it needs nothing.
    """
    if not strict:
        reason = exclusion_reason(text, file_path, line_text)
        if reason:
            return EscapeOutcome.unchanged(text, reason=reason, auto_skipped=True)

    if contains_entities(text):
        return EscapeOutcome.unchanged(text, reason="Already escaped")

    # Nested markup: only quotes are safe to touch
    if markup or "<" in text or ">" in text:
        return _escape(text, _QUOTES_RE)

    return _escape(text, _ALL_MANAGED_RE)
