"""Candidate extraction from syntax nodes or lint findings."""

from __future__ import annotations

import logging

from literal_hell.core.models import (
    MANAGED_CHARACTERS,
    Ancestry,
    Candidate,
    ContextKind,
    LintFinding,
    LiteralNode,
    SyntaxNode,
)
from literal_hell.escape.policy import contains_entities

logger = logging.getLogger(__name__)

SKIPPED_ANCESTRY = (Ancestry.JSX_ATTRIBUTE, Ancestry.JSX_SPREAD_ATTRIBUTE)
SPAN_BOUNDARIES = "<>{}"


def has_managed_characters(text: str) -> bool:
    return any(c in text for c in MANAGED_CHARACTERS)


def _enclosing_lines(lines: list[str], start_line: int, end_line: int) -> tuple[str, ...]:
    return tuple(lines[max(0, start_line - 1):end_line])


def extract_from_nodes(nodes: list[SyntaxNode], text: str, file_path: str) -> list[Candidate]:
    """Turn parsed nodes into candidates, in the order the nodes were found.

    Literal values of JSX attributes (and of objects spread into a tag) are
    props, not printed text, and are never candidates.
    """
    lines = text.split("\n")
    candidates: list[Candidate] = []

    for node in nodes:
        trimmed = node.value.strip()
        if not trimmed or not has_managed_characters(trimmed):
            continue

        if isinstance(node, LiteralNode):
            if node.ancestry in SKIPPED_ANCESTRY:
                logger.debug(
                    "Skipping prop value at %s:%d:%d", file_path, node.start.line, node.start.column
                )
                continue
            kind = ContextKind.LITERAL
            original = node.value
        else:
            kind = ContextKind.MARKUP_TEXT
            original = trimmed

        candidates.append(Candidate(
            file_path=file_path,
            start_line=node.start.line,
            start_column=node.start.column,
            end_line=node.end.line,
            end_column=node.end.column,
            kind=kind,
            original=original,
            raw_value=node.value,
            enclosing_lines=_enclosing_lines(lines, node.start.line, node.end.line),
        ))

    return candidates


def _text_span(line: str, index: int, length: int) -> tuple[int, int]:
    """Widen ``line[index:index + length]`` to the surrounding markup text."""
    left = index
    while left > 0 and line[left - 1] not in SPAN_BOUNDARIES:
        left -= 1
    right = index + length
    while right < len(line) and line[right] not in SPAN_BOUNDARIES:
        right += 1
    return left, right


def extract_from_findings(findings: list[LintFinding], text: str, file_path: str) -> list[Candidate]:
    """Map lint findings back to the markup text span holding each character.

    Several findings inside one span collapse into a single candidate.
    """
    lines = text.split("\n")
    candidates: dict[tuple[int, int], Candidate] = {}

    for finding in findings:
        if finding.line < 1 or finding.line > len(lines) or finding.column < 1:
            logger.debug(
                "Lint finding outside file bounds: %s:%d:%d", file_path, finding.line, finding.column
            )
            continue
        line = lines[finding.line - 1]
        index = finding.column - 1
        if line[index:index + len(finding.entity)] != finding.entity:
            logger.debug(
                "Lint finding %r not found at %s:%d:%d",
                finding.entity, file_path, finding.line, finding.column,
            )
            continue

        left, right = _text_span(line, index, len(finding.entity))
        span = line[left:right]
        original = span.strip()
        if contains_entities(original):
            continue
        column = left + len(span) - len(span.lstrip())

        key = (finding.line, column)
        if key in candidates:
            continue
        candidates[key] = Candidate(
            file_path=file_path,
            start_line=finding.line,
            start_column=column,
            end_line=finding.line,
            end_column=column + len(original),
            kind=ContextKind.MARKUP_TEXT,
            original=original,
            raw_value=original,
            enclosing_lines=(line,),
        )

    return list(candidates.values())
