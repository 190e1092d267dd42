"""Syntax-tree provider backed by tree-sitter.

Parses JavaScript, TypeScript and their JSX flavours and flattens the tree
into the two node kinds the extractor cares about: quoted string literals
and runs of markup text inside JSX elements. Each node is classified once,
here, by where it sits (attribute value, spread attribute, element child or
plain code).

Positions are 1-based lines and 0-based character columns. tree-sitter
reports byte columns, so they are converted against the line's bytes.
"""

from __future__ import annotations

import logging
from pathlib import Path

from literal_hell.core.errors import CollaboratorUnavailableError, ParseError
from literal_hell.core.models import Ancestry, LiteralNode, MarkupTextNode, Position, SyntaxNode

logger = logging.getLogger(__name__)

STRING_TYPES = {"string"}
TEXT_TYPES = {"jsx_text", "html_character_reference"}
ELEMENT_TYPES = {"jsx_element", "jsx_fragment"}
JSX_TAG_TYPES = {"jsx_opening_element", "jsx_self_closing_element"}

GRAMMAR_BY_SUFFIX = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}


def _load_language(grammar: str):
    from tree_sitter import Language

    if grammar == "javascript":
        import tree_sitter_javascript

        return Language(tree_sitter_javascript.language())

    import tree_sitter_typescript

    if grammar == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    return Language(tree_sitter_typescript.language_tsx())


class TreeSitterProvider:
    """Produces :data:`SyntaxNode` lists from source text."""

    def __init__(self) -> None:
        self._parsers: dict[str, object] = {}

    def check_available(self) -> None:
        """Load every grammar up front so a missing one fails the run early."""
        for grammar in set(GRAMMAR_BY_SUFFIX.values()):
            self._parser_for(grammar)

    def _parser_for(self, grammar: str):
        parser = self._parsers.get(grammar)
        if parser is None:
            try:
                from tree_sitter import Parser

                parser = Parser(_load_language(grammar))
            except (ImportError, OSError, ValueError, TypeError) as e:
                raise CollaboratorUnavailableError(
                    f"tree-sitter {grammar} grammar is not available: {e}"
                ) from e
            self._parsers[grammar] = parser
        return parser

    def parse(self, text: str, file_path: Path | str = "") -> list[SyntaxNode]:
        """Parse *text* and return literal and markup-text nodes in document order."""
        grammar = GRAMMAR_BY_SUFFIX.get(Path(file_path).suffix.lower(), "tsx")
        parser = self._parser_for(grammar)
        source = text.encode("utf-8")

        try:
            tree = parser.parse(source)
        except (ValueError, TypeError) as e:
            raise ParseError(file_path, str(e)) from e
        if tree is None or tree.root_node is None:
            raise ParseError(file_path, "parser returned no tree")
        if tree.root_node.has_error:
            logger.debug("Parsed %s with recoverable syntax errors", file_path)

        return _NodeCollector(source).collect(tree.root_node)


class _NodeCollector:
    def __init__(self, source: bytes):
        self.source = source
        self.line_bytes = source.split(b"\n")

    def _position(self, point) -> Position:
        row, byte_column = point[0], point[1]
        line = self.line_bytes[row] if row < len(self.line_bytes) else b""
        column = len(line[:byte_column].decode("utf-8", errors="ignore"))
        return Position(line=row + 1, column=column)

    def _text(self, start_byte: int, end_byte: int) -> str:
        return self.source[start_byte:end_byte].decode("utf-8", errors="replace")

    def collect(self, root) -> list[SyntaxNode]:
        nodes: list[SyntaxNode] = []
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in STRING_TYPES:
                nodes.append(self._literal(node))
                continue
            if node.type in ELEMENT_TYPES:
                nodes.extend(self._markup_runs(node))
            stack.extend(reversed([c for c in node.children if c.type not in TEXT_TYPES]))

        nodes.sort(key=lambda n: (n.start.line, n.start.column))
        return nodes

    def _literal(self, node) -> LiteralNode:
        # Raw source between the quotes: backslash escapes are kept, so an
        # escaped \' becomes \&apos; once fixed, which JS reads as &apos;
        return LiteralNode(
            value=self._text(node.start_byte + 1, node.end_byte - 1),
            start=self._position(node.start_point),
            end=self._position(node.end_point),
            ancestry=_literal_ancestry(node),
        )

    def _is_stray_text(self, node) -> bool:
        # The grammar rejects a bare "&" in JSX text and wraps it in an ERROR node
        if node.type != "ERROR":
            return False
        return not any(c in self._text(node.start_byte, node.end_byte) for c in "<>{}")

    def _markup_runs(self, element) -> list[MarkupTextNode]:
        """Group adjacent text children so a paragraph forms one node."""
        runs: list[list] = []
        current: list = []
        for child in element.children:
            if child.type in TEXT_TYPES or self._is_stray_text(child):
                current.append(child)
                continue
            if current:
                runs.append(current)
                current = []
        if current:
            runs.append(current)

        return [
            MarkupTextNode(
                value=self._text(run[0].start_byte, run[-1].end_byte),
                start=self._position(run[0].start_point),
                end=self._position(run[-1].end_point),
            )
            for run in runs
        ]


def _literal_ancestry(node) -> Ancestry:
    parent = node.parent
    if parent is None:
        return Ancestry.CODE
    if parent.type == "jsx_attribute":
        return Ancestry.JSX_ATTRIBUTE

    # <div {...{ title: "x" }} />
    if parent.type == "pair":
        obj = parent.parent
        spread = obj.parent if obj is not None else None
        container = spread.parent if spread is not None else None
        tag = container.parent if container is not None else None
        if (
            obj is not None
            and obj.type == "object"
            and spread is not None
            and spread.type == "spread_element"
            and container is not None
            and container.type == "jsx_expression"
            and tag is not None
            and tag.type in JSX_TAG_TYPES
        ):
            return Ancestry.JSX_SPREAD_ATTRIBUTE
    return Ancestry.CODE
