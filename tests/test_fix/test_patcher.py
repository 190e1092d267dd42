"""Tests for safe text patching and verified writes."""

from __future__ import annotations

from pathlib import Path

import pytest

from literal_hell.core.models import Candidate, ContextKind, EscapeOutcome
from literal_hell.escape.policy import decide
from literal_hell.fix.patcher import SafeTextPatcher, count_corrupted_entities
from literal_hell.fix.review import order_for_application


@pytest.fixture
def patcher() -> SafeTextPatcher:
    return SafeTextPatcher()


def _literal(line: int, column: int, original: str) -> Candidate:
    return Candidate(
        file_path="a.js",
        start_line=line,
        start_column=column,
        end_line=line,
        end_column=column + len(original) + 2,
        kind=ContextKind.LITERAL,
        original=original,
        raw_value=original,
        outcome=decide(original, strict=True),
    )


def _markup(line: int, column: int, original: str, end_line: int | None = None, raw: str = "") -> Candidate:
    return Candidate(
        file_path="a.jsx",
        start_line=line,
        start_column=column,
        end_line=end_line or line,
        end_column=0,
        kind=ContextKind.MARKUP_TEXT,
        original=original,
        raw_value=raw or original,
        outcome=decide(original, strict=True),
    )


class TestLiterals:
    def test_replaces_literal_content(self, patcher: SafeTextPatcher):
        lines = ("const a = 'Tom & Jerry';",)
        result = patcher.apply(lines, _literal(1, 10, "Tom & Jerry"))

        assert result.applied
        assert result.lines == ("const a = 'Tom &amp; Jerry';",)

    def test_double_quoted_literal(self, patcher: SafeTextPatcher):
        lines = ('x = "it\'s";',)
        result = patcher.apply(lines, _literal(1, 4, "it's"))

        assert result.lines == ('x = "it&apos;s";',)

    def test_content_mismatch_is_skipped(self, patcher: SafeTextPatcher):
        lines = ("const a = 'Tom and Jerry';",)
        result = patcher.apply(lines, _literal(1, 10, "Tom & Jerry"))

        assert not result.applied
        assert not result.abort_file
        assert result.lines == lines
        assert "mismatch" in result.message

    def test_no_quote_at_column(self, patcher: SafeTextPatcher):
        lines = ("const a = 'x&y';",)
        result = patcher.apply(lines, _literal(1, 3, "x&y"))
        assert not result.applied

    def test_closing_quote_on_another_line(self, patcher: SafeTextPatcher):
        lines = ("const a = 'x&y", "';")
        result = patcher.apply(lines, _literal(1, 10, "x&y"))
        assert not result.applied

    def test_escaped_quote_inside_literal(self, patcher: SafeTextPatcher):
        """A backslash-escaped quote does not close the string."""
        lines = ("const s = 'It\\'s \"ok\"';",)
        result = patcher.apply(lines, _literal(1, 10, "It\\'s \"ok\""))

        assert result.applied
        # JS reads \& as &, so the value still renders as It's "ok"
        assert result.lines == ("const s = 'It\\&apos;s &quot;ok&quot;';",)

    def test_unchanged_fix_is_not_applied(self, patcher: SafeTextPatcher):
        lines = ("const a = 'plain';",)
        candidate = _literal(1, 10, "plain")
        result = patcher.apply(lines, candidate)

        assert not result.applied
        assert result.lines == lines
        assert "unchanged" in result.message

    def test_line_out_of_range(self, patcher: SafeTextPatcher):
        result = patcher.apply(("one",), _literal(5, 0, "x&y"))
        assert not result.applied

    def test_other_lines_untouched(self, patcher: SafeTextPatcher):
        lines = ("// top", "const a = 'R&D';", "// bottom")
        result = patcher.apply(lines, _literal(2, 10, "R&D"))

        assert result.lines[0] == "// top"
        assert result.lines[1] == "const a = 'R&amp;D';"
        assert result.lines[2] == "// bottom"


class TestMarkup:
    def test_single_line_text_without_tags(self, patcher: SafeTextPatcher):
        lines = ("<p>", "  Don't stop", "</p>")
        result = patcher.apply(lines, _markup(2, 2, "Don't stop"))

        assert result.applied
        assert result.lines[1] == "  Don&apos;t stop"

    def test_markup_escapes_quotes_only(self, patcher: SafeTextPatcher):
        lines = ("  Fish & \"chips\"",)
        result = patcher.apply(lines, _markup(1, 2, 'Fish & "chips"'))

        assert result.lines == ("  Fish & &quot;chips&quot;",)

    def test_text_without_quotes_is_not_applied(self, patcher: SafeTextPatcher):
        lines = ("<p>", "  R&D team", "</p>")
        result = patcher.apply(lines, _markup(2, 2, "R&D team"))

        assert not result.applied
        assert not result.abort_file
        assert result.lines == lines
        assert "unchanged" in result.message

    def test_line_with_tags_aborts_file(self, patcher: SafeTextPatcher):
        lines = ("  return <p>Don't</p>;",)
        result = patcher.apply(lines, _markup(1, 14, "Don't"))

        assert not result.applied
        assert result.abort_file
        assert result.lines == lines

    def test_text_not_found(self, patcher: SafeTextPatcher):
        result = patcher.apply(("  Something else",), _markup(1, 2, "Don't"))

        assert not result.applied
        assert not result.abort_file

    def test_multiline_text(self, patcher: SafeTextPatcher):
        lines = (
            "<p>",
            "  We don't know what",
            "  you're looking for",
            "</p>",
        )
        raw = "\n  We don't know what\n  you're looking for\n"
        candidate = _markup(1, 3, "We don't know what\n  you're looking for", end_line=4, raw=raw)

        result = patcher.apply(lines, candidate)

        assert result.applied
        assert result.lines == (
            "<p>",
            "  We don&apos;t know what",
            "  you&apos;re looking for",
            "</p>",
        )

    def test_multiline_missing_segment_changes_nothing(self, patcher: SafeTextPatcher):
        lines = ("<p>", "  We don't know what", "  something else", "</p>")
        candidate = _markup(1, 3, "We don't know what\n  you're looking for", end_line=4)

        result = patcher.apply(lines, candidate)

        assert not result.applied
        assert result.lines == lines


class TestPositionSafety:
    def test_descending_order_keeps_positions_valid(self, patcher: SafeTextPatcher):
        """Several literals on one line all land when applied end-first."""
        lines = ("f('a&b', 'c\"d', \"e'f\");", "g('x&y');")
        candidates = [
            _literal(1, 2, "a&b"),
            _literal(1, 9, 'c"d'),
            _literal(1, 16, "e'f"),
            _literal(2, 2, "x&y"),
        ]

        for candidate in order_for_application(candidates):
            result = patcher.apply(lines, candidate)
            assert result.applied
            lines = result.lines

        assert lines == (
            "f('a&amp;b', 'c&quot;d', \"e&apos;f\");",
            "g('x&amp;y');",
        )

    def test_markup_after_literal_on_same_line(self, patcher: SafeTextPatcher):
        """JSX text is looked up from its own column, not inside an earlier literal."""
        lines = ('  {t("it\'s")} it\'s',)
        candidates = [_literal(1, 5, "it's"), _markup(1, 13, "it's")]

        for candidate in order_for_application(candidates):
            result = patcher.apply(lines, candidate)
            assert result.applied
            lines = result.lines

        assert lines == ('  {t("it&apos;s")} it&apos;s',)

    def test_order_for_application(self):
        candidates = [_literal(1, 2, "a&b"), _literal(3, 0, "c&d"), _literal(1, 9, "e&f")]
        ordered = order_for_application(candidates)
        assert [(c.start_line, c.start_column) for c in ordered] == [(3, 0), (1, 9), (1, 2)]


class TestCommit:
    def test_writes_and_verifies(self, patcher: SafeTextPatcher, tmp_path: Path):
        target = tmp_path / "a.js"
        target.write_text("const a = 'R&D';\n", encoding="utf-8")

        result = patcher.commit(target, "const a = 'R&D';\n", ("const a = 'R&amp;D';", ""))

        assert result.success
        assert target.read_text(encoding="utf-8") == "const a = 'R&amp;D';\n"

    def test_refuses_double_escaped_output(self, patcher: SafeTextPatcher, tmp_path: Path):
        target = tmp_path / "a.js"
        original = "const a = 'Don&apos;t';"
        target.write_text(original, encoding="utf-8")

        result = patcher.commit(target, original, ("const a = 'Don&amp;apos;t';",))

        assert not result.success
        assert "corrupted" in result.message
        assert target.read_text(encoding="utf-8") == original

    def test_preexisting_double_escapes_are_tolerated(self, patcher: SafeTextPatcher, tmp_path: Path):
        target = tmp_path / "a.js"
        original = "// &amp;quot; is documented here\nconst a = 'R&D';"
        target.write_text(original, encoding="utf-8")

        lines = ("// &amp;quot; is documented here", "const a = 'R&amp;D';")
        assert patcher.commit(target, original, lines).success

    def test_write_error_is_reported(self, patcher: SafeTextPatcher, tmp_path: Path):
        result = patcher.commit(tmp_path / "missing" / "a.js", "", ("x",))
        assert not result.success

    def test_count_corrupted_entities(self):
        assert count_corrupted_entities("&amp;apos; &amp;quot; &amp;#39;") == 3
        assert count_corrupted_entities("&amp; &apos;") == 0


def test_unchanged_outcome_leaves_original():
    candidate = _literal(1, 0, "plain")
    candidate.outcome = EscapeOutcome.unchanged("plain")
    assert candidate.escaped == "plain"
