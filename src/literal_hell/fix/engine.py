"""Fix Engine: orchestrates discovery, screening, review and write-back."""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path

from rich.markup import escape

from literal_hell.core.config import LiteralHellConfig, history_path, load_config
from literal_hell.core.errors import FileTooLargeError, ParseError
from literal_hell.core.files import collect_source_files, display_path, read_with_size_check
from literal_hell.core.models import (
    Candidate,
    ContextKind,
    FileResult,
    FileStatus,
    LintFinding,
    RunSummary,
    SourceFile,
)
from literal_hell.core.output import console
from literal_hell.escape.idempotency import IdempotencyDetector
from literal_hell.escape.policy import decide
from literal_hell.fix.memory import RejectionMemory
from literal_hell.fix.review import DecisionSource, ReviewLoop
from literal_hell.scanner.extractor import extract_from_findings, extract_from_nodes
from literal_hell.scanner.lint import EslintProvider
from literal_hell.scanner.parser import TreeSitterProvider

logger = logging.getLogger(__name__)


class FixEngine:
    """Runs one interactive escaping session over a project."""

    def __init__(
        self,
        decisions: DecisionSource,
        project_path: Path | None = None,
        config: LiteralHellConfig | None = None,
        memory: RejectionMemory | None = None,
        tree_provider: TreeSitterProvider | None = None,
        lint_provider: EslintProvider | None = None,
    ):
        self.project_path = (project_path or Path.cwd()).resolve()
        self.config = config or load_config(self.project_path)
        self.memory = memory or RejectionMemory(history_path(self.config, self.project_path))
        self.tree_provider = tree_provider or TreeSitterProvider()
        self.lint_provider = lint_provider or EslintProvider(self.config.lint, self.project_path)
        self.detector = IdempotencyDetector(window=self.config.review.idempotency_window)
        self.review_loop = ReviewLoop(self.config, self.memory, decisions)
        self.summary = RunSummary()

    def check_collaborators(self) -> None:
        """Fail fast if the parser (or ESLint, when enabled) cannot start."""
        if self.config.lint.enabled:
            self.lint_provider.check_available()
        else:
            self.tree_provider.check_available()

    def run(self, targets: list[Path] | None = None) -> RunSummary:
        """Review every source file under *targets* (default: the project root)."""
        self.summary = RunSummary()
        self.memory.load()
        files: list[Path] = []
        for target in targets or [self.project_path]:
            files.extend(collect_source_files(target.resolve(), self.config))
        files = sorted(set(files))

        findings_by_file: dict[str, list[LintFinding]] | None = None
        if self.config.lint.enabled:
            findings_by_file = defaultdict(list)
            for finding in self.lint_provider.run(files):
                findings_by_file[finding.file_path].append(finding)
            if not findings_by_file:
                logger.info("No unescaped entities found by ESLint")

        try:
            for path in files:
                rel = display_path(path, self.project_path)
                if findings_by_file is not None:
                    if rel not in findings_by_file:
                        continue
                    result = self.process_file(path, findings_by_file[rel])
                else:
                    result = self.process_file(path)

                self.summary.add(result)
                self.memory.save()
                if result.quit:
                    break
        finally:
            self.memory.save()

        return self.summary

    def process_file(self, path: Path, findings: list[LintFinding] | None = None) -> FileResult:
        """Scan, screen and review a single file."""
        rel = display_path(path, self.project_path)
        self.summary.files_scanned += 1
        logger.info("Processing file: %s", rel)

        try:
            text = read_with_size_check(path, self.config.max_file_size)
        except FileTooLargeError as e:
            logger.warning("Skipping %s: %s", rel, e)
            return FileResult(path=rel, status=FileStatus.SKIPPED, message=str(e))
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading file %s: %s", rel, e)
            return FileResult(path=rel, status=FileStatus.SKIPPED, message=str(e))

        source = SourceFile.open(path, rel, text)
        try:
            candidates = self.extract(source, findings)
        except ParseError as e:
            logger.error("%s", e)
            return FileResult(path=rel, status=FileStatus.SKIPPED, message=str(e))

        candidates = self.screen(source, candidates)
        if not candidates:
            logger.info("No potential fixes in %s", rel)
            return FileResult(path=rel, status=FileStatus.UNCHANGED)

        console.print(f"[blue]Found {len(candidates)} potential fixes in {escape(rel)}[/blue]")
        return self.review_loop.review(source, candidates)

    def extract(self, source: SourceFile, findings: list[LintFinding] | None = None) -> list[Candidate]:
        if findings is not None:
            return extract_from_findings(findings, source.text, source.display_path)
        nodes = self.tree_provider.parse(source.text, source.path)
        return extract_from_nodes(nodes, source.text, source.display_path)

    def screen(self, source: SourceFile, candidates: list[Candidate]) -> list[Candidate]:
        """Run the escape policy and idempotency check over *candidates*.

        Heuristic exclusions are remembered as auto-skipped so they are not
        re-evaluated on the next run. High-confidence "already fixed" matches
        are always dropped; medium ones only outside strict mode.
        """
        lines = source.lines
        kept: list[Candidate] = []

        for candidate in candidates:
            where = f"{candidate.file_path}:{candidate.start_line}:{candidate.start_column}"
            line_text = lines[candidate.start_line - 1] if candidate.start_line <= len(lines) else ""
            outcome = decide(
                candidate.original,
                file_path=candidate.file_path,
                line_text=line_text,
                strict=self.config.strict,
                markup=candidate.kind == ContextKind.MARKUP_TEXT,
            )
            candidate.outcome = outcome

            if not outcome.needs_escaping:
                if outcome.auto_skipped:
                    logger.info("Auto-skipping at %s - %s", where, outcome.reason)
                    self.summary.auto_skipped += 1
                    if candidate.key not in self.memory:
                        self.memory.reject(
                            candidate.file_path,
                            candidate.start_line,
                            candidate.start_column,
                            candidate.original,
                            reason=outcome.reason,
                            auto_skipped=True,
                        )
                else:
                    logger.debug("No escaping needed at %s (%s)", where, outcome.reason)
                continue

            match = self.detector.check(
                source.text, candidate.start_line, candidate.original, outcome.escaped_text
            )
            candidate.idempotency = match
            if match.matched and (match.confidence == "high" or not self.config.strict):
                logger.info("Skipping already fixed string at %s (%s)", where, match.reason)
                self.summary.already_fixed += 1
                continue

            kept.append(candidate)

        return kept
