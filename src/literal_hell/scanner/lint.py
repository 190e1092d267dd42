"""ESLint runner for ``react/no-unescaped-entities`` findings."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from pathlib import Path

from literal_hell.core.config import LintConfig
from literal_hell.core.errors import CollaboratorUnavailableError
from literal_hell.core.models import LintFinding

logger = logging.getLogger(__name__)


def parse_entity(message: str) -> str | None:
    """Pull the offending character out of an ESLint message.

    Messages look like "`'` can be escaped with `&apos;`, `&lsquo;`, ...".
    """
    parts = message.split("`")
    if len(parts) < 3 or not parts[1]:
        return None
    return parts[1]


def parse_report(report: list[dict], rule_id: str, project_path: Path | None = None) -> list[LintFinding]:
    """Convert ESLint's JSON formatter output into findings for *rule_id*."""
    findings: list[LintFinding] = []
    for file_result in report:
        file_path = file_result.get("filePath", "")
        if project_path is not None:
            try:
                file_path = Path(file_path).relative_to(project_path).as_posix()
            except ValueError:
                pass  # outside the project root; keep absolute
        for message in file_result.get("messages", []):
            if message.get("ruleId") != rule_id:
                continue
            entity = parse_entity(message.get("message", ""))
            if not entity:
                continue
            findings.append(LintFinding(
                file_path=file_path,
                line=int(message.get("line", 0)),
                column=int(message.get("column", 0)),
                entity=entity,
                message=message.get("message", ""),
            ))
            logger.debug(
                "Found unescaped entity %r in %s:%s:%s",
                entity, file_path, message.get("line"), message.get("column"),
            )
    return findings


class EslintProvider:
    """Runs ESLint as a subprocess and keeps only unescaped-entity findings."""

    def __init__(self, config: LintConfig, project_path: Path | None = None):
        self.config = config
        self.project_path = (project_path or Path.cwd()).resolve()

    def check_available(self) -> None:
        if not self.config.command or shutil.which(self.config.command[0]) is None:
            raise CollaboratorUnavailableError(
                f"ESLint command not found: {' '.join(self.config.command) or '(empty)'}"
            )

    def run(self, files: list[Path]) -> list[LintFinding]:
        if not files:
            return []
        cmd = [*self.config.command, "--format", "json", *[str(f) for f in files]]
        logger.info("Running ESLint on %d files...", len(files))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.config.timeout,
                cwd=self.project_path,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise CollaboratorUnavailableError(f"ESLint check failed: {e}") from e

        # ESLint exits 1 when it finds problems; anything else is a crash
        if result.returncode not in (0, 1):
            raise CollaboratorUnavailableError(
                f"ESLint check failed (exit {result.returncode}): {result.stderr.strip()}"
            )
        try:
            report = json.loads(result.stdout or "[]")
        except json.JSONDecodeError as e:
            raise CollaboratorUnavailableError(f"ESLint produced invalid JSON: {e}") from e

        findings = parse_report(report, self.config.rule_id, self.project_path)
        logger.info("ESLint found %d unescaped entities across %d files", len(findings), len(report))
        return findings
