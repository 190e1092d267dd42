"""Configuration management for literal-hell (literal-hell.toml parsing + defaults)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    try:
        import tomli as tomllib  # type: ignore[no-redef]
    except ImportError:
        tomllib = None  # type: ignore[assignment]

CONFIG_FILE = "literal-hell.toml"
REJECTED_FIXES_FILE = ".literal-hell-wards"
MAX_FILE_SIZE_KB = 1024


@dataclass
class ReviewConfig:
    context_lines: int = 3
    more_context_lines: int = 7
    notice_context_lines: int = 5
    idempotency_window: int = 10


@dataclass
class LintConfig:
    enabled: bool = False
    command: list[str] = field(default_factory=lambda: ["npx", "eslint"])
    rule_id: str = "react/no-unescaped-entities"
    timeout: int = 120


@dataclass
class LiteralHellConfig:
    """Complete literal-hell configuration, including the run-mode flags."""

    exclude: list[str] = field(
        default_factory=lambda: [
            "node_modules/",
            ".git/",
            "dist/",
            "build/",
            ".next/",
            "coverage/",
        ]
    )
    extensions: list[str] = field(
        default_factory=lambda: [".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"]
    )
    max_file_size_kb: int = MAX_FILE_SIZE_KB
    history_file: str = REJECTED_FIXES_FILE
    verbose: bool = False
    strict: bool = False
    review: ReviewConfig = field(default_factory=ReviewConfig)
    lint: LintConfig = field(default_factory=LintConfig)

    @property
    def max_file_size(self) -> int:
        return self.max_file_size_kb * 1024


def load_config(project_path: Path | None = None) -> LiteralHellConfig:
    """Load configuration from literal-hell.toml if present, otherwise return defaults."""
    config = LiteralHellConfig()

    if project_path is None:
        project_path = Path.cwd()

    config_file = project_path / CONFIG_FILE
    if not config_file.exists():
        return config

    if tomllib is None:
        return config

    with open(config_file, "rb") as f:
        data = tomllib.load(f)

    if "general" in data:
        gen = data["general"]
        for attr in ("exclude", "extensions", "max_file_size_kb", "history_file", "strict"):
            if attr in gen:
                setattr(config, attr, gen[attr])

    if "review" in data:
        r = data["review"]
        for attr in ("context_lines", "more_context_lines", "notice_context_lines", "idempotency_window"):
            if attr in r:
                setattr(config.review, attr, r[attr])

    if "lint" in data:
        lt = data["lint"]
        for attr in ("enabled", "command", "rule_id", "timeout"):
            if attr in lt:
                setattr(config.lint, attr, lt[attr])

    return config


def history_path(config: LiteralHellConfig, project_path: Path | None = None) -> Path:
    """Resolve the rejection store path against the project root."""
    if project_path is None:
        project_path = Path.cwd()
    path = Path(config.history_file)
    if path.is_absolute():
        return path
    return project_path / path
