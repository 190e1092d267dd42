"""File discovery, size-checked reads and verified writes."""

from __future__ import annotations

from pathlib import Path

from literal_hell.core.config import LiteralHellConfig
from literal_hell.core.errors import FileTooLargeError, WriteVerificationError


def collect_source_files(path: Path, config: LiteralHellConfig) -> list[Path]:
    """Collect all source files under *path*, excluding configured patterns."""
    extensions = {ext.lower() for ext in config.extensions}

    if path.is_file():
        return [path] if path.suffix.lower() in extensions else []

    files: list[Path] = []
    for candidate in path.rglob("*"):
        if candidate.suffix.lower() not in extensions or not candidate.is_file():
            continue
        rel = candidate.relative_to(path).as_posix()
        if any(_is_excluded(rel, excl) for excl in config.exclude):
            continue
        files.append(candidate)

    return sorted(files)


def _is_excluded(rel: str, pattern: str) -> bool:
    """Match an exclude pattern against whole path segments of *rel*."""
    pattern = pattern.strip("/")
    if not pattern:
        return False
    if "/" in pattern:
        return f"/{pattern}/" in f"/{rel}/"
    return pattern in rel.split("/")


def display_path(path: Path, project_path: Path) -> str:
    """Path relative to the project root, as used in fix keys and messages."""
    try:
        return path.resolve().relative_to(project_path.resolve()).as_posix()
    except ValueError:
        return str(path)


def read_with_size_check(path: Path, max_size: int) -> str:
    size = path.stat().st_size
    if size > max_size:
        raise FileTooLargeError(path, size, max_size)
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_with_verification(path: Path, content: str) -> int:
    """Write *content* and read it back; raise if the file differs."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)

    with open(path, encoding="utf-8", newline="") as f:
        written = f.read()
    if written != content:
        raise WriteVerificationError(path)
    return len(written)
