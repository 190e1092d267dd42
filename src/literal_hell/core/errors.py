"""Exception hierarchy for literal-hell."""

from __future__ import annotations

from pathlib import Path


class LiteralHellError(Exception):
    """Base class for all literal-hell errors."""


class ParseError(LiteralHellError):
    """The syntax-tree provider could not produce a tree for a file."""

    def __init__(self, path: Path | str, reason: str):
        super().__init__(f"Error parsing {path}: {reason}")
        self.path = path
        self.reason = reason


class FileTooLargeError(LiteralHellError):
    """A file exceeds the configured size ceiling."""

    def __init__(self, path: Path | str, size: int, limit: int):
        super().__init__(f"File too large ({round(size / 1024)}KB > {round(limit / 1024)}KB): {path}")
        self.path = path
        self.size = size
        self.limit = limit


class ExternalModificationError(LiteralHellError):
    """A file changed on disk while it was being reviewed."""

    def __init__(self, path: Path | str):
        super().__init__(f"File {path} was modified externally")
        self.path = path


class WriteVerificationError(LiteralHellError):
    """Content read back after a write differs from what was written."""

    def __init__(self, path: Path | str):
        super().__init__(f"File verification failed after write: {path}")
        self.path = path


class CollaboratorUnavailableError(LiteralHellError):
    """A required external collaborator (grammar, linter) cannot be initialised."""
