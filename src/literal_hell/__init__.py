"""literal-hell: interactive HTML entity escaping for string literals and JSX text."""

from literal_hell._version import __version__
from literal_hell.escape.policy import decide
from literal_hell.escape.idempotency import IdempotencyDetector
from literal_hell.fix.memory import RejectionMemory

__all__ = [
    "__version__",
    "decide",
    "IdempotencyDetector",
    "RejectionMemory",
]
