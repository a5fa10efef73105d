"""Exception hierarchy for maskedio.

Only configuration problems originate here.  Failures of the wrapped sink
are never wrapped: they propagate to the caller exactly as the sink raised
them.
"""

from __future__ import annotations
from typing import Any


class MaskedIOError(Exception):
    """Base class for errors raised by maskedio itself."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(MaskedIOError):
    """Invalid or unreadable configuration (bad types, broken YAML, missing file)."""
