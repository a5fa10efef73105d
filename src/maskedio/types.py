"""Core types."""

from __future__ import annotations
from dataclasses import dataclass

DEFAULT_MASK_TOKEN = "*****"
DEFAULT_FLUSH_DELAY = 100e-6   # seconds before held-back bytes are released


@dataclass(frozen=True, slots=True)
class RuleSnapshot:
    """Point-in-time copy of a rule's configuration."""
    keywords: tuple[bytes, ...]    # sorted, no duplicates, no empties
    mask_token: bytes
