"""Rule — keyword set + mask token, compiled into a single-pass replacer.

A Rule can be shared by any number of writers; keyword and mask-token
changes made through one of them are seen by all the others on their
next write.

Usage:
    from maskedio import Rule

    rule = Rule(["passw0rd", "secret"])
    rule.mask(b"password: passw0rd")     # b"password: *****"
    rule.has_partial_suffix(b"pass")     # True: "w0rd" could still follow

Matching works on raw bytes.  Keywords given as str are UTF-8 encoded.
Both sides are viewed through latin-1 (one code point per byte) so the
Aho-Corasick automaton compares exact byte sequences.

Overlapping keywords resolve leftmost-longest: scanning left to right,
the earliest match wins and, among matches starting at the same offset,
the longest one.  Replacement text is never rescanned.
"""

from __future__ import annotations
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, overload

import ahocorasick

from .rwlock import RWLock
from .types import DEFAULT_MASK_TOKEN, RuleSnapshot

if TYPE_CHECKING:
    from .writer import MaskedWriter

logger = logging.getLogger(__name__)

Keyword = str | bytes


def to_bytes(value: Any) -> bytes:
    """Coerce a keyword, mask token or chunk to bytes."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"expected str or bytes-like, got {type(value).__name__}")


def _compile(keywords: Iterable[bytes]) -> ahocorasick.Automaton | None:
    """Build the automaton; None means 'no keywords' (identity transform)."""
    automaton = ahocorasick.Automaton()
    for keyword in keywords:
        # value is the keyword length so a hit's start offset is end - len + 1
        automaton.add_word(keyword.decode("latin-1"), len(keyword))
    if len(automaton) == 0:
        return None
    automaton.make_automaton()
    return automaton


class Rule:
    """Thread-safe masking configuration shared by one or more writers."""

    __slots__ = ("_keywords", "_ordered", "_mask_token", "_automaton", "_lock")

    def __init__(
        self,
        keywords: Iterable[Keyword] = (),
        mask_token: Keyword = DEFAULT_MASK_TOKEN,
    ) -> None:
        self._keywords: set[bytes] = {k for k in map(to_bytes, keywords) if k}
        self._mask_token = to_bytes(mask_token)
        self._ordered: tuple[bytes, ...] = ()
        self._automaton: ahocorasick.Automaton | None = None
        self._lock = RWLock()
        self._rebuild()

    # ------------------------------------------------------------------
    # Mutation (exclusive side of the lock)
    # ------------------------------------------------------------------

    def add_keywords(self, *keywords: Keyword) -> None:
        """Start masking *keywords*.  Empty strings are ignored."""
        words = {k for k in map(to_bytes, keywords) if k}
        with self._lock.write_locked():
            self._keywords |= words
            count = self._rebuild()
        self._log_rebuild(count)

    def remove_keywords(self, *keywords: Keyword) -> None:
        """Stop masking *keywords*.  Unknown keywords are ignored."""
        words = set(map(to_bytes, keywords))
        with self._lock.write_locked():
            self._keywords -= words
            count = self._rebuild()
        self._log_rebuild(count)

    def reset_keywords(self) -> None:
        """Drop every keyword; masking becomes the identity transform."""
        with self._lock.write_locked():
            self._keywords.clear()
            count = self._rebuild()
        self._log_rebuild(count)

    def set_mask_token(self, token: Keyword) -> None:
        token_bytes = to_bytes(token)
        with self._lock.write_locked():
            self._mask_token = token_bytes
            count = self._rebuild()
        self._log_rebuild(count)

    def _rebuild(self) -> int:
        # caller holds the write lock (or is __init__)
        self._ordered = tuple(sorted(self._keywords, key=lambda k: (-len(k), k)))
        self._automaton = _compile(self._ordered)
        return len(self._ordered)

    @staticmethod
    def _log_rebuild(count: int) -> None:
        # never under the lock: a masking log handler may share this rule
        logger.debug("rule rebuilt: %d keyword(s)", count)

    # ------------------------------------------------------------------
    # Queries (shared side of the lock)
    # ------------------------------------------------------------------

    @overload
    def mask(self, chunk: str) -> str: ...
    @overload
    def mask(self, chunk: bytes | bytearray | memoryview) -> bytes: ...

    def mask(self, chunk):
        """Replace every keyword occurrence in a complete chunk with the mask token."""
        if isinstance(chunk, str):
            # surrogatepass round-trips any lone surrogate
            data = chunk.encode("utf-8", "surrogatepass")
            with self._lock.read_locked():
                masked = self._mask_locked(data)
            try:
                return masked.decode("utf-8", "surrogatepass")
            except UnicodeDecodeError:
                # a bytes keyword cut through a multi-byte character
                return masked.decode("utf-8", "replace")
        data = to_bytes(chunk)
        with self._lock.read_locked():
            return self._mask_locked(data)

    def has_partial_suffix(self, chunk: Keyword) -> bool:
        """True if the tail of *chunk* is a strict prefix of some keyword."""
        data = to_bytes(chunk)
        with self._lock.read_locked():
            return self._partial_locked(data)

    def resolve(self, chunk: bytes) -> bytes | None:
        """Mask *chunk* for forwarding, or return None if it must be held.

        The partial-match check and the masking pass observe the same
        keyword set: both run under one acquisition of the read lock.
        """
        with self._lock.read_locked():
            if self._partial_locked(chunk):
                return None
            return self._mask_locked(chunk)

    def _partial_locked(self, data: bytes) -> bool:
        for keyword in self._ordered:
            for size in range(min(len(keyword) - 1, len(data)), 0, -1):
                if data.endswith(keyword[:size]):
                    return True
        return False

    def _mask_locked(self, data: bytes) -> bytes:
        if self._automaton is None or not data:
            return data

        spans: list[tuple[int, int]] = []
        for end, length in self._automaton.iter(data.decode("latin-1")):
            spans.append((end - length + 1, end + 1))
        if not spans:
            return data

        spans.sort(key=lambda s: (s[0], -s[1]))
        parts: list[bytes] = []
        last = 0
        for start, end in spans:
            if start < last:
                continue  # overlaps a match already taken
            parts.append(data[last:start])
            parts.append(self._mask_token)
            last = end
        parts.append(data[last:])
        return b"".join(parts)

    # ------------------------------------------------------------------
    # Introspection & copying
    # ------------------------------------------------------------------

    @property
    def keywords(self) -> tuple[bytes, ...]:
        with self._lock.read_locked():
            return tuple(sorted(self._keywords))

    @property
    def mask_token(self) -> bytes:
        with self._lock.read_locked():
            return self._mask_token

    @mask_token.setter
    def mask_token(self, token: Keyword) -> None:
        self.set_mask_token(token)

    def snapshot(self) -> RuleSnapshot:
        with self._lock.read_locked():
            return RuleSnapshot(tuple(sorted(self._keywords)), self._mask_token)

    @classmethod
    def from_snapshot(cls, snapshot: RuleSnapshot) -> Rule:
        return cls(snapshot.keywords, snapshot.mask_token)

    def copy(self) -> Rule:
        """Independent deep copy: later changes on either side do not propagate."""
        return Rule.from_snapshot(self.snapshot())

    def new_writer(self, sink: Any, **options: Any) -> MaskedWriter:
        """Wrap *sink* in a writer that shares this rule."""
        from .writer import MaskedWriter
        return MaskedWriter(sink, rule=self, **options)

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._keywords)

    def __contains__(self, keyword: object) -> bool:
        try:
            data = to_bytes(keyword)
        except TypeError:
            return False
        with self._lock.read_locked():
            return data in self._keywords

    def __repr__(self) -> str:
        # never include keyword values
        return f"Rule(keywords={len(self)}, mask_token={self.mask_token!r})"
