"""MaskedWriter — a byte sink wrapper that redacts keywords before forwarding.

Callers write arbitrary fragments; a keyword may be split across any
number of writes.  Whenever the tail of the data seen so far could still
grow into a keyword, the whole buffer is held back until the next write
decides it (or a short timer releases it):

    "password: pass"  →  held (tail "pass" is a prefix of "passw0rd")
    "w0rd"            →  "password: *****" forwarded

Usage:
    import sys
    from maskedio import MaskedWriter

    w = MaskedWriter(sys.stdout.buffer)
    w.add_keywords("passw0rd")
    w.write(b"password: pass")
    w.write(b"w0rd\n")
    w.flush()

Held data is released by the next write that resolves it, by flush(),
or by the auto-flush timer.  The timer is re-armed on every write that
leaves data pending and cancelled whenever pending data is drained, so
a timer armed for an older buffer never releases a newer one.
"""

from __future__ import annotations
import logging
import threading
from typing import Any

from .rule import Keyword, Rule
from .types import DEFAULT_FLUSH_DELAY

logger = logging.getLogger(__name__)


class MaskedWriter:
    """Wraps a binary sink, masking the rule's keywords in everything written."""

    __slots__ = (
        "_sink", "_rule", "_pending", "_lock",
        "_auto_flush", "_flush_delay", "_timer", "_generation",
    )

    def __init__(
        self,
        sink: Any,
        rule: Rule | None = None,
        *,
        auto_flush: bool = True,
        flush_delay: float = DEFAULT_FLUSH_DELAY,
    ) -> None:
        self._sink = sink
        self._rule = rule if rule is not None else Rule()
        self._pending = b""
        self._lock = threading.Lock()
        self._auto_flush = auto_flush
        self._flush_delay = flush_delay
        self._timer: threading.Timer | None = None
        self._generation = 0

    # ------------------------------------------------------------------
    # Byte-sink API
    # ------------------------------------------------------------------

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Mask and forward *data*; returns len(data).

        The count reports what was accepted, not what reached the sink:
        if the data ends inside a possible keyword it is held back.
        Exceptions raised by the sink propagate unchanged.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError(f"write() argument must be bytes-like, not {type(data).__name__}")
        chunk = bytes(data)
        accepted = len(chunk)

        with self._lock:
            if self._pending:
                chunk = self._pending + chunk
                self._pending = b""
            if not chunk:
                return 0

            masked = self._rule.resolve(chunk)
            if masked is None:
                self._pending = chunk
                self._arm_timer()
            else:
                self._cancel_timer()
                self._sink.write(masked)

        # log outside the lock: a handler may write back into this writer
        if masked is None:
            logger.debug("holding %d byte(s) pending a possible keyword", len(chunk))
        return accepted

    def flush(self) -> None:
        """Release held-back data (masked, incomplete keywords as-is) and flush the sink."""
        released = 0
        with self._lock:
            self._cancel_timer()
            if self._pending:
                released = self._release_pending()
            sink_flush = getattr(self._sink, "flush", None)
            if sink_flush is not None:
                sink_flush()
        if released:
            logger.debug("released %d held byte(s)", released)

    def close(self) -> None:
        """Flush and stop the timer.  The sink is left open."""
        self.flush()

    def writable(self) -> bool:
        return True

    def __enter__(self) -> MaskedWriter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Auto-flush
    # ------------------------------------------------------------------

    def disable_auto_flush(self) -> None:
        """Stop timed releases; the caller must flush() held data itself."""
        with self._lock:
            self._auto_flush = False
            self._cancel_timer()

    @property
    def auto_flush(self) -> bool:
        return self._auto_flush

    def _arm_timer(self) -> None:
        # caller holds self._lock
        self._cancel_timer()
        if not self._auto_flush:
            return
        timer = threading.Timer(self._flush_delay, self._timed_flush, args=(self._generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        # caller holds self._lock; a timer already waiting on the lock sees a stale generation
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _timed_flush(self, generation: int) -> None:
        failed: Exception | None = None
        with self._lock:
            if generation != self._generation or not self._pending:
                return
            self._timer = None
            size = len(self._pending)
            try:
                self._release_pending()
            except Exception as e:
                failed = e
        if failed is not None:
            # nobody to report to from the timer thread
            logger.error("auto-flush of %d pending byte(s) failed", size, exc_info=failed)
        else:
            logger.debug("auto-flush released %d held byte(s)", size)

    def _release_pending(self) -> int:
        # caller holds self._lock
        data, self._pending = self._pending, b""
        self._sink.write(self._rule.mask(data))
        return len(data)

    # ------------------------------------------------------------------
    # Rule delegation
    # ------------------------------------------------------------------

    def add_keywords(self, *keywords: Keyword) -> None:
        self._rule.add_keywords(*keywords)

    def remove_keywords(self, *keywords: Keyword) -> None:
        self._rule.remove_keywords(*keywords)

    def reset_keywords(self) -> None:
        self._rule.reset_keywords()

    def set_mask_token(self, token: Keyword) -> None:
        self._rule.set_mask_token(token)

    @property
    def rule(self) -> Rule:
        return self._rule

    def get_rule(self) -> Rule:
        return self._rule

    def set_rule(self, rule: Rule) -> None:
        """Replace the rule outright; held data is resolved against the new one."""
        with self._lock:
            self._rule = rule

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def derive_shared(self, sink: Any) -> MaskedWriter:
        """New writer on *sink* sharing this writer's rule (same live keywords)."""
        return MaskedWriter(
            sink, rule=self._rule,
            auto_flush=self._auto_flush, flush_delay=self._flush_delay,
        )

    def derive_independent(self, sink: Any) -> MaskedWriter:
        """New writer on *sink* with a private copy of the current rule."""
        return MaskedWriter(
            sink, rule=self._rule.copy(),
            auto_flush=self._auto_flush, flush_delay=self._flush_delay,
        )

    def unwrap(self) -> Any:
        """Return the wrapped sink."""
        return self._sink

    @property
    def pending(self) -> bytes:
        """Bytes currently held back (copy)."""
        with self._lock:
            return self._pending

    def __repr__(self) -> str:
        return f"MaskedWriter(sink={self._sink!r}, rule={self._rule!r})"


def new_writer(sink: Any, *keywords: Keyword, **options: Any) -> MaskedWriter:
    """Convenience: writer on *sink* with a fresh rule holding *keywords*."""
    return MaskedWriter(sink, rule=Rule(keywords), **options)
