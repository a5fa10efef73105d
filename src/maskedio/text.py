"""Text-stream facade over a MaskedWriter, for loggers and print().

Usage:
    import logging, sys
    from maskedio import masking_handler

    handler = masking_handler(sys.stderr.buffer, "hunter2")
    logging.getLogger().addHandler(handler)
    logging.getLogger().warning("login with hunter2")   # "login with *****"
"""

from __future__ import annotations
import logging
from typing import Any

from .rule import Keyword, Rule
from .writer import MaskedWriter


class TextWriter:
    """Encodes str writes and passes them to a MaskedWriter."""

    __slots__ = ("_writer", "encoding", "errors")

    def __init__(self, writer: MaskedWriter, encoding: str = "utf-8", errors: str = "strict") -> None:
        self._writer = writer
        self.encoding = encoding
        self.errors = errors

    def write(self, s: str) -> int:
        if not isinstance(s, str):
            raise TypeError(f"write() argument must be str, not {type(s).__name__}")
        self._writer.write(s.encode(self.encoding, self.errors))
        return len(s)

    def flush(self) -> None:
        self._writer.flush()

    def writable(self) -> bool:
        return True

    @property
    def writer(self) -> MaskedWriter:
        return self._writer


def masking_handler(
    sink: Any,
    *keywords: Keyword,
    rule: Rule | None = None,
    encoding: str = "utf-8",
    **options: Any,
) -> logging.StreamHandler:
    """StreamHandler whose output reaches the binary *sink* with keywords masked.

    Pass *rule* to share a live rule with other writers; otherwise a new
    rule is built from *keywords*.  Extra options go to MaskedWriter.
    """
    if rule is None:
        rule = Rule(keywords)
    elif keywords:
        rule.add_keywords(*keywords)
    writer = MaskedWriter(sink, rule=rule, **options)
    return logging.StreamHandler(TextWriter(writer, encoding=encoding))
