"""Tests for the text facade and the logging handler."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import io
import logging
import threading

import pytest

from maskedio import Rule, TextWriter, masking_handler, new_writer


def test_text_writer_encodes_and_masks():
    buf = io.BytesIO()
    tw = TextWriter(new_writer(buf, "geheim", auto_flush=False))
    assert tw.write("schlüssel=geheim\n") == len("schlüssel=geheim\n")
    tw.flush()
    assert buf.getvalue().decode("utf-8") == "schlüssel=*****\n"


def test_text_writer_rejects_bytes():
    tw = TextWriter(new_writer(io.BytesIO()))
    with pytest.raises(TypeError):
        tw.write(b"raw")


def test_print_through_text_writer():
    buf = io.BytesIO()
    tw = TextWriter(new_writer(buf, "hunter2", auto_flush=False))
    print("password is", "hunter2", file=tw)
    tw.flush()
    assert buf.getvalue() == b"password is *****\n"


def _logger(name, handler):
    log = logging.getLogger(name)
    log.handlers[:] = [handler]
    log.propagate = False
    log.setLevel(logging.INFO)
    return log


def test_masking_handler():
    buf = io.BytesIO()
    log = _logger("maskedio.test.handler", masking_handler(buf, "hunter2", auto_flush=False))
    log.info("login with %s", "hunter2")
    assert buf.getvalue() == b"login with *****\n"


def test_masking_handler_shares_rule():
    buf = io.BytesIO()
    rule = Rule()
    log = _logger("maskedio.test.shared", masking_handler(buf, rule=rule, auto_flush=False))
    log.info("token abc123")
    rule.add_keywords("abc123")
    log.info("token abc123")
    assert buf.getvalue() == b"token abc123\ntoken *****\n"


def test_debug_records_routed_into_same_writer_do_not_deadlock():
    buf = io.BytesIO()
    rule = Rule(["passw0rd"])
    handler = masking_handler(buf, rule=rule, flush_delay=60)
    handler.setLevel(logging.DEBUG)
    internal = logging.getLogger("maskedio")
    saved = (internal.handlers[:], internal.level, internal.propagate)
    internal.handlers[:] = [handler]
    internal.setLevel(logging.DEBUG)
    internal.propagate = False
    writer = handler.stream.writer

    def exercise():
        writer.write(b"pass")        # held, logs from maskedio.writer
        rule.add_keywords("hunter2") # logs from maskedio.rule
        writer.flush()

    try:
        t = threading.Thread(target=exercise, daemon=True)
        t.start()
        t.join(5)
        assert not t.is_alive()
    finally:
        internal.handlers[:], internal.level, internal.propagate = saved
    out = buf.getvalue()
    assert out.startswith(b"pass")
    assert b"holding 4 byte(s)" in out
    assert b"rule rebuilt: 2 keyword(s)" in out
