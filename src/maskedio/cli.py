"""CLI interface for maskedio — a masking pipe.

Usage:
    # Mask keywords given on the command line
    some-command | python -m maskedio -k hunter2 -k sk-live-0123 > out.log

    # Keywords and mask token from a YAML config (see maskedio.config)
    tail -f app.log | maskedio --config masking.yaml

Data is copied from stdin to stdout as raw bytes.  Keywords split across
read boundaries are still masked; anything held back is released at EOF.
"""

from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import BinaryIO

from .config import create_writer, load_config, load_from_yaml
from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maskedio",
        description="Copy stdin to stdout, masking sensitive keywords",
    )
    parser.add_argument("-k", "--keyword", action="append", default=[],
                        help="Keyword to mask (repeatable)")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--mask", help="Replacement text (default: *****)")
    parser.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE,
                        help="Read size in bytes")
    parser.add_argument("--no-auto-flush", action="store_true",
                        help="Hold partial keywords until more input or EOF")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    return parser


def _read(stream: BinaryIO, size: int) -> bytes:
    # read1 returns what is available instead of waiting for a full chunk
    read1 = getattr(stream, "read1", None)
    return read1(size) if read1 is not None else stream.read(size)


def pipe(stdin: BinaryIO, writer, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Copy *stdin* through *writer* until EOF.  Returns bytes read."""
    total = 0
    while True:
        chunk = _read(stdin, chunk_size)
        if not chunk:
            break
        total += writer.write(chunk)
    writer.flush()
    return total


def main(
    argv: list[str] | None = None,
    *,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.config:
            cfg = load_from_yaml(args.config, env=os.environ)
        else:
            cfg = load_config({}, env=os.environ)
        if args.chunk_size <= 0:
            raise ConfigError("chunk size must be positive", got=args.chunk_size)
    except ConfigError as e:
        sys.stderr.write(f"maskedio: {e}\n")
        return 2

    cfg["keywords"].extend(args.keyword)
    if args.mask is not None:
        cfg["mask_token"] = args.mask
    if args.no_auto_flush:
        cfg["auto_flush"] = False

    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer
    writer = create_writer(stdout, cfg)
    total = pipe(stdin, writer, args.chunk_size)
    logger.debug("copied %d byte(s)", total)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
