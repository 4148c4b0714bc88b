"""bsonpeek command-line interface.

Usage:
    bsonpeek < documents.bson            # one raw document per line
    bsonpeek --hex < documents.hex       # one hex document per line
    python3 -m bsonpeek --hex --summary --color never < dump.hex
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections import Counter
from typing import List, Optional

from . import (
    BsonPeekError,
    RenderConfig,
    __version__,
    decode,
    errors_in,
    iter_documents,
    render_events,
)
from ._constants import DEFAULT_MAX_DEPTH, MAX_DEPTH_ENV
from ._core import max_depth_ceiling
from ._errors import ERR_CONFIG
from ._input import COMMENT, EMPTY
from ._render import render_error_counts

logger = logging.getLogger(__name__)

NO_DOCUMENT = "(no document)"


def _default_max_depth() -> int:
    raw = os.environ.get(MAX_DEPTH_ENV)
    if raw is None or raw == "":
        return DEFAULT_MAX_DEPTH
    try:
        value = int(raw)
    except ValueError:
        raise BsonPeekError(ERR_CONFIG, "{} must be an integer, got {!r}".format(MAX_DEPTH_ENV, raw))
    if value < 0:
        raise BsonPeekError(ERR_CONFIG, "{} must be >= 0".format(MAX_DEPTH_ENV))
    if value > max_depth_ceiling():
        raise BsonPeekError(ERR_CONFIG, "{} must be <= {}".format(MAX_DEPTH_ENV, max_depth_ceiling()))
    return value


def _max_depth(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError("expected an integer, got {!r}".format(text))
    if value < 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    if value > max_depth_ceiling():
        raise argparse.ArgumentTypeError("must be <= {}".format(max_depth_ceiling()))
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bsonpeek",
        description="Show the structure of BSON documents read from stdin, "
                    "one per line, marking everything malformed.",
    )
    parser.add_argument("-x", "--hex", action="store_true",
                        help="Input lines are hex strings ('#' lines are comments)")
    parser.add_argument("--max-depth", type=_max_depth, default=None, metavar="N",
                        help="Maximum document nesting depth "
                             "(default: ${} or {})".format(MAX_DEPTH_ENV, DEFAULT_MAX_DEPTH))
    parser.add_argument("--color", choices=("auto", "always", "never"), default="auto",
                        help="Colour output (auto: only on a terminal, honours NO_COLOR)")
    parser.add_argument("--summary", action="store_true",
                        help="Print an error tally to stderr; exit 1 if any document had errors")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log per-document details to stderr")
    parser.add_argument("--version", action="version",
                        version="bsonpeek {}".format(__version__))
    return parser


def _use_color(choice: str) -> bool:
    if choice == "always":
        return True
    if choice == "never":
        return False
    return sys.stdout.isatty() and "NO_COLOR" not in os.environ


def _run(args: argparse.Namespace) -> int:
    max_depth = args.max_depth if args.max_depth is not None else _default_max_depth()
    config = RenderConfig(color=_use_color(args.color))
    out = sys.stdout

    documents = 0
    failed = 0
    tally: Counter = Counter()

    for line in iter_documents(sys.stdin.buffer, hex_mode=args.hex):
        if line.kind == COMMENT:
            out.write(line.text.decode("utf-8", errors="replace") + "\n")
            continue
        if line.kind == EMPTY:
            out.write(NO_DOCUMENT + "\n")
            continue

        try:
            data = line.document_bytes()
        except BsonPeekError as e:
            print("bsonpeek: line {}: error [{}]: {}".format(line.lineno, e.code, e),
                  file=sys.stderr)
            tally[e.code] += 1
            failed += 1
            continue

        events = decode(data, max_depth=max_depth)
        codes = errors_in(events)
        documents += 1
        if codes:
            failed += 1
            tally.update(codes)
        logger.debug("line %d: %d bytes, %d events, errors=%s",
                     line.lineno, len(data), len(events), codes or "none")
        for text in render_events(events, config):
            out.write(text + "\n")
    out.flush()

    if args.summary:
        print("bsonpeek: {} documents, {} with errors".format(documents, failed),
              file=sys.stderr)
        for text in render_error_counts(dict(tally)):
            print(text, file=sys.stderr)
        return 1 if failed else 0
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        code = _run(args)
    except BsonPeekError as e:
        print(f"bsonpeek: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        sys.exit(130)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
