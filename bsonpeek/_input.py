"""Input side — splitting a byte stream into one document per line.

Two modes:

    binary   each line, minus its trailing newline, is a raw BSON document
    hex      each line is a case-insensitive hex string of even length;
             lines starting with '#' are comments and pass through as-is

Empty lines are reported as such in both modes; there is nothing to
decode in them.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from ._errors import ERR_BAD_HEX, BsonPeekError

logger = logging.getLogger(__name__)

DOCUMENT: str = "document"
COMMENT: str = "comment"
EMPTY: str = "empty"

_HEX = re.compile(rb"^[0-9A-Fa-f]*$")


def parse_hex_line(text: bytes) -> bytes:
    """Decode a hex line.  Raises BsonPeekError(ERR_BAD_HEX) if malformed."""
    if isinstance(text, str):
        text = text.encode("ascii", errors="replace")
    text = text.strip()
    if not _HEX.match(text):
        raise BsonPeekError(ERR_BAD_HEX, "non-hex character in input")
    if len(text) % 2:
        raise BsonPeekError(ERR_BAD_HEX, "odd number of hex digits ({})".format(len(text)))
    return bytes.fromhex(text.decode("ascii"))


@dataclass(frozen=True)
class InputLine:
    lineno: int
    kind: str
    text: bytes
    hex_mode: bool = False

    def document_bytes(self) -> bytes:
        """The BSON bytes this line carries."""
        if self.kind != DOCUMENT:
            raise ValueError("line {} holds no document".format(self.lineno))
        if self.hex_mode:
            return parse_hex_line(self.text)
        return self.text


def iter_documents(stream: BinaryIO, hex_mode: bool = False) -> Iterator[InputLine]:
    """Yield one classified InputLine per line of `stream` until EOF."""
    for lineno, line in enumerate(stream, start=1):
        if line.endswith(b"\n"):
            line = line[:-1]
        if hex_mode:
            stripped = line.strip()
            if not stripped:
                yield InputLine(lineno, EMPTY, b"", hex_mode)
            elif stripped.startswith(b"#"):
                logger.debug("line %d: comment", lineno)
                yield InputLine(lineno, COMMENT, line, hex_mode)
            else:
                yield InputLine(lineno, DOCUMENT, stripped, hex_mode)
        elif not line:
            yield InputLine(lineno, EMPTY, b"", hex_mode)
        else:
            yield InputLine(lineno, DOCUMENT, line, hex_mode)
