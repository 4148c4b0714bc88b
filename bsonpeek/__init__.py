"""bsonpeek — a structural, error-tolerant BSON viewer.

Decode BSON bytes into a flat stream of events that shows every byte
of the input and marks everything malformed, instead of failing on the
first problem.

Quick start:
    >>> from bsonpeek import decode, errors_in
    >>> events = decode(bytes.fromhex("0c0000001061000100000000"))
    >>> [ev.kind for ev in events]
    ['LENGTH', 'OPEN', 'TYPE', 'KEY', 'RAW', 'CLOSE']
    >>> errors_in(decode(bytes.fromhex("050000000001")))
    ['ERR_UNKNOWN_TYPE']

Events cover the input exactly, so ``reassemble(decode(data)) == data``
for any input, well-formed or not.
"""

from __future__ import annotations

from ._constants import DEFAULT_MAX_DEPTH, FIELD_MIN_SIZES, TAG_NAMES
from ._core import decode, decode_into, max_depth_ceiling, read_length, read_string
from ._cursor import ByteCursor
from ._errors import (
    ERR_BAD_HEX,
    ERR_BAD_TERMINATOR_BYTE,
    ERR_BINARY_SUBTYPE_LENGTH_MISMATCH,
    ERR_CODE_WITH_SCOPE_TOO_SHORT,
    ERR_CONFIG,
    ERR_INVALID_BOOLEAN,
    ERR_INVALID_UTF8,
    ERR_LENGTH_OUT_OF_RANGE,
    ERR_MISSING_TERMINATOR,
    ERR_NESTING_TOO_DEEP,
    ERR_PAYLOAD_TOO_SHORT,
    ERR_TRUNCATED_LENGTH,
    ERR_UNKNOWN_TYPE,
    ERR_UNTERMINATED_KEY,
    ERR_UNTERMINATED_STRING,
    ERROR_CODES,
    TRUNCATION_CODES,
    BsonPeekError,
    describe_error,
)
from ._events import Event, errors_in, reassemble
from ._input import InputLine, iter_documents, parse_hex_line
from ._render import RenderConfig, render_events

__version__ = "0.3.0"

__all__ = [
    # Decoding
    "decode",
    "decode_into",
    "max_depth_ceiling",
    "read_length",
    "read_string",
    "ByteCursor",
    "Event",
    "reassemble",
    "errors_in",
    # Input and output
    "iter_documents",
    "parse_hex_line",
    "InputLine",
    "render_events",
    "RenderConfig",
    # Tables
    "DEFAULT_MAX_DEPTH",
    "FIELD_MIN_SIZES",
    "TAG_NAMES",
    # Errors
    "BsonPeekError",
    "describe_error",
    "ERROR_CODES",
    "TRUNCATION_CODES",
    "ERR_TRUNCATED_LENGTH",
    "ERR_LENGTH_OUT_OF_RANGE",
    "ERR_MISSING_TERMINATOR",
    "ERR_BAD_TERMINATOR_BYTE",
    "ERR_UNKNOWN_TYPE",
    "ERR_UNTERMINATED_KEY",
    "ERR_PAYLOAD_TOO_SHORT",
    "ERR_INVALID_BOOLEAN",
    "ERR_UNTERMINATED_STRING",
    "ERR_INVALID_UTF8",
    "ERR_BINARY_SUBTYPE_LENGTH_MISMATCH",
    "ERR_CODE_WITH_SCOPE_TOO_SHORT",
    "ERR_NESTING_TOO_DEEP",
    "ERR_BAD_HEX",
    "ERR_CONFIG",
]
