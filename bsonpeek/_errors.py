"""bsonpeek error codes, exception class, and error descriptions.

Decode errors are data, not exceptions: the decoder attaches one of the
ERR_* codes below to the event where the problem was found and keeps
going where it can.  `BsonPeekError` is reserved for faults that do abort
an operation, such as an undecodable hex input line.
"""

from __future__ import annotations

from typing import Dict, List

# ── Decode error codes ───────────────────────────────────────
# Grep-friendly; the renderer and the test vectors compare against these.

ERR_TRUNCATED_LENGTH: str = "ERR_TRUNCATED_LENGTH"          # < 4 bytes for a length
ERR_LENGTH_OUT_OF_RANGE: str = "ERR_LENGTH_OUT_OF_RANGE"    # negative, too big or too small
ERR_MISSING_TERMINATOR: str = "ERR_MISSING_TERMINATOR"      # document ran out of bytes
ERR_BAD_TERMINATOR_BYTE: str = "ERR_BAD_TERMINATOR_BYTE"    # last byte is not 0x00
ERR_UNKNOWN_TYPE: str = "ERR_UNKNOWN_TYPE"
ERR_UNTERMINATED_KEY: str = "ERR_UNTERMINATED_KEY"
ERR_PAYLOAD_TOO_SHORT: str = "ERR_PAYLOAD_TOO_SHORT"
ERR_INVALID_BOOLEAN: str = "ERR_INVALID_BOOLEAN"
ERR_UNTERMINATED_STRING: str = "ERR_UNTERMINATED_STRING"
ERR_INVALID_UTF8: str = "ERR_INVALID_UTF8"
ERR_BINARY_SUBTYPE_LENGTH_MISMATCH: str = "ERR_BINARY_SUBTYPE_LENGTH_MISMATCH"
ERR_CODE_WITH_SCOPE_TOO_SHORT: str = "ERR_CODE_WITH_SCOPE_TOO_SHORT"
ERR_NESTING_TOO_DEEP: str = "ERR_NESTING_TOO_DEEP"

# ── Input and configuration error codes ──────────────────────
ERR_BAD_HEX: str = "ERR_BAD_HEX"
ERR_CONFIG: str = "ERR_CONFIG"

ERROR_CODES: List[str] = [
    ERR_TRUNCATED_LENGTH,
    ERR_LENGTH_OUT_OF_RANGE,
    ERR_MISSING_TERMINATOR,
    ERR_BAD_TERMINATOR_BYTE,
    ERR_UNKNOWN_TYPE,
    ERR_UNTERMINATED_KEY,
    ERR_PAYLOAD_TOO_SHORT,
    ERR_INVALID_BOOLEAN,
    ERR_UNTERMINATED_STRING,
    ERR_INVALID_UTF8,
    ERR_BINARY_SUBTYPE_LENGTH_MISMATCH,
    ERR_CODE_WITH_SCOPE_TOO_SHORT,
    ERR_NESTING_TOO_DEEP,
]

# Codes that mean "the input ended before the construct did".
TRUNCATION_CODES = frozenset({
    ERR_TRUNCATED_LENGTH,
    ERR_LENGTH_OUT_OF_RANGE,
    ERR_PAYLOAD_TOO_SHORT,
})

_DESCRIPTIONS: Dict[str, str] = {
    ERR_TRUNCATED_LENGTH: "fewer than 4 bytes left for a length field",
    ERR_LENGTH_OUT_OF_RANGE: "length does not fit the remaining bytes",
    ERR_MISSING_TERMINATOR: "document ends without a terminator",
    ERR_BAD_TERMINATOR_BYTE: "terminator byte is not 0x00",
    ERR_UNKNOWN_TYPE: "unknown element type",
    ERR_UNTERMINATED_KEY: "key has no null terminator",
    ERR_PAYLOAD_TOO_SHORT: "not enough bytes left for the payload",
    ERR_INVALID_BOOLEAN: "boolean byte is neither 0x00 nor 0x01",
    ERR_UNTERMINATED_STRING: "string is not null-terminated",
    ERR_INVALID_UTF8: "invalid utf-8",
    ERR_BINARY_SUBTYPE_LENGTH_MISMATCH: "old binary inner length does not match",
    ERR_CODE_WITH_SCOPE_TOO_SHORT: "code with scope shorter than 14 bytes",
    ERR_NESTING_TOO_DEEP: "documents nested too deeply",
    ERR_BAD_HEX: "line is not valid hexadecimal",
    ERR_CONFIG: "invalid configuration",
}


class BsonPeekError(Exception):
    """Exception for input and configuration faults.

    The `.code` attribute is one of the ERR_* strings above.
    """

    def __init__(self, code: str, msg: str = "") -> None:
        super().__init__(msg or code)
        self.code = code


def describe_error(code: str) -> str:
    """Return a short human-readable description of an error code."""
    return _DESCRIPTIONS.get(code, code)
