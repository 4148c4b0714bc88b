"""bsonpeek constants — BSON type tags, the minimum-size table, and limits.

Tag values and sizes follow the BSON 1.1 wire format (bsonspec.org).
"""

from __future__ import annotations

from typing import Dict

# ── BSON element type tags (single byte each) ────────────────
TAG_DOUBLE: int = 0x01
TAG_STRING: int = 0x02
TAG_DOCUMENT: int = 0x03
TAG_ARRAY: int = 0x04
TAG_BINARY: int = 0x05
TAG_UNDEFINED: int = 0x06      # deprecated
TAG_OBJECTID: int = 0x07
TAG_BOOLEAN: int = 0x08
TAG_DATETIME: int = 0x09
TAG_NULL: int = 0x0A
TAG_REGEX: int = 0x0B
TAG_DBPOINTER: int = 0x0C      # deprecated
TAG_JAVASCRIPT: int = 0x0D
TAG_SYMBOL: int = 0x0E         # deprecated
TAG_CODE_W_SCOPE: int = 0x0F   # deprecated
TAG_INT32: int = 0x10
TAG_TIMESTAMP: int = 0x11
TAG_INT64: int = 0x12
TAG_MAXKEY: int = 0x7F
TAG_MINKEY: int = 0xFF

# ── Minimum payload bytes per tag ────────────────────────────
# A tag missing from this table is an unknown type.  Zero means the
# element has no payload at all.  Length-prefixed types count the 4-byte
# prefix plus the smallest legal body (a lone null for strings, an empty
# document for documents).
FIELD_MIN_SIZES: Dict[int, int] = {
    TAG_DOUBLE: 8,
    TAG_STRING: 5,
    TAG_DOCUMENT: 5,
    TAG_ARRAY: 5,
    TAG_BINARY: 5,         # length + subtype
    TAG_UNDEFINED: 0,
    TAG_OBJECTID: 12,
    TAG_BOOLEAN: 1,
    TAG_DATETIME: 8,
    TAG_NULL: 0,
    TAG_REGEX: 2,          # two empty cstrings
    TAG_DBPOINTER: 17,     # string + 12-byte id
    TAG_JAVASCRIPT: 5,
    TAG_SYMBOL: 5,
    TAG_CODE_W_SCOPE: 14,
    TAG_INT32: 4,
    TAG_TIMESTAMP: 8,
    TAG_INT64: 8,
    TAG_MAXKEY: 0,
    TAG_MINKEY: 0,
}

# Payloads shown as an opaque run of a fixed number of bytes.
FIXED_WIDTHS: Dict[int, int] = {
    TAG_DOUBLE: 8,
    TAG_OBJECTID: 12,
    TAG_DATETIME: 8,
    TAG_INT32: 4,
    TAG_TIMESTAMP: 8,
    TAG_INT64: 8,
}

TAG_NAMES: Dict[int, str] = {
    TAG_DOUBLE: "double",
    TAG_STRING: "string",
    TAG_DOCUMENT: "document",
    TAG_ARRAY: "array",
    TAG_BINARY: "binary",
    TAG_UNDEFINED: "undefined",
    TAG_OBJECTID: "objectid",
    TAG_BOOLEAN: "boolean",
    TAG_DATETIME: "datetime",
    TAG_NULL: "null",
    TAG_REGEX: "regex",
    TAG_DBPOINTER: "dbpointer",
    TAG_JAVASCRIPT: "javascript",
    TAG_SYMBOL: "symbol",
    TAG_CODE_W_SCOPE: "code_w_scope",
    TAG_INT32: "int32",
    TAG_TIMESTAMP: "timestamp",
    TAG_INT64: "int64",
    TAG_MAXKEY: "maxkey",
    TAG_MINKEY: "minkey",
}

# Binary subtype 0x02 ("old binary") repeats the payload length inside
# the payload itself.
BINARY_SUBTYPE_OLD: int = 0x02

# ── Framing sizes ────────────────────────────────────────────
INT32_SIZE: int = 4
OBJECTID_SIZE: int = 12
MIN_DOCUMENT_SIZE: int = 5        # length + terminator
MIN_STRING_SIZE: int = 1          # the trailing null
MIN_CODE_W_SCOPE_SIZE: int = 14   # length + empty string + empty document
TERMINATOR: int = 0x00

# ── Limits ───────────────────────────────────────────────────
# Each nesting level costs three Python frames (document, element,
# payload rule), so the default stays well inside the interpreter's
# recursion limit.
DEFAULT_MAX_DEPTH: int = 200
MAX_DEPTH_ENV: str = "BSONPEEK_MAX_DEPTH"
