"""bsonpeek core — the error-tolerant, structural BSON decoder.

The decoder walks one input buffer front to back and reports every byte
it consumes as an `Event`.  It never raises on malformed input: a
problem is attached as an error code to the event that exposed it, the
current scope (document, array or code-with-scope body) stops there,
and whatever that scope still held is reported as one TRAILING event.
A nested scope stopping does not stop its parent, since the parent
already knows where the nested value ends.  The one value error that
does not stop a scope is an old-binary (subtype 0x02) length mismatch;
the payload is still shown in full.

Scopes and their extents:

    top-level document   the whole input line
    embedded doc/array   exactly the declared length, when that fits
    code with scope      the declared length minus its own 4 bytes

Values are never interpreted: numbers, object ids and dates are shown as
raw bytes.  Only strings are decoded, because utf-8 validity is part of
structural well-formedness.
"""

from __future__ import annotations

import struct
import sys
from typing import Callable, Dict, List, Optional, Tuple

from ._constants import (
    BINARY_SUBTYPE_OLD,
    DEFAULT_MAX_DEPTH,
    FIELD_MIN_SIZES,
    FIXED_WIDTHS,
    INT32_SIZE,
    MIN_CODE_W_SCOPE_SIZE,
    MIN_DOCUMENT_SIZE,
    MIN_STRING_SIZE,
    OBJECTID_SIZE,
    TAG_ARRAY,
    TAG_BINARY,
    TAG_BOOLEAN,
    TAG_CODE_W_SCOPE,
    TAG_DATETIME,
    TAG_DBPOINTER,
    TAG_DOCUMENT,
    TAG_DOUBLE,
    TAG_INT32,
    TAG_INT64,
    TAG_JAVASCRIPT,
    TAG_OBJECTID,
    TAG_REGEX,
    TAG_STRING,
    TAG_SYMBOL,
    TAG_TIMESTAMP,
    TERMINATOR,
)
from ._cursor import ByteCursor
from ._errors import (
    ERR_BAD_TERMINATOR_BYTE,
    ERR_BINARY_SUBTYPE_LENGTH_MISMATCH,
    ERR_CODE_WITH_SCOPE_TOO_SHORT,
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
)
from ._events import (
    CLOSE,
    KEY,
    LENGTH,
    OPEN,
    RAW,
    STRING,
    TRAILING,
    TYPE,
    Event,
    Sink,
)

_INT32 = struct.Struct("<i")

# Each nesting level costs three frames (document, element, payload rule);
# one more is budgeted for the sink.  The reserve covers the caller.
_FRAMES_PER_LEVEL = 4
_STACK_RESERVE = 200


def max_depth_ceiling() -> int:
    """Largest `max_depth` the current recursion limit can decode safely."""
    return max(0, (sys.getrecursionlimit() - _STACK_RESERVE) // _FRAMES_PER_LEVEL)


# ── Length and string primitives ──────────────────────────────

def read_length(cur: ByteCursor, sink: Sink, depth: int = 0, *,
                adjustment: int = 0,
                minimum: int = 0,
                short_code: str = ERR_LENGTH_OUT_OF_RANGE,
                ) -> Tuple[Optional[int], ByteCursor]:
    """Read a little-endian int32 length and range-check it.

    Valid iff ``0 <= length <= len(rest) + adjustment`` and
    ``length >= minimum``, where ``rest`` is what follows the length
    field.  A length that fits but is below `minimum` is flagged with
    `short_code`.  The length bytes are consumed either way; on failure
    the returned value is None and the caller must stop.
    """
    if len(cur) < INT32_SIZE:
        raw, cur = cur.take_all()
        sink(Event(LENGTH, raw, None, ok=False, error=ERR_TRUNCATED_LENGTH, depth=depth))
        return None, cur

    raw, cur = cur.take(INT32_SIZE)
    length = _INT32.unpack(raw)[0]
    error: Optional[str] = None
    if length < 0 or length > len(cur) + adjustment:
        error = ERR_LENGTH_OUT_OF_RANGE
    elif length < minimum:
        error = short_code
    sink(Event(LENGTH, raw, length, ok=error is None, error=error, depth=depth))
    if error is not None:
        return None, cur
    return length, cur


def read_string(cur: ByteCursor, sink: Sink, depth: int = 0,
                ) -> Tuple[Optional[Tuple[int, Optional[str]]], ByteCursor]:
    """Read a length-prefixed, null-terminated utf-8 string.

    Returns ``(length, text)``; text is None when the bytes were consumed
    but could not be shown as text (no terminator, or bad utf-8).  Returns
    None when the length itself was unusable.
    """
    length, cur = read_length(cur, sink, depth, minimum=MIN_STRING_SIZE)
    if length is None:
        return None, cur

    raw, cur = cur.take(length)
    if raw[-1] != TERMINATOR:
        sink(Event(RAW, raw, raw, ok=False, error=ERR_UNTERMINATED_STRING, depth=depth))
        return (length, None), cur
    try:
        text = raw[:-1].decode("utf-8")
    except UnicodeDecodeError:
        sink(Event(RAW, raw, raw, ok=False, error=ERR_INVALID_UTF8, depth=depth))
        return (length, None), cur
    sink(Event(STRING, raw, text, depth=depth))
    return (length, text), cur


def _read_cstring(cur: ByteCursor, sink: Sink, depth: int) -> Tuple[bool, ByteCursor]:
    """Read one null-terminated string in place (regex pattern or flags)."""
    end = cur.find(TERMINATOR)
    if end < 0:
        raw, cur = cur.take_all()
        sink(Event(RAW, raw, raw, ok=False, error=ERR_UNTERMINATED_STRING, depth=depth))
        return False, cur
    raw, cur = cur.take(end + 1)
    try:
        text = raw[:-1].decode("utf-8")
    except UnicodeDecodeError:
        sink(Event(RAW, raw, raw, ok=False, error=ERR_INVALID_UTF8, depth=depth))
        return False, cur
    sink(Event(STRING, raw, text, depth=depth))
    return True, cur


# ── Documents and elements ────────────────────────────────────
# Every element and payload rule returns (resume, cursor).  `resume` is
# False when the element reported an error; the enclosing scope then
# stops and reports its remaining bytes.

class _Decoder:
    """One decode run: a sink and a depth limit, nothing else."""

    def __init__(self, sink: Sink, max_depth: int) -> None:
        self.sink = sink
        self.max_depth = max_depth

    def document(self, cur: ByteCursor, depth: int, is_array: bool = False) -> None:
        """Decode `cur` as one document.  Consumes the whole cursor."""
        sink = self.sink
        if depth > self.max_depth:
            raw, cur = cur.take_all()
            sink(Event(RAW, raw, raw, ok=False, error=ERR_NESTING_TOO_DEEP, depth=depth))
            return

        length, cur = read_length(cur, sink, depth,
                                  adjustment=INT32_SIZE, minimum=MIN_DOCUMENT_SIZE)
        if length is None:
            self._trailing(cur, depth)
            return

        sink(Event(OPEN, b"", is_array, depth=depth))
        while len(cur) >= 2:
            resume, cur = self.element(cur, depth)
            if not resume:
                self._trailing(cur, depth)
                sink(Event(CLOSE, b"", is_array, ok=False, depth=depth))
                return

        if not cur:
            sink(Event(CLOSE, b"", is_array, ok=False,
                       error=ERR_MISSING_TERMINATOR, depth=depth))
            return
        raw, cur = cur.take(1)
        if raw[0] == TERMINATOR:
            sink(Event(CLOSE, raw, is_array, depth=depth))
        else:
            sink(Event(CLOSE, raw, is_array, ok=False,
                       error=ERR_BAD_TERMINATOR_BYTE, depth=depth))

    def element(self, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        sink = self.sink
        tag = cur.first()
        raw, cur = cur.take(1)
        if tag not in FIELD_MIN_SIZES:
            sink(Event(TYPE, raw, tag, ok=False, error=ERR_UNKNOWN_TYPE, depth=depth))
            return False, cur
        sink(Event(TYPE, raw, tag, depth=depth))

        end = cur.find(TERMINATOR)
        if end < 0:
            raw, cur = cur.take_all()
            sink(Event(KEY, raw, None, ok=False, error=ERR_UNTERMINATED_KEY, depth=depth))
            return False, cur
        raw, cur = cur.take(end + 1)
        try:
            key = raw[:-1].decode("utf-8")
        except UnicodeDecodeError:
            sink(Event(KEY, raw, None, ok=False, error=ERR_INVALID_UTF8, depth=depth))
            return False, cur
        sink(Event(KEY, raw, key, depth=depth))

        min_size = FIELD_MIN_SIZES[tag]
        if len(cur) < min_size:
            raw, cur = cur.take_all()
            sink(Event(RAW, raw, raw, ok=False, error=ERR_PAYLOAD_TOO_SHORT, depth=depth))
            return False, cur
        if min_size == 0:
            return True, cur
        return _PAYLOAD_RULES[tag](self, tag, cur, depth)

    def _trailing(self, cur: ByteCursor, depth: int) -> None:
        if cur:
            raw, _ = cur.take_all()
            self.sink(Event(TRAILING, raw, raw, ok=False, depth=depth))

    # ── Payload rules ────────────────────────────────────────

    def _fixed(self, tag: int, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        raw, cur = cur.take(FIXED_WIDTHS[tag])
        self.sink(Event(RAW, raw, raw, depth=depth))
        return True, cur

    def _boolean(self, tag: int, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        raw, cur = cur.take(1)
        if raw[0] not in (0x00, 0x01):
            self.sink(Event(RAW, raw, raw, ok=False, error=ERR_INVALID_BOOLEAN, depth=depth))
            return False, cur
        self.sink(Event(RAW, raw, raw, depth=depth))
        return True, cur

    def _string(self, tag: int, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        result, cur = read_string(cur, self.sink, depth)
        return result is not None and result[1] is not None, cur

    def _embedded(self, tag: int, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        # The nested scope re-reads and validates its own length.  When the
        # declared size cannot be honoured the scope takes everything left,
        # so the bad length is reported there instead of being guessed at.
        length = _INT32.unpack(cur.peek(INT32_SIZE))[0]
        if not MIN_DOCUMENT_SIZE <= length <= len(cur):
            length = len(cur)
        body, cur = cur.split(length)
        self.document(body, depth + 1, is_array=(tag == TAG_ARRAY))
        return True, cur

    def _binary(self, tag: int, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        sink = self.sink
        length, cur = read_length(cur, sink, depth, adjustment=-1)
        if length is None:
            return False, cur
        subtype, cur = cur.take(1)
        sink(Event(RAW, subtype, subtype, depth=depth))
        payload, cur = cur.take(length)
        if subtype[0] != BINARY_SUBTYPE_OLD:
            sink(Event(RAW, payload, payload, depth=depth))
            return True, cur

        # Old binary: the payload starts with its own length.  A mismatch
        # is flagged but the payload is still shown in full.
        if len(payload) < INT32_SIZE:
            sink(Event(RAW, payload, payload, ok=False,
                       error=ERR_BINARY_SUBTYPE_LENGTH_MISMATCH, depth=depth))
            return True, cur
        head, rest = payload[:INT32_SIZE], payload[INT32_SIZE:]
        inner = _INT32.unpack(head)[0]
        if inner == len(rest):
            sink(Event(LENGTH, head, inner, depth=depth))
        else:
            sink(Event(LENGTH, head, inner, ok=False,
                       error=ERR_BINARY_SUBTYPE_LENGTH_MISMATCH, depth=depth))
        sink(Event(RAW, rest, rest, depth=depth))
        return True, cur

    def _regex(self, tag: int, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        for _ in range(2):  # pattern, then options
            resume, cur = _read_cstring(cur, self.sink, depth)
            if not resume:
                return False, cur
        return True, cur

    def _code_w_scope(self, tag: int, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        length, cur = read_length(cur, self.sink, depth,
                                  adjustment=INT32_SIZE,
                                  minimum=MIN_CODE_W_SCOPE_SIZE,
                                  short_code=ERR_CODE_WITH_SCOPE_TOO_SHORT)
        if length is None:
            return False, cur
        body, cur = cur.split(length - INT32_SIZE)
        result, body = read_string(body, self.sink, depth)
        if result is None or result[1] is None:
            self._trailing(body, depth)
        else:
            self.document(body, depth + 1)
        return True, cur

    def _dbpointer(self, tag: int, cur: ByteCursor, depth: int) -> Tuple[bool, ByteCursor]:
        result, cur = read_string(cur, self.sink, depth)
        if result is None or result[1] is None:
            return False, cur
        # One byte more than the id itself: the enclosing terminator.
        if len(cur) <= OBJECTID_SIZE:
            raw, cur = cur.take_all()
            self.sink(Event(RAW, raw, raw, ok=False, error=ERR_PAYLOAD_TOO_SHORT, depth=depth))
            return False, cur
        raw, cur = cur.take(OBJECTID_SIZE)
        self.sink(Event(RAW, raw, raw, depth=depth))
        return True, cur


_Rule = Callable[[_Decoder, int, ByteCursor, int], Tuple[bool, ByteCursor]]

# One rule per tag with a payload; zero-size tags never reach the table.
_PAYLOAD_RULES: Dict[int, _Rule] = {
    TAG_DOUBLE: _Decoder._fixed,
    TAG_STRING: _Decoder._string,
    TAG_DOCUMENT: _Decoder._embedded,
    TAG_ARRAY: _Decoder._embedded,
    TAG_BINARY: _Decoder._binary,
    TAG_OBJECTID: _Decoder._fixed,
    TAG_BOOLEAN: _Decoder._boolean,
    TAG_DATETIME: _Decoder._fixed,
    TAG_REGEX: _Decoder._regex,
    TAG_DBPOINTER: _Decoder._dbpointer,
    TAG_JAVASCRIPT: _Decoder._string,
    TAG_SYMBOL: _Decoder._string,
    TAG_CODE_W_SCOPE: _Decoder._code_w_scope,
    TAG_INT32: _Decoder._fixed,
    TAG_TIMESTAMP: _Decoder._fixed,
    TAG_INT64: _Decoder._fixed,
}


# ── Public helpers ────────────────────────────────────────────

def decode_into(data: bytes, sink: Sink, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Decode one BSON document, passing each event to `sink` as it is found."""
    if max_depth < 0:
        raise ValueError("max_depth must be >= 0")
    ceiling = max_depth_ceiling()
    if max_depth > ceiling:
        raise ValueError("max_depth must be <= {} under the current recursion limit"
                         .format(ceiling))
    _Decoder(sink, max_depth).document(ByteCursor(bytes(data)), 0)


def decode(data: bytes, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Event]:
    """Decode one BSON document and return its events in input order."""
    events: List[Event] = []
    decode_into(data, events.append, max_depth=max_depth)
    return events
