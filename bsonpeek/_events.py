"""Decoder output events.

The decoder never builds a document tree.  It reports what it sees, in
input order, as a flat stream of `Event` objects handed to a sink
callable.  Each event covers an exact run of input bytes (`raw`), so the
stream doubles as a lossless segmentation of the input:

    LENGTH    int32 size field (value None when fewer than 4 bytes were left)
    TYPE      element type tag
    KEY       element name (value None when unterminated or not utf-8)
    STRING    decoded utf-8 text
    RAW       bytes shown as hex
    OPEN      start of a document or array (value: is_array)
    CLOSE     end of a document or array (value: is_array)
    TRAILING  leftover bytes of a scope that stopped early
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional

LENGTH: str = "LENGTH"
TYPE: str = "TYPE"
KEY: str = "KEY"
STRING: str = "STRING"
RAW: str = "RAW"
OPEN: str = "OPEN"
CLOSE: str = "CLOSE"
TRAILING: str = "TRAILING"

EVENT_KINDS = (LENGTH, TYPE, KEY, STRING, RAW, OPEN, CLOSE, TRAILING)


@dataclass(frozen=True)
class Event:
    kind: str
    raw: bytes
    value: Any = None
    ok: bool = True
    error: Optional[str] = None
    depth: int = 0


Sink = Callable[[Event], None]


def reassemble(events: Iterable[Event]) -> bytes:
    """Concatenate the input bytes covered by `events`."""
    return b"".join(ev.raw for ev in events)


def errors_in(events: Iterable[Event]) -> List[str]:
    """Error codes carried by `events`, in the order they were found."""
    return [ev.error for ev in events if ev.error is not None]
