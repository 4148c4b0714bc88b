"""Text rendering of decoder events.

One output line per element, indented by nesting depth:

    <27> {
      02:string "name": <5> "abcd"
      03:document "sub": <5> {
      }
      08:boolean "flag": !!07!! <- boolean byte is neither 0x00 nor 0x01
      !!trailing: 00!!
    !!}!!

Suspicious events are painted in the error colour, or wrapped in ``!!``
when colour is off, and the line ends with the description of each
error found on it.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from ._constants import TAG_NAMES
from ._errors import describe_error
from ._events import CLOSE, KEY, LENGTH, OPEN, RAW, STRING, TRAILING, TYPE, Event

# ANSI SGR sequences.
GREEN = "\033[0;32m"
RED = "\033[0;31m"
YELLOW = "\033[1;33m"
CYAN = "\033[0;36m"
MAGENTA = "\033[0;35m"
DIM = "\033[2m"
NC = "\033[0m"

DEFAULT_PALETTE: Mapping[str, str] = {
    LENGTH: DIM,
    TYPE: MAGENTA,
    KEY: CYAN,
    STRING: GREEN,
    RAW: YELLOW,
    OPEN: "",
    CLOSE: "",
    TRAILING: RED,
    "error": RED,
}


@dataclass(frozen=True)
class RenderConfig:
    color: bool = False
    indent: str = "  "
    palette: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_PALETTE))


def _hex(raw: bytes) -> str:
    return raw.hex() if raw else "''"


def _token(ev: Event) -> str:
    if ev.kind == LENGTH:
        if ev.value is None:
            return "<?{}>".format(ev.raw.hex())
        return "<{}>".format(ev.value)
    if ev.kind == TYPE:
        return "{:02x}:{}".format(ev.value, TAG_NAMES.get(ev.value, "?"))
    if ev.kind == KEY:
        if ev.value is None:
            return _hex(ev.raw)
        return json.dumps(ev.value, ensure_ascii=False) + ":"
    if ev.kind == STRING:
        return json.dumps(ev.value, ensure_ascii=False)
    if ev.kind == OPEN:
        return "[" if ev.value else "{"
    if ev.kind == CLOSE:
        return "]" if ev.value else "}"
    if ev.kind == TRAILING:
        return "trailing: " + _hex(ev.raw)
    return _hex(ev.raw)


class _LineBuilder:
    def __init__(self, config: RenderConfig) -> None:
        self.config = config
        self.lines: List[str] = []
        self._parts: List[str] = []
        self._notes: List[str] = []
        self._indent = 0

    def paint(self, text: str, style: str) -> str:
        if self.config.color and style:
            return style + text + NC
        return text

    def add(self, ev: Event) -> None:
        text = _token(ev)
        if ev.ok:
            self._parts.append(self.paint(text, self.config.palette.get(ev.kind, "")))
        elif self.config.color:
            self._parts.append(self.paint(text, self.config.palette.get("error", RED)))
        else:
            self._parts.append("!!" + text + "!!")
        if ev.error is not None:
            self._notes.append(describe_error(ev.error))

    def newline(self, indent: int) -> None:
        self.flush()
        self._indent = indent

    def flush(self) -> None:
        if not self._parts:
            return
        line = self.config.indent * self._indent + " ".join(self._parts)
        if self._notes:
            line += " " + self.paint("<- " + "; ".join(self._notes),
                                     self.config.palette.get("error", RED))
        self.lines.append(line)
        self._parts = []
        self._notes = []


def render_events(events: Iterable[Event], config: Optional[RenderConfig] = None) -> List[str]:
    """Render one document's events as text lines."""
    out = _LineBuilder(config if config is not None else RenderConfig())
    for ev in events:
        # Elements and trailing blobs sit one level inside their scope;
        # closing brackets line up with the line that opened them.
        if ev.kind in (TYPE, TRAILING):
            out.newline(ev.depth + 1)
        elif ev.kind == CLOSE:
            out.newline(ev.depth)
        out.add(ev)
    out.flush()
    return out.lines


def render_error_counts(counts: Dict[str, int]) -> List[str]:
    """Render a per-code error tally, most frequent first."""
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return ["{:6d}  {}  ({})".format(n, code, describe_error(code)) for code, n in ordered]
