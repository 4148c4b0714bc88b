"""Tiny builders for well-formed BSON bytes, used only by the tests."""

from __future__ import annotations

import struct


def i32(n: int) -> bytes:
    return struct.pack("<i", n)


def cstr(s: str) -> bytes:
    return s.encode("utf-8") + b"\x00"


def string(s: str) -> bytes:
    body = cstr(s)
    return i32(len(body)) + body


def element(tag: int, key: str, payload: bytes = b"") -> bytes:
    return bytes([tag]) + cstr(key) + payload


def document(*elements: bytes) -> bytes:
    body = b"".join(elements)
    return i32(len(body) + 5) + body + b"\x00"


def binary(subtype: int, data: bytes) -> bytes:
    return i32(len(data)) + bytes([subtype]) + data


def code_w_scope(code: str, scope: bytes) -> bytes:
    body = string(code) + scope
    return i32(len(body) + 4) + body


def every_type() -> bytes:
    """One document holding an element of every known type."""
    return document(
        element(0x01, "dbl", b"\x00" * 7 + b"\x40"),
        element(0x02, "str", string("héllo")),
        element(0x03, "sub", document(element(0x10, "n", i32(7)))),
        element(0x04, "arr", document(element(0x02, "0", string("a")),
                                      element(0x02, "1", string("b")))),
        element(0x05, "bin", binary(0x00, b"\x01\x02")),
        element(0x05, "old", binary(0x02, i32(2) + b"\x01\x02")),
        element(0x06, "undef"),
        element(0x07, "oid", bytes(range(1, 13))),
        element(0x08, "t", b"\x01"),
        element(0x09, "dt", b"\x00" * 8),
        element(0x0A, "nil"),
        element(0x0B, "re", cstr("a+") + cstr("i")),
        element(0x0C, "ptr", string("db.c") + bytes(range(1, 13))),
        element(0x0D, "js", string("f()")),
        element(0x0E, "sym", string("s")),
        element(0x0F, "cws", code_w_scope("g()", document(element(0x10, "x", i32(1))))),
        element(0x10, "i32", i32(-1)),
        element(0x11, "ts", b"\x00" * 8),
        element(0x12, "i64", b"\xff" * 8),
        element(0x7F, "max"),
        element(0xFF, "min"),
    )
