"""Tests for text rendering and input splitting."""

from __future__ import annotations

import inspect
import io
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.dirname(__file__))

from bsonpeek import (
    ERR_BAD_HEX,
    ERROR_CODES,
    BsonPeekError,
    RenderConfig,
    decode,
    describe_error,
    iter_documents,
    parse_hex_line,
    render_events,
)
from bsonpeek._input import COMMENT, DOCUMENT, EMPTY
from bsonpeek._render import NC, RED, render_error_counts

from bsonbuild import document, element, i32, string


class TestRenderEvents(unittest.TestCase):
    def test_flat_document(self):
        lines = render_events(decode(bytes.fromhex("0c0000001061000100000000")))
        self.assertEqual(lines, [
            "<12> {",
            '  10:int32 "a": 01000000',
            "}",
        ])

    def test_nested_document_indents(self):
        data = document(element(0x03, "d", document(element(0x02, "s", string("hi")))))
        lines = render_events(decode(data))
        self.assertEqual(lines, [
            "<{}> {{".format(len(data)),
            '  03:document "d": <15> {',
            '    02:string "s": <3> "hi"',
            "  }",
            "}",
        ])

    def test_array_brackets(self):
        data = document(element(0x04, "a", document()))
        lines = render_events(decode(data))
        self.assertEqual(lines[1], '  04:array "a": <5> [')
        self.assertEqual(lines[2], "  ]")

    def test_errors_marked_without_color(self):
        lines = render_events(decode(bytes.fromhex("050000000001")))
        self.assertEqual(lines, [
            "<5> {",
            "  !!00:?!! <- unknown element type",
            "  !!trailing: 01!!",
            "!!}!!",
        ])

    def test_errors_painted_with_color(self):
        lines = render_events(decode(bytes.fromhex("050000000001")), RenderConfig(color=True))
        self.assertIn(RED + "00:?" + NC, lines[1])
        self.assertNotIn("!!", "".join(lines))

    def test_undecodable_key_shown_as_hex(self):
        body = bytes([0x0A]) + b"\xff\x00"
        lines = render_events(decode(i32(len(body) + 5) + body + b"\x00"))
        self.assertEqual(lines[1:], [
            "  0a:null !!ff00!! <- invalid utf-8",
            "  !!trailing: 00!!",
            "!!}!!",
        ])

    def test_truncated_length(self):
        self.assertEqual(render_events(decode(b"\x05\x00")),
                         ["!!<?0500>!! <- fewer than 4 bytes left for a length field"])

    def test_custom_indent(self):
        lines = render_events(decode(document(element(0x0A, "n"))), RenderConfig(indent="\t"))
        self.assertEqual(lines[1], '\t0a:null "n":')

    def test_default_config_is_not_shared(self):
        events = decode(bytes.fromhex("050000000001"))
        self.assertIsNone(inspect.signature(render_events).parameters["config"].default)
        self.assertEqual(render_events(events), render_events(events, RenderConfig()))

    def test_every_error_code_is_described(self):
        for code in ERROR_CODES:
            self.assertNotEqual(describe_error(code), code)

    def test_error_counts_most_frequent_first(self):
        lines = render_error_counts({"ERR_UNKNOWN_TYPE": 1, "ERR_INVALID_UTF8": 3})
        self.assertTrue(lines[0].strip().startswith("3  ERR_INVALID_UTF8"))
        self.assertIn("unknown element type", lines[1])


class TestHexInput(unittest.TestCase):
    def test_case_insensitive(self):
        self.assertEqual(parse_hex_line(b"0aFF"), b"\x0a\xff")

    def test_surrounding_whitespace(self):
        self.assertEqual(parse_hex_line(b"  0500000000\r"), bytes.fromhex("0500000000"))

    def test_odd_length(self):
        with self.assertRaises(BsonPeekError) as ctx:
            parse_hex_line(b"050")
        self.assertEqual(ctx.exception.code, ERR_BAD_HEX)

    def test_non_hex(self):
        with self.assertRaises(BsonPeekError) as ctx:
            parse_hex_line(b"05 00")
        self.assertEqual(ctx.exception.code, ERR_BAD_HEX)

    def test_accepts_str(self):
        self.assertEqual(parse_hex_line("0500000000"), bytes.fromhex("0500000000"))


class TestIterDocuments(unittest.TestCase):
    def test_hex_mode_classifies_lines(self):
        stream = io.BytesIO(b"0500000000\n# a comment\n\n   \nzz\n")
        lines = list(iter_documents(stream, hex_mode=True))
        self.assertEqual([ln.kind for ln in lines], [DOCUMENT, COMMENT, EMPTY, EMPTY, DOCUMENT])
        self.assertEqual(lines[0].document_bytes(), bytes.fromhex("0500000000"))
        self.assertEqual(lines[1].text, b"# a comment")
        self.assertEqual([ln.lineno for ln in lines], [1, 2, 3, 4, 5])
        with self.assertRaises(BsonPeekError):
            lines[4].document_bytes()

    def test_binary_mode_keeps_bytes(self):
        raw = bytes.fromhex("0c0000001061000100000000")
        lines = list(iter_documents(io.BytesIO(raw + b"\n\n# not a comment\n")))
        self.assertEqual([ln.kind for ln in lines], [DOCUMENT, EMPTY, DOCUMENT])
        self.assertEqual(lines[0].document_bytes(), raw)
        self.assertEqual(lines[2].document_bytes(), b"# not a comment")

    def test_last_line_without_newline(self):
        lines = list(iter_documents(io.BytesIO(b"0500000000"), hex_mode=True))
        self.assertEqual(len(lines), 1)

    def test_no_document_on_empty_line(self):
        line = list(iter_documents(io.BytesIO(b"\n")))[0]
        with self.assertRaises(ValueError):
            line.document_bytes()


if __name__ == "__main__":
    unittest.main()
