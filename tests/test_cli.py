"""Tests for the bsonpeek command-line interface."""

from __future__ import annotations

import io
import os
import sys
import unittest
from unittest import mock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.dirname(__file__))

from bsonpeek import max_depth_ceiling
from bsonpeek._cli import NO_DOCUMENT, main

from bsonbuild import document, element


def _run_cli(argv, stdin_bytes, env=None):
    stdin = io.TextIOWrapper(io.BytesIO(stdin_bytes))
    stdout = io.StringIO()
    stderr = io.StringIO()
    code = 0
    with mock.patch.object(sys, "stdin", stdin), \
            mock.patch.object(sys, "stdout", stdout), \
            mock.patch.object(sys, "stderr", stderr), \
            mock.patch.dict(os.environ, env or {}, clear=False):
        try:
            main(argv)
        except SystemExit as e:
            code = e.code
    return code, stdout.getvalue(), stderr.getvalue()


class TestHexMode(unittest.TestCase):
    def test_mixed_input(self):
        stdin = b"0500000000\n# note\n\nzz\n050000000001\n"
        code, out, err = _run_cli(["--hex", "--color", "never"], stdin)
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines(), [
            "<5> {",
            "}",
            "# note",
            NO_DOCUMENT,
            "<5> {",
            "  !!00:?!! <- unknown element type",
            "  !!trailing: 01!!",
            "!!}!!",
        ])
        self.assertIn("line 4: error [ERR_BAD_HEX]", err)

    def test_summary_sets_exit_code(self):
        code, _, err = _run_cli(["-x", "--summary"], b"050000000001\n0500000000\n")
        self.assertEqual(code, 1)
        self.assertIn("2 documents, 1 with errors", err)
        self.assertIn("ERR_UNKNOWN_TYPE", err)

    def test_summary_clean_input(self):
        code, _, err = _run_cli(["-x", "--summary"], b"0500000000\n")
        self.assertEqual(code, 0)
        self.assertIn("1 documents, 0 with errors", err)

    def test_color_always(self):
        _, out, _ = _run_cli(["-x", "--color", "always"], b"050000000001\n")
        self.assertIn("\033[", out)

    def test_color_auto_off_when_not_a_terminal(self):
        _, out, _ = _run_cli(["-x"], b"050000000001\n")
        self.assertNotIn("\033[", out)


class TestBinaryMode(unittest.TestCase):
    def test_raw_line(self):
        raw = bytes.fromhex("0c0000001061000100000000")
        code, out, _ = _run_cli(["--color", "never"], raw + b"\n")
        self.assertEqual(code, 0)
        self.assertEqual(out.splitlines()[1], '  10:int32 "a": 01000000')

    def test_empty_line_notice(self):
        _, out, _ = _run_cli([], b"\n")
        self.assertEqual(out.splitlines(), [NO_DOCUMENT])


class TestDepthConfig(unittest.TestCase):
    _NESTED = document(element(0x03, "a", document())).hex().encode() + b"\n"

    def test_max_depth_flag(self):
        _, out, _ = _run_cli(["-x", "--max-depth", "0"], self._NESTED)
        self.assertIn("documents nested too deeply", out)

    def test_max_depth_env(self):
        _, out, _ = _run_cli(["-x"], self._NESTED, env={"BSONPEEK_MAX_DEPTH": "0"})
        self.assertIn("documents nested too deeply", out)

    def test_flag_overrides_env(self):
        _, out, _ = _run_cli(["-x", "--max-depth", "5"], self._NESTED,
                             env={"BSONPEEK_MAX_DEPTH": "0"})
        self.assertNotIn("nested too deeply", out)

    def test_bad_env_value(self):
        code, _, err = _run_cli(["-x"], self._NESTED, env={"BSONPEEK_MAX_DEPTH": "deep"})
        self.assertEqual(code, 2)
        self.assertIn("ERR_CONFIG", err)

    def test_flag_above_recursion_ceiling_is_usage_error(self):
        too_deep = str(max_depth_ceiling() + 1)
        code, _, err = _run_cli(["-x", "--max-depth", too_deep], self._NESTED)
        self.assertEqual(code, 2)
        self.assertIn("--max-depth", err)

    def test_env_above_recursion_ceiling(self):
        code, _, err = _run_cli(["-x"], self._NESTED,
                                env={"BSONPEEK_MAX_DEPTH": str(max_depth_ceiling() + 1)})
        self.assertEqual(code, 2)
        self.assertIn("ERR_CONFIG", err)

    def test_deep_line_does_not_stop_later_lines(self):
        deep = document()
        for _ in range(max_depth_ceiling() + 400):
            deep = document(element(0x03, "d", deep))
        stdin = deep.hex().encode() + b"\n0500000000\n"
        code, out, _ = _run_cli(["-x", "--color", "never", "--max-depth",
                                 str(max_depth_ceiling())], stdin)
        self.assertEqual(code, 0)
        self.assertIn("documents nested too deeply", out)
        self.assertEqual(out.splitlines()[-2:], ["<5> {", "}"])


class TestArguments(unittest.TestCase):
    def test_negative_depth_is_usage_error(self):
        code, _, _ = _run_cli(["--max-depth", "-1"], b"")
        self.assertEqual(code, 2)

    def test_unknown_flag(self):
        code, _, err = _run_cli(["--bogus"], b"")
        self.assertEqual(code, 2)
        self.assertIn("usage:", err)

    def test_help(self):
        code, out, _ = _run_cli(["--help"], b"")
        self.assertEqual(code, 0)
        self.assertIn("--hex", out)

    def test_version(self):
        code, out, _ = _run_cli(["--version"], b"")
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith("bsonpeek "))


if __name__ == "__main__":
    unittest.main()
