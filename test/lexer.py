"""
Lexer module behavioral tests (argv → tokens).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from argoparse.lexer import LexResult, LongOption, ShortOption, Value, flag_name, is_flag_token, lex


class TestLexer(TestCase):
    """Token shapes for long, short, clustered and plain arguments."""

    def testLongOption(self):
        self.assertEqual(lex(["--verbose"]).tokens, (LongOption("verbose", "--verbose"),))

    def testLongOptionInlineValueSplitsAtFirstEquals(self):
        self.assertEqual(lex(["--define=a=b"]).tokens, (LongOption("define", "--define=a=b", "a=b"),))

    def testEmptyInlineValueIsKept(self):
        self.assertEqual(lex(["--name="]).tokens[0].value, "")

    def testShortCluster(self):
        self.assertEqual(
            lex(["-abc"]).tokens,
            (ShortOption("a", "-a"), ShortOption("b", "-b"), ShortOption("c", "-c")),
        )

    def testShortClusterValueGoesToLastFlag(self):
        self.assertEqual(
            lex(["-xo=out.txt"]).tokens,
            (ShortOption("x", "-x"), ShortOption("o", "-o", "out.txt")),
        )

    def testValuesAndLoneDash(self):
        self.assertEqual(lex(["file.txt", "-"]).tokens, (Value("file.txt"), Value("-")))

    def testDashEqualsIsValue(self):
        self.assertEqual(lex(["-=x"]).tokens, (Value("-=x"),))

    def testDoubleDashEndsOptions(self):
        self.assertEqual(
            lex(["--a", "--", "--b", "--", "c"]),
            LexResult((LongOption("a", "--a"),), ("--b", "--", "c")),
        )

    def testEmptyArgv(self):
        self.assertEqual(lex([]), LexResult((), ()))

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            lex(["ok", 1])

    def testHelpers(self):
        long, short, value = lex(["--name", "-n", "x"]).tokens
        self.assertTrue(is_flag_token(long))
        self.assertTrue(is_flag_token(short))
        self.assertFalse(is_flag_token(value))
        self.assertEqual((flag_name(long), flag_name(short)), ("name", "n"))


if __name__ == "__main__":
    unittest.main()
