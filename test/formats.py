"""
Format-driven parsing tests (parsef / parsef_part).
"""
import unittest
from ipaddress import IPv4Address
from typing import NamedTuple
from unittest import TestCase

from pareg import *


class Pair(NamedTuple):
    left: int
    right: int

    @classmethod
    def __from_read__(cls, cursor, fmt, /):
        return cls(*parsef_part(cursor, "({},{})", int, int))


class ParsefTest(TestCase):
    def testPositionalPlaceholders(self):
        self.assertEqual(parsef("8080:443", "{}:{}", int, int), (8080, 443))

    def testLiteralMismatchSpansOffendingCharacter(self):
        with self.assertRaises(FormatMismatchError) as caught:
            parsef("8080-443", "{}:{}", int, int)
        self.assertEqual((caught.exception.span.start, caught.exception.span.end), (4, 5))

    def testNamedPlaceholders(self):
        self.assertEqual(parsef("a=1", "{key}={value}", key=str, value=int), ("a", 1))

    def testExplicitPositions(self):
        self.assertEqual(parsef("1-x", "{1}-{0}", str, int), (1, "x"))

    def testEscapedBraces(self):
        self.assertEqual(parsef("{7}", "{{{}}}", int), (7,))

    def testTextStopsBeforeFollowingLiteral(self):
        self.assertEqual(parsef("user@host:22", "{}@{}:{}", str, str, int), ("user", "host", 22))

    def testTrailingInputRejected(self):
        with self.assertRaises(FormatMismatchError) as caught:
            parsef("1:2x", "{}:{}", int, int)
        self.assertEqual((caught.exception.span.start, caught.exception.span.end), (3, 4))

    def testPartAllowsTrailingInput(self):
        self.assertEqual(parsef_part("1:2x", "{}:{}", int, int), (1, 2))
        self.assertEqual(parsef_part("123", "{:2}", int), (12,))

    def testPartLeavesCursorAfterFormat(self):
        cursor = Cursor("1:2x")
        parsef_part(cursor, "{}:{}", int, int)
        self.assertEqual(cursor.remaining(), "x")

    def testPartialWritesStayVisible(self):
        slot = Slot(int)
        with self.assertRaises(FormatMismatchError):
            parsef("5-6", "{}:{}", slot, int)
        self.assertEqual(slot.value, 5)

    def testSpecifiers(self):
        self.assertEqual(parsef("fea", "{:X}", int), (0xFEA,))
        self.assertEqual(parsef("  ab    ", "{:^2..4}", str), ("ab",))
        self.assertEqual(parsef(" 123", "{:>}", int), (123,))
        with self.assertRaises(ParseFailedError):
            parsef(" 123", "{}", int)

    def testAddressWithMask(self):
        address, mask = parsef("127.5.20.1/24", "{}/{}", IPv4Address, InRange(int, range(33)))
        self.assertEqual(address, IPv4Address("127.5.20.1"))
        self.assertEqual(mask, 24)
        with self.assertRaises(InvalidValueError):
            parsef("127.5.20.1/40", "{}/{}", IPv4Address, InRange(int, range(33)))

    def testFromReadTargets(self):
        self.assertEqual(parsef("(1,2)", "{}", Pair), (Pair(1, 2),))

    def testNamedCursorSource(self):
        cursor = Cursor("x=oops", name="arg3")
        with self.assertRaises(ParseFailedError) as caught:
            parsef(cursor, "x={}", int)
        self.assertEqual(caught.exception.span.source, "arg3")


class ReformatTest(TestCase):
    """
    Formatting the parsed values with the same format gives back the input.
    """

    def testValuesReformatToInput(self):
        cases = [
            ("8080:443", "{}:{}", (int, int)),
            ("-3:0", "{}:{}", (int, int)),
            ("user@host:22", "{}@{}:{}", (str, str, int)),
            ("127.5.20.1/24", "{}/{}", (IPv4Address, int)),
            ("x=2.5", "x={}", (float,)),
        ]
        for text, fmt, targets in cases:
            with self.subTest(text=text):
                values = parsef(text, fmt, *targets)
                self.assertEqual(fmt.format(*map(str, values)), text)


class MalformedFormatTest(TestCase):
    """
    Caller mistakes raise builtin errors before the input is read.
    """

    def testUnclosedPlaceholder(self):
        with self.assertRaises(ValueError):
            parsef("1", "{", int)

    def testUnmatchedClosingBrace(self):
        with self.assertRaises(ValueError):
            parsef("1", "}", int)

    def testMissingTargets(self):
        with self.assertRaises(TypeError):
            parsef("1", "{}")
        with self.assertRaises(TypeError):
            parsef("1", "{name}", int)

    def testSurplusTargets(self):
        with self.assertRaises(TypeError):
            parsef("1", "{}", int, int)


if __name__ == "__main__":
    unittest.main()
