"""
Tests for error contexts, argument errors and their rendering.

This module verifies:
- Error kinds carry stable codes and default messages.
- Contexts validate their spans and stay immutable under the builders.
- ArgError picks the subclass matching its kind.
- Rendering follows the compiler-style layout and honors color overrides.
- Announcement happens once, even through wrapping layers.
"""
import io
import unittest
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

import pareg.faults
from pareg.faults import *


class ErrorKindTest(TestCase):
    def testStableCodes(self) -> None:
        self.assertEqual(ErrorKind.PARSE_FAILED, 21111)
        self.assertEqual(ErrorKind.INVALID_VALUE, 21121)

    def testDefaultMessages(self) -> None:
        for kind in ErrorKind:
            self.assertTrue(kind.message.endswith("."))

    def testNormalizeWithoutHostMapping(self) -> None:
        self.assertEqual(ErrorKind.NO_VALUE.normalize(), "21113")


class ErrorContextTest(TestCase):
    """
    Construction rules and builders of ErrorContext.
    """

    def setUp(self) -> None:
        self.context = ErrorContext(
            ErrorKind.PARSE_FAILED,
            args=("--count", "abc"),
            index=1,
            span=Span("arg1", 0, 3),
            inline="failed to parse `int`",
            long="invalid count.",
        )

    def testSpanOutsideSourceRejected(self) -> None:
        """
        A span reaching past the failing token is a defect and is rejected.
        """
        with self.assertRaises(ValueError):
            ErrorContext(ErrorKind.PARSE_FAILED, args=("abc",), span=Span("input", 1, 4))

    def testIndexOutsideArgsRejected(self) -> None:
        with self.assertRaises(ValueError):
            ErrorContext(ErrorKind.PARSE_FAILED, args=("abc",), index=1)

    def testKindMustBeErrorKind(self) -> None:
        with self.assertRaises(TypeError):
            ErrorContext("parse")

    def testFromMsgSpansWholeText(self) -> None:
        context = ErrorContext.from_msg(ErrorKind.INVALID_VALUE, "bad", "value")
        self.assertEqual(context.span, Span("input", 0, 5))
        self.assertEqual(context.source, "value")
        self.assertEqual(context.inline, "bad")

    def testBuildersReturnCopies(self) -> None:
        shifted = self.context.shift_span(2, "==abc")
        self.assertEqual(shifted.span, Span("arg1", 2, 5))
        self.assertEqual(shifted.args, ("--count", "==abc"))
        self.assertEqual(self.context.span, Span("arg1", 0, 3))

    def testPartOfFindsSubstring(self) -> None:
        context = ErrorContext.from_msg(ErrorKind.PARSE_FAILED, "bad", "abc").spanned(1, 2)
        widened = context.part_of("--x=abc")
        self.assertEqual((widened.span.start, widened.span.end), (5, 6))

    def testPostfixOf(self) -> None:
        context = ErrorContext.from_msg(ErrorKind.PARSE_FAILED, "bad", "abc")
        widened = context.postfix_of("--x=abc")
        self.assertEqual((widened.span.start, widened.span.end), (4, 7))

    def testAddArgsReanchorsSpan(self) -> None:
        context = ErrorContext.from_msg(ErrorKind.PARSE_FAILED, "bad", "abc")
        anchored = context.add_args(["-v", "--x=abc"], 1)
        self.assertEqual(anchored.span, Span("arg1", 4, 7))
        self.assertEqual(anchored.index, 1)

    def testSpanStartNeverPassesEnd(self) -> None:
        self.assertEqual(self.context.span_start(10).span, Span("arg1", 3, 3))

    def testRenderLayout(self) -> None:
        """
        The plain rendering puts the carets under the failing characters.
        """
        lines = str(self.context).splitlines()
        self.assertEqual(lines[0], "argument error: invalid count.")
        self.assertEqual(lines[1], "--> arg1:0..3")
        self.assertEqual(lines[2], " |")
        self.assertEqual(lines[3], " $ --count abc")
        self.assertEqual(lines[4], " |         ^^^ failed to parse `int`")

    def testRenderHint(self) -> None:
        context = self.context.__replace__(hint="use a number")
        self.assertEqual(str(context).splitlines()[-1], "hint: use a number")

    def testRenderWithoutArgs(self) -> None:
        context = ErrorContext(ErrorKind.NO_MORE_ARGUMENTS)
        self.assertEqual(str(context), "error: no more arguments.")

    def testRenderEmptySpanShowsOneCaret(self) -> None:
        context = ErrorContext(ErrorKind.PARSE_FAILED, args=("",), span=Span("input", 0, 0))
        self.assertEqual(str(context).splitlines()[-1], " | ^ failed to parse.")

    def testRenderElidesDistantTokens(self) -> None:
        """
        Tokens that do not fit in the line are replaced by an ellipsis.
        """
        args = tuple("x" * 30 for _ in range(5))
        context = ErrorContext(ErrorKind.INVALID_VALUE, args=args, index=2)
        line = str(context).splitlines()[3]
        self.assertTrue(line.startswith(" $ ... "))
        self.assertTrue(line.endswith(" ..."))
        self.assertLessEqual(len(line), 80)

    def testFormatSigns(self) -> None:
        self.assertEqual(format(self.context, "-"), str(self.context))
        self.assertIn("\x1b[", format(self.context, "+"))
        with self.assertRaises(ValueError):
            format(self.context, "?")

    def testNeverColorFormatsPlain(self) -> None:
        context = self.context.__replace__(color=ColorMode.NEVER)
        self.assertEqual(format(context, ""), str(context))


class ArgErrorTest(TestCase):
    def testSubclassDispatch(self) -> None:
        error = ArgError(ErrorContext(ErrorKind.INVALID_VALUE))
        self.assertIsInstance(error, InvalidValueError)
        self.assertIs(error.kind, ErrorKind.INVALID_VALUE)

    def testSubclassRejectsForeignKind(self) -> None:
        with self.assertRaises(ValueError):
            ParseFailedError(ErrorContext(ErrorKind.INVALID_VALUE))

    def testConstructors(self) -> None:
        self.assertIsInstance(ArgError.parse_msg("bad", "x"), ParseFailedError)
        self.assertIsInstance(ArgError.value_msg("bad", "x"), InvalidValueError)
        self.assertIsInstance(ArgError.too_many_arguments("bad", "x"), TooManyArgumentsError)

    def testFromInnerForeignException(self) -> None:
        error = ArgError.from_inner(ErrorKind.PARSE_FAILED, ValueError("nope"), "abc")
        self.assertEqual(error.context.inline, "nope")
        self.assertEqual(error.span, Span("input", 0, 3))

    def testChainedBuilders(self) -> None:
        error = ArgError.parse_msg("bad", "abc").spanned(1, 2).hint("try again").long_msg("broken")
        self.assertEqual(error.span, Span("input", 1, 2))
        self.assertEqual(error.context.hint, "try again")
        self.assertEqual(error.context.long, "broken")

    def testNoColor(self) -> None:
        error = ArgError.parse_msg("bad", "abc").no_color()
        self.assertIs(error.context.color, ColorMode.NEVER)

    def testStrIsPlainRendering(self) -> None:
        error = ArgError.parse_msg("bad", "abc")
        self.assertEqual(str(error), str(error.context))


class AnnounceTest(TestCase):
    """
    One-shot announcement on a rich console.
    """

    def setUp(self) -> None:
        self.buffer = io.StringIO()
        self.console = Console(file=self.buffer, color_system=None, width=120)

    def testAnnouncesOnce(self) -> None:
        error = ArgError.parse_msg("bad", "abc")
        self.assertTrue(announce(error, self.console))
        self.assertFalse(announce(error, self.console))
        self.assertEqual(self.buffer.getvalue().count("argument error: bad"), 1)

    def testWrappedErrorSharesAnnouncement(self) -> None:
        """
        Wrapping keeps the flag identity, so the wrapper is not printed again.
        """
        inner = ArgError.parse_msg("bad", "abc")
        announce(inner, self.console)
        outer = ArgError.from_inner(ErrorKind.INVALID_VALUE, inner)
        self.assertTrue(outer.announced)
        self.assertFalse(announce(outer, self.console))

    def testAnnounceRejectsOtherExceptions(self) -> None:
        with self.assertRaises(TypeError):
            announce(ValueError("x"), self.console)

    def testTriggerPrintsAndExits(self) -> None:
        error = ArgError.parse_msg("bad", "abc")
        with patch.object(pareg.faults, "console", self.console):
            with self.assertRaises(SystemExit) as caught:
                trigger(error, hint="try again")
        self.assertEqual(caught.exception.code, 1)
        self.assertIn("hint: try again", self.buffer.getvalue())
        self.assertTrue(error.announced)

    def testTriggerRequiresProtocol(self) -> None:
        with self.assertRaises(TypeError):
            trigger(object())


if __name__ == "__main__":
    unittest.main()
