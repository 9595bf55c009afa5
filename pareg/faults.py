"""
Pareg faults (argument errors) and rendering.

Scope
- ErrorKind: canonical, stable numeric identifiers for every failure the
  library reports. Codes are grouped by domain (navigation, conversion,
  validation) so hosts can search and remap them.
- ColorMode: tri-state color policy (always/never/auto) applied at render time.
- Span: (source, start, end) location of the failing substring. Offsets count
  characters of the exact string the caller supplied.
- ErrorContext: everything a diagnostic needs (kind, messages, hint, span,
  tokens, color policy) plus the one-shot "announced" state.
- ArgError: the exception wrapping exactly one ErrorContext, with one subclass
  per kind (ParseFailedError, InvalidValueError, ...).
- announce() / trigger(): surface an error on stderr exactly once.

Rendering
- The diagnostic reads like a compiler message:

      argument error: invalid value.
      --> arg1:0..3
       |
       $ --count abc file.txt
       |         ^^^ failed to parse `int`.
      hint: use a whole number.

- Neighbouring tokens are elided with "..." to keep the token line within
  80 columns. format(error, "+") forces color, format(error, "-") disables it,
  str(error) is always plain.

Configuration (read from __main__)
- __color__: default ColorMode ("always", "never", "auto").
- __announce__: False drops the "argument error:" prefix, and trigger()
  re-raises instead of printing.
- __styles__: style overrides for "prefix", "headline", "location", "gutter",
  "elision", "caret" and "hint".
- __codes__: optional mapping remapping ErrorKind codes in normalize().
"""
import logging
import sys
from collections import defaultdict
from enum import IntEnum, StrEnum
from typing import NamedTuple

from rich.console import Console
from rich.text import Text

from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

console = Console(stderr=True)

MAX_WIDTH = 80


class ErrorKind(IntEnum):
    """
    canonical error kinds (stable identifiers).

    grouping
    - navigation (211 0x): UNKNOWN_ARGUMENT, NO_MORE_ARGUMENTS, TOO_MANY_ARGUMENTS
    - conversion (211 1x): PARSE_FAILED, FORMAT_MISMATCH, NO_VALUE
    - validation (211 2x): INVALID_VALUE
    """
    # --- navigation (2110x) ---
    UNKNOWN_ARGUMENT   = 21101
    NO_MORE_ARGUMENTS  = 21102
    TOO_MANY_ARGUMENTS = 21103

    # --- conversion (2111x) ---
    PARSE_FAILED       = 21111
    FORMAT_MISMATCH    = 21112
    NO_VALUE           = 21113

    # --- validation (2112x) ---
    INVALID_VALUE      = 21121

    @property
    def message(self):
        """default one-line description used when an error carries no message."""
        return _MESSAGES[self]

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__ to
        override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


_MESSAGES = {
    ErrorKind.UNKNOWN_ARGUMENT: "unknown argument.",
    ErrorKind.NO_MORE_ARGUMENTS: "no more arguments.",
    ErrorKind.TOO_MANY_ARGUMENTS: "too many arguments.",
    ErrorKind.PARSE_FAILED: "failed to parse.",
    ErrorKind.FORMAT_MISMATCH: "input does not match the format.",
    ErrorKind.NO_VALUE: "no value.",
    ErrorKind.INVALID_VALUE: "invalid value.",
}


class ColorMode(StrEnum):
    ALWAYS = "always"
    NEVER = "never"
    AUTO = "auto"

    @classmethod
    def default(cls):
        """the host default (__color__ in __main__), auto when absent."""
        return cls(getattr(__import__("__main__"), "__color__", cls.AUTO))

    def use_color(self, target=Unset, /):
        """
        decide whether to decorate output for the given console.

        auto defers to rich's terminal detection (NO_COLOR included).
        """
        match self:
            case ColorMode.ALWAYS:
                return True
            case ColorMode.NEVER:
                return False
        target = coalesce(target, console)
        return target.is_terminal and not target.no_color


class Span(NamedTuple):
    source: str
    start: int
    end: int

    def shift(self, offset, /):
        return self._replace(start=self.start + offset, end=self.end + offset)

    def __str__(self):
        return f"{self.source}:{self.start}..{self.end}"


class ErrorContext:
    """
    the data behind a diagnostic.

    notes
    - contexts are immutable: builders return a replaced copy.
    - the announcement flag lives in a cell shared by every copy, so an error
      that is wrapped (from_inner) or replaced stays announced.
    - when tokens are attached, the span must lie inside args[index].
    """
    __slots__ = ("kind", "args", "index", "span", "inline", "long", "hint", "color", "_cell")

    def __init__(
            self,
            kind,
            /,
            *,
            args=(),
            index=0,
            span=None,
            inline=None,
            long=None,
            hint=None,
            color=Unset,
            cell=Unset,
    ):
        if not isinstance(kind, ErrorKind):
            raise TypeError("ErrorContext() argument must be an error kind")
        args = tuple(args)
        if not all(isinstance(arg, str) for arg in args):
            raise TypeError("ErrorContext() 'args' must contain only strings")
        if args and not 0 <= index < len(args):
            raise ValueError("ErrorContext() 'index' must point into 'args'")
        if span is not None:
            if not isinstance(span, Span):
                raise TypeError("ErrorContext() 'span' must be a span")
            limit = len(args[index]) if args else span.end
            if not 0 <= span.start <= span.end <= limit:
                raise ValueError("ErrorContext() 'span' must lie inside its source")
        self.kind = kind
        self.args = args
        self.index = index
        self.span = span
        self.inline = inline
        self.long = long
        self.hint = hint
        self.color = ColorMode(coalesce(color, ColorMode.default()))
        self._cell = coalesce(cell, [False])

    @classmethod
    def from_msg(cls, kind, message, /, text=Unset, *, source="input"):
        """context whose inline message points at the whole `text`."""
        if text is Unset:
            return cls(kind, inline=message)
        return cls(kind, args=(text,), span=Span(source, 0, len(text)), inline=message)

    @classmethod
    def from_inner(cls, kind, inner, /, text=Unset, *, source="input"):
        """
        wrap a lower-level failure.

        an ArgError (or context) keeps its span, messages and announcement cell;
        any other exception contributes its message only.
        """
        if isinstance(inner, ArgError):
            inner = inner.context
        if isinstance(inner, ErrorContext):
            return inner.__replace__(kind=kind)
        return cls.from_msg(kind, str(inner), text, source=source)

    @property
    def announced(self):
        return self._cell[0]

    @announced.setter
    def announced(self, value):
        self._cell[0] = bool(value)

    @property
    def source(self):
        """the text the span points into (None when no tokens are attached)."""
        return self.args[self.index] if self.args else None

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        fields = {
            "args": self.args,
            "index": self.index,
            "span": self.span,
            "inline": self.inline,
            "long": self.long,
            "hint": self.hint,
            "color": self.color,
            "cell": self._cell,
        } | overrides
        return type(self)(overrides.get("kind", self.kind), **{k: v for k, v in fields.items() if k != "kind"})

    def _name(self):
        if self.span is not None:
            return self.span.source
        return f"arg{self.index}" if self.args else "input"

    def spanned(self, start, end, /, source=Unset):
        return self.__replace__(span=Span(coalesce(source, self._name()), start, end))

    def span_start(self, start, /):
        span = self.span or Span(self._name(), 0, len(self.source or ""))
        return self.__replace__(span=span._replace(start=min(start, span.end)))

    def shift_span(self, offset, text, /):
        """move the span by `offset` characters and make `text` the failing token."""
        span = self.span or Span(self._name(), 0, 0)
        return self.__replace__(args=self._with_source(text), span=span.shift(offset))

    def part_of(self, text, /):
        """make `text` the failing token; a known substring keeps its span aligned."""
        current = self.source
        whole = Span(self._name(), 0, len(text))
        if current is None:
            span = whole
        elif len(current) == len(text):
            span = self.span or whole
        elif (offset := text.find(current)) >= 0:
            span = (self.span or Span(self._name(), 0, len(current))).shift(offset)
        else:
            span = whole
        return self.__replace__(args=self._with_source(text), span=span)

    def postfix_of(self, text, /):
        """make `text` the failing token, the current one being its suffix."""
        current = self.source or ""
        span = self.span or Span(self._name(), 0, len(current))
        if len(current) <= len(text):
            span = span.shift(len(text) - len(current))
        else:
            span = span._replace(start=min(span.start, len(text)), end=min(span.end, len(text)))
        return self.__replace__(args=self._with_source(text), span=span)

    def add_args(self, args, index, /):
        """attach the whole token sequence; the span is re-anchored in args[index]."""
        args = tuple(args)
        current = self.source
        span = self.span
        if current is not None and span is not None and len(current) != len(args[index]):
            if (offset := args[index].find(current)) >= 0:
                span = span.shift(offset)
            else:
                span = None
        if span is not None:
            span = span._replace(source=f"arg{index}")
        return self.__replace__(args=args, index=index, span=span)

    def _with_source(self, text):
        if not self.args:
            return (text,)
        return self.args[:self.index] + (text,) + self.args[self.index + 1:]

    def render(self, colorful=Unset, /):
        """
        build the diagnostic as rich Text.

        colorful defaults to this context's color policy evaluated against the
        stderr console.
        """
        main = __import__("__main__")
        colorful = coalesce(colorful, self.color.use_color())

        styles = defaultdict(str, {
            "prefix": "bold red",
            "headline": "bold",
            "location": "bold blue",
            "gutter": "bold blue",
            "elision": "bright_black",
            "caret": "bold red",
            "hint": "cyan",
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        headline = self.long or self.inline or self.kind.message
        prefix = "argument error:" if self.args else "error:"
        if getattr(main, "__announce__", True):
            lines = [Text.assemble((prefix, styler("prefix")), " ", (headline, styler("headline")))]
        else:
            lines = [Text(headline, styler("headline"))]

        if self.args:
            index = min(max(self.index, 0), len(self.args) - 1)
            token = self.args[index]
            span = self.span or Span(f"arg{index}", 0, len(token))

            lines.append(Text.assemble(("-->", styler("location")), " ", str(span)))
            lines.append(Text(" |", styler("gutter")))

            first, last = _window(self.args, index, MAX_WIDTH - 11)
            line = Text.assemble(" ", ("$", styler("gutter")), " ")
            column = 3
            if first > 0:
                line.append("...", styler("elision"))
                line.append(" ")
                column += 4
            for position in range(first, last + 1):
                if position < index:
                    line.append(self.args[position] + " ")
                    column += len(self.args[position]) + 1
                elif position == index:
                    line.append(token)
                    column += min(span.start, len(token))
                else:
                    line.append(" " + self.args[position])
            if last != len(self.args) - 1:
                line.append(" ")
                line.append("...", styler("elision"))
            lines.append(line)

            carets = "^" * max(span.end - span.start, 1)
            lines.append(Text.assemble(
                (" |", styler("gutter")),
                " " * (column - 2),
                (f"{carets} {self.inline or self.kind.message}", styler("caret")),
            ))

        if self.hint:
            lines.append(Text.assemble(("hint:", styler("hint")), " ", str(self.hint)))

        return Text("\n").join(lines)

    def __format__(self, spec):
        match spec:
            case "+":
                return _export(self.render(True))
            case "-":
                return self.render(False).plain
            case "":
                return _export(self.render()) if self.color.use_color() else self.render(False).plain
        raise ValueError(f"unknown format code {spec!r} for error context")

    def __str__(self):
        return self.render(False).plain

    def __repr__(self):
        return f"ErrorContext({self.kind.name}, span={self.span!r}, inline={self.inline!r})"


def _window(args, index, width):
    """widest run of tokens around args[index] that fits in `width` columns."""
    used = len(args[index])
    first = last = index
    while True:
        exhausted = False
        if first > 0:
            if used + len(args[first - 1]) + 1 > width:
                break
            first -= 1
            used += len(args[first]) + 1
        else:
            exhausted = True
        if last + 1 < len(args):
            if used + len(args[last + 1]) + 1 > width:
                break
            last += 1
            used += len(args[last]) + 1
        elif exhausted:
            break
    return first, last


def _export(text):
    buffer = Console(force_terminal=True, color_system="truecolor", width=1 << 16)
    with buffer.capture() as capture:
        buffer.print(text, end="", soft_wrap=True, highlight=False)
    return capture.get()


_kinds = {}


class ArgError(Exception):
    """
    an argument parsing failure.

    construction
    - ArgError(context) picks the subclass registered for context.kind, so
      `except ParseFailedError` catches every PARSE_FAILED error.
    - subclasses register themselves with `class X(ArgError, kind=...)`.

    the wrapped context is replaced wholesale by the builder methods below,
    each returning the error itself for chaining.
    """
    __kind__ = Unset

    def __init_subclass__(cls, /, kind=Unset, **options):
        super().__init_subclass__(**options)
        if kind is not Unset:
            cls.__kind__ = ErrorKind(kind)
            _kinds[cls.__kind__] = cls

    def __new__(cls, context, /):
        if not isinstance(context, ErrorContext):
            raise TypeError("ArgError() argument must be an error context")
        if cls is ArgError:
            cls = _kinds.get(context.kind, cls)
        elif cls.__kind__ is not Unset and cls.__kind__ != context.kind:
            raise ValueError(f"{cls.__name__}() argument must be a {cls.__kind__.name} context")
        return super().__new__(cls, context)

    def __init__(self, context, /):
        super().__init__(context)
        self.context = context

    # --- constructors ---

    @classmethod
    def from_msg(cls, kind, message, /, text=Unset, **options):
        return ArgError(ErrorContext.from_msg(kind, message, text, **options))

    @classmethod
    def from_inner(cls, kind, inner, /, text=Unset, **options):
        return ArgError(ErrorContext.from_inner(kind, inner, text, **options))

    @classmethod
    def parse_msg(cls, message, /, text=Unset, **options):
        return cls.from_msg(ErrorKind.PARSE_FAILED, message, text, **options)

    @classmethod
    def value_msg(cls, message, /, text=Unset, **options):
        return cls.from_msg(ErrorKind.INVALID_VALUE, message, text, **options)

    @classmethod
    def too_many_arguments(cls, message, /, text=Unset, **options):
        return cls.from_msg(ErrorKind.TOO_MANY_ARGUMENTS, message, text, **options)

    # --- accessors ---

    @property
    def kind(self):
        return self.context.kind

    @property
    def span(self):
        return self.context.span

    @property
    def announced(self):
        return self.context.announced

    # --- builders ---

    def map_ctx(self, function, /):
        context = function(self.context)
        if not isinstance(context, ErrorContext):
            raise TypeError("map_ctx() callback must return an error context")
        if context.kind != self.context.kind:
            return ArgError(context)
        self.context = context
        self.args = (context,)
        return self

    def spanned(self, start, end, /, source=Unset):
        return self.map_ctx(lambda context: context.spanned(start, end, source))

    def span_start(self, start, /):
        return self.map_ctx(lambda context: context.span_start(start))

    def shift_span(self, offset, text, /):
        return self.map_ctx(lambda context: context.shift_span(offset, text))

    def part_of(self, text, /):
        return self.map_ctx(lambda context: context.part_of(text))

    def postfix_of(self, text, /):
        return self.map_ctx(lambda context: context.postfix_of(text))

    def add_args(self, args, index, /):
        return self.map_ctx(lambda context: context.add_args(args, index))

    def hint(self, hint, /):
        return self.map_ctx(lambda context: context.__replace__(hint=hint))

    def inline_msg(self, message, /):
        return self.map_ctx(lambda context: context.__replace__(inline=message))

    def long_msg(self, message, /):
        return self.map_ctx(lambda context: context.__replace__(long=message))

    def color_mode(self, mode, /):
        return self.map_ctx(lambda context: context.__replace__(color=ColorMode(mode)))

    def no_color(self):
        return self.color_mode(ColorMode.NEVER)

    # --- rendering ---

    def __rich__(self):
        return self.context.render(self.context.color is not ColorMode.NEVER)

    def __format__(self, spec):
        return format(self.context, spec)

    def __str__(self):
        return str(self.context)

    def __repr__(self):
        return f"{type(self).__name__}({self.context!r})"

    def __trigger__(self):
        if not getattr(__import__("__main__"), "__announce__", True):
            raise self from None
        announce(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return ArgError(self.context.__replace__(**overrides))


class UnknownArgumentError(ArgError, kind=ErrorKind.UNKNOWN_ARGUMENT): ...
class NoMoreArgumentsError(ArgError, kind=ErrorKind.NO_MORE_ARGUMENTS): ...
class TooManyArgumentsError(ArgError, kind=ErrorKind.TOO_MANY_ARGUMENTS): ...
class ParseFailedError(ArgError, kind=ErrorKind.PARSE_FAILED): ...
class FormatMismatchError(ArgError, kind=ErrorKind.FORMAT_MISMATCH): ...
class NoValueError(ArgError, kind=ErrorKind.NO_VALUE): ...
class InvalidValueError(ArgError, kind=ErrorKind.INVALID_VALUE): ...


def announce(error, /, target=Unset):
    """
    render an error on stderr unless it (or an error wrapping the same
    context) was already rendered.

    returns True when something was printed.
    """
    if not isinstance(error, ArgError):
        raise TypeError("announce() argument must be an argument error")
    if error.announced:
        logger.debug("suppressed repeated announcement of %r", error)
        return False
    error.context.announced = True
    target = coalesce(target, console)
    colorful = error.context.color.use_color(target)
    if colorful and not target.is_terminal:
        target = Console(file=target.file, force_terminal=True, color_system="truecolor")
    target.print(error.context.render(colorful), soft_wrap=True, highlight=False)
    return True


def trigger(fault, /, **options):
    """
    surface a fault with the given overrides.

    contract
    - fault must provide __trigger__ and __replace__ methods.
    - options (hint, inline, long, color, ...) are merged into the fault via
      __replace__(**options) before triggering.
    - with __announce__ disabled the fault is raised, otherwise it is printed
      once and the process exits with status 1.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "ErrorKind",
    "ColorMode",
    "Span",
    "ErrorContext",
    "ArgError",
    "UnknownArgumentError",
    "NoMoreArgumentsError",
    "TooManyArgumentsError",
    "ParseFailedError",
    "FormatMismatchError",
    "NoValueError",
    "InvalidValueError",
    "announce",
    "trigger",
)
