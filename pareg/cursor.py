"""
Pareg text cursor and format specifiers.

Overview
- Cursor: a position-tracked reader over a string, a text stream or an
  iterable of text chunks. Characters are read one at a time; backtracking
  pushes characters onto a small stack that is consulted before the source,
  so prepended and original text look the same to readers.
- ReadFmt: the per-placeholder format specifier understood by the typed
  readers (see pareg.readers).

Format specifier grammar

    [[fill]side][min][..[max]][base][custom]

- side: ">" trims the fill character on the left, "<" on the right, "^" on
  both sides. Without a fill character, whitespace is trimmed.
- min/max: length range in characters. "4" means exactly four, "2.." at
  least two, "..8" at most eight.
- base: "d", "x", "o" or "b" (case-insensitive) for integer readers.
- custom: whatever is left, available to caller-defined readers.

Examples
    >>> cursor = Cursor("12:30")
    >>> cursor.parse(int), cursor.next(), cursor.parse(int)
    (12, ':', 30)
"""
import functools
import re
from collections.abc import Iterable
from typing import NamedTuple

from .faults import ArgError, ErrorContext, ErrorKind, Span
from .utils import Unset, coalesce

_SPEC = re.compile(r"""
    (?:(?P<fill>.)?(?P<side>[<>^]))?
    (?P<min>\d+)?
    (?:(?P<range>\.\.)(?P<max>\d+)?)?
    (?P<base>[dxobDXOB])?
    (?P<custom>.*)
""", re.VERBOSE | re.DOTALL)

_BASES = {"d": 10, "x": 16, "o": 8, "b": 2}


class ReadFmt(NamedTuple):
    """
    parsed format specifier.

    `stop` is not part of the grammar: the format engine sets it to the
    literal that follows a placeholder so text readers know where to stop.
    """
    fill: str | None = None
    side: str = ""
    min: int = 0
    max: int | None = None
    base: int = 10
    custom: str = ""
    stop: str = ""

    @staticmethod
    @functools.cache
    def parse(spec, /):
        """parse (and cache) a specifier string; ReadFmt instances pass through."""
        if isinstance(spec, ReadFmt):
            return spec
        if not isinstance(spec, str):
            raise TypeError("ReadFmt.parse() argument must be a string")
        match = _SPEC.fullmatch(spec)
        minimum = int(match["min"] or 0)
        if match["range"]:
            maximum = int(match["max"]) if match["max"] else None
        else:
            maximum = minimum if match["min"] else None
        if maximum is not None and maximum < minimum:
            raise ValueError(f"format specifier {spec!r} has an empty length range")
        return ReadFmt(
            fill=match["fill"],
            side=match["side"] or "",
            min=minimum,
            max=maximum,
            base=_BASES[match["base"].lower()] if match["base"] else 10,
            custom=match["custom"],
        )

    @property
    def trims_left(self):
        return self.side in (">", "^")

    @property
    def trims_right(self):
        return self.side in ("<", "^")

    def is_fill(self, char, /):
        if self.fill is None:
            return char.isspace()
        return char == self.fill

    def fits(self, length, /):
        """whether `length` more characters may still be read."""
        return self.max is None or length < self.max


def _chunks(source):
    if hasattr(source, "read"):
        return iter(lambda: source.read(1), "")
    return iter(source)


class Cursor:
    """
    position-tracked reader.

    invariants
    - 0 <= position <= len(text): `text` is everything read from the source
      so far (the whole string for string sources).
    - pushed-back characters are returned before the source is consulted.
    - trim_right() shrinks the logical window; the source is never modified.
    """

    def __init__(self, source, /, *, name="input"):
        if isinstance(source, str):
            self._text = source
            self._chunks = iter(())
        elif hasattr(source, "read") or isinstance(source, Iterable):
            self._text = ""
            self._chunks = _chunks(source)
        else:
            raise TypeError("Cursor() argument must be a string, a text stream or an iterable of strings")
        if not isinstance(name, str):
            raise TypeError("Cursor() 'name' must be a string")
        self.name = name
        self._index = 0
        self._end = Unset
        self._undone = []

    def __repr__(self):
        return f"Cursor({self.text!r}, position={self.position})"

    @property
    def text(self):
        """the source text read so far (all of it for string sources)."""
        return self._text

    @property
    def position(self):
        return max(self._index - len(self._undone), 0)

    def _available(self):
        while self._index >= len(self._text):
            if self._end is not Unset:
                return False
            chunk = next(self._chunks, None)
            if chunk is None:
                self._end = len(self._text)
                return False
            if not isinstance(chunk, str):
                raise TypeError("Cursor() source must produce strings")
            self._text += chunk
        return self._end is Unset or self._index < self._end

    def _exhaust(self):
        for chunk in self._chunks:
            self._text += chunk
        if self._end is Unset:
            self._end = len(self._text)

    # --- reading ---

    def peek(self):
        """next character without advancing, None at the end of input."""
        if self._undone:
            return self._undone[-1]
        if self._available():
            return self._text[self._index]
        return None

    def next(self):
        """consume and return the next character, None at the end of input."""
        if self._undone:
            return self._undone.pop()
        if self._available():
            self._index += 1
            return self._text[self._index - 1]
        return None

    def __iter__(self):
        return self

    def __next__(self):
        char = self.next()
        if char is None:
            raise StopIteration
        return char

    def skip(self, count=1, /):
        """
        skip characters.

        with an integer, skip up to that many characters and return how many
        were skipped; with a predicate, skip one character only when it
        matches and return whether it did.
        """
        if callable(count):
            return self.is_next(count)
        skipped = 0
        while skipped < count and self.next() is not None:
            skipped += 1
        return skipped

    def skip_while(self, predicate, /):
        skipped = 0
        while (char := self.peek()) is not None and predicate(char):
            self.next()
            skipped += 1
        return skipped

    def is_next(self, expected, /):
        """consume the next character if it equals `expected` (or satisfies it)."""
        char = self.peek()
        if char is None:
            return False
        matched = char == expected if isinstance(expected, str) else expected(char)
        if matched:
            self.next()
            return True
        return False

    def startswith(self, text, /):
        """whether the upcoming input starts with `text` (nothing is consumed)."""
        taken = []
        try:
            for expected in text:
                if self.peek() != expected:
                    return False
                taken.append(self.next())
            return True
        finally:
            self.prepend("".join(taken))

    def expect(self, text, /):
        """consume exactly `text` or fail with a format mismatch at the first difference."""
        for expected in text:
            char = self.peek()
            if char != expected:
                start = self.position
                end = start if char is None else start + 1
                found = "end of input" if char is None else f"`{char}`"
                raise self.err_span(ErrorKind.FORMAT_MISMATCH, f"expected `{expected}`, found {found}", start, end)
            self.next()

    def read_to(self, count, /):
        chars = []
        while len(chars) < count and (char := self.next()) is not None:
            chars.append(char)
        return "".join(chars)

    def read_all(self):
        return "".join(self)

    def remaining(self):
        """the unread part of the window; nothing is consumed."""
        if self._end is Unset:
            self._exhaust()
        return "".join(reversed(self._undone)) + self._text[self._index:self._end]

    # --- window ---

    def trim_left(self, predicate=str.isspace, /):
        return self.skip_while(predicate)

    def trim_right(self, predicate=str.isspace, /):
        """drop trailing characters matching `predicate` from the window."""
        self._exhaust()
        end = self._end
        while end > self._index and predicate(self._text[end - 1]):
            end -= 1
        trimmed = self._end - end
        self._end = end
        return trimmed

    # --- backtracking ---

    def unnext(self, char, /):
        """push one character back so that it is read next."""
        if not isinstance(char, str) or len(char) != 1:
            raise TypeError("unnext() argument must be a single character")
        self._undone.append(char)

    def prepend(self, text, /):
        """push `text` back so that it is read next, first character first."""
        if not isinstance(text, str):
            raise TypeError("prepend() argument must be a string")
        self._undone.extend(reversed(text))

    # --- parsing ---

    def parse(self, target, fmt="", /):
        """parse one value of `target` at the current position (see pareg.readers.read)."""
        from .readers import read
        return read(self, target, fmt)

    # --- errors ---

    def err_span(self, kind, message, start, end=Unset, /):
        """error pointing at text[start:end] (end defaults to the current position)."""
        end = min(coalesce(end, self.position), len(self._text))
        start = max(min(start, end), 0)
        return ArgError(ErrorContext(
            kind,
            args=(self._text,),
            span=Span(self.name, start, end),
            inline=message,
        ))

    def err_parse(self, message, /):
        """parse failure pointing at the last consumed character."""
        return self.err_span(ErrorKind.PARSE_FAILED, message, self.position - 1)

    def err_value(self, message, /):
        """invalid value pointing at the last consumed character."""
        return self.err_span(ErrorKind.INVALID_VALUE, message, self.position - 1)

    def err_parse_peek(self, message, /):
        """parse failure at the current position (empty span)."""
        return self.err_span(ErrorKind.PARSE_FAILED, message, self.position)

    def err_value_peek(self, message, /):
        return self.err_span(ErrorKind.INVALID_VALUE, message, self.position)

    def map_err(self, error, start, /):
        """
        re-anchor an error raised while parsing text extracted from this
        cursor at `start`, keeping its kind and messages.
        """
        if not isinstance(error, ArgError):
            raise TypeError("map_err() argument must be an argument error")
        if error.span is None:
            return error.spanned(0, len(error.context.source or "")).shift_span(start, self._text)
        return error.shift_span(start, self._text)


__all__ = (
    "Cursor",
    "ReadFmt",
)
