"""
Pareg format-driven parsing (parsef and parsef_part).

    >>> parsef("8080:443", "{}:{}", int, int)
    (8080, 443)
    >>> parsef("ff-10", "{:x}-{}", int, int)
    (255, 10)

Format strings
- literal text must appear in the input exactly; "{{" and "}}" stand for
  literal braces.
- "{}" binds the next positional target, "{2}" the third one, "{name}" the
  keyword target `name`.
- ":spec" after the name is a format specifier (see pareg.cursor.ReadFmt).
- targets are anything pareg.readers.read() accepts: types, callables,
  Slot/Collect destinations and checkers.

Failure policy
- the first mismatching literal raises FORMAT_MISMATCH spanning the
  offending character; a failing placeholder raises what its reader raised.
- destinations written before the failure keep their values.
- parsef() also requires the whole input to be consumed, parsef_part()
  stops where the format ends.

Malformed formats and missing targets are programmer errors and raise
ValueError/TypeError before any input is read.
"""
import functools
from typing import NamedTuple

from .cursor import Cursor, ReadFmt
from .faults import ErrorKind
from .readers import read


class Placeholder(NamedTuple):
    name: str
    fmt: ReadFmt


@functools.cache
def compile_format(fmt, /):
    """split a format string into literal strings and placeholders (cached)."""
    if not isinstance(fmt, str):
        raise TypeError("parsef() format must be a string")
    pieces = []
    literal = []
    index = 0
    while index < len(fmt):
        char = fmt[index]
        if fmt.startswith(("{{", "}}"), index):
            literal.append(char)
            index += 2
        elif char == "{":
            end = fmt.find("}", index)
            if end < 0:
                raise ValueError(f"parsef() format {fmt!r} has an unclosed placeholder")
            name, _, spec = fmt[index + 1:end].partition(":")
            if literal:
                pieces.append("".join(literal))
                literal.clear()
            pieces.append(Placeholder(name.strip(), ReadFmt.parse(spec)))
            index = end + 1
        elif char == "}":
            raise ValueError(f"parsef() format {fmt!r} has an unmatched '}}'")
        else:
            literal.append(char)
            index += 1
    if literal:
        pieces.append("".join(literal))

    # a placeholder stops before the literal that follows it
    for position, piece in enumerate(pieces[:-1]):
        following = pieces[position + 1]
        if isinstance(piece, Placeholder) and isinstance(following, str):
            pieces[position] = piece._replace(fmt=piece.fmt._replace(stop=following))
    return tuple(pieces)


def _bind(pieces, targets, named):
    plan = []
    automatic = 0
    explicit = False
    for piece in pieces:
        if isinstance(piece, str):
            plan.append((piece, None))
            continue
        if not piece.name:
            position = automatic
            automatic += 1
        elif piece.name.isdigit():
            position = int(piece.name)
            explicit = True
        else:
            try:
                plan.append((piece, named[piece.name]))
            except KeyError:
                raise TypeError(f"parsef() missing target for placeholder {piece.name!r}") from None
            continue
        if position >= len(targets):
            raise TypeError(f"parsef() format needs at least {position + 1} positional targets")
        plan.append((piece, targets[position]))
    if not explicit and automatic < len(targets):
        raise TypeError(f"parsef() got {len(targets)} positional targets but the format has {automatic}")
    return plan


def _run(source, fmt, targets, named, part):
    cursor = source if isinstance(source, Cursor) else Cursor(source)
    plan = _bind(compile_format(fmt), targets, named)
    values = []
    for piece, target in plan:
        if target is None:
            cursor.expect(piece)
        else:
            values.append(read(cursor, target, piece.fmt))
    if not part and cursor.peek() is not None:
        raise cursor.err_span(
            ErrorKind.FORMAT_MISMATCH, "expected end of input", cursor.position, len(cursor.text)
        ).long_msg("the input continues after the end of the format.")
    return tuple(values)


def parsef(source, fmt, /, *targets, **named):
    """
    parse the whole `source` (a string, a stream or a Cursor) with `fmt`.

    returns the parsed values in placeholder order.
    """
    return _run(source, fmt, targets, named, part=False)


def parsef_part(source, fmt, /, *targets, **named):
    """like parsef(), but input left after the format is not an error."""
    return _run(source, fmt, targets, named, part=True)


__all__ = (
    "parsef",
    "parsef_part",
)
