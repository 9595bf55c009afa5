"""
Pareg typed readers.

Scope
- read(cursor, target, fmt): parse one value of `target` at the cursor.
- parse_arg(text, target, fmt): parse a whole string as `target`.
- Slot / Collect: destinations that remember what was read into them.
- Char, SocketAddrV4: value types without a builtin counterpart.

Target resolution (first match wins)
1. objects with a __read__(cursor, fmt) method: destinations and checkers.
2. classes with a __from_read__(cursor, fmt) classmethod.
3. enum.Enum subclasses: member names (aliases included) or values,
   case-insensitive; "-" and "_" are interchangeable in names.
4. classes registered with @reader(cls): int, float, bool, str, Char, Path,
   bytes, IPv4Address.
5. any other callable: the text up to the end of the window (or up to the
   literal that follows the placeholder) is passed to it, and ValueError or
   TypeError become parse failures.

Contract
- a reader consumes exactly the characters of the literal it recognises and
  leaves the cursor right after them.
- on failure the error span covers what was consumed; when nothing was
  consumed the span is empty at the failure position.
- numbers need at least one digit: an empty digit sequence never reads as 0.
"""
import enum
import functools
import os
from ipaddress import IPv4Address
from pathlib import Path
from typing import NamedTuple

from .cursor import Cursor, ReadFmt
from .faults import ArgError, ErrorKind
from .utils import Unset, coalesce, typename

_readers = {}

_DECIMAL = frozenset("0123456789")

_UNBOUNDED = ReadFmt()


def reader(target, /):
    """
    register the decorated function as the reader of `target`.

    the function receives (cursor, fmt) and returns the parsed value. the
    registration is exact: subclasses of `target` are not covered.
    """
    if not isinstance(target, type):
        raise TypeError("@reader() argument must be a type")

    def decorator(function):
        if not callable(function):
            raise TypeError("@reader() must be applied to a callable")
        _readers[target] = function
        return function

    return decorator


def resolve(target, /):
    """the read function (cursor, fmt) -> value used for `target`."""
    if not isinstance(target, type) and hasattr(target, "__read__"):
        return target.__read__
    if isinstance(target, type):
        if hasattr(target, "__from_read__"):
            return target.__from_read__
        if issubclass(target, enum.Enum):
            return functools.partial(_read_enum, target)
        if target in _readers:
            return _readers[target]
    if callable(target):
        return functools.partial(_read_callable, target)
    raise TypeError(f"cannot read values of {target!r}")


def read(cursor, target, fmt="", /):
    """
    parse one value of `target` at the cursor position.

    the fill trimming requested by `fmt` happens here, around the reader.
    """
    if not isinstance(cursor, Cursor):
        raise TypeError("read() first argument must be a cursor")
    fmt = ReadFmt.parse(fmt)
    function = resolve(target)
    if fmt.trims_left:
        cursor.skip_while(fmt.is_fill)
    value = function(cursor, fmt)
    if fmt.trims_right:
        cursor.skip_while(fmt.is_fill)
    return value


def parse_arg(text, target, fmt="", /, *, name="input"):
    """parse the whole of `text` as `target`; leftover characters are an error."""
    if not isinstance(text, str):
        raise TypeError("parse_arg() first argument must be a string")
    cursor = Cursor(text, name=name)
    value = read(cursor, target, fmt)
    if cursor.peek() is not None:
        raise cursor.err_span(
            ErrorKind.PARSE_FAILED, "unused input", cursor.position, len(text)
        ).long_msg(f"failed to parse `{typename(target)}`: unexpected trailing input.")
    return value


def _take(cursor, fmt, accept=None, /):
    """read characters while `accept` allows, within fmt's length and before its stop literal."""
    chars = []
    while fmt.fits(len(chars)) and (char := cursor.peek()) is not None:
        if accept is not None and not accept(char):
            break
        if fmt.stop and cursor.startswith(fmt.stop):
            break
        chars.append(cursor.next())
    return "".join(chars)


def _is_digit(base, char, /):
    return char.isascii() and char.isalnum() and int(char, 36) < base


def _is_word(char, /):
    return char.isalnum() or char in "-_"


class Char(str):
    """a single character."""

    def __new__(cls, value, /):
        if not isinstance(value, str) or len(value) != 1:
            raise ValueError("Char() argument must be a single character")
        return super().__new__(cls, value)


@reader(str)
def read_str(cursor, fmt, /):
    """
    text within fmt's length range.

    right trimming never shortens the value below the minimum length:
    "ab  " read with "^3..4" gives "ab ".
    """
    start = cursor.position
    text = _take(cursor, fmt)
    if len(text) < fmt.min:
        raise cursor.err_span(ErrorKind.PARSE_FAILED, f"expected at least {fmt.min} characters", start)
    if fmt.trims_right:
        while len(text) > fmt.min and fmt.is_fill(text[-1]):
            text = text[:-1]
    return text


@reader(Char)
def read_char(cursor, fmt, /):
    char = cursor.next()
    if char is None:
        raise cursor.err_parse_peek("expected a character")
    return Char(char)


@reader(int)
def read_int(cursor, fmt, /):
    start = cursor.position
    sign = cursor.next() if cursor.peek() in ("+", "-") else ""
    digits = _take(cursor, fmt, functools.partial(_is_digit, fmt.base))
    if not digits:
        raise cursor.err_span(ErrorKind.PARSE_FAILED, "expected at least one digit", start)
    if len(digits) < fmt.min:
        raise cursor.err_span(ErrorKind.PARSE_FAILED, f"expected at least {fmt.min} digits", start)
    return int(sign + digits, fmt.base)


def _stops(cursor, fmt, /):
    return bool(fmt.stop) and cursor.startswith(fmt.stop)


@reader(float)
def read_float(cursor, fmt, /):
    """
    a decimal number with optional fraction and exponent, or inf/nan.

    the fraction and the exponent are not read when the literal that follows
    the placeholder starts there: "1e2" read with "{}e{}" gives 1.0.
    """
    start = cursor.position
    sign = cursor.next() if cursor.peek() in ("+", "-") else ""
    whole = _take(cursor, _UNBOUNDED, _DECIMAL.__contains__)
    fraction = ""
    if not _stops(cursor, fmt) and cursor.is_next("."):
        fraction = "." + _take(cursor, _UNBOUNDED, _DECIMAL.__contains__)
    if not whole and len(fraction) < 2:
        if not fraction and (word := _take(cursor, _UNBOUNDED, str.isalpha)):
            if word.lower() in ("inf", "infinity", "nan"):
                return float(sign + word)
        raise cursor.err_span(ErrorKind.PARSE_FAILED, "expected a number", start)
    exponent = ""
    if (marker := cursor.peek()) in ("e", "E") and not _stops(cursor, fmt):
        cursor.next()
        power_sign = cursor.next() if cursor.peek() in ("+", "-") else ""
        power = _take(cursor, _UNBOUNDED, _DECIMAL.__contains__)
        if power:
            exponent = marker + power_sign + power
        else:
            cursor.prepend(marker + power_sign)
    return float(sign + whole + fraction + exponent)


@reader(bool)
def read_bool(cursor, fmt, /):
    start = cursor.position
    word = _take(cursor, fmt, str.isalpha)
    match word.lower():
        case "true":
            return True
        case "false":
            return False
    raise cursor.err_span(ErrorKind.PARSE_FAILED, "expected `true` or `false`", start)


@reader(Path)
def read_path(cursor, fmt, /):
    start = cursor.position
    text = read_str(cursor, fmt)
    if not text:
        raise cursor.err_span(ErrorKind.PARSE_FAILED, "expected a path", start)
    return Path(text)


@reader(bytes)
def read_bytes(cursor, fmt, /):
    return os.fsencode(read_str(cursor, fmt))


@reader(IPv4Address)
def read_ipv4(cursor, fmt, /):
    from .checks import InRange

    octet = InRange(int, range(256))
    octets = []
    for index in range(4):
        if index and not cursor.is_next("."):
            raise cursor.err_span(
                ErrorKind.PARSE_FAILED, "expected `.` between octets", cursor.position, cursor.position + 1
            )
        octets.append(octet.__read__(cursor, ReadFmt.parse("1..3")))
    return IPv4Address(bytes(octets))


class SocketAddrV4(NamedTuple):
    ip: IPv4Address
    port: int

    @classmethod
    def __from_read__(cls, cursor, fmt, /):
        from .checks import InRange

        ip = read_ipv4(cursor, fmt)
        if not cursor.is_next(":"):
            raise cursor.err_span(
                ErrorKind.PARSE_FAILED, "expected `:` before the port", cursor.position, cursor.position + 1
            )
        port = InRange(int, range(65536)).__read__(cursor, ReadFmt.parse("1..5"))
        return cls(ip, port)

    def __str__(self):
        return f"{self.ip}:{self.port}"


def _read_enum(target, cursor, fmt, /):
    start = cursor.position
    word = _take(cursor, fmt, _is_word)
    folded = word.casefold()
    for name, member in target.__members__.items():
        if name.casefold() == folded.replace("-", "_") or str(member.value).casefold() == folded:
            return member
    names = ", ".join(name.lower() for name in target.__members__)
    error = cursor.err_span(ErrorKind.PARSE_FAILED, f"unknown {typename(target)} `{word}`", start)
    raise error.hint(f"expected one of: {names}")


def _read_callable(target, cursor, fmt, /):
    start = cursor.position
    text = _take(cursor, fmt)
    try:
        return target(text)
    except ArgError as error:
        raise cursor.map_err(error, start) from None
    except (ValueError, TypeError) as exception:
        error = cursor.err_span(ErrorKind.PARSE_FAILED, f"failed to parse `{typename(target)}`", start)
        raise error.long_msg(str(exception) or None) from exception


class Slot[_T]:
    """
    a single-value destination.

    reading into a slot stores the value (and returns it); a slot that was
    never written reports is_set == False and get() falls back to its default.
    """
    __slots__ = ("target", "value", "default")

    def __init__(self, target=str, /, *, default=Unset):
        resolve(target)
        self.target = target
        self.value = Unset
        self.default = default

    @property
    def is_set(self):
        return self.value is not Unset

    def get(self, default=Unset, /):
        return coalesce(self.value, coalesce(default, coalesce(self.default)))

    def set(self, value, /):
        self.value = value

    def clear(self):
        self.value = Unset

    def __read__(self, cursor, fmt, /):
        value = resolve(self.target)(cursor, fmt)
        self.value = value
        return value

    def __repr__(self):
        return f"Slot({typename(self.target)}, value={self.value!r})"


class Collect[_T]:
    """an aggregate destination: every read appends one value."""
    __slots__ = ("target", "values")

    def __init__(self, target=str, /):
        resolve(target)
        self.target = target
        self.values = []

    def __read__(self, cursor, fmt, /):
        value = resolve(self.target)(cursor, fmt)
        self.values.append(value)
        return value

    def __iter__(self):
        return iter(self.values)

    def __len__(self):
        return len(self.values)

    def __repr__(self):
        return f"Collect({typename(self.target)}, values={self.values!r})"


__all__ = (
    "reader",
    "resolve",
    "read",
    "parse_arg",
    "Char",
    "SocketAddrV4",
    "Slot",
    "Collect",
)
