"""
Pareg checkers: validate a value right after it was read.

A checker wraps any read target (a type, a Slot, another checker) and is a
target itself, so it composes with read(), parse_arg(), parsef() and the
navigator:

    >>> parse_arg("80", InRange(int, range(1, 65536)))
    80
    >>> parsef("10/33", "{}/{}", int, InRange(int, range(33)))
    Traceback (most recent call last):
    ...
    pareg.faults.InvalidValueError: ...

Wrapped destinations are written before the check runs, so a Slot keeps the
rejected value. Failures are INVALID_VALUE errors spanning the value text.
"""
from typing import NamedTuple

from .faults import ArgError, ErrorKind
from .readers import resolve
from .utils import Unset, typename


class Bounds(NamedTuple):
    """
    value bounds; None leaves a side open.

    the upper bound is exclusive unless `inclusive` is set.
    """
    start: object = None
    end: object = None
    inclusive: bool = False

    @classmethod
    def of(cls, bounds, /):
        if isinstance(bounds, cls):
            return bounds
        if isinstance(bounds, range):
            if bounds.step != 1:
                raise ValueError("InRange() range must have a step of 1")
            return cls(bounds.start, bounds.stop)
        if isinstance(bounds, tuple) and len(bounds) == 2:
            return cls(*bounds)
        raise TypeError("InRange() bounds must be a range, a pair or bounds")

    def __contains__(self, value):
        if self.start is not None and value < self.start:
            return False
        if self.end is None:
            return True
        return value <= self.end if self.inclusive else value < self.end

    def describe(self):
        match self.start is None, self.end is None:
            case False, False if self.inclusive:
                return f"in inclusive range from `{self.start}` to `{self.end}`"
            case False, False:
                return f"in range from `{self.start}` to `{self.end}`"
            case False, True:
                return f"larger or equal to `{self.start}`"
            case True, False if self.inclusive:
                return f"smaller or equal to `{self.end}`"
            case True, False:
                return f"smaller than `{self.end}`"
        return "unbounded"


class InRange[_T]:
    """reject values outside `bounds` (a range, a (start, end) pair or Bounds)."""
    __slots__ = ("target", "bounds")

    def __init__(self, target, bounds, /):
        resolve(target)
        self.target = target
        self.bounds = Bounds.of(bounds)

    def __read__(self, cursor, fmt, /):
        start = cursor.position
        value = resolve(self.target)(cursor, fmt)
        if value not in self.bounds:
            requirement = self.bounds.describe()
            error = cursor.err_span(ErrorKind.INVALID_VALUE, f"value must be {requirement}.", start)
            raise error.long_msg(f"invalid value `{value}`. value must be {requirement}.")
        return value

    def __repr__(self):
        return f"InRange({typename(self.target)}, {self.bounds!r})"


class CheckRef[_T]:
    """
    validate the value with a predicate.

    a falsy result is an INVALID_VALUE error (with `message` inline when
    given); the predicate may also raise ArgError itself, in which case the
    error is re-anchored on the value text.
    """
    __slots__ = ("target", "predicate", "message")

    def __init__(self, target, predicate, /, message=Unset):
        resolve(target)
        if not callable(predicate):
            raise TypeError("CheckRef() second argument must be callable")
        self.target = target
        self.predicate = predicate
        self.message = message

    def __read__(self, cursor, fmt, /):
        start = cursor.position
        value = resolve(self.target)(cursor, fmt)
        try:
            accepted = self.predicate(value)
        except ArgError as error:
            context = error.context
            raise cursor.err_span(context.kind, context.inline, start).map_ctx(
                lambda replaced: replaced.__replace__(long=context.long, hint=context.hint, cell=context._cell)
            ) from None
        if not accepted:
            message = self.message if self.message is not Unset else f"invalid value `{value}`"
            raise cursor.err_span(ErrorKind.INVALID_VALUE, message, start)
        return value

    def __repr__(self):
        return f"CheckRef({typename(self.target)}, {self.predicate!r})"


__all__ = (
    "Bounds",
    "InRange",
    "CheckRef",
)
