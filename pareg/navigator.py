"""
Pareg argument navigator.

Overview
- Pareg owns a tuple copy of the tokens (conventionally sys.argv[1:]).
- ParegRef navigates a sequence it does not copy. Views obtained from a
  Pareg either share its position (get_mut_ref) or start from a copy of it
  (get_ref); detach() turns a sharing view into an independent one.

Position model
- the navigator counts consumed tokens. The current token is the last one
  consumed; before the first next() there is no current token.
- next() consumes one token, jump(i) makes tokens[i] current, reset() goes
  back to the initial state.
- a `limit` caps how many tokens may be consumed by next()/skip(); going
  past it is a TOO_MANY_ARGUMENTS error. skip_all() and jump() are exempt.

Errors
- input-dependent failures raise ArgError with the whole token sequence
  attached, so the rendered diagnostic shows the command line.
- asking for the current token before any was consumed (cur_arg and the
  other cur_* parsers) and jumping outside the tokens are caller bugs and
  raise IndexError.

Quick example
    >>> args = Pareg(["--count", "3", "file.txt"])
    >>> for arg in args:
    ...     match arg:
    ...         case "--count":
    ...             count = args.next_arg(int)
    ...         case _:
    ...             path = args.cur_arg(Path)
"""
import logging
import sys
from collections.abc import Sequence

from . import parsers
from .faults import ArgError, ErrorContext, ErrorKind, Span
from .readers import parse_arg
from .utils import Unset, rename

logger = logging.getLogger(__name__)


class _State:
    __slots__ = ("consumed",)

    def __init__(self, consumed=0):
        self.consumed = consumed


def _twins(parser, name, /):
    """build the next_<name>/cur_<name> methods running `parser` on a token."""

    def next_twin(self, /, *args, **kwargs):
        return self.next_manual(lambda arg: parser(arg, *args, **kwargs))

    def cur_twin(self, /, *args, **kwargs):
        return self.cur_manual(lambda arg: parser(arg, *args, **kwargs))

    next_twin.__doc__ = f"advance, then parse the new current token with {parser.__name__}()."
    cur_twin.__doc__ = f"parse the current token with {parser.__name__}()."
    return rename(next_twin, f"next_{name}"), rename(cur_twin, f"cur_{name}")


class ParegRef:
    """
    navigation and parsing over a sequence of string tokens.

    the tokens are not copied: the sequence must not change while the
    navigator is in use.
    """

    def __init__(self, tokens, /, *, limit=Unset):
        if isinstance(tokens, str) or not isinstance(tokens, Sequence):
            raise TypeError(f"{type(self).__name__}() argument must be a sequence of strings")
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError(f"{type(self).__name__}() argument must contain only strings")
        if limit is not Unset and (not isinstance(limit, int) or limit < 0):
            raise ValueError(f"{type(self).__name__}() 'limit' must be a non-negative integer")
        self._tokens = tokens
        self._limit = limit
        self._state = self._origin = _State()

    def __repr__(self):
        return f"{type(self).__name__}({list(self._tokens)!r}, current={self.cur_idx()})"

    @property
    def limit(self):
        return self._limit

    # --- references ---

    def _view(self, state):
        view = ParegRef(self._tokens, limit=self._limit)
        view._state = view._origin = state
        return view

    def get_mut_ref(self):
        """a view sharing this navigator's position."""
        return self._view(self._state)

    def get_ref(self):
        """a view starting at this navigator's position, moving independently."""
        view = self._view(self._state)
        view.detach()
        return view

    def detach(self):
        """stop sharing the position with the navigator this view came from."""
        self._state = _State(self._state.consumed)
        logger.debug("detached %r at token %d", self, self._state.consumed)
        return self

    def mutates_original(self):
        """whether moving this navigator also moves the one it was taken from."""
        return self._state is self._origin

    # --- inspection ---

    def all_args(self):
        return tuple(self._tokens)

    def peek(self):
        """the next token, without consuming it (None at the end)."""
        consumed = self._state.consumed
        return self._tokens[consumed] if consumed < len(self._tokens) else None

    def get(self, index, /):
        """tokens[index], None when out of range."""
        return self._tokens[index] if 0 <= index < len(self._tokens) else None

    def cur(self):
        """the current token (None before the first next())."""
        consumed = self._state.consumed
        return self._tokens[consumed - 1] if consumed else None

    def next_idx(self):
        consumed = self._state.consumed
        return consumed if consumed < len(self._tokens) else None

    def cur_idx(self):
        consumed = self._state.consumed
        return consumed - 1 if consumed else None

    def remaining(self):
        """tokens after the current one."""
        return tuple(self._tokens[self._state.consumed:])

    def cur_remaining(self):
        """the current token and the ones after it."""
        return tuple(self._tokens[max(self._state.consumed - 1, 0):])

    # --- navigation ---

    def _advance(self, count):
        target = min(self._state.consumed + count, len(self._tokens))
        if self._limit is not Unset and target > self._limit:
            logger.debug("token limit %d reached at %r", self._limit, self._tokens[self._limit])
            context = ErrorContext(
                ErrorKind.TOO_MANY_ARGUMENTS,
                args=self._tokens,
                index=self._limit,
                span=Span(f"arg{self._limit}", 0, len(self._tokens[self._limit])),
                inline="unexpected argument.",
                long=f"too many arguments: at most {self._limit} are accepted.",
            )
            raise ArgError(context)
        self._state.consumed = target

    def next(self):
        """consume and return the next token (None at the end)."""
        if self._state.consumed >= len(self._tokens):
            return None
        self._advance(1)
        return self.cur()

    def __iter__(self):
        return self

    def __next__(self):
        token = self.next()
        if token is None:
            raise StopIteration
        return token

    def skip(self, count=1, /):
        """consume up to `count` tokens and return the new current token."""
        if not isinstance(count, int) or count < 0:
            raise ValueError("skip() argument must be a non-negative integer")
        self._advance(count)
        return self.cur()

    def skip_all(self):
        """consume every token; the last one becomes current."""
        self._state.consumed = len(self._tokens)
        return self.cur()

    def jump(self, index, /):
        """make tokens[index] the current token."""
        if not isinstance(index, int):
            raise TypeError("jump() argument must be an integer")
        if not 0 <= index < len(self._tokens):
            raise IndexError(f"jump() index {index} out of range for {len(self._tokens)} arguments")
        logger.debug("jump to token %d", index)
        self._state.consumed = index + 1
        return self._tokens[index]

    def reset(self):
        """go back to the state right after construction."""
        logger.debug("reset after %d tokens", self._state.consumed)
        self._state.consumed = 0

    # --- parsing ---

    def _current(self):
        consumed = self._state.consumed
        if not consumed:
            raise IndexError("no current argument: next() was never called")
        return consumed - 1

    def map_err(self, error, /):
        """attach the tokens to `error`, anchored at the current token."""
        if not isinstance(error, ArgError):
            raise TypeError("map_err() argument must be an argument error")
        index = self.cur_idx()
        if index is None:
            return error
        return error.add_args(self._tokens, index)

    def cur_manual(self, function, /):
        """run `function` on the current token; its ArgErrors get the tokens attached."""
        index = self._current()
        try:
            return function(self._tokens[index])
        except ArgError as error:
            raise error.add_args(self._tokens, index) from None

    def next_manual(self, function, /):
        if self.next() is None:
            raise self.err_no_more_arguments()
        return self.cur_manual(function)

    def cur_arg(self, target=str, fmt="", /):
        """parse the whole current token as `target`."""
        return self.cur_manual(lambda arg: parse_arg(arg, target, fmt))

    def next_arg(self, target=str, fmt="", /):
        """advance, then parse the new current token as `target`."""
        return self.next_manual(lambda arg: parse_arg(arg, target, fmt))

    def all_arg(self, target=str, fmt="", /):
        """parse every remaining token, stopping at the first failure."""
        return [self.next_arg(target, fmt) for _ in range(len(self.remaining()))]

    def cur_val_or_next(self, target=str, /, sep="="):
        """
        the value of `--opt=value` or of `--opt value`.

        the value after `sep` in the current token is used when present;
        otherwise the next token is consumed and parsed.
        """
        index = self._current()
        head, found, tail = self._tokens[index].partition(sep)
        if not found:
            return self.next_arg(target)
        return self.cur_manual(lambda arg: parsers.val_arg(arg, target, sep))

    def try_set_cur_with(self, slot, function, /):
        return self.cur_manual(lambda arg: parsers.try_set_arg_with(slot, arg, function))

    def try_set_next_with(self, slot, function, /):
        return self.next_manual(lambda arg: parsers.try_set_arg_with(slot, arg, function))

    def try_set_cur(self, slot, target=Unset, /):
        return self.cur_manual(lambda arg: parsers.try_set_arg(slot, arg, target))

    def try_set_next(self, slot, target=Unset, /):
        return self.next_manual(lambda arg: parsers.try_set_arg(slot, arg, target))

    def split_arg(self, target=str, /, sep=","):
        """lazily split the current token on `sep` and parse every piece."""
        index = self._current()
        return self._anchored(parsers.split_arg(self._tokens[index], target, sep), index)

    def arg_list(self, target=str, /, sep=","):
        """lazily parse `sep`-separated values from the current token."""
        index = self._current()
        return self._anchored(parsers.arg_list(self._tokens[index], target, sep), index)

    def _anchored(self, values, index):
        try:
            yield from values
        except ArgError as error:
            raise error.add_args(self._tokens, index) from None

    next_key_mval, cur_key_mval = _twins(parsers.key_mval_arg, "key_mval")
    next_key_val, cur_key_val = _twins(parsers.key_val_arg, "key_val")
    next_key, cur_key = _twins(parsers.key_arg, "key")
    next_val, cur_val = _twins(parsers.val_arg, "val")
    next_mval, cur_mval = _twins(parsers.mval_arg, "mval")
    next_bool, cur_bool = _twins(parsers.bool_arg, "bool")
    next_opt_bool, cur_opt_bool = _twins(parsers.opt_bool_arg, "opt_bool")

    # --- errors ---

    def _error(self, kind, index, start, end, inline, long=None):
        return ArgError(ErrorContext(
            kind,
            args=self._tokens,
            index=index,
            span=Span(f"arg{index}", start, end),
            inline=inline,
            long=long,
        ))

    def err_unknown_argument(self):
        index = self._current()
        token = self._tokens[index]
        return self._error(
            ErrorKind.UNKNOWN_ARGUMENT, index, 0, len(token), "unknown argument.", f"unknown argument `{token}`."
        )

    def err_no_more_arguments(self):
        """expected another token after the last one."""
        if not self._tokens:
            return ArgError(ErrorContext(ErrorKind.NO_MORE_ARGUMENTS, long="expected another argument."))
        index = len(self._tokens) - 1
        end = len(self._tokens[index])
        return self._error(
            ErrorKind.NO_MORE_ARGUMENTS, index, end, end, "expected another argument.", "no more arguments."
        )

    def err_invalid(self):
        index = self._current()
        return self._error(ErrorKind.INVALID_VALUE, index, 0, len(self._tokens[index]), "invalid value.")

    def err_invalid_span(self, start, end, /):
        """invalid value at token[start:end]; a span outside the token covers all of it."""
        index = self._current()
        length = len(self._tokens[index])
        if not 0 <= start <= end <= length:
            start, end = 0, length
        return self._error(ErrorKind.INVALID_VALUE, index, start, end, "invalid value.")

    def err_invalid_value(self, value, /):
        """invalid value pointing at `value` inside the current token."""
        index = self._current()
        token = self._tokens[index]
        start = token.find(value)
        if start < 0:
            start, end = 0, len(token)
        else:
            end = start + len(value)
        return self._error(ErrorKind.INVALID_VALUE, index, start, end, f"invalid value `{value}`.")


class Pareg(ParegRef):
    """
    navigator owning a copy of its tokens.

    the copy makes it safe to keep using the navigator (and its views)
    whatever happens to the iterable it was built from.
    """

    def __init__(self, tokens=(), /, *, limit=Unset):
        if isinstance(tokens, str):
            raise TypeError("Pareg() argument must be an iterable of strings")
        super().__init__(tuple(tokens), limit=limit)

    @classmethod
    def from_argv(cls, *, limit=Unset):
        """the process arguments without the program name."""
        return cls(sys.argv[1:], limit=limit)


__all__ = (
    "ParegRef",
    "Pareg",
)
