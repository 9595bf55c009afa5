"""
Pareg convenience parsers for common argument shapes.

Every helper takes the argument text first and reports failures with spans
into that whole text, so `--size=abc` underlines `abc` and not `--size=`.

    >>> key_val_arg("--size=30", str, int)
    ('--size', 30)
    >>> bool_arg("on", "on", "off")
    True
    >>> list(split_arg("1,2,3", int))
    [1, 2, 3]
"""
from .cursor import Cursor, ReadFmt
from .faults import ArgError, ErrorContext, ErrorKind, Span
from .readers import Slot, parse_arg, read
from .utils import Unset, coalesce


def _value(text, offset, arg, target):
    try:
        return parse_arg(text, target)
    except ArgError as error:
        raise error.shift_span(offset, arg) from None


def _no_value(arg, sep):
    return ArgError(ErrorContext(
        ErrorKind.NO_VALUE,
        args=(arg,),
        span=Span("input", 0, len(arg)),
        inline=f"missing separator `{sep}`.",
        long=f"missing separator `{sep}` for key value pair.",
        hint=f"use the separator `{sep}` to split the argument into key and value.",
    ))


def key_mval_arg(arg, key=str, value=str, /, sep="="):
    """`key[=value]`: the value is None when the separator is missing."""
    head, found, tail = arg.partition(sep)
    if not found:
        return _value(arg, 0, arg, key), None
    return _value(head, 0, arg, key), _value(tail, len(head) + len(sep), arg, value)


def key_val_arg(arg, key=str, value=str, /, sep="="):
    """`key=value`: a missing separator is a NO_VALUE error."""
    head, found, tail = arg.partition(sep)
    if not found:
        raise _no_value(arg, sep)
    return _value(head, 0, arg, key), _value(tail, len(head) + len(sep), arg, value)


def key_arg(arg, target=str, /, sep="="):
    """the part before the separator (the whole argument without one)."""
    return _value(arg.partition(sep)[0], 0, arg, target)


def val_arg(arg, target=str, /, sep="="):
    """the part after the separator; a missing separator is a NO_VALUE error."""
    head, found, tail = arg.partition(sep)
    if not found:
        raise _no_value(arg, sep)
    return _value(tail, len(head) + len(sep), arg, target)


def mval_arg(arg, target=str, /, sep="="):
    """the part after the separator, None without one."""
    head, found, tail = arg.partition(sep)
    if not found:
        return None
    return _value(tail, len(head) + len(sep), arg, target)


def bool_arg(arg, true, false, /):
    """True for the word `true`, False for `false`, an error otherwise."""
    if arg == true:
        return True
    if arg == false:
        return False
    error = ArgError.parse_msg("invalid value.", arg).long_msg(f"invalid value `{arg}`.")
    raise error.hint(f"expected `{true}` or `{false}`.")


def opt_bool_arg(arg, true, false, none, /):
    """like bool_arg(), with a third word that means None."""
    if arg == none:
        return None
    if arg in (true, false):
        return arg == true
    error = ArgError.parse_msg("invalid value.", arg).long_msg(f"invalid value `{arg}`.")
    raise error.hint(f"expected `{true}`, `{false}` or `{none}`.")


def try_set_arg_with(slot, arg, function, /):
    """
    parse `arg` with `function` into an unset slot.

    a slot that already holds a value is a TOO_MANY_ARGUMENTS error; on a
    parse failure the slot is left untouched.
    """
    if not isinstance(slot, Slot):
        raise TypeError("try_set_arg_with() first argument must be a slot")
    if slot.is_set:
        raise ArgError.too_many_arguments("argument sets value that can be set only once.", arg)
    value = function(arg)
    slot.set(value)
    return value


def try_set_arg(slot, arg, target=Unset, /):
    """try_set_arg_with() parsing `arg` as `target` (the slot's own target by default)."""
    target = coalesce(target, getattr(slot, "target", str))
    return try_set_arg_with(slot, arg, lambda text: parse_arg(text, target))


def split_arg(arg, target=str, /, sep=","):
    """
    split first, then parse every piece.

    values are produced lazily; a failing piece is reported with its span
    in the whole argument.
    """
    if not sep:
        raise ValueError("split_arg() separator cannot be empty")
    offset = 0
    for piece in arg.split(sep):
        yield _value(piece, offset, arg, target)
        offset += len(piece) + len(sep)


def arg_list(arg, target=str, /, sep=","):
    """
    parse first, then expect the separator.

    unlike split_arg(), values may contain the separator when their reader
    knows where they end (e.g. "(1,2),(3,4)" read as pairs).
    """
    if not sep:
        raise ValueError("arg_list() separator cannot be empty")
    cursor = Cursor(arg)
    fmt = ReadFmt(stop=sep)
    while True:
        yield read(cursor, target, fmt)
        if cursor.peek() is None:
            return
        cursor.expect(sep)


def starts_any(arg, /, *prefixes):
    """whether `arg` starts with any of the prefixes."""
    return arg.startswith(prefixes) if prefixes else False


def has_any_key(arg, sep, /, *keys):
    """whether `arg` is one of the keys, or one of them followed by `sep`."""
    for key in keys:
        if arg.startswith(key) and (len(arg) == len(key) or arg.startswith(sep, len(key))):
            return True
    return False


__all__ = (
    "key_mval_arg",
    "key_val_arg",
    "key_arg",
    "val_arg",
    "mval_arg",
    "bool_arg",
    "opt_bool_arg",
    "try_set_arg_with",
    "try_set_arg",
    "split_arg",
    "arg_list",
    "starts_any",
    "has_any_key",
)
