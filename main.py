from ipaddress import IPv4Address
from pathlib import Path

from rich.pretty import pprint

from pareg import *

__color__ = ColorMode.AUTO


def parse(args):
    options = {"count": Slot(int, default=1), "color": ColorMode.AUTO, "bind": None, "files": []}
    for arg in args:
        match arg:
            case "--count" | "-n":
                args.try_set_next(options["count"], InRange(int, range(1, 100)))
            case _ if has_any_key(arg, "=", "--color"):
                options["color"] = args.cur_val_or_next(ColorMode)
            case "--bind":
                options["bind"] = args.next_manual(lambda text: parsef(text, "{}:{}", IPv4Address, int))
            case "--":
                options["files"] += args.all_arg(Path)
            case _ if starts_any(arg, "-"):
                raise args.err_unknown_argument()
            case _:
                options["files"].append(args.cur_arg(Path))
    options["count"] = options["count"].get()
    return options


if __name__ == '__main__':
    try:
        pprint(parse(Pareg.from_argv()))
    except ArgError as error:
        trigger(error)
