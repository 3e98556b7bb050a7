"""Command-line entry point for the DHCP server."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Iterator, Sequence

from .server import DEFAULT_HOST, echo_server, echo_server_thread

_USAGE = "usage: dhcpserv [-d] [-p port] [-s timeout | -t timeout]"
_TAKES_ARGUMENT = frozenset("stp")
_KNOWN = frozenset("dhstp")


@dataclass
class CliOptions:
    """Settings gathered from the command line.

    ``complete`` is False when parsing stopped early at an unknown option,
    at ``-h`` or at an option missing its argument; the flags seen before
    that point are kept.
    """

    debug: bool = False
    serve: bool = False
    threaded: bool = False
    timeout: int = 0
    port: int = 0
    complete: bool = True
    error: str = ""


def _leading_int(text: str) -> int:
    """Read a leading base-10 integer the way strtol does; 0 if none."""
    stripped = text.lstrip()
    sign = 1
    if stripped[:1] in ("+", "-"):
        sign = -1 if stripped[0] == "-" else 1
        stripped = stripped[1:]
    digits = []
    for char in stripped:
        if not char.isdigit():
            break
        digits.append(char)
    return sign * int("".join(digits)) if digits else 0


def _apply(options: CliOptions, flag: str, value: str | None) -> None:
    if flag == "d":
        options.debug = True
    elif flag == "s":
        options.serve = True
        options.timeout = _leading_int(value or "")
    elif flag == "t":
        options.threaded = True
        options.serve = True
        options.timeout = _leading_int(value or "")
    elif flag == "p":
        options.port = _leading_int(value or "")


def _stop(options: CliOptions, message: str) -> CliOptions:
    options.complete = False
    options.error = message
    return options


def parse_args(argv: Sequence[str] | None = None) -> CliOptions:
    """Parse short options in the style of getopt."""
    args: Iterator[str] = iter(sys.argv[1:] if argv is None else argv)
    options = CliOptions()
    for arg in args:
        if arg == "--" or arg == "-" or not arg.startswith("-"):
            break
        cluster = arg[1:]
        for position, flag in enumerate(cluster):
            if flag not in _KNOWN:
                return _stop(options, f"invalid option -- '{flag}'")
            if flag == "h":
                return _stop(options, _USAGE)
            if flag in _TAKES_ARGUMENT:
                rest = cluster[position + 1:]
                value = rest if rest else next(args, None)
                if value is None:
                    return _stop(
                        options, f"option requires an argument -- '{flag}'"
                    )
                _apply(options, flag, value)
                break
            _apply(options, flag, None)
    return options


def main(argv: Sequence[str] | None = None) -> int:
    """Run the server as the command line asks; returns the exit status."""
    options = parse_args(argv)
    if not options.complete:
        print(options.error, file=sys.stderr)
    if options.debug:
        print("Shutting down", file=sys.stderr)

    if options.serve and not options.threaded:
        echo_server(options.timeout, options.port, DEFAULT_HOST)
    if options.serve and options.threaded:
        echo_server_thread(options.timeout, options.port, DEFAULT_HOST)
    return 0


if __name__ == "__main__":
    sys.exit(main())