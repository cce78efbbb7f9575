# SPDX-FileCopyrightText: 2020 Gabriel Lisaca <gabriel.lisaca@gmail.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Common functions and classes for command-line programs.

Also includes a parser from `argparse` to base command-line programs on.
"""
from __future__ import annotations

import argparse
import logging
import sys
from functools import wraps
from os import EX_USAGE
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    List,
    Optional,
    Tuple,
    TypeVar,
    cast,
)

from ytcompile._package import __version__

if TYPE_CHECKING:
    from typing_extensions import Final

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound="ExecContext")


class ExecContext(argparse.Namespace):
    """Parsed command-line state shared by every program."""

    def __init__(self) -> None:
        super().__init__()
        self.verbose: int = 0
        self.quiet: int = 0


BASE_PARSER: Final = argparse.ArgumentParser(add_help=False)
BASE_PARSER.add_argument(
    "--version",
    action="version",
    version=f"%(prog)s (ytcompile) {__version__}",
)
BASE_PARSER.add_argument(
    "--verbose", "-v", action="count", default=0, help="show more output"
)
BASE_PARSER.add_argument(
    "--quiet", "-q", action="count", default=0, help="show less output"
)


def wrap_parser(func: F) -> F:
    """Turn any exception from `func` into `argparse.ArgumentTypeError`.

    Use it on `type=` callables so that `argparse` reports the message.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            ret = func(*args, **kwargs)
        except Exception as e:
            raise argparse.ArgumentTypeError(str(e)) from None
        return ret

    return cast(F, wrapper)


def get_logger(name: str) -> logging.Logger:
    """Return a properly configured logger."""
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    # Allow calling the `main()` function multiple times per process.
    if logger.hasHandlers():
        return logger

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter("{name}: {message}", style="{"))

    logger.addHandler(handler)
    return logger


def clamp(n: int, low: int, high: int) -> int:
    """Return a value between `low` and `high` (inclusive) based on `n`."""
    if low >= high:
        raise ValueError("`low` must be lower than `high`")
    return max(low, min(n, high))


def set_logger_verbosity(
    log: logging.Logger, quieter: int, louder: int
) -> None:
    """Set the appropriate logging level from -q and -v counts."""
    # The effective level is reset everytime `main()` is called.
    curr_level = log.getEffectiveLevel()
    curr_level += quieter * 10
    curr_level -= louder * 10
    log.setLevel(clamp(curr_level, low=logging.DEBUG, high=logging.CRITICAL))


def setup_cli(
    progname: str,
    argv: Optional[List[str]],
    parser: argparse.ArgumentParser,
    ctx: C,
) -> Tuple[C, logging.Logger]:
    """Set up logging and parse args, also returning the context object (along with the logger) for convenience."""
    log = get_logger(progname)
    try:
        parser.parse_args(argv, namespace=ctx)
    except SystemExit as e:
        # `--help` and `--version` exit successfully.
        if not e.code:
            raise
        # Override exit code (it would have been 2).
        sys.exit(EX_USAGE)
    except Exception as e:
        log.critical(f"{e}")
        sys.exit(EX_USAGE)
    set_logger_verbosity(log, quieter=ctx.quiet, louder=ctx.verbose)
    return (ctx, log)


_MainFunc = Callable[[Optional[List[str]]], int]


def convert_system_exit_to_return(main_func: _MainFunc) -> _MainFunc:
    """Return the exit status of `sys.exit()` calls instead of raising."""
    # This helps with testing.
    @wraps(main_func)
    def wrapper(argv: Optional[List[str]] = None) -> int:
        try:
            exit_status = main_func(argv)
        except SystemExit as e:
            exit_status = e.code
        return exit_status

    return wrapper
