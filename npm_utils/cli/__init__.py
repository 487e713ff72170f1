"""Shared command line handling of the npm_utils commands."""

import argparse
import sys
from typing import IO, Callable, List, Optional

from .. import __author__, __version__
from ..errors import NpmUtilsError, UsageError
from ..log import setup_logging


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser which raises UsageError instead of exiting."""

    def __init__(self, prog: str):
        super().__init__(prog=prog, add_help=False, allow_abbrev=False)
        self.add_argument("--help", action="store_true")
        self.add_argument("--version", action="store_true")

    def error(self, message):
        raise UsageError(message)


def version_text(prog: str) -> str:
    return f"{prog} {__version__}\n\nWritten by {__author__}"


def execute(
    parser: ArgumentParser,
    help_text: str,
    action: Callable[[argparse.Namespace, IO, IO], None],
    args: Optional[List[str]] = None,
    stdout: Optional[IO] = None,
    stderr: Optional[IO] = None,
) -> int:
    """Parse arguments and run the action, mapping the outcome to an exit code.

    Returns:
        0 on success, 1 on failure, 2 on invalid usage
    """
    prog = parser.prog
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr
    if args is None:
        args = sys.argv[1:]

    setup_logging()
    try:
        options = parser.parse_intermixed_args(args)
        if options.help:
            print(help_text, file=stdout)
            return 0
        if options.version:
            print(version_text(prog), file=stdout)
            return 0
        action(options, stdout, stderr)
        return 0
    except UsageError as e:
        print(f"{prog}: {e}\nTry '{prog} --help' for more information.", file=stderr)
        return 2
    except (NpmUtilsError, OSError) as e:
        print(f"{prog}: {e}", file=stderr)
        return 1
