import argparse
import asyncio
import sys
from typing import IO, List, Optional

from ..errors import UsageError
from ..run import run_scripts
from ..types import RunOptions
from . import ArgumentParser, execute

HELP = """Usage: run [OPTION]... [COMMAND]...

Runs given package script commands.

Commands may contain wildcards: '*' matches one segment of a colon separated
script name, '**' matches any number of segments.

Options:
  --parallel, -p      Run commands in parallel instead of sequentially.
  --silent, -s        Passes --silent option to NPM.
  --help              display this help and exit
  --version           output version information and exit"""


def make_parser() -> ArgumentParser:
    parser = ArgumentParser("run")
    parser.add_argument("-p", "--parallel", action="store_true")
    parser.add_argument("-s", "--silent", action="store_true")
    parser.add_argument("scripts", nargs="*")
    return parser


def _run(options: argparse.Namespace, stdout: IO, stderr: IO) -> None:
    if not options.scripts:
        raise UsageError("missing script name")
    run_options = RunOptions(parallel=options.parallel, silent=options.silent)
    asyncio.run(run_scripts(options.scripts, run_options, stdout=stdout, stderr=stderr))


def main(args: Optional[List[str]] = None, stdout: Optional[IO] = None, stderr: Optional[IO] = None) -> int:
    return execute(make_parser(), HELP, _run, args, stdout, stderr)


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
