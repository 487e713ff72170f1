import argparse
import sys
from typing import IO, List, Optional

from ..errors import UsageError
from ..lib.files import copy
from . import ArgumentParser, execute

HELP = """Usage: cp [OPTION]... [SOURCE]... DEST

Copies files and directories.

Options:
  --cwd <dir>         working directory for relative source paths (default: current directory)
  --exclude <path>    exclude pattern (repeatable)
  --include <path>    include pattern (repeatable)
  --dereference, -L   always follow symbolic links in SOURCE
  --force, -f         overwrite existing files
  --recursive, -r     copy directories and their contents
  --parents           use full source file name under target directory
  --help              display this help and exit
  --version           output version information and exit"""


def make_parser() -> ArgumentParser:
    parser = ArgumentParser("cp")
    parser.add_argument("--cwd")
    parser.add_argument("--exclude", action="append", default=[])
    parser.add_argument("--include", action="append", default=[])
    parser.add_argument("-L", "--dereference", action="store_true")
    parser.add_argument("-f", "--force", action="store_true")
    parser.add_argument("-r", "-R", "--recursive", action="store_true")
    parser.add_argument("--parents", action="store_true")
    parser.add_argument("paths", nargs="*")
    return parser


def _copy(options: argparse.Namespace, stdout: IO, stderr: IO) -> None:
    sources = list(options.paths)
    if not sources:
        raise UsageError("missing destination file operand")
    destination = sources.pop()
    if not sources:
        raise UsageError("missing source file operand")
    copy(
        sources,
        destination,
        cwd=options.cwd,
        parents=options.parents,
        include=options.include,
        exclude=options.exclude,
        force=options.force,
        recursive=options.recursive,
        dereference=options.dereference,
    )


def main(args: Optional[List[str]] = None, stdout: Optional[IO] = None, stderr: Optional[IO] = None) -> int:
    return execute(make_parser(), HELP, _copy, args, stdout, stderr)


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
