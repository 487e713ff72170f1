import argparse
import asyncio
import sys
from typing import IO, List, Optional

from ..errors import UsageError
from ..lib.files import DEFAULT_LIMIT, DEFAULT_RETRY_DELAY, remove_patterns
from . import ArgumentParser, execute

HELP = f"""Usage: rm [OPTION]... [PATTERN]...

Remove files and directories.

Options:
  --cwd <dir>         working directory for glob (default: current directory)
  --exclude <path>    exclude pattern (repeatable)
  --force, -f         ignore nonexistent files
  --recursive, -r     remove directories and their contents
  --limit <n>         max concurrent deletions (default: {DEFAULT_LIMIT})
  --max-retries <n>   retry count for transient errors (default: 0)
  --retry-delay <n>   retry delay in ms, grows linearly (default: {DEFAULT_RETRY_DELAY})
  --help              display this help and exit
  --version           output version information and exit"""


def make_parser() -> ArgumentParser:
    parser = ArgumentParser("rm")
    parser.add_argument("--cwd")
    parser.add_argument("--exclude", action="append", default=[])
    parser.add_argument("-f", "--force", action="store_true")
    parser.add_argument("-r", "-R", "--recursive", action="store_true")
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT)
    parser.add_argument("--max-retries", type=int, default=0)
    parser.add_argument("--retry-delay", type=int, default=DEFAULT_RETRY_DELAY)
    parser.add_argument("patterns", nargs="*")
    return parser


def _remove(options: argparse.Namespace, stdout: IO, stderr: IO) -> None:
    if not options.patterns:
        raise UsageError("missing pattern")
    asyncio.run(remove_patterns(
        options.patterns,
        cwd=options.cwd,
        exclude=options.exclude,
        force=options.force,
        recursive=options.recursive,
        limit=options.limit,
        max_retries=options.max_retries,
        retry_delay=options.retry_delay,
    ))


def main(args: Optional[List[str]] = None, stdout: Optional[IO] = None, stderr: Optional[IO] = None) -> int:
    return execute(make_parser(), HELP, _remove, args, stdout, stderr)


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
