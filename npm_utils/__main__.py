"""Allows: python -m npm_utils run|rm|cp [OPTION]..."""

import sys

from .cli import cp, rm, run

COMMANDS = {"run": run.main, "rm": rm.main, "cp": cp.main}


def main() -> int:
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(f"Usage: python -m npm_utils {{{'|'.join(COMMANDS)}}} [OPTION]...", file=sys.stderr)
        return 2
    return COMMANDS[sys.argv[1]](sys.argv[2:])


if __name__ == '__main__':
    sys.exit(main())
