"""Color capability of the output streams.

The level is handed to child processes through FORCE_COLOR when their output
is piped, so color-aware programs keep coloring even though they are not
attached to a terminal.
"""

import os
import sys
from typing import IO

MONOCHROME = 0
COLORS_16 = 1
COLORS_256 = 2
TRUE_COLOR = 3


def _is_terminal(stream: IO) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty())
    except ValueError:
        # Closed stream
        return False


def get_color_level(
    stdout: IO | None = None,
    stderr: IO | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Return the color level supported on both stdout and stderr.

    Returns:
        0 = monochrome, 1 = 16 colors, 2 = 256 colors, 3 = true color
    """
    if env is None:
        env = os.environ
    if stdout is None:
        stdout = sys.stdout
    if stderr is None:
        stderr = sys.stderr

    if "NO_COLOR" in env:
        return MONOCHROME
    if not (_is_terminal(stdout) and _is_terminal(stderr)):
        return MONOCHROME

    colorterm = env.get("COLORTERM", "").lower()
    term = env.get("TERM", "").lower()
    if colorterm in ("truecolor", "24bit"):
        return TRUE_COLOR
    if term == "dumb":
        return MONOCHROME
    if "256" in term:
        return COLORS_256
    return COLORS_16
