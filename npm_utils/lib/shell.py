"""Package manager invocation for npm_utils."""

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Mapping, Optional

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

EXEC_PATH_VARIABLE = "npm_execpath"
NODE_EXEC_PATH_VARIABLE = "npm_node_execpath"
FORCE_COLOR_VARIABLE = "FORCE_COLOR"

JAVASCRIPT_SUFFIXES = (".js", ".cjs", ".mjs")
READ_SIZE = 64 * 1024


@dataclass(frozen=True)
class PackageManager:
    """The package manager which runs the individual scripts.

    ``exec_path`` is either an executable or a JavaScript entry point, which
    is then started with ``node_exec_path``.
    """

    exec_path: str
    node_exec_path: Optional[str] = None

    @classmethod
    def from_environment(cls, env: Optional[Mapping[str, str]] = None) -> "PackageManager":
        """Locate the package manager the current process was started by.

        Raises:
            ConfigurationError: If npm_execpath is not set
        """
        if env is None:
            env = os.environ
        exec_path = env.get(EXEC_PATH_VARIABLE)
        if not exec_path:
            raise ConfigurationError(
                f"Environment variable '{EXEC_PATH_VARIABLE}' not found. "
                "Make sure to run this script through NPM"
            )
        node_exec_path = env.get(NODE_EXEC_PATH_VARIABLE) or env.get("NODE")
        return cls(exec_path, node_exec_path)

    def command_line(self, script: str, silent: bool = False) -> list[str]:
        """Arguments running the given script through the package manager."""
        args = ["run"]
        if silent:
            args.append("-s")
        args.append(script)

        if Path(self.exec_path).suffix.lower() in JAVASCRIPT_SUFFIXES:
            return [self.node_exec_path or "node", self.exec_path, *args]
        return [self.exec_path, *args]


def child_environment(
    force_color: Optional[int] = None,
    env: Optional[Mapping[str, str]] = None,
) -> dict[str, str]:
    """Environment for a child process.

    A copy of the current environment. When ``force_color`` is given it is
    set as FORCE_COLOR unless the caller already set that variable.
    """
    child_env = dict(os.environ if env is None else env)
    if force_color is not None:
        child_env.setdefault(FORCE_COLOR_VARIABLE, str(force_color))
    return child_env


async def spawn_script(
    package_manager: PackageManager,
    script: str,
    silent: bool = False,
    stdout: int | None = None,
    stderr: int | None = None,
    env: Optional[Mapping[str, str]] = None,
) -> asyncio.subprocess.Process:
    """Start a script as a child process.

    Standard input is always inherited. ``stdout`` and ``stderr`` are either
    None (inherit), a file descriptor or ``asyncio.subprocess.PIPE``.

    Raises:
        OSError: If the package manager could not be started
    """
    cmd = package_manager.command_line(script, silent)
    logger.info(f"Starting {script!r}: {' '.join(cmd)}")
    return await asyncio.create_subprocess_exec(
        *cmd,
        stdin=None,
        stdout=stdout,
        stderr=stderr,
        env=dict(env) if env is not None else None,
    )


async def read_chunks(stream: asyncio.StreamReader) -> AsyncIterator[bytes]:
    """Yield data from a pipe as it arrives until EOF."""
    while True:
        data = await stream.read(READ_SIZE)
        if not data:
            break
        yield data
