import asyncio
import logging
import sys
from pathlib import Path
from typing import IO, AsyncIterator, Mapping, Optional

import aiostream

from .colors import get_color_level
from .errors import CommandError, raise_collected
from .lib.manifest import load_registry
from .lib.patterns import resolve_scripts
from .lib.shell import PackageManager, child_environment, read_chunks, spawn_script
from .output import OutputInterleaver
from .types import Command, CommandExited, Event, OutputChunk, RunOptions

logger = logging.getLogger(__name__)


def _file_descriptor(stream: IO) -> int | None:
    """File descriptor a child process can inherit, None for in-memory streams."""
    try:
        fd = stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None
    stream.flush()
    return fd


class Run:
    """One execution of a resolved list of scripts.

    All state of the execution (running commands, output buffers) belongs to
    the instance, so independent runs never interfere.
    """

    def __init__(
        self,
        scripts: list[str],
        package_manager: PackageManager,
        options: Optional[RunOptions] = None,
        stdout: Optional[IO] = None,
        stderr: Optional[IO] = None,
        env: Optional[Mapping[str, str]] = None,
    ):
        self.commands = [Command(index, name) for index, name in enumerate(scripts)]
        self.package_manager = package_manager
        self.options = options or RunOptions()
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.env = env
        self.output = OutputInterleaver()

    @property
    def parallel(self) -> bool:
        return self.options.parallel and len(self.commands) > 1

    async def execute(self) -> None:
        """Run all commands.

        Raises:
            CommandError: For the first failure in sequential mode or the
                only failure in parallel mode
            AggregateError: If more than one command failed in parallel mode
        """
        if self.parallel:
            await self._execute_parallel()
        else:
            for command in self.commands:
                await self._execute_sequential(command)

    async def _execute_sequential(self, command: Command) -> None:
        env = child_environment(env=self.env)
        self.output.start(command)
        error = None
        async for event in self._events(command, env, pipe=False):
            error = self._handle(event) or error
        self.output.flush_all()
        if error is not None:
            raise error

    async def _execute_parallel(self) -> None:
        logger.info(f"Running {len(self.commands)} commands in parallel")
        color_level = get_color_level(self.stdout, self.stderr, self.env)
        env = child_environment(force_color=color_level, env=self.env)

        for command in self.commands:
            self.output.start(command)

        errors = []
        streams = [self._events(command, env, pipe=True) for command in self.commands]
        async with aiostream.stream.merge(*streams).stream() as merged:
            async for event in merged:
                error = self._handle(event)
                if error is not None:
                    errors.append(error)

        self.output.flush_all()
        logger.info(f"All commands completed, {len(errors)} failed")
        raise_collected(errors, "Execution of {count} commands failed")

    def _handle(self, event: Event) -> CommandError | None:
        if isinstance(event, OutputChunk):
            self.output.write(event.command, event.stream, event.data)
            return None

        if not isinstance(event, CommandExited):
            raise TypeError(f"Unexpected event {event!r}")
        self.output.finish(event.command)
        name = event.command.name
        if event.error is not None:
            logger.info(f"Command {name!r} could not be started: {event.error}")
            return CommandError(name, reason=str(event.error))
        if event.returncode != 0:
            logger.info(f"Command {name!r} exited with code {event.returncode}")
            return CommandError(name, event.returncode)
        logger.info(f"Command {name!r} completed")
        return None

    async def _events(self, command: Command, env: dict[str, str], pipe: bool) -> AsyncIterator[Event]:
        """Start a command and yield its output chunks followed by its exit."""
        stdout = None if pipe else _file_descriptor(self.stdout)
        stderr = None if pipe else _file_descriptor(self.stderr)
        try:
            process = await spawn_script(
                self.package_manager,
                command.name,
                silent=self.options.silent,
                stdout=asyncio.subprocess.PIPE if stdout is None else stdout,
                stderr=asyncio.subprocess.PIPE if stderr is None else stderr,
                env=env,
            )
        except OSError as e:
            yield CommandExited(command, None, e)
            return

        async def tagged_chunks(reader: asyncio.StreamReader, target: IO):
            async for data in read_chunks(reader):
                yield OutputChunk(command, target, data)

        pipes = []
        if process.stdout is not None:
            pipes.append(tagged_chunks(process.stdout, self.stdout))
        if process.stderr is not None:
            pipes.append(tagged_chunks(process.stderr, self.stderr))
        if pipes:
            async with aiostream.stream.merge(*pipes).stream() as merged:
                async for chunk in merged:
                    yield chunk

        returncode = await process.wait()
        yield CommandExited(command, returncode)


async def run_scripts(
    patterns: list[str],
    options: Optional[RunOptions] = None,
    directory: str | Path | None = None,
    stdout: Optional[IO] = None,
    stderr: Optional[IO] = None,
    env: Optional[Mapping[str, str]] = None,
) -> list[str]:
    """Resolve script name patterns against the nearest manifest and run them.

    Args:
        patterns: Script names, may contain ``*`` and ``**`` wildcards
        options: Parallel and silent flags
        directory: Where to start looking for package.json, defaults to the
            current working directory
        stdout: Output stream for the scripts, defaults to sys.stdout
        stderr: Error stream for the scripts, defaults to sys.stderr
        env: Environment to derive the child environment from, defaults to
            os.environ

    Returns:
        The resolved script names

    Raises:
        ManifestNotFoundError: If there is no package.json
        ConfigurationError: If the package manager can't be located
        CommandError: If a script failed
        AggregateError: If multiple scripts failed in parallel mode
    """
    registry = load_registry(directory)
    scripts = resolve_scripts(patterns, registry)
    logger.debug(f"Resolved {patterns} to {scripts}")
    package_manager = PackageManager.from_environment(env)
    await Run(scripts, package_manager, options, stdout, stderr, env).execute()
    return scripts
