from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class Command:
    """One entry of a resolved command list.

    The index makes two entries with the same script name distinct commands.
    """

    index: int
    name: str

    def __str__(self) -> str:
        return self.name


class Event(Protocol):
    pass


@dataclass(frozen=True)
class OutputChunk(Event):
    command: Command
    stream: Any
    data: bytes

    def __repr__(self) -> str:
        return f"<OutputChunk {self.command.name} {len(self.data)} bytes>"


@dataclass(frozen=True)
class CommandExited(Event):
    command: Command
    returncode: int | None
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None and self.returncode == 0


@dataclass
class RunOptions:
    # Run commands in parallel instead of sequentially
    parallel: bool = False
    # Pass the silent flag through to the package manager
    silent: bool = False
