"""Interleaving of the output of concurrently running commands.

Only the primary command, the oldest command still running, writes directly
to the output streams. Output of all other commands is buffered until they
become primary or until everything has finished, so the output of different
commands is never mixed up chunk by chunk.
"""

import codecs
import logging
from typing import IO

from .types import Command

logger = logging.getLogger(__name__)


class OutputInterleaver:
    def __init__(self):
        # Insertion ordered set of running commands, first entry is primary
        self.running: dict[Command, None] = {}
        self.buffers: dict[Command, list[tuple[IO, bytes]]] = {}
        self._decoders: dict[tuple[Command, int], tuple[IO, codecs.IncrementalDecoder]] = {}

    @property
    def primary(self) -> Command | None:
        return next(iter(self.running), None)

    def start(self, command: Command) -> None:
        self.running[command] = None

    def write(self, command: Command, stream: IO, data: bytes) -> None:
        """Write output of a command, directly if it is primary, buffered otherwise."""
        if command == self.primary:
            self._emit(command, stream, data)
        else:
            logger.debug(f"Buffering {len(data)} bytes of {command.name!r}")
            self.buffers.setdefault(command, []).append((stream, data))

    def finish(self, command: Command) -> None:
        """Remove an exited command and flush the buffer of the new primary command."""
        self.running.pop(command, None)
        self.flush(self.primary)

    def flush(self, command: Command | None) -> None:
        if command is None:
            return
        buffer = self.buffers.pop(command, None)
        if buffer is None:
            return
        logger.debug(f"Flushing {len(buffer)} buffered chunks of {command.name!r}")
        for stream, data in buffer:
            self._emit(command, stream, data)

    def flush_all(self) -> None:
        """Flush all remaining buffers in start order."""
        for command in sorted(self.buffers, key=lambda c: c.index):
            self.flush(command)
        for stream, decoder in self._decoders.values():
            tail = decoder.decode(b"", final=True)
            if tail:
                stream.write(tail)
                stream.flush()
        self._decoders.clear()

    def _emit(self, command: Command, stream: IO, data: bytes) -> None:
        binary = getattr(stream, "buffer", None)
        if binary is not None:
            stream.flush()
            binary.write(data)
            binary.flush()
            return
        # Text only stream: decode per command and stream so multi-byte
        # characters split across chunks survive
        key = (command, id(stream))
        if key not in self._decoders:
            self._decoders[key] = (stream, codecs.getincrementaldecoder("utf-8")(errors="replace"))
        _, decoder = self._decoders[key]
        text = decoder.decode(data)
        if text:
            stream.write(text)
            stream.flush()
