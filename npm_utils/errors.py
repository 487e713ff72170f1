"""Exceptions raised by npm_utils."""

import signal


class NpmUtilsError(Exception):
    """Base class of all npm_utils errors."""


class ConfigurationError(NpmUtilsError):
    """The environment does not allow running anything at all."""


class ManifestNotFoundError(ConfigurationError):
    def __init__(self, message: str = "Unable to locate package.json"):
        super().__init__(message)


class ManifestError(ConfigurationError):
    """The manifest exists but cannot be used."""


class UsageError(NpmUtilsError):
    """Invalid command line."""


class CommandError(NpmUtilsError):
    """A single script could not be started or exited with a non-zero code."""

    def __init__(self, command: str, returncode: int | None = None, reason: str | None = None):
        self.command = command
        self.returncode = returncode
        self.reason = reason
        if reason is not None:
            message = f"{command}: {reason}"
        elif returncode is not None and returncode < 0:
            message = f"{command} was terminated by {_signal_name(-returncode)}"
        else:
            message = f"{command} exited with code {returncode}"
        super().__init__(message)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


class AggregateError(NpmUtilsError):
    """Several failures reported as one.

    The message lists the count and each underlying message on its own line,
    the underlying exceptions stay available in ``errors``.
    """

    def __init__(self, errors: list[Exception], message: str):
        self.errors = list(errors)
        lines = "\n  ".join(str(error) for error in self.errors)
        super().__init__(f"{message}\n  {lines}")


def raise_collected(errors: list[Exception], message: str) -> None:
    """Raise nothing, the single error or an AggregateError for ``errors``."""
    if len(errors) == 1:
        raise errors[0]
    if len(errors) > 1:
        raise AggregateError(errors, message.format(count=len(errors)))
