"""npm_utils - Cross-platform rm, cp and script runner for package scripts."""

__version__ = "1.0.0"
__author__ = "npm-utils contributors"

from .errors import (
    NpmUtilsError,
    ConfigurationError,
    ManifestNotFoundError,
    ManifestError,
    UsageError,
    CommandError,
    AggregateError,
)
from .run import Run, run_scripts
from .types import Command, RunOptions

__all__ = [
    'Run', 'run_scripts', 'Command', 'RunOptions',
    'NpmUtilsError', 'ConfigurationError', 'ManifestNotFoundError', 'ManifestError',
    'UsageError', 'CommandError', 'AggregateError',
]
