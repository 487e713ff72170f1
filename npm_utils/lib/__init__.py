"""npm_utils.lib - Building blocks of the npm_utils commands."""

from . import files
from . import manifest
from . import patterns
from . import shell

# Re-export main functions for convenience
from .files import remove_patterns, copy, expand_pattern, matches_glob
from .manifest import ScriptRegistry, find_manifest, load_registry
from .patterns import resolve_scripts, pattern_to_regex
from .shell import PackageManager, child_environment, spawn_script

__all__ = [
    'files', 'manifest', 'patterns', 'shell',
    # File functions
    'remove_patterns', 'copy', 'expand_pattern', 'matches_glob',
    # Script registry
    'ScriptRegistry', 'find_manifest', 'load_registry',
    'resolve_scripts', 'pattern_to_regex',
    # Package manager
    'PackageManager', 'child_environment', 'spawn_script',
]
