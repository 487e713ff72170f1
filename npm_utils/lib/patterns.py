"""Wildcard expansion of script names.

``*`` matches exactly one colon separated segment, a run of two or more
asterisks matches anything including colons.
"""

import logging
import re
from typing import Iterable

from .manifest import ScriptRegistry

logger = logging.getLogger(__name__)

_WILDCARDS = re.compile(r"(\*+)")


def is_pattern(name: str) -> bool:
    return "*" in name


def pattern_to_regex(pattern: str) -> re.Pattern:
    """Compile a script name pattern into a regular expression.

    The expression is meant to be used with ``fullmatch``.
    """
    parts = []
    for part in _WILDCARDS.split(pattern):
        if not part:
            continue
        if part == "*":
            parts.append("[^:]+")
        elif part.startswith("*"):
            parts.append(".*")
        else:
            parts.append(re.escape(part))
    return re.compile("".join(parts))


def match_scripts(pattern: str, registry: ScriptRegistry) -> list[str]:
    """Registered script names matching the pattern, in declaration order."""
    regex = pattern_to_regex(pattern)
    return [name for name in registry.names if regex.fullmatch(name)]


def resolve_scripts(patterns: Iterable[str], registry: ScriptRegistry) -> list[str]:
    """Expand all patterns in argument order.

    Names without a wildcard pass through unchanged even when they are not
    registered; the package manager reports them when they are run. Results
    are not deduplicated.
    """
    resolved = []
    for pattern in patterns:
        if is_pattern(pattern):
            matches = match_scripts(pattern, registry)
            logger.debug(f"Pattern {pattern!r} matched {matches}")
            resolved.extend(matches)
        else:
            resolved.append(pattern)
    return resolved
