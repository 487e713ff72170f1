"""Script registry loading from the nearest package.json."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from ..errors import ManifestError, ManifestNotFoundError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


@dataclass(frozen=True)
class ScriptRegistry:
    """Script name to command line mapping in declaration order."""

    path: Path
    scripts: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "scripts", MappingProxyType(dict(self.scripts)))

    @property
    def names(self) -> list[str]:
        return list(self.scripts)

    def __contains__(self, name: str) -> bool:
        return name in self.scripts

    def __len__(self) -> int:
        return len(self.scripts)


def find_manifest(directory: str | Path | None = None) -> Path:
    """Find the nearest package.json in the given directory or its parents.

    Args:
        directory: Directory to start searching in, defaults to the current
            working directory

    Returns:
        Path of the nearest manifest

    Raises:
        ManifestNotFoundError: If no directory up to the filesystem root
            contains a manifest
    """
    current = Path.cwd() if directory is None else Path(directory).expanduser().resolve()
    while True:
        candidate = current / MANIFEST_NAME
        if candidate.is_file():
            logger.debug(f"Found manifest {candidate}")
            return candidate
        parent = current.parent
        if parent == current:
            raise ManifestNotFoundError()
        current = parent


def load_registry(directory: str | Path | None = None) -> ScriptRegistry:
    """Load the scripts of the nearest manifest.

    A manifest without a ``scripts`` field yields an empty registry.
    """
    path = find_manifest(directory)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            manifest = json.load(f)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e
    except UnicodeDecodeError as e:
        raise ManifestError(f"{path} is not valid UTF-8: {e}") from e

    if not isinstance(manifest, dict):
        raise ManifestError(f"{path} does not contain a JSON object")

    scripts = manifest.get("scripts", {})
    if not isinstance(scripts, dict) or not all(
        isinstance(value, str) for value in scripts.values()
    ):
        raise ManifestError(f"'scripts' in {path} must map script names to strings")

    logger.info(f"Loaded {len(scripts)} scripts from {path}")
    return ScriptRegistry(path, scripts)
