"""Glob based file removal and copying."""

import asyncio
import errno
import fnmatch
import glob
import logging
import os
import shutil
import time
from functools import partial
from pathlib import Path, PurePath
from typing import Callable, List, Optional

from ..errors import NpmUtilsError, raise_collected

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 64
DEFAULT_RETRY_DELAY = 100  # milliseconds

# Errors which may disappear when trying again a little later
RETRYABLE_ERRORS = {errno.EBUSY, errno.EMFILE, errno.ENFILE, errno.ENOTEMPTY, errno.EPERM}


def matches_glob(path: str, pattern: str) -> bool:
    """Match a relative path against a glob pattern.

    ``*`` also matches ``/`` here, and a leading ``**/`` may match nothing.
    """
    path = PurePath(path).as_posix()
    if fnmatch.fnmatch(path, pattern):
        return True
    return pattern.startswith("**/") and fnmatch.fnmatch(path, pattern[3:])


def is_excluded(path: str, exclude: Optional[List[str]]) -> bool:
    """Whether the path or one of its parent directories matches an exclude pattern."""
    if not exclude:
        return False
    pure = PurePath(path)
    candidates = [pure, *[parent for parent in pure.parents if parent.name]]
    return any(matches_glob(str(candidate), pattern) for candidate in candidates for pattern in exclude)


def expand_pattern(pattern: str, cwd: Optional[str] = None, exclude: Optional[List[str]] = None) -> List[str]:
    """Existing paths matching a glob pattern, sorted.

    Relative patterns are matched relative to ``cwd`` and returned relative
    to it. ``**`` matches any number of directories.
    """
    matches = glob.glob(pattern, root_dir=cwd, recursive=True)
    return sorted(
        match.rstrip("/\\") or match
        for match in matches
        if not is_excluded(match, exclude)
    )


def resolve_path(path: str, cwd: Optional[str] = None) -> str:
    return path if cwd is None else os.path.join(cwd, path)


def remove_path(
    path: str,
    force: bool = False,
    recursive: bool = False,
    max_retries: int = 0,
    retry_delay: int = DEFAULT_RETRY_DELAY,
) -> bool:
    """Remove a file, symbolic link or (when recursive) a directory tree.

    Args:
        path: Path to remove
        force: Ignore a nonexistent path
        recursive: Allow removing directories
        max_retries: How often to retry on transient errors
        retry_delay: Delay in milliseconds, multiplied by the attempt number

    Returns:
        True if something was removed

    Raises:
        FileNotFoundError: If path doesn't exist and force is not set
        IsADirectoryError: If path is a directory and recursive is not set
        OSError: If removal fails
    """
    attempt = 0
    while True:
        try:
            if os.path.isdir(path) and not os.path.islink(path):
                if not recursive:
                    raise IsADirectoryError(errno.EISDIR, "Is a directory, use recursive option to remove it", path)
                shutil.rmtree(path)
            else:
                os.remove(path)
            return True
        except FileNotFoundError:
            if force:
                return False
            raise
        except OSError as e:
            if e.errno not in RETRYABLE_ERRORS or attempt >= max_retries:
                raise
            attempt += 1
            logger.debug(f"Retrying removal of {path} ({attempt}/{max_retries}): {e}")
            time.sleep(retry_delay * attempt / 1000)


def _prune_nested(paths: List[str]) -> List[str]:
    """Drop duplicates and paths inside other paths of the list."""
    normalized = {}
    for path in paths:
        normalized.setdefault(PurePath(os.path.normpath(path)), path)
    return [
        path for pure, path in normalized.items()
        if not any(parent in normalized for parent in pure.parents)
    ]


async def remove_patterns(
    patterns: List[str],
    cwd: Optional[str] = None,
    exclude: Optional[List[str]] = None,
    force: bool = False,
    recursive: bool = False,
    limit: int = DEFAULT_LIMIT,
    max_retries: int = 0,
    retry_delay: int = DEFAULT_RETRY_DELAY,
) -> List[str]:
    """Remove all files matching the given glob patterns.

    Removals run concurrently, at most ``limit`` at a time. All matches are
    attempted even when some fail; failures are raised at the end.

    Returns:
        Paths which have been removed

    Raises:
        OSError: If exactly one removal failed
        AggregateError: If multiple removals failed
    """
    limit = max(int(limit), 1)
    semaphore = asyncio.Semaphore(limit)
    loop = asyncio.get_running_loop()

    paths = []
    for pattern in patterns:
        paths.extend(resolve_path(match, cwd) for match in expand_pattern(pattern, cwd, exclude))
    paths = _prune_nested(paths) if recursive else list(dict.fromkeys(paths))

    removed: List[str] = []
    errors: List[Exception] = []

    async def remove(path: str):
        async with semaphore:
            try:
                if await loop.run_in_executor(
                    None, partial(remove_path, path, force, recursive, max_retries, retry_delay)
                ):
                    logger.info(f"Removed {path}")
                    removed.append(path)
            except OSError as e:
                logger.debug(f"Failed to remove {path}: {e}")
                errors.append(e)

    await asyncio.gather(*(remove(path) for path in paths))
    raise_collected(errors, "Failed to remove {count} files")
    return removed


def get_files(patterns: List[str], cwd: Optional[str] = None) -> List[str]:
    """Expand source patterns, each pattern must match something.

    Raises:
        FileNotFoundError: If a pattern matches nothing
    """
    files = []
    for pattern in patterns:
        matches = expand_pattern(pattern, cwd)
        if not matches:
            raise FileNotFoundError(f"source path '{pattern}' did not match any file or directory")
        files.extend(matches)
    return files


def _copy_file(src: str, dst: str, force: bool = False, follow_symlinks: bool = True) -> str:
    if os.path.lexists(dst):
        if not force:
            raise FileExistsError(errno.EEXIST, "Destination already exists, use force option to overwrite it", dst)
        if os.path.islink(dst):
            os.remove(dst)
    return shutil.copy2(src, dst, follow_symlinks=follow_symlinks)


def _make_filter(
    source: str,
    prefix: str,
    include: List[str],
    exclude: List[str],
) -> Callable[[str, List[str]], List[str]]:
    """copytree ignore callback applying include and exclude patterns.

    Patterns are matched against the path relative to the copied source,
    prefixed with ``prefix``.
    """
    def ignore(directory: str, names: List[str]) -> List[str]:
        ignored = []
        for name in names:
            full_path = os.path.join(directory, name)
            relative = os.path.join(prefix, os.path.relpath(full_path, source))
            if any(matches_glob(relative, pattern) for pattern in exclude):
                logger.debug(f"Excluding {relative}")
                ignored.append(name)
            elif include and not os.path.isdir(full_path):
                if not any(matches_glob(relative, pattern) for pattern in include):
                    ignored.append(name)
        return ignored

    return ignore


def _strip_anchor(path: str) -> str:
    pure = PurePath(path)
    return str(pure.relative_to(pure.anchor)) if pure.anchor else path


def copy(
    patterns: List[str],
    destination: str,
    cwd: Optional[str] = None,
    parents: bool = False,
    include: Optional[List[str]] = None,
    exclude: Optional[List[str]] = None,
    force: bool = False,
    recursive: bool = False,
    dereference: bool = False,
) -> List[str]:
    """Copy files and directories matching glob patterns to a destination.

    Args:
        patterns: Source glob patterns, relative to ``cwd`` if given
        destination: Target file or directory
        cwd: Directory relative source patterns are resolved against
        parents: Keep the source path below the destination directory
        include: Only copy files matching one of these patterns
        exclude: Skip files and directories matching one of these patterns
        force: Overwrite existing files
        recursive: Copy directories
        dereference: Follow symbolic links in sources

    Returns:
        The destination paths written

    Raises:
        FileNotFoundError: If a source pattern matches nothing
        FileExistsError: If a destination file exists and force is not set
        IsADirectoryError: If a source is a directory and recursive is not set
        NpmUtilsError: If copying a directory tree partially failed
    """
    include = include or []
    exclude = exclude or []
    files = get_files(patterns, cwd)

    # Multiple sources or parents option: destination is a directory
    dest_is_dir = len(files) > 1 or parents
    if dest_is_dir:
        Path(destination).mkdir(parents=True, exist_ok=True)

    copied = []
    for source in files:
        source_path = resolve_path(source, cwd)
        if dest_is_dir:
            dest_file = os.path.join(destination, _strip_anchor(source) if parents else os.path.basename(source))
        else:
            dest_file = destination
        Path(dest_file).parent.mkdir(parents=True, exist_ok=True)

        if os.path.isdir(source_path) and (dereference or not os.path.islink(source_path)):
            if not recursive:
                raise IsADirectoryError(errno.EISDIR, "Is a directory, use recursive option to copy it", source_path)
            prefix = _strip_anchor(source) if parents else ""
            try:
                shutil.copytree(
                    source_path,
                    dest_file,
                    symlinks=not dereference,
                    ignore=_make_filter(source_path, prefix, include, exclude),
                    copy_function=partial(_copy_file, force=force),
                    dirs_exist_ok=True,
                )
            except shutil.Error as e:
                reasons = [str(reason) for _, _, reason in e.args[0]]
                raise NpmUtilsError(f"Failed to copy '{source}': " + "; ".join(reasons)) from e
        else:
            _copy_file(source_path, dest_file, force=force, follow_symlinks=dereference)

        logger.info(f"Copied {source_path} to {dest_file}")
        copied.append(dest_file)
    return copied
