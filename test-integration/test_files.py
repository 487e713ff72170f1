"""Tests for glob based file removal and copying."""

import errno
import os
import tempfile
from pathlib import Path

import pytest

from npm_utils.errors import AggregateError
from npm_utils.lib import files

TEST_FILES = [
    "test1.txt",
    "test2.txt",
    "test1.png",
    "deep/test3.txt",
    "deep/deeper/test4.txt",
]


@pytest.fixture
def tree():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        for name in TEST_FILES:
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(f"Content of {name}")
        yield root


def listing(root: Path) -> list:
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*"))


class TestGlobbing:
    """Test pattern expansion and matching."""

    def test_expand_relative_to_cwd(self, tree):
        assert files.expand_pattern("*.txt", cwd=str(tree)) == ["test1.txt", "test2.txt"]

    def test_expand_recursive(self, tree):
        matches = files.expand_pattern("**/*.txt", cwd=str(tree))
        assert [Path(m).as_posix() for m in matches] == [
            "deep/deeper/test4.txt", "deep/test3.txt", "test1.txt", "test2.txt",
        ]

    def test_expand_with_exclude(self, tree):
        matches = files.expand_pattern("**/*.txt", cwd=str(tree), exclude=["deep"])
        assert matches == ["test1.txt", "test2.txt"]

    def test_matches_glob(self):
        assert files.matches_glob("a/b/c.map", "*.map")
        assert files.matches_glob("c.map", "**/*.map")
        assert files.matches_glob("a/c.map", "**/*.map")
        assert not files.matches_glob("c.js", "*.map")


class TestRemove:
    """Test removing files."""

    @pytest.mark.asyncio
    async def test_remove_patterns(self, tree):
        removed = await files.remove_patterns(
            [str(tree / "deep/deeper/test4.txt"), str(tree / "*.txt")], limit=1
        )
        assert len(removed) == 3
        assert listing(tree) == ["deep", "deep/deeper", "deep/test3.txt", "test1.png"]

    @pytest.mark.asyncio
    async def test_remove_with_cwd_and_exclude(self, tree):
        await files.remove_patterns(["**/*.txt"], cwd=str(tree), exclude=["test2.txt"])
        assert listing(tree) == ["deep", "deep/deeper", "test1.png", "test2.txt"]

    @pytest.mark.asyncio
    async def test_remove_recursive(self, tree):
        await files.remove_patterns(["deep/**"], cwd=str(tree), recursive=True)
        assert listing(tree) == ["test1.png", "test1.txt", "test2.txt"]

    @pytest.mark.asyncio
    async def test_unmatched_pattern_is_ignored(self, tree):
        assert await files.remove_patterns(["nothing.txt"], cwd=str(tree)) == []

    @pytest.mark.asyncio
    async def test_directory_without_recursive(self, tree):
        with pytest.raises(IsADirectoryError):
            await files.remove_patterns(["deep"], cwd=str(tree))
        assert (tree / "deep").is_dir()

    @pytest.mark.asyncio
    async def test_failures_are_aggregated(self, tree):
        (tree / "other").mkdir()
        with pytest.raises(AggregateError) as excinfo:
            await files.remove_patterns(["deep", "other", "test1.txt"], cwd=str(tree))
        assert str(excinfo.value).startswith("Failed to remove 2 files\n")
        assert len(excinfo.value.errors) == 2
        assert not (tree / "test1.txt").exists()

    def test_remove_path_force(self, tree):
        assert files.remove_path(str(tree / "missing"), force=True) is False
        with pytest.raises(FileNotFoundError):
            files.remove_path(str(tree / "missing"))

    def test_remove_path_retries(self, tree, monkeypatch):
        calls = []
        real_remove = os.remove

        def flaky_remove(path):
            calls.append(path)
            if len(calls) == 1:
                raise OSError(errno.EBUSY, "Device or resource busy", path)
            real_remove(path)

        monkeypatch.setattr(files.os, "remove", flaky_remove)
        assert files.remove_path(str(tree / "test1.txt"), max_retries=2, retry_delay=1)
        assert len(calls) == 2
        assert not (tree / "test1.txt").exists()

    def test_remove_path_gives_up(self, tree, monkeypatch):
        def busy_remove(path):
            raise OSError(errno.EBUSY, "Device or resource busy", path)

        monkeypatch.setattr(files.os, "remove", busy_remove)
        with pytest.raises(OSError):
            files.remove_path(str(tree / "test1.txt"), max_retries=1, retry_delay=1)


class TestCopy:
    """Test copying files."""

    def test_copy_single_file(self, tree):
        files.copy([str(tree / "test1.txt")], str(tree / "copy.txt"))
        assert (tree / "copy.txt").read_text() == "Content of test1.txt"

    def test_directory_merges_into_existing_destination(self, tree):
        (tree / "dist").mkdir()
        copied = files.copy(["deep"], str(tree / "dist"), cwd=str(tree), recursive=True)
        assert copied == [str(tree / "dist")]
        assert listing(tree / "dist") == ["deeper", "deeper/test4.txt", "test3.txt"]

    def test_multiple_sources_create_directory(self, tree):
        files.copy(["*.txt"], str(tree / "out"), cwd=str(tree))
        assert listing(tree / "out") == ["test1.txt", "test2.txt"]

    def test_parents(self, tree):
        files.copy(["deep/test3.txt"], str(tree / "out"), cwd=str(tree), parents=True)
        assert listing(tree / "out") == ["deep", "deep/test3.txt"]

    def test_preserves_timestamps(self, tree):
        os.utime(tree / "test1.txt", (1_000_000, 1_000_000))
        files.copy([str(tree / "test1.txt")], str(tree / "copy.txt"))
        assert (tree / "copy.txt").stat().st_mtime == 1_000_000

    def test_existing_destination_needs_force(self, tree):
        with pytest.raises(FileExistsError):
            files.copy([str(tree / "test1.txt")], str(tree / "test2.txt"))
        assert (tree / "test2.txt").read_text() == "Content of test2.txt"

        files.copy([str(tree / "test1.txt")], str(tree / "test2.txt"), force=True)
        assert (tree / "test2.txt").read_text() == "Content of test1.txt"

    def test_directory_needs_recursive(self, tree):
        with pytest.raises(IsADirectoryError):
            files.copy(["deep"], str(tree / "out"), cwd=str(tree))

    def test_recursive_with_include(self, tree):
        (tree / "deep" / "skip.png").write_text("png")
        files.copy(["deep"], str(tree / "out"), cwd=str(tree), recursive=True, include=["*.txt"])
        assert listing(tree / "out") == ["deeper", "deeper/test4.txt", "test3.txt"]

    def test_recursive_with_exclude(self, tree):
        files.copy(["deep"], str(tree / "out"), cwd=str(tree), recursive=True, exclude=["deeper"])
        assert listing(tree / "out") == ["test3.txt"]

    def test_unmatched_source(self, tree):
        with pytest.raises(FileNotFoundError, match="source path 'nope' did not match any file or directory"):
            files.copy(["nope"], str(tree / "out"), cwd=str(tree))
