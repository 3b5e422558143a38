"""Unit tests for cache-root file helpers."""

from __future__ import annotations

from pathlib import Path

import pytest

from ucd_cache.errors import CacheError
from ucd_cache.io.cache_files import (
    cache_path,
    ensure_cache_dir,
    has_cached_text,
    read_cached_text,
    write_cached_text,
)


def test_write_creates_parent_directories(tmp_path: Path) -> None:
    path = write_cached_text(tmp_path, "emoji/emoji-data.txt", "1F600;x\n")

    assert path == tmp_path / "emoji" / "emoji-data.txt"
    assert has_cached_text(tmp_path, "emoji/emoji-data.txt")
    assert read_cached_text(tmp_path, "emoji/emoji-data.txt") == "1F600;x\n"

    write_cached_text(tmp_path, "emoji/emoji-data.txt", "1F601;y\n")
    assert read_cached_text(tmp_path, "emoji/emoji-data.txt") == "1F601;y\n"


def test_read_missing_file_raises(tmp_path: Path) -> None:
    assert not has_cached_text(tmp_path, "Blocks.txt")
    with pytest.raises(FileNotFoundError):
        read_cached_text(tmp_path, "Blocks.txt")


@pytest.mark.parametrize("name", ["", "/etc/passwd", "../outside.txt", "a/../../b.txt"])
def test_cache_path_rejects_escaping_names(tmp_path: Path, name: str) -> None:
    with pytest.raises(CacheError):
        cache_path(tmp_path, name)


def test_ensure_cache_dir_is_idempotent(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b"

    assert ensure_cache_dir(target) == target
    assert ensure_cache_dir(target) == target
    assert target.is_dir()


def test_ensure_cache_dir_rejects_file(tmp_path: Path) -> None:
    target = tmp_path / "file"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(CacheError, match="not directory"):
        ensure_cache_dir(target)
