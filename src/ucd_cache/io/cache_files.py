"""Read/write helpers for files mirrored under the cache root."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from ucd_cache.errors import CacheError


def cache_path(cache_dir: Path, name: str) -> Path:
    """Map a logical UCD name such as ``emoji/emoji-data.txt`` to a cache path.

    Args:
        cache_dir: Cache root directory.
        name: Logical file name relative to the upstream prefix.

    Returns:
        Path inside ``cache_dir``.

    Raises:
        CacheError: If ``name`` is empty, absolute, or escapes the cache root.
    """

    logical = PurePosixPath(name)
    if not name or logical.is_absolute() or ".." in logical.parts:
        raise CacheError(f"Invalid cache file name: {name!r}")
    return cache_dir.joinpath(*logical.parts)


def ensure_cache_dir(cache_dir: Path) -> Path:
    """Create ``cache_dir`` recursively if needed.

    Raises:
        CacheError: If the path exists and is not a directory.
    """

    if cache_dir.exists() and not cache_dir.is_dir():
        raise CacheError(f"Cache directory not directory: {cache_dir}")
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir


def read_cached_text(cache_dir: Path, name: str) -> str:
    """Read cached text for ``name``.

    Raises:
        FileNotFoundError: If nothing has been cached under ``name`` yet.
    """

    return cache_path(cache_dir, name).read_text(encoding="utf-8")


def write_cached_text(cache_dir: Path, name: str, text: str) -> Path:
    """Write ``text`` for ``name``, creating parent directories lazily.

    Returns:
        Path of the written file.
    """

    path = cache_path(cache_dir, name)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(text)
    return path


def has_cached_text(cache_dir: Path, name: str) -> bool:
    """Return whether a cached file exists for ``name``."""

    return cache_path(cache_dir, name).is_file()
