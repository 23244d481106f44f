"""
File system utilities for gradlestep.

This module provides the file operations the cache subsystem is built on:
- Content hashing (streamed, memory-efficient)
- Deterministic directory tree walking
- Safe file operations (atomic writes)

Walk and read failures are raised to the caller; deciding whether a failure
is fatal is left to the cache planner.
"""

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple, Union


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


# ============================================================================
# Tree Walking
# ============================================================================


def _raise_walk_error(error: OSError) -> None:
    raise error


def walk_tree(
    root: Union[str, Path], prune_dirs: Iterable[str] = ()
) -> Iterator[Tuple[Path, List[str], List[str]]]:
    """
    Walk a directory tree top-down in sorted order.

    Unlike a bare ``os.walk``, any error while listing a directory is raised
    instead of silently skipped, and sibling directories and files are
    yielded in lexicographic order so repeated walks over the same tree
    produce the same sequence on every platform.

    Args:
        root: Directory to walk
        prune_dirs: Directory names that are never descended into

    Yields:
        Tuples of (directory path, sorted subdirectory names, sorted file names)

    Raises:
        OSError: If the root or any directory below it cannot be listed

    Example:
        >>> for dirpath, dirnames, filenames in walk_tree('app', {'node_modules'}):
        ...     print(dirpath, filenames)
    """
    pruned = set(prune_dirs)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        # In-place update controls which directories os.walk descends into
        dirnames[:] = sorted(name for name in dirnames if name not in pruned)
        filenames.sort()
        yield Path(dirpath), dirnames, filenames


# ============================================================================
# Safe File Operations
# ============================================================================


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    This ensures the file is never in a partially-written state.
    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)

    Example:
        >>> atomic_write('gradle.deps', 'd41d8cd98f00b204e9800998ecf8427e')
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        # mkstemp creates 0600 files; match what a plain open() would create
        os.chmod(temp_path, 0o666 & ~_current_umask())
        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


# ============================================================================
# Hashing
# ============================================================================


def compute_file_hash(
    file_path: Union[str, Path], algorithm: str = "md5", chunk_size: int = 8192
) -> str:
    """
    Compute hash of a file.

    Memory-efficient implementation that reads file in chunks, so arbitrarily
    large files can be fingerprinted. The digest is only used for change
    detection, which is why MD5 is the default.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('md5', 'sha1', 'sha256', ...)
        chunk_size: Number of bytes to read at once

    Returns:
        Lowercase hex digest of the hash

    Raises:
        FilesystemError: If the file does not exist
        OSError: If the file cannot be opened or read to completion
        ValueError: If the algorithm is not supported

    Example:
        >>> compute_file_hash('build.gradle')
        '5d41402abc4b2a76b9719d911017c592'
        >>> compute_file_hash('settings.gradle', 'sha256')
        'a3d5f6e8...'
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FilesystemError(f"File not found: {file_path}")

    try:
        hasher = hashlib.new(algorithm)
    except ValueError:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    with open(file_path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.hexdigest()
