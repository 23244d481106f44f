"""
Core functionality for gradlestep.

This package contains the foundational modules that other components depend on.
"""

from .directory import (
    get_user_home_dir,
    get_dependency_store_dirs,
    get_build_cache_dir,
    DirectoryError,
)

from .filesystem import (
    compute_file_hash,
    walk_tree,
    atomic_write,
    FilesystemError,
)

from .exceptions import (
    GradleStepError,
    ConfigError,
    GradleTaskError,
    CacheError,
    LockfileError,
    CacheCommitError,
    StepOutputError,
)

__all__ = [
    "get_user_home_dir",
    "get_dependency_store_dirs",
    "get_build_cache_dir",
    "DirectoryError",
    "compute_file_hash",
    "walk_tree",
    "atomic_write",
    "FilesystemError",
    "GradleStepError",
    "ConfigError",
    "GradleTaskError",
    "CacheError",
    "LockfileError",
    "CacheCommitError",
    "StepOutputError",
]
