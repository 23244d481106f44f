"""
Directory layout of the Gradle/Android build ecosystem.

This module resolves the user-level directories that Gradle, Kotlin, Maven
and the Android Gradle plugin populate during a build. These are the
"dependency stores" worth persisting between CI runs.

Directory Structure (relative to the user's home directory):
    .gradle/                 : Gradle wrapper distributions and dependency cache
    .kotlin/                 : Kotlin compiler daemon and native toolchains
    .m2/                     : Local Maven repository
    .android/build-cache/    : Android Gradle plugin build cache
"""

import os
from pathlib import Path
from typing import List, Optional


class DirectoryError(Exception):
    """Base exception for directory-related errors."""

    pass


DEPENDENCY_STORE_DIRS = (".gradle", ".kotlin", ".m2")
BUILD_CACHE_DIR = (".android", "build-cache")


def get_user_home_dir() -> Path:
    """
    Get the platform-specific home directory of the current user.

    Returns:
        Path: The home directory.
            - Windows: %USERPROFILE%
            - Linux/macOS: ~

    Raises:
        DirectoryError: If the home directory cannot be determined.

    Example:
        >>> print(get_user_home_dir())
        /home/user  # on Linux
    """
    if os.name == "nt":
        user_profile = os.environ.get("USERPROFILE")
        if not user_profile:
            raise DirectoryError(
                "USERPROFILE environment variable is not set. "
                "Cannot determine home directory."
            )
        return Path(user_profile)

    try:
        return Path.home()
    except RuntimeError as e:
        raise DirectoryError(f"Cannot determine home directory: {e}") from e


def get_dependency_store_dirs(home_dir: Optional[Path] = None) -> List[Path]:
    """
    Get the global package-manager cache directories.

    Args:
        home_dir: Home directory to resolve against (default: current user's)

    Returns:
        List of paths in a fixed order: ~/.gradle, ~/.kotlin, ~/.m2
    """
    home = Path(home_dir) if home_dir is not None else get_user_home_dir()
    return [home / name for name in DEPENDENCY_STORE_DIRS]


def get_build_cache_dir(home_dir: Optional[Path] = None) -> Path:
    """Get the Android Gradle plugin build cache directory."""
    home = Path(home_dir) if home_dir is not None else get_user_home_dir()
    return home.joinpath(*BUILD_CACHE_DIR)
