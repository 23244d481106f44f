"""
Cache path planning for Gradle builds.

This module decides which directories are persisted as cache between CI runs.
The planner turns a cache level into a PathSet: include entries (dependency
stores keyed on the dependency lockfile, and build output directories) and a
fixed list of exclude globs for files that are noisy or cheap to regenerate.

Usage:
    from gradlestep.caching.planner import CacheConfig, CacheLevel, CachePathPlanner

    config = CacheConfig(project_root=Path.cwd(), cache_level=CacheLevel.ALL)
    plan = CachePathPlanner(config).plan()
    if plan.enabled:
        print(plan.path_set.include_text())

Planning is all-or-nothing: if any step fails, the returned CachePlan is
disabled and carries the reason instead of a partial PathSet.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from gradlestep.caching.lockfile import (
    DEPENDENCY_FILE_SUFFIX,
    EXCLUDED_DIR_NAMES,
    LOCKFILE_NAME,
    DependencyLockfileBuilder,
)
from gradlestep.core.directory import (
    DirectoryError,
    get_build_cache_dir,
    get_dependency_store_dirs,
    get_user_home_dir,
)
from gradlestep.core.exceptions import LockfileError
from gradlestep.core.filesystem import walk_tree

logger = logging.getLogger(__name__)

BUILD_OUTPUT_DIR_NAMES = ("build", ".gradle")

EXCLUDE_PATTERNS = (
    "~/.gradle/**",
    "~/.android/build-cache/**",
    "*.lock",
    "*.bin",
    "/**/build/**.json",
    "/**/build/**.html",
    "/**/build/**.xml",
    "/**/build/**.properties",
    "/**/build/**/zip-cache/**",
    "*.log",
    "*.txt",
    "*.rawproto",
    "!*.ap_",
    "!*.apk",
)


class CacheLevel(Enum):
    """Which categories of build artifacts are persisted."""

    ALL = "all"
    ONLY_DEPS = "only-deps"
    NONE = "none"

    @classmethod
    def parse(cls, value: Union[str, "CacheLevel"]) -> "CacheLevel":
        """
        Parse a cache level name.

        Accepts the legacy ``only deps`` spelling as an alias of ``only-deps``.

        Raises:
            ValueError: If the value is not a known cache level
        """
        if isinstance(value, cls):
            return value

        normalized = str(value).strip().lower().replace(" ", "-").replace("_", "-")
        for level in cls:
            if level.value == normalized:
                return level

        allowed = ", ".join(level.value for level in cls)
        raise ValueError(f"Invalid cache level '{value}' (allowed: {allowed})")


@dataclass(frozen=True)
class PathMapping:
    """Cache ``source``; invalidate it when the content of ``key`` changes."""

    source: Path
    key: Path

    def __str__(self) -> str:
        return f"{self.source} -> {self.key}"


IncludeEntry = Union[PathMapping, Path]


@dataclass
class PathSet:
    """Include and exclude instructions handed to a cache collector."""

    includes: List[IncludeEntry] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.includes and not self.excludes

    def include_text(self) -> str:
        """Includes joined one per line (``source -> key`` or plain path)."""
        return "\n".join(str(entry) for entry in self.includes)

    def exclude_text(self) -> str:
        """Exclude globs joined one per line."""
        return "\n".join(self.excludes)


@dataclass
class CachePlan:
    """
    Outcome of cache planning.

    A plan is either enabled and carries a complete PathSet, or disabled and
    carries the reason collection was skipped. Disabled plans always have an
    empty PathSet.
    """

    path_set: PathSet = field(default_factory=PathSet)
    enabled: bool = True
    reason: Optional[str] = None
    lockfile_path: Optional[Path] = None

    @classmethod
    def disabled(cls, reason: str) -> "CachePlan":
        return cls(path_set=PathSet(), enabled=False, reason=reason)


@dataclass(frozen=True)
class CacheConfig:
    """
    Inputs of a cache planning run.

    Attributes:
        project_root: Root of the Gradle project
        cache_level: Which categories of paths to persist (member or level name)
        home_dir: Home directory holding the dependency stores (default: current user's)
        lockfile_name: Lockfile name, relative to project_root
        dependency_suffix: File name suffix of dependency-declaration files
        excluded_dir_names: Directory names skipped while fingerprinting
    """

    project_root: Path
    cache_level: Union[CacheLevel, str] = CacheLevel.ONLY_DEPS
    home_dir: Optional[Path] = None
    lockfile_name: str = LOCKFILE_NAME
    dependency_suffix: str = DEPENDENCY_FILE_SUFFIX
    excluded_dir_names: Tuple[str, ...] = EXCLUDED_DIR_NAMES

    def __post_init__(self):
        # Accept level names as well as CacheLevel members
        object.__setattr__(self, "cache_level", CacheLevel.parse(self.cache_level))


class CachePathPlanner:
    """Builds the cache PathSet for one run."""

    def __init__(self, config: CacheConfig):
        self.config = config
        self.project_root = Path(config.project_root).resolve()
        self.builder = DependencyLockfileBuilder(
            self.project_root,
            lockfile_name=config.lockfile_name,
            suffix=config.dependency_suffix,
            excluded_dirs=config.excluded_dir_names,
        )

    def find_build_output_dirs(self) -> List[Path]:
        """
        Find every build output and Gradle metadata directory in the project.

        The project root itself counts when it carries one of those names.
        Matched directories are still descended into, so nested module
        ``build`` directories are found as well.

        Raises:
            OSError: If the tree walk fails
        """
        found = []
        if self.project_root.name in BUILD_OUTPUT_DIR_NAMES:
            found.append(self.project_root)
        for dirpath, dirnames, _filenames in walk_tree(self.project_root):
            for name in dirnames:
                if name in BUILD_OUTPUT_DIR_NAMES:
                    found.append(dirpath / name)
        return found

    def plan(self) -> CachePlan:
        """
        Plan the cache paths for the configured cache level.

        Returns:
            Enabled CachePlan with the complete PathSet, or a disabled plan
        """
        level = self.config.cache_level

        if level is CacheLevel.NONE:
            return CachePlan.disabled("cache level is none")

        try:
            home_dir = self.config.home_dir or get_user_home_dir()
        except DirectoryError as e:
            logger.warning(f"Cache collection skipped: {e}")
            return CachePlan.disabled(str(e))

        logger.info("Generate dependencies map...")
        try:
            lockfile = self.builder.build()
        except LockfileError as e:
            logger.warning(f"Dependency map generation skipped: {e}")
            return CachePlan.disabled(str(e))

        includes: List[IncludeEntry] = [
            PathMapping(store, lockfile.path)
            for store in get_dependency_store_dirs(home_dir)
        ]

        if level is CacheLevel.ALL:
            includes.append(PathMapping(get_build_cache_dir(home_dir), lockfile.path))
            try:
                includes.extend(self.find_build_output_dirs())
            except OSError as e:
                logger.warning(
                    f"Cache collection skipped: failed to determine cache paths: {e}"
                )
                return CachePlan.disabled(f"failed to determine cache paths: {e}")

        path_set = PathSet(includes=includes, excludes=list(EXCLUDE_PATTERNS))
        logger.debug(
            f"Planned {len(path_set.includes)} include and "
            f"{len(path_set.excludes)} exclude paths"
        )
        return CachePlan(path_set=path_set, lockfile_path=lockfile.path)
