"""
Gradle cache collection for gradlestep.

This package decides which Gradle caches are worth persisting between CI runs
and hands them to a cache collector.

Modules:
    lockfile: Fingerprint build scripts into the dependency lockfile
    planner: Turn a cache level into include/exclude path sets
    collector: Commit planned paths (YAML manifest or envman step outputs)
"""

from .lockfile import (
    DependencyLockfile,
    DependencyLockfileBuilder,
)
from .planner import (
    CacheConfig,
    CacheLevel,
    CachePathPlanner,
    CachePlan,
    PathMapping,
    PathSet,
)
from .collector import (
    CacheCollector,
    EnvmanCacheCollector,
    ManifestCacheCollector,
    collect_caches,
    create_collector,
)

__all__ = [
    "DependencyLockfile",
    "DependencyLockfileBuilder",
    "CacheConfig",
    "CacheLevel",
    "CachePathPlanner",
    "CachePlan",
    "PathMapping",
    "PathSet",
    "CacheCollector",
    "EnvmanCacheCollector",
    "ManifestCacheCollector",
    "collect_caches",
    "create_collector",
]
