"""
Cache collectors: the hand-off point between cache planning and storage.

A collector accumulates include and exclude instructions and commits them in
one step. What happens on commit (writing a manifest, registering step
outputs) is up to the concrete collector; uploading or restoring the cache
itself is done by a later CI step.

Usage:
    from gradlestep.caching.collector import ManifestCacheCollector, collect_caches

    collector = ManifestCacheCollector(Path("deploy/cache-paths.yml"))
    collect_caches(cache_config, collector)
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Mapping, Optional

import yaml

from gradlestep.caching.planner import CacheConfig, CachePathPlanner, CachePlan
from gradlestep.core.envman import export_env
from gradlestep.core.exceptions import CacheCommitError, StepOutputError
from gradlestep.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

CACHE_INCLUDE_PATHS_KEY = "BITRISE_CACHE_INCLUDE_PATHS"
CACHE_EXCLUDE_PATHS_KEY = "BITRISE_CACHE_EXCLUDE_PATHS"


def _split_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


class CacheCollector(ABC):
    """
    Base class for cache collectors.

    ``include_path`` takes newline-separated entries, each either a plain path
    or a ``source -> key`` mapping. ``exclude_path`` takes newline-separated
    globs, optionally negated with a leading ``!``.
    """

    def __init__(self):
        self.include_paths: List[str] = []
        self.exclude_paths: List[str] = []

    def include_path(self, text: str) -> None:
        self.include_paths.extend(_split_lines(text))

    def exclude_path(self, text: str) -> None:
        self.exclude_paths.extend(_split_lines(text))

    @abstractmethod
    def commit(self) -> None:
        """
        Persist the accumulated paths.

        Raises:
            CacheCommitError: If the paths could not be committed
        """
        pass


class ManifestCacheCollector(CacheCollector):
    """Writes the accumulated paths to a YAML manifest file."""

    def __init__(self, manifest_path: Path):
        super().__init__()
        self.manifest_path = Path(manifest_path)

    def commit(self) -> None:
        data = {
            "include_paths": self.include_paths,
            "exclude_paths": self.exclude_paths,
        }
        content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)

        try:
            atomic_write(self.manifest_path, content)
        except OSError as e:
            raise CacheCommitError(
                f"Failed to write cache manifest {self.manifest_path}: {e}"
            ) from e

        logger.info(f"Cache manifest saved: {self.manifest_path}")


class EnvmanCacheCollector(CacheCollector):
    """
    Registers the accumulated paths as CI step outputs.

    Paths already registered by earlier steps are kept; new entries are
    appended after them and duplicates are dropped.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        exporter: Callable[[str, str], None] = export_env,
    ):
        super().__init__()
        self.environ = os.environ if environ is None else environ
        self.exporter = exporter

    def _merge(self, key: str, new_paths: List[str]) -> str:
        merged = _split_lines(self.environ.get(key, ""))
        for path in new_paths:
            if path not in merged:
                merged.append(path)
        return "\n".join(merged)

    def commit(self) -> None:
        """
        Export the merged exclude and include values.

        Excludes are exported first: if the include export then fails, no
        include is left registered without its excludes.
        """
        outputs = [
            (CACHE_EXCLUDE_PATHS_KEY, self._merge(CACHE_EXCLUDE_PATHS_KEY, self.exclude_paths)),
            (CACHE_INCLUDE_PATHS_KEY, self._merge(CACHE_INCLUDE_PATHS_KEY, self.include_paths)),
        ]
        for key, value in outputs:
            try:
                self.exporter(key, value)
            except StepOutputError as e:
                raise CacheCommitError(f"Failed to export {key}: {e}") from e


COLLECTORS = ("manifest", "envman")


def create_collector(kind: str, manifest_path: Optional[Path] = None) -> CacheCollector:
    """
    Create a cache collector by name.

    Args:
        kind: 'manifest' or 'envman'
        manifest_path: Manifest location (required for 'manifest')

    Raises:
        ValueError: If kind is unknown or manifest_path is missing
    """
    if kind == "manifest":
        if manifest_path is None:
            raise ValueError("manifest collector requires a manifest path")
        return ManifestCacheCollector(manifest_path)
    if kind == "envman":
        return EnvmanCacheCollector()
    raise ValueError(f"Unknown cache collector: {kind} (allowed: {', '.join(COLLECTORS)})")


def collect_caches(config: CacheConfig, collector: CacheCollector) -> CachePlan:
    """
    Plan cache paths and commit them to a collector.

    Cache collection is best effort: every failure is logged as a warning
    and nothing here raises.

    Returns:
        The plan; ``plan.enabled`` is False when nothing was committed
    """
    plan = CachePathPlanner(config).plan()

    if not plan.enabled:
        logger.debug(f"Cache collection disabled: {plan.reason}")
        return plan

    collector.include_path(plan.path_set.include_text())
    collector.exclude_path(plan.path_set.exclude_text())

    try:
        collector.commit()
    except CacheCommitError as e:
        logger.warning(f"Cache collection skipped: failed to commit cache paths: {e}")
        return CachePlan.disabled(str(e))

    return plan
