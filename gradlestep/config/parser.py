"""YAML configuration parser for gradlestep.

This module loads the optional gradlestep.yaml file, merges command-line
overrides into it and validates the result before the step runs.

Example gradlestep.yaml:

    gradlew_path: ./gradlew
    gradle_file: app/build.gradle
    unit_test_tasks: test
    unit_test_flags: --stacktrace
    cache:
      level: only-deps
      collector: manifest
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from gradlestep.caching.collector import COLLECTORS
from gradlestep.caching.planner import CacheConfig, CacheLevel
from gradlestep.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "gradlestep.yaml"
DEFAULT_MANIFEST_NAME = "gradle-cache-paths.yml"

GRADLEW_EXPLANATION = """
Using a Gradle Wrapper (gradlew) is required, as the wrapper is what makes sure
that the right Gradle version is installed and used for the build.

You can find more information about the Gradle Wrapper (gradlew),
and about how you can generate one (if you would not have one already)
in the official guide at: https://docs.gradle.org/current/userguide/gradle_wrapper.html"""


@dataclass
class CachingConfig:
    """Cache collection configuration."""

    level: str = "only-deps"  # 'all', 'only-deps', 'none'
    collector: str = "manifest"  # 'manifest', 'envman'
    manifest_path: Optional[Path] = None


@dataclass
class StepConfig:
    """Complete step configuration."""

    project_root: Path
    gradlew_path: Optional[Path] = None
    gradle_file: Optional[Path] = None
    unit_test_tasks: str = ""
    unit_test_flags: str = ""
    deploy_dir: Optional[Path] = None
    cache: CachingConfig = field(default_factory=CachingConfig)

    @property
    def cache_level(self) -> CacheLevel:
        return CacheLevel.parse(self.cache.level)

    @property
    def manifest_path(self) -> Path:
        """Where the manifest collector writes, defaulting to the deploy dir."""
        if self.cache.manifest_path is not None:
            return self.cache.manifest_path
        base = self.deploy_dir or (self.project_root / ".gradlestep")
        return base / DEFAULT_MANIFEST_NAME

    def cache_config(self) -> CacheConfig:
        return CacheConfig(project_root=self.project_root, cache_level=self.cache_level)


def _resolve(project_root: Path, value: Any) -> Optional[Path]:
    if value is None or value == "":
        return None
    path = Path(str(value)).expanduser()
    if not path.is_absolute():
        path = project_root / path
    return path


def load_config(project_root: Path, config_path: Optional[Path] = None) -> StepConfig:
    """
    Load step configuration.

    Args:
        project_root: Project root; relative paths in the file resolve against it
        config_path: Explicit config file. If omitted, gradlestep.yaml in the
            project root is used when it exists.

    Returns:
        Parsed configuration (defaults only if no file is found)

    Raises:
        ConfigError: If an explicit file is missing or any file is malformed
    """
    project_root = Path(project_root).resolve()

    if config_path is None:
        config_path = project_root / DEFAULT_CONFIG_NAME
        if not config_path.exists():
            logger.debug(f"Config file not found (optional): {config_path}")
            return StepConfig(project_root=project_root)
    elif not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}")

    if data is None:
        return StepConfig(project_root=project_root)
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {config_path} must be a mapping")

    return _parse(data, project_root)


def _parse(data: Dict[str, Any], project_root: Path) -> StepConfig:
    """Parse configuration data."""
    cache_data = data.get("cache") or {}
    if not isinstance(cache_data, dict):
        raise ConfigError("cache must be a mapping")

    cache = CachingConfig(
        level=str(cache_data.get("level", CachingConfig.level)),
        collector=str(cache_data.get("collector", CachingConfig.collector)),
        manifest_path=_resolve(project_root, cache_data.get("manifest")),
    )

    return StepConfig(
        project_root=project_root,
        gradlew_path=_resolve(project_root, data.get("gradlew_path")),
        gradle_file=_resolve(project_root, data.get("gradle_file")),
        unit_test_tasks=str(data.get("unit_test_tasks") or ""),
        unit_test_flags=str(data.get("unit_test_flags") or ""),
        deploy_dir=_resolve(project_root, data.get("deploy_dir")),
        cache=cache,
    )


def apply_overrides(config: StepConfig, **overrides: Any) -> StepConfig:
    """
    Return a copy of config with command-line overrides applied.

    ``None`` values are ignored. Keys ``cache_level``, ``collector`` and
    ``manifest`` update the cache section; path values resolve against the
    project root.
    """
    step_fields: Dict[str, Any] = {}
    cache_fields: Dict[str, Any] = {}

    for key, value in overrides.items():
        if value is None:
            continue
        if key == "cache_level":
            cache_fields["level"] = value
        elif key == "collector":
            cache_fields["collector"] = value
        elif key == "manifest":
            cache_fields["manifest_path"] = _resolve(config.project_root, value)
        elif key in ("gradlew_path", "gradle_file", "deploy_dir"):
            step_fields[key] = _resolve(config.project_root, value)
        else:
            step_fields[key] = value

    if cache_fields:
        step_fields["cache"] = replace(config.cache, **cache_fields)

    return replace(config, **step_fields)


def validate_config(config: StepConfig, require_gradle: bool = True) -> None:
    """
    Validate step configuration.

    Args:
        config: Configuration to validate
        require_gradle: Check the Gradle inputs (tasks, wrapper, build file)

    Raises:
        ConfigError: On the first problem found. ``explanation`` is set when
            there is more to tell the user than the message.
    """
    if require_gradle:
        if config.gradle_file is not None and not config.gradle_file.exists():
            raise ConfigError(f"GradleFile does not exist at: {config.gradle_file}")

        if not config.unit_test_tasks.strip():
            raise ConfigError("No unit test tasks specified")

        if config.gradlew_path is None:
            raise ConfigError(
                "No gradlew path specified", explanation=GRADLEW_EXPLANATION
            )
        if not config.gradlew_path.exists():
            raise ConfigError(f"GradlewPath does not exist at: {config.gradlew_path}")

    if not config.cache.level.strip():
        raise ConfigError("CacheLevel: required parameter not provided")
    try:
        CacheLevel.parse(config.cache.level)
    except ValueError as e:
        raise ConfigError(f"CacheLevel: {e}")

    if config.cache.collector not in COLLECTORS:
        raise ConfigError(
            f"Unknown cache collector: {config.cache.collector} "
            f"(allowed: {', '.join(COLLECTORS)})"
        )


def log_config(config: StepConfig) -> None:
    """Log the effective configuration."""
    logger.info("Configs:")
    logger.info(f"- GradleFile: {config.gradle_file or ''}")
    logger.info(f"- UnitTestTasks: {config.unit_test_tasks}")
    logger.info(f"- GradlewPath: {config.gradlew_path or ''}")
    logger.info(f"- UnitTestFlags: {config.unit_test_flags}")
    logger.info(f"- DeployDir: {config.deploy_dir or ''}")
    logger.info(f"- CacheLevel: {config.cache.level}")
    logger.info(f"- CacheCollector: {config.cache.collector}")
