"""
Shared utilities for CLI commands.

Provides common functionality used across CLI commands to ensure
consistent configuration handling and output.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from gradlestep.caching.planner import CachePlan
from gradlestep.config.parser import (
    StepConfig,
    apply_overrides,
    load_config,
    validate_config,
)
from gradlestep.core.envman import export_env
from gradlestep.core.exceptions import StepOutputError

logger = logging.getLogger(__name__)

TEST_RESULT_KEY = "BITRISE_GRADLE_TEST_RESULT"


# ============================================================================
# Configuration Management
# ============================================================================


def resolve_project_root(path: Optional[Path] = None) -> Path:
    """
    Resolve project root directory.

    Args:
        path: Optional path (defaults to current directory)

    Returns:
        Resolved absolute path
    """
    if path is None:
        path = Path.cwd()
    return Path(path).resolve()


def load_step_config(args, require_gradle: bool = True) -> StepConfig:
    """
    Load, override and validate the step configuration for a command.

    Args:
        args: Parsed arguments; any of gradlew_path, gradle_file, tasks,
            flags, deploy_dir, cache_level, collector, manifest may be set
        require_gradle: Validate the Gradle inputs as well

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the configuration is invalid
    """
    project_root = resolve_project_root(getattr(args, "project_root", None))
    config = load_config(project_root, getattr(args, "config", None))

    config = apply_overrides(
        config,
        gradlew_path=getattr(args, "gradlew_path", None),
        gradle_file=getattr(args, "gradle_file", None),
        unit_test_tasks=getattr(args, "tasks", None),
        unit_test_flags=getattr(args, "flags", None),
        deploy_dir=getattr(args, "deploy_dir", None),
        cache_level=getattr(args, "cache_level", None),
        collector=getattr(args, "collector", None),
        manifest=getattr(args, "manifest", None),
    )

    validate_config(config, require_gradle=require_gradle)
    return config


# ============================================================================
# Step Outputs
# ============================================================================


def export_test_result(succeeded: bool) -> None:
    """Export the test outcome; failures are logged, never raised."""
    value = "succeeded" if succeeded else "failed"
    try:
        export_env(TEST_RESULT_KEY, value)
    except StepOutputError as e:
        logger.warning(f"Failed to export environment: {TEST_RESULT_KEY}, error: {e}")


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(details, file=sys.stderr)


def format_plan(plan: CachePlan) -> str:
    """Format a cache plan for display."""
    if not plan.enabled:
        return f"Cache collection disabled: {plan.reason}"

    lines = ["Include paths:"]
    lines.extend(f"  {entry}" for entry in plan.path_set.includes)
    lines.append("Exclude paths:")
    lines.extend(f"  {pattern}" for pattern in plan.path_set.excludes)
    return "\n".join(lines)
