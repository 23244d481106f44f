"""
Test command implementation.

Runs the unit test tasks through the Gradle wrapper, collects Gradle caches
and exports the test result. Cache collection happens whether or not the
tests pass; only the test outcome decides the exit code.
"""

import logging

from gradlestep.caching.collector import collect_caches, create_collector
from gradlestep.caching.planner import CacheLevel
from gradlestep.cli.utils import export_test_result, load_step_config, print_error
from gradlestep.config.parser import StepConfig, log_config
from gradlestep.core.exceptions import ConfigError, GradleTaskError
from gradlestep.gradle.runner import make_executable, run_gradle_task

logger = logging.getLogger(__name__)


def _collect(config: StepConfig) -> None:
    if config.cache_level is CacheLevel.NONE:
        return

    logger.info("Collecting gradle caches...")
    collector = create_collector(config.cache.collector, config.manifest_path)
    collect_caches(config.cache_config(), collector)
    logger.info("Done")


def run(args) -> int:
    """
    Run the test command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if the tests passed)
    """
    try:
        config = load_step_config(args)
    except ConfigError as e:
        print_error(f"Issue with input: {e}", e.explanation)
        return 1

    log_config(config)

    try:
        make_executable(config.gradlew_path)
    except GradleTaskError as e:
        print_error(str(e))
        return 1

    logger.info("Running gradle task...")
    succeeded = True
    try:
        run_gradle_task(
            config.gradlew_path,
            config.unit_test_tasks,
            config.unit_test_flags,
            build_file=config.gradle_file,
            cwd=config.project_root,
        )
    except GradleTaskError as e:
        logger.error(f"Gradle task failed, error: {e}")
        succeeded = False

    _collect(config)
    export_test_result(succeeded)

    return 0 if succeeded else 1
