"""
Cache command implementation.

Plans and commits Gradle cache paths without running any Gradle task.
"""

import logging

from gradlestep.caching.collector import collect_caches, create_collector
from gradlestep.caching.planner import CachePathPlanner
from gradlestep.cli.utils import format_plan, load_step_config, print_error
from gradlestep.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the cache command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 unless the configuration is invalid)
    """
    try:
        config = load_step_config(args, require_gradle=False)
    except ConfigError as e:
        print_error(f"Issue with input: {e}", e.explanation)
        return 1

    if args.dry_run:
        plan = CachePathPlanner(config.cache_config()).plan()
        print(format_plan(plan))
        return 0

    collector = create_collector(config.cache.collector, config.manifest_path)
    plan = collect_caches(config.cache_config(), collector)
    print(format_plan(plan))
    return 0
