"""
Gradle wrapper integration for gradlestep.
"""

from .runner import (
    build_gradle_command,
    make_executable,
    run_gradle_task,
)

__all__ = [
    "build_gradle_command",
    "make_executable",
    "run_gradle_task",
]
