"""
Gradle wrapper invocation.

Builds and runs ``gradlew`` command lines. Tasks and flags are given as
shell-style strings and split with shlex, so quoted arguments survive.
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from gradlestep.core.exceptions import GradleTaskError

logger = logging.getLogger(__name__)

WRAPPER_MODE = 0o770


def make_executable(path: Path) -> None:
    """
    Set the wrapper's permission bits so it can be executed.

    Raises:
        GradleTaskError: If the permissions cannot be changed
    """
    try:
        os.chmod(path, WRAPPER_MODE)
    except OSError as e:
        raise GradleTaskError(
            f"Failed to add executable permission on gradlew file ({path}): {e}"
        ) from e
    logger.debug(f"Set mode {WRAPPER_MODE:o} on {path}")


def build_gradle_command(
    gradlew_path: Path,
    tasks: str,
    flags: str = "",
    build_file: Optional[Path] = None,
) -> List[str]:
    """
    Build the gradlew command line.

    Args:
        gradlew_path: Path to the wrapper script
        tasks: Space separated tasks (e.g. "testDebugUnitTest lint")
        flags: Additional options (e.g. '--stacktrace -Pfoo="a b"')
        build_file: Optional build file passed with --build-file

    Returns:
        Argument list, wrapper first

    Raises:
        GradleTaskError: If tasks or flags cannot be split

    Example:
        >>> build_gradle_command(Path("./gradlew"), "test", "--info")
        ['gradlew', 'test', '--info']
    """
    try:
        task_args = shlex.split(tasks)
        flag_args = shlex.split(flags)
    except ValueError as e:
        raise GradleTaskError(f"Failed to parse gradle arguments: {e}") from e

    cmd = [str(gradlew_path)]
    if build_file is not None:
        cmd.extend(["--build-file", str(build_file)])
    cmd.extend(task_args)
    cmd.extend(flag_args)
    return cmd


def run_gradle_task(
    gradlew_path: Path,
    tasks: str,
    flags: str = "",
    build_file: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> None:
    """
    Run a Gradle task, streaming its output to the console.

    Raises:
        GradleTaskError: If the wrapper cannot be started or exits non-zero
    """
    cmd = build_gradle_command(gradlew_path, tasks, flags, build_file)
    logger.info(f"$ {shlex.join(cmd)}")

    try:
        result = subprocess.run(cmd, cwd=cwd)
    except OSError as e:
        raise GradleTaskError(f"Failed to start gradle: {e}") from e

    if result.returncode != 0:
        raise GradleTaskError(
            f"Gradle task failed with exit code {result.returncode}",
            returncode=result.returncode,
        )
