"""
Step output export through the ``envman`` CLI.

CI steps publish outputs for later steps by handing key/value pairs to
``envman``, which persists them in the build's environment store.
"""

import logging
import shutil
import subprocess

from gradlestep.core.exceptions import StepOutputError

logger = logging.getLogger(__name__)

ENVMAN_EXECUTABLE = "envman"


def export_env(key: str, value: str, timeout: int = 30) -> None:
    """
    Export a step output with ``envman add --key KEY``.

    The value is passed on stdin so multi-line values survive unchanged.
    Paths that are not valid UTF-8 are passed through byte for byte.

    Args:
        key: Output name (e.g. BITRISE_GRADLE_TEST_RESULT)
        value: Output value
        timeout: Seconds to wait for envman

    Raises:
        StepOutputError: If envman is missing or exits with an error

    Example:
        >>> export_env("BITRISE_GRADLE_TEST_RESULT", "succeeded")
    """
    envman = shutil.which(ENVMAN_EXECUTABLE)
    if not envman:
        raise StepOutputError(f"{ENVMAN_EXECUTABLE} not found in PATH")

    try:
        result = subprocess.run(
            [envman, "add", "--key", key],
            input=value.encode("utf-8", "surrogateescape"),
            capture_output=True,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise StepOutputError(f"Failed to run {ENVMAN_EXECUTABLE}: {e}") from e

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", "replace").strip()
        raise StepOutputError(
            f"{ENVMAN_EXECUTABLE} add --key {key} failed "
            f"(exit {result.returncode}): {stderr}"
        )

    logger.debug(f"Exported {key}")
