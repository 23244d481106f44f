"""
Centralized exception hierarchy for gradlestep.

This module defines all custom exceptions used across the codebase
to provide clear exception semantics.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class GradleStepError(Exception):
    """Base exception for all gradlestep errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(GradleStepError):
    """Step configuration is missing or invalid."""

    def __init__(self, message: str, explanation: Optional[str] = None):
        self.explanation = explanation
        super().__init__(message)


# ============================================================================
# Gradle Exceptions
# ============================================================================


class GradleTaskError(GradleStepError):
    """Raised when the Gradle wrapper cannot be launched or the task fails."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        self.returncode = returncode
        super().__init__(message)


# ============================================================================
# Cache Exceptions
# ============================================================================


class CacheError(GradleStepError):
    """Base exception for cache collection errors."""

    pass


class LockfileError(CacheError):
    """Raised when the dependency lockfile cannot be generated or written."""

    pass


class CacheCommitError(CacheError):
    """Raised when a collector fails to commit cache paths."""

    pass


# ============================================================================
# Step Output Exceptions
# ============================================================================


class StepOutputError(GradleStepError):
    """Raised when a step output cannot be exported."""

    pass
