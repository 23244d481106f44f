"""Test fixtures for gradlestep tests.

This package provides reusable pytest fixtures for testing gradlestep components.

- projects: Gradle project trees (single module, multi-module Android)

Import fixtures in your tests using:
    from tests.fixtures.projects import minimal_gradle_project
"""

__all__ = [
    "projects",
]
