"""
Pytest configuration and shared fixtures for gradlestep tests.
"""

import pytest
import tempfile
from pathlib import Path
from typing import Generator

# Import test fixtures to make them available to all tests
# These imports register the fixtures with pytest's fixture discovery system
# ruff: noqa: F401
from tests.fixtures.projects import (
    minimal_gradle_project,
    android_gradle_project,
)


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def isolated_home(temp_dir: Path, monkeypatch) -> Path:
    """Create isolated home directory for tests."""
    fake_home = temp_dir / "home"
    fake_home.mkdir()

    monkeypatch.setenv("HOME", str(fake_home))
    monkeypatch.setenv("USERPROFILE", str(fake_home))

    return fake_home


@pytest.fixture
def gradlew(temp_dir: Path) -> Path:
    """Create a fake Gradle wrapper script."""
    wrapper = temp_dir / "gradlew"
    wrapper.write_text("#!/bin/sh\nexit 0\n")
    return wrapper
