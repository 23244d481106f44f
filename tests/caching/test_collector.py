"""
Tests for cache collectors and the collect_caches entry point.
"""

import logging
import os
from unittest.mock import Mock, patch

import pytest
import yaml

from gradlestep.caching.collector import (
    CACHE_EXCLUDE_PATHS_KEY,
    CACHE_INCLUDE_PATHS_KEY,
    CacheCollector,
    EnvmanCacheCollector,
    ManifestCacheCollector,
    collect_caches,
    create_collector,
)
from gradlestep.caching.planner import CacheConfig, CacheLevel
from gradlestep.core.exceptions import CacheCommitError, StepOutputError


class RecordingCollector(CacheCollector):
    """Collector that remembers whether commit was called."""

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.committed = False

    def commit(self) -> None:
        if self.fail:
            raise CacheCommitError("storage unavailable")
        self.committed = True


class TestCacheCollector:
    """Test the base collector line handling."""

    def test_splits_newline_joined_text(self):
        """Test include/exclude text is split into entries."""
        collector = RecordingCollector()

        collector.include_path("/a -> /lock\n/b\n")
        collector.exclude_path("*.lock\n\n!*.apk")

        assert collector.include_paths == ["/a -> /lock", "/b"]
        assert collector.exclude_paths == ["*.lock", "!*.apk"]

    def test_accumulates_calls(self):
        """Test repeated calls append."""
        collector = RecordingCollector()

        collector.include_path("/a")
        collector.include_path("/b")

        assert collector.include_paths == ["/a", "/b"]


class TestManifestCacheCollector:
    """Test the YAML manifest collector."""

    def test_commit_writes_manifest(self, temp_dir):
        """Test that commit writes both lists."""
        manifest = temp_dir / "deploy" / "gradle-cache-paths.yml"
        collector = ManifestCacheCollector(manifest)
        collector.include_path("/home/ci/.gradle -> /src/gradle.deps")
        collector.exclude_path("*.lock\n!*.apk")

        collector.commit()

        data = yaml.safe_load(manifest.read_text())
        assert data == {
            "include_paths": ["/home/ci/.gradle -> /src/gradle.deps"],
            "exclude_paths": ["*.lock", "!*.apk"],
        }

    def test_write_failure_raises_commit_error(self, temp_dir):
        """Test that a failed write raises CacheCommitError."""
        collector = ManifestCacheCollector(temp_dir / "manifest.yml")

        with patch(
            "gradlestep.caching.collector.atomic_write",
            side_effect=PermissionError("denied"),
        ):
            with pytest.raises(CacheCommitError, match="Failed to write cache manifest"):
                collector.commit()


class TestEnvmanCacheCollector:
    """Test the envman step output collector."""

    def test_exports_both_keys(self):
        """Test include and exclude paths are exported."""
        exporter = Mock()
        collector = EnvmanCacheCollector(environ={}, exporter=exporter)
        collector.include_path("/a\n/b")
        collector.exclude_path("*.log")

        collector.commit()

        exporter.assert_any_call(CACHE_INCLUDE_PATHS_KEY, "/a\n/b")
        exporter.assert_any_call(CACHE_EXCLUDE_PATHS_KEY, "*.log")

    def test_appends_to_existing_values(self):
        """Test paths registered by earlier steps are kept and deduplicated."""
        exporter = Mock()
        environ = {CACHE_INCLUDE_PATHS_KEY: "/node_modules\n/a"}
        collector = EnvmanCacheCollector(environ=environ, exporter=exporter)
        collector.include_path("/a\n/b")

        collector.commit()

        exporter.assert_any_call(CACHE_INCLUDE_PATHS_KEY, "/node_modules\n/a\n/b")

    def test_export_failure_raises_commit_error(self):
        """Test that envman failures become CacheCommitError."""
        exporter = Mock(side_effect=StepOutputError("envman not found in PATH"))
        collector = EnvmanCacheCollector(environ={}, exporter=exporter)

        with pytest.raises(CacheCommitError, match="envman not found"):
            collector.commit()

    def test_excludes_exported_before_includes(self):
        """Test a failed include export never leaves includes without excludes."""
        exporter = Mock(side_effect=[None, StepOutputError("envman add failed")])
        collector = EnvmanCacheCollector(environ={}, exporter=exporter)
        collector.include_path("/a")
        collector.exclude_path("*.log")

        with pytest.raises(CacheCommitError, match=CACHE_INCLUDE_PATHS_KEY):
            collector.commit()

        assert [c.args for c in exporter.call_args_list] == [
            (CACHE_EXCLUDE_PATHS_KEY, "*.log"),
            (CACHE_INCLUDE_PATHS_KEY, "/a"),
        ]


class TestCreateCollector:
    """Test collector factory."""

    def test_manifest(self, temp_dir):
        collector = create_collector("manifest", temp_dir / "m.yml")
        assert isinstance(collector, ManifestCacheCollector)
        assert collector.manifest_path == temp_dir / "m.yml"

    def test_manifest_requires_path(self):
        with pytest.raises(ValueError, match="manifest path"):
            create_collector("manifest")

    def test_envman(self):
        assert isinstance(create_collector("envman"), EnvmanCacheCollector)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown cache collector"):
            create_collector("s3")


class TestCollectCaches:
    """Test planning + commit."""

    def test_commits_plan(self, android_gradle_project, isolated_home):
        """Test that an enabled plan is handed to the collector once."""
        collector = RecordingCollector()
        config = CacheConfig(
            project_root=android_gradle_project,
            cache_level=CacheLevel.ONLY_DEPS,
            home_dir=isolated_home,
        )

        plan = collect_caches(config, collector)

        assert plan.enabled is True
        assert collector.committed is True
        assert len(collector.include_paths) == 3
        assert all(" -> " in line for line in collector.include_paths)
        assert collector.exclude_paths == plan.path_set.excludes

    def test_level_none_commits_nothing(self, android_gradle_project, isolated_home):
        """Test that nothing reaches the collector for level none."""
        collector = RecordingCollector()
        config = CacheConfig(
            project_root=android_gradle_project,
            cache_level=CacheLevel.NONE,
            home_dir=isolated_home,
        )

        plan = collect_caches(config, collector)

        assert plan.enabled is False
        assert collector.committed is False
        assert collector.include_paths == []

    def test_failed_plan_commits_nothing(self, temp_dir, isolated_home):
        """Test that a disabled plan never reaches the collector."""
        collector = RecordingCollector()
        config = CacheConfig(
            project_root=temp_dir / "missing",
            cache_level=CacheLevel.ALL,
            home_dir=isolated_home,
        )

        plan = collect_caches(config, collector)

        assert plan.enabled is False
        assert collector.committed is False
        assert collector.include_paths == []
        assert collector.exclude_paths == []

    def test_undecodable_build_dir_with_envman(self, minimal_gradle_project, isolated_home):
        """Test that a non-UTF-8 build directory name is exported as raw bytes."""
        module_dir = minimal_gradle_project / os.fsdecode(b"mod\xff")
        (module_dir / "build").mkdir(parents=True)
        config = CacheConfig(
            project_root=minimal_gradle_project,
            cache_level=CacheLevel.ALL,
            home_dir=isolated_home,
        )

        with patch(
            "gradlestep.core.envman.shutil.which", return_value="/usr/bin/envman"
        ), patch("gradlestep.core.envman.subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=0, stderr=b"")
            plan = collect_caches(config, EnvmanCacheCollector(environ={}))

        assert plan.enabled is True
        exported = {c.args[0][-1]: c.kwargs["input"] for c in mock_run.call_args_list}
        assert os.fsencode(module_dir / "build") in exported[CACHE_INCLUDE_PATHS_KEY].split(b"\n")

    def test_commit_failure_is_warning(self, minimal_gradle_project, isolated_home, caplog):
        """Test that a commit failure is logged and not raised."""
        collector = RecordingCollector(fail=True)
        config = CacheConfig(
            project_root=minimal_gradle_project,
            cache_level=CacheLevel.ALL,
            home_dir=isolated_home,
        )

        with caplog.at_level(logging.WARNING):
            plan = collect_caches(config, collector)

        assert plan.enabled is False
        assert "failed to commit cache paths" in caplog.text
