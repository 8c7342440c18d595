"""Tests for the on-disk artifact cache."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from kiln import CacheStore, CacheWriteError, ErrorCode
from kiln.cache_store import mtime
from kiln.utils.constants import ARTIFACT_SUFFIX, MISSING_MTIME


@pytest.fixture
def store(cache_dir: Path) -> CacheStore:
    return CacheStore(cache_dir)


def _touch(path: Path, seconds: float) -> None:
    os.utime(path, (seconds, seconds))


class TestEnsureDirectory:
    """Cache directory creation."""

    def test_creates_missing_directory(self, store: CacheStore, cache_dir: Path) -> None:
        assert not cache_dir.exists()
        assert store.ensure_directory() == cache_dir
        assert cache_dir.is_dir()

    def test_idempotent(self, store: CacheStore, cache_dir: Path) -> None:
        store.ensure_directory()
        (cache_dir / "keep.py").write_text("x = 1\n")
        store.ensure_directory()
        assert (cache_dir / "keep.py").read_text() == "x = 1\n"

    def test_creates_nested_directory(self, tmp_path: Path) -> None:
        store = CacheStore(tmp_path / "a" / "b" / "c")
        store.ensure_directory()
        assert (tmp_path / "a" / "b" / "c").is_dir()


class TestArtifactPath:
    """Deterministic, collision-free artifact naming."""

    def test_deterministic(self, store: CacheStore, write_template) -> None:
        source = write_template("page.html", "hi")
        assert store.artifact_path_for(source) == store.artifact_path_for(source)

    def test_inside_cache_directory(self, store: CacheStore, cache_dir: Path, write_template) -> None:
        artifact = store.artifact_path_for(write_template("page.html", "hi"))
        assert artifact.parent == cache_dir
        assert artifact.name.endswith(ARTIFACT_SUFFIX)

    def test_name_contains_flattened_path(self, store: CacheStore, write_template) -> None:
        source = write_template("pages/about.html", "hi")
        artifact = store.artifact_path_for(source)
        assert "pages_about.html" in artifact.name
        assert "/" not in artifact.name

    def test_equivalent_spellings_share_artifact(
        self, store: CacheStore, template_dir: Path, write_template
    ) -> None:
        write_template("page.html", "hi")
        write_template("pages/about.html", "hi")
        direct = store.artifact_path_for(template_dir / "page.html")
        dotted = store.artifact_path_for(f"{template_dir}/pages/../page.html")
        assert direct == dotted

    def test_flattening_collisions_are_distinct(self, store: CacheStore) -> None:
        """``a_b/c`` and ``a/b_c`` flatten to the same stem but differ."""
        first = store.artifact_path_for("/srv/a_b/c.html")
        second = store.artifact_path_for("/srv/a/b_c.html")
        assert first != second

    def test_case_only_difference_is_distinct(self, store: CacheStore) -> None:
        first = store.artifact_path_for("/srv/templates/Page.html")
        second = store.artifact_path_for("/srv/templates/page.html")
        assert first.name.lower() != second.name.lower()

    def test_long_paths_keep_short_names(self, store: CacheStore) -> None:
        source = "/srv/" + "/".join(["segment" * 5] * 30) + "/page.html"
        artifact = store.artifact_path_for(source)
        assert len(artifact.name) < 255
        assert "page.html" in artifact.name


class TestIsStale:
    """mtime-based freshness."""

    def test_missing_source(self, store: CacheStore, tmp_path: Path) -> None:
        artifact = tmp_path / "artifact.py"
        artifact.write_text("")
        assert store.is_stale(tmp_path / "missing.html", artifact)

    def test_cache_disabled(self, store: CacheStore, write_template, tmp_path: Path) -> None:
        source = write_template("page.html", "hi")
        artifact = tmp_path / "artifact.py"
        artifact.write_text("")
        _touch(source, 1_000)
        _touch(artifact, 2_000)
        assert store.is_stale(source, artifact, cache_enabled=False)

    def test_missing_artifact(self, store: CacheStore, write_template, tmp_path: Path) -> None:
        source = write_template("page.html", "hi")
        assert store.is_stale(source, tmp_path / "nope.py")

    def test_artifact_older_than_source(
        self, store: CacheStore, write_template, tmp_path: Path
    ) -> None:
        source = write_template("page.html", "hi")
        artifact = tmp_path / "artifact.py"
        artifact.write_text("")
        _touch(artifact, 1_000)
        _touch(source, 2_000)
        assert store.is_stale(source, artifact)

    def test_artifact_newer_than_source(
        self, store: CacheStore, write_template, tmp_path: Path
    ) -> None:
        source = write_template("page.html", "hi")
        artifact = tmp_path / "artifact.py"
        artifact.write_text("")
        _touch(source, 1_000)
        _touch(artifact, 2_000)
        assert not store.is_stale(source, artifact)

    def test_equal_mtimes_are_fresh(self, store: CacheStore, write_template, tmp_path: Path) -> None:
        source = write_template("page.html", "hi")
        artifact = tmp_path / "artifact.py"
        artifact.write_text("")
        _touch(source, 1_500)
        _touch(artifact, 1_500)
        assert not store.is_stale(source, artifact)

    def test_mtime_of_missing_file(self, tmp_path: Path) -> None:
        assert mtime(tmp_path / "missing") == MISSING_MTIME


class TestWriteReadClear:
    """Persisting and removing artifacts."""

    def test_write_then_read(self, store: CacheStore) -> None:
        artifact = store.artifact_path_for("/srv/page.html")
        assert store.write(artifact, "_write('hi')\n") == artifact
        assert store.read(artifact) == "_write('hi')\n"

    def test_write_replaces_existing(self, store: CacheStore) -> None:
        artifact = store.artifact_path_for("/srv/page.html")
        store.write(artifact, "old\n")
        store.write(artifact, "new\n")
        assert store.read(artifact) == "new\n"

    def test_write_leaves_no_temporary_files(self, store: CacheStore, cache_dir: Path) -> None:
        store.write(store.artifact_path_for("/srv/page.html"), "x = 1\n")
        assert [p.name for p in cache_dir.iterdir() if p.name.startswith(".kiln-")] == []

    def test_write_creates_directory(self, store: CacheStore, cache_dir: Path) -> None:
        store.write(store.artifact_path_for("/srv/page.html"), "x = 1\n")
        assert cache_dir.is_dir()

    def test_write_failure_raises_cache_write_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-directory"
        blocker.write_text("")
        store = CacheStore(blocker)
        with pytest.raises(CacheWriteError) as exc_info:
            store.write(blocker / "artifact.py", "x = 1\n")
        assert exc_info.value.code is ErrorCode.CACHE_WRITE
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_clear_removes_artifacts(self, store: CacheStore, cache_dir: Path) -> None:
        store.write(store.artifact_path_for("/srv/a.html"), "a = 1\n")
        store.write(store.artifact_path_for("/srv/b.html"), "b = 1\n")
        (cache_dir / "notes.txt").write_text("keep")
        assert store.clear() == 2
        assert [p.name for p in cache_dir.iterdir()] == ["notes.txt"]

    def test_clear_empty_or_missing_directory(self, store: CacheStore, cache_dir: Path) -> None:
        assert store.clear() == 0
        assert cache_dir.is_dir()
        assert store.clear() == 0

    def test_stats(self, store: CacheStore) -> None:
        assert store.stats() == {"file_count": 0, "total_bytes": 0}
        store.write(store.artifact_path_for("/srv/a.html"), "abcd")
        assert store.stats() == {"file_count": 1, "total_bytes": 4}
