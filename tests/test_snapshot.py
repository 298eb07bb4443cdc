"""Test full directory snapshots."""

import os

import pytest

from deathcounter.cache import FileCache
from deathcounter.errors import SnapshotError
from deathcounter.snapshot import build_snapshot, canonicalize, qualifies, rebuild

from conftest import write_level


class TestQualifies:
    """Test which paths count as metric files."""

    def test_json_in_directory(self, save_dir):
        assert qualifies(save_dir / "a.json", save_dir)

    def test_other_extension(self, save_dir):
        assert not qualifies(save_dir / "a.txt", save_dir)
        assert not qualifies(save_dir / "a.json.bak", save_dir)

    def test_extension_is_case_sensitive(self, save_dir):
        assert not qualifies(save_dir / "a.JSON", save_dir)

    def test_subdirectory_excluded(self, save_dir):
        assert not qualifies(save_dir / "nested" / "a.json", save_dir)

    def test_custom_extension(self, save_dir):
        assert qualifies(save_dir / "a.dat", save_dir, extension="dat")


class TestBuildSnapshot:
    """Test scanning a directory."""

    def test_sums_well_formed_files(self, save_dir):
        a = write_level(save_dir, "a.json", deaths={"x": 2})
        b = write_level(save_dir, "b.json", runs={"y": 3})
        assert build_snapshot(save_dir) == {a: 2, b: 3}

    def test_omits_malformed_and_foreign_files(self, save_dir):
        good = write_level(save_dir, "good.json", deaths={"x": 1})
        (save_dir / "bad.json").write_text("{oops")
        (save_dir / "notes.txt").write_text('{"deaths": {"x": 9}, "runs": {}}')
        (save_dir / "nested").mkdir()
        write_level(save_dir / "nested", "deep.json", deaths={"x": 50})

        assert build_snapshot(save_dir) == {good: 1}

    def test_empty_directory(self, save_dir):
        assert build_snapshot(save_dir) == {}

    def test_keys_are_canonical(self, tmp_path, save_dir):
        write_level(save_dir, "a.json", deaths={"x": 1})
        indirect = tmp_path / "saves" / ".." / "saves"
        assert list(build_snapshot(indirect)) == [save_dir / "a.json"]

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_outside_directory_excluded(self, tmp_path, save_dir):
        outside = write_level(tmp_path, "outside.json", deaths={"x": 7})
        try:
            (save_dir / "link.json").symlink_to(outside)
        except OSError:
            pytest.skip("cannot create symlinks here")
        assert build_snapshot(save_dir) == {}

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(SnapshotError):
            build_snapshot(tmp_path / "nope")


class TestRebuild:
    """Test replacing cache contents."""

    def test_replaces_stale_entries(self, save_dir):
        cache = FileCache()
        cache.upsert(save_dir / "ghost.json", 100)
        a = write_level(save_dir, "a.json", deaths={"x": 2})

        rebuild(cache, save_dir)

        assert cache.paths() == {a}
        assert cache.total() == 2

    def test_failure_leaves_cache_untouched(self, tmp_path):
        cache = FileCache()
        cache.upsert(tmp_path / "kept.json", 4)
        with pytest.raises(SnapshotError):
            rebuild(cache, tmp_path / "nope")
        assert cache.total() == 4


def test_canonicalize_nonexistent_path(save_dir):
    assert canonicalize(save_dir / "gone.json") == save_dir / "gone.json"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_canonicalize_symlink_loop(save_dir):
    loop = save_dir / "loop.json"
    try:
        loop.symlink_to(loop)
    except OSError:
        pytest.skip("cannot create symlinks here")
    assert canonicalize(loop) == loop
    assert build_snapshot(save_dir) == {}
