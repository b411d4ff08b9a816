"""Tests for scanning/loader.py - script discovery on disk."""

import pytest

from skript_profiler.exceptions import ScriptReadError
from skript_profiler.scanning.loader import discover_scripts, read_script


@pytest.fixture
def scripts_dir(tmp_path):
    root = tmp_path / "scripts"
    (root / "shops").mkdir(parents=True)
    (root / "join.sk").write_text("on join:\n    send \"hi\" to player\n", encoding="utf-8")
    (root / "shops" / "main.SK").write_text("command /shop:\n", encoding="utf-8")
    (root / "notes.txt").write_text("on join:\n", encoding="utf-8")
    return root


class TestReadScript:
    def test_lines_without_terminators(self, tmp_path):
        path = tmp_path / "a.sk"
        path.write_text("on join:\r\n    stop\n", encoding="utf-8")
        assert read_script(path) == ["on join:", "    stop"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ScriptReadError) as exc_info:
            read_script(tmp_path / "missing.sk")
        assert "missing.sk" in str(exc_info.value)


class TestDiscoverScripts:
    def test_recursive_and_sorted(self, scripts_dir):
        found = list(discover_scripts(scripts_dir))
        names = [path.rsplit("/", 1)[-1] for path, _ in found]
        assert names == ["join.sk", "main.SK"]

    def test_paths_are_absolute(self, scripts_dir):
        path, lines = next(discover_scripts(scripts_dir))
        assert path == str((scripts_dir / "join.sk").resolve())
        assert lines[0] == "on join:"

    def test_custom_extension(self, scripts_dir):
        found = list(discover_scripts(scripts_dir, ".txt"))
        assert len(found) == 1

    def test_missing_root_yields_nothing(self, tmp_path):
        assert list(discover_scripts(tmp_path / "nope")) == []
