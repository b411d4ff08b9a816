"""Tests for the skript-profiler command line."""

import json

import pytest
from typer.testing import CliRunner

from skript_profiler.cli import app

runner = CliRunner()


@pytest.fixture
def scripts_dir(tmp_path, shop_lines):
    root = tmp_path / "scripts"
    root.mkdir()
    (root / "shop.sk").write_text("\n".join(shop_lines) + "\n", encoding="utf-8")
    return root


@pytest.fixture
def trace_file(tmp_path, scripts_dir):
    script = str((scripts_dir / "shop.sk").resolve())
    spans = [{"file": script, "line": 7, "kind": "loop", "duration_ms": 0.5}] * 1001
    spans.append(
        {"file": script, "line": 5, "kind": "event", "name": "on join", "duration_ms": 260}
    )
    path = tmp_path / "spans.jsonl"
    path.write_text("\n".join(json.dumps(span) for span in spans) + "\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)


class TestScan:
    def test_table(self, scripts_dir):
        result = runner.invoke(app, ["scan", str(scripts_dir)])
        assert result.exit_code == 0
        assert "shop.sk" in result.output

    def test_labels(self, scripts_dir):
        result = runner.invoke(app, ["scan", str(scripts_dir), "--labels"])
        assert result.exit_code == 0
        assert "Event: join" in result.output
        assert "Wait: 3 seconds" in result.output

    def test_json(self, scripts_dir):
        result = runner.invoke(app, ["scan", str(scripts_dir), "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data[0]["events"] == 1
        assert data[0]["loops"] == 1
        assert data[0]["labels"]["7"] == ["Loop"]

    def test_empty_folder(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(app, ["scan", str(empty)])
        assert result.exit_code == 0
        assert "No .sk scripts found." in result.output

    def test_unknown_format_is_rejected(self, scripts_dir):
        result = runner.invoke(app, ["scan", str(scripts_dir), "--format", "xml"])
        assert result.exit_code == 2
        assert "Invalid value" in result.output

    def test_missing_folder(self, tmp_path):
        result = runner.invoke(app, ["scan", str(tmp_path / "missing")])
        assert result.exit_code != 0


class TestReport:
    def test_plain_report(self, scripts_dir, trace_file):
        result = runner.invoke(
            app, ["report", str(scripts_dir), "--trace", str(trace_file), "--format", "plain"]
        )
        assert result.exit_code == 0
        assert "SKRIPT PROFILER REPORT" in result.output
        assert "[CRITICAL] Slow Event Execution" in result.output
        assert "[MEDIUM] Inefficient Loop" in result.output

    def test_detailed_rich_report(self, scripts_dir, trace_file):
        result = runner.invoke(
            app, ["report", str(scripts_dir), "-t", str(trace_file), "--detailed"]
        )
        assert result.exit_code == 0
        assert "Detailed Breakdown by Script:" in result.output

    def test_json_report(self, scripts_dir, trace_file):
        result = runner.invoke(
            app,
            ["report", str(scripts_dir), "-t", str(trace_file), "--format", "json", "--quiet"],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [issue["kind"] for issue in data["issues"]] == [
            "slow-event",
            "high-frequency",
            "inefficient-loop",
        ]
        assert data["issues"][0]["severity"] == "critical"

    def test_load_option(self, scripts_dir, trace_file):
        result = runner.invoke(
            app,
            ["report", str(scripts_dir), "-t", str(trace_file), "-f", "plain", "--load", "15"],
        )
        assert result.exit_code == 0
        assert "Current TPS: 15.00" in result.output
        assert "Load Impact Detected" in result.output

    def test_unknown_format_is_rejected(self, scripts_dir, trace_file):
        result = runner.invoke(
            app, ["report", str(scripts_dir), "-t", str(trace_file), "--format", "html"]
        )
        assert result.exit_code == 2
        assert "Invalid value" in result.output
        assert "SKRIPT PROFILER REPORT" not in result.output

    def test_format_is_case_insensitive(self, scripts_dir, trace_file):
        result = runner.invoke(
            app, ["report", str(scripts_dir), "-t", str(trace_file), "-f", "PLAIN"]
        )
        assert result.exit_code == 0
        assert "[CRITICAL] Slow Event Execution" in result.output

    def test_log_file(self, scripts_dir, trace_file, tmp_path):
        log_file = tmp_path / "run.log"
        result = runner.invoke(
            app,
            [
                "report",
                str(scripts_dir),
                "-t",
                str(trace_file),
                "-f",
                "plain",
                "--quiet",
                "--log-file",
                str(log_file),
            ],
        )
        assert result.exit_code == 0
        assert "Profiling session started" in log_file.read_text(encoding="utf-8")

    def test_trace_is_required(self, scripts_dir):
        result = runner.invoke(app, ["report", str(scripts_dir)])
        assert result.exit_code != 0

    def test_bad_config_file(self, scripts_dir, trace_file, tmp_path):
        config = tmp_path / "bad.toml"
        config.write_text("[thresholds]\nslow_execution_ms = 0\n", encoding="utf-8")
        result = runner.invoke(
            app, ["report", str(scripts_dir), "-t", str(trace_file), "--config", str(config)]
        )
        assert result.exit_code == 1
        assert "Error:" in result.output
