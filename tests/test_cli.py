"""Tests for the systematic CLI entry point."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from systematic.cli import main
from systematic.sync.models import CheckSummary
from tests.conftest import AGENT_KEY, make_definition, make_manifest_data


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    for name in ("SYSTEMATIC_MANIFEST", "SYSTEMATIC_AGENT_MODE", "GITHUB_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def _run(*argv: str) -> None:
    with patch("sys.argv", ["systematic", *argv]):
        main()


class TestConvert:
    def test_converts_agent(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        path = tmp_path / "agent.md"
        path.write_text("---\nname: reviewer\n---\nUse the Task tool\n")
        _run("convert", "agent", str(path))
        out = capsys.readouterr().out
        assert "mode: subagent" in out
        assert "delegate_task tool" in out

    def test_mode_and_skip_body(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        path = tmp_path / "agent.md"
        path.write_text("---\nname: reviewer\n---\nUse the Task tool\n")
        _run("convert", "agent", str(path), "--mode", "primary", "--skip-body")
        out = capsys.readouterr().out
        assert "mode: primary" in out
        assert "Use the Task tool" in out

    def test_missing_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        with pytest.raises(SystemExit) as exc_info:
            _run("convert", "skill", str(tmp_path / "missing.md"))
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().err

    def test_rejects_unknown_kind(self, tmp_path: Path):
        with pytest.raises(SystemExit) as exc_info:
            _run("convert", "plugin", str(tmp_path / "x.md"))
        assert exc_info.value.code == 2


class TestCheckUpstream:
    def test_prints_summary_and_exits_with_code(self, capsys: pytest.CaptureFixture[str]):
        result = (CheckSummary(hash_changes=[AGENT_KEY]), 1)
        with patch("systematic.sync.check.run_upstream_check", new=AsyncMock(return_value=result)) as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                _run("check-upstream", "--manifest", "custom.json", "--source", "other")
        assert exc_info.value.code == 1
        config = mock_run.call_args.args[0]
        assert config.manifest_path == "custom.json"
        assert config.upstream_source == "other"
        assert json.loads(capsys.readouterr().out)["hash_changes"] == [AGENT_KEY]

    def test_unexpected_failure_exits_2(self, capsys: pytest.CaptureFixture[str]):
        failing = AsyncMock(side_effect=RuntimeError("boom"))
        with patch("systematic.sync.check.run_upstream_check", new=failing):
            with pytest.raises(SystemExit) as exc_info:
                _run("check-upstream")
        assert exc_info.value.code == 2
        assert "boom" in capsys.readouterr().err


class TestManifestCommand:
    def test_validate_valid(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        path = tmp_path / "sync-manifest.json"
        path.write_text(json.dumps(make_manifest_data()))
        _run("manifest", "validate", "--manifest", str(path))
        assert "Valid" in capsys.readouterr().out

    def test_validate_invalid(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        path = tmp_path / "sync-manifest.json"
        path.write_text(json.dumps({"sources": {}}))
        with pytest.raises(SystemExit) as exc_info:
            _run("manifest", "validate", "--manifest", str(path))
        assert exc_info.value.code == 1
        assert "schema validation" in capsys.readouterr().err

    def test_validate_uses_default_path(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        (tmp_path / "sync-manifest.json").write_text(json.dumps(make_manifest_data()))
        _run("manifest", "validate")
        assert "Valid" in capsys.readouterr().out

    def test_stale(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        data = make_manifest_data({AGENT_KEY: make_definition(), "commands/plan": make_definition()})
        (tmp_path / "sync-manifest.json").write_text(json.dumps(data))
        (tmp_path / "commands").mkdir()
        (tmp_path / "commands" / "plan.md").write_text("x")
        _run("manifest", "stale", "--root", str(tmp_path))
        assert capsys.readouterr().out.splitlines() == [AGENT_KEY]

    def test_stale_without_manifest(self, capsys: pytest.CaptureFixture[str]):
        with pytest.raises(SystemExit) as exc_info:
            _run("manifest", "stale")
        assert exc_info.value.code == 1

    def test_requires_action(self, capsys: pytest.CaptureFixture[str]):
        with pytest.raises(SystemExit) as exc_info:
            _run("manifest")
        assert exc_info.value.code == 1


class TestConfigCommand:
    def test_show_hides_token(self, monkeypatch, capsys: pytest.CaptureFixture[str]):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_secret")
        _run("config")
        out = capsys.readouterr().out
        assert "ghp_secret" not in out
        assert json.loads(out)["github_token"] == "set"

    def test_path(self, capsys: pytest.CaptureFixture[str]):
        _run("config", "path")
        out = capsys.readouterr().out
        assert ".opencode" in out
        assert "systematic.json" in out


def test_no_command_prints_help(capsys: pytest.CaptureFixture[str]):
    with pytest.raises(SystemExit) as exc_info:
        _run()
    assert exc_info.value.code == 1
    assert "usage" in capsys.readouterr().out.lower()
