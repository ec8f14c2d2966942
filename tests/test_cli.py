"""Tests for the dnet-tui command line entry point."""

from __future__ import annotations

import io
import json

import pytest

from dnet.tui.app import ExitCode
from dnet.tui.cli import main, parse_args


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.setenv("DNET_CONFIG_DIR", str(tmp_path / "home"))
    monkeypatch.delenv("DNET_TUI_LOG", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.config is None
        assert args.tick_ms is None
        assert args.log_level is None
        assert not args.strict

    def test_options(self) -> None:
        args = parse_args(["--tick-ms", "100", "--log-level", "debug", "--strict", "--config", "c.json"])
        assert args.tick_ms == 100
        assert args.log_level == "debug"
        assert args.strict
        assert args.config == "c.json"

    def test_rejects_unknown_level(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["--log-level", "loud"])


class TestMain:
    def test_invalid_settings_file(self, workdir, capsys) -> None:
        path = workdir / "bad.json"
        path.write_text(json.dumps({"tick_interval_ms": -1}))
        with pytest.raises(SystemExit) as info:
            main(["--config", str(path)])
        assert info.value.code == 2
        assert "tick_interval_ms" in capsys.readouterr().err

    def test_missing_settings_file(self, workdir, capsys) -> None:
        with pytest.raises(SystemExit) as info:
            main(["--config", str(workdir / "missing.json")])
        assert info.value.code == 2
        assert "not found" in capsys.readouterr().err

    def test_bad_tick_interval(self, workdir) -> None:
        with pytest.raises(SystemExit) as info:
            main(["--tick-ms", "0"])
        assert info.value.code == 2

    def test_without_terminal(self, workdir, capsys, monkeypatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO())
        log_file = workdir / "tui.log"
        with pytest.raises(SystemExit) as info:
            main(["--log-file", str(log_file)])
        assert info.value.code == 3
        assert "terminal unavailable" in capsys.readouterr().err
        assert "terminal unavailable" in log_file.read_text()

    def test_overrides_stay_out_of_saved_settings(self, workdir, monkeypatch) -> None:
        path = workdir / "tui.json"
        path.write_text(json.dumps({"tick_interval_ms": 300}))
        seen: dict[str, object] = {}

        class FinishedApp:
            error = None

            def run(self) -> ExitCode:
                return ExitCode.OK

        def fake_build_demo(settings, settings_path=None, mailbox=None, runtime=None):
            seen.update(settings=settings, runtime=runtime, settings_path=settings_path)
            return FinishedApp()

        monkeypatch.setattr("dnet.tui.windows.build_demo", fake_build_demo)
        argv = ["--config", str(path), "--tick-ms", "40", "--strict",
                "--log-file", str(workdir / "once.log")]
        with pytest.raises(SystemExit) as info:
            main(argv)
        assert info.value.code == 0

        saved, runtime = seen["settings"], seen["runtime"]
        assert (saved.tick_interval_ms, saved.strict_transitions, saved.log_file) == (300, False, None)
        assert (runtime.tick_interval_ms, runtime.strict_transitions) == (40, True)
        assert runtime.log_file == str(workdir / "once.log")
        assert seen["settings_path"] == str(path)
