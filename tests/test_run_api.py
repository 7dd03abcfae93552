from __future__ import annotations

import importlib
from pathlib import Path

import pytest
import uvicorn

SCRIPTS_DIR = Path(__file__).resolve().parents[1] / "scripts"


@pytest.fixture
def launcher(monkeypatch):
    monkeypatch.syspath_prepend(str(SCRIPTS_DIR))
    return importlib.import_module("run_api")


def test_parser_defaults_come_from_environment(monkeypatch, launcher):
    monkeypatch.setenv("TOWNLINK_HOST", "127.0.0.1")
    monkeypatch.setenv("TOWNLINK_PORT", "8123")

    args = launcher.build_parser().parse_args([])

    assert args.host == "127.0.0.1"
    assert args.port == 8123
    assert args.log_level == "info"
    assert args.workers == 1


def test_main_refuses_to_start_without_database_url(monkeypatch, launcher):
    calls = []
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append(kwargs))
    monkeypatch.setattr("sys.argv", ["run_api.py"])

    with pytest.raises(SystemExit) as excinfo:
        launcher.main()

    assert "DATABASE_URL" in str(excinfo.value.code)
    assert calls == []


def test_main_serves_directory_app(monkeypatch, launcher):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: calls.append((target, kwargs)))
    monkeypatch.setattr("sys.argv", ["run_api.py", "--port", "4000", "--log-level", "debug", "--workers", "2"])

    launcher.main()

    target, options = calls[0]
    assert target == "townlink.api:app"
    assert options["port"] == 4000
    assert options["log_level"] == "debug"
    assert options["workers"] == 2
