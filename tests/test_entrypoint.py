import runpy

import uvicorn

from fastfab.config import Settings, settings


def test_server_address_is_configurable():
    configured = Settings(_env_file=None, HOST="127.0.0.1", PORT=9001)
    assert configured.HOST == "127.0.0.1"
    assert configured.PORT == 9001


def test_running_main_starts_uvicorn_with_configured_address(monkeypatch):
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

    runpy.run_module("fastfab.main", run_name="__main__")

    assert len(calls) == 1
    args, kwargs = calls[0]
    assert args == ("fastfab.main:app",)
    assert kwargs["host"] == settings.HOST
    assert kwargs["port"] == settings.PORT
    assert kwargs["log_level"] == settings.LOG_LEVEL.lower()
