"""Common pytest fixtures for the test suite."""

from __future__ import annotations

import json
import sys

import pytest

from notibell.notifications import events
from notibell.utils.config_service import ConfigurationService
from notibell.utils.log_service import LogService, set_log_service

LOG_FUNCTIONS = ["debug", "info", "warning", "error"]


@pytest.fixture
def config_service(tmp_path) -> ConfigurationService:
    """Configuration service backed by files in ``tmp_path``."""
    cfg = {"logging": {"log_dir": str(tmp_path / "logs")}}
    (tmp_path / "config.json").write_text(json.dumps(cfg))
    (tmp_path / "default_config.json").write_text("{}")
    return ConfigurationService(tmp_path / "config.json", tmp_path / "default_config.json")


@pytest.fixture(autouse=True)
def mute_logging(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Silence logging during tests.

    Modules import the logging helpers from ``log_service`` at import time,
    so the names are patched in every loaded ``notibell`` module. A log
    service writing below ``tmp_path`` backs anything that still reaches it
    (``timer`` for instance).
    """
    log_config = ConfigurationService(tmp_path / "log_config.json", tmp_path / "missing.json")
    log_config._config_cache["logging"]["log_dir"] = str(tmp_path / "test_logs")
    service = LogService(log_config)
    set_log_service(service)

    for mod in list(sys.modules.values()):
        mod_name = getattr(mod, "__name__", "")
        if not mod or not mod_name.startswith("notibell."):
            continue
        if mod_name == "notibell.utils.config_service":
            # Keep stdlib logging for config service so validation warnings are emitted
            continue
        for name in LOG_FUNCTIONS:
            if hasattr(mod, name):
                monkeypatch.setattr(mod, name, lambda *a, **k: None, raising=False)

    yield

    service.close()
    set_log_service(None)


@pytest.fixture(autouse=True)
def fresh_event_bus(monkeypatch: pytest.MonkeyPatch) -> None:
    """Every test starts without the global bus."""
    monkeypatch.setattr(events, "_event_bus", None)
