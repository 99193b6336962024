import logging

from fire_planner.config import DEFAULT_STATE_PATH, configure_logging, load_settings

ENV_VARS = [
    "FIRE_PLANNER_STATE_PATH",
    "FIRE_PLANNER_CURRENCY",
    "FIRE_PLANNER_LOG_LEVEL",
    "FIRE_PLANNER_HOST",
    "FIRE_PLANNER_PORT",
    "FIRE_PLANNER_DEBUG",
]


def _clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_environment(monkeypatch):
    _clear_env(monkeypatch)

    settings = load_settings()

    assert settings.state_path == DEFAULT_STATE_PATH
    assert settings.currency == "INR"
    assert settings.log_level == "INFO"
    assert (settings.host, settings.port, settings.debug) == ("127.0.0.1", 8000, False)


def test_environment_overrides(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("FIRE_PLANNER_STATE_PATH", "/tmp/fire.json")
    monkeypatch.setenv("FIRE_PLANNER_CURRENCY", "USD")
    monkeypatch.setenv("FIRE_PLANNER_LOG_LEVEL", "debug")
    monkeypatch.setenv("FIRE_PLANNER_PORT", "9001")
    monkeypatch.setenv("FIRE_PLANNER_DEBUG", "yes")

    settings = load_settings()

    assert settings.state_path == "/tmp/fire.json"
    assert settings.currency == "USD"
    assert settings.log_level == "DEBUG"
    assert settings.port == 9001
    assert settings.debug is True


def test_empty_state_path_means_memory_only(monkeypatch):
    _clear_env(monkeypatch)
    monkeypatch.setenv("FIRE_PLANNER_STATE_PATH", "")
    monkeypatch.setenv("FIRE_PLANNER_PORT", "not-a-port")

    settings = load_settings()

    assert settings.state_path is None
    assert settings.port == 8000


def test_configure_logging_sets_root_level():
    root = logging.getLogger()
    previous = root.level
    try:
        configure_logging("WARNING")
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
