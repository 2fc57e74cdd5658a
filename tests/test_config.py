import logging

import structlog

from moonscale.config import Settings, get_settings
from moonscale.logging_config import setup_logging


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.default_namespace == "moonscale"
    assert settings.credential_namespace == "moonscale"
    assert settings.secret_prefix == "moonscale-instance"
    assert settings.password_key == "mysql-root-password"
    assert settings.field_manager == "moonscale"
    assert settings.force_conflicts is False
    assert settings.dry_run is False
    assert settings.inject_managed_by_label is False


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("DEFAULT_NAMESPACE", "sandbox")
    monkeypatch.setenv("FORCE_CONFLICTS", "true")
    monkeypatch.setenv("KUBE_CONFIG_PATH", "/tmp/kubeconfig")

    settings = Settings(_env_file=None)

    assert settings.default_namespace == "sandbox"
    assert settings.force_conflicts is True
    assert settings.kube_config_path == "/tmp/kubeconfig"


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


def test_setup_logging_sets_level() -> None:
    root = logging.getLogger()
    previous = root.level
    try:
        setup_logging(Settings(_env_file=None, log_level="warning", app_env="production"))

        assert root.level == logging.WARNING
        structlog.get_logger("moonscale.test").warning("config.test_event", key="value")
    finally:
        root.setLevel(previous)
        structlog.reset_defaults()


def test_docstrings_are_english() -> None:
    from moonscale.exceptions import AppException

    for documented in (AppException, AppException.to_payload, setup_logging):
        assert documented.__doc__ and documented.__doc__.isascii()
