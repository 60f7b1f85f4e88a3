import pytest
from pydantic import ValidationError

from member_api.config import Settings


def test_login_protection_defaults():
    settings = Settings()

    assert settings.login_max_attempts == 10
    assert settings.login_window_seconds == 300
    assert settings.login_block_seconds == 900
    assert settings.login_sweep_interval_seconds == 60
    assert settings.account_max_failed_attempts == 5
    assert settings.account_lock_seconds == 1800


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("LOGIN_MAX_ATTEMPTS", "3")
    monkeypatch.setenv("ACCOUNT_LOCK_SECONDS", "60")

    settings = Settings()

    assert settings.login_max_attempts == 3
    assert settings.account_lock_seconds == 60


@pytest.mark.parametrize(
    "field", ["login_max_attempts", "login_window_seconds", "account_max_failed_attempts"]
)
def test_rejects_non_positive(field):
    with pytest.raises(ValidationError):
        Settings(**{field: 0})


def test_sweep_interval_bounded_by_block():
    with pytest.raises(ValidationError):
        Settings(login_block_seconds=30, login_sweep_interval_seconds=60)


def test_production_requires_https_origins():
    with pytest.raises(ValidationError):
        Settings(environment="production", cors_origins="http://example.com")


def test_log_level_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"
