from app.crawler import config
from app.crawler.config_validation import validate_runtime_config
import pytest


def test_unknown_staging_mode_rejected() -> None:
    with pytest.raises(ValueError):
        validate_runtime_config("cli", staging_mode="nightly")


def test_batch_staging_mode_accepted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "SEI_USERNAME", "robo")
    monkeypatch.setattr(config, "SEI_PASSWORD", "segredo")
    validate_runtime_config("tests", staging_mode="batch")


def test_invalid_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "NAV_TIMEOUT_SECONDS", 0)
    with pytest.raises(ValueError):
        validate_runtime_config("cli")


def test_portal_url_must_be_http(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "PORTAL_URL", "file:///etc/passwd")
    with pytest.raises(ValueError):
        validate_runtime_config("cli")


def test_missing_credentials_only_warn(monkeypatch: pytest.MonkeyPatch) -> None:
    lines: list[str] = []
    monkeypatch.setattr(config, "SEI_USERNAME", "")
    monkeypatch.setattr(config, "SEI_PASSWORD", "")
    monkeypatch.setattr("app.crawler.config_validation.log_line", lines.append)

    validate_runtime_config("cli")

    assert any("saved cookies" in line for line in lines)


def test_is_batch_staging() -> None:
    assert config.is_batch_staging("batch") is True
    assert config.is_batch_staging(" BATCH ") is True
    assert config.is_batch_staging("per_record") is False
