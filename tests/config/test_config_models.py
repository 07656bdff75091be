from __future__ import annotations

import pytest
from pydantic import ValidationError

from pulsedigest.config import (
    AppConfig,
    LoaderConfig,
    SchedulerJobConfig,
    StoreConfig,
    WebAuthConfig,
)


def test_scheduler_job_time_shorthand_becomes_cron() -> None:
    job = SchedulerJobConfig(name="daily", time="06:30")

    assert job.cron == "30 6 * * *"


def test_scheduler_job_accepts_legacy_cron_alias() -> None:
    job = SchedulerJobConfig.model_validate({"name": "daily", "cron_schedule": "0 7 * * 1-5"})

    assert job.cron == "0 7 * * 1-5"


def test_scheduler_job_cron_wins_over_time() -> None:
    job = SchedulerJobConfig(name="daily", cron="*/5 * * * *", time="06:00")

    assert job.cron == "*/5 * * * *"


@pytest.mark.parametrize("value", ["24:00", "06:60", "6am", ""])
def test_scheduler_job_rejects_invalid_time(value: str) -> None:
    with pytest.raises(ValidationError):
        SchedulerJobConfig(name="daily", time=value)


def test_scheduler_job_requires_schedule() -> None:
    with pytest.raises(ValidationError):
        SchedulerJobConfig(name="daily")


def test_store_config_strips_trailing_slash_and_resolves_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PULSE_API_KEY", "token-123")

    cfg = StoreConfig(base_url="https://api.example.com/v1/", api_key="env:PULSE_API_KEY")

    assert cfg.base_url == "https://api.example.com/v1"
    assert cfg.api_key_secret == "token-123"
    assert cfg.timeout == 30.0
    assert cfg.page_limit == 1000


def test_loader_config_normalises_keywords() -> None:
    cfg = LoaderConfig(keywords=[" Digest ", "", "PULSE"])

    assert cfg.keywords == ["digest", "pulse"]
    with pytest.raises(ValidationError):
        LoaderConfig(keywords=["  "])


def test_web_auth_requires_token_when_enabled() -> None:
    with pytest.raises(ValidationError):
        WebAuthConfig(enabled=True, token="   ")

    disabled = WebAuthConfig(enabled=False, token="  ")
    assert disabled.token is None
    assert disabled.token_secret == ""


def test_app_config_defaults() -> None:
    cfg = AppConfig()

    assert cfg.logging_level == "INFO"
    assert cfg.store is None
    assert cfg.generation is None
    assert cfg.loader.keywords == ["digest", "pulse"]


def test_store_config_plain_and_missing_env_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PULSE_UNSET_KEY", raising=False)

    assert StoreConfig(base_url="https://api.test", api_key="plain").api_key_secret == "plain"
    with pytest.raises(EnvironmentError):
        StoreConfig(base_url="https://api.test", api_key="env:PULSE_UNSET_KEY").api_key_secret
