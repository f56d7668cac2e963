from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from flash_cron.config import CronSettings, cron_settings
from flash_cron.expression import CronExpression
from pydantic import ValidationError


def test_defaults(monkeypatch):
    for name in ("CRON_DEFAULT_TIMEZONE", "CRON_SEARCH_HORIZON_YEARS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = CronSettings(_env_file=None)

    assert settings.CRON_DEFAULT_TIMEZONE == "UTC"
    assert settings.CRON_SEARCH_HORIZON_YEARS == 4
    assert settings.LOG_LEVEL == "INFO"
    assert settings.LOG_FILE is None
    assert set(CronSettings.model_fields) == {
        "LOG_LEVEL",
        "LOG_FILE",
        "CRON_DEFAULT_TIMEZONE",
        "CRON_SEARCH_HORIZON_YEARS",
    }


def test_environment_override(monkeypatch):
    monkeypatch.setenv("CRON_DEFAULT_TIMEZONE", "Europe/Berlin")
    monkeypatch.setenv("CRON_SEARCH_HORIZON_YEARS", "8")

    settings = CronSettings(_env_file=None)

    assert settings.default_timezone() == ZoneInfo("Europe/Berlin")
    assert settings.CRON_SEARCH_HORIZON_YEARS == 8


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"CRON_SEARCH_HORIZON_YEARS": 0}, "at least 1"),
        ({"CRON_DEFAULT_TIMEZONE": "Mars/Olympus_Mons"}, "not a known time zone"),
        ({"LOG_LEVEL": "LOUD"}, "not a logging level"),
    ],
)
def test_invalid_settings(overrides, message):
    with pytest.raises(ValidationError, match=message):
        CronSettings(_env_file=None, **overrides)


def test_default_timezone_used_by_expressions(monkeypatch):
    monkeypatch.setattr(cron_settings, "CRON_DEFAULT_TIMEZONE", "Asia/Tokyo")

    expr = CronExpression("0 0 9 * * *")
    result = expr.next_execution_time(datetime(2026, 1, 1, tzinfo=timezone.utc))

    # 09:00 in Tokyo is 00:00 UTC
    assert result == datetime(2026, 1, 2, 0, 0, tzinfo=timezone.utc)
