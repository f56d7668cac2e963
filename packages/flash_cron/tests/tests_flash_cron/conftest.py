from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest


@pytest.fixture
def utc():
    return timezone.utc


@pytest.fixture
def berlin():
    return ZoneInfo("Europe/Berlin")


@pytest.fixture
def new_york():
    return ZoneInfo("America/New_York")


@pytest.fixture(params=["America/Los_Angeles", "Europe/Berlin"])
def tz(request):
    """
    Runs a test once per zone. Expected wall-clock results must not depend on
    the zone (dates are picked away from daylight-saving transitions).
    """
    return ZoneInfo(request.param)


@pytest.fixture
def at(tz):
    """Builds an aware datetime in the parametrized zone."""

    def _at(*args: int) -> datetime:
        return datetime(*args, tzinfo=tz)

    return _at
