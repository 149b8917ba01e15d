"""
Shared fixtures.
"""

import pendulum
import pytest

from slotbooker.adapters.mock_calendar_client import MockCalendarClient
from slotbooker.config import ScheduleConfig

TZ = "Asia/Seoul"


def local(text: str):
    """Parse a local timestamp in the test timezone."""
    return pendulum.parse(text, tz=TZ)


def fixed_clock(text: str):
    """Return a clock that always reports the given local instant."""
    instant = local(text)
    return lambda: instant


@pytest.fixture
def schedule() -> ScheduleConfig:
    """Default schedule: Mon-Fri, 10-18, 30 min slots, 15 min buffer."""
    return ScheduleConfig(calendar_id="team@example.com", timezone=TZ)


@pytest.fixture
def gateway() -> MockCalendarClient:
    return MockCalendarClient(timezone=TZ)
