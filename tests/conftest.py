"""Shared pytest fixtures for Repasse Auto tests."""

from datetime import date, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from app import create_app
from app.services.local_time import LOCAL_TZ, at_hour
from app.services.slots import WorkHours


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        yield app


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def work_hours():
    """Default inspection windows: 9-11 / 14-18, 60 min visit, 30 min buffer."""
    return WorkHours()


@pytest.fixture()
def calendar():
    """Stand-in for CalendarClient with an empty calendar."""
    mock = MagicMock()
    mock.calendar_id = "agenda@group.calendar.google.com"
    mock.fetch_busy.return_value = []
    mock.create_event.return_value = {
        "event_id": "evt123",
        "hangout_link": "https://calendar.google.com/event?eid=evt123",
    }
    return mock


def next_weekday(start: date, weekday: int) -> date:
    """First date on or after ``start`` falling on ``weekday`` (Monday=0)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


@pytest.fixture()
def future_workday():
    """A Wednesday at least a week ahead that is not a holiday."""
    from app.services.holidays import HOLIDAYS

    day = next_weekday(datetime.now(LOCAL_TZ).date() + timedelta(days=7), 2)
    while day in HOLIDAYS:
        day += timedelta(days=7)
    return day


@pytest.fixture()
def future_slot(future_workday):
    """(start, end) of a 10:00 inspection on ``future_workday``."""
    start = at_hour(future_workday, 10)
    return start, start + timedelta(hours=1)
