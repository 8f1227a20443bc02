"""
Pytest configuration and shared fixtures.
"""

import json
import os
import time
from datetime import date, datetime, timezone
from unittest.mock import MagicMock

import httplib2
import pytest
from googleapiclient.errors import HttpError

from weekwidget.api.cache import CacheManager
from weekwidget.core.models import Dataset, Event, Task
from weekwidget.core.week import WeekWindow

UTC = timezone.utc


def make_http_error(status, message="error", reasons=()):
    """Build a googleapiclient HttpError like the ones the API raises."""
    body = {"error": {"code": status, "message": message}}
    if reasons:
        body["error"]["errors"] = [{"reason": reason, "message": message} for reason in reasons]
    resp = httplib2.Response({"status": status})
    return HttpError(resp, json.dumps(body).encode("utf-8"), uri="https://www.googleapis.com/test")


def timed_event(event_id, start, end, title=None, **kwargs):
    return Event(event_id=event_id, title=title or event_id, start=start, end=end, **kwargs)


def all_day_event(event_id, start, end, title=None, **kwargs):
    return Event(event_id=event_id, title=title or event_id, start=start, end=end, all_day=True, **kwargs)


@pytest.fixture
def week():
    """The week of Monday 19 October 2026 (ISO week 43)."""
    return WeekWindow(date(2026, 10, 19))


@pytest.fixture
def sample_events():
    return (
        timed_event("standup", datetime(2026, 10, 19, 9, 0, tzinfo=UTC),
                    datetime(2026, 10, 19, 9, 15, tzinfo=UTC),
                    calendar_id="primary", calendar_name="Work", color="#3B82F6"),
        all_day_event("holiday", date(2026, 10, 21), date(2026, 10, 22),
                      calendar_id="holidays", calendar_name="Holidays", color="#16A765"),
    )


@pytest.fixture
def sample_tasks():
    return (
        Task(task_id="t1", title="Buy milk", tasklist_id="list-1", due=date(2026, 10, 20)),
        Task(task_id="t2", title="Call bank", tasklist_id="list-1"),
    )


@pytest.fixture
def sample_dataset(sample_events, sample_tasks):
    return Dataset(
        range_start=date(2026, 10, 19),
        range_end=date(2026, 12, 18),
        events=sample_events,
        tasks=sample_tasks,
        fetched_at=datetime(2026, 10, 19, 8, 0, tzinfo=UTC),
    )


@pytest.fixture
def cache(tmp_path):
    return CacheManager(str(tmp_path / "cache.json"))


@pytest.fixture
def auth_manager():
    """Auth manager double whose get_service hands out one MagicMock per API."""
    services = {"calendar": MagicMock(name="calendar"), "tasks": MagicMock(name="tasks")}
    auth = MagicMock(name="auth_manager")
    auth.services_by_name = services
    auth.get_service.side_effect = lambda name, version: services[name]
    return auth


@pytest.fixture
def berlin_local_time():
    """Run with the process' local timezone set to Europe/Berlin."""
    if not hasattr(time, "tzset"):
        pytest.skip("needs time.tzset")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "Europe/Berlin"
    time.tzset()
    yield
    if previous is None:
        del os.environ["TZ"]
    else:
        os.environ["TZ"] = previous
    time.tzset()
