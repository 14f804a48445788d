"""Shared fixtures for import tests."""
from datetime import date

import pytest
from icalendar import Event

SAMPLE_UID = '1234567890-abc123-999999@afosterri.org'

SAMPLE_FEED = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//Brown Bear Software//Calcium//EN
BEGIN:VEVENT
UID:1754931775-evt001-515570@afosterri.org
SUMMARY:Team Meeting
DTSTART;VALUE=DATE:20240115
CATEGORIES:Meeting
END:VEVENT
BEGIN:VEVENT
UID:1754931775-evt002-515570@afosterri.org
SUMMARY:Family Week
DESCRIPTION:Bring your own linens
DTSTART;VALUE=DATE:20240701
RRULE:FREQ=DAILY;UNTIL=20240707
CATEGORIES:Foster
EXDATE;VALUE=DATE:20240703
END:VEVENT
BEGIN:VEVENT
UID:not-a-calcium-id@example.com
SUMMARY:Stray Event
DTSTART;VALUE=DATE:20240201
END:VEVENT
END:VCALENDAR
"""


@pytest.fixture
def sample_feed():
    """Three-event feed: a meeting, a recurring cabin stay and a bad uid."""
    return SAMPLE_FEED


@pytest.fixture
def make_event():
    """Build a VEVENT component from keyword properties."""
    def _make_event(uid=SAMPLE_UID, summary='Team Meeting',
                    dtstart=date(2024, 1, 15), **properties):
        event = Event()
        if uid is not None:
            event.add('uid', uid)
        if summary is not None:
            event.add('summary', summary)
        if dtstart is not None:
            event.add('dtstart', dtstart)
        for name, value in properties.items():
            event.add(name, value)
        return event
    return _make_event


@pytest.fixture
def aws_env(monkeypatch):
    """Fake AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
