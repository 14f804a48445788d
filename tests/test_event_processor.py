"""Unit tests for EventProcessor."""
import json
from datetime import date

import pytest

from feed.calendar_feed import CalendarFeed
from processor.event_processor import EventProcessor
from processor.extractor import ExtractionError
from processor.models import UNSET, DateRange, NormalizedEvent
from processor.validator import ValidationError


class TestEventProcessor:
    """Test cases for EventProcessor class."""

    def test_process_single_day_event(self, make_event):
        """Test a plain event is accepted with a single-day range."""
        processor = EventProcessor()

        result = processor.process_events([make_event()])

        assert result.accepted == [
            NormalizedEvent(
                import_id='abc123',
                title='Team Meeting',
                description=None,
                location_id=UNSET,
                dates=DateRange(start='2024-01-15', end='2024-01-15')
            )
        ]
        assert result.broken == []
        assert result.unparsed == []
        assert result.no_end_count == 0

    def test_until_before_start_is_swapped(self, make_event):
        """Test a reversed recurrence range is corrected."""
        processor = EventProcessor()
        component = make_event(
            rrule={'freq': 'DAILY', 'until': date(2024, 1, 10)}
        )

        result = processor.process_events([component])

        assert result.accepted[0].dates == DateRange(
            start='2024-01-10', end='2024-01-15'
        )

    def test_category_locations(self, make_event):
        """Test cabin categories resolve to ids and Meeting to None."""
        processor = EventProcessor()

        result = processor.process_events([
            make_event(categories='Foster'),
            make_event(categories='Meeting'),
        ])

        assert result.accepted[0].location_id == '45617389-7678-42bf-bfb4-83304a389dc7'
        assert result.accepted[1].location_id is None

    def test_bad_uid_is_unparsed(self, make_event):
        """Test a uid with the wrong domain lands in unparsed."""
        processor = EventProcessor()

        result = processor.process_events([
            make_event(uid='1234567890-abc123-999999@example.com')
        ])

        assert result.accepted == []
        assert len(result.unparsed) == 1
        diagnostic = result.unparsed[0]
        assert diagnostic.number == 0
        assert isinstance(diagnostic.error, ValidationError)
        assert diagnostic.error.fields == ['uid']
        assert diagnostic.object['uid'] == '1234567890-abc123-999999@example.com'

    def test_weekly_recurrence_is_unparsed(self, make_event):
        """Test unsupported recurrences are never accepted."""
        processor = EventProcessor()
        component = make_event(
            rrule={'freq': 'WEEKLY', 'until': date(2024, 2, 15)}
        )

        result = processor.process_events([component])

        assert result.accepted == []
        assert result.unparsed[0].error.fields == ['rrule']

    def test_broken_component_does_not_stop_run(self, make_event):
        """Test extraction failures are diagnosed and processing continues."""
        processor = EventProcessor()
        broken = make_event(summary='Broken')
        broken.errors.append(('DTSTART', 'Wrong date format'))

        result = processor.process_events([
            make_event(summary='First'),
            broken,
            make_event(summary='Last'),
        ])

        assert [event.title for event in result.accepted] == ['First', 'Last']
        assert len(result.broken) == 1
        assert result.broken[0].number == 1
        assert isinstance(result.broken[0].error, ExtractionError)

    def test_cutoff_is_inclusive(self, make_event):
        """Test events ending on the cutoff are kept."""
        processor = EventProcessor()

        result = processor.process_events([make_event()], cutoff_date='2024-01-15')

        assert len(result.accepted) == 1

    def test_events_after_cutoff_are_dropped(self, make_event):
        """Test events ending after the cutoff are in no bucket."""
        processor = EventProcessor()
        component = make_event(
            dtstart=date(2024, 1, 10),
            rrule={'freq': 'DAILY', 'until': date(2024, 1, 20)}
        )

        result = processor.process_events(
            [component, make_event()], cutoff_date=date(2024, 1, 15)
        )

        assert [event.dates.end for event in result.accepted] == ['2024-01-15']
        assert result.broken == []
        assert result.unparsed == []

    def test_invalid_cutoff_raises(self, make_event):
        """Test a malformed cutoff string is rejected up front."""
        processor = EventProcessor()

        with pytest.raises(ValueError):
            processor.process_events([make_event()], cutoff_date='15/01/2024')

    def test_accepted_keeps_source_order(self, sample_feed):
        """Test the parsed feed is partitioned in source order."""
        processor = EventProcessor()

        result = processor.process_events(CalendarFeed.parse(sample_feed))

        assert [event.import_id for event in result.accepted] == ['evt001', 'evt002']
        assert result.accepted[1].dates == DateRange(
            start='2024-07-01', end='2024-07-07'
        )
        assert result.accepted[1].description == 'Bring your own linens'
        assert [d.number for d in result.unparsed] == [2]

    def test_processing_is_idempotent(self, sample_feed):
        """Test identical input gives byte-identical output."""
        processor = EventProcessor()
        components = CalendarFeed.parse(sample_feed)

        first = processor.process_events(components, cutoff_date='2024-12-31')
        second = processor.process_events(components, cutoff_date='2024-12-31')

        assert json.dumps(first.to_export()) == json.dumps(second.to_export())

    def test_export_shape(self, make_event):
        """Test the export document omits unset locations."""
        processor = EventProcessor()

        result = processor.process_events([
            make_event(),
            make_event(categories='Meeting'),
        ])

        assert result.to_export() == {
            'events': [
                {
                    'importId': 'abc123',
                    'title': 'Team Meeting',
                    'description': None,
                    'dates': {'start': '2024-01-15', 'end': '2024-01-15'},
                },
                {
                    'importId': 'abc123',
                    'title': 'Team Meeting',
                    'description': None,
                    'locationId': None,
                    'dates': {'start': '2024-01-15', 'end': '2024-01-15'},
                },
            ]
        }

    def test_diagnostics_serialize(self, make_event):
        """Test diagnostics convert to JSON-friendly dictionaries."""
        processor = EventProcessor()

        result = processor.process_events([make_event(summary=None)])

        data = result.unparsed[0].to_dict()
        assert data['number'] == 0
        assert data['error'] == {
            'errors': [{'field': 'summary', 'message': 'required'}]
        }
        json.dumps(data)

    def test_recurrence_with_interval_or_count_is_unparsed(self):
        """Test daily rules with extra parts are rejected, not approximated."""
        text = (
            "BEGIN:VCALENDAR\r\n"
            "VERSION:2.0\r\n"
            "BEGIN:VEVENT\r\n"
            "UID:1754931775-int2-515570@afosterri.org\r\n"
            "SUMMARY:Every Other Day\r\n"
            "DTSTART;VALUE=DATE:20240115\r\n"
            "RRULE:FREQ=DAILY;INTERVAL=2;UNTIL=20240120\r\n"
            "END:VEVENT\r\n"
            "BEGIN:VEVENT\r\n"
            "UID:1754931775-cnt-515570@afosterri.org\r\n"
            "SUMMARY:Three Days\r\n"
            "DTSTART;VALUE=DATE:20240115\r\n"
            "RRULE:FREQ=DAILY;COUNT=3;UNTIL=20240120\r\n"
            "END:VEVENT\r\n"
            "END:VCALENDAR\r\n"
        )
        processor = EventProcessor()

        result = processor.process_events(CalendarFeed.parse(text))

        assert result.accepted == []
        assert [d.number for d in result.unparsed] == [0, 1]
        assert all(d.error.fields == ['rrule'] for d in result.unparsed)
