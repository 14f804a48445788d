"""Data models for calendar event import."""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional


class _Unset:
    """Marker for a location that was never asserted by the feed."""

    def __repr__(self) -> str:
        return 'UNSET'

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass(frozen=True)
class SemanticDate:
    """Pure calendar date with no time of day or timezone."""
    year: int
    month: int
    day: int

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)


@dataclass(frozen=True)
class Recurrence:
    """Daily recurrence ending on a given date."""
    until: SemanticDate
    frequency: str = 'DAILY'


@dataclass(frozen=True)
class ValidatedEvent:
    """Event record that passed schema validation."""
    import_id: str
    title: str
    dtstart: SemanticDate
    description: Optional[str] = None
    dtend: Optional[SemanticDate] = None
    category: Optional[str] = None
    recurrence: Optional[Recurrence] = None


@dataclass(frozen=True)
class DateRange:
    """Inclusive YYYY-MM-DD range; start is never after end."""
    start: str
    end: str


@dataclass(frozen=True)
class NormalizedEvent:
    """Validated and normalized event ready for export."""
    import_id: str
    title: str
    description: Optional[str]
    location_id: Any
    dates: DateRange

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the JSON import shape.

        ``locationId`` is left out when no category was given and is
        ``None`` for a category without a physical location.
        """
        data = {
            'importId': self.import_id,
            'title': self.title,
            'description': self.description,
        }
        if self.location_id is not UNSET:
            data['locationId'] = self.location_id
        data['dates'] = {'start': self.dates.start, 'end': self.dates.end}
        return data


@dataclass(frozen=True)
class FieldError:
    """Single field failure reported by the validator."""
    field: str
    message: str


@dataclass
class Diagnostic:
    """Component that could not be imported, kept for inspection."""
    number: int
    object: Dict[str, Any]
    error: Any

    def to_dict(self) -> Dict[str, Any]:
        error = self.error.to_dict() if hasattr(self.error, 'to_dict') else str(self.error)
        return {
            'number': self.number,
            'object': {key: str(value) for key, value in self.object.items()},
            'error': error,
        }


@dataclass
class ImportResult:
    """Partitioned outcome of one import run."""
    accepted: List[NormalizedEvent] = field(default_factory=list)
    broken: List[Diagnostic] = field(default_factory=list)
    unparsed: List[Diagnostic] = field(default_factory=list)
    no_end_count: int = 0

    def to_export(self) -> Dict[str, Any]:
        return {'events': [event.to_dict() for event in self.accepted]}


@dataclass
class ExportResult:
    """Result of a stay export call."""
    submitted: int
    created_ids: List[str]
    errors: List[str]
