"""Flatten iCalendar components into plain property mappings."""
import logging
from datetime import date, datetime
from typing import Any, Dict

from icalendar.prop import vCategory, vRecur

logger = logging.getLogger(__name__)

# Recurrence exclusions are not modelled
SKIPPED_PROPERTIES = frozenset({'exdate'})


class ExtractionError(Exception):
    """Raised when a component's properties cannot be read."""

    def __init__(self, index: int, properties: Dict[str, Any], cause: Any):
        super().__init__(f"Component {index} could not be extracted: {cause}")
        self.index = index
        self.properties = properties
        self.cause = cause


def extract_record(component, index: int) -> Dict[str, Any]:
    """
    Build a flat record from a VEVENT component.

    Property names are lowercased and only the first value of a
    multi-valued property is kept.

    Args:
        component: icalendar Component for one event
        index: Ordinal position of the component in the feed

    Returns:
        Dictionary mapping property name to a plain value

    Raises:
        ExtractionError: If the parser flagged the component or a value
            cannot be converted
    """
    raw = {str(name).lower(): value for name, value in component.items()}

    if component.errors:
        raise ExtractionError(index, raw, component.errors)

    record = {}
    try:
        for name, value in component.items():
            name = str(name).lower()
            if name in SKIPPED_PROPERTIES:
                continue
            record[name] = _plain_value(_first(value))
    except Exception as e:
        raise ExtractionError(index, raw, e) from e

    return record


def _first(value: Any) -> Any:
    if isinstance(value, list):
        return value[0]
    return value


def _plain_value(value: Any) -> Any:
    """Convert an icalendar property value into a plain Python value."""
    if isinstance(value, vRecur):
        return _recurrence_value(value)
    if isinstance(value, vCategory):
        return str(value.cats[0])
    if hasattr(value, 'dts'):
        return _date_value(value.dts[0].dt)
    if hasattr(value, 'dt'):
        return _date_value(value.dt)
    if isinstance(value, (date, datetime)):
        return _date_value(value)
    if isinstance(value, str):
        return str(value)
    return value


def _date_value(value: Any) -> Dict[str, Any]:
    # datetime subclasses date, so check it first
    if isinstance(value, datetime):
        is_date = False
    elif isinstance(value, date):
        is_date = True
    else:
        raise TypeError(f"Unsupported date value: {value!r}")

    return {
        'is_date': is_date,
        'year': value.year,
        'month': value.month,
        'day': value.day,
    }


def _recurrence_value(recur: vRecur) -> Dict[str, Any]:
    freq = _first(recur.get('FREQ'))
    until = _first(recur.get('UNTIL'))
    # INTERVAL, COUNT, BY* and the rest are kept so they can be rejected
    extra = {
        str(part).lower(): str(_first(value))
        for part, value in recur.items()
        if str(part).upper() not in ('FREQ', 'UNTIL')
    }
    return {
        'freq': str(freq).upper() if freq is not None else None,
        'until': _date_value(until) if until is not None else None,
        'extra': extra,
    }
