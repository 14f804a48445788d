"""Schema validation for flattened calendar event records."""
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Union

from processor.categories import CATEGORY_LABELS
from processor.models import FieldError, Recurrence, SemanticDate, ValidatedEvent

# <10-digit prefix>-<token>-<6-digit suffix>@<feed domain>
UID_PATTERN = re.compile(r'\d{10}-(\w+)-\d{6}@afosterri\.org')

# Artifact of an old encoding mismatch in the feed
REPLACEMENT_CHARACTER = '\ufffd'
RIGHT_SINGLE_QUOTATION_MARK = '\u2019'

SUPPORTED_FREQUENCY = 'DAILY'


@dataclass(frozen=True)
class Valid:
    value: Any


@dataclass(frozen=True)
class Invalid:
    error: FieldError


FieldResult = Union[Valid, Invalid]


@dataclass(frozen=True)
class ValidationError:
    """All field failures found in one record."""
    errors: List[FieldError]

    @property
    def fields(self) -> List[str]:
        return [error.field for error in self.errors]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'errors': [
                {'field': error.field, 'message': error.message}
                for error in self.errors
            ]
        }

    def __str__(self) -> str:
        return '; '.join(f"{e.field}: {e.message}" for e in self.errors)


def repair_text(text: Optional[str]) -> Optional[str]:
    """Replace the replacement-character artifact with a right quote."""
    if not text:
        return text
    return text.replace(REPLACEMENT_CHARACTER, RIGHT_SINGLE_QUOTATION_MARK)


def validate_uid(value: Any) -> FieldResult:
    if value is None:
        return Invalid(FieldError('uid', 'required'))
    if not isinstance(value, str):
        return Invalid(FieldError('uid', 'expected string'))
    match = UID_PATTERN.fullmatch(value)
    if not match:
        return Invalid(FieldError('uid', f"does not match feed id pattern: {value}"))
    return Valid(match.group(1))


def validate_summary(value: Any) -> FieldResult:
    if value is None:
        return Invalid(FieldError('summary', 'required'))
    if not isinstance(value, str):
        return Invalid(FieldError('summary', 'expected string'))
    return Valid(repair_text(value))


def validate_description(value: Any) -> FieldResult:
    if value is None:
        return Valid(None)
    if not isinstance(value, str):
        return Invalid(FieldError('description', 'expected string'))
    return Valid(repair_text(value))


def validate_categories(value: Any) -> FieldResult:
    if value is None:
        return Valid(None)
    if value not in CATEGORY_LABELS:
        return Invalid(FieldError(
            'categories',
            f"expected one of {', '.join(CATEGORY_LABELS)}, got {value!r}"
        ))
    return Valid(value)


def _semantic_date(name: str, value: Any) -> FieldResult:
    if not isinstance(value, dict):
        return Invalid(FieldError(name, 'expected a date'))
    if value.get('is_date') is not True:
        return Invalid(FieldError(name, 'expected a date without time of day'))

    parts = {}
    for part in ('year', 'month', 'day'):
        number = value.get(part)
        if not isinstance(number, int) or isinstance(number, bool):
            return Invalid(FieldError(name, f"{part} must be an integer"))
        parts[part] = number

    if not 1 <= parts['month'] <= 12:
        return Invalid(FieldError(name, f"month out of range: {parts['month']}"))
    if not 1 <= parts['day'] <= 31:
        return Invalid(FieldError(name, f"day out of range: {parts['day']}"))
    try:
        date(parts['year'], parts['month'], parts['day'])
    except ValueError as e:
        return Invalid(FieldError(name, f"not a calendar date: {e}"))

    return Valid(SemanticDate(**parts))


def validate_dtstart(value: Any) -> FieldResult:
    if value is None:
        return Invalid(FieldError('dtstart', 'required'))
    return _semantic_date('dtstart', value)


def validate_dtend(value: Any) -> FieldResult:
    if value is None:
        return Valid(None)
    return _semantic_date('dtend', value)


def validate_rrule(value: Any) -> FieldResult:
    if value is None:
        return Valid(None)
    if not isinstance(value, dict):
        return Invalid(FieldError('rrule', 'expected a recurrence rule'))

    frequency = value.get('freq')
    if frequency != SUPPORTED_FREQUENCY:
        return Invalid(FieldError(
            'rrule', f"unsupported frequency: {frequency!r}"
        ))

    extra = value.get('extra')
    if extra:
        return Invalid(FieldError(
            'rrule', f"unsupported recurrence parts: {', '.join(sorted(extra))}"
        ))

    if value.get('until') is None:
        return Invalid(FieldError('rrule', 'daily recurrence requires an until date'))
    until = _semantic_date('rrule', value['until'])
    if isinstance(until, Invalid):
        return until

    return Valid(Recurrence(until=until.value))


FIELD_VALIDATORS: Dict[str, Callable[[Any], FieldResult]] = {
    'uid': validate_uid,
    'summary': validate_summary,
    'dtstart': validate_dtstart,
    'dtend': validate_dtend,
    'categories': validate_categories,
    'description': validate_description,
    'rrule': validate_rrule,
}


def validate_record(record: Dict[str, Any]) -> Union[ValidatedEvent, ValidationError]:
    """
    Validate a flat record and build a ValidatedEvent.

    Every field is checked, so the returned ValidationError lists all
    failing fields rather than only the first one.

    Args:
        record: Flat record produced by the extractor

    Returns:
        ValidatedEvent on success, ValidationError otherwise
    """
    values = {}
    errors = []

    for name, validator in FIELD_VALIDATORS.items():
        result = validator(record.get(name))
        if isinstance(result, Invalid):
            errors.append(result.error)
        else:
            values[name] = result.value

    if errors:
        return ValidationError(errors)

    return ValidatedEvent(
        import_id=values['uid'],
        title=values['summary'],
        description=values['description'],
        dtstart=values['dtstart'],
        dtend=values['dtend'],
        category=values['categories'],
        recurrence=values['rrule'],
    )
