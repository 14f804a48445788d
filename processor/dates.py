"""Date resolution for validated events."""
import logging
from typing import Optional

from processor.models import DateRange, Recurrence, SemanticDate

logger = logging.getLogger(__name__)


def resolve_date(value: SemanticDate) -> str:
    """Format a semantic date as YYYY-MM-DD, taking components at face value."""
    return value.to_date().isoformat()


def resolve_range(dtstart: SemanticDate,
                  recurrence: Optional[Recurrence] = None) -> DateRange:
    """
    Derive the inclusive date range of an event.

    The end is the recurrence's until date, or the start date for a
    single-day event. Boundaries given in the wrong order are swapped.

    Args:
        dtstart: Event start date
        recurrence: Optional daily recurrence

    Returns:
        DateRange with start on or before end
    """
    start = dtstart.to_date()
    end = recurrence.until.to_date() if recurrence else start

    if end < start:
        logger.warning(
            f"Event ends before it starts ({end} < {start}), swapping dates"
        )
        start, end = end, start

    return DateRange(
        start=start.isoformat(),
        end=end.isoformat()
    )
