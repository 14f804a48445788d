"""Event processor for validating and normalizing calendar components."""
import logging
from datetime import date, datetime
from typing import Iterable, Optional, Union

from processor.categories import resolve_category
from processor.dates import resolve_range
from processor.extractor import ExtractionError, extract_record
from processor.models import Diagnostic, ImportResult, NormalizedEvent
from processor.validator import ValidationError, validate_record

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor that partitions feed components into import buckets."""

    def process_events(
        self,
        components: Iterable,
        cutoff_date: Optional[Union[date, str]] = None
    ) -> ImportResult:
        """
        Extract, validate and normalize calendar components.

        Components are handled in source order. Unreadable components go
        to ``broken``, schema failures go to ``unparsed``, and events
        ending after the cutoff are dropped without a diagnostic.

        Args:
            components: VEVENT components from the parsed feed
            cutoff_date: Optional last allowed end date (date or ISO string)

        Returns:
            ImportResult with accepted events and diagnostics

        Raises:
            ValueError: If cutoff_date is not a valid ISO date
        """
        cutoff = self._parse_cutoff(cutoff_date)
        result = ImportResult()
        dropped = 0

        for index, component in enumerate(components):
            try:
                record = extract_record(component, index)
            except ExtractionError as e:
                logger.warning(f"Failed to extract component {index}: {e.cause}")
                result.broken.append(
                    Diagnostic(number=index, object=e.properties, error=e)
                )
                continue

            validated = validate_record(record)
            if isinstance(validated, ValidationError):
                logger.warning(
                    f"Component {index} failed validation: {validated}"
                )
                result.unparsed.append(
                    Diagnostic(number=index, object=dict(record), error=validated)
                )
                continue

            dates = resolve_range(validated.dtstart, validated.recurrence)

            if cutoff and dates.end > cutoff.isoformat():
                logger.debug(
                    f"Dropping event '{validated.title}' ending {dates.end} "
                    f"after cutoff {cutoff}"
                )
                dropped += 1
                continue

            result.accepted.append(NormalizedEvent(
                import_id=validated.import_id,
                title=validated.title,
                description=validated.description,
                location_id=resolve_category(validated.category),
                dates=dates
            ))

        result.no_end_count = sum(
            1 for event in result.accepted if not event.dates.end
        )

        logger.info(
            f"Processed {len(result.accepted)} valid events, "
            f"{len(result.broken)} broken, {len(result.unparsed)} unparsed, "
            f"{dropped} after cutoff, {result.no_end_count} without end date"
        )
        return result

    def _parse_cutoff(self, cutoff_date: Optional[Union[date, str]]) -> Optional[date]:
        """
        Normalize the cutoff to a date.

        Args:
            cutoff_date: date, ISO 8601 string (YYYY-MM-DD) or None

        Returns:
            date or None when no cutoff applies
        """
        if cutoff_date is None or cutoff_date == '':
            return None
        if isinstance(cutoff_date, datetime):
            return cutoff_date.date()
        if isinstance(cutoff_date, date):
            return cutoff_date
        return date.fromisoformat(cutoff_date.strip())
