"""Export of imported events as stays through the GraphQL API."""
import logging
from datetime import date, datetime, time
from typing import Any, Dict, List

import requests

from processor.models import ExportResult, NormalizedEvent

logger = logging.getLogger(__name__)

STAY_CREATE_MULTIPLE = """
mutation StayCreateMultiple($stays: [StayCreateMultipleInput!]!) {
  stayCreateMultiple(stays: $stays) {
    id
  }
}"""

CUSTOM_EVENT_TEXT = 'Custom Event'


def date_to_timestamp(value: str) -> int:
    """
    Convert a YYYY-MM-DD date to epoch seconds at local midnight.

    Args:
        value: ISO 8601 date string

    Returns:
        Unix timestamp
    """
    midnight = datetime.combine(date.fromisoformat(value), time.min)
    return int(midnight.timestamp())


class StayExporter:
    """Client for creating stays from imported events."""

    def __init__(self, api_url: str, token: str, author_id: str,
                 timeout: int = 30):
        """
        Initialize the exporter.

        Args:
            api_url: GraphQL endpoint URL
            token: Bearer token for the API
            author_id: Author recorded on every created stay
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.api_url = api_url
        self.token = token
        self.author_id = author_id
        self.timeout = timeout

    def build_stays(self, events: List[NormalizedEvent]) -> List[Dict[str, Any]]:
        """
        Map normalized events to stay inputs.

        Events without a location get a custom-text reservation instead
        of a room.
        """
        stays = []
        for event in events:
            reservation = {'name': event.title}
            if event.location_id:
                reservation['roomId'] = event.location_id
            else:
                reservation['customText'] = CUSTOM_EVENT_TEXT

            stays.append({
                'title': event.title,
                'description': event.description or '',
                'authorId': self.author_id,
                'dateStart': date_to_timestamp(event.dates.start),
                'dateEnd': date_to_timestamp(event.dates.end),
                'reservations': [reservation],
                'importId': event.import_id,
            })
        return stays

    def export(self, events: List[NormalizedEvent]) -> ExportResult:
        """
        Create stays for all events in one batched mutation.

        Args:
            events: Accepted events from the import

        Returns:
            ExportResult with created stay ids and GraphQL errors

        Raises:
            requests.RequestException: If the HTTP call fails
        """
        if not events:
            logger.info("No events to export")
            return ExportResult(submitted=0, created_ids=[], errors=[])

        stays = self.build_stays(events)
        logger.info(f"Exporting {len(stays)} stays to {self.api_url}")

        response = requests.post(
            self.api_url,
            json={
                'query': STAY_CREATE_MULTIPLE,
                'variables': {'stays': stays},
            },
            headers={'authorization': f"Bearer {self.token}"},
            timeout=self.timeout
        )
        response.raise_for_status()
        body = response.json()

        created = (body.get('data') or {}).get('stayCreateMultiple') or []
        errors = [
            error.get('message', str(error)) for error in body.get('errors', [])
        ]
        if errors:
            logger.error(f"Stay export returned {len(errors)} errors: {errors}")

        logger.info(f"Created {len(created)} stays")
        return ExportResult(
            submitted=len(stays),
            created_ids=[stay['id'] for stay in created],
            errors=errors
        )
