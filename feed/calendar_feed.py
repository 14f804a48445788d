"""Calendar feed download and parsing."""
import logging
from typing import List

import requests
from icalendar import Calendar

logger = logging.getLogger(__name__)


class CalendarFeed:
    """Client for the Calcium iCalendar feed."""

    def __init__(self, url: str, timeout: int = 30):
        """
        Initialize the calendar feed client.

        Args:
            url: Feed URL (webcal:// is accepted and fetched over https)
            timeout: HTTP request timeout in seconds (default: 30)
        """
        if url and url.startswith('webcal://'):
            url = 'https://' + url[len('webcal://'):]
        self.url = url
        self.timeout = timeout

    def fetch(self) -> str:
        """
        Download the raw feed text.

        Returns:
            iCalendar text

        Raises:
            ValueError: If no feed URL is configured
            requests.RequestException: If the request fails
        """
        if not self.url:
            raise ValueError("No calendar feed URL configured")

        logger.info(f"Fetching calendar feed from {self.url}")
        response = requests.get(self.url, timeout=self.timeout)
        response.raise_for_status()
        logger.info(f"Fetched {len(response.text)} characters of feed data")
        return response.text

    @staticmethod
    def parse(text: str) -> List:
        """
        Parse feed text into VEVENT components.

        Args:
            text: iCalendar text

        Returns:
            List of VEVENT components in source order

        Raises:
            ValueError: If the text is not a calendar
        """
        calendar = Calendar.from_ical(text)
        events = calendar.walk('VEVENT')
        logger.info(f"Parsed {len(events)} events from calendar feed")
        return events
