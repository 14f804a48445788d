"""AWS Lambda handler for the Calcium calendar events import."""
import json
import logging
import os
import time
from typing import Dict, Any

from export.stay_exporter import StayExporter
from feed.calendar_feed import CalendarFeed
from processor.event_processor import EventProcessor
from storage.artifact_store import ArtifactStore

DEFAULT_API_URL = 'https://luforumi80.execute-api.us-east-1.amazonaws.com/gql'
DEFAULT_AUTHOR_ID = '3ede5331-ab2d-46b6-89b4-dd68d0d4e2a0'

# Attributes every LogRecord has; anything else came in through `extra`
_RECORD_ATTRIBUTES = set(vars(logging.makeLogRecord({}))) | {'message', 'asctime'}


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including any `extra` fields."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRIBUTES:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure the root logger with the JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def _as_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes')
    return bool(value)


def _env_flag(name: str, default: str = 'false') -> bool:
    return _as_flag(os.environ.get(name, default))


def _error_response(status_code: int, message: str, start_time: float,
                    error: Exception = None, **fields) -> Dict[str, Any]:
    body = {'message': message}
    if error is not None:
        body['error'] = str(error)
        body['error_type'] = type(error).__name__
    body.update(fields)
    body['duration_seconds'] = round(time.time() - start_time, 2)
    return {'statusCode': status_code, 'body': json.dumps(body)}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Import the Calcium calendar feed and optionally export it as stays.

    Values in the invocation payload (``cutoff_date``, ``new_download``,
    ``export``) override the matching environment variables.

    Args:
        event: Invocation payload
        context: Lambda context object

    Returns:
        Response dict with statusCode and import statistics
    """
    event = event or {}

    feed_url = os.environ.get('FEED_URL', '')
    bucket_name = os.environ.get('ARTIFACT_BUCKET', 'calcium-events-import')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))
    cutoff_date = event.get('cutoff_date', os.environ.get('CUTOFF_DATE') or None)
    new_download = _as_flag(event.get('new_download', _env_flag('NEW_DOWNLOAD')))
    export_enabled = _as_flag(event.get('export', _env_flag('EXPORT_ENABLED')))

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    logger.info(
        "Import started",
        extra={
            'bucket_name': bucket_name,
            'cutoff_date': cutoff_date,
            'new_download': new_download,
            'export_enabled': export_enabled
        }
    )

    try:
        feed = CalendarFeed(url=feed_url, timeout=timeout_seconds)
        processor = EventProcessor()
        store = ArtifactStore(bucket_name=bucket_name)

        if new_download:
            try:
                logger.info("Downloading calendar feed")
                feed_text = feed.fetch()
            except Exception as e:
                logger.error(
                    f"Failed to fetch calendar feed: {str(e)}",
                    extra={'error_type': type(e).__name__},
                    exc_info=True
                )
                return _error_response(
                    500, 'Failed to fetch calendar feed', start_time, e
                )

            try:
                store.save_feed(feed_text)
            except Exception as e:
                logger.error(
                    f"Failed to store calendar feed: {str(e)}",
                    extra={'error_type': type(e).__name__},
                    exc_info=True
                )
                return _error_response(
                    500, 'Failed to store calendar feed', start_time, e
                )

        feed_text = store.load_feed()
        if not feed_text:
            logger.error("No calendar feed available, aborting import")
            return _error_response(404, 'No calendar feed available', start_time)

        components = feed.parse(feed_text)

        logger.info("Processing and validating events")
        result = processor.process_events(components, cutoff_date=cutoff_date)

        store.save_import(result.to_export())

        statistics = {
            'components': len(components),
            'accepted': len(result.accepted),
            'broken': len(result.broken),
            'unparsed': len(result.unparsed),
            'no_end_date': result.no_end_count,
        }

        if export_enabled:
            try:
                exporter = StayExporter(
                    api_url=os.environ.get('API_URL', DEFAULT_API_URL),
                    token=os.environ.get('API_TOKEN', ''),
                    author_id=os.environ.get('AUTHOR_ID', DEFAULT_AUTHOR_ID),
                    timeout=timeout_seconds
                )
                export_result = exporter.export(result.accepted)
            except Exception as e:
                logger.error(
                    f"Error during stay export: {str(e)}",
                    extra={'error_type': type(e).__name__},
                    exc_info=True
                )
                return _error_response(
                    500, 'Failed to export stays', start_time, e,
                    note='Import file was stored', statistics=statistics
                )
            statistics['stays_created'] = len(export_result.created_ids)
            statistics['export_errors'] = export_result.errors

        duration = time.time() - start_time
        statistics['duration_seconds'] = round(duration, 2)

        logger.info("Import completed successfully", extra=statistics)

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Import completed successfully',
                'statistics': statistics,
                'broken': [d.to_dict() for d in result.broken],
                'unparsed': [d.to_dict() for d in result.unparsed]
            })
        }

    except Exception as e:
        logger.error(
            f"Import failed: {str(e)}",
            extra={
                'duration_seconds': round(time.time() - start_time, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return _error_response(500, 'Import failed', start_time, e)
