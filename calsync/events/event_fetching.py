"""
event_fetching.py: Upcoming event retrieval from Google Calendar.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from google.auth.exceptions import RefreshError
from googleapiclient.errors import HttpError

from calsync.utils.error_handling import NETWORK_ERRORS, FetchError, retry_api_call
from calsync.utils.logging import logger
from .models import format_event_line

# --- format_time_min ---
# RFC3339 UTC timestamp with millisecond precision, e.g. 2024-01-01T10:00:00.000Z
def format_time_min(now: datetime) -> str:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"

def get_upcoming_events(service, calendar_id: str, max_results: int = 100,
                        now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Fetch events starting from `now`, expanded to single occurrences and
    ordered by start time. Raises FetchError if the calendar cannot be read."""
    time_min = format_time_min(now or datetime.now(timezone.utc))
    logger.debug(f"Fetching up to {max_results} events for calendar {calendar_id} from {time_min}")
    try:
        result = retry_api_call(
            lambda: service.events().list(
                calendarId=calendar_id,
                timeMin=time_min,
                maxResults=max_results,
                singleEvents=True,
                orderBy="startTime",
            ).execute()
        )
    except RefreshError as e:
        raise FetchError(f"Could not refresh Google credentials: {e}") from e
    except HttpError as e:
        raise FetchError(f"The API returned an error: {e}") from e
    except NETWORK_ERRORS as e:
        raise FetchError(f"Network error fetching calendar {calendar_id}: {e!r}") from e
    if result is None:
        raise FetchError(f"Failed to fetch events for calendar {calendar_id} after retries")

    items = result.get("items", [])
    if not items:
        logger.info("No upcoming events found.")
        return []
    for item in items:
        logger.info(format_event_line(item))
    logger.debug(f"Successfully fetched {len(items)} events from calendar {calendar_id}")
    return items
