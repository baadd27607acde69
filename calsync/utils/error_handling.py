# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                      CALENDAR SYNC ERROR HANDLING                          ║
# ║ Exception taxonomy for a sync run and a retry wrapper with exponential     ║
# ║          backoff for Google and GitHub API calls.                          ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# Standard library imports
import random
import time
from typing import Any, Callable, Optional

# Third-party imports
import httplib2
import requests
from google.auth.exceptions import TransportError
from googleapiclient.errors import HttpError

# Local application imports
from calsync.utils.logging import logger

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ EXCEPTIONS                                                                 ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class CalendarSyncError(Exception):
    """Base class for errors that end a sync run."""


class ConfigurationError(CalendarSyncError):
    """A required input is missing or malformed."""


class FetchError(CalendarSyncError):
    """The calendar provider could not be queried."""


class SnapshotReadError(CalendarSyncError):
    """The stored collection could not be read (other than not existing)."""


class SnapshotWriteError(CalendarSyncError):
    """The updated collection could not be written."""


class WriteConflictError(SnapshotWriteError):
    """The stored file changed since it was read (stale revision token)."""

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ API CALL RETRY MECHANISM                                                   ║
# ╚════════════════════════════════════════════════════════════════════════════╝

RETRYABLE_STATUS = 429

# GitHub calls go through requests; googleapiclient talks through httplib2,
# whose socket failures surface as HttpLib2Error or plain OSError
# (TimeoutError, ConnectionResetError, ...)
NETWORK_ERRORS = (requests.exceptions.RequestException, httplib2.HttpLib2Error, TransportError, OSError)

# --- is_retryable_status ---
# Rate limits and server errors are worth another attempt; other 4xx are not.
def is_retryable_status(status_code: int) -> bool:
    return status_code == RETRYABLE_STATUS or status_code >= 500

# --- backoff_delay ---
# Exponential backoff with jitter, capped at 30 seconds.
def backoff_delay(attempt: int) -> float:
    return min((2 ** attempt) + random.uniform(0, 1), 30.0)

# --- retry_api_call ---
# Executes an API call, retrying transient failures with exponential backoff.
# Handles Google API HttpErrors, requests errors and transport-level
# network errors. Non-retryable HTTP statuses and unexpected exceptions
# are raised immediately.
# Args:
#     func: The function (API call) to execute.
#     *args: Positional arguments for the function.
#     max_retries: Maximum number of attempts (default 3).
#     **kwargs: Keyword arguments for the function.
# Returns: The result of the API call if successful, None if every attempt failed.
def retry_api_call(func: Callable[..., Any], *args, max_retries: int = 3, **kwargs) -> Optional[Any]:
    last_exception = None
    for attempt in range(max_retries):
        try:
            return func(*args, **kwargs)
        except HttpError as e:
            status_code = e.resp.status
            if not is_retryable_status(status_code):
                logger.warning(f"Non-retryable Google API error: {status_code} - {e}")
                raise
            backoff = backoff_delay(attempt)
            logger.warning(f"Retryable Google API error ({status_code}), attempt {attempt+1}/{max_retries}, backing off for {backoff:.2f}s: {e}")
            time.sleep(backoff)
            last_exception = e
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else 0
            if not is_retryable_status(status_code):
                raise
            backoff = backoff_delay(attempt)
            logger.warning(f"Retryable HTTP error ({status_code}), attempt {attempt+1}/{max_retries}, backing off for {backoff:.2f}s: {e}")
            time.sleep(backoff)
            last_exception = e
        except NETWORK_ERRORS as e:
            backoff = backoff_delay(attempt)
            logger.warning(f"Network error in API call, attempt {attempt+1}/{max_retries}, backing off for {backoff:.2f}s: {e!r}")
            time.sleep(backoff)
            last_exception = e
    if last_exception:
        logger.error(f"All {max_retries} retries failed for API call: {last_exception}")
    return None
