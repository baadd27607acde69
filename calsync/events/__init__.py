"""
events package: event model, merge, Google Calendar fetching and
GitHub snapshot persistence, re-exported from submodules.
"""
from .models import *
from .merge import *
from .google_api import *
from .event_fetching import *
from .snapshot import *

__all__ = [
    'Event', 'EventCollection', 'get_event_start', 'format_event_line',
    'merge_events',
    'build_credentials', 'build_service',
    'get_upcoming_events',
    'GitHubContentStore', 'Snapshot',
]
