# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                          EVENT MODELS MODULE                               ║
# ║    Event accessors and the persisted EventCollection with its canonical    ║
# ║    JSON serialization.                                                     ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
models.py: Event record helpers and the stored event collection.

Events are kept as the provider's own dictionaries so that every field the
calendar API returns is written back verbatim. Only `id`, `start` and
`summary` are ever looked at.
"""
import json
from typing import Any, Dict, Iterable, List, Optional

from .merge import merge_events

Event = Dict[str, Any]

JSON_INDENT = 2

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ EVENT ACCESSORS                                                            ║
# ╚════════════════════════════════════════════════════════════════════════════╝

# --- get_event_start ---
# Returns the display value of an event's start: the dateTime for timed
# events, the date for all-day events, or a plain start string as stored.
def get_event_start(event: Event) -> str:
    start = event.get("start")
    if isinstance(start, dict):
        return start.get("dateTime") or start.get("date") or ""
    if start is None:
        return ""
    return str(start)

def format_event_line(event: Event) -> str:
    return f"{get_event_start(event)} - {event.get('summary', '')}"

# ╔════════════════════════════════════════════════════════════════════════════╗
# ║ EVENT COLLECTION                                                           ║
# ╚════════════════════════════════════════════════════════════════════════════╝

class EventCollection:
    """The persisted aggregate ``{"events": [...]}``.

    Top-level keys other than ``events`` are carried through unchanged so a
    round trip never drops data written by someone else.
    """

    def __init__(self, events: Optional[Iterable[Event]] = None, extra: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(extra or {})
        self._data["events"] = list(events or [])

    @property
    def events(self) -> List[Event]:
        return self._data["events"]

    @classmethod
    def from_json(cls, text: str) -> "EventCollection":
        """Parse a stored blob; raises ValueError if it is not a collection."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Stored events are not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Stored events must be a JSON object, got {type(data).__name__}")
        events = data.get("events", [])
        if not isinstance(events, list):
            raise ValueError(f"'events' must be a list, got {type(events).__name__}")
        collection = cls()
        # Rebuild in the stored key order so serialization stays byte-stable
        collection._data = dict(data)
        collection._data["events"] = events
        return collection

    def to_dict(self) -> Dict[str, Any]:
        return self._data

    def to_json(self) -> str:
        return json.dumps(self._data, indent=JSON_INDENT, ensure_ascii=False)

    def merge(self, incoming: Iterable[Event]) -> None:
        merge_events(incoming, self.events)

    def ids(self) -> List[Any]:
        return [event.get("id") for event in self.events]

    def __len__(self) -> int:
        return len(self.events)

    def __repr__(self) -> str:
        return f"EventCollection({len(self)} events)"
