# ╔════════════════════════════════════════════════════════════════════════════╗
# ║                          EVENT MERGE MODULE                                ║
# ║    Reconciles freshly fetched events into the stored event list by         ║
# ║    updating in place or appending. Stored events are never removed.        ║
# ╚════════════════════════════════════════════════════════════════════════════╝

"""
merge.py: Update-or-append merge of event lists keyed by event id.
"""
from typing import Any, Dict, Iterable, List

# --- merge_events ---
# Merges `incoming` into `existing` in place.
# For each incoming event, in order: if an event with the same id is already
# stored, it is fully replaced at the same position; otherwise the incoming
# event is appended. Events missing from `incoming` are left untouched, and
# when `incoming` repeats an id the later occurrence wins.
# Args:
#     incoming: Fetched events, ordered by start time.
#     existing: The stored event list; mutated in place.
def merge_events(incoming: Iterable[Dict[str, Any]], existing: List[Dict[str, Any]]) -> None:
    positions: Dict[Any, int] = {}
    for index, event in enumerate(existing):
        # First occurrence wins if the stored list already holds duplicates
        positions.setdefault(event.get("id"), index)

    for event in incoming:
        event_id = event.get("id")
        index = positions.get(event_id)
        if index is None:
            positions[event_id] = len(existing)
            existing.append(event)
        else:
            existing[index] = event
