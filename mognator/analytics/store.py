from __future__ import annotations

import logging
import threading
import time
from typing import Any

logger = logging.getLogger(__name__)

QUIZ_START = "quiz_start"
QUIZ_UNDO = "quiz_undo"
QUIZ_ANSWER = "quiz_answer"
QUIZ_FINISH = "quiz_finish"
GENRE_SELECTED = "genre_selected"
PLACES_SEARCH = "places_search"

EVENT_TYPES = frozenset({QUIZ_START, QUIZ_ANSWER, QUIZ_UNDO, QUIZ_FINISH, GENRE_SELECTED, PLACES_SEARCH})

_events: list[dict[str, Any]] = []
_lock = threading.Lock()


def record_event(event_type: str, data: dict[str, Any]) -> None:
    if event_type not in EVENT_TYPES:
        logger.debug("Recording unregistered event type %r", event_type)
    with _lock:
        _events.append({
            "type": event_type,
            "timestamp": time.time(),
            **data,
        })


def get_events(event_type: str | None = None) -> list[dict[str, Any]]:
    """Snapshot of recorded events, optionally of one type only."""
    with _lock:
        if event_type is None:
            return list(_events)
        return [e for e in _events if e["type"] == event_type]


def clear_events() -> None:
    with _lock:
        _events.clear()
