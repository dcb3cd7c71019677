"""Web-facing observers for order storage warnings and insight failures.

Subscribes to an EventBus for orders.storage_warning and insight.failed and
keeps a bounded in-memory buffer of recent alerts that the web layer can poll
(since=<last_id_seen>) to show a visible warning without a page reload.

Each alert gets an auto-increment integer id used as the polling cursor.
MAX_EVENTS caps memory use.
"""
from __future__ import annotations
from typing import List, Dict, Any, Optional
from threading import Lock
from weakref import WeakSet
from datetime import datetime, timezone

from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS, ORDERS_STORAGE_WARNING, INSIGHT_FAILED
)

_lock = Lock()
_events: List[Dict[str, Any]] = []
_next_id = 1
MAX_EVENTS = 100
_started_on: "WeakSet[EventBus]" = WeakSet()


def _record(event_name: str, payload: Any):  # signature expected by EventBus
    global _next_id
    with _lock:
        evt = {
            'id': _next_id,
            'type': event_name,
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
        }
        if isinstance(payload, dict):
            for k in ('message', 'error', 'count', 'user_name'):
                if k in payload:
                    evt[k] = payload[k]
        _events.append(evt)
        _next_id += 1
        if len(_events) > MAX_EVENTS:
            del _events[: len(_events) - MAX_EVENTS]


def start(bus: Optional[EventBus] = None):
    """Idempotent start: subscribe observers once per bus."""
    bus = bus if bus is not None else GLOBAL_EVENT_BUS
    if bus in _started_on:
        return
    bus.subscribe(ORDERS_STORAGE_WARNING, _record)
    bus.subscribe(INSIGHT_FAILED, _record)
    _started_on.add(bus)


def get_events(since: int | None = None) -> Dict[str, Any]:
    """Return alerts newer than 'since' (exclusive), plus next_cursor for the following poll."""
    with _lock:
        if since is None:
            data = list(_events)
        else:
            data = [e for e in _events if e['id'] > since]
        next_cursor = _events[-1]['id'] if _events else since or 0
    return {'events': data, 'next_cursor': next_cursor}


def reset():
    """Drop buffered alerts (used by tests)."""
    global _next_id
    with _lock:
        _events.clear()
        _next_id = 1


__all__ = ['start', 'get_events', 'reset']
