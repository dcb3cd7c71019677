"""Simple Event Bus / Observer implementation for order and insight notifications.

Event names:
  orders.merged -> payload {"count": int, "incoming": int}
  orders.cleared -> payload None
  orders.storage_warning -> payload {"message": str, "error": str, "count": int}
  insight.ready -> payload {"user_name": str, "orders": int}
  insight.failed -> payload {"user_name": str, "error": str}

Listeners are callables taking (event_name, payload).
"""
from __future__ import annotations
from collections import defaultdict
import logging
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
ORDERS_MERGED = "orders.merged"
ORDERS_CLEARED = "orders.cleared"
ORDERS_STORAGE_WARNING = "orders.storage_warning"
INSIGHT_READY = "insight.ready"
INSIGHT_FAILED = "insight.failed"


KNOWN_EVENTS = frozenset({ORDERS_MERGED, ORDERS_CLEARED, ORDERS_STORAGE_WARNING, INSIGHT_READY, INSIGHT_FAILED})
ANY_EVENT = "*"

Listener = Callable[[str, Any], None]


class EventBus:
	"""Routes order and insight events to listeners registered per event name.

	ANY_EVENT listeners receive every event after the named ones.
	"""

	def __init__(self):
		self._listeners: Dict[str, List[Listener]] = defaultdict(list)

	def subscribe(self, event_name: str, listener: Listener) -> Callable[[], None]:
		"""Register a listener once; returns a callable that removes it again."""
		if event_name != ANY_EVENT and event_name not in KNOWN_EVENTS:
			raise ValueError(f"Unknown event: {event_name}")
		if listener not in self._listeners[event_name]:
			self._listeners[event_name].append(listener)
		return lambda: self.unsubscribe(event_name, listener)

	def unsubscribe(self, event_name: str, listener: Listener) -> None:
		listeners = self._listeners.get(event_name, [])
		if listener in listeners:
			listeners.remove(listener)

	def listener_count(self, event_name: str) -> int:
		return len(self._listeners.get(event_name, []))

	def publish(self, event_name: str, payload: Any = None) -> int:
		"""Deliver to every listener; returns how many handled it without raising."""
		targets = list(self._listeners.get(event_name, [])) + list(self._listeners.get(ANY_EVENT, []))
		delivered = 0
		for listener in targets:
			try:
				listener(event_name, payload)
			except Exception:
				logger.exception("Error delivering %s to %r", event_name, listener)
				continue
			delivered += 1
		return delivered


# Shared instance used by repositories and web observers
GLOBAL_EVENT_BUS = EventBus()


__all__ = [
	'EventBus', 'GLOBAL_EVENT_BUS', 'KNOWN_EVENTS', 'ANY_EVENT',
	'ORDERS_MERGED', 'ORDERS_CLEARED', 'ORDERS_STORAGE_WARNING', 'INSIGHT_READY', 'INSIGHT_FAILED'
]
