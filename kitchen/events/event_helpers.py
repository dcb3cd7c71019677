"""Event helper utilities.

Quick import:
    from kitchen.events.event_helpers import (
        publish_orders_merged, publish_storage_warning, publish_insight_failed
    )

Each helper takes an optional bus so components wired with their own
EventBus (tests, embedded use) do not leak events onto the global one.
"""
from __future__ import annotations
from typing import Optional
from .Event_Bus import (
    EventBus, GLOBAL_EVENT_BUS,
    ORDERS_MERGED, ORDERS_CLEARED, ORDERS_STORAGE_WARNING, INSIGHT_READY, INSIGHT_FAILED
)

__all__ = [
    'publish_orders_merged', 'publish_orders_cleared', 'publish_storage_warning',
    'publish_insight_ready', 'publish_insight_failed'
]


def _bus(bus: Optional[EventBus]) -> EventBus:
    return bus if bus is not None else GLOBAL_EVENT_BUS


def publish_orders_merged(count: int, incoming: int, bus: Optional[EventBus] = None):
    """Publish an orders.merged event."""
    _bus(bus).publish(ORDERS_MERGED, {'count': count, 'incoming': incoming})


def publish_orders_cleared(bus: Optional[EventBus] = None):
    _bus(bus).publish(ORDERS_CLEARED, None)


def publish_storage_warning(message: str, error: str, count: int, bus: Optional[EventBus] = None):
    """Publish an orders.storage_warning event.

    Payload structure:
        {'message': <text shown to the operator>, 'error': <cause>, 'count': <orders kept in memory>}
    """
    _bus(bus).publish(ORDERS_STORAGE_WARNING, {
        'message': message,
        'error': error,
        'count': count
    })


def publish_insight_ready(user_name: str, orders: int, bus: Optional[EventBus] = None):
    _bus(bus).publish(INSIGHT_READY, {'user_name': user_name, 'orders': orders})


def publish_insight_failed(user_name: str, error: str, bus: Optional[EventBus] = None):
    _bus(bus).publish(INSIGHT_FAILED, {'user_name': user_name, 'error': error})
