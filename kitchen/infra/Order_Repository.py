"""Order repository: the canonical, deduplicated order collection in one storage slot."""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from kitchen.domain.Order import dedupe_orders, sort_orders
from kitchen.events.Event_Bus import EventBus
from kitchen.events.event_helpers import (
    publish_orders_cleared, publish_orders_merged, publish_storage_warning
)
from kitchen.infra.Storage import KeyValueStorage, StorageError, StorageQuotaExceeded
from kitchen.utilities.constants import ORDERS_KEY, STORAGE_QUOTA_WARNING, STORAGE_WRITE_WARNING

logger = logging.getLogger(__name__)


class SaveOutcome(str, Enum):
    SAVED = "saved"
    DEGRADED = "degraded"


@dataclass
class MergeResult:
    orders: List[Dict[str, Any]]
    outcome: SaveOutcome = SaveOutcome.SAVED
    warning: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @property
    def saved(self) -> bool:
        return self.outcome is SaveOutcome.SAVED


class OrderRepository:
    def __init__(self, storage: KeyValueStorage, key: str = ORDERS_KEY, bus: Optional[EventBus] = None):
        self.storage = storage
        self.key = key
        self.bus = bus

    def load(self) -> List[Dict[str, Any]]:
        """Return stored orders, newest first. Absent, unreadable or malformed data yields []."""
        try:
            raw = self.storage.get(self.key)
        except StorageError as e:
            logger.warning(f"Could not read orders slot '{self.key}': {e}")
            return []
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid JSON in orders slot '{self.key}': {e}")
            return []
        if not isinstance(data, list) or not all(isinstance(o, dict) for o in data):
            logger.warning(f"Orders slot '{self.key}' does not hold a list of orders; ignoring it")
            return []
        return sort_orders(data)

    def save_orders(self, incoming: Iterable[Dict[str, Any]]) -> MergeResult:
        """Merge incoming orders over the stored ones and persist the full set.

        Incoming records win on identifier collisions. Persist failures are
        reported through the result, never raised.
        """
        incoming = list(incoming)
        try:
            existing = self.load()
            merged = sort_orders(dedupe_orders(existing, incoming))
        except Exception as e:
            logger.exception("Failed to merge incoming orders")
            return self._degraded(incoming, e)

        try:
            self.storage.set(self.key, json.dumps(merged, ensure_ascii=False, default=str))
        except (StorageError, TypeError, ValueError) as e:
            return self._degraded(merged, e)

        logger.info(f"Saved {len(merged)} orders ({len(incoming)} incoming)")
        publish_orders_merged(len(merged), len(incoming), bus=self.bus)
        return MergeResult(merged)

    def merge(self, incoming: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self.save_orders(incoming).orders

    def clear(self) -> None:
        """Remove the stored collection. Safe to call on an empty store."""
        try:
            self.storage.delete(self.key)
        except StorageError as e:
            logger.warning(f"Could not clear orders slot '{self.key}': {e}")
            return
        publish_orders_cleared(bus=self.bus)

    def _degraded(self, orders: List[Dict[str, Any]], error: Exception) -> MergeResult:
        message = STORAGE_QUOTA_WARNING if isinstance(error, StorageQuotaExceeded) else STORAGE_WRITE_WARNING
        logger.warning(f"{message} ({error})")
        publish_storage_warning(message, str(error), len(orders), bus=self.bus)
        return MergeResult(orders, SaveOutcome.DEGRADED, message, [str(error)])
