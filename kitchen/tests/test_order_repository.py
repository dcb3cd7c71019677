import json
import unittest
from kitchen.events.Event_Bus import EventBus, ORDERS_MERGED, ORDERS_STORAGE_WARNING
from kitchen.infra.Order_Repository import OrderRepository, SaveOutcome
from kitchen.infra.Storage import KeyValueStorage, MemoryStorage, StorageError
from kitchen.utilities.constants import ORDERS_KEY, STORAGE_QUOTA_WARNING, STORAGE_WRITE_WARNING


class BrokenStorage(KeyValueStorage):
    """Every operation fails, like storage disabled in a private browser window."""

    def get(self, key):
        raise StorageError("storage disabled")

    def set(self, key, value):
        raise StorageError("storage disabled")

    def delete(self, key):
        raise StorageError("storage disabled")


class TestOrderRepository(unittest.TestCase):

    def setUp(self):
        self.storage = MemoryStorage()
        self.bus = EventBus()
        self.events = []
        self.bus.subscribe(ORDERS_MERGED, lambda name, payload: self.events.append((name, payload)))
        self.bus.subscribe(ORDERS_STORAGE_WARNING, lambda name, payload: self.events.append((name, payload)))
        self.repo = OrderRepository(self.storage, bus=self.bus)

    def test_merge_scenario_overwrites_and_sorts(self):
        self.repo.merge([{"id": "A", "placedAt": 100}])
        merged = self.repo.merge([{"id": "A", "placedAt": 200}, {"id": "B", "placedAt": 50}])
        expected = [{"id": "A", "placedAt": 200}, {"id": "B", "placedAt": 50}]
        self.assertEqual(merged, expected)
        self.assertEqual(self.repo.load(), expected)

    def test_merge_is_idempotent(self):
        batch = [{"orderId": "1", "orderPlacedAt": 5}, {"orderId": "2", "orderPlacedAt": 7}, {"total": 99}]
        once = self.repo.merge(batch)
        twice = self.repo.merge(batch)
        self.assertEqual(once, twice)
        self.assertEqual(len(self.repo.load()), 3)

    def test_later_merge_wins_on_collision(self):
        self.repo.merge([{"order_id": 42, "status": "placed", "placedAt": 1}])
        self.repo.merge([{"order_id": 42, "status": "delivered", "placedAt": 1}])
        stored = self.repo.load()
        self.assertEqual(len(stored), 1)
        self.assertEqual(stored[0]["status"], "delivered")

    def test_id_less_records(self):
        self.repo.merge([{"total": 100, "placedAt": 1}, {"total": 200, "placedAt": 1}])
        self.assertEqual(len(self.repo.load()), 2)
        self.repo.merge([{"total": 100, "placedAt": 1}])
        self.assertEqual(len(self.repo.load()), 2)

    def test_load_is_ordered_descending(self):
        self.repo.merge([{"id": i, "placedAt": ts} for i, ts in enumerate([5, 50, 1, 20, 20])])
        stamps = [o["placedAt"] for o in self.repo.load()]
        for a, b in zip(stamps, stamps[1:]):
            self.assertGreaterEqual(a, b)

    def test_merge_empty_on_empty_store(self):
        self.assertEqual(self.repo.merge([]), [])
        self.assertEqual(self.repo.load(), [])

    def test_clear_then_load(self):
        self.repo.merge([{"id": "A", "placedAt": 1}])
        self.repo.clear()
        self.assertEqual(self.repo.load(), [])
        self.assertIsNone(self.storage.get(ORDERS_KEY))
        self.repo.clear()

    def test_persisted_slot_is_full_merged_set(self):
        self.repo.merge([{"id": "A", "placedAt": 1}])
        self.repo.merge([{"id": "B", "placedAt": 2}])
        self.assertEqual([o["id"] for o in json.loads(self.storage.get(ORDERS_KEY))], ["B", "A"])

    def test_corrupt_slot_loads_empty(self):
        for raw in ("{broken", '{"id": "A"}', '[1, 2]', '"text"'):
            self.storage.set(ORDERS_KEY, raw)
            self.assertEqual(self.repo.load(), [])

    def test_corrupt_slot_is_replaced_on_merge(self):
        self.storage.set(ORDERS_KEY, "{broken")
        self.assertEqual(self.repo.merge([{"id": "A"}]), [{"id": "A"}])
        self.assertEqual(self.repo.load(), [{"id": "A"}])

    def test_merge_publishes_event(self):
        self.repo.merge([{"id": "A"}, {"id": "B"}])
        self.assertEqual(self.events, [(ORDERS_MERGED, {"count": 2, "incoming": 2})])

    def test_quota_exceeded_returns_merged_with_warning(self):
        self.repo.merge([{"id": "A", "placedAt": 1}])
        self.storage.quota = len(self.storage.get(ORDERS_KEY)) + len(ORDERS_KEY) + 5
        result = self.repo.save_orders([{"id": "B", "placedAt": 2, "items": ["Butter Chicken"] * 20}])
        self.assertEqual(result.outcome, SaveOutcome.DEGRADED)
        self.assertFalse(result.saved)
        self.assertEqual(result.warning, STORAGE_QUOTA_WARNING)
        self.assertEqual([o["id"] for o in result.orders], ["B", "A"])
        # Stored data is untouched
        self.assertEqual([o["id"] for o in self.repo.load()], ["A"])
        name, payload = self.events[-1]
        self.assertEqual(name, ORDERS_STORAGE_WARNING)
        self.assertEqual(payload["message"], STORAGE_QUOTA_WARNING)
        self.assertEqual(payload["count"], 2)

    def test_disabled_storage_never_raises(self):
        repo = OrderRepository(BrokenStorage(), bus=self.bus)
        self.assertEqual(repo.load(), [])
        result = repo.save_orders([{"id": "A"}])
        self.assertEqual(result.orders, [{"id": "A"}])
        self.assertEqual(result.warning, STORAGE_WRITE_WARNING)
        repo.clear()

    def test_non_json_values_are_stringified(self):
        result = self.repo.save_orders([{"id": "A", "raw": {1, 2}}])
        self.assertEqual(result.outcome, SaveOutcome.SAVED)
        self.assertEqual(self.repo.load()[0]["raw"], "{1, 2}")
