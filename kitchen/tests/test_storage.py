import json
import tempfile
import unittest
from pathlib import Path
from kitchen.infra.Order_Repository import OrderRepository
from kitchen.infra.Storage import JsonFileStorage, MemoryStorage, StorageError, StorageQuotaExceeded


class TestMemoryStorage(unittest.TestCase):

    def test_get_set_delete(self):
        storage = MemoryStorage()
        self.assertIsNone(storage.get("k"))
        storage.set("k", "v")
        self.assertEqual(storage.get("k"), "v")
        storage.delete("k")
        storage.delete("k")
        self.assertIsNone(storage.get("k"))

    def test_quota(self):
        storage = MemoryStorage(quota=10)
        storage.set("k", "12345")
        with self.assertRaises(StorageQuotaExceeded):
            storage.set("k", "x" * 20)
        self.assertEqual(storage.get("k"), "12345")

    def test_rejects_non_string(self):
        with self.assertRaises(StorageError):
            MemoryStorage().set("k", ["not", "a", "string"])


class TestJsonFileStorage(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "nested" / "storage.json"

    def tearDown(self):
        self._tmp.cleanup()

    def test_round_trip_between_instances(self):
        JsonFileStorage(self.path).set("orders", "[1]")
        self.assertEqual(JsonFileStorage(self.path).get("orders"), "[1]")

    def test_slots_are_independent(self):
        storage = JsonFileStorage(self.path)
        storage.set("a", "1")
        storage.set("b", "2")
        storage.delete("a")
        self.assertIsNone(storage.get("a"))
        self.assertEqual(storage.get("b"), "2")

    def test_corrupt_file_reads_as_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        storage = JsonFileStorage(self.path)
        self.assertIsNone(storage.get("orders"))
        storage.set("orders", "[]")
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"orders": "[]"})

    def test_quota_keeps_previous_content(self):
        storage = JsonFileStorage(self.path, quota=64)
        storage.set("k", "small")
        with self.assertRaises(StorageQuotaExceeded):
            storage.set("k", "x" * 200)
        self.assertEqual(storage.get("k"), "small")

    def test_delete_missing_file_is_noop(self):
        JsonFileStorage(self.path).delete("orders")
        self.assertFalse(self.path.exists())

    def test_invalid_utf8_file_reads_as_empty(self):
        self.path.parent.mkdir(parents=True)
        for raw in (b'\xff\xfe', b'{"ck_orders_v1": "\xff\xfe[]"}'):
            self.path.write_bytes(raw)
            storage = JsonFileStorage(self.path)
            self.assertIsNone(storage.get("ck_orders_v1"))
            storage.delete("ck_orders_v1")

            repo = OrderRepository(storage)
            self.assertEqual(repo.load(), [])
            repo.clear()
            self.assertEqual(repo.merge([{"id": "A", "placedAt": 1}]), [{"id": "A", "placedAt": 1}])
            self.assertEqual(repo.load(), [{"id": "A", "placedAt": 1}])
