import json
import tempfile
import unittest
from pathlib import Path
from kitchen.utilities.export_import import export_orders, parse_order_feed, read_order_feed


class TestParseOrderFeed(unittest.TestCase):

    def test_json_array(self):
        self.assertEqual(parse_order_feed('[{"id": 1}, {"id": 2}]'), [{"id": 1}, {"id": 2}])

    def test_wrapped_orders(self):
        self.assertEqual(parse_order_feed('{"orders": [{"id": 1}]}'), [{"id": 1}])

    def test_single_order(self):
        self.assertEqual(parse_order_feed('{"orderId": "Z1"}'), [{"orderId": "Z1"}])

    def test_json_lines(self):
        text = '{"id": 1}\n\n{"id": 2}\n'
        self.assertEqual(parse_order_feed(text), [{"id": 1}, {"id": 2}])

    def test_non_objects_skipped(self):
        self.assertEqual(parse_order_feed('[{"id": 1}, 3, "x", null]'), [{"id": 1}])

    def test_empty(self):
        self.assertEqual(parse_order_feed("  "), [])

    def test_invalid(self):
        with self.assertRaises(ValueError):
            parse_order_feed("order,total\nZ1,400")
        with self.assertRaises(ValueError):
            parse_order_feed("42")


class TestExportOrders(unittest.TestCase):

    def test_export_then_read(self):
        orders = [{"orderId": "Z1", "orderPlacedAt": 1700000000, "items": ["Masala Dosa"]}]
        with tempfile.TemporaryDirectory() as tmp:
            path = export_orders(orders, Path(tmp) / "out" / "orders.json")
            with open(path, encoding="utf-8") as f:
                self.assertEqual(json.load(f), orders)
            self.assertEqual(read_order_feed(path), orders)
