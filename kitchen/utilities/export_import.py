"""
Import and export of order feeds (delivery platform exports, backups).
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def _only_orders(entries: List[Any]) -> List[Dict[str, Any]]:
    orders = [e for e in entries if isinstance(e, dict)]
    skipped = len(entries) - len(orders)
    if skipped:
        logger.warning(f"Skipped {skipped} feed entries that are not order objects")
    return orders


def parse_order_feed(text: str) -> List[Dict[str, Any]]:
    """Parse an order feed.

    Accepted shapes:
      - a JSON array of orders
      - a JSON object with an "orders" array
      - JSON Lines, one order per line
    Raises ValueError when the text matches none of them.
    """
    text = (text or "").strip()
    if not text:
        return []

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        try:
            entries = [json.loads(line) for line in lines]
        except json.JSONDecodeError as e:
            raise ValueError(f"Order feed is neither JSON nor JSON Lines: {e}") from e
        return _only_orders(entries)

    if isinstance(data, list):
        return _only_orders(data)
    if isinstance(data, dict):
        if isinstance(data.get("orders"), list):
            return _only_orders(data["orders"])
        # A single order object
        return [data]
    raise ValueError("Order feed must be a JSON array or an object with an 'orders' array")


def read_order_feed(path: Path) -> List[Dict[str, Any]]:
    """Read and parse an order feed file."""
    with open(path, 'r', encoding='utf-8') as f:
        orders = parse_order_feed(f.read())
    logger.info(f"Read {len(orders)} orders from {path}")
    return orders


def export_orders(orders: List[Dict[str, Any]], output_path: Optional[Path] = None) -> Path:
    """Write orders to a JSON file and return its path."""
    if output_path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path(f"orders_export_{timestamp}.json")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(orders, f, indent=2, ensure_ascii=False, default=str)

    logger.info(f"Exported {len(orders)} orders to {output_path}")
    return output_path
