"""Order record helpers: identity resolution and placement-time ordering.

Order records are plain dicts as delivered by the platform export. Beyond the
identifier and the placement timestamp the payload is opaque.
"""
import json
import math
from typing import Any, Dict, Iterable, List, Optional, Tuple

from kitchen.utilities.constants import ORDER_ID_FIELDS, PLACED_AT_FIELDS

# Tagged key: ("id", value) when an identifier field is present,
# ("fingerprint", canonical_json) otherwise.
OrderKey = Tuple[str, Any]

ID_SOURCE = "id"
FINGERPRINT_SOURCE = "fingerprint"


def fingerprint(record: Any) -> str:
    """Canonical JSON serialization of a whole record."""
    try:
        return json.dumps(record, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        # unsortable mixed-type keys or circular references
        return repr(record)


def _hashable(value: Any) -> Any:
    # True == 1 as a dict key
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (str, int, float)):
        return value
    return fingerprint(value)


def order_key(record: Any, id_fields: Iterable[str] = ORDER_ID_FIELDS) -> OrderKey:
    """Resolve the dedup key of a record.

    Probes each id field in priority order and falls back to the structural
    fingerprint. Total and deterministic for any input.
    """
    if isinstance(record, dict):
        for field in id_fields:
            value = record.get(field)
            if value is not None:
                return (ID_SOURCE, _hashable(value))
    return (FINGERPRINT_SOURCE, fingerprint(record))


def placed_at(record: Any) -> Optional[float]:
    """Return the placement timestamp as a float, or None when missing/non-numeric."""
    if not isinstance(record, dict):
        return None
    for field in PLACED_AT_FIELDS:
        value = record.get(field)
        if value is None or isinstance(value, bool):
            continue
        try:
            ts = float(value)
        except (TypeError, ValueError):
            continue
        if not math.isnan(ts):
            return ts
    return None


def _sort_key(record: Any) -> Tuple[int, float]:
    ts = placed_at(record)
    # Untimestamped records go last
    return (0, -ts) if ts is not None else (1, 0.0)


def sort_orders(orders: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Newest first; stable for equal timestamps."""
    return sorted(orders, key=_sort_key)


def dedupe_orders(*batches: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Overlay batches in order; a later record replaces an earlier one with the same key."""
    by_key: Dict[OrderKey, Dict[str, Any]] = {}
    for batch in batches:
        for record in batch:
            by_key[order_key(record)] = record
    return list(by_key.values())
