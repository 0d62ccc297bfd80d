"""Base normalizer and the lookup helpers every resource family shares.

The ABC fixes the contract (one raw upstream item in, zero or more output
rows out) while the helpers capture the conventions FreshBooks payloads
follow across families:

  - `first()` / `first_truthy()` pick the first populated alias of a field
  - `dig()` walks nested objects without tripping over missing levels
  - `extract_line_items()` finds a line array wherever the family put it
  - `display_name()` renders a client or vendor the same way everywhere
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import ValidationError

from fbexport_source_access.models.base import NormalizedRecord, to_amount

logger = logging.getLogger(__name__)

KNOWN_LINE_KEYS = ("invoice_lines", "estimate_lines", "bill_lines", "lines", "line_items")
GENERIC_ARRAY_KEYS = ("items", "entries", "rows")
MAX_LINE_SEARCH_DEPTH = 3

NAME_KEYS = ("name", "vendor_name", "display_name")


def first(*values: Any) -> Any:
    """First value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def first_truthy(*values: Any) -> Any:
    """First value that is truthy; the last candidate when none are."""
    for value in values:
        if value:
            return value
    return values[-1] if values else None


def dig(obj: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(obj, dict):
            return None
        obj = obj.get(key)
    return obj


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def extract_line_items(record: Any, depth: int = 0) -> list[Any]:
    """First non-empty line array in a record, searched at most three levels deep.

    Known line keys first, then generic array fields, then each nested object.
    """
    if depth > MAX_LINE_SEARCH_DEPTH or not isinstance(record, dict):
        return []
    for keys in (KNOWN_LINE_KEYS, GENERIC_ARRAY_KEYS):
        for key in keys:
            value = record.get(key)
            if isinstance(value, list) and value:
                return value
    for value in record.values():
        if isinstance(value, dict):
            found = extract_line_items(value, depth + 1)
            if found:
                return found
    return []


def synthetic_line(name: Any, amount: Any) -> dict[str, Any]:
    """The single line standing in for a whole expense or payment."""
    value = to_amount(amount)
    return {"name": name, "qty": 1, "unit_cost": value, "total": value}


def display_name(counterparty: Any) -> str | None:
    """Client/vendor display name.

    Organization, else "first last", else first, else last, else the raw name
    field. A counterparty given as a plain string is its own name.
    """
    if isinstance(counterparty, str):
        return counterparty or None
    if not isinstance(counterparty, dict):
        return None
    organization = counterparty.get("organization")
    if organization:
        return organization
    fname, lname = counterparty.get("fname"), counterparty.get("lname")
    if fname and lname:
        return f"{fname} {lname}".strip()
    if fname or lname:
        return fname or lname
    for key in NAME_KEYS:
        if counterparty.get(key):
            return counterparty[key]
    return None


class RecordNormalizer(ABC):
    """Turns one raw upstream item into zero or more flat output rows."""

    resource_type: str
    record_model: type[NormalizedRecord]

    def normalize(self, item: Any) -> list[dict[str, Any]]:
        if not isinstance(item, dict):
            return []
        try:
            built = self.build(item)
        except ValidationError as e:
            logger.warning(f"Dropping malformed {self.resource_type} item: {e}")
            return []
        if built is None:
            return []
        records = built if isinstance(built, list) else [built]
        return [record.model_dump() for record in records]

    def columns(self) -> list[str]:
        return self.record_model.columns()

    @abstractmethod
    def build(self, item: dict[str, Any]) -> NormalizedRecord | list[NormalizedRecord] | None:
        """Build the typed row(s) for one raw item; None drops the item."""
