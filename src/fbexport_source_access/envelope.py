"""Locating the row array inside FreshBooks response envelopes.

The API wraps payloads differently per resource family:

    {"response": {"result": {"invoices": [...], "page": 1, "pages": 3}}}
    {"result": {"accounts": [...]}}
    {"manualJournalEntries": [...], "meta": {...}}

`unwrap()` peels the generic `response`/`result` layers, then the strategies in
ROW_STRATEGIES are tried in order. The order matters when an envelope carries
several arrays: the declared key always wins over the first array found.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

Rows = list[Any]


def unwrap(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        return {}
    response = payload.get("response")
    if isinstance(response, dict):
        result = response.get("result")
        return result if isinstance(result, dict) else response
    return payload


def _declared_key(body: dict[str, Any], key: str | None) -> Rows | None:
    value = body.get(key) if key else None
    return value if isinstance(value, list) else None


def _declared_key_under_result(body: dict[str, Any], key: str | None) -> Rows | None:
    result = body.get("result")
    if not key or not isinstance(result, dict):
        return None
    value = result.get(key)
    return value if isinstance(value, list) else None


def _first_array(container: Any) -> Rows | None:
    if not isinstance(container, dict):
        return None
    for value in container.values():
        if isinstance(value, list):
            return value
    return None


def _first_array_under_result(body: dict[str, Any], key: str | None) -> Rows | None:
    return _first_array(body.get("result"))


def _first_array_in_body(body: dict[str, Any], key: str | None) -> Rows | None:
    return _first_array(body)


ROW_STRATEGIES: tuple[Callable[[dict[str, Any], str | None], Rows | None], ...] = (
    _declared_key,
    _declared_key_under_result,
    _first_array_under_result,
    _first_array_in_body,
)


def extract_rows(body: dict[str, Any], key: str | None) -> Rows:
    """Rows from an already unwrapped envelope; empty when none of the strategies match."""
    for strategy in ROW_STRATEGIES:
        rows = strategy(body, key)
        if rows is not None:
            return rows
    return []


def total_pages(body: dict[str, Any]) -> int | None:
    """Server-reported page count, looked up in `meta`, `pagination` or the body itself."""
    meta = body.get("meta") or body.get("pagination") or body
    if not isinstance(meta, dict):
        return None
    pages = meta.get("pages")
    if pages is None:
        pages = meta.get("total_pages")
    try:
        count = int(pages)
    except (TypeError, ValueError):
        return None
    return count if count > 0 else None


def first_row_id(rows: Rows) -> Any:
    """Identifier of the first row (id, else uuid) for the stuck-pagination guard."""
    if not rows or not isinstance(rows[0], dict):
        return None
    return rows[0].get("id") or rows[0].get("uuid") or None
