"""Double-entry journal built from invoices, expenses, payments and bills.

Each source document becomes one balanced row:

    invoices  → Dr Accounts Receivable   / Cr Sales Income
    expenses  → Dr <expense category>    / Cr Cash/Bank
    payments  → Dr Cash/Bank             / Cr Accounts Receivable
    bills     → Dr <expense category>    / Cr Accounts Payable
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx
from fbexport_shared.extract_models import (
    ExtractRequest,
    JournalEntry,
    JournalRequest,
    JournalResult,
)

from fbexport_source_access.engine import FetchEngine
from fbexport_source_access.errors import UpstreamHTTPError
from fbexport_source_access.models.base import as_text, to_amount
from fbexport_source_access.normalizers.base import as_dict, display_name

logger = logging.getLogger(__name__)

SOURCE_TYPES = ("invoices", "expenses", "payments", "bills")


def invoice_entry(item: dict[str, Any]) -> JournalEntry:
    number = item.get("invoice_number") or item.get("invoiceid") or "N/A"
    return JournalEntry(
        date=as_text(item.get("create_date") or item.get("updated") or item.get("date")) or "",
        description=f"Invoice #{number}",
        debit_account="Accounts Receivable",
        credit_account="Sales Income",
        amount=to_amount(item.get("amount")),
    )


def expense_entry(item: dict[str, Any]) -> JournalEntry:
    category = as_text(item.get("category_name") or as_dict(item.get("category")).get("category"))
    return JournalEntry(
        date=as_text(item.get("date")) or "",
        description=as_text(item.get("notes")) or f"Expense: {category or 'General'}",
        debit_account=category or "Expense",
        credit_account="Cash/Bank",
        amount=to_amount(item.get("amount")),
    )


def payment_entry(item: dict[str, Any]) -> JournalEntry:
    client = item.get("client") or as_dict(item.get("invoice")).get("client")
    return JournalEntry(
        date=as_text(item.get("date")) or "",
        description=f"Payment from {display_name(client) or 'Customer'}",
        debit_account="Cash/Bank",
        credit_account="Accounts Receivable",
        amount=to_amount(item.get("amount")),
    )


def bill_entry(item: dict[str, Any]) -> JournalEntry:
    number = item.get("bill_number") or item.get("id") or "N/A"
    return JournalEntry(
        date=as_text(item.get("create_date") or item.get("issue_date")) or "",
        description=f"Bill #{number}",
        debit_account=as_text(item.get("expense_category")) or "Purchase Expense",
        credit_account="Accounts Payable",
        amount=to_amount(item.get("amount")),
    )


ENTRY_BUILDERS: dict[str, Callable[[dict[str, Any]], JournalEntry]] = {
    "invoices": invoice_entry,
    "expenses": expense_entry,
    "payments": payment_entry,
    "bills": bill_entry,
}


async def _raw_rows(engine: FetchEngine, resource_type: str, request: JournalRequest) -> list[Any]:
    """Raw upstream rows for one source type; a failure contributes no rows."""
    try:
        result = await engine.extract(
            ExtractRequest(
                resource_type=resource_type,
                account_id=request.account_id,
                business_id=request.business_id,
                start_date=request.start_date,
                end_date=request.end_date,
                include_raw=True,
            )
        )
    except (UpstreamHTTPError, httpx.TransportError) as e:
        logger.warning(f"{resource_type} fetch failed: {e}")
        return []
    rows = result.raw or []
    logger.info(f"{resource_type}: {len(rows)} record(s)")
    return rows


async def generate_journal(engine: FetchEngine, request: JournalRequest) -> JournalResult:
    """Fetch the four source types concurrently and map them to journal rows."""
    # Token problems should fail the whole journal, not empty it.
    await engine.coordinator.ensure_valid_token()

    fetched = await asyncio.gather(*(_raw_rows(engine, t, request) for t in SOURCE_TYPES))

    entries: list[JournalEntry] = []
    counts: dict[str, int] = {}
    for resource_type, rows in zip(SOURCE_TYPES, fetched):
        build = ENTRY_BUILDERS[resource_type]
        items = [row for row in rows if isinstance(row, dict)]
        counts[resource_type] = len(items)
        entries.extend(build(item) for item in items)

    summary = ", ".join(f"{name}:{count}" for name, count in counts.items())
    logger.info(f"Journal summary: {summary}")
    return JournalResult(
        success=True,
        message=f"Generated {len(entries)} journal entries",
        account_id=request.account_id,
        business_id=request.business_id,
        total_entries=len(entries),
        entries=entries,
    )
