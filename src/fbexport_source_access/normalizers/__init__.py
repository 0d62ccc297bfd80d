"""Per-resource-type record normalizers.

Adding a resource type:
  1. Create a RecordNormalizer subclass in the family module it belongs to
  2. Register an instance in NORMALIZERS below
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from fbexport_source_access.errors import UnknownResourceType
from fbexport_source_access.normalizers.base import RecordNormalizer
from fbexport_source_access.normalizers.directory import (
    BillableItemNormalizer,
    BusinessNormalizer,
    ClientNormalizer,
    ProfileNormalizer,
    ProjectNormalizer,
    TaxNormalizer,
    TimeEntryNormalizer,
)
from fbexport_source_access.normalizers.ledger import (
    ChartOfAccountsNormalizer,
    JournalEntryNormalizer,
    LedgerAccountNormalizer,
)
from fbexport_source_access.normalizers.purchases import (
    BillNormalizer,
    BillPaymentNormalizer,
    BillVendorNormalizer,
    ExpenseNormalizer,
)
from fbexport_source_access.normalizers.sales import (
    CreditNoteNormalizer,
    EstimateNormalizer,
    InvoiceNormalizer,
    OtherIncomeNormalizer,
    PaymentNormalizer,
)

NORMALIZERS: dict[str, RecordNormalizer] = {
    normalizer.resource_type: normalizer
    for normalizer in (
        ProfileNormalizer(),
        BusinessNormalizer(),
        InvoiceNormalizer(),
        EstimateNormalizer(),
        CreditNoteNormalizer(),
        PaymentNormalizer(),
        OtherIncomeNormalizer(),
        BillNormalizer(),
        BillPaymentNormalizer(),
        BillVendorNormalizer(),
        ExpenseNormalizer(),
        BillableItemNormalizer(),
        ClientNormalizer(),
        TaxNormalizer(),
        ProjectNormalizer(),
        TimeEntryNormalizer(),
        JournalEntryNormalizer(),
        LedgerAccountNormalizer(),
        ChartOfAccountsNormalizer(),
    )
}


def get_normalizer(resource_type: str) -> RecordNormalizer:
    normalizer = NORMALIZERS.get(resource_type)
    if normalizer is None:
        raise UnknownResourceType(resource_type, sorted(NORMALIZERS))
    return normalizer


def normalize(resource_type: str, items: Iterable[Any]) -> list[dict[str, Any]]:
    """Normalize a page of raw items; one item may expand to several rows."""
    normalizer = get_normalizer(resource_type)
    rows: list[dict[str, Any]] = []
    for item in items:
        rows.extend(normalizer.normalize(item))
    return rows


__all__ = ["NORMALIZERS", "RecordNormalizer", "get_normalizer", "normalize"]
