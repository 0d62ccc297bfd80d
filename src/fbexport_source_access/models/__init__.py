"""Typed output rows, one model per exported resource type.

The normalizers build these and dump them to dicts at the activity boundary.
Each model declares the full column set of its resource type, which is what
keeps CSV exports stable no matter which optional fields FreshBooks populated.
"""

from fbexport_source_access.models.base import (
    Amount,
    Items,
    NormalizedRecord,
    Scalar,
    Text,
    format_date,
    to_amount,
)
from fbexport_source_access.models.directory import (
    BillableItemRecord,
    BusinessRecord,
    ClientRecord,
    ProfileRecord,
    ProjectRecord,
    TaxRecord,
    TimeEntryRecord,
)
from fbexport_source_access.models.ledger import (
    ChartAccountRecord,
    JournalEntryRecord,
    LedgerAccountRecord,
)
from fbexport_source_access.models.purchases import (
    BillPaymentRecord,
    BillRecord,
    BillVendorRecord,
    ExpenseLine,
    ExpenseRecord,
)
from fbexport_source_access.models.sales import (
    CreditNoteLine,
    CreditNoteRecord,
    EstimateRecord,
    InvoiceRecord,
    OtherIncomeRecord,
    PaymentRecord,
)

__all__ = [
    "Amount",
    "BillPaymentRecord",
    "BillRecord",
    "BillVendorRecord",
    "BillableItemRecord",
    "BusinessRecord",
    "ChartAccountRecord",
    "ClientRecord",
    "CreditNoteLine",
    "CreditNoteRecord",
    "EstimateRecord",
    "ExpenseLine",
    "ExpenseRecord",
    "InvoiceRecord",
    "Items",
    "JournalEntryRecord",
    "LedgerAccountRecord",
    "NormalizedRecord",
    "OtherIncomeRecord",
    "PaymentRecord",
    "ProfileRecord",
    "ProjectRecord",
    "Scalar",
    "TaxRecord",
    "Text",
    "TimeEntryRecord",
    "format_date",
    "to_amount",
]
