"""Output rows for the payables side: bills, bill payments, vendors, expenses."""

from __future__ import annotations

from fbexport_source_access.models.base import Amount, Items, NormalizedRecord, Scalar, Text


class BillRecord(NormalizedRecord):
    amount: Amount = 0.0
    bill_number: Text = None
    created_at: Text = None
    currency_code: Text = None
    due_date: Text = None
    due_offset_days: int = 0
    issue_date: Text = None
    outstanding: Amount = 0.0
    overall_category: Text = None
    paid: Amount = 0.0
    status: Scalar = None
    tax_amount: Amount = 0.0
    total_amount: Amount = 0.0
    line_items: int = 0
    parent_id: Scalar = None
    line_description: Text = ""
    quantity: Scalar = 1
    category: Text = ""
    tax_amount1: Scalar = ""
    tax_amount2: Scalar = ""
    tax_name1: Text = ""
    tax_name2: Text = ""
    tax_percent1: Scalar = ""
    tax_percent2: Scalar = ""
    line_total_amount: Amount = 0.0
    unit_cost: Amount = 0.0
    line_date: Text = None
    description: Text = None
    vendor: Text = None
    vendorid: Scalar = None
    line_items_array: Items = []


class BillPaymentRecord(NormalizedRecord):
    amount: Amount = 0.0
    billid: Scalar = None
    payment_id: Scalar = None
    paid_date: Text = None
    payment_type: Text = None
    bill_number: Scalar = None


class BillVendorRecord(NormalizedRecord):
    city: Text = None
    country: Text = None
    currency_code: Text = None
    phone: Text = None
    postal_code: Text = None
    primary_contact_email: Text = None
    primary_contact_first_name: Text = None
    primary_contact_last_name: Text = None
    province: Text = None
    street: Text = None
    street2: Text = None
    vendor_name: Text = None
    website: Text = None


class ExpenseLine(NormalizedRecord):
    line_date: Text = None
    line_description: Text = None
    qty: Scalar = 1
    unit_cost: Amount = 0.0
    line_total: Amount = 0.0
    category: Text = None


class ExpenseRecord(NormalizedRecord):
    account_name: Text = None
    amount: Amount = 0.0
    bank_name: Text = None
    taxAmount1: Scalar = None
    taxAmount2: Scalar = None
    taxName1: Text = None
    taxName2: Text = None
    taxPercent1: Scalar = None
    taxPercent2: Scalar = None
    vendor: Text = None
    notes: Text = None
    line_items: list[ExpenseLine] = []
    line_date: Text = None
    qty: Scalar = 1
    unit_cost: float | None = None
    line_total: float | None = None
    category: Text = None
    categoryid: Scalar = None
    vendorid: Scalar = None
    date: Text = None
