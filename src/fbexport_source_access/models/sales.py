"""Output rows for the receivables side: invoices through other income."""

from __future__ import annotations

from typing import Any

from fbexport_source_access.models.base import Amount, Items, NormalizedRecord, Scalar, Text


class InvoiceRecord(NormalizedRecord):
    invoiceid: Scalar = None
    invoice_number: Text = None
    create_date: Text = None
    due_date: Text = None
    clientid: Scalar = None
    client_name: Text = None
    currency_code: Text = None
    amount: Amount = 0.0
    outstanding: Amount = 0.0
    paid: Amount = 0.0
    status: Scalar = None
    display_status: Text = None
    payment_status: Text = None
    po_number: Text = None
    notes: Text = None
    line_items: int = 0
    line_description: Text = None
    quantity: Scalar = None
    unit_cost: Amount = 0.0
    line_amount: Amount = 0.0


class EstimateRecord(NormalizedRecord):
    estimateid: Scalar = None
    estimate_number: Text = None
    create_date: Text = None
    customerid: Scalar = None
    client_name: Text = None
    currency_code: Text = None
    amount: Amount = 0.0
    status: Scalar = None
    display_status: Text = None
    notes: Text = None
    line_items: int = 0
    line_description: Text = None
    quantity: Scalar = None
    unit_cost: Amount = 0.0
    line_amount: Amount = 0.0


class CreditNoteLine(NormalizedRecord):
    description: Text = None
    name: Text = None
    qty: Scalar = 1
    taskno: Scalar = None
    taxAmount1: Scalar = None
    taxAmount2: Scalar = None
    taxName1: Text = None
    taxName2: Text = None
    unit_cost: Amount = 0.0
    amount: Amount = 0.0


class CreditNoteRecord(NormalizedRecord):
    accounting_systemid: Scalar = None
    amount: Amount = 0.0
    city: Text = None
    clientid: Scalar = None
    code: Text = None
    country: Text = None
    create_date: Text = None
    credit_number: Text = None
    credit_type: Scalar = None
    creditid: Scalar = None
    currency_code: Text = None
    current_organization: Text = None
    client_name: Text = None
    description: Text = None
    display_status: Text = None
    dispute_status: Scalar = None
    ext_archive: Scalar = None
    fname: Text = None
    id: Scalar = None
    language: Text = None
    last_order_status: Scalar = None
    lines: int = 0
    lname: Text = None
    notes: Text = None
    organization: Text = None
    paid: Amount = 0.0
    payment_status: Text = None
    payment_type: Text = None
    province: Text = None
    sentid: Scalar = None
    status: Scalar = None
    street: Text = None
    street2: Text = None
    template: Text = None
    terms: Text = None
    vat_name: Text = None
    vat_number: Text = None
    vis_state: Scalar = None
    # primary line flattened for CSV
    line_items: Text = None
    qty: Scalar = None
    unit: float | None = None
    amt: float | None = None
    tax1: Scalar = None
    tax2: Scalar = None
    line_items_array: list[dict[str, Any]] = []


class PaymentRecord(NormalizedRecord):
    amount: Amount = 0.0
    clientid: Scalar = None
    client_name: Text = None
    creditid: Scalar = None
    date: Text = None
    invoice_number: Text = None
    line_items: int = 0


class OtherIncomeRecord(NormalizedRecord):
    amount: Amount = 0.0
    currency_code: Text = None
    category: Text = None
    created_at: Text = None
    date: Text = None
    description: Text = None
    reference: Scalar = None
    source: Text = None
    status: Scalar = None
    transaction_number: Scalar = None
    line_items: int = 0
    line_items_raw: Items = []
    line_description: Text = ""
    line_qty: Scalar = 1
    line_unit_cost: Amount = 0.0
    line_total: Amount = 0.0
