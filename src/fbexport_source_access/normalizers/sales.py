"""Normalizers for invoices, estimates, credit notes, payments and other income."""

from __future__ import annotations

from typing import Any

from fbexport_source_access.models.sales import (
    CreditNoteLine,
    CreditNoteRecord,
    EstimateRecord,
    InvoiceRecord,
    OtherIncomeRecord,
    PaymentRecord,
)
from fbexport_source_access.normalizers.base import (
    RecordNormalizer,
    as_dict,
    dig,
    display_name,
    extract_line_items,
    first,
    first_truthy,
    synthetic_line,
)


def _primary_line(lines: list[Any]) -> dict[str, Any]:
    return as_dict(lines[0]) if lines else {}


class InvoiceNormalizer(RecordNormalizer):
    resource_type = "invoices"
    record_model = InvoiceRecord

    def build(self, item: dict[str, Any]) -> InvoiceRecord:
        lines = extract_line_items(item)
        line = _primary_line(lines)
        return InvoiceRecord(
            invoiceid=first(item.get("invoiceid"), item.get("id")),
            invoice_number=item.get("invoice_number"),
            create_date=item.get("create_date"),
            due_date=item.get("due_date"),
            clientid=first(item.get("customerid"), item.get("clientid")),
            client_name=first(display_name(item.get("client")), display_name(item)),
            currency_code=first(item.get("currency_code"), dig(item, "amount", "code")),
            amount=item.get("amount"),
            outstanding=item.get("outstanding"),
            paid=item.get("paid"),
            status=first(item.get("v3_status"), item.get("status")),
            display_status=item.get("display_status"),
            payment_status=item.get("payment_status"),
            po_number=item.get("po_number"),
            notes=item.get("notes"),
            line_items=len(lines),
            line_description=first_truthy(line.get("description"), line.get("name"), None),
            quantity=first(line.get("qty"), line.get("quantity")),
            unit_cost=line.get("unit_cost"),
            line_amount=line.get("amount"),
        )


class EstimateNormalizer(RecordNormalizer):
    resource_type = "estimates"
    record_model = EstimateRecord

    def build(self, item: dict[str, Any]) -> EstimateRecord:
        lines = extract_line_items(item)
        line = _primary_line(lines)
        return EstimateRecord(
            estimateid=first(item.get("estimateid"), item.get("id")),
            estimate_number=item.get("estimate_number"),
            create_date=item.get("create_date"),
            customerid=first(item.get("customerid"), item.get("clientid")),
            client_name=first(display_name(item.get("client")), display_name(item)),
            currency_code=first(item.get("currency_code"), dig(item, "amount", "code")),
            amount=item.get("amount"),
            status=first(item.get("ui_status"), item.get("status")),
            display_status=item.get("display_status"),
            notes=item.get("notes"),
            line_items=len(lines),
            line_description=first_truthy(line.get("description"), line.get("name"), None),
            quantity=first(line.get("qty"), line.get("quantity")),
            unit_cost=line.get("unit_cost"),
            line_amount=line.get("amount"),
        )


class CreditNoteNormalizer(RecordNormalizer):
    resource_type = "credit_notes"
    record_model = CreditNoteRecord

    @staticmethod
    def _line(raw: dict[str, Any]) -> CreditNoteLine:
        return CreditNoteLine(
            description=first_truthy(raw.get("description"), raw.get("name"), None),
            name=raw.get("name") or None,
            qty=first(raw.get("qty"), raw.get("quantity"), raw.get("qty_delta"), 1),
            taskno=first(raw.get("taskno"), raw.get("task_no")),
            taxAmount1=first(raw.get("taxAmount1"), raw.get("tax_amount1"), raw.get("tax1_amount")),
            taxAmount2=first(raw.get("taxAmount2"), raw.get("tax_amount2"), raw.get("tax2_amount")),
            taxName1=first(raw.get("taxName1"), raw.get("tax_name1")),
            taxName2=first(raw.get("taxName2"), raw.get("tax_name2")),
            unit_cost=first(raw.get("unit_cost"), raw.get("unitcost"), raw.get("unit_cost_amount")),
            amount=raw.get("amount"),
        )

    @staticmethod
    def _meaningful(line: CreditNoteLine) -> bool:
        return bool(
            (line.description or "").strip()
            or (line.name or "").strip()
            or line.amount
            or line.unit_cost
        )

    def build(self, item: dict[str, Any]) -> CreditNoteRecord:
        lines = [
            line
            for line in (
                self._line(raw) for raw in extract_line_items(item) if isinstance(raw, dict)
            )
            if self._meaningful(line)
        ]
        primary = lines[0] if lines else None
        currency = first(item.get("currency_code"), dig(item, "amount", "code"))
        client = first_truthy(
            item.get("client"), item.get("clientinfo"), item.get("client_info"), {}
        )
        return CreditNoteRecord(
            accounting_systemid=item.get("accounting_systemid"),
            amount=item.get("amount"),
            city=item.get("city"),
            clientid=first(item.get("clientid"), item.get("client_id")),
            code=first(item.get("code"), currency),
            country=item.get("country"),
            create_date=first(item.get("create_date"), item.get("created_at")),
            credit_number=first(item.get("credit_number"), item.get("number")),
            credit_type=first(item.get("credit_type"), item.get("type")),
            creditid=first(item.get("creditid"), item.get("credit_id"), item.get("id")),
            currency_code=currency,
            current_organization=first(item.get("current_organization"), item.get("organization")),
            client_name=first(display_name(client), item.get("client_name")),
            description=item.get("description"),
            display_status=first(item.get("display_status"), item.get("status")),
            dispute_status=item.get("dispute_status"),
            ext_archive=item.get("ext_archive"),
            fname=first(item.get("fname"), item.get("first_name")),
            id=first(item.get("id"), item.get("creditid")),
            language=item.get("language"),
            last_order_status=item.get("last_order_status"),
            lines=len(lines),
            lname=first(item.get("lname"), item.get("last_name")),
            notes=first(item.get("notes"), item.get("note")),
            organization=first(item.get("organization"), item.get("current_organization")),
            paid=item.get("paid"),
            payment_status=item.get("payment_status"),
            payment_type=item.get("payment_type"),
            province=item.get("province"),
            sentid=item.get("sentid"),
            status=first(item.get("status"), item.get("display_status")),
            street=item.get("street"),
            street2=item.get("street2"),
            template=item.get("template"),
            terms=item.get("terms"),
            vat_name=item.get("vat_name"),
            vat_number=item.get("vat_number"),
            vis_state=item.get("vis_state"),
            line_items=primary.description or primary.name if primary else None,
            qty=primary.qty if primary else None,
            unit=primary.unit_cost if primary else None,
            amt=primary.amount if primary else None,
            tax1=primary.taxAmount1 if primary else None,
            tax2=primary.taxAmount2 if primary else None,
            line_items_array=[line.model_dump() for line in lines],
        )


class PaymentNormalizer(RecordNormalizer):
    resource_type = "payments"
    record_model = PaymentRecord

    def build(self, item: dict[str, Any]) -> PaymentRecord:
        lines = [synthetic_line("Payment", item.get("amount"))]
        client = first_truthy(item.get("client"), dig(item, "invoice", "client"), {})
        return PaymentRecord(
            amount=item.get("amount"),
            clientid=first(item.get("clientid"), item.get("client_id")),
            client_name=first(display_name(client), item.get("client_name")),
            creditid=item.get("creditid"),
            date=item.get("date"),
            invoice_number=first(
                dig(item, "invoice", "invoice_number"), item.get("invoice_number")
            ),
            line_items=len(lines),
        )


class OtherIncomeNormalizer(RecordNormalizer):
    resource_type = "other_income"
    record_model = OtherIncomeRecord

    def build(self, item: dict[str, Any]) -> OtherIncomeRecord:
        lines = extract_line_items(item)
        line = _primary_line(lines)
        return OtherIncomeRecord(
            amount=item.get("amount"),
            currency_code=first(dig(item, "amount", "code"), item.get("currency_code")),
            category=first(item.get("category"), item.get("type"), item.get("income_type")),
            created_at=first(item.get("created_at"), item.get("updated"), item.get("date")),
            date=first(item.get("date"), item.get("created_at")),
            description=first(
                item.get("description"),
                item.get("notes"),
                line.get("description"),
                line.get("name"),
            ),
            reference=first(
                item.get("reference"), item.get("bank_transaction_id"), item.get("bank_entry_id")
            ),
            source=first(
                item.get("source"), item.get("bank_account_name"), item.get("bank_account")
            ),
            status=first(item.get("status"), item.get("state")),
            transaction_number=first(
                item.get("transaction_number"),
                item.get("accounting_systemid"),
                item.get("accounting_system_id"),
            ),
            line_items=len(lines),
            line_items_raw=lines,
            line_description=first(line.get("description"), line.get("name"), ""),
            line_qty=first(line.get("qty"), line.get("quantity"), 1),
            line_unit_cost=line.get("unit_cost"),
            line_total=first(line.get("total"), line.get("amount")),
        )
