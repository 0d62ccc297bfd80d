"""Normalizers for bills, bill payments, bill vendors and expenses."""

from __future__ import annotations

from typing import Any

from fbexport_source_access.models.base import format_date, to_amount
from fbexport_source_access.models.purchases import (
    BillPaymentRecord,
    BillRecord,
    BillVendorRecord,
    ExpenseLine,
    ExpenseRecord,
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


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _line_category(line: dict[str, Any]) -> Any:
    category = line.get("category")
    if isinstance(category, dict):
        return category.get("category")
    return category


class BillNormalizer(RecordNormalizer):
    resource_type = "bills"
    record_model = BillRecord

    @staticmethod
    def _vendor_id(item: dict[str, Any]) -> Any:
        vendor = as_dict(item.get("vendor"))
        bill_vendor = as_dict(item.get("bill_vendor"))
        return first(
            item.get("vendorid"),
            item.get("vendor_id"),
            vendor.get("id"),
            vendor.get("vendorid"),
            vendor.get("vendor_id"),
            vendor.get("accountid"),
            vendor.get("account_id"),
            vendor.get("userid"),
            vendor.get("uuid"),
            bill_vendor.get("vendor_id"),
            bill_vendor.get("id"),
        )

    def build(self, item: dict[str, Any]) -> BillRecord:
        lines = extract_line_items(item)
        line = as_dict(lines[0]) if lines else {}
        return BillRecord(
            amount=item.get("amount"),
            bill_number=item.get("bill_number"),
            created_at=format_date(
                item.get("created_at") or item.get("create_date"), with_time=True
            ),
            currency_code=item.get("currency_code"),
            due_date=format_date(item.get("due_date")),
            due_offset_days=_to_int(first(item.get("due_offset_days"), 0)),
            issue_date=format_date(item.get("issue_date")),
            outstanding=item.get("outstanding"),
            overall_category=first(item.get("overall_category"), _line_category(line)),
            paid=item.get("paid"),
            status=item.get("status"),
            tax_amount=item.get("tax_amount"),
            total_amount=item.get("total_amount"),
            line_items=len(lines),
            parent_id=first(item.get("id"), item.get("billid"), item.get("bill_id")),
            line_description=first_truthy(line.get("description"), line.get("name"), ""),
            quantity=first_truthy(line.get("quantity"), line.get("qty"), 1),
            category=first_truthy(_line_category(line), ""),
            tax_amount1=first(line.get("tax_amount1"), ""),
            tax_amount2=first(line.get("tax_amount2"), ""),
            tax_name1=first(line.get("tax_name1"), ""),
            tax_name2=first(line.get("tax_name2"), ""),
            tax_percent1=first(line.get("tax_percent1"), ""),
            tax_percent2=first(line.get("tax_percent2"), ""),
            line_total_amount=first(line.get("total_amount"), line.get("total")),
            unit_cost=line.get("unit_cost"),
            line_date=format_date(line.get("date") or item.get("issue_date")),
            description=first(
                item.get("description"),
                item.get("notes"),
                line.get("description"),
                line.get("name"),
            ),
            vendor=first(
                display_name(item.get("vendor")),
                display_name(item.get("bill_vendor")),
                item.get("vendorname"),
                item.get("vendor_name"),
                item.get("vendor_display_name"),
            ),
            vendorid=self._vendor_id(item),
            line_items_array=lines,
        )


class BillPaymentNormalizer(RecordNormalizer):
    resource_type = "bill_payments"
    record_model = BillPaymentRecord

    def build(self, item: dict[str, Any]) -> BillPaymentRecord:
        return BillPaymentRecord(
            amount=item.get("amount"),
            billid=first(item.get("billid"), item.get("bill_id"), dig(item, "bill", "id")),
            payment_id=item.get("id"),
            paid_date=first(item.get("paid_date"), item.get("date")),
            payment_type=first(
                item.get("payment_type"),
                item.get("payment_type_name"),
                item.get("payment_method"),
            ),
            bill_number=first(
                dig(item, "bill", "bill_number"), item.get("bill_number"), item.get("billid")
            ),
        )


class BillVendorNormalizer(RecordNormalizer):
    resource_type = "bill_vendors"
    record_model = BillVendorRecord

    def build(self, item: dict[str, Any]) -> BillVendorRecord:
        return BillVendorRecord(
            city=item.get("city"),
            country=item.get("country"),
            currency_code=item.get("currency_code"),
            phone=first(item.get("phone"), item.get("phone_number")),
            postal_code=first(item.get("postal_code"), item.get("zip_code")),
            primary_contact_email=first(item.get("primary_contact_email"), item.get("email")),
            primary_contact_first_name=first(
                item.get("primary_contact_first_name"), item.get("fname")
            ),
            primary_contact_last_name=first(
                item.get("primary_contact_last_name"), item.get("lname")
            ),
            province=item.get("province"),
            street=item.get("street"),
            street2=item.get("street2"),
            vendor_name=first(item.get("vendor_name"), item.get("name")),
            website=item.get("website"),
        )


class ExpenseNormalizer(RecordNormalizer):
    resource_type = "expenses"
    record_model = ExpenseRecord

    def build(self, item: dict[str, Any]) -> ExpenseRecord:
        category = as_dict(item.get("category"))
        category_name = first_truthy(
            item.get("category_name"),
            category.get("category"),
            category.get("name"),
            category.get("fullname"),
            None,
        )
        raw_lines = [synthetic_line(item.get("notes") or category_name, item.get("amount"))]
        lines = [
            ExpenseLine(
                line_date=first(item.get("date"), line.get("date")),
                line_description=first(
                    line.get("name"), line.get("description"), item.get("notes"), category_name
                ),
                qty=first(line.get("qty"), line.get("quantity"), 1),
                unit_cost=line.get("unit_cost"),
                line_total=first(line.get("total"), line.get("total_amount"), line.get("amount")),
                category=first(
                    line.get("category") if not isinstance(line.get("category"), dict) else None,
                    category_name,
                ),
            )
            for line in raw_lines
        ]
        line_total = sum(to_amount(line.line_total) for line in lines)
        return ExpenseRecord(
            account_name=item.get("account_name"),
            amount=item.get("amount"),
            bank_name=item.get("bank_name"),
            taxAmount1=item.get("tax_amount1"),
            taxAmount2=item.get("tax_amount2"),
            taxName1=item.get("tax_name1"),
            taxName2=item.get("tax_name2"),
            taxPercent1=item.get("tax_percent1"),
            taxPercent2=item.get("tax_percent2"),
            vendor=display_name(item.get("vendor")),
            notes=item.get("notes"),
            line_items=lines,
            line_date=item.get("date"),
            qty=lines[0].qty if lines else 1,
            unit_cost=lines[0].unit_cost if lines else None,
            line_total=line_total or None,
            category=category_name,
            categoryid=first(
                item.get("categoryid"),
                item.get("category_id"),
                category.get("categoryid"),
                category.get("id"),
            ),
            vendorid=first(
                item.get("vendorid"),
                item.get("vendor_id"),
                dig(item, "vendor", "id"),
                dig(item, "vendor", "vendorid"),
                dig(item, "vendor", "vendor_id"),
            ),
            date=item.get("date"),
        )
