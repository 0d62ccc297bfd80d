"""Record normalizer tests: field derivation rules per resource family."""

import logging

import pytest
from fbexport_source_access.models.base import format_date, to_amount
from fbexport_source_access.models.ledger import JournalEntryRecord
from fbexport_source_access.normalizers import NORMALIZERS, get_normalizer, normalize
from fbexport_source_access.normalizers.base import (
    RecordNormalizer,
    display_name,
    extract_line_items,
)

# ---------------------------------------------------------------------------
# Shared rules
# ---------------------------------------------------------------------------


class TestAmounts:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (12.5, 12.5),
            ("12.50", 12.5),
            ({"amount": "7.25", "code": "USD"}, 7.25),
            ({"total": 3}, 3.0),
            ({"value": "1"}, 1.0),
            (None, 0.0),
            ("", 0.0),
            ("n/a", 0.0),
            ({"code": "USD"}, 0.0),
            ("nan", 0.0),
        ],
    )
    def test_to_amount(self, value, expected):
        assert to_amount(value) == expected


class TestDates:
    def test_iso_date(self):
        assert format_date("2024-03-05") == "3/5/2024"

    def test_iso_datetime_with_time(self):
        assert format_date("2024-03-05 14:07:09", with_time=True) == "3/5/2024 14:07"

    def test_locale_date(self):
        assert format_date("Mar 5, 2024") == "3/5/2024"

    def test_unparseable(self):
        assert format_date("someday") is None
        assert format_date(None) is None


class TestDisplayName:
    def test_organization_first(self):
        assert display_name({"organization": "Acme", "fname": "Ada", "lname": "L"}) == "Acme"

    def test_first_and_last(self):
        assert display_name({"fname": "Ada", "lname": "Lovelace"}) == "Ada Lovelace"

    def test_only_one_part(self):
        assert display_name({"fname": "Ada"}) == "Ada"
        assert display_name({"lname": "Lovelace"}) == "Lovelace"

    def test_raw_name_field(self):
        assert display_name({"vendor_name": "Parts Co"}) == "Parts Co"

    def test_nothing(self):
        assert display_name({"organization": ""}) is None
        assert display_name(None) is None

    def test_plain_string(self):
        assert display_name("Walk-in") == "Walk-in"


class TestLineItemSearch:
    def test_known_key_before_generic(self):
        record = {"items": [{"a": 1}], "lines": [{"b": 2}]}
        assert extract_line_items(record) == [{"b": 2}]

    def test_generic_key(self):
        assert extract_line_items({"entries": [{"x": 1}]}) == [{"x": 1}]

    def test_empty_known_key_is_skipped(self):
        record = {"lines": [], "rows": [{"x": 1}]}
        assert extract_line_items(record) == [{"x": 1}]

    def test_nested_within_depth(self):
        record = {"a": {"b": {"c": {"lines": [{"deep": True}]}}}}
        assert extract_line_items(record) == [{"deep": True}]

    def test_beyond_depth_three(self):
        record = {"a": {"b": {"c": {"d": {"lines": [{"too": "deep"}]}}}}}
        assert extract_line_items(record) == []


class TestSchemas:
    @pytest.mark.parametrize("resource_type", sorted(NORMALIZERS))
    def test_every_declared_column_is_present(self, resource_type):
        normalizer = get_normalizer(resource_type)
        rows = normalizer.normalize({"id": 1})
        assert rows
        for row in rows:
            assert list(row) == normalizer.columns()

    def test_non_dict_items_are_dropped(self):
        assert normalize("invoices", [None, "x", 3, {"id": 1}]) != []
        assert len(normalize("invoices", [None, "x", 3, {"id": 1}])) == 1


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------


class TestBills:
    def test_scenario(self):
        raw = {
            "amount": {"amount": 150.5},
            "bill_number": "B-1",
            "lines": [{"description": "Parts", "qty": 2, "unit_cost": {"amount": 10}}],
        }
        [record] = normalize("bills", [raw])
        assert record["amount"] == 150.5
        assert record["bill_number"] == "B-1"
        assert record["line_items"] == 1
        assert record["quantity"] == 2
        assert record["unit_cost"] == 10
        assert record["line_description"] == "Parts"
        assert record["line_items_array"] == raw["lines"]

    def test_vendor_and_dates(self):
        raw = {
            "id": 5,
            "vendor": {"vendorid": 77, "vendor_name": "Parts Co"},
            "created_at": "2024-02-01 09:30:00",
            "issue_date": "2024-02-01",
            "due_offset_days": "30",
            "bill_lines": [{"category": {"category": "Supplies"}, "total_amount": {"amount": 4}}],
        }
        [record] = normalize("bills", [raw])
        assert record["vendor"] == "Parts Co"
        assert record["vendorid"] == 77
        assert record["created_at"] == "2/1/2024 09:30"
        assert record["issue_date"] == "2/1/2024"
        assert record["line_date"] == "2/1/2024"
        assert record["due_offset_days"] == 30
        assert record["category"] == "Supplies"
        assert record["overall_category"] == "Supplies"
        assert record["line_total_amount"] == 4.0
        assert record["quantity"] == 1
        assert record["parent_id"] == 5

    def test_bill_vendor_name_when_vendor_missing(self):
        [record] = normalize("bills", [{"bill_vendor": {"organization": "Org Ltd", "id": 3}}])
        assert record["vendor"] == "Org Ltd"
        assert record["vendorid"] == 3


class TestExpenses:
    def test_synthetic_line_and_category(self):
        raw = {
            "amount": {"amount": "42.10"},
            "date": "2024-01-09",
            "category": {"category": "Travel", "categoryid": 12},
            "vendor": "Airline",
        }
        [record] = normalize("expenses", [raw])
        assert record["category"] == "Travel"
        assert record["categoryid"] == 12
        assert record["vendor"] == "Airline"
        assert record["line_total"] == 42.1
        [line] = record["line_items"]
        assert line["line_description"] == "Travel"
        assert line["qty"] == 1
        assert line["line_date"] == "2024-01-09"

    def test_zero_amount_has_no_line_total(self):
        [record] = normalize("expenses", [{"notes": "free"}])
        assert record["line_total"] is None
        assert record["line_items"][0]["line_description"] == "free"


class TestBillPayments:
    def test_aliases(self):
        raw = {
            "id": 9,
            "amount": {"amount": "20"},
            "bill": {"id": 4, "bill_number": "B-4"},
            "date": "2024-05-01",
            "payment_method": "Check",
        }
        [record] = normalize("bill_payments", [raw])
        assert record == {
            "amount": 20.0,
            "billid": 4,
            "payment_id": 9,
            "paid_date": "2024-05-01",
            "payment_type": "Check",
            "bill_number": "B-4",
        }


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------


class TestSales:
    def test_invoice_client_name_and_line(self):
        raw = {
            "invoiceid": 11,
            "invoice_number": "0011",
            "amount": {"amount": "99.00", "code": "CAD"},
            "fname": "Ada",
            "lname": "Lovelace",
            "lines": [{"name": "Consulting", "qty": "3", "unit_cost": {"amount": "33"}}],
        }
        [record] = normalize("invoices", [raw])
        assert record["client_name"] == "Ada Lovelace"
        assert record["currency_code"] == "CAD"
        assert record["line_description"] == "Consulting"
        assert record["unit_cost"] == 33.0

    def test_payment_client_from_invoice(self):
        raw = {
            "amount": {"amount": 5},
            "invoice": {"invoice_number": "7", "client": {"organization": "Acme"}},
        }
        [record] = normalize("payments", [raw])
        assert record["client_name"] == "Acme"
        assert record["invoice_number"] == "7"
        assert record["line_items"] == 1

    def test_credit_note_drops_empty_lines(self):
        raw = {
            "creditid": 3,
            "lines": [
                {"description": " ", "amount": None},
                {"name": "Refund", "amount": {"amount": "12"}, "qty": 1},
            ],
        }
        [record] = normalize("credit_notes", [raw])
        assert record["lines"] == 1
        assert record["line_items"] == "Refund"
        assert record["amt"] == 12.0
        assert len(record["line_items_array"]) == 1


# ---------------------------------------------------------------------------
# Ledger and directory
# ---------------------------------------------------------------------------


class TestChartOfAccounts:
    def test_parent_and_two_sub_accounts(self):
        raw = {
            "account_name": "Assets",
            "account_number": "1000",
            "account_type": "asset",
            "account_sub_type": "current",
            "subaccounts": [
                {"account_name": "Cash", "account_number": "1010", "currency_code": "USD"},
                {"system_account_name": "Undeposited", "accountnumber": "1020"},
            ],
        }
        parent, cash, undeposited = normalize("chart_of_accounts", [raw])

        assert parent["is_sub_account"] is False
        assert parent["sub_accounts"] == "Cash, Undeposited"
        assert parent["currency_code"] == "USD"
        for child in (cash, undeposited):
            assert child["is_sub_account"] is True
            assert child["parent_account_name"] == "Assets"
            assert child["parent_account_number"] == "1000"
            assert child["account_type"] == "asset"
            assert child["account_sub_type"] == "current"
        assert undeposited["account_name"] == "Undeposited"
        assert undeposited["account_number"] == "1020"
        assert undeposited["currency_code"] == "USD"

    def test_account_without_subs(self):
        [row] = normalize("chart_of_accounts", [{"name": "Equity"}])
        assert row["account_name"] == "Equity"
        assert row["sub_accounts"] is None

    def test_order_is_parent_then_children(self):
        rows = normalize(
            "chart_of_accounts",
            [
                {"account_name": "A", "sub_accounts": [{"account_name": "A1"}]},
                {"account_name": "B"},
            ],
        )
        assert [r["account_name"] for r in rows] == ["A", "A1", "B"]


class TestJournalEntries:
    def test_aliases_and_lists(self):
        [record] = normalize(
            "journal_entries",
            [{"name": "Adj", "journal_entry_number": 4, "details": [{"debit": "10"}]}],
        )
        assert record["journalEntryNumber"] == 4
        assert record["details"] == [{"debit": "10"}]
        assert record["line_items"] == []

    @pytest.mark.parametrize("details", ["text", {"a": 1}, 7])
    def test_non_list_details_become_empty(self, details):
        [record] = normalize(
            "journal_entries", [{"name": "Adj", "details": details, "line_items": "x"}]
        )
        assert record["name"] == "Adj"
        assert record["details"] == []
        assert record["line_items"] == []


class TestMalformedItems:
    def test_item_failing_validation_is_dropped(self, caplog):
        class StrictNormalizer(RecordNormalizer):
            resource_type = "journal_entries"
            record_model = JournalEntryRecord

            def build(self, item):
                return JournalEntryRecord(**item)

        with caplog.at_level(logging.WARNING):
            rows = StrictNormalizer().normalize({"name": "ok", "unexpected": 1})

        assert rows == []
        assert "Dropping malformed journal_entries item" in caplog.text


class TestDirectory:
    def test_client_aliases(self):
        [record] = normalize(
            "clients", [{"first_name": "Ada", "company": "Acme", "mobile_phone": "555"}]
        )
        assert record["fname"] == "Ada"
        assert record["organization"] == "Acme"
        assert record["mob_phone"] == "555"
        assert record["email"] is None

    def test_business_nested_in_response(self):
        [record] = normalize(
            "business",
            [{"response": {"business": {"id": 42, "name": "Acme", "accounting_systemid": "acc1"}}}],
        )
        assert record["id"] == 42
        assert record["account_id"] == "acc1"
