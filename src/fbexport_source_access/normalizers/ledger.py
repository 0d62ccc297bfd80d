"""Normalizers for chart of accounts, ledger accounts and journal entries."""

from __future__ import annotations

from typing import Any

from fbexport_source_access.models.ledger import (
    ChartAccountRecord,
    JournalEntryRecord,
    LedgerAccountRecord,
)
from fbexport_source_access.normalizers.base import RecordNormalizer, first, first_truthy


def _account_name(account: dict[str, Any]) -> Any:
    return first_truthy(
        account.get("account_name"), account.get("name"), account.get("system_account_name"), None
    )


def _sub_accounts(item: dict[str, Any]) -> list[dict[str, Any]]:
    for key in ("sub_accounts", "subaccounts"):
        value = item.get(key)
        if isinstance(value, list) and value:
            return [sub for sub in value if isinstance(sub, dict)]
    return []


class ChartOfAccountsNormalizer(RecordNormalizer):
    """Expands each parent account into itself followed by one row per sub-account."""

    resource_type = "chart_of_accounts"
    record_model = ChartAccountRecord

    def build(self, item: dict[str, Any]) -> list[ChartAccountRecord]:
        subs = _sub_accounts(item)
        sub_currency = next((s["currency_code"] for s in subs if s.get("currency_code")), None)
        sub_names = [name for name in (_account_name(s) for s in subs) if name]

        parent = ChartAccountRecord(
            account_name=first(item.get("account_name"), item.get("name")),
            account_number=item.get("account_number"),
            account_type=first(item.get("account_type"), item.get("type")),
            account_sub_type=first(
                item.get("account_sub_type"), item.get("sub_type"), item.get("subtype")
            ),
            currency_code=first(item.get("currency_code"), sub_currency),
            sub_accounts=", ".join(str(name) for name in sub_names) or None,
            is_sub_account=False,
        )
        rows = [parent]
        for sub in subs:
            rows.append(
                ChartAccountRecord(
                    account_name=_account_name(sub),
                    account_number=first(
                        sub.get("account_number"), sub.get("number"), sub.get("accountnumber")
                    ),
                    account_type=first(
                        sub.get("account_type"), sub.get("type"), parent.account_type
                    ),
                    account_sub_type=first(
                        sub.get("account_sub_type"),
                        sub.get("sub_type"),
                        sub.get("subtype"),
                        parent.account_sub_type,
                    ),
                    currency_code=first(sub.get("currency_code"), parent.currency_code),
                    is_sub_account=True,
                    parent_account_name=parent.account_name,
                    parent_account_number=parent.account_number,
                )
            )
        return rows


class LedgerAccountNormalizer(RecordNormalizer):
    resource_type = "ledger_accounts"
    record_model = LedgerAccountRecord

    def build(self, item: dict[str, Any]) -> LedgerAccountRecord:
        return LedgerAccountRecord(
            id=first(item.get("id"), item.get("uuid")),
            account_name=_account_name(item),
            account_number=first(item.get("account_number"), item.get("number")),
            account_type=first(item.get("account_type"), item.get("type")),
            account_sub_type=first(
                item.get("account_sub_type"), item.get("sub_type"), item.get("subtype")
            ),
            currency_code=item.get("currency_code"),
            balance=item.get("balance"),
            parent_id=first(item.get("parent_id"), item.get("parentid")),
            state=item.get("state"),
        )


class JournalEntryNormalizer(RecordNormalizer):
    resource_type = "journal_entries"
    record_model = JournalEntryRecord

    def build(self, item: dict[str, Any]) -> JournalEntryRecord:
        return JournalEntryRecord(
            name=item.get("name"),
            journalEntryNumber=first(
                item.get("journalEntryNumber"), item.get("journal_entry_number")
            ),
            description=item.get("description"),
            reverseDepth=first(item.get("reverseDepth"), item.get("reverse_depth")),
            details=first(item.get("details"), []),
            line_items=first(item.get("line_items"), []),
        )
