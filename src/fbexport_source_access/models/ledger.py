"""Output rows for ledger-style resources: chart of accounts, ledger accounts, journal entries."""

from __future__ import annotations

from fbexport_source_access.models.base import Amount, Items, NormalizedRecord, Scalar, Text


class ChartAccountRecord(NormalizedRecord):
    """A parent account or one of its sub-accounts; both share one column set."""

    account_name: Text = None
    account_number: Scalar = None
    account_type: Text = None
    account_sub_type: Text = None
    currency_code: Text = None
    sub_accounts: Text = None
    is_sub_account: bool = False
    parent_account_name: Text = None
    parent_account_number: Scalar = None


class LedgerAccountRecord(NormalizedRecord):
    id: Scalar = None
    account_name: Text = None
    account_number: Scalar = None
    account_type: Text = None
    account_sub_type: Text = None
    currency_code: Text = None
    balance: Amount = 0.0
    parent_id: Scalar = None
    state: Text = None


class JournalEntryRecord(NormalizedRecord):
    name: Text = None
    journalEntryNumber: Scalar = None
    description: Text = None
    reverseDepth: Scalar = None
    details: Items = []
    line_items: Items = []
