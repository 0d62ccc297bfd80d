"""Endpoint registry: how each exported resource type is requested upstream.

One EndpointDescriptor per resource type. A descriptor is a static, immutable
description: URL producers, the envelope key holding the rows, which
identifier the URL needs, whether date filters may be sent, the fetch mode
and any alternate URLs to try when the primary one is rejected. The fetch
engine copies `alternate_urls` into a per-request list before consuming it,
so concurrent requests for the same type never share fallback progress.

Adding a resource type:
  1. Add a descriptor to ENDPOINTS below
  2. Add a normalizer for it in fbexport_source_access.normalizers
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from fbexport_source_access.errors import MissingIdentifier, UnknownResourceType


class IdentifierKind(str, Enum):
    NONE = "none"
    ACCOUNT = "account_id"
    BUSINESS_ID = "business_id"
    BUSINESS_UUID = "business_uuid"


class FetchMode(str, Enum):
    DIRECT = "direct"
    SINGLE_CALL = "single_call"
    PAGINATED = "paginated"
    FORCED_PAGINATED = "forced_paginated"


@dataclass(frozen=True)
class Identifiers:
    account_id: str | None = None
    business_id: str | None = None
    business_uuid: str | None = None

    def get(self, kind: IdentifierKind) -> str | None:
        if kind is IdentifierKind.NONE:
            return None
        return getattr(self, kind.value)


UrlProducer = Callable[[Identifiers], str]


@dataclass(frozen=True)
class EndpointDescriptor:
    resource_type: str
    url: UrlProducer
    result_key: str | None
    identifier_kind: IdentifierKind
    allow_date_filter: bool = False
    page_size: int | None = None
    fetch_mode: FetchMode = FetchMode.PAGINATED
    include: tuple[str, ...] = ()
    alternate_urls: tuple[UrlProducer, ...] = ()
    fixed_params: tuple[tuple[str, str], ...] = ()
    whoami_fallback: bool = False


def account_url(suffix: str) -> UrlProducer:
    return lambda ids: f"/accounting/account/{ids.account_id}{suffix}"


def business_uuid_url(suffix: str) -> UrlProducer:
    return lambda ids: f"/accounting/businesses/{ids.business_uuid}{suffix}"


def projects_url(suffix: str) -> UrlProducer:
    return lambda ids: f"/projects/business/{ids.business_id}{suffix}"


def comments_url(suffix: str) -> UrlProducer:
    return lambda ids: f"/comments/business/{ids.business_id}{suffix}"


def static_url(path: str) -> UrlProducer:
    return lambda ids: path


ENDPOINTS: dict[str, EndpointDescriptor] = {
    "profile": EndpointDescriptor(
        resource_type="profile",
        url=static_url("/auth/api/v1/users/me"),
        result_key=None,
        identifier_kind=IdentifierKind.NONE,
        fetch_mode=FetchMode.DIRECT,
    ),
    "business": EndpointDescriptor(
        resource_type="business",
        url=lambda ids: f"/auth/api/v1/businesses/{ids.business_id}",
        result_key=None,
        identifier_kind=IdentifierKind.BUSINESS_ID,
        fetch_mode=FetchMode.DIRECT,
        whoami_fallback=True,
    ),
    "invoices": EndpointDescriptor(
        resource_type="invoices",
        url=account_url("/invoices/invoices"),
        result_key="invoices",
        identifier_kind=IdentifierKind.ACCOUNT,
        allow_date_filter=True,
        include=("lines", "taxes", "client"),
    ),
    "credit_notes": EndpointDescriptor(
        resource_type="credit_notes",
        url=account_url("/credit_notes/credit_notes"),
        result_key="credit_notes",
        identifier_kind=IdentifierKind.ACCOUNT,
        allow_date_filter=True,
        include=("lines", "client"),
    ),
    "bill_payments": EndpointDescriptor(
        resource_type="bill_payments",
        url=account_url("/bill_payments/bill_payments"),
        result_key="bill_payments",
        identifier_kind=IdentifierKind.ACCOUNT,
        allow_date_filter=True,
        page_size=15,
        include=("bill",),
    ),
    "billable_items": EndpointDescriptor(
        resource_type="billable_items",
        url=account_url("/billable_items/billable_items"),
        result_key="billable_items",
        identifier_kind=IdentifierKind.ACCOUNT,
    ),
    "bill_vendors": EndpointDescriptor(
        resource_type="bill_vendors",
        url=account_url("/bill_vendors/bill_vendors"),
        result_key="bill_vendors",
        identifier_kind=IdentifierKind.ACCOUNT,
        page_size=15,
    ),
    "other_income": EndpointDescriptor(
        resource_type="other_income",
        url=account_url("/other_incomes/other_incomes"),
        result_key="other_income",
        identifier_kind=IdentifierKind.ACCOUNT,
        allow_date_filter=True,
    ),
    "payments": EndpointDescriptor(
        resource_type="payments",
        url=account_url("/payments/payments"),
        result_key="payments",
        identifier_kind=IdentifierKind.ACCOUNT,
        allow_date_filter=True,
        include=("invoice", "client"),
    ),
    "expenses": EndpointDescriptor(
        resource_type="expenses",
        url=account_url("/expenses/expenses"),
        result_key="expenses",
        identifier_kind=IdentifierKind.ACCOUNT,
        allow_date_filter=True,
        include=("category",),
    ),
    "bills": EndpointDescriptor(
        resource_type="bills",
        url=account_url("/bills/bills"),
        result_key="bills",
        identifier_kind=IdentifierKind.ACCOUNT,
        allow_date_filter=True,
        page_size=100,
        include=("lines", "bill_lines", "vendor"),
    ),
    "estimates": EndpointDescriptor(
        resource_type="estimates",
        url=account_url("/estimates/estimates"),
        result_key="estimates",
        identifier_kind=IdentifierKind.ACCOUNT,
        allow_date_filter=True,
        include=("lines",),
    ),
    "clients": EndpointDescriptor(
        resource_type="clients",
        url=account_url("/users/clients"),
        result_key="clients",
        identifier_kind=IdentifierKind.ACCOUNT,
    ),
    "taxes": EndpointDescriptor(
        resource_type="taxes",
        url=account_url("/taxes/taxes"),
        result_key="taxes",
        identifier_kind=IdentifierKind.ACCOUNT,
    ),
    "projects": EndpointDescriptor(
        resource_type="projects",
        url=projects_url("/projects"),
        result_key="projects",
        identifier_kind=IdentifierKind.BUSINESS_ID,
    ),
    "time_entries": EndpointDescriptor(
        resource_type="time_entries",
        url=comments_url("/time_entries"),
        result_key="time_entries",
        identifier_kind=IdentifierKind.BUSINESS_ID,
    ),
    "journal_entries": EndpointDescriptor(
        resource_type="journal_entries",
        url=business_uuid_url("/journal_entries"),
        result_key="manualJournalEntries",
        identifier_kind=IdentifierKind.BUSINESS_UUID,
        allow_date_filter=True,
        page_size=15,
        fetch_mode=FetchMode.FORCED_PAGINATED,
        alternate_urls=(account_url("/journal_entries/journal_entries"),),
    ),
    "ledger_accounts": EndpointDescriptor(
        resource_type="ledger_accounts",
        url=business_uuid_url("/ledger_accounts/accounts"),
        result_key="accounts",
        identifier_kind=IdentifierKind.BUSINESS_UUID,
        fetch_mode=FetchMode.SINGLE_CALL,
    ),
    "chart_of_accounts": EndpointDescriptor(
        resource_type="chart_of_accounts",
        url=business_uuid_url("/reports/chart_of_accounts"),
        result_key="accounts",
        identifier_kind=IdentifierKind.BUSINESS_UUID,
        allow_date_filter=True,
        fetch_mode=FetchMode.SINGLE_CALL,
        fixed_params=(
            ("use_ledger_entries", "true"),
            ("state", "active"),
            ("sort", "account_number_asc"),
        ),
    ),
}


def get_endpoint(resource_type: str) -> EndpointDescriptor:
    """Look up the descriptor for a resource type."""
    descriptor = ENDPOINTS.get(resource_type)
    if descriptor is None:
        raise UnknownResourceType(resource_type, sorted(ENDPOINTS))
    return descriptor


def validate_identifiers(descriptor: EndpointDescriptor, identifiers: Identifiers) -> None:
    """Fail before any network call when the URL's identifier is missing."""
    kind = descriptor.identifier_kind
    if kind is not IdentifierKind.NONE and not identifiers.get(kind):
        raise MissingIdentifier(kind.value)


def date_params(
    descriptor: EndpointDescriptor, start_date: str | None, end_date: str | None
) -> list[tuple[str, str]]:
    """Date filter query parameters, only for descriptors that accept them.

    Both the plain and the `search[...]` spellings are sent; resource families
    disagree on which one they honor.
    """
    if not descriptor.allow_date_filter:
        return []
    params: list[tuple[str, str]] = []
    if start_date:
        params += [("start_date", start_date), ("search[start_date]", start_date)]
    if end_date:
        params += [("end_date", end_date), ("search[end_date]", end_date)]
    return params


def include_params(descriptor: EndpointDescriptor) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for name in descriptor.include:
        params += [("include", name), ("include[]", name)]
    return params
