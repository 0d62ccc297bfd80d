"""Tests for the endpoint registry and its parameter policies."""

import pytest
from fbexport_source_access.endpoints import (
    ENDPOINTS,
    FetchMode,
    IdentifierKind,
    Identifiers,
    date_params,
    get_endpoint,
    include_params,
    validate_identifiers,
)
from fbexport_source_access.errors import MissingIdentifier, UnknownResourceType
from fbexport_source_access.normalizers import NORMALIZERS

IDS = Identifiers(account_id="acc1", business_id="42", business_uuid="uuid-1")


class TestRegistry:
    def test_every_endpoint_has_a_normalizer(self):
        assert set(ENDPOINTS) == set(NORMALIZERS)

    def test_unknown_resource_type(self):
        with pytest.raises(UnknownResourceType, match="Unknown resource type 'widgets'") as exc:
            get_endpoint("widgets")
        assert "invoices" in exc.value.supported

    @pytest.mark.parametrize(
        ("resource_type", "url"),
        [
            ("invoices", "/accounting/account/acc1/invoices/invoices"),
            ("clients", "/accounting/account/acc1/users/clients"),
            ("projects", "/projects/business/42/projects"),
            ("time_entries", "/comments/business/42/time_entries"),
            ("journal_entries", "/accounting/businesses/uuid-1/journal_entries"),
            ("chart_of_accounts", "/accounting/businesses/uuid-1/reports/chart_of_accounts"),
            ("profile", "/auth/api/v1/users/me"),
            ("business", "/auth/api/v1/businesses/42"),
        ],
    )
    def test_urls(self, resource_type, url):
        assert get_endpoint(resource_type).url(IDS) == url

    def test_journal_entries_is_forced_with_account_alternate(self):
        descriptor = get_endpoint("journal_entries")
        assert descriptor.fetch_mode is FetchMode.FORCED_PAGINATED
        assert [alt(IDS) for alt in descriptor.alternate_urls] == [
            "/accounting/account/acc1/journal_entries/journal_entries"
        ]

    def test_descriptors_are_immutable(self):
        with pytest.raises(AttributeError):
            get_endpoint("journal_entries").alternate_urls = ()


class TestIdentifierValidation:
    @pytest.mark.parametrize(
        ("resource_type", "kind"),
        [
            ("invoices", IdentifierKind.ACCOUNT),
            ("projects", IdentifierKind.BUSINESS_ID),
            ("ledger_accounts", IdentifierKind.BUSINESS_UUID),
        ],
    )
    def test_missing_identifier(self, resource_type, kind):
        with pytest.raises(MissingIdentifier) as exc:
            validate_identifiers(get_endpoint(resource_type), Identifiers())
        assert exc.value.kind == kind.value
        assert str(exc.value) == f"Missing {kind.value}"

    def test_profile_needs_nothing(self):
        validate_identifiers(get_endpoint("profile"), Identifiers())

    def test_present_identifier_passes(self):
        validate_identifiers(get_endpoint("invoices"), Identifiers(account_id="acc1"))


class TestDateParams:
    def test_allowed_resource_gets_both_spellings(self):
        params = date_params(get_endpoint("chart_of_accounts"), "2024-01-01", "2024-03-31")
        assert params == [
            ("start_date", "2024-01-01"),
            ("search[start_date]", "2024-01-01"),
            ("end_date", "2024-03-31"),
            ("search[end_date]", "2024-03-31"),
        ]

    def test_ledger_accounts_never_get_dates(self):
        assert date_params(get_endpoint("ledger_accounts"), "2024-01-01", "2024-03-31") == []

    def test_only_supplied_bounds_are_sent(self):
        params = date_params(get_endpoint("invoices"), None, "2024-03-31")
        assert params == [("end_date", "2024-03-31"), ("search[end_date]", "2024-03-31")]


def test_include_params_use_both_spellings():
    assert include_params(get_endpoint("expenses")) == [
        ("include", "category"),
        ("include[]", "category"),
    ]
