"""Tests for the extraction Temporal activity functions.

The shared service is either a real one over a mock transport (installed with
set_service) or a mock patched into the activities module, to isolate:
  - result shaping for successes
  - mapping of core failures to status codes and hints
  - transport errors propagating for Temporal retry
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from fbexport_shared.extract_models import (
    AuthorizationCode,
    ExtractRequest,
    JournalRequest,
    ProbeRequest,
    SessionReset,
    TokenUpdate,
)
from fbexport_source_access.activities import (
    SCOPE_HINT,
    exchange_authorization_code,
    extract_resource,
    generate_journal,
    get_business_map,
    probe_endpoints,
    reset_session,
    update_tokens,
)
from fbexport_source_access.errors import (
    MissingIdentifier,
    MissingRefreshToken,
    TokenRefreshFailed,
    UnknownResourceType,
    UpstreamHTTPError,
)

from .conftest import WHOAMI_PATH, page, token_response


@pytest.fixture
def mock_service():
    service = MagicMock()
    service.engine = AsyncMock()
    service.coordinator = AsyncMock()
    return service


class TestExtractResource:
    async def test_success(self, installed_service, routed):
        routed.routes["/accounting/account/acc1/taxes/taxes"] = page(
            "taxes", [{"taxid": 1, "name": "GST", "amount": "5"}], pages=1
        )

        result = await extract_resource(ExtractRequest(resource_type="taxes", account_id="acc1"))

        assert result.success
        response = result.as_response()
        assert response["total"] == 1
        assert response["truncated"] is False
        assert response["data"][0]["name"] == "GST"
        assert set(response["data"][0]) == {
            "taxid", "name", "amount", "number", "compound", "updated"
        }

    async def test_journal_entry_with_text_details(self, installed_service, routed):
        routed.routes["/accounting/businesses/uuid-1/journal_entries"] = page(
            "manualJournalEntries", [{"id": 1, "name": "Adj", "details": "text"}], pages=1
        )

        result = await extract_resource(
            ExtractRequest(resource_type="journal_entries", business_uuid="uuid-1")
        )

        assert result.success
        assert result.total == 1
        assert result.records[0]["name"] == "Adj"
        assert result.records[0]["details"] == []

    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (MissingRefreshToken(), 401),
            (TokenRefreshFailed({"error": "invalid_grant"}), 401),
            (UnknownResourceType("widgets", ["invoices"]), 400),
            (MissingIdentifier("account_id"), 400),
            (UpstreamHTTPError(502, {"error": "bad gateway"}), 502),
        ],
    )
    @patch("fbexport_source_access.activities.get_service")
    async def test_failures_become_results(self, mock_get, mock_service, error, status):
        mock_service.engine.extract.side_effect = error
        mock_get.return_value = mock_service

        result = await extract_resource(ExtractRequest(resource_type="invoices"))

        assert not result.success
        assert result.status_code == status
        assert result.as_response()["status"] == status
        assert result.hint is None

    @patch("fbexport_source_access.activities.get_service")
    async def test_missing_identifier_message(self, mock_get, mock_service):
        mock_service.engine.extract.side_effect = MissingIdentifier("business_uuid")
        mock_get.return_value = mock_service

        result = await extract_resource(ExtractRequest(resource_type="ledger_accounts"))

        assert result.as_response() == {"error": "Missing business_uuid", "status": 400}

    @patch("fbexport_source_access.activities.get_service")
    async def test_insufficient_scope_gets_hint(self, mock_get, mock_service):
        mock_service.engine.extract.side_effect = UpstreamHTTPError(
            403, {"error": "insufficient_scope", "error_description": "scope missing"}
        )
        mock_get.return_value = mock_service

        result = await extract_resource(ExtractRequest(resource_type="time_entries"))

        assert result.status_code == 403
        assert result.hint == SCOPE_HINT
        assert result.error == {
            "error": "insufficient_scope",
            "error_description": "scope missing",
        }

    @patch("fbexport_source_access.activities.get_service")
    async def test_plain_forbidden_has_no_hint(self, mock_get, mock_service):
        mock_service.engine.extract.side_effect = UpstreamHTTPError(403, "Forbidden")
        mock_get.return_value = mock_service

        result = await extract_resource(ExtractRequest(resource_type="invoices"))

        assert result.hint is None

    @patch("fbexport_source_access.activities.get_service")
    async def test_transport_error_propagates(self, mock_get, mock_service):
        mock_service.engine.extract.side_effect = httpx.ReadTimeout("timed out")
        mock_get.return_value = mock_service

        with pytest.raises(httpx.ReadTimeout):
            await extract_resource(ExtractRequest(resource_type="invoices"))


class TestBusinessMapAndProbe:
    async def test_business_map(self, installed_service, routed):
        routed.routes[WHOAMI_PATH] = httpx.Response(
            200,
            json={
                "response": {
                    "business_memberships": [
                        {"business": {"id": 1, "name": "Acme", "account_id": "a1"}}
                    ]
                }
            },
        )

        result = await get_business_map()

        assert result.success
        assert result.businesses[0].account_id == "a1"

    @patch("fbexport_source_access.activities.get_service")
    async def test_business_map_token_failure(self, mock_get, mock_service):
        mock_service.engine.business_map.side_effect = MissingRefreshToken()
        mock_get.return_value = mock_service

        result = await get_business_map()

        assert not result.success
        assert "reauthorize" in result.message

    @patch("fbexport_source_access.activities.get_service")
    async def test_probe(self, mock_get, mock_service):
        mock_service.engine.probe.return_value = {"invoices": "OK (3 records)"}
        mock_get.return_value = mock_service

        result = await probe_endpoints(ProbeRequest(account_id="acc1"))

        assert result.tested == 1
        identifiers = mock_service.engine.probe.call_args[0][0]
        assert identifiers.account_id == "acc1"


class TestJournal:
    @patch("fbexport_source_access.activities.get_service")
    async def test_token_failure(self, mock_get, mock_service):
        mock_service.engine.coordinator.ensure_valid_token = AsyncMock(
            side_effect=TokenRefreshFailed("expired")
        )
        mock_get.return_value = mock_service

        result = await generate_journal(JournalRequest(account_id="acc1", business_id="42"))

        assert not result.success
        assert result.account_id == "acc1"


class TestSessionActivities:
    async def test_update_tokens(self, installed_service):
        result = await update_tokens(
            TokenUpdate(
                access_token="handed-access",
                refresh_token="handed-refresh",
                expires_in=3600,
                account_id="acc9",
            )
        )

        assert result.success
        assert installed_service.store.get().access_token == "handed-access"
        assert installed_service.settings.account_id == "acc9"

    async def test_reset_session(self, installed_service):
        installed_service.settings.business_uuid = "uuid-1"

        await reset_session(SessionReset(clear_business=True))

        assert installed_service.store.get().access_token == ""
        assert installed_service.settings.business_uuid is None

    async def test_reset_keeps_business_by_default(self, installed_service):
        installed_service.settings.account_id = "acc1"

        await reset_session(SessionReset())

        assert installed_service.settings.account_id == "acc1"

    async def test_exchange_authorization_code(self, installed_service, routed):
        routed.routes["/auth/oauth/token"] = token_response("code-access", "code-refresh")

        result = await exchange_authorization_code(AuthorizationCode(code="abc"))

        assert result.success
        assert installed_service.store.get().access_token == "code-access"

    async def test_exchange_rejected(self, installed_service, routed):
        routed.routes["/auth/oauth/token"] = httpx.Response(400, json={"error": "invalid_grant"})

        result = await exchange_authorization_code(AuthorizationCode(code="bad"))

        assert not result.success
        assert "invalid_grant" in result.data["detail"]
