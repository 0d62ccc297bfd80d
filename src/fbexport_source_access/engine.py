"""Fetch engine: runs one extraction against the FreshBooks API.

For a resource type the engine looks up its EndpointDescriptor, makes sure the
identifier the URL needs is present, obtains a valid access token from the
RefreshCoordinator and then runs one of four fetch strategies:

  DIRECT            one GET for a single object (profile, business)
  SINGLE_CALL       one GET for lists the API never paginates
  PAGINATED         page/per_page loop (the default)
  FORCED_PAGINATED  the same loop for journal entries, with the parameter
                    convention chosen by URL shape and the API-version header

Loop termination, in the order checked per page:
  - an empty page
  - the first row repeats the previous page's first row (the API ignoring
    the page parameter); that page is not appended
  - the server-reported page count says this was the last page
  - the page ceiling (request max_pages, default 500), reported as truncated

Nothing is retried silently. The only second attempts are the alternate URLs
a descriptor declares, tried in order after a 404 (or 400 for journals).
Upstream error statuses raise UpstreamHTTPError; transport failures
(httpx.TransportError) propagate untouched.
"""

from __future__ import annotations

import contextlib
import dataclasses
import logging
from typing import Any

import httpx
from fbexport_shared.extract_models import BusinessSummary, ExtractRequest, ExtractResult
from temporalio import activity

from fbexport_source_access.business import (
    business_details,
    resolve_business_uuid,
    summarize_businesses,
)
from fbexport_source_access.endpoints import (
    ENDPOINTS,
    EndpointDescriptor,
    FetchMode,
    IdentifierKind,
    Identifiers,
    date_params,
    get_endpoint,
    include_params,
    validate_identifiers,
)
from fbexport_source_access.envelope import extract_rows, first_row_id, total_pages, unwrap
from fbexport_source_access.errors import MissingIdentifier, UpstreamHTTPError
from fbexport_source_access.normalizers import get_normalizer
from fbexport_source_access.refresh import RefreshCoordinator
from fbexport_source_access.settings import ExtractSettings

logger = logging.getLogger(__name__)

WHOAMI_PATH = "/auth/api/v1/users/me"
API_VERSION_HEADERS = {"x-api-version": "2023-09-25"}
FORCED_PAGE_SIZE_CAP = 150

Params = list[tuple[str, str]]


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def forced_page_params(url: str, page: int, page_size: int) -> Params:
    """Paging parameters for journal URLs, which disagree on naming."""
    if "/businesses/" in url and "/journal_entries" in url and "/reports/" not in url:
        return [("page_number", str(page)), ("page_size", str(page_size))]
    params = [("page", str(page)), ("per_page", str(page_size))]
    if "/account/" in url and "/journal_entries/journal_entries" in url:
        params += [("use_ledger_entries", "true"), ("include_children", "true")]
    return params


@dataclasses.dataclass
class FetchOutcome:
    rows: list[Any]
    records: list[dict[str, Any]] | None = None
    truncated: bool = False
    fallback: str | None = None


class FetchEngine:
    """Executes extractions; one instance is shared by every activity in the worker."""

    def __init__(
        self,
        coordinator: RefreshCoordinator,
        settings: ExtractSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.coordinator = coordinator
        self.settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.request_count = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.api_base_url,
                timeout=self.settings.request_timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _get(
        self,
        url: str,
        token: str,
        params: Params | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET a JSON body; error statuses raise UpstreamHTTPError with the upstream body."""
        client = self._get_client()
        self.request_count += 1
        response = await client.get(
            url,
            params=params,
            headers={"Authorization": f"Bearer {token}", **(headers or {})},
        )
        if response.is_error:
            raise UpstreamHTTPError(response.status_code, _error_body(response), str(response.url))
        try:
            return response.json()
        except ValueError:
            logger.warning(f"Non-JSON body from {response.url}; treating it as empty")
            return {}

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def fetch_whoami(self, token: str | None = None) -> dict[str, Any]:
        """The /users/me payload with its `response` wrapper removed."""
        token = token or await self.coordinator.ensure_valid_token()
        body = await self._get(WHOAMI_PATH, token)
        if isinstance(body, dict) and isinstance(body.get("response"), dict):
            return body["response"]
        return body if isinstance(body, dict) else {}

    async def business_map(self) -> list[BusinessSummary]:
        whoami = await self.fetch_whoami()
        businesses = summarize_businesses(whoami)
        logger.info(f"Found {len(businesses)} businesses for user")
        return businesses

    def _identifiers(self, request: ExtractRequest | Identifiers) -> Identifiers:
        """Request identifiers, with the configured defaults filling the gaps."""
        return Identifiers(
            account_id=request.account_id or self.settings.account_id,
            business_id=request.business_id or self.settings.business_id,
            business_uuid=request.business_uuid or self.settings.business_uuid,
        )

    async def _resolve_uuid(self, identifiers: Identifiers, token: str) -> Identifiers:
        try:
            whoami = await self.fetch_whoami(token)
        except UpstreamHTTPError as e:
            logger.warning(f"Could not resolve business_uuid from whoami: {e}")
            return identifiers
        uuid = resolve_business_uuid(whoami, identifiers.account_id, identifiers.business_id)
        if uuid:
            logger.info(f"Resolved business_uuid {uuid} from whoami")
        return dataclasses.replace(identifiers, business_uuid=uuid)

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    async def extract(self, request: ExtractRequest) -> ExtractResult:
        """Run one extraction and return every normalized record, in upstream order.

        Raises UnknownResourceType / MissingIdentifier before any network call,
        MissingRefreshToken / TokenRefreshFailed from the coordinator, and
        UpstreamHTTPError once the alternate URLs are used up.
        """
        descriptor = get_endpoint(request.resource_type)
        normalizer = get_normalizer(request.resource_type)
        identifiers = self._identifiers(request)

        token: str | None = None
        needs_uuid = descriptor.identifier_kind is IdentifierKind.BUSINESS_UUID
        if needs_uuid and not identifiers.business_uuid:
            if not (identifiers.account_id or identifiers.business_id):
                raise MissingIdentifier(IdentifierKind.BUSINESS_UUID.value)
            token = await self.coordinator.ensure_valid_token()
            identifiers = await self._resolve_uuid(identifiers, token)

        validate_identifiers(descriptor, identifiers)
        token = token or await self.coordinator.ensure_valid_token()

        if descriptor.fetch_mode is FetchMode.DIRECT:
            outcome = await self._fetch_direct(descriptor, identifiers, token)
        elif descriptor.fetch_mode is FetchMode.SINGLE_CALL:
            outcome = await self._fetch_single(descriptor, identifiers, token, request)
        else:
            outcome = await self._fetch_pages(descriptor, identifiers, token, request)

        records = outcome.records
        if records is None:
            records = [r for row in outcome.rows for r in normalizer.normalize(row)]

        return ExtractResult(
            success=True,
            message=f"Extracted {len(records)} {request.resource_type} records",
            resource_type=request.resource_type,
            total=len(records),
            records=records,
            truncated=outcome.truncated,
            raw=outcome.rows if request.include_raw else None,
            fallback=outcome.fallback,
        )

    def _urls(self, descriptor: EndpointDescriptor, identifiers: Identifiers) -> list[str]:
        """Primary URL followed by the alternates, as a list owned by this request."""
        alternates = [alt(identifiers) for alt in descriptor.alternate_urls]
        return [descriptor.url(identifiers), *alternates]

    @staticmethod
    def _switch_url(descriptor: EndpointDescriptor, urls: list[str], err: UpstreamHTTPError) -> str:
        url = urls.pop(0)
        logger.info(
            f"[Pagination] {descriptor.resource_type} switching to alt URL "
            f"due to status {err.status_code}: {url}"
        )
        return url

    async def _fetch_direct(
        self, descriptor: EndpointDescriptor, identifiers: Identifiers, token: str
    ) -> FetchOutcome:
        try:
            body = await self._get(descriptor.url(identifiers), token)
        except UpstreamHTTPError as err:
            if not descriptor.whoami_fallback:
                raise
            business = await self._whoami_business(token, identifiers.business_id)
            if business is None:
                raise err
            return FetchOutcome(rows=[business], fallback="whoami")
        return FetchOutcome(rows=[body])

    async def _whoami_business(self, token: str, business_id: str | None) -> dict[str, Any] | None:
        try:
            whoami = await self.fetch_whoami(token)
        except UpstreamHTTPError as e:
            logger.warning(f"whoami fallback for business failed: {e}")
            return None
        return business_details(whoami, business_id)

    async def _fetch_single(
        self,
        descriptor: EndpointDescriptor,
        identifiers: Identifiers,
        token: str,
        request: ExtractRequest,
    ) -> FetchOutcome:
        urls = self._urls(descriptor, identifiers)
        url = urls.pop(0)
        params = [
            *descriptor.fixed_params,
            *date_params(descriptor, request.start_date, request.end_date),
            *include_params(descriptor),
        ]
        while True:
            try:
                body = unwrap(await self._get(url, token, params=params))
            except UpstreamHTTPError as err:
                if err.status_code == 404 and urls:
                    url = self._switch_url(descriptor, urls, err)
                    continue
                raise
            return FetchOutcome(rows=extract_rows(body, descriptor.result_key))

    async def _fetch_pages(
        self,
        descriptor: EndpointDescriptor,
        identifiers: Identifiers,
        token: str,
        request: ExtractRequest,
    ) -> FetchOutcome:
        forced = descriptor.fetch_mode is FetchMode.FORCED_PAGINATED
        normalizer = get_normalizer(descriptor.resource_type)
        urls = self._urls(descriptor, identifiers)
        url = urls.pop(0)

        page_size = descriptor.page_size or self.settings.default_page_size
        if forced:
            page_size = min(page_size, FORCED_PAGE_SIZE_CAP)
        max_pages = request.max_pages or self.settings.default_max_pages
        fallback_statuses = (404, 400) if forced else (404,)
        headers = API_VERSION_HEADERS if forced else None
        filters = date_params(descriptor, request.start_date, request.end_date)

        rows: list[Any] = []
        records: list[dict[str, Any]] = []
        last_first_id: Any = None
        page = 1

        while page <= max_pages:
            if forced:
                params = forced_page_params(url, page, page_size) + filters
            else:
                params = [
                    ("page", str(page)),
                    ("per_page", str(page_size)),
                    *descriptor.fixed_params,
                    *filters,
                    *include_params(descriptor),
                ]
            logger.info(f"[Pagination] {descriptor.resource_type} page={page} url={url}")

            try:
                body = unwrap(await self._get(url, token, params=params, headers=headers))
            except UpstreamHTTPError as err:
                if err.status_code in fallback_statuses and urls:
                    url = self._switch_url(descriptor, urls, err)
                    last_first_id = None
                    continue
                raise

            page_rows = extract_rows(body, descriptor.result_key)
            if not page_rows:
                break

            first_id = first_row_id(page_rows)
            if page > 1 and first_id is not None and first_id == last_first_id:
                logger.info(
                    f"[Pagination] {descriptor.resource_type} page={page} repeats the "
                    f"previous page; stopping"
                )
                break
            last_first_id = first_id

            rows.extend(page_rows)
            for row in page_rows:
                records.extend(normalizer.normalize(row))

            # Best-effort: there is no activity context outside a worker.
            with contextlib.suppress(Exception):
                activity.heartbeat(
                    f"{descriptor.resource_type} page {page}, {len(records)} records"
                )

            pages = total_pages(body)
            if pages is not None and page >= pages:
                break
            page += 1

        truncated = page > max_pages
        if truncated:
            logger.warning(
                f"Pagination stopped at {max_pages} pages for {descriptor.resource_type}; "
                f"endpoint may be ignoring page params."
            )
        return FetchOutcome(rows=rows, records=records, truncated=truncated)

    # ------------------------------------------------------------------
    # Probe
    # ------------------------------------------------------------------

    async def probe(self, identifiers: Identifiers) -> dict[str, str]:
        """Call every registered endpoint once and describe what came back."""
        token = await self.coordinator.ensure_valid_token()
        identifiers = self._identifiers(identifiers)
        results: dict[str, str] = {}
        for name, descriptor in ENDPOINTS.items():
            try:
                validate_identifiers(descriptor, identifiers)
            except MissingIdentifier as e:
                results[name] = f"Missing {e.kind}"
                continue
            results[name] = await self._probe_one(descriptor, identifiers, token)
        return results

    async def _probe_one(
        self, descriptor: EndpointDescriptor, identifiers: Identifiers, token: str
    ) -> str:
        url = descriptor.url(identifiers)
        forced = descriptor.fetch_mode is FetchMode.FORCED_PAGINATED
        if descriptor.fetch_mode is FetchMode.DIRECT:
            params: Params = []
        elif forced:
            params = forced_page_params(url, 1, 1)
        else:
            params = [("page", "1"), ("per_page", "1")]
        try:
            body = await self._get(
                url, token, params=params, headers=API_VERSION_HEADERS if forced else None
            )
        except UpstreamHTTPError as err:
            return _probe_failure(err)

        if descriptor.fetch_mode is FetchMode.DIRECT:
            return "OK (profile endpoint)"
        count = len(extract_rows(unwrap(body), descriptor.result_key))
        return f"OK ({count} records)" if count else "No data (0 records)"


def _probe_failure(err: UpstreamHTTPError) -> str:
    if err.status_code == 404:
        return "Not supported (404)"
    if err.status_code == 403:
        return "Forbidden (scope missing)"
    if err.status_code == 405:
        return "Method not allowed (405)"
    return f"Error {err.status_code}: {err.upstream_message or 'Unknown error'}"
