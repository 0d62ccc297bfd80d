"""FreshBooks extraction activities, the business verbs behind the front door.

Run on the source-access worker (SOURCE_ACCESS_QUEUE). All activities share one
ExtractionService, so every extraction in the process goes through the same
RefreshCoordinator.

  extract_resource             all records of one resource type, normalized
  get_business_map             the user's businesses with all three ids
  probe_endpoints              one call per endpoint, reported as status text
  generate_journal             double-entry rows from sales and purchases
  update_tokens                install tokens handed over after a login
  reset_session                forget the tokens (and optionally business ids)
  exchange_authorization_code  complete the OAuth authorization-code grant

Expected failures (token, registry, identifier and upstream HTTP errors) come
back as result objects with success=False. Transport failures propagate so the
calling workflow's retry policy decides what happens next.
"""

from __future__ import annotations

from fbexport_shared.extract_models import (
    AuthorizationCode,
    BusinessMapResult,
    ExtractRequest,
    ExtractResult,
    JournalRequest,
    JournalResult,
    ProbeRequest,
    ProbeResult,
    SessionReset,
    TokenUpdate,
)
from fbexport_shared.models import ActivityResult
from temporalio import activity

from fbexport_source_access import journal
from fbexport_source_access.endpoints import Identifiers
from fbexport_source_access.errors import (
    ExtractionError,
    MissingIdentifier,
    MissingRefreshToken,
    TokenRefreshFailed,
    UnknownResourceType,
    UpstreamHTTPError,
)
from fbexport_source_access.service import get_service

SCOPE_HINT = (
    "Token is missing required scope. Re-authorize with user:time_entries:read "
    "(and user:journal_entries:read for journals) in SCOPE."
)


def status_for(error: ExtractionError) -> int:
    """HTTP status the front door should answer with for a core failure."""
    if isinstance(error, (MissingRefreshToken, TokenRefreshFailed)):
        return 401
    if isinstance(error, (UnknownResourceType, MissingIdentifier)):
        return 400
    if isinstance(error, UpstreamHTTPError):
        return error.status_code
    return 500


def scope_hint(error: ExtractionError) -> str | None:
    if not isinstance(error, UpstreamHTTPError) or error.status_code != 403:
        return None
    text = f"{error.upstream_message} {error.body}"
    return SCOPE_HINT if "insufficient_scope" in text else None


def failure_result(request: ExtractRequest, error: ExtractionError) -> ExtractResult:
    detail = error.body if isinstance(error, UpstreamHTTPError) else str(error)
    if isinstance(error, TokenRefreshFailed) and error.detail is not None:
        detail = {"message": str(error), "detail": error.detail}
    return ExtractResult(
        success=False,
        message=f"extract_resource failed: {error}",
        resource_type=request.resource_type,
        status_code=status_for(error),
        error=detail,
        hint=scope_hint(error),
    )


@activity.defn
async def extract_resource(request: ExtractRequest) -> ExtractResult:
    """Extract every record of one resource type, paginating as the endpoint requires."""
    activity.logger.info(f"Extracting {request.resource_type}")
    service = get_service()
    try:
        result = await service.engine.extract(request)
    except ExtractionError as e:
        activity.logger.warning(f"extract_resource {request.resource_type} failed: {e}")
        return failure_result(request, e)
    activity.logger.info(
        f"Extracted {result.total} {request.resource_type} records"
        f"{' (truncated)' if result.truncated else ''}"
    )
    return result


@activity.defn
async def get_business_map() -> BusinessMapResult:
    """List the user's businesses with account id, business id and business uuid."""
    service = get_service()
    try:
        businesses = await service.engine.business_map()
    except ExtractionError as e:
        return BusinessMapResult(success=False, message=f"get_business_map failed: {e}")
    return BusinessMapResult(
        success=True,
        message=f"Found {len(businesses)} businesses",
        businesses=businesses,
    )


@activity.defn
async def probe_endpoints(request: ProbeRequest) -> ProbeResult:
    """Try each registered endpoint once to see which ones this token reaches."""
    service = get_service()
    identifiers = Identifiers(
        account_id=request.account_id,
        business_id=request.business_id,
        business_uuid=request.business_uuid,
    )
    try:
        results = await service.engine.probe(identifiers)
    except ExtractionError as e:
        return ProbeResult(success=False, message=f"probe_endpoints failed: {e}")
    return ProbeResult(
        success=True,
        message=f"Probed {len(results)} endpoints",
        tested=len(results),
        results=results,
    )


@activity.defn
async def generate_journal(request: JournalRequest) -> JournalResult:
    activity.logger.info(
        f"Generating journal for account {request.account_id} "
        f"({request.start_date} to {request.end_date})"
    )
    service = get_service()
    try:
        return await journal.generate_journal(service.engine, request)
    except ExtractionError as e:
        return JournalResult(
            success=False,
            message=f"generate_journal failed: {e}",
            account_id=request.account_id,
            business_id=request.business_id,
        )


@activity.defn
async def update_tokens(update: TokenUpdate) -> ActivityResult:
    """Install an externally obtained token pair and remember the business ids."""
    service = get_service()
    service.store.update_tokens(update.access_token, update.refresh_token, update.expires_in)
    service.remember_business(update.account_id, update.business_id, update.business_uuid)
    activity.logger.info("Tokens updated")
    return ActivityResult(success=True, message="Tokens updated")


@activity.defn
async def reset_session(reset: SessionReset) -> ActivityResult:
    service = get_service()
    service.store.clear(clear_business=reset.clear_business)
    if reset.clear_business:
        service.forget_business()
    activity.logger.info(f"Session reset (clear_business={reset.clear_business})")
    return ActivityResult(success=True, message="Session cleared")


@activity.defn
async def exchange_authorization_code(grant: AuthorizationCode) -> ActivityResult:
    """Swap a one-shot authorization code for tokens and store them."""
    service = get_service()
    try:
        await service.coordinator.exchange_code(grant.code)
    except TokenRefreshFailed as e:
        return ActivityResult(
            success=False,
            message=f"exchange_authorization_code failed: {e}",
            data={"detail": str(e.detail)},
        )
    return ActivityResult(success=True, message="Authorization complete")
