"""Business membership lookups over an (unwrapped) /users/me payload.

A FreshBooks user can belong to several businesses, and each business is
addressed by three different identifiers depending on the API family:

  account_id     accounting endpoints (/accounting/account/{account_id}/...)
  business_id    projects, time tracking, business details
  business_uuid  ledger-style endpoints (/accounting/businesses/{uuid}/...)

These helpers are pure: the engine fetches whoami and hands it in.
"""

from __future__ import annotations

from typing import Any

from fbexport_shared.extract_models import BusinessSummary


def memberships(whoami: dict[str, Any]) -> list[dict[str, Any]]:
    found = whoami.get("business_memberships") if isinstance(whoami, dict) else None
    if not isinstance(found, list):
        return []
    return [m for m in found if isinstance(m, dict)]


def _business(membership: dict[str, Any]) -> dict[str, Any]:
    business = membership.get("business")
    return business if isinstance(business, dict) else {}


def _account_id(business: dict[str, Any]) -> str:
    return str(business.get("account_id") or business.get("accounting_systemid") or "")


def summarize_businesses(whoami: dict[str, Any]) -> list[BusinessSummary]:
    """One summary per membership, with all three identifiers side by side."""
    summaries = []
    for membership in memberships(whoami):
        business = _business(membership)
        business_id = business.get("id")
        if business_id is None:
            business_id = business.get("business_id")
        summaries.append(
            BusinessSummary(
                name=business.get("name") or membership.get("name") or "Unnamed Business",
                account_id=_account_id(business),
                business_id=business_id,
                business_uuid=business.get("business_uuid"),
            )
        )
    return summaries


def match_membership(
    whoami: dict[str, Any],
    account_id: str | None = None,
    business_id: str | None = None,
) -> dict[str, Any] | None:
    """Business of the first membership matching the account id, else the business id."""
    candidates = memberships(whoami)
    if account_id:
        for membership in candidates:
            if _account_id(_business(membership)) == str(account_id):
                return _business(membership)
    if business_id:
        for membership in candidates:
            if str(_business(membership).get("id")) == str(business_id):
                return _business(membership)
    return None


def resolve_business_uuid(
    whoami: dict[str, Any],
    account_id: str | None = None,
    business_id: str | None = None,
) -> str | None:
    """business_uuid for the given ids; falls back to the first membership that has one."""
    matched = match_membership(whoami, account_id, business_id)
    if matched and matched.get("business_uuid"):
        return matched["business_uuid"]
    for membership in memberships(whoami):
        uuid = _business(membership).get("business_uuid")
        if uuid:
            return uuid
    return None


def business_details(whoami: dict[str, Any], business_id: str | None) -> dict[str, Any] | None:
    """Business object for the direct `business` fallback: matching id, else the first one."""
    candidates = memberships(whoami)
    matched = match_membership(whoami, business_id=business_id) if business_id else None
    if matched:
        return matched
    if candidates and _business(candidates[0]):
        return _business(candidates[0])
    return None
