"""Extraction boundary models: the contract between callers and the extraction worker.

These types cross the Temporal activity boundary. A caller (the HTTP front door,
a workflow, a script) builds the request models; activities receive them and
return the result models.

Design choices:
  - ExtractResult.records is list[dict], not list[SomeModel]. Temporal serializes
    everything to JSON and the front door streams rows straight into CSV/JSON, so
    we use dicts at the boundary. The typed per-resource output models live in
    fbexport_source_access.models and define what those dicts contain.
  - Credentials never travel inside extraction requests. The worker owns the
    token triple for its whole lifetime; callers only hand over new tokens
    through the explicit TokenUpdate / AuthorizationCode requests.
"""

from __future__ import annotations

import re
import time
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from fbexport_shared.models import ActivityResult

_ISO_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})")
_LOCALE_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%b %d, %Y", "%B %d, %Y", "%d %b %Y")


def normalize_date_param(value: Any) -> str | None:
    """Reduce a caller-supplied date to YYYY-MM-DD, or None when unusable.

    A leading ISO date is kept verbatim so no timezone shift can move it by a day.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    match = _ISO_DATE_PREFIX.match(text)
    if match:
        return match.group(1)
    for fmt in _LOCALE_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue
    return None


# ============================================================================
# Credentials
# ============================================================================


class Credential(BaseModel):
    """The OAuth token triple. expires_at is epoch seconds; 0 means unknown."""

    access_token: str = ""
    refresh_token: str = ""
    expires_at: int = 0

    def is_fresh(self, now: float, margin: int = 60) -> bool:
        return bool(self.access_token) and now < self.expires_at - margin

    @classmethod
    def issued(
        cls, access_token: str, refresh_token: str, expires_in: int, now: float | None = None
    ) -> Credential:
        """Build a credential whose expiry is now + the server-reported lifetime."""
        issued_at = time.time() if now is None else now
        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=int(issued_at) + int(expires_in),
        )


class TokenGrant(BaseModel):
    """Body of a successful response from the OAuth token endpoint."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None


class TokenUpdate(BaseModel):
    """Externally supplied tokens, e.g. handed over by the dashboard after login."""

    access_token: str
    refresh_token: str
    expires_in: int | None = None
    account_id: str | None = None
    business_id: str | None = None
    business_uuid: str | None = None


class AuthorizationCode(BaseModel):
    """One-shot authorization code returned to the OAuth redirect URI."""

    code: str


class SessionReset(BaseModel):
    """Forget the in-memory tokens; optionally forget the persisted business ids too."""

    clear_business: bool = False


# ============================================================================
# Extraction
# ============================================================================


class ExtractRequest(BaseModel):
    """Parameters for one extract_resource call. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    resource_type: str
    account_id: str | None = None
    business_id: str | None = None
    business_uuid: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    max_pages: int | None = None
    include_raw: bool = False

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _normalize_dates(cls, value: Any) -> str | None:
        return normalize_date_param(value)

    @field_validator("account_id", "business_id", "business_uuid", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("max_pages")
    @classmethod
    def _positive_max_pages(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("max_pages must be a positive integer")
        return value


class ExtractResult(ActivityResult):
    """Returned by extract_resource: normalized rows plus pagination outcome."""

    resource_type: str = ""
    total: int = 0
    records: list[dict[str, Any]] = []
    truncated: bool = False
    raw: list[Any] | None = None
    fallback: str | None = None
    status_code: int | None = None
    error: Any = None
    hint: str | None = None

    def as_response(self) -> dict[str, Any]:
        """Shape the result the way the HTTP front door serializes it."""
        if not self.success:
            payload: dict[str, Any] = {"error": self.error or self.message}
            if self.status_code is not None:
                payload["status"] = self.status_code
            if self.hint:
                payload["hint"] = self.hint
            return payload
        payload = {
            "success": True,
            "total": self.total,
            "data": self.records,
            "truncated": self.truncated,
        }
        if self.raw is not None:
            payload["raw"] = self.raw
        if self.fallback:
            payload["fallback"] = self.fallback
        return payload


# ============================================================================
# Business map, endpoint probe, journal
# ============================================================================


class BusinessSummary(BaseModel):
    """One business membership with all three identifier kinds side by side."""

    name: str
    account_id: str = ""
    business_id: int | str | None = None
    business_uuid: str | None = None


class BusinessMapResult(ActivityResult):
    businesses: list[BusinessSummary] = []


class ProbeRequest(BaseModel):
    account_id: str | None = None
    business_id: str | None = None
    business_uuid: str | None = None


class ProbeResult(ActivityResult):
    tested: int = 0
    results: dict[str, str] = {}


class JournalRequest(BaseModel):
    account_id: str
    business_id: str
    start_date: str | None = None
    end_date: str | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _normalize_dates(cls, value: Any) -> str | None:
        return normalize_date_param(value)


class JournalEntry(BaseModel):
    date: str = ""
    description: str = ""
    debit_account: str
    credit_account: str
    amount: float = 0.0


class JournalResult(ActivityResult):
    account_id: str = ""
    business_id: str = ""
    total_entries: int = 0
    entries: list[JournalEntry] = []
