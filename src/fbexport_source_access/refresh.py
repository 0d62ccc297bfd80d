"""Access-token renewal with single-flight coordination.

FreshBooks access tokens live about twelve hours and refresh tokens are single
use: if two extractions notice an expired token at the same moment and both
call the token endpoint, the second call spends an already-rotated refresh
token and the session is lost. The coordinator therefore keeps at most one
refresh in flight. Callers that arrive while it runs await the same task and
all observe its outcome: the new access token or the same failure.

State machine:

    Idle ──(token stale, caller arrives)──▶ Refreshing ──(task done)──▶ Idle
                                              ▲      │
                                              └──────┘ late arrivals join
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

import httpx
from fbexport_shared.extract_models import Credential, TokenGrant

from fbexport_source_access.credentials import CredentialStore
from fbexport_source_access.errors import MissingRefreshToken, TokenRefreshFailed

logger = logging.getLogger(__name__)

EXPIRY_MARGIN_SECONDS = 60
DEFAULT_TOKEN_LIFETIME = 3600


class TokenClient:
    """Talks to the OAuth token endpoint for both grant types."""

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        redirect_uri: str = "",
        timeout: float = 25.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.token_url = f"{base_url.rstrip('/')}/auth/oauth/token"
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.timeout = timeout
        self._transport = transport

    async def refresh(self, refresh_token: str) -> TokenGrant:
        return await self._post(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
            }
        )

    async def exchange_code(self, code: str) -> TokenGrant:
        return await self._post(
            {
                "grant_type": "authorization_code",
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
            }
        )

    async def _post(self, body: dict[str, Any]) -> TokenGrant:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(self.token_url, json=body)
            response.raise_for_status()
            return TokenGrant.model_validate(response.json())


class RefreshCoordinator:
    """Hands out a valid access token, collapsing concurrent refreshes into one call."""

    def __init__(
        self,
        store: CredentialStore,
        token_client: TokenClient,
        clock: Callable[[], float] = time.time,
        margin: int = EXPIRY_MARGIN_SECONDS,
    ) -> None:
        self.store = store
        self.token_client = token_client
        self._clock = clock
        self._margin = margin
        self._lock = asyncio.Lock()
        self._inflight: asyncio.Task[str] | None = None
        self.refresh_count = 0

    @property
    def refreshing(self) -> bool:
        return self._inflight is not None

    async def ensure_valid_token(self) -> str:
        """Return a token valid for at least `margin` more seconds.

        Raises MissingRefreshToken when nothing can be renewed and
        TokenRefreshFailed when the renewal itself fails.
        """
        credential = self.store.get()
        if credential.is_fresh(self._clock(), self._margin):
            return credential.access_token

        async with self._lock:
            credential = self.store.get()
            if credential.is_fresh(self._clock(), self._margin):
                return credential.access_token
            if self._inflight is None:
                if not credential.refresh_token:
                    raise MissingRefreshToken()
                self._inflight = asyncio.create_task(self._refresh(credential.refresh_token))
                self._inflight.add_done_callback(_retrieve_outcome)
            inflight = self._inflight

        # Shielded so one cancelled waiter cannot abort the refresh for the others.
        return await asyncio.shield(inflight)

    async def exchange_code(self, code: str) -> Credential:
        """Complete an authorization-code grant and install the resulting tokens."""
        async with self._lock:
            try:
                grant = await self.token_client.exchange_code(code)
            except (httpx.HTTPError, ValueError) as e:
                logger.error(f"Authorization code exchange failed: {_describe(e)}")
                raise TokenRefreshFailed(_describe(e)) from e
            credential = self._credential_from(grant, previous_refresh="")
            self.store.set(credential)
            return credential

    async def _refresh(self, refresh_token: str) -> str:
        self.refresh_count += 1
        logger.info("Refreshing access token...")
        try:
            grant = await self.token_client.refresh(refresh_token)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Token refresh failed: {_describe(e)}")
            raise TokenRefreshFailed(_describe(e)) from e
        finally:
            self._inflight = None

        credential = self._credential_from(grant, previous_refresh=refresh_token)
        self.store.set(credential)
        logger.info("Token refreshed successfully")
        return credential.access_token

    def _credential_from(self, grant: TokenGrant, previous_refresh: str) -> Credential:
        return Credential.issued(
            grant.access_token,
            grant.refresh_token or previous_refresh,
            grant.expires_in or DEFAULT_TOKEN_LIFETIME,
            now=self._clock(),
        )


def _describe(error: Exception) -> Any:
    """Upstream error body when there is one, otherwise the exception text."""
    if isinstance(error, httpx.HTTPStatusError):
        try:
            return error.response.json()
        except ValueError:
            return error.response.text
    return str(error)


def _retrieve_outcome(task: asyncio.Task[str]) -> None:
    """Mark a failed refresh as observed even when every waiter was cancelled."""
    if not task.cancelled():
        task.exception()
