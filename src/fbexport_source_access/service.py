"""Process-wide extraction service shared by every activity on the worker.

The credential store, the refresh coordinator and the fetch engine must be
single instances per worker process: the coordinator's single-flight lock only
collapses refreshes between callers that share it.

Usage in activities:
    from fbexport_source_access.service import get_service

    service = get_service()
    result = await service.engine.extract(request)
"""

from __future__ import annotations

import httpx

from fbexport_source_access.credentials import CredentialStore, EnvFilePersistence
from fbexport_source_access.engine import FetchEngine
from fbexport_source_access.refresh import RefreshCoordinator, TokenClient
from fbexport_source_access.settings import ExtractSettings, load_environment


class ExtractionService:
    """Bundles the store, coordinator and engine built from one set of settings."""

    def __init__(
        self,
        settings: ExtractSettings,
        store: CredentialStore,
        coordinator: RefreshCoordinator,
        engine: FetchEngine,
    ) -> None:
        self.settings = settings
        self.store = store
        self.coordinator = coordinator
        self.engine = engine

    @classmethod
    def from_settings(
        cls,
        settings: ExtractSettings,
        store: CredentialStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> ExtractionService:
        """Wire the components; `transport` replaces the network in tests."""
        if store is None:
            store = CredentialStore.from_persistence(EnvFilePersistence(settings.env_path))
        token_client = TokenClient(
            settings.api_base_url,
            settings.client_id,
            settings.client_secret,
            redirect_uri=settings.redirect_uri,
            timeout=settings.token_timeout,
            transport=transport,
        )
        coordinator = RefreshCoordinator(store, token_client)
        engine = FetchEngine(coordinator, settings, transport=transport)
        return cls(settings, store, coordinator, engine)

    def remember_business(
        self,
        account_id: str | None = None,
        business_id: str | None = None,
        business_uuid: str | None = None,
    ) -> None:
        """Make the given ids the defaults for later requests and persist them."""
        updates = {
            "account_id": account_id,
            "business_id": business_id,
            "business_uuid": business_uuid,
        }
        for field, value in updates.items():
            if value:
                setattr(self.settings, field, value)
                self.store.persist_value(field.upper(), value)

    def forget_business(self) -> None:
        self.settings.account_id = None
        self.settings.business_id = None
        self.settings.business_uuid = None

    async def close(self) -> None:
        await self.engine.close()


# ============================================================================
# Singleton management
# ============================================================================

_service: ExtractionService | None = None


def get_service() -> ExtractionService:
    """Return the lazily-built service, configured from the environment and .env."""
    global _service
    if _service is None:
        _service = ExtractionService.from_settings(load_environment())
    return _service


def reset_service() -> None:
    """Drop the singleton. Used in tests to inject mocks."""
    global _service
    _service = None


def set_service(service: ExtractionService) -> None:
    """Inject a service. Used in tests."""
    global _service
    _service = service
