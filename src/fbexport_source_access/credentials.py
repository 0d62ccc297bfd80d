"""Credential store and its durable side channel.

The store holds the token triple for the lifetime of the worker process. Only
the RefreshCoordinator (inside its single-flight section) and the explicit
token-update / session-reset activities mutate it, so the store itself needs
no locking.

Every `set()` is mirrored to a persistence backend, by default the `.env`
file the worker was started from, written with python-dotenv. A failed write
is logged and ignored: the in-memory credential is what requests use.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

from dotenv import dotenv_values, set_key
from fbexport_shared.extract_models import Credential

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "ACCESS_TOKEN"
REFRESH_TOKEN_KEY = "REFRESH_TOKEN"
BUSINESS_KEYS = ("ACCOUNT_ID", "BUSINESS_ID", "BUSINESS_UUID")


class CredentialPersistence(Protocol):
    """External config surface the store loads from and writes back to."""

    def load(self) -> Credential: ...

    def persist(self, key: str, value: str) -> None: ...


class EnvFilePersistence:
    """Reads tokens from the environment / a .env file and writes them back to the file."""

    def __init__(self, path: str | Path = ".env") -> None:
        self.path = Path(path)

    def load(self) -> Credential:
        file_values = dotenv_values(self.path) if self.path.exists() else {}

        def lookup(key: str) -> str:
            return os.environ.get(key) or file_values.get(key) or ""

        # Expiry is not persisted; 0 forces a refresh on first use.
        return Credential(
            access_token=lookup(ACCESS_TOKEN_KEY),
            refresh_token=lookup(REFRESH_TOKEN_KEY),
            expires_at=0,
        )

    def persist(self, key: str, value: str) -> None:
        if not self.path.exists():
            self.path.touch()
        set_key(str(self.path), key, value, quote_mode="never")


class CredentialStore:
    """In-memory token triple with write-through persistence."""

    def __init__(
        self,
        credential: Credential | None = None,
        persistence: CredentialPersistence | None = None,
    ) -> None:
        self._credential = credential or Credential()
        self._persistence = persistence

    @classmethod
    def from_persistence(cls, persistence: CredentialPersistence) -> CredentialStore:
        return cls(persistence.load(), persistence)

    def get(self) -> Credential:
        return self._credential

    def set(self, credential: Credential) -> None:
        self._credential = credential
        self._persist(ACCESS_TOKEN_KEY, credential.access_token)
        self._persist(REFRESH_TOKEN_KEY, credential.refresh_token)

    def update_tokens(
        self, access_token: str, refresh_token: str, expires_in: int | None = None
    ) -> Credential:
        """Install tokens handed over from outside the worker.

        Without a reported lifetime the expiry stays unknown, so the next
        ensure_valid_token() renews the pair before using it.
        """
        if expires_in is None:
            credential = Credential(access_token=access_token, refresh_token=refresh_token)
        else:
            credential = Credential.issued(access_token, refresh_token, expires_in)
        self.set(credential)
        return credential

    def clear(self, clear_business: bool = False) -> None:
        """Forget the tokens in memory; the persisted pair is left for the next login."""
        self._credential = Credential()
        if clear_business:
            for key in BUSINESS_KEYS:
                self._persist(key, "")

    def persist_value(self, key: str, value: str) -> None:
        self._persist(key, value)

    def _persist(self, key: str, value: str) -> None:
        if self._persistence is None:
            return
        try:
            self._persistence.persist(key, value)
        except Exception as e:
            logger.warning(f"Could not persist {key}: {e}")
