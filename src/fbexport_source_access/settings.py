"""Runtime settings for the extraction worker.

Everything comes from environment variables; `load_environment()` first pulls
the `.env` file (path from ENV_PATH) into the process environment without
overriding variables that are already set. The same file is where renewed
tokens are written back, so a restarted worker picks up the latest pair.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel

DEFAULT_API_BASE = "https://api.freshbooks.com"


class ExtractSettings(BaseModel):
    api_base_url: str = DEFAULT_API_BASE
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    env_path: str = ".env"
    account_id: str | None = None
    business_id: str | None = None
    business_uuid: str | None = None
    request_timeout: float = 120.0
    token_timeout: float = 25.0
    default_page_size: int = 150
    default_max_pages: int = 500
    max_concurrent_extractions: int = 8

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ExtractSettings:
        env = os.environ if environ is None else environ

        def optional(name: str) -> str | None:
            value = env.get(name, "").strip()
            return value or None

        return cls(
            api_base_url=env.get("FRESHBOOKS_API") or DEFAULT_API_BASE,
            client_id=env.get("CLIENT_ID", ""),
            client_secret=env.get("CLIENT_SECRET", ""),
            redirect_uri=env.get("REDIRECT_URI", ""),
            env_path=env.get("ENV_PATH") or ".env",
            account_id=optional("ACCOUNT_ID"),
            business_id=optional("BUSINESS_ID"),
            business_uuid=optional("BUSINESS_UUID"),
            request_timeout=float(env.get("REQUEST_TIMEOUT") or 120.0),
            token_timeout=float(env.get("TOKEN_TIMEOUT") or 25.0),
            default_max_pages=int(env.get("DEFAULT_MAX_PAGES") or 500),
            max_concurrent_extractions=int(env.get("MAX_CONCURRENT_EXTRACTIONS") or 8),
        )


def load_environment() -> ExtractSettings:
    """Load the .env file into os.environ, then build settings from it."""
    load_dotenv(os.environ.get("ENV_PATH") or ".env", override=False)
    return ExtractSettings.from_env()
