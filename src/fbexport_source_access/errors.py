"""Failures raised by the extraction core.

Registry and identifier problems are detected before any network call. Upstream
HTTP failures carry the status and body so the front door can decide how to
present them. Transport failures (httpx.TransportError) are not wrapped.
"""

from __future__ import annotations

from typing import Any


class ExtractionError(Exception):
    """Base exception for extraction failures."""


class MissingRefreshToken(ExtractionError):
    """No refresh token is stored at all, so the user has to authorize again."""

    def __init__(self) -> None:
        super().__init__("No refresh token available, please reauthorize.")


class TokenRefreshFailed(ExtractionError):
    """The token endpoint rejected or failed the refresh; reauthorization required."""

    def __init__(self, detail: Any = None) -> None:
        self.detail = detail
        super().__init__("Token refresh failed, please reauthorize manually.")


class UnknownResourceType(ExtractionError):
    def __init__(self, resource_type: str, supported: list[str]) -> None:
        self.resource_type = resource_type
        self.supported = supported
        super().__init__(
            f"Unknown resource type '{resource_type}'. Supported: {', '.join(supported)}"
        )


class MissingIdentifier(ExtractionError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Missing {kind}")


class UpstreamHTTPError(ExtractionError):
    """The upstream API answered with an error status."""

    def __init__(self, status_code: int, body: Any = None, url: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(f"Upstream API error {status_code} for {url or 'request'}")

    @property
    def upstream_message(self) -> str:
        """Best-effort human message out of the upstream error body."""
        body = self.body
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and isinstance(error.get("message"), str):
                return error["message"]
            if isinstance(body.get("message"), str):
                return body["message"]
            if isinstance(error, str):
                return error
            return ""
        return body if isinstance(body, str) else ""
