"""Temporal client connection factory.

Two modes, picked from the environment:

1. **Local dev**: `TEMPORAL_ADDRESS` (default `localhost:7233`), no auth.
2. **Temporal Cloud**: `TEMPORAL_API_KEY` plus `TEMPORAL_REGIONAL_ENDPOINT`
   (the region-specific address from the namespace "Connect" dialog), over TLS.

`TEMPORAL_NAMESPACE` applies to both and defaults to `default`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from temporalio.client import Client


def connection_params(environ: Mapping[str, str] | None = None) -> dict[str, object]:
    """Resolve the keyword arguments for `Client.connect` from the environment."""
    env = os.environ if environ is None else environ
    namespace = env.get("TEMPORAL_NAMESPACE", "default")
    api_key = env.get("TEMPORAL_API_KEY")

    if not api_key:
        return {
            "target_host": env.get("TEMPORAL_ADDRESS", "localhost:7233"),
            "namespace": namespace,
        }

    endpoint = env.get("TEMPORAL_REGIONAL_ENDPOINT")
    if not endpoint:
        raise ValueError(
            "TEMPORAL_API_KEY is set but TEMPORAL_REGIONAL_ENDPOINT is missing. "
            "Use the regional endpoint shown in the Temporal Cloud 'Connect' dialog."
        )
    return {"target_host": endpoint, "namespace": namespace, "api_key": api_key, "tls": True}


async def connect() -> Client:
    """Create a connected Temporal client for the current environment."""
    return await Client.connect(**connection_params())  # type: ignore[arg-type]
