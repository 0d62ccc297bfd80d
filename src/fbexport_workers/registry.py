"""Component registry: maps component names to their task queue and activities.

The runner looks the component up by name (CLI argument or COMPONENT env var).
Extraction is one component today; token coordination is per process, so all
activities that touch credentials have to be registered on the same worker.
"""

from dataclasses import dataclass, field
from typing import Any

from fbexport_shared.task_queues import SOURCE_ACCESS_QUEUE
from fbexport_source_access.activities import (
    exchange_authorization_code,
    extract_resource,
    generate_journal,
    get_business_map,
    probe_endpoints,
    reset_session,
    update_tokens,
)


@dataclass
class ComponentConfig:
    """Configuration for a single component's worker."""

    task_queue: str
    workflows: list[Any] = field(default_factory=list)
    activities: list[Any] = field(default_factory=list)


COMPONENTS: dict[str, ComponentConfig] = {
    "source-access": ComponentConfig(
        task_queue=SOURCE_ACCESS_QUEUE,
        activities=[
            extract_resource,
            get_business_map,
            probe_endpoints,
            generate_journal,
            update_tokens,
            reset_session,
            exchange_authorization_code,
        ],
    ),
}

DEFAULT_COMPONENT = "source-access"
