"""Worker runner entrypoint.

Usage:
  fbexport-worker [component-name]
  COMPONENT=source-access python -m fbexport_workers.runner

CLI argument takes precedence over the COMPONENT env var; without either the
extraction component is started. The worker polls the component's task queue
until interrupted (SIGINT/SIGTERM).

MAX_CONCURRENT_EXTRACTIONS bounds how many activities run at once, which is
the bound on concurrent upstream extractions for the process.
"""

import asyncio
import logging
import os
import sys

from fbexport_shared.temporal_client import connect
from fbexport_source_access.service import get_service
from temporalio.worker import Worker

from fbexport_workers.registry import COMPONENTS, DEFAULT_COMPONENT

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def run_worker(component_name: str) -> None:
    """Start a Temporal worker for the specified component."""
    if component_name not in COMPONENTS:
        available = ", ".join(sorted(COMPONENTS.keys()))
        logger.error(f"Unknown component '{component_name}'. Available: {available}")
        sys.exit(1)

    config = COMPONENTS[component_name]
    service = get_service()
    client = await connect()

    logger.info(
        f"Starting worker for '{component_name}' on queue '{config.task_queue}' "
        f"(activities={len(config.activities)}, "
        f"max_concurrent={service.settings.max_concurrent_extractions})"
    )

    worker = Worker(
        client,
        task_queue=config.task_queue,
        workflows=config.workflows,
        activities=config.activities,
        max_concurrent_activities=service.settings.max_concurrent_extractions,
    )

    try:
        await worker.run()
    finally:
        await service.close()


def main() -> None:
    """CLI entrypoint: pick the component and start the worker."""
    component_name = (
        sys.argv[1] if len(sys.argv) >= 2 else os.environ.get("COMPONENT", DEFAULT_COMPONENT)
    )
    asyncio.run(run_worker(component_name))


if __name__ == "__main__":
    main()
