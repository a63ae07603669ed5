"""Entry point for running the notification worker."""

from __future__ import annotations

import logging
import os

from rq import Worker

from .core.config import get_settings
from .core.jobs import get_job_connection, get_job_queue
from .core.logging import configure_logging

logger = logging.getLogger(__name__)


def run() -> None:
    """Start an RQ worker bound to the notification queue.

    Each worker process handles one job at a time; throughput is bounded by
    the number of worker processes started.
    """

    settings = get_settings()
    configure_logging(settings)

    connection = get_job_connection(settings)
    queue = get_job_queue(settings)

    # Several worker processes may share one configured base name.
    worker_name = f"{settings.job_worker_name}-{os.getpid()}" if settings.job_worker_name else None

    logger.info(
        "Starting RQ worker '%s' listening on queue '%s'",
        worker_name or "anonymous",
        queue.name,
        extra={"queue": queue.name, "worker_name": worker_name or "anonymous"},
    )
    worker = Worker([queue], connection=connection, name=worker_name)
    worker.work(with_scheduler=True)


if __name__ == "__main__":  # pragma: no cover - script entry point
    run()
