"""RQ integration for fire-and-forget background work."""

from __future__ import annotations

import logging
import time
from threading import Lock
from uuid import UUID, uuid4

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue
from rq.job import Job, Retry

from .config import Settings, get_settings
from .context import current_request_id

logger = logging.getLogger(__name__)

_job_connection: Redis | None = None
_job_queue: Queue | None = None
_unavailable_until = 0.0
_job_lock = Lock()


class JobQueueUnavailableError(RuntimeError):
    """Raised when the Redis-backed job queue cannot be reached."""


def set_job_connection(connection: Redis | None) -> None:
    """Inject a Redis connection for job queue operations (primarily for tests)."""

    global _job_connection, _job_queue, _unavailable_until
    with _job_lock:
        _job_connection = connection
        _job_queue = None
        _unavailable_until = 0.0


def close_job_connection() -> None:
    """Close the active Redis connection if one exists."""

    global _job_connection, _job_queue, _unavailable_until
    with _job_lock:
        connection = _job_connection
        _job_connection = None
        _job_queue = None
        _unavailable_until = 0.0
    if connection is None:
        return
    try:
        connection.close()
    except RedisError:  # pragma: no cover - closing failures are best-effort
        logger.debug("Failed to close Redis connection cleanly.", exc_info=True)


def _resolve_job_connection(settings: Settings) -> Redis:
    global _job_connection, _unavailable_until
    if _job_connection is not None:
        return _job_connection
    if time.monotonic() < _unavailable_until:
        raise JobQueueUnavailableError("Job queue is unavailable.")
    try:
        connection = Redis.from_url(
            settings.redis_url,
            socket_connect_timeout=settings.redis_socket_timeout,
            socket_timeout=settings.redis_socket_timeout,
        )
        connection.ping()
    except RedisError as exc:
        # Later callers fail fast until the window passes.
        _unavailable_until = time.monotonic() + settings.job_queue_retry_after_seconds
        logger.error("Redis job queue unavailable.", exc_info=True)
        raise JobQueueUnavailableError("Job queue is unavailable.") from exc
    _job_connection = connection
    return connection


def get_job_connection(settings: Settings | None = None) -> Redis:
    """Return the Redis connection used for job processing."""

    with _job_lock:
        return _resolve_job_connection(settings or get_settings())


def get_job_queue(settings: Settings | None = None) -> Queue:
    """Return the queue notification jobs are published to."""

    global _job_queue
    settings = settings or get_settings()
    with _job_lock:
        if _job_queue is not None and _job_queue.name == settings.job_queue_name:
            return _job_queue
        connection = _resolve_job_connection(settings)
        _job_queue = Queue(
            settings.job_queue_name,
            connection=connection,
            default_timeout=settings.job_default_timeout or None,
        )
        return _job_queue


def _retry_policy(settings: Settings) -> Retry | None:
    if settings.job_max_retries <= 0:
        return None
    return Retry(max=settings.job_max_retries, interval=settings.job_retry_backoff_seconds or [0])


def enqueue_task_created_notification(
    *,
    recipient: str,
    recipient_name: str,
    task_id: UUID,
    task_title: str,
    settings: Settings | None = None,
    request_id: str | None = None,
) -> Job | None:
    """Queue the "task created" e-mail for ``recipient``.

    Never raises: failures are logged and ``None`` is returned. The Redis
    calls block, so async callers run this in a worker thread and pass the
    ``request_id`` they captured on the event loop.
    """

    from ..jobs.notifications import send_task_created_email

    settings = settings or get_settings()
    if not settings.notifications_enabled:
        logger.debug("Notifications disabled; skipping e-mail for task %s", task_id)
        return None

    result_ttl = settings.job_result_ttl_seconds or None
    try:
        queue = get_job_queue(settings)
        job = queue.enqueue(
            send_task_created_email,
            recipient,
            recipient_name,
            str(task_id),
            task_title,
            request_id=request_id or current_request_id(),
            job_id=f"task-created-{task_id.hex}-{uuid4().hex[:12]}",
            retry=_retry_policy(settings),
            result_ttl=result_ttl,
            failure_ttl=result_ttl,
            description=f"Notify {recipient} about task {task_id}",
            job_timeout=settings.job_default_timeout or None,
        )
    except Exception:
        logger.warning(
            "Could not enqueue task notification",
            exc_info=True,
            extra={"task_id": str(task_id)},
        )
        return None
    logger.info("Enqueued task notification job %s", job.id, extra={"task_id": str(task_id)})
    return job


__all__ = [
    "JobQueueUnavailableError",
    "close_job_connection",
    "enqueue_task_created_notification",
    "get_job_connection",
    "get_job_queue",
    "set_job_connection",
]
