from __future__ import annotations

import asyncio
import smtplib
import time
from collections.abc import AsyncIterator, Iterator
from email.message import EmailMessage
from uuid import uuid4

import pytest
import pytest_asyncio
from fakeredis import FakeRedis
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from rq import SimpleWorker
from rq.job import JobStatus

from task_manager.app.core import jobs as jobs_module
from task_manager.app.core.config import Settings, get_settings
from task_manager.app.core.context import request_id_scope
from task_manager.app.core.jobs import (
    JobQueueUnavailableError,
    close_job_connection,
    enqueue_task_created_notification,
    get_job_connection,
    get_job_queue,
    set_job_connection,
)
from task_manager.app.db.session import Database
from task_manager.app.jobs.notifications import send_task_created_email
from task_manager.app.main import create_app
from task_manager.app.services.notifications import Mailer, task_created_message


class _UnreachableRedis:
    calls: list[dict] = []

    @classmethod
    def from_url(cls, url: str, **options) -> "_UnreachableRedis":
        cls.calls.append(options)
        return cls()

    def ping(self) -> bool:
        raise RedisConnectionError("connection refused")


class _SlowUnreachableRedis(_UnreachableRedis):
    @classmethod
    def from_url(cls, url: str, **options) -> "_SlowUnreachableRedis":
        time.sleep(1.0)
        return cls()


class _RecordingSMTP:
    sent: list[EmailMessage] = []
    failures_left = 0

    def __init__(self, host: str, port: int, timeout: float | None = None) -> None:
        self.host = host
        self.port = port

    def __enter__(self) -> "_RecordingSMTP":
        return self

    def __exit__(self, *exc_info) -> None:
        return None

    def starttls(self) -> None:
        return None

    def login(self, user: str, password: str) -> None:
        return None

    def send_message(self, message: EmailMessage) -> None:
        if _RecordingSMTP.failures_left > 0:
            _RecordingSMTP.failures_left -= 1
            raise smtplib.SMTPServerDisconnected("relay went away")
        _RecordingSMTP.sent.append(message)


@pytest.fixture()
def job_settings() -> Iterator[Settings]:
    get_settings.cache_clear()
    settings = get_settings()
    original = {
        "notifications_enabled": settings.notifications_enabled,
        "job_max_retries": settings.job_max_retries,
        "job_retry_backoff_seconds": list(settings.job_retry_backoff_seconds),
        "smtp_host": settings.smtp_host,
        "email_from": settings.email_from,
    }
    settings.notifications_enabled = True
    settings.job_max_retries = 2
    settings.job_retry_backoff_seconds = [0, 0]
    settings.smtp_host = "smtp.example.com"
    settings.email_from = "noreply@example.com"
    try:
        yield settings
    finally:
        for key, value in original.items():
            setattr(settings, key, value)
        get_settings.cache_clear()


@pytest.fixture(autouse=True)
def fake_redis() -> Iterator[FakeRedis]:
    fake = FakeRedis(decode_responses=False)
    set_job_connection(fake)
    try:
        yield fake
    finally:
        close_job_connection()


@pytest.fixture()
def smtp(monkeypatch: pytest.MonkeyPatch) -> type[_RecordingSMTP]:
    _RecordingSMTP.sent = []
    _RecordingSMTP.failures_left = 0
    monkeypatch.setattr(smtplib, "SMTP", _RecordingSMTP)
    return _RecordingSMTP


def _worker() -> SimpleWorker:
    return SimpleWorker([get_job_queue()], connection=get_job_connection())


def test_task_created_message() -> None:
    subject, body = task_created_message(recipient_name="Alice", task_title="Buy milk")

    assert subject == "New task created: Buy milk"
    assert "Hi Alice" in body
    assert '"Buy milk"' in body


def test_enqueue_is_skipped_when_notifications_disabled() -> None:
    get_settings.cache_clear()
    assert get_settings().notifications_enabled is False

    job = enqueue_task_created_notification(
        recipient="a@x.com",
        recipient_name="Alice",
        task_id=uuid4(),
        task_title="Buy milk",
    )

    assert job is None
    assert get_job_queue().count == 0


def test_enqueued_job_carries_retry_policy_and_request_id(job_settings: Settings) -> None:
    task_id = uuid4()

    with request_id_scope("req-42"):
        job = enqueue_task_created_notification(
            recipient="a@x.com",
            recipient_name="Alice",
            task_id=task_id,
            task_title="Buy milk",
        )

    assert job is not None
    assert job.args == ("a@x.com", "Alice", str(task_id), "Buy milk")
    assert job.kwargs == {"request_id": "req-42"}
    assert job.retries_left == 2
    assert get_job_queue().count == 1


def test_worker_sends_email(job_settings: Settings, smtp: type[_RecordingSMTP]) -> None:
    job = enqueue_task_created_notification(
        recipient="a@x.com",
        recipient_name="Alice",
        task_id=uuid4(),
        task_title="Buy milk",
    )
    assert job is not None

    _worker().work(burst=True)

    job.refresh()
    assert job.get_status() == JobStatus.FINISHED
    assert job.return_value()["sent"] is True
    assert len(smtp.sent) == 1
    message = smtp.sent[0]
    assert message["To"] == "a@x.com"
    assert message["From"] == "noreply@example.com"
    assert message["Subject"] == "New task created: Buy milk"


def test_worker_retries_transient_smtp_failures(
    job_settings: Settings,
    smtp: type[_RecordingSMTP],
) -> None:
    smtp.failures_left = 2
    job = enqueue_task_created_notification(
        recipient="a@x.com",
        recipient_name="Alice",
        task_id=uuid4(),
        task_title="Buy milk",
    )
    assert job is not None
    worker = _worker()

    for _ in range(3):  # initial attempt + 2 retries
        worker.work(burst=True, with_scheduler=True)
        job.refresh()
        if job.get_status() == JobStatus.FINISHED:
            break
    else:
        pytest.fail("Job did not succeed after retries")

    assert len(smtp.sent) == 1


def test_job_without_mail_relay_reports_not_sent() -> None:
    get_settings.cache_clear()

    result = send_task_created_email("a@x.com", "Alice", str(uuid4()), "Buy milk")

    assert result["sent"] is False


def test_mailer_refuses_to_send_without_configuration() -> None:
    mailer = Mailer(Settings(environment="test"))

    assert mailer.configured is False
    with pytest.raises(RuntimeError):
        mailer.send(to="a@x.com", subject="s", body="b")


def test_enqueue_failure_is_swallowed(job_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    def _unavailable(*args, **kwargs):
        raise JobQueueUnavailableError("Job queue is unavailable.")

    monkeypatch.setattr(jobs_module, "get_job_queue", _unavailable)

    job = enqueue_task_created_notification(
        recipient="a@x.com",
        recipient_name="Alice",
        task_id=uuid4(),
        task_title="Buy milk",
    )

    assert job is None


def test_unexpected_enqueue_errors_are_swallowed(job_settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    class _BrokenQueue:
        def enqueue(self, *args, **kwargs):
            raise TypeError("cannot pickle job arguments")

    monkeypatch.setattr(jobs_module, "get_job_queue", lambda *args, **kwargs: _BrokenQueue())

    job = enqueue_task_created_notification(
        recipient="a@x.com",
        recipient_name="Alice",
        task_id=uuid4(),
        task_title="Buy milk",
    )

    assert job is None


def test_failed_connect_backs_off(monkeypatch: pytest.MonkeyPatch) -> None:
    set_job_connection(None)
    monkeypatch.setattr(jobs_module, "Redis", _UnreachableRedis)
    _UnreachableRedis.calls = []
    settings = Settings(
        environment="test",
        notifications_enabled=True,
        redis_socket_timeout=0.5,
        job_queue_retry_after_seconds=60,
    )

    for _ in range(3):
        assert (
            enqueue_task_created_notification(
                recipient="a@x.com",
                recipient_name="Alice",
                task_id=uuid4(),
                task_title="Buy milk",
                settings=settings,
            )
            is None
        )

    assert len(_UnreachableRedis.calls) == 1
    options = _UnreachableRedis.calls[0]
    assert options["socket_timeout"] == 0.5
    assert options["socket_connect_timeout"] == 0.5

    set_job_connection(None)
    with pytest.raises(JobQueueUnavailableError):
        get_job_queue(settings)
    assert len(_UnreachableRedis.calls) == 2


@pytest.fixture()
def notify_settings(settings: Settings) -> Settings:
    return settings.model_copy(
        update={
            "notifications_enabled": True,
            "job_queue_name": "app-notifications",
            "job_max_retries": 1,
            "job_retry_backoff_seconds": [0],
        }
    )


@pytest_asyncio.fixture
async def notifying_client(notify_settings: Settings, database: Database) -> AsyncIterator[AsyncClient]:
    get_settings.cache_clear()
    application = create_app(notify_settings, database=database)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
    get_settings.cache_clear()


async def test_task_creation_enqueues_with_app_settings(
    notifying_client: AsyncClient,
    notify_settings: Settings,
    create_user,
) -> None:
    assert get_settings().notifications_enabled is False
    owner = await create_user(name="Alice", email="alice@example.com")

    response = await notifying_client.post("/tasks", data={"title": "Buy milk"}, headers=owner.headers)

    assert response.status_code == 201
    queue = get_job_queue(notify_settings)
    assert queue.name == "app-notifications"
    assert queue.count == 1
    job = queue.jobs[0]
    assert job.args[0] == "alice@example.com"
    assert job.args[2] == response.json()["id"]
    assert job.kwargs["request_id"] == response.headers["X-Request-ID"]
    assert job.retries_left == 1


async def test_task_creation_succeeds_when_queue_is_down(
    notifying_client: AsyncClient,
    create_user,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _unavailable(*args, **kwargs):
        raise JobQueueUnavailableError("Job queue is unavailable.")

    monkeypatch.setattr(jobs_module, "get_job_queue", _unavailable)
    owner = await create_user()

    response = await notifying_client.post("/tasks", data={"title": "Still saved"}, headers=owner.headers)

    assert response.status_code == 201
    listed = await notifying_client.get("/tasks")
    assert [task["title"] for task in listed.json()] == ["Still saved"]


async def test_slow_redis_does_not_stall_other_requests(
    notifying_client: AsyncClient,
    create_user,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    set_job_connection(None)
    monkeypatch.setattr(jobs_module, "Redis", _SlowUnreachableRedis)
    owner = await create_user()

    async def _health_check() -> float:
        await asyncio.sleep(0.2)
        started = time.perf_counter()
        response = await notifying_client.get("/healthz")
        assert response.status_code == 200
        return time.perf_counter() - started

    created, health_elapsed = await asyncio.gather(
        notifying_client.post("/tasks", data={"title": "Slow queue"}, headers=owner.headers),
        _health_check(),
    )

    assert created.status_code == 201
    assert health_elapsed < 0.5
