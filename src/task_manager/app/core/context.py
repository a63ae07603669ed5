"""Correlation identifiers shared between requests, logs and background jobs."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

REQUEST_ID_HEADER = "X-Request-ID"
_UNBOUND = "-"

_request_id_ctx_var: ContextVar[str] = ContextVar("request_id", default=_UNBOUND)


def get_request_id() -> str:
    """Return the request identifier bound to the current context, or ``"-"``."""

    return _request_id_ctx_var.get()


def current_request_id() -> str | None:
    """Return the bound request identifier, or ``None`` outside of a request."""

    value = _request_id_ctx_var.get()
    return None if value == _UNBOUND else value


def bind_request_id(request_id: str) -> Token[str]:
    return _request_id_ctx_var.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id_ctx_var.reset(token)


@contextmanager
def request_id_scope(request_id: str | None) -> Iterator[str]:
    """Bind ``request_id`` for the duration of the block.

    Jobs executed by the worker re-enter the originating request's
    identifier through this helper so their log lines correlate.
    """

    token = _request_id_ctx_var.set(request_id or _UNBOUND)
    try:
        yield _request_id_ctx_var.get()
    finally:
        _request_id_ctx_var.reset(token)


__all__ = [
    "REQUEST_ID_HEADER",
    "bind_request_id",
    "current_request_id",
    "get_request_id",
    "request_id_scope",
    "reset_request_id",
]
