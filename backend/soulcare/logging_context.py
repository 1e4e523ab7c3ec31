from __future__ import annotations

import logging
from contextvars import ContextVar, Token
from dataclasses import dataclass

import sentry_sdk


@dataclass(slots=True)
class RequestLogContext:
    request_id: str | None = None
    method: str | None = None
    path: str | None = None
    user_id: str | None = None


_current: ContextVar[RequestLogContext | None] = ContextVar("soulcare_request", default=None)


class RequestContextFilter(logging.Filter):
    """Stamp records with the request being served, if any."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - formatting only
        context = _current.get() or RequestLogContext()
        record.request_id = context.request_id
        record.user_id = context.user_id
        record.http_path = context.path
        return True


def push_request_context(request_id: str, *, method: str | None = None, path: str | None = None) -> Token:
    return _current.set(RequestLogContext(request_id=request_id, method=method, path=path))


def pop_request_context(token: Token) -> None:
    _current.reset(token)


def set_user_context(user_id: str | None) -> None:
    context = _current.get()
    if context is None:
        # no middleware in front, e.g. dependency called directly
        _current.set(RequestLogContext(user_id=user_id))
    else:
        context.user_id = user_id
    sentry_sdk.set_user({"id": user_id} if user_id else None)


__all__ = [
    "RequestContextFilter",
    "RequestLogContext",
    "pop_request_context",
    "push_request_context",
    "set_user_context",
]
