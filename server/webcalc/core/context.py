from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_request_id: ContextVar[Optional[str]] = ContextVar("webcalc_request_id", default=None)

MAX_REQUEST_ID_LENGTH = 128


def normalize_request_id(candidate: Optional[str]) -> str:
    """Use the client's id when it is usable, otherwise mint a uuid4 hex id."""
    cleaned = (candidate or "").strip()
    if not cleaned or len(cleaned) > MAX_REQUEST_ID_LENGTH or not cleaned.isprintable():
        return uuid.uuid4().hex
    return cleaned


@contextmanager
def request_id_scope(candidate: Optional[str] = None) -> Iterator[str]:
    """Bind a request id for the duration of the block and restore the previous one afterwards."""
    token = _request_id.set(normalize_request_id(candidate))
    try:
        yield _request_id.get() or ""
    finally:
        _request_id.reset(token)


def get_request_id() -> Optional[str]:
    return _request_id.get()
