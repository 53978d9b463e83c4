from __future__ import annotations

import json
import logging
import queue
import threading
from typing import Any, Dict, Iterator, Optional

from ..common.tokens import SignedTokenService
from ..core.constants import DEFAULT_SSE_KEEPALIVE_SECONDS
from .registry import SessionRegistry

logger = logging.getLogger(__name__)

_CLOSE = object()


class SessionClosed(Exception):
    pass


class QueueSession:
    """Push session backed by a queue drained by one streaming response."""

    def __init__(self, employee_id: int, *, maxsize: int = 100):
        self.employee_id = int(employee_id)
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def send(self, event: Dict[str, Any]) -> None:
        if self._closed.is_set():
            raise SessionClosed()
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            # The client stopped reading. The registry drops us; the stream must end too.
            self._closed.set()
            raise

    def close(self) -> None:
        self._closed.set()
        try:
            self._queue.put_nowait(_CLOSE)
        except queue.Full:
            pass

    def next_event(self, timeout: float) -> Optional[Dict[str, Any]]:
        """Block up to ``timeout``; None on timeout, SessionClosed once closed."""
        if self._closed.is_set():
            raise SessionClosed()
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSE or self._closed.is_set():
            raise SessionClosed()
        return item


def format_sse(event: Dict[str, Any]) -> str:
    name = event.get("event", "message")
    data = json.dumps(event.get("data"), separators=(",", ":"))
    return f"event: {name}\ndata: {data}\n\n"


class LiveChannel:
    """Authenticated server-to-client push over Server-Sent Events."""

    def __init__(
        self,
        registry: SessionRegistry,
        tokens: SignedTokenService,
        *,
        keepalive_seconds: float = DEFAULT_SSE_KEEPALIVE_SECONDS,
    ):
        self._registry = registry
        self._tokens = tokens
        self._keepalive = float(keepalive_seconds)

    def open(self, token: Optional[str]) -> QueueSession:
        """Authenticate and register a session; AuthenticationError refuses it."""
        employee_id = self._tokens.verify(token)
        session = QueueSession(employee_id)
        self._registry.register(employee_id, session)
        return session

    def close(self, session: QueueSession) -> None:
        session.close()
        self._registry.unregister(session)

    def stream(self, session: QueueSession) -> Iterator[str]:
        """Yield SSE frames until the session closes or the client goes away."""
        try:
            yield ": connected\n\n"
            while True:
                try:
                    event = session.next_event(self._keepalive)
                except SessionClosed:
                    return
                if event is None:
                    yield ": keepalive\n\n"
                    continue
                yield format_sse(event)
        finally:
            self._registry.unregister(session)
