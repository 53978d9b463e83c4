from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Protocol, Set

logger = logging.getLogger(__name__)


class PushSession(Protocol):
    """One live client connection."""

    def send(self, event: Dict[str, Any]) -> None:
        raise NotImplementedError


class SessionRegistry:
    """Live sessions per employee id.

    Process-local: a second hub process keeps its own registry and will not
    see these sessions.
    """

    def __init__(self) -> None:
        self._sessions: Dict[int, Set[PushSession]] = {}
        self._owners: Dict[PushSession, int] = {}
        self._lock = threading.Lock()

    def register(self, employee_id: int, session: PushSession) -> None:
        with self._lock:
            self._sessions.setdefault(int(employee_id), set()).add(session)
            self._owners[session] = int(employee_id)
        logger.info("Session connected: employee %s", employee_id)

    def unregister(self, session: PushSession) -> Optional[int]:
        with self._lock:
            employee_id = self._owners.pop(session, None)
            if employee_id is None:
                return None
            conns = self._sessions.get(employee_id)
            if conns is not None:
                conns.discard(session)
                if not conns:
                    self._sessions.pop(employee_id, None)
        logger.info("Session disconnected: employee %s", employee_id)
        return employee_id

    def sessions_for(self, employee_id: int) -> List[PushSession]:
        with self._lock:
            return list(self._sessions.get(int(employee_id), ()))

    def is_connected(self, employee_id: int) -> bool:
        with self._lock:
            return bool(self._sessions.get(int(employee_id)))

    def broadcast(self, employee_id: int, event: Dict[str, Any]) -> int:
        """Send ``event`` to every session of the employee.

        Sessions that fail to accept the event are dropped. Returns how many
        sessions took it.
        """
        delivered = 0
        for session in self.sessions_for(employee_id):
            try:
                session.send(event)
                delivered += 1
            except Exception as e:
                logger.warning("Dropping session of employee %s: %r", employee_id, e)
                self.unregister(session)
        return delivered
