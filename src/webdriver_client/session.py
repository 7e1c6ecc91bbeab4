"""Per-session state threaded through every command."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

import httpx

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4444
DEFAULT_BASE_PATH = "/wd/hub"


class SessionStatus(str, enum.Enum):
    """Lifecycle states of a session record."""

    UNSTARTED = "unstarted"
    ACTIVE = "active"
    CLOSED = "closed"


@dataclass
class SessionHistory:
    """One executed command: the request sent and the response received."""

    request: httpx.Request
    response: httpx.Response


@dataclass
class WDSession:
    """Connection details, session id and command history of one session.

    A record is owned by a single thread of command execution. Concurrent
    automation needs one record (and one server-side session) per thread.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    base_path: str = DEFAULT_BASE_PATH
    session_id: Optional[str] = None
    history: list[SessionHistory] = field(default_factory=list)
    history_limit: Optional[int] = None
    status: SessionStatus = SessionStatus.UNSTARTED

    def assign_id(self, session_id: str) -> None:
        self.session_id = session_id
        self.status = SessionStatus.ACTIVE

    def clear_id(self) -> None:
        self.session_id = None
        self.status = SessionStatus.CLOSED

    def record(self, request: httpx.Request, response: httpx.Response) -> None:
        """Append an exchange, keeping at most ``history_limit`` entries."""

        if self.history_limit == 0:
            return
        self.history.append(SessionHistory(request=request, response=response))
        if self.history_limit is not None and len(self.history) > self.history_limit:
            del self.history[: len(self.history) - self.history_limit]


def default_session() -> WDSession:
    """A session record for ``127.0.0.1:4444`` that has not been created yet."""

    return WDSession()
