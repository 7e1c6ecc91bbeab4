"""Command execution abstractions."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Callable, Optional, TypeVar

from ..protocol.codec import SESSION_PREFIX
from ..session import WDSession

T = TypeVar("T")


class WebDriver(ABC):
    """Interface shared by every strategy that executes WebDriver commands.

    Commands run one at a time against the owned :class:`WDSession`; each call
    blocks until its round trip completes.
    """

    @property
    @abstractmethod
    def session(self) -> WDSession:
        """The session record this driver reads and updates."""

    @abstractmethod
    def do_command(
        self,
        method: str,
        path: str,
        args: Any = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
        decode: Optional[Callable[[Any], T]] = None,
    ) -> T:
        """Execute one command and return its decoded result."""

    def do_session_command(
        self,
        method: str,
        path: str,
        args: Any = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
        decode: Optional[Callable[[Any], T]] = None,
    ) -> T:
        """Execute a command scoped to the current session."""

        return self.do_command(
            method, SESSION_PREFIX + path, args, headers=headers, decode=decode
        )
