"""Session lifecycle: creation, guaranteed close and history inspection."""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

import httpx
from rich.console import Console
from rich.table import Table

from .commands import close_session, create_session
from .config import WebDriverConfig
from .driver.base import WebDriver
from .factory import build_driver
from .session import SessionHistory

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Action = Callable[[WebDriver], T]


def run_session(
    config: WebDriverConfig,
    action: Action[T],
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> T:
    """Create a session from ``config`` and run ``action`` against it.

    The remote session is not closed afterwards; wrap ``action`` with
    :func:`finally_close` for that.
    """

    with build_driver(config, transport=transport) as wd:
        create_session(wd, config.desired_capabilities())
        return action(wd)


def finally_close(wd: WebDriver, action: Action[T]) -> T:
    """Run ``action`` and close the session afterwards, whatever the outcome.

    A failure raised by ``action`` propagates after the close attempt. If the
    close fails as well, that error is logged and attached to the original
    failure as a note.
    """

    result = close_on_exception(wd, action)
    close_session(wd)
    return result


def close_on_exception(wd: WebDriver, action: Action[T]) -> T:
    """Run ``action``, closing the session only if it raises.

    On success the session stays active, for sessions managed by the caller.
    """

    try:
        return action(wd)
    except BaseException as exc:
        _close_after_failure(wd, exc)
        raise


def get_session_history(wd: WebDriver) -> list[SessionHistory]:
    """Commands executed so far in this session, oldest first."""

    return list(wd.session.history)


def dump_session_history(
    wd: WebDriver,
    action: Action[T],
    *,
    console: Optional[Console] = None,
) -> T:
    """Run ``action`` and print the command history once it finishes or fails."""

    try:
        return action(wd)
    finally:
        print_history(get_session_history(wd), console=console)


def print_history(history: list[SessionHistory], *, console: Optional[Console] = None) -> None:
    table = Table(title="Session history")
    table.add_column("#", justify="right")
    table.add_column("Method")
    table.add_column("Path")
    table.add_column("Status", justify="right")
    for index, entry in enumerate(history, start=1):
        table.add_row(
            str(index),
            entry.request.method,
            entry.request.url.path,
            str(entry.response.status_code),
        )
    (console or Console()).print(table)


def _close_after_failure(wd: WebDriver, failure: BaseException) -> None:
    session_id = wd.session.session_id
    try:
        close_session(wd)
    except Exception as close_exc:
        LOGGER.warning(
            "Closing session %s after a failure also failed: %s",
            session_id,
            close_exc,
        )
        failure.add_note(f"Closing the session afterwards also failed: {close_exc!r}")
