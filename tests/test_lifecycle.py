from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

import httpx
import pytest
from rich.console import Console

from conftest import CHROME_CAPS, FakeWebDriverServer, ok
from webdriver_client import commands
from webdriver_client.config import WebDriverConfig
from webdriver_client.driver.base import WebDriver
from webdriver_client.errors import (
    FailedCommand,
    FailedCommandInfo,
    FailedCommandType,
    ServerError,
    failed_command,
)
from webdriver_client.lifecycle import (
    close_on_exception,
    dump_session_history,
    finally_close,
    get_session_history,
    run_session,
)
from webdriver_client.protocol.codec import expand_path
from webdriver_client.session import SessionStatus, WDSession


class StubDriver(WebDriver):
    def __init__(self, failures: Optional[dict[tuple[str, str], Exception]] = None) -> None:
        self._session = WDSession()
        self._session.assign_id("abc123")
        self.failures = failures or {}
        self.calls: list[tuple[str, str]] = []

    @property
    def session(self) -> WDSession:
        return self._session

    def do_command(
        self,
        method: str,
        path: str,
        args: Any = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
        decode: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        path = expand_path(self._session, path)
        self.calls.append((method, path))
        if (method, path) in self.failures:
            raise self.failures[(method, path)]
        return None


def _failing_action(wd: WebDriver) -> None:
    commands.open_page(wd, "http://example.com")
    raise FailedCommand(
        FailedCommandType.TIMEOUT,
        FailedCommandInfo(message="page load", session_id=wd.session.session_id),
    )


def test_finally_close_closes_after_success() -> None:
    wd = StubDriver()

    result = finally_close(wd, lambda inner: commands.open_page(inner, "http://x") or "done")

    assert result == "done"
    assert wd.calls[-1] == ("DELETE", "/session/abc123")
    assert wd.session.status is SessionStatus.CLOSED


def test_finally_close_closes_and_propagates_failure() -> None:
    wd = StubDriver()

    with pytest.raises(FailedCommand) as excinfo:
        finally_close(wd, _failing_action)

    assert excinfo.value.type is FailedCommandType.TIMEOUT
    assert wd.calls == [
        ("POST", "/session/abc123/url"),
        ("DELETE", "/session/abc123"),
    ]
    assert wd.session.session_id is None


def test_close_failure_does_not_hide_original_failure(caplog) -> None:
    wd = StubDriver(failures={("DELETE", "/session/abc123"): ServerError("grid went away")})

    with caplog.at_level(logging.WARNING), pytest.raises(FailedCommand) as excinfo:
        finally_close(wd, _failing_action)

    assert any("grid went away" in note for note in excinfo.value.__notes__)
    assert "grid went away" in caplog.text
    assert ("DELETE", "/session/abc123") in wd.calls


def test_close_on_exception_leaves_successful_session_active() -> None:
    wd = StubDriver()

    close_on_exception(wd, lambda inner: commands.open_page(inner, "http://x"))

    assert ("DELETE", "/session/abc123") not in wd.calls
    assert wd.session.session_id == "abc123"
    assert wd.session.status is SessionStatus.ACTIVE


def test_close_on_exception_closes_on_failure() -> None:
    wd = StubDriver()

    def action(inner: WebDriver) -> None:
        raise failed_command(inner.session, FailedCommandType.NO_SUCH_WINDOW, "closed")

    with pytest.raises(FailedCommand) as excinfo:
        close_on_exception(wd, action)

    assert excinfo.value.info.session_id == "abc123"
    assert wd.calls == [("DELETE", "/session/abc123")]


def test_close_on_exception_also_handles_foreign_errors() -> None:
    wd = StubDriver()

    def action(inner: WebDriver) -> None:
        raise KeyError("boom")

    with pytest.raises(KeyError):
        close_on_exception(wd, action)

    assert wd.calls == [("DELETE", "/session/abc123")]


def test_run_session_with_guaranteed_close(server: FakeWebDriverServer) -> None:
    server.on("POST", "/wd/hub/session", json=ok(CHROME_CAPS))
    server.on("GET", "/wd/hub/session/abc123/url", json=ok("http://example.com"))
    server.on("DELETE", "/wd/hub/session/abc123", json=ok())
    config = WebDriverConfig(capabilities={"browserName": "chrome"}, request_headers={"X-Grid": "a"})
    seen: dict[str, Any] = {}

    def action(wd: WebDriver) -> str:
        url = commands.get_current_url(wd)
        seen["history"] = get_session_history(wd)
        return url

    url = run_session(
        config,
        lambda wd: finally_close(wd, action),
        transport=httpx.MockTransport(server.handle),
    )

    assert url == "http://example.com"
    assert server.calls == [
        ("POST", "/wd/hub/session"),
        ("GET", "/wd/hub/session/abc123/url"),
        ("DELETE", "/wd/hub/session/abc123"),
    ]
    assert len(seen["history"]) == 2
    assert all(request.headers["X-Grid"] == "a" for request in server.requests)
    assert server.requests[0].content and b'"browserName": "chrome"' in server.requests[0].content


def test_dump_session_history_prints_after_failure(server: FakeWebDriverServer, active_driver) -> None:
    server.on("GET", "/wd/hub/session/abc123/url", json=ok("http://example.com"))
    console = Console(record=True, width=120)

    def action(wd: WebDriver) -> None:
        commands.get_current_url(wd)
        raise RuntimeError("stop")

    with pytest.raises(RuntimeError):
        dump_session_history(active_driver, action, console=console)

    output = console.export_text()
    assert "Session history" in output
    assert "/wd/hub/session/abc123/url" in output
    assert "200" in output
