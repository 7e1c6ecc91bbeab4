from __future__ import annotations

from typing import Any, Callable, Union

import httpx
import pytest

from webdriver_client.driver.httpx_driver import HttpxWebDriver

Reply = Union[dict[str, Any], Callable[[httpx.Request], httpx.Response]]


class FakeWebDriverServer:
    """Scripted WebDriver endpoint served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.replies: dict[tuple[str, str], Reply] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, status: int = 200, **kwargs: Any) -> None:
        self.replies[(method, path)] = {"status_code": status, **kwargs}

    def on_call(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.replies[(method, path)] = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.replies.get((request.method, request.url.path))
        if reply is None:
            return httpx.Response(404, json={"value": {"message": "unknown command"}})
        if callable(reply):
            return reply(request)
        return httpx.Response(**reply)

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(request.method, request.url.path) for request in self.requests]


def ok(value: Any = None, session_id: str | None = "abc123") -> dict[str, Any]:
    return {"sessionId": session_id, "status": 0, "value": value}


CHROME_CAPS = {
    "browserName": "chrome",
    "platform": "LINUX",
    "version": "120.0",
    "javascriptEnabled": True,
    "takesScreenshot": True,
    "chrome.switches": [],
    "chrome.extensions": [],
}


@pytest.fixture
def server() -> FakeWebDriverServer:
    return FakeWebDriverServer()


@pytest.fixture
def driver(server: FakeWebDriverServer):
    wd = HttpxWebDriver(transport=httpx.MockTransport(server.handle))
    try:
        yield wd
    finally:
        wd.close()


@pytest.fixture
def active_driver(driver: HttpxWebDriver) -> HttpxWebDriver:
    driver.session.assign_id("abc123")
    return driver
