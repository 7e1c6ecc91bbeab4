from __future__ import annotations

import httpx
from typer.testing import CliRunner

from conftest import CHROME_CAPS, FakeWebDriverServer, ok
from webdriver_client import lifecycle
from webdriver_client.cli import app
from webdriver_client.driver.httpx_driver import HttpxWebDriver
from webdriver_client.factory import build_session


def _patch_transport(monkeypatch, server: FakeWebDriverServer) -> None:
    transport = httpx.MockTransport(server.handle)

    def fake_build_driver(config):  # type: ignore[no-untyped-def]
        return HttpxWebDriver(build_session(config), headers=config.request_headers, transport=transport)

    def fake_run_session(config, action):  # type: ignore[no-untyped-def]
        return lifecycle.run_session(config, action, transport=transport)

    monkeypatch.setattr("webdriver_client.cli.build_driver", fake_build_driver)
    monkeypatch.setattr("webdriver_client.cli.run_session", fake_run_session)


def test_status_command(monkeypatch) -> None:
    server = FakeWebDriverServer()
    server.on("GET", "/wd/hub/status", json=ok({"build": {"version": "2.53"}}, session_id=None))
    _patch_transport(monkeypatch, server)

    result = CliRunner().invoke(app, ["status", "--host", "grid.local", "--port", "5555"])

    assert result.exit_code == 0, result.output
    assert '"version": "2.53"' in result.output
    assert str(server.requests[0].url) == "http://grid.local:5555/wd/hub/status"


def test_status_command_reports_failures(monkeypatch) -> None:
    server = FakeWebDriverServer()
    server.on("GET", "/wd/hub/status", status=500, text="down")
    _patch_transport(monkeypatch, server)

    result = CliRunner().invoke(app, ["status"])

    assert result.exit_code == 1
    assert "Status request failed" in result.output


def test_probe_creates_and_closes_session(monkeypatch) -> None:
    server = FakeWebDriverServer()
    server.on("POST", "/wd/hub/session", json=ok(CHROME_CAPS))
    server.on("GET", "/wd/hub/session/abc123", json=ok(CHROME_CAPS))
    server.on("DELETE", "/wd/hub/session/abc123", json=ok())
    _patch_transport(monkeypatch, server)

    result = CliRunner().invoke(app, ["probe", "--browser", "chrome", "--history"])

    assert result.exit_code == 0, result.output
    assert "Session abc123" in result.output
    assert '"browserName": "chrome"' in result.output
    assert "Session history" in result.output
    assert server.calls == [
        ("POST", "/wd/hub/session"),
        ("GET", "/wd/hub/session/abc123"),
        ("DELETE", "/wd/hub/session/abc123"),
    ]


def test_probe_closes_session_when_capabilities_fail(monkeypatch) -> None:
    server = FakeWebDriverServer()
    server.on("POST", "/wd/hub/session", json=ok(CHROME_CAPS))
    server.on("GET", "/wd/hub/session/abc123", json={"sessionId": "abc123", "status": 13, "value": {}})
    server.on("DELETE", "/wd/hub/session/abc123", json=ok())
    _patch_transport(monkeypatch, server)

    result = CliRunner().invoke(app, ["probe"])

    assert result.exit_code == 1
    assert "Probe failed" in result.output
    assert server.calls[-1] == ("DELETE", "/wd/hub/session/abc123")


def test_probe_rejects_unknown_browser(monkeypatch) -> None:
    server = FakeWebDriverServer()
    _patch_transport(monkeypatch, server)

    result = CliRunner().invoke(app, ["probe", "--browser", "safari"])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert "safari" in result.output
    assert server.requests == []
