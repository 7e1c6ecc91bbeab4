"""Factories for constructing components from configuration."""

from __future__ import annotations

from typing import Optional

import httpx

from .config import WebDriverConfig
from .driver.httpx_driver import HttpxWebDriver
from .session import WDSession


def build_session(config: WebDriverConfig) -> WDSession:
    return WDSession(
        host=config.host,
        port=config.port,
        base_path=config.base_path,
        history_limit=config.history_limit,
    )


def build_driver(
    config: WebDriverConfig,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> HttpxWebDriver:
    return HttpxWebDriver(
        build_session(config),
        headers=config.request_headers,
        timeout=config.timeout,
        transport=transport,
    )
