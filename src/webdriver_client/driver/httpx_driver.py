"""httpx-backed command execution."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional, TypeVar

import httpx

from ..errors import HTTPConnError
from ..protocol.codec import build_request, decode_response
from ..session import WDSession, default_session
from .base import WebDriver

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class HttpxWebDriver(WebDriver):
    """Sends each command as a blocking HTTP request through an ``httpx.Client``."""

    def __init__(
        self,
        session: Optional[WDSession] = None,
        *,
        headers: Optional[Mapping[str, str]] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._session = session if session is not None else default_session()
        self._headers = dict(headers or {})
        self._client = httpx.Client(timeout=timeout, transport=transport, follow_redirects=False)

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
        decode: Optional[Callable[[Any], T]] = None,
    ) -> T:
        request = build_request(
            self._session,
            method,
            path,
            args,
            headers={**self._headers, **(headers or {})},
        )
        LOGGER.debug("Sending %s %s", request.method, request.url)
        try:
            response = self._client.send(request)
        except httpx.TransportError as exc:
            raise HTTPConnError(f"{request.method} {request.url}: {exc}") from exc
        LOGGER.debug("Received %s for %s %s", response.status_code, request.method, request.url.path)
        return decode_response(self._session, request, response, decode)

    def close(self) -> None:
        """Release the HTTP connection pool. The remote session is left untouched."""

        self._client.close()

    def __enter__(self) -> "HttpxWebDriver":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
