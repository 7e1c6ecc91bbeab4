"""Request building and response decoding for WebDriver commands."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional, TypeVar

import httpx

from ..errors import BadJSON, InvalidURL, NoSessionId, ServerError
from ..models import to_json
from ..session import WDSession
from .classifier import WireResult, classify_response

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

SESSION_PLACEHOLDER = "{session_id}"
SESSION_PREFIX = "/session/" + SESSION_PLACEHOLDER

_BODYLESS_METHODS = frozenset({"GET", "DELETE", "HEAD"})


def server_url(session: WDSession) -> httpx.URL:
    """Base URL of the server described by ``session``."""

    if not session.host:
        raise InvalidURL("Server host must not be empty")
    if isinstance(session.port, bool) or not isinstance(session.port, int) or not 0 < session.port < 65536:
        raise InvalidURL(f"Invalid server port {session.port!r}")
    base_path = "/" + session.base_path.strip("/") if session.base_path.strip("/") else ""
    try:
        return httpx.URL(f"http://{session.host}:{session.port}{base_path}")
    except httpx.InvalidURL as exc:
        raise InvalidURL(str(exc)) from exc


def expand_path(session: WDSession, template: str) -> str:
    """Substitute the session id into ``template``.

    Raises :class:`NoSessionId` when the template needs an id and the session has none.
    """

    if SESSION_PLACEHOLDER not in template:
        return template
    if session.session_id is None:
        raise NoSessionId(f"No session id available for command {template!r}")
    return template.replace(SESSION_PLACEHOLDER, session.session_id)


def encode_args(args: Any) -> Optional[bytes]:
    """Serialize a command argument value; ``None`` means no arguments."""

    if args is None:
        return None
    return json.dumps(to_json(args)).encode("utf-8")


def build_request(
    session: WDSession,
    method: str,
    path: str,
    args: Any = None,
    *,
    headers: Optional[Mapping[str, str]] = None,
) -> httpx.Request:
    """Build the wire request for one command against ``session``."""

    method = method.upper()
    url = server_url(session)
    full_path = url.path.rstrip("/") + expand_path(session, path)
    try:
        target = url.copy_with(path=full_path)
    except httpx.InvalidURL as exc:
        raise InvalidURL(str(exc)) from exc
    request_headers = {"Accept": "application/json;charset=UTF-8"}
    body = encode_args(args)
    if body is None and method not in _BODYLESS_METHODS:
        body = b"{}"
    if body is not None:
        request_headers["Content-Type"] = "application/json;charset=UTF-8"
    request_headers.update(headers or {})
    return httpx.Request(method, target, headers=request_headers, content=body)


def decode_response(
    session: WDSession,
    request: httpx.Request,
    response: httpx.Response,
    decode: Optional[Callable[[Any], T]] = None,
) -> T:
    """Classify ``response`` and decode its payload with ``decode``.

    Any session id the server reported is adopted before the value is decoded,
    so a session created with an undecodable reply can still be closed. Once
    decoding succeeds the exchange is appended to the session history.
    """

    result = classify_response(session, response)
    _adopt_session_id(session, result)
    value = _decode_value(result, decode)
    session.record(request, response)
    return value


def _decode_value(result: WireResult, decode: Optional[Callable[[Any], T]]) -> Any:
    if decode is None:
        return result.value
    try:
        return decode(result.value)
    except (ValueError, TypeError, KeyError) as exc:
        raise BadJSON(f"Could not decode response value: {exc}") from exc


def _adopt_session_id(session: WDSession, result: WireResult) -> None:
    reported = result.session_id
    if not isinstance(reported, str):
        return
    if session.session_id is None:
        LOGGER.debug("Adopting session id %s", reported)
        session.assign_id(reported)
    elif session.session_id != reported:
        raise ServerError(
            f"Server response session id ({reported}) does not match "
            f"local session id ({session.session_id})"
        )
