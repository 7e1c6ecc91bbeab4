"""Classification of raw server responses into results or typed failures."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..errors import (
    UNKNOWN_COMMAND_CODES,
    BadJSON,
    FailedCommand,
    FailedCommandInfo,
    FailedCommandType,
    HTTPStatusUnknown,
    ServerError,
    UnknownCommand,
    WebDriverError,
)
from ..session import WDSession

LOGGER = logging.getLogger(__name__)


@dataclass
class WireResult:
    """Payload of a successful response, before decoding into a domain value."""

    value: Any = None
    session_id: Optional[str] = None


def classify_response(session: WDSession, response: httpx.Response) -> WireResult:
    """Return the payload of ``response`` or raise the failure it describes."""

    code = response.status_code
    if code in (302, 303):
        return WireResult(session_id=_session_id_from_location(response))
    if code == 204:
        return WireResult()
    if 200 <= code < 300:
        if not response.content.strip():
            return WireResult()
        body = _parse_json(response)
        if not isinstance(body, Mapping):
            raise BadJSON(f"Expected a JSON object in response, got {body!r}")
        error = _command_error(session, body)
        if error is not None:
            raise error
        return WireResult(value=body.get("value"), session_id=body.get("sessionId"))
    if 400 <= code < 500:
        raise UnknownCommand(_describe_rejection(response))
    if 500 <= code < 600:
        content_type = response.headers.get("content-type")
        if content_type is None:
            raise ServerError(f"Missing content type. Server response: {response.text}")
        if "application/json" not in content_type:
            raise ServerError(response.text)
        body = _parse_json(response)
        error = _command_error(session, body) if isinstance(body, Mapping) else None
        if error is None:
            raise ServerError(response.text)
        raise error
    raise HTTPStatusUnknown(status_triple(code), response.text)


def status_triple(code: int) -> tuple[int, int, int]:
    """Split a three digit HTTP status code into its digits."""

    return (code // 100, code // 10 % 10, code % 10)


def _parse_json(response: httpx.Response) -> Any:
    try:
        return json.loads(response.content)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise BadJSON(f"Could not parse response body: {exc}") from exc


def _command_error(session: WDSession, body: Mapping[str, Any]) -> Optional[WebDriverError]:
    """Build the failure described by a response body, or ``None`` if it reports success."""

    value = body.get("value")
    status = body.get("status")
    if isinstance(status, int) and not isinstance(status, bool):
        if status == 0:
            return None
        code: Any = status
    elif isinstance(value, Mapping) and isinstance(value.get("error"), str):
        code = value["error"]
    else:
        return None

    try:
        info = FailedCommandInfo.from_wire(value)
    except ValueError as exc:
        return BadJSON(f"Could not parse error body: {exc}")
    if code in UNKNOWN_COMMAND_CODES:
        return UnknownCommand(info.message)

    server_session_id = body.get("sessionId")
    info = info.model_copy(
        update={
            "session_id": session.session_id,
            "server_session_id": server_session_id if isinstance(server_session_id, str) else None,
        }
    )
    if info.server_session_id and info.server_session_id != info.session_id:
        LOGGER.debug(
            "Server reported session %s for a failure in session %s",
            info.server_session_id,
            info.session_id,
        )
    return FailedCommand(FailedCommandType.from_code(code), info)


def _session_id_from_location(response: httpx.Response) -> str:
    location = response.headers.get("location")
    if not location:
        raise ServerError("Missing Location header in response")
    segments = [segment for segment in httpx.URL(location).path.split("/") if segment]
    if not segments:
        raise ServerError(f"No session id in Location header {location!r}")
    return segments[-1]


def _describe_rejection(response: httpx.Response) -> str:
    request = response.request
    message = response.reason_phrase or str(response.status_code)
    try:
        body = json.loads(response.content)
    except ValueError:
        body = None
    if isinstance(body, Mapping):
        value = body.get("value")
        if isinstance(value, Mapping) and isinstance(value.get("message"), str):
            message = value["message"]
    return f"{request.method} {request.url.path}: {message}"
