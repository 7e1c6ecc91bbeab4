"""Exception taxonomy for WebDriver commands."""

from __future__ import annotations

import base64
import binascii
import enum
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .session import WDSession


class WireDecodeError(ValueError):
    """Raised when a wire value cannot be decoded into the expected type."""


class WebDriverError(Exception):
    """Base class for every failure raised by the client."""


class InvalidURL(WebDriverError):
    """The server address could not be turned into a valid URL."""


class NoSessionId(WebDriverError):
    """A session-scoped command was attempted without an active session."""


class SessionAlreadyActive(WebDriverError):
    """Session creation was attempted on a record that still carries an id.

    The counterpart of :class:`NoSessionId`: a record holds at most one
    server-side session, and its id has to be cleared by closing it before
    another one is created. Raised before any request is sent.
    """


class BadJSON(WebDriverError):
    """A response body could not be decoded into the expected shape."""


class HTTPStatusUnknown(WebDriverError):
    """The server answered with a status outside the protocol's known set."""

    def __init__(self, status: tuple[int, int, int], body: str) -> None:
        super().__init__(f"Unexpected HTTP status {''.join(map(str, status))}: {body}")
        self.status = status
        self.body = body


class HTTPConnError(WebDriverError):
    """No HTTP exchange could be completed with the server."""


class UnknownCommand(WebDriverError):
    """The server did not recognise the requested path or method."""


class ServerError(WebDriverError):
    """A server-side fault that does not carry a structured error body."""


class FailedCommandType(str, enum.Enum):
    """Kind of command failure reported by the server."""

    NO_SUCH_ELEMENT = "no such element"
    NO_SUCH_FRAME = "no such frame"
    UNKNOWN_FRAME = "unknown frame"
    STALE_ELEMENT_REFERENCE = "stale element reference"
    ELEMENT_NOT_VISIBLE = "element not visible"
    INVALID_ELEMENT_STATE = "invalid element state"
    UNKNOWN_ERROR = "unknown error"
    ELEMENT_IS_NOT_SELECTABLE = "element not selectable"
    JAVASCRIPT_ERROR = "javascript error"
    XPATH_LOOKUP_ERROR = "xpath lookup error"
    TIMEOUT = "timeout"
    NO_SUCH_WINDOW = "no such window"
    INVALID_COOKIE_DOMAIN = "invalid cookie domain"
    UNABLE_TO_SET_COOKIE = "unable to set cookie"
    UNEXPECTED_ALERT_OPEN = "unexpected alert open"
    NO_ALERT_OPEN = "no such alert"
    SCRIPT_TIMEOUT = "script timeout"
    INVALID_ELEMENT_COORDINATES = "invalid element coordinates"
    IME_NOT_AVAILABLE = "ime not available"
    IME_ENGINE_ACTIVATION_FAILED = "ime engine activation failed"
    INVALID_SELECTOR = "invalid selector"
    MOVE_TARGET_OUT_OF_BOUNDS = "move target out of bounds"
    INVALID_XPATH_SELECTOR = "invalid xpath selector"
    INVALID_XPATH_SELECTOR_RETURN_TYPE = "invalid xpath selector return type"
    METHOD_NOT_ALLOWED = "method not allowed"

    @classmethod
    def from_code(cls, code: Union[int, str]) -> "FailedCommandType":
        """Map a numeric or string server error code, falling back to UNKNOWN_ERROR."""

        if isinstance(code, bool):
            return cls.UNKNOWN_ERROR
        if isinstance(code, int):
            return _NUMERIC_CODES.get(code, cls.UNKNOWN_ERROR)
        normalized = str(code).strip().lower()
        if normalized in _STRING_ALIASES:
            return _STRING_ALIASES[normalized]
        try:
            return cls(normalized)
        except ValueError:
            return cls.UNKNOWN_ERROR


_NUMERIC_CODES: dict[int, FailedCommandType] = {
    7: FailedCommandType.NO_SUCH_ELEMENT,
    8: FailedCommandType.NO_SUCH_FRAME,
    10: FailedCommandType.STALE_ELEMENT_REFERENCE,
    11: FailedCommandType.ELEMENT_NOT_VISIBLE,
    12: FailedCommandType.INVALID_ELEMENT_STATE,
    13: FailedCommandType.UNKNOWN_ERROR,
    15: FailedCommandType.ELEMENT_IS_NOT_SELECTABLE,
    17: FailedCommandType.JAVASCRIPT_ERROR,
    19: FailedCommandType.XPATH_LOOKUP_ERROR,
    21: FailedCommandType.TIMEOUT,
    23: FailedCommandType.NO_SUCH_WINDOW,
    24: FailedCommandType.INVALID_COOKIE_DOMAIN,
    25: FailedCommandType.UNABLE_TO_SET_COOKIE,
    26: FailedCommandType.UNEXPECTED_ALERT_OPEN,
    27: FailedCommandType.NO_ALERT_OPEN,
    28: FailedCommandType.SCRIPT_TIMEOUT,
    29: FailedCommandType.INVALID_ELEMENT_COORDINATES,
    30: FailedCommandType.IME_NOT_AVAILABLE,
    31: FailedCommandType.IME_ENGINE_ACTIVATION_FAILED,
    32: FailedCommandType.INVALID_SELECTOR,
    34: FailedCommandType.MOVE_TARGET_OUT_OF_BOUNDS,
    51: FailedCommandType.INVALID_XPATH_SELECTOR,
    52: FailedCommandType.INVALID_XPATH_SELECTOR_RETURN_TYPE,
    405: FailedCommandType.METHOD_NOT_ALLOWED,
}

# Codes used by newer servers for the same failures.
_STRING_ALIASES: dict[str, FailedCommandType] = {
    "element not interactable": FailedCommandType.ELEMENT_NOT_VISIBLE,
    "no alert open": FailedCommandType.NO_ALERT_OPEN,
    "unknown method": FailedCommandType.METHOD_NOT_ALLOWED,
}

# Server codes that denote an unrecognised command rather than a failed one.
UNKNOWN_COMMAND_CODES: frozenset[Union[int, str]] = frozenset({9, "unknown command"})


class StackFrame(BaseModel):
    """One frame of the server-side stack trace attached to a failure."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    class_name: str
    method_name: str
    line_number: int = Field(ge=0)

    @classmethod
    def from_wire(cls, data: Any) -> "StackFrame":
        if not isinstance(data, Mapping):
            raise WireDecodeError(f"Expected a stack frame object, got {data!r}")
        try:
            line = data["lineNumber"]
            strings = {
                attr: data[key] or ""
                for attr, key in (
                    ("file_name", "fileName"),
                    ("class_name", "className"),
                    ("method_name", "methodName"),
                )
            }
        except KeyError as exc:
            raise WireDecodeError(f"Stack frame is missing {exc.args[0]!r}") from exc
        if isinstance(line, bool) or not isinstance(line, int) or line < 0:
            raise WireDecodeError(f"Invalid stack frame line number {line!r}")
        return cls(line_number=line, **strings)


class FailedCommandInfo(BaseModel):
    """Details of a failed command, as reported by the server.

    ``session_id`` always holds the id of the session that issued the command.
    ``server_session_id`` keeps whatever id the server itself reported, which
    may differ from ``session_id`` or be absent.
    """

    model_config = ConfigDict(frozen=True)

    message: str = ""
    session_id: Optional[str] = None
    server_session_id: Optional[str] = None
    screenshot: Optional[bytes] = Field(default=None, repr=False)
    error_class: Optional[str] = None
    stack_trace: tuple[StackFrame, ...] = ()

    @classmethod
    def from_message(cls, message: str, session_id: Optional[str] = None) -> "FailedCommandInfo":
        """Info with only a message, as built for failures raised locally."""

        return cls(message=message, session_id=session_id)

    @classmethod
    def from_wire(cls, data: Any) -> "FailedCommandInfo":
        """Decode an error body ``{message, screen?, class?, stackTrace?}``."""

        if not isinstance(data, Mapping):
            return cls(message="" if data is None else str(data))
        screenshot = None
        if data.get("screen") is not None:
            try:
                screenshot = base64.b64decode(data["screen"], validate=True)
            except (binascii.Error, TypeError) as exc:
                raise WireDecodeError("Error screenshot is not valid base64") from exc
        frames = data.get("stackTrace") or []
        if not isinstance(frames, list):
            raise WireDecodeError(f"Expected a stack trace list, got {frames!r}")
        return cls(
            message=data.get("message") or "",
            screenshot=screenshot,
            error_class=data.get("class"),
            stack_trace=tuple(StackFrame.from_wire(frame) for frame in frames),
        )


class FailedCommand(WebDriverError):
    """A command failed on the server with a structured error."""

    def __init__(self, type: FailedCommandType, info: FailedCommandInfo) -> None:
        super().__init__(f"{type.value}: {info.message}" if info.message else type.value)
        self.type = type
        self.info = info

    def __repr__(self) -> str:
        return f"FailedCommand(type={self.type!r}, info={self.info!r})"


def failed_command(session: "WDSession", type: FailedCommandType, message: str) -> FailedCommand:
    """Build a locally raised :class:`FailedCommand` tagged with the session id."""

    return FailedCommand(type, FailedCommandInfo.from_message(message, session.session_id))
