"""WebDriver commands built on :meth:`WebDriver.do_command`."""

from __future__ import annotations

import base64
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Optional
from urllib.parse import quote

from .capabilities import Capabilities
from .driver.base import WebDriver
from .errors import BadJSON, SessionAlreadyActive, WireDecodeError
from .models import (
    CURRENT_WINDOW,
    Cookie,
    Element,
    FocusSelector,
    JSArg,
    MouseButton,
    OnWindow,
    Orientation,
    Selector,
    WindowHandle,
    focus_target,
)

LOGGER = logging.getLogger(__name__)


def server_status(wd: WebDriver) -> Any:
    """Return the server's status object. Does not need a session."""

    return wd.do_command("GET", "/status")


def create_session(
    wd: WebDriver,
    capabilities: Optional[Capabilities] = None,
    *,
    headers: Optional[Mapping[str, str]] = None,
) -> Capabilities:
    """Create a session with the desired capabilities and return the granted ones."""

    session = wd.session
    if session.session_id is not None:
        raise SessionAlreadyActive(
            f"Session {session.session_id} is still active; close it before creating another"
        )
    desired = capabilities or Capabilities()
    granted = wd.do_command(
        "POST",
        "/session",
        {"desiredCapabilities": desired.to_wire()},
        headers=headers,
        decode=_optional_capabilities,
    )
    if session.session_id is None:
        raise BadJSON("Session creation response did not include a session id")
    LOGGER.info("Created session %s", session.session_id)
    if granted is None:
        granted = get_capabilities(wd)
    return granted


def close_session(wd: WebDriver) -> None:
    """Delete the current session on the server and clear its id locally."""

    session_id = wd.session.session_id
    wd.do_session_command("DELETE", "")
    wd.session.clear_id()
    LOGGER.info("Closed session %s", session_id)


def get_capabilities(wd: WebDriver) -> Capabilities:
    """Capabilities actually granted to the current session."""

    return wd.do_session_command("GET", "", decode=Capabilities.from_wire)


def open_page(wd: WebDriver, url: str) -> None:
    wd.do_session_command("POST", "/url", {"url": url})


def get_current_url(wd: WebDriver) -> str:
    return wd.do_session_command("GET", "/url", decode=_string)


def find_element(wd: WebDriver, selector: Selector) -> Element:
    return wd.do_session_command("POST", "/element", selector, decode=Element.from_wire)


def find_elements(wd: WebDriver, selector: Selector) -> list[Element]:
    return wd.do_session_command("POST", "/elements", selector, decode=_list_of(Element.from_wire))


def click(wd: WebDriver, element: Element) -> None:
    wd.do_session_command("POST", f"/element/{_segment(element.id)}/click")


def get_text(wd: WebDriver, element: Element) -> str:
    return wd.do_session_command("GET", f"/element/{_segment(element.id)}/text", decode=_string)


def execute_js(wd: WebDriver, args: Sequence[JSArg], script: str) -> Any:
    """Run ``script`` synchronously with ``args`` available as ``arguments``."""

    return wd.do_session_command(
        "POST", "/execute", {"script": script, "args": [arg.to_wire() for arg in args]}
    )


def get_cookies(wd: WebDriver) -> list[Cookie]:
    return wd.do_session_command("GET", "/cookie", decode=_list_of(Cookie.from_wire))


def set_cookie(wd: WebDriver, cookie: Cookie) -> None:
    wd.do_session_command("POST", "/cookie", {"cookie": cookie})


def delete_cookie(wd: WebDriver, name: str) -> None:
    wd.do_session_command("DELETE", f"/cookie/{_segment(name)}")


def focus(wd: WebDriver, selector: FocusSelector) -> None:
    """Switch focus to a window or frame."""

    if isinstance(selector, OnWindow):
        wd.do_session_command("POST", "/window", {"name": focus_target(selector)})
    else:
        wd.do_session_command("POST", "/frame", {"id": focus_target(selector)})


def get_current_window(wd: WebDriver) -> WindowHandle:
    return wd.do_session_command("GET", "/window_handle", decode=WindowHandle.from_wire)


def close_window(wd: WebDriver, handle: WindowHandle = CURRENT_WINDOW) -> None:
    """Close ``handle``, which defaults to the currently focused window."""

    if handle != CURRENT_WINDOW:
        focus(wd, OnWindow(handle))
    wd.do_session_command("DELETE", "/window")


def get_orientation(wd: WebDriver) -> Orientation:
    return wd.do_session_command("GET", "/orientation", decode=Orientation.from_wire)


def set_orientation(wd: WebDriver, orientation: Orientation) -> None:
    wd.do_session_command("POST", "/orientation", {"orientation": orientation})


def click_with(wd: WebDriver, button: MouseButton = MouseButton.LEFT) -> None:
    """Click at the current mouse position."""

    wd.do_session_command("POST", "/click", {"button": button})


def screenshot(wd: WebDriver) -> bytes:
    """PNG screenshot of the current page."""

    return wd.do_session_command("GET", "/screenshot", decode=_base64)


def _optional_capabilities(value: Any) -> Optional[Capabilities]:
    return None if value is None else Capabilities.from_wire(value)


def _string(value: Any) -> str:
    if not isinstance(value, str):
        raise WireDecodeError(f"Expected a string, got {value!r}")
    return value


def _base64(value: Any) -> bytes:
    return base64.b64decode(_string(value), validate=True)


def _list_of(decode):
    def _decode(value: Any) -> list:
        if not isinstance(value, list):
            raise WireDecodeError(f"Expected a list, got {value!r}")
        return [decode(item) for item in value]

    return _decode


def _segment(value: str) -> str:
    return quote(value, safe="")
