"""Wire value types shared by WebDriver commands."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from pydantic import BaseModel, ConfigDict

from .errors import WireDecodeError

SessionId = str

ELEMENT_KEY = "ELEMENT"


@dataclass(frozen=True)
class WindowHandle:
    """Opaque identifier for a browser window."""

    handle: str

    def to_wire(self) -> str:
        return self.handle

    @classmethod
    def from_wire(cls, data: Any) -> "WindowHandle":
        if not isinstance(data, str):
            raise WireDecodeError(f"Expected a window handle string, got {data!r}")
        return cls(data)


# Always refers to the currently focused window; never issued by a server.
CURRENT_WINDOW = WindowHandle("current")


@dataclass(frozen=True)
class Element:
    """Opaque identifier for a page element."""

    id: str

    def to_wire(self) -> dict[str, str]:
        return {ELEMENT_KEY: self.id}

    @classmethod
    def from_wire(cls, data: Any) -> "Element":
        if not isinstance(data, Mapping) or not isinstance(data.get(ELEMENT_KEY), str):
            raise WireDecodeError(f"Expected an element reference, got {data!r}")
        return cls(data[ELEMENT_KEY])


class WireEnum(str, enum.Enum):
    """Closed token set encoded as an upper-case string."""

    def to_wire(self) -> str:
        return self.value

    @classmethod
    def from_wire(cls, data: Any):
        if isinstance(data, str):
            for member in cls:
                if member.value == data.upper():
                    return member
        raise WireDecodeError(f"Invalid {cls.__name__} string {data!r}")


class Orientation(WireEnum):
    """Screen orientation."""

    LANDSCAPE = "LANDSCAPE"
    PORTRAIT = "PORTRAIT"


class MouseButton(WireEnum):
    """Mouse button used by mouse commands."""

    LEFT = "LEFT"
    MIDDLE = "MIDDLE"
    RIGHT = "RIGHT"


class SelectorStrategy(str, enum.Enum):
    """Locator strategies understood by the server."""

    ID = "id"
    NAME = "name"
    CLASS_NAME = "class name"
    TAG_NAME = "tag name"
    LINK_TEXT = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    CSS = "css selector"
    XPATH = "xpath"


class Selector(BaseModel):
    """Locates elements within a document.

    ``SelectorStrategy.CLASS_NAME`` accepts a single class only; use a CSS
    selector to match several.
    """

    model_config = ConfigDict(frozen=True)

    using: SelectorStrategy
    value: str

    @classmethod
    def by_id(cls, value: str) -> "Selector":
        return cls(using=SelectorStrategy.ID, value=value)

    @classmethod
    def by_name(cls, value: str) -> "Selector":
        return cls(using=SelectorStrategy.NAME, value=value)

    @classmethod
    def by_class(cls, value: str) -> "Selector":
        return cls(using=SelectorStrategy.CLASS_NAME, value=value)

    @classmethod
    def by_tag(cls, value: str) -> "Selector":
        return cls(using=SelectorStrategy.TAG_NAME, value=value)

    @classmethod
    def by_link_text(cls, value: str) -> "Selector":
        return cls(using=SelectorStrategy.LINK_TEXT, value=value)

    @classmethod
    def by_partial_link_text(cls, value: str) -> "Selector":
        return cls(using=SelectorStrategy.PARTIAL_LINK_TEXT, value=value)

    @classmethod
    def by_css(cls, value: str) -> "Selector":
        return cls(using=SelectorStrategy.CSS, value=value)

    @classmethod
    def by_xpath(cls, value: str) -> "Selector":
        return cls(using=SelectorStrategy.XPATH, value=value)

    def to_wire(self) -> dict[str, str]:
        return {"using": self.using.value, "value": self.value}

    @classmethod
    def from_wire(cls, data: Any) -> "Selector":
        if not isinstance(data, Mapping):
            raise WireDecodeError(f"Expected a selector object, got {data!r}")
        try:
            strategy = SelectorStrategy(data.get("using"))
        except ValueError as exc:
            raise WireDecodeError(f"Invalid selector strategy {data.get('using')!r}") from exc
        if not isinstance(data.get("value"), str):
            raise WireDecodeError("Selector value must be a string")
        return cls(using=strategy, value=data["value"])


class Cookie(BaseModel):
    """An HTTP cookie. Absent optional fields let the server pick defaults."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    path: Optional[str] = None
    domain: Optional[str] = None
    secure: Optional[bool] = None
    expiry: Optional[int] = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_wire(cls, data: Any) -> "Cookie":
        if not isinstance(data, Mapping):
            raise WireDecodeError(f"Expected a cookie object, got {data!r}")
        for key in ("name", "value"):
            if not isinstance(data.get(key), str):
                raise WireDecodeError(f"Cookie field {key!r} is required")
        return cls.model_validate({key: data.get(key) for key in cls.model_fields})


def make_cookie(name: str, value: str) -> Cookie:
    """Create a cookie with only a name and value set."""

    return Cookie(name=name, value=value)


@dataclass(frozen=True)
class OnWindow:
    handle: WindowHandle


@dataclass(frozen=True)
class OnFrameIndex:
    index: int


@dataclass(frozen=True)
class OnFrameName:
    name: str


@dataclass(frozen=True)
class OnFrameElement:
    element: Element


@dataclass(frozen=True)
class DefaultFrame:
    """The top-level document."""


FocusSelector = Union[OnWindow, OnFrameIndex, OnFrameName, OnFrameElement, DefaultFrame]


def focus_target(selector: FocusSelector) -> Any:
    """Return the wire value identifying the window or frame to focus."""

    if isinstance(selector, OnWindow):
        return selector.handle.to_wire()
    if isinstance(selector, OnFrameIndex):
        return selector.index
    if isinstance(selector, OnFrameName):
        return selector.name
    if isinstance(selector, OnFrameElement):
        return selector.element.to_wire()
    if isinstance(selector, DefaultFrame):
        return None
    raise TypeError(f"Unsupported focus selector: {selector!r}")


class JSArg:
    """A script argument carrying its own serialization.

    Either wrap a value that :func:`to_json` understands, or pass ``encoder``
    to control how that one argument is written to the wire.
    """

    __slots__ = ("value", "_encoder")

    def __init__(self, value: Any, encoder: Optional[Callable[[Any], Any]] = None) -> None:
        self.value = value
        self._encoder = encoder

    def to_wire(self) -> Any:
        if self._encoder is not None:
            return self._encoder(self.value)
        return to_json(self.value)

    def __repr__(self) -> str:
        return f"JSArg({self.value!r})"


def to_json(value: Any) -> Any:
    """Convert ``value`` into plain JSON-compatible data."""

    if isinstance(value, enum.Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    to_wire = getattr(value, "to_wire", None)
    if callable(to_wire):
        return to_wire()
    if isinstance(value, Mapping):
        return {str(key): to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    raise TypeError(f"Value of type {type(value).__name__} is not JSON serializable")
