"""Capability negotiation models and their wire encoding."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import WireDecodeError
from .models import WireEnum


class Platform(WireEnum):
    """Platform a browser should run (or runs) on. ``ANY`` means no preference."""

    WINDOWS = "WINDOWS"
    XP = "XP"
    VISTA = "VISTA"
    MAC = "MAC"
    LINUX = "LINUX"
    UNIX = "UNIX"
    ANY = "ANY"


class FirefoxLogLevel(WireEnum):
    """Firefox driver log level."""

    OFF = "OFF"
    SEVERE = "SEVERE"
    WARNING = "WARNING"
    INFO = "INFO"
    CONFIG = "CONFIG"
    FINE = "FINE"
    FINER = "FINER"
    FINEST = "FINEST"
    ALL = "ALL"


class _BrowserBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    def capability_fields(self) -> dict[str, Any]:
        """Browser-specific keys merged into the capabilities object."""

        return {}

    @classmethod
    def from_capabilities(cls, data: Mapping[str, Any]):
        return cls()


class Firefox(_BrowserBase):
    """Firefox with an optional prepared profile, log level and binary path.

    ``profile`` is an already prepared (zipped and base64 encoded) profile.
    """

    browser_name: Literal["firefox"] = "firefox"
    profile: Optional[str] = None
    log_level: Optional[FirefoxLogLevel] = None
    binary: Optional[str] = None

    def capability_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {}
        if self.profile is not None:
            fields["firefox_profile"] = self.profile
        if self.log_level is not None:
            fields["loggingPrefs"] = self.log_level.to_wire()
        if self.binary is not None:
            fields["firefox_binary"] = self.binary
        return fields

    @classmethod
    def from_capabilities(cls, data: Mapping[str, Any]) -> "Firefox":
        log_level = data.get("loggingPrefs")
        return cls(
            profile=_optional_str(data, "firefox_profile"),
            log_level=FirefoxLogLevel.from_wire(log_level) if log_level is not None else None,
            binary=_optional_str(data, "firefox_binary"),
        )


class Chrome(_BrowserBase):
    """Chrome with driver version, binary path, switches and packed extensions."""

    browser_name: Literal["chrome"] = "chrome"
    driver_version: Optional[str] = None
    binary: Optional[str] = None
    options: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()

    def capability_fields(self) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "chrome.switches": list(self.options),
            "chrome.extensions": list(self.extensions),
        }
        if self.driver_version is not None:
            fields["chrome.chromedriverVersion"] = self.driver_version
        if self.binary is not None:
            fields["chrome.binary"] = self.binary
        return fields

    @classmethod
    def from_capabilities(cls, data: Mapping[str, Any]) -> "Chrome":
        return cls(
            driver_version=_optional_str(data, "chrome.chromedriverVersion"),
            binary=_optional_str(data, "chrome.binary"),
            options=_str_list(data, "chrome.switches"),
            extensions=_str_list(data, "chrome.extensions"),
        )


class IE(_BrowserBase):
    browser_name: Literal["internet explorer"] = "internet explorer"
    ignore_protected_mode_settings: bool = True

    def capability_fields(self) -> dict[str, Any]:
        return {"IgnoreProtectedModeSettings": self.ignore_protected_mode_settings}

    @classmethod
    def from_capabilities(cls, data: Mapping[str, Any]) -> "IE":
        value = data.get("IgnoreProtectedModeSettings", True)
        if not isinstance(value, bool):
            raise WireDecodeError("IgnoreProtectedModeSettings must be a boolean")
        return cls(ignore_protected_mode_settings=value)


class Opera(_BrowserBase):
    browser_name: Literal["opera"] = "opera"


class HTMLUnit(_BrowserBase):
    browser_name: Literal["htmlunit"] = "htmlunit"


class IPhone(_BrowserBase):
    browser_name: Literal["iphone"] = "iphone"


class IPad(_BrowserBase):
    browser_name: Literal["ipad"] = "ipad"


class Android(_BrowserBase):
    browser_name: Literal["android"] = "android"


Browser = Annotated[
    Union[Firefox, Chrome, IE, Opera, HTMLUnit, IPhone, IPad, Android],
    Field(discriminator="browser_name"),
]

_BROWSERS: dict[str, type[_BrowserBase]] = {
    cls.model_fields["browser_name"].default: cls
    for cls in (Firefox, Chrome, IE, Opera, HTMLUnit, IPhone, IPad, Android)
}


def browser_from_wire(data: Mapping[str, Any]) -> Browser:
    """Decode the browser named by ``browserName`` plus its specific keys."""

    name = data.get("browserName")
    if not isinstance(name, str) or name.lower() not in _BROWSERS:
        raise WireDecodeError(f"Invalid Browser string {name!r}")
    return _BROWSERS[name.lower()].from_capabilities(data)


class _ProxyBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> dict[str, str]:
        return {"proxyType": self.proxy_type}


class NoProxy(_ProxyBase):
    proxy_type: Literal["DIRECT"] = "DIRECT"


class UseSystemSettings(_ProxyBase):
    proxy_type: Literal["SYSTEM"] = "SYSTEM"


class AutoDetect(_ProxyBase):
    proxy_type: Literal["AUTODETECT"] = "AUTODETECT"


class PAC(_ProxyBase):
    """Proxy auto-config file at ``auto_config_url``."""

    proxy_type: Literal["PAC"] = "PAC"
    auto_config_url: str

    def to_wire(self) -> dict[str, str]:
        return {"proxyType": self.proxy_type, "autoConfigUrl": self.auto_config_url}


class Manual(_ProxyBase):
    """Manually configured ``host:port`` proxies. Empty strings are undefined."""

    proxy_type: Literal["MANUAL"] = "MANUAL"
    ftp_proxy: str
    ssl_proxy: str
    http_proxy: str

    def to_wire(self) -> dict[str, str]:
        return {
            "proxyType": self.proxy_type,
            "ftpProxy": self.ftp_proxy,
            "sslProxy": self.ssl_proxy,
            "httpProxy": self.http_proxy,
        }


ProxyType = Annotated[
    Union[NoProxy, UseSystemSettings, AutoDetect, PAC, Manual],
    Field(discriminator="proxy_type"),
]


def proxy_from_wire(data: Any) -> ProxyType:
    if not isinstance(data, Mapping):
        raise WireDecodeError(f"Expected a proxy object, got {data!r}")
    kind = data.get("proxyType")
    kind = kind.upper() if isinstance(kind, str) else kind
    if kind == "DIRECT":
        return NoProxy()
    if kind == "SYSTEM":
        return UseSystemSettings()
    if kind == "AUTODETECT":
        return AutoDetect()
    if kind == "PAC":
        return PAC(auto_config_url=_required_str(data, "autoConfigUrl"))
    if kind == "MANUAL":
        return Manual(
            ftp_proxy=_required_str(data, "ftpProxy"),
            ssl_proxy=_required_str(data, "sslProxy"),
            http_proxy=_required_str(data, "httpProxy"),
        )
    raise WireDecodeError(f"Invalid ProxyType {data.get('proxyType')!r}")


# Attribute name -> wire key for the optional feature flags.
FLAG_KEYS: tuple[tuple[str, str], ...] = (
    ("javascript_enabled", "javascriptEnabled"),
    ("takes_screenshot", "takesScreenshot"),
    ("handles_alerts", "handlesAlerts"),
    ("database_enabled", "databaseEnabled"),
    ("location_context_enabled", "locationContextEnabled"),
    ("application_cache_enabled", "applicationCacheEnabled"),
    ("browser_connection_enabled", "browserConnectionEnabled"),
    ("css_selectors_enabled", "cssSelectorsEnabled"),
    ("web_storage_enabled", "webStorageEnabled"),
    ("rotatable", "rotatable"),
    ("accept_ssl_certs", "acceptSslCerts"),
    ("native_events", "nativeEvents"),
)


class Capabilities(BaseModel):
    """Browser configuration exchanged at session creation.

    The same shape travels both ways. Sent to the server it describes the
    *desired* configuration, and ``None`` means "no preference". Returned by
    the server it describes the *actual* configuration, and ``None`` means the
    capability is unsupported; for flags, ``None`` and ``False`` then both mean
    unsupported.
    """

    model_config = ConfigDict(frozen=True)

    browser: Browser = Field(default_factory=Firefox)
    version: Optional[str] = None
    platform: Platform = Platform.ANY
    proxy: ProxyType = Field(default_factory=UseSystemSettings)
    javascript_enabled: Optional[bool] = None
    takes_screenshot: Optional[bool] = None
    handles_alerts: Optional[bool] = None
    database_enabled: Optional[bool] = None
    location_context_enabled: Optional[bool] = None
    application_cache_enabled: Optional[bool] = None
    browser_connection_enabled: Optional[bool] = None
    css_selectors_enabled: Optional[bool] = None
    web_storage_enabled: Optional[bool] = None
    rotatable: Optional[bool] = None
    accept_ssl_certs: Optional[bool] = None
    native_events: Optional[bool] = None

    FLAGS: ClassVar[tuple[str, ...]] = tuple(attr for attr, _ in FLAG_KEYS)

    @classmethod
    def all_enabled(cls, **overrides: Any) -> "Capabilities":
        """Default capabilities with every feature flag requested."""

        return cls(**{**{flag: True for flag in cls.FLAGS}, **overrides})

    def to_wire(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "browserName": self.browser.browser_name,
            "platform": self.platform.to_wire(),
            "proxy": self.proxy.to_wire(),
        }
        if self.version is not None:
            payload["version"] = self.version
        for attr, key in FLAG_KEYS:
            value = getattr(self, attr)
            if value is not None:
                payload[key] = value
        payload.update(self.browser.capability_fields())
        return payload

    @classmethod
    def from_wire(cls, data: Any) -> "Capabilities":
        """Decode capabilities; ``browserName`` and ``platform`` are required."""

        if not isinstance(data, Mapping):
            raise WireDecodeError(f"Expected a capabilities object, got {data!r}")
        if "platform" not in data:
            raise WireDecodeError("Capabilities are missing 'platform'")
        flags: dict[str, Optional[bool]] = {}
        for attr, key in FLAG_KEYS:
            value = data.get(key)
            if value is not None and not isinstance(value, bool):
                raise WireDecodeError(f"Capability {key!r} must be a boolean")
            flags[attr] = value
        proxy = data.get("proxy")
        return cls(
            browser=browser_from_wire(data),
            version=_optional_str(data, "version"),
            platform=Platform.from_wire(data["platform"]),
            proxy=proxy_from_wire(proxy) if proxy is not None else NoProxy(),
            **flags,
        )


def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise WireDecodeError(f"Capability {key!r} must be a string")
    return value


def _required_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise WireDecodeError(f"Field {key!r} is required")
    return value


def _str_list(data: Mapping[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key) or []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise WireDecodeError(f"Capability {key!r} must be a list of strings")
    return tuple(value)
