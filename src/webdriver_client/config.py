"""Configuration models for the WebDriver client."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .capabilities import Capabilities
from .session import DEFAULT_BASE_PATH, DEFAULT_HOST, DEFAULT_PORT


class WebDriverConfig(BaseSettings):
    """Server location, request defaults and desired capabilities."""

    model_config = SettingsConfigDict(
        env_prefix="WEBDRIVER_CLIENT_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    host: str = DEFAULT_HOST
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    base_path: str = DEFAULT_BASE_PATH
    timeout: float = Field(default=60.0, description="Seconds to wait for each HTTP round trip.")
    request_headers: dict[str, str] = Field(default_factory=dict)
    history_limit: Optional[int] = Field(
        default=None,
        ge=0,
        description="Maximum recorded commands; None keeps everything, 0 disables history.",
    )
    capabilities: dict[str, Any] = Field(
        default_factory=dict,
        description="Desired capabilities in wire form, e.g. {'browserName': 'chrome'}.",
    )

    @field_validator("capabilities")
    @classmethod
    def _check_capabilities(cls, value: dict[str, Any]) -> dict[str, Any]:
        if value:
            _decode_capabilities(value)
        return value

    def desired_capabilities(self) -> Capabilities:
        if not self.capabilities:
            return Capabilities()
        return _decode_capabilities(self.capabilities)


def _decode_capabilities(overrides: Mapping[str, Any]) -> Capabilities:
    """Decode wire-form capabilities laid over the default desired ones."""

    return Capabilities.from_wire({**Capabilities().to_wire(), **overrides})


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> WebDriverConfig:
    """Load configuration from an optional YAML file, the environment and overrides.

    Overrides are merged into the file contents key by key, and both take
    precedence over environment variables.
    """

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    return WebDriverConfig(**data, **settings_kwargs)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
