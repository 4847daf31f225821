"""Configuration models for the static-file server and its mount points."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

DEFAULT_MAX_BODY_BYTES = 256 * 1024 * 1024


class ServeConfigurationError(Exception):
    """Raised when static server configuration is invalid."""


@dataclass(frozen=True)
class CacheControlDirectives:
    """Independent `Cache-Control` directives; any combination is accepted."""
    public: bool = False
    private: bool = False
    no_cache: bool = False
    no_store: bool = False
    max_age: Optional[int] = None
    s_max_age: Optional[int] = None
    must_revalidate: bool = False
    proxy_revalidate: bool = False
    no_transform: bool = False

    def __post_init__(self) -> None:
        for name in ("max_age", "s_max_age"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ServeConfigurationError(f"{name} must be an integer, got: {value!r}")
            if value < 0:
                raise ServeConfigurationError(f"{name} must be >= 0, got: {value}")

    @property
    def is_empty(self) -> bool:
        return all(
            getattr(self, f.name) is None or getattr(self, f.name) is False
            for f in fields(self)
        )

    @classmethod
    def from_settings(cls, settings) -> "CacheControlDirectives":
        return cls(
            public=bool(settings.public),
            private=bool(settings.private),
            no_cache=bool(settings.no_cache),
            no_store=bool(settings.no_store),
            max_age=settings.max_age,
            s_max_age=settings.s_max_age,
            must_revalidate=bool(settings.must_revalidate),
            proxy_revalidate=bool(settings.proxy_revalidate),
            no_transform=bool(settings.no_transform),
        )


def _normalize_extension(raw: str) -> str:
    text = raw.strip().lower()
    if not text:
        raise ServeConfigurationError("content type map keys cannot be empty")
    return text if text.startswith(".") else f".{text}"


@dataclass(frozen=True)
class ServeConfig:
    """Read-only settings for one static mount, shared by all requests."""
    root: Path
    content_type_map: Mapping[str, str] = field(default_factory=dict)
    cache_control: Optional[CacheControlDirectives] = None
    expires: Optional[datetime] = None

    def __post_init__(self) -> None:
        root = Path(self.root)
        if not root.exists():
            raise ServeConfigurationError(f"Static root not found: {root}")
        if not root.is_dir():
            raise ServeConfigurationError(f"Static root is not a directory: {root}")
        object.__setattr__(self, "root", root.resolve())

        overrides = {}
        for extension, content_type in dict(self.content_type_map).items():
            if not isinstance(content_type, str) or not content_type.strip():
                raise ServeConfigurationError(
                    f"content type for {extension!r} must be a non-empty string"
                )
            overrides[_normalize_extension(extension)] = content_type.strip()
        object.__setattr__(self, "content_type_map", MappingProxyType(overrides))

        if self.expires is not None and not isinstance(self.expires, datetime):
            raise ServeConfigurationError(
                f"expires must be a datetime, got: {type(self.expires).__name__}"
            )

    @classmethod
    def from_settings(cls, settings) -> "ServeConfig":
        cache_control = None
        if settings.cache_control is not None:
            cache_control = CacheControlDirectives.from_settings(settings.cache_control)
        return cls(
            root=Path(settings.root),
            content_type_map=dict(settings.content_types),
            cache_control=cache_control,
            expires=settings.expires,
        )


@dataclass(frozen=True)
class ServerConfig:
    """Validated listener configuration derived from app settings."""
    host: str = "127.0.0.1"
    port: int = 8080
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServeConfigurationError("server.host cannot be empty")

        if self.max_body_bytes <= 0:
            raise ServeConfigurationError(
                f"server.max_body_bytes must be > 0, got: {self.max_body_bytes}"
            )

        # 0 asks the OS for an ephemeral port.
        if not 0 <= self.port <= 65535:
            raise ServeConfigurationError(
                f"server.port must be in [0, 65535], got: {self.port}"
            )

    @classmethod
    def from_settings(cls, settings) -> "ServerConfig":
        return cls(
            host=settings.host,
            port=settings.port,
            max_body_bytes=settings.max_body_bytes,
        )
