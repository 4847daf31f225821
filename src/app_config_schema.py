"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping, Optional

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class ServerSettings:
    """Listener settings from `[server]`."""
    host: str = "127.0.0.1"
    port: int = 8080
    max_body_bytes: int = 256 * 1024 * 1024


@dataclass(frozen=True)
class CacheControlSettings:
    """`Cache-Control` directives from `[static.cache_control]`."""
    public: bool = False
    private: bool = False
    no_cache: bool = False
    no_store: bool = False
    max_age: Optional[int] = None
    s_max_age: Optional[int] = None
    must_revalidate: bool = False
    proxy_revalidate: bool = False
    no_transform: bool = False


@dataclass(frozen=True)
class StaticSettings:
    """Static mount settings from `[static]`."""
    root: str
    content_types: Mapping[str, str] = field(default_factory=dict)
    cache_control: Optional[CacheControlSettings] = None
    expires: Optional[datetime] = None


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    server: ServerSettings
    static: StaticSettings
    source_file: str
