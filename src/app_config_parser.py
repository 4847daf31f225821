"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    CacheControlSettings,
    ServerSettings,
    StaticSettings,
)

_CACHE_CONTROL_FLAGS = (
    "public",
    "private",
    "no_cache",
    "no_store",
    "must_revalidate",
    "proxy_revalidate",
    "no_transform",
)
_CACHE_CONTROL_SECONDS = ("max_age", "s_max_age")


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    server = _parse_server_settings(_section(raw, "server"))
    static = _parse_static_settings(_section(raw, "static"), base_dir=base_dir)

    return AppConfig(
        server=server,
        static=static,
        source_file=source_file,
    )


def _parse_server_settings(section: Mapping[str, Any]) -> ServerSettings:
    return ServerSettings(
        host=_as_str(section.get("host", "127.0.0.1"), "server.host"),
        port=_as_int(section.get("port", 8080), "server.port"),
        max_body_bytes=_as_int(
            section.get("max_body_bytes", 256 * 1024 * 1024),
            "server.max_body_bytes",
        ),
    )


def _parse_static_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StaticSettings:
    root = _required_str(section, "root", "static")
    return StaticSettings(
        root=_resolve_path(base_dir, root),
        content_types=_parse_content_types(_section(section, "content_types", "static")),
        cache_control=_parse_cache_control(section.get("cache_control")),
        expires=_as_optional_datetime(section.get("expires"), "static.expires"),
    )


def _parse_content_types(section: Mapping[str, Any]) -> dict[str, str]:
    content_types = {}
    for extension, content_type in section.items():
        field = f"static.content_types.{extension}"
        text = _as_str(content_type, field)
        if not text:
            raise AppConfigurationError(f"{field} cannot be empty.")
        content_types[str(extension)] = text
    return content_types


def _parse_cache_control(raw: Any) -> Optional[CacheControlSettings]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise AppConfigurationError("[static.cache_control] must be a table.")

    unknown = sorted(
        set(raw) - set(_CACHE_CONTROL_FLAGS) - set(_CACHE_CONTROL_SECONDS)
    )
    if unknown:
        joined = ", ".join(f"static.cache_control.{key}" for key in unknown)
        raise AppConfigurationError(f"Unknown cache-control directives: {joined}")

    values: dict[str, Any] = {}
    for name in _CACHE_CONTROL_FLAGS:
        values[name] = _as_bool(raw.get(name, False), f"static.cache_control.{name}")
    for name in _CACHE_CONTROL_SECONDS:
        values[name] = _as_optional_seconds(raw.get(name), f"static.cache_control.{name}")
    return CacheControlSettings(**values)


def _section(
    root: Mapping[str, Any],
    name: str,
    parent: Optional[str] = None,
) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        label = f"{parent}.{name}" if parent else name
        raise AppConfigurationError(f"[{label}] must be a table.")
    return raw


def _required_str(section: Mapping[str, Any], field: str, section_name: str) -> str:
    value = section.get(field)
    text = _as_str(value, f"{section_name}.{field}")
    if not text:
        raise AppConfigurationError(f"{section_name}.{field} is required.")
    return text


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_optional_seconds(value: Any, field: str) -> Optional[int]:
    if value is None:
        return None
    seconds = _as_int(value, field)
    if seconds < 0:
        raise AppConfigurationError(f"{field} must be >= 0.")
    return seconds


def _as_optional_datetime(value: Any, field: str) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, date):
        moment = datetime.combine(value, time())
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as error:
            raise AppConfigurationError(
                f"{field} must be an RFC 3339 datetime."
            ) from error
    else:
        raise AppConfigurationError(f"{field} must be a datetime.")

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
