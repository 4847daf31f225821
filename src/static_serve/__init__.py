"""Static asset serving middleware and a small HTTP server to mount it on."""

from .config import (
    CacheControlDirectives,
    ServeConfig,
    ServeConfigurationError,
    ServerConfig,
)
from .content_types import DEFAULT_CONTENT_TYPE, DEFAULT_CONTENT_TYPES, resolve_content_type
from .handler import FileStream, StaticServeHandler, serve_static
from .headers import build_cache_control_header, format_http_date
from .paths import ResolvedAsset, resolve_asset
from .pipeline import Pipeline, RequestContext, ResponseContext
from .service import StaticServer

__all__ = [
    "CacheControlDirectives",
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_CONTENT_TYPES",
    "FileStream",
    "Pipeline",
    "RequestContext",
    "ResolvedAsset",
    "ResponseContext",
    "ServeConfig",
    "ServeConfigurationError",
    "ServerConfig",
    "StaticServeHandler",
    "StaticServer",
    "build_cache_control_header",
    "format_http_date",
    "resolve_asset",
    "resolve_content_type",
    "serve_static",
]
