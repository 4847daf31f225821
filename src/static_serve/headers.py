"""Serialization of caching response headers."""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Callable, Optional

from .config import CacheControlDirectives

_DirectiveToken = Callable[[CacheControlDirectives], Optional[str]]


def _flag(attribute: str, token: str) -> _DirectiveToken:
    return lambda directives: token if getattr(directives, attribute) else None


def _seconds(attribute: str, name: str) -> _DirectiveToken:
    def render(directives: CacheControlDirectives) -> Optional[str]:
        value = getattr(directives, attribute)
        if value is None:
            return None
        return f"{name}={int(value)}"

    return render


# Emission order of the header is fixed here, not by the caller.
CACHE_CONTROL_ORDER: tuple[_DirectiveToken, ...] = (
    _flag("public", "public"),
    _flag("private", "private"),
    _flag("no_cache", "no-cache"),
    _flag("no_store", "no-store"),
    _seconds("max_age", "max-age"),
    _seconds("s_max_age", "s-maxage"),
    _flag("must_revalidate", "must-revalidate"),
    _flag("proxy_revalidate", "proxy-revalidate"),
    _flag("no_transform", "no-transform"),
)


def build_cache_control_header(directives: CacheControlDirectives) -> str:
    """Serialize directives into a `Cache-Control` value; empty when none are set."""
    tokens = []
    for render in CACHE_CONTROL_ORDER:
        token = render(directives)
        if token is not None:
            tokens.append(token)
    return ", ".join(tokens)


def format_http_date(moment: datetime) -> str:
    """Format a timestamp as an IMF-fixdate, e.g. `Sun, 06 Nov 1994 08:49:37 GMT`.

    Naive datetimes are taken to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)
