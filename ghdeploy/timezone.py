"""Timezone helpers."""

from __future__ import annotations

import datetime as dt
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ghdeploy.config import settings

DEFAULT_TIMEZONE = "UTC"


def _load_timezone(name: str) -> tuple[dt.tzinfo, str]:
    """Return a tzinfo and its canonical name, falling back to UTC."""

    try:
        return ZoneInfo(name), name
    except (ZoneInfoNotFoundError, ValueError):
        return dt.timezone.utc, DEFAULT_TIMEZONE


TZ, TZ_NAME = _load_timezone(settings.timezone or DEFAULT_TIMEZONE)


def now_local() -> dt.datetime:
    """Current timezone-aware datetime in the configured timezone."""
    return dt.datetime.now(tz=TZ)
