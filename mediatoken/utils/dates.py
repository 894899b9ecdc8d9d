"""Datetime helpers."""

from __future__ import annotations

import os

import pendulum

DEFAULT_TZ = "UTC"


def timezone_name() -> str:
    return os.environ.get("TIMEZONE", DEFAULT_TZ)


def now_timestamp() -> int:
    """Current Unix time in whole seconds."""
    return pendulum.now("UTC").int_timestamp


def isoformat_timestamp(value: int, tz: str = DEFAULT_TZ) -> str:
    return pendulum.from_timestamp(value, tz=tz).to_iso8601_string()
