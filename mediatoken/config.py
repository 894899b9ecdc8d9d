"""Environment-driven settings."""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass

from dotenv import load_dotenv

from mediatoken.errors import MissingSecretError
from mediatoken.tokens.codec import DEFAULT_LIFETIME_MINUTES, TokenCodec
from mediatoken.utils.dates import DEFAULT_TZ, timezone_name

DEFAULT_BASE_URL = "https://oss.wangjiajun.asia"
DEFAULT_REFRESH_MARGIN = 300


@dataclass(slots=True)
class Settings:
    secret: str
    base_url: str = DEFAULT_BASE_URL
    default_minutes: int = DEFAULT_LIFETIME_MINUTES
    refresh_margin: int = DEFAULT_REFRESH_MARGIN
    timezone: str = DEFAULT_TZ
    galleries_path: pathlib.Path | None = None

    def codec(self) -> TokenCodec:
        return TokenCodec(self.secret, base_url=self.base_url, tz=self.timezone)


def load_settings() -> Settings:
    """Read settings from the environment (and a ``.env`` file if present)."""
    load_dotenv()
    secret = os.environ.get("AUTH_KEY_SECRET", "")
    if not secret:
        raise MissingSecretError("AUTH_KEY_SECRET env var required")
    galleries_path = os.environ.get("GALLERIES_PATH")
    return Settings(
        secret=secret,
        base_url=os.environ.get("IMAGE_BASE_URL", DEFAULT_BASE_URL),
        default_minutes=int(os.environ.get("TOKEN_DEFAULT_MINUTES", DEFAULT_LIFETIME_MINUTES)),
        refresh_margin=int(os.environ.get("TOKEN_REFRESH_MARGIN", DEFAULT_REFRESH_MARGIN)),
        timezone=timezone_name(),
        galleries_path=pathlib.Path(galleries_path) if galleries_path else None,
    )
