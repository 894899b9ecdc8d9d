"""Signed media access tokens."""

from __future__ import annotations

from mediatoken.tokens.codec import (
    DEFAULT_LIFETIME_MINUTES,
    MAX_LIFETIME_MINUTES,
    MIN_LIFETIME_MINUTES,
    TokenCodec,
    batch_generate,
    clamp_lifetime,
    generate_token,
    verify_token,
)
from mediatoken.tokens.models import AccessToken, FailureReason, IssuedToken, TokenFailure, VerifiedToken

__all__ = [
    "AccessToken",
    "DEFAULT_LIFETIME_MINUTES",
    "FailureReason",
    "IssuedToken",
    "MAX_LIFETIME_MINUTES",
    "MIN_LIFETIME_MINUTES",
    "TokenCodec",
    "TokenFailure",
    "VerifiedToken",
    "batch_generate",
    "clamp_lifetime",
    "generate_token",
    "verify_token",
]
