"""Signed, time-limited access tokens for media resources."""

from __future__ import annotations

import hashlib
import logging
import math
from collections.abc import Callable, Iterable

from itsdangerous import Signer

from mediatoken.errors import InvalidResourceError, MalformedTokenError, MissingSecretError
from mediatoken.tokens.models import AccessToken, FailureReason, IssuedToken, TokenFailure, VerifiedToken
from mediatoken.utils.dates import DEFAULT_TZ, isoformat_timestamp, now_timestamp
from mediatoken.utils.urls import build_access_url, normalize_resource

logger = logging.getLogger(__name__)

MIN_LIFETIME_MINUTES = 1
MAX_LIFETIME_MINUTES = 120
DEFAULT_LIFETIME_MINUTES = 30

SIGNING_SALT = "mediatoken.access"
MESSAGE_DELIMITER = "\n"

GenerateResult = IssuedToken | TokenFailure
VerifyResult = VerifiedToken | TokenFailure


def clamp_lifetime(minutes: object) -> int:
    """Coerce a requested lifetime into the allowed window of minutes."""
    if isinstance(minutes, float) and math.isinf(minutes):
        return MAX_LIFETIME_MINUTES if minutes > 0 else MIN_LIFETIME_MINUTES
    try:
        value = int(minutes)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        logger.debug("Unusable lifetime %r, using %s minutes", minutes, DEFAULT_LIFETIME_MINUTES)
        return DEFAULT_LIFETIME_MINUTES
    clamped = max(MIN_LIFETIME_MINUTES, min(MAX_LIFETIME_MINUTES, value))
    if clamped != value:
        logger.debug("Clamped lifetime from %s to %s minutes", value, clamped)
    return clamped


def signing_message(resource: str, expires: int) -> bytes:
    # Resource names never contain control characters, so the newline
    # cannot be confused with part of the name.
    return f"{resource}{MESSAGE_DELIMITER}{expires}".encode("utf-8")


class TokenCodec:
    """Issue and check tokens bound to one resource name and an expiry.

    The codec holds no mutable state: the secret and optional media host
    are fixed at construction and every call only reads the clock, so one
    instance can be shared between threads and requests.
    """

    def __init__(
        self,
        secret: str,
        *,
        base_url: str | None = None,
        clock: Callable[[], int] | None = None,
        tz: str = DEFAULT_TZ,
    ) -> None:
        if not isinstance(secret, str) or not secret:
            raise MissingSecretError("a non-empty signing secret is required")
        self.base_url = base_url or None
        self.tz = tz
        self._clock = clock or now_timestamp
        signer = Signer(secret, salt=SIGNING_SALT, key_derivation="hmac", digest_method=hashlib.sha256)
        self._algorithm = signer.algorithm
        self._key = signer.derive_key()

    def now(self) -> int:
        return self._clock()

    def _sign(self, resource: str, expires: int) -> bytes:
        return self._algorithm.get_signature(self._key, signing_message(resource, expires))

    def generate(self, resource: str, lifetime_minutes: object = DEFAULT_LIFETIME_MINUTES) -> GenerateResult:
        try:
            name = normalize_resource(resource)
        except InvalidResourceError as exc:
            logger.debug("Refusing to sign %r: %s", resource, exc)
            return TokenFailure(
                FailureReason.INVALID_INPUT,
                resource=resource if isinstance(resource, str) else None,
                detail=str(exc),
            )
        minutes = clamp_lifetime(lifetime_minutes)
        expires = self.now() + minutes * 60
        token = AccessToken(expires=expires, signature=self._sign(name, expires)).serialize()
        url = build_access_url(self.base_url, name, token) if self.base_url else None
        logger.debug("Issued token for %s valid %s minutes", name, minutes)
        return IssuedToken(
            resource=name,
            token=token,
            expires=expires,
            expires_at=isoformat_timestamp(expires, self.tz),
            lifetime_minutes=minutes,
            url=url,
        )

    def verify(self, token: str, resource: str) -> VerifyResult:
        try:
            parsed = AccessToken.parse(token)
        except MalformedTokenError as exc:
            return TokenFailure(FailureReason.MALFORMED, resource=resource, detail=str(exc))
        try:
            name = normalize_resource(resource)
        except InvalidResourceError as exc:
            # No token is ever issued for such a name.
            return TokenFailure(FailureReason.BAD_SIGNATURE, resource=resource, detail=str(exc))
        if not self._algorithm.verify_signature(self._key, signing_message(name, parsed.expires), parsed.signature):
            return TokenFailure(FailureReason.BAD_SIGNATURE, resource=name)
        now = self.now()
        if parsed.expires <= now:
            return TokenFailure(FailureReason.EXPIRED, resource=name, detail=f"expired {now - parsed.expires}s ago")
        return VerifiedToken(
            resource=name,
            expires=parsed.expires,
            expires_at=isoformat_timestamp(parsed.expires, self.tz),
            remaining_seconds=parsed.expires - now,
        )

    def batch_generate(
        self, resources: Iterable[str], lifetime_minutes: object = DEFAULT_LIFETIME_MINUTES
    ) -> list[GenerateResult]:
        if isinstance(resources, str):
            raise TypeError("batch_generate expects a sequence of resource names")
        return [self.generate(resource, lifetime_minutes) for resource in resources]


def generate_token(
    resource: str,
    secret: str,
    lifetime_minutes: object = DEFAULT_LIFETIME_MINUTES,
    *,
    base_url: str | None = None,
    clock: Callable[[], int] | None = None,
) -> GenerateResult:
    return TokenCodec(secret, base_url=base_url, clock=clock).generate(resource, lifetime_minutes)


def verify_token(
    token: str,
    resource: str,
    secret: str,
    *,
    clock: Callable[[], int] | None = None,
) -> VerifyResult:
    return TokenCodec(secret, clock=clock).verify(token, resource)


def batch_generate(
    resources: Iterable[str],
    secret: str,
    lifetime_minutes: object = DEFAULT_LIFETIME_MINUTES,
    *,
    base_url: str | None = None,
    clock: Callable[[], int] | None = None,
) -> list[GenerateResult]:
    return TokenCodec(secret, base_url=base_url, clock=clock).batch_generate(resources, lifetime_minutes)
