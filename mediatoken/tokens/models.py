"""Token data models."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from itsdangerous import BadData
from itsdangerous.encoding import base64_decode, base64_encode, bytes_to_int, int_to_bytes

from mediatoken.errors import MalformedTokenError

SEPARATOR = "."
SIGNATURE_SIZE = 32
EXPIRES_SIZE = 8

_B64_PART = re.compile(r"[A-Za-z0-9_-]+")


class FailureReason(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    MALFORMED = "MALFORMED"
    BAD_SIGNATURE = "BAD_SIGNATURE"
    EXPIRED = "EXPIRED"


@dataclass(slots=True, frozen=True)
class AccessToken:
    """Parsed token: an expiry and the MAC over resource + expiry."""

    expires: int
    signature: bytes

    def serialize(self) -> str:
        expires = base64_encode(int_to_bytes(self.expires)).decode("ascii")
        signature = base64_encode(self.signature).decode("ascii")
        return f"{expires}{SEPARATOR}{signature}"

    @classmethod
    def parse(cls, raw: str) -> AccessToken:
        if not isinstance(raw, str):
            raise MalformedTokenError("token must be a string")
        parts = raw.split(SEPARATOR)
        if len(parts) != 2 or not all(_B64_PART.fullmatch(part) for part in parts):
            raise MalformedTokenError("token is not in expires.signature form")
        try:
            raw_expires = base64_decode(parts[0])
            signature = base64_decode(parts[1])
        except BadData as exc:
            raise MalformedTokenError("token is not valid base64") from exc
        if len(raw_expires) > EXPIRES_SIZE:
            raise MalformedTokenError("token expiry is too large")
        expires = bytes_to_int(raw_expires)
        if expires <= 0:
            raise MalformedTokenError("token expiry is not a timestamp")
        if len(signature) != SIGNATURE_SIZE:
            raise MalformedTokenError("token signature has the wrong length")
        return cls(expires=expires, signature=signature)


@dataclass(slots=True, frozen=True)
class IssuedToken:
    resource: str
    token: str
    expires: int
    expires_at: str
    lifetime_minutes: int
    url: str | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(slots=True, frozen=True)
class VerifiedToken:
    resource: str
    expires: int
    expires_at: str
    remaining_seconds: int

    @property
    def valid(self) -> bool:
        return True


@dataclass(slots=True, frozen=True)
class TokenFailure:
    reason: FailureReason
    resource: str | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False

    @property
    def valid(self) -> bool:
        return False
