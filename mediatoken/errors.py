"""Exception types raised by the token helpers."""

from __future__ import annotations


class MediaTokenError(Exception):
    """Base class for media token errors."""


class MissingSecretError(MediaTokenError):
    """No signing secret is configured."""


class InvalidResourceError(MediaTokenError, ValueError):
    """A resource name cannot be signed."""


class MalformedTokenError(MediaTokenError, ValueError):
    """A token string does not have the expires.signature layout."""
