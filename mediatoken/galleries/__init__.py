"""Gallery manifest helpers."""

from __future__ import annotations

import logging
import pathlib

import yaml

from mediatoken.galleries.models import Gallery
from mediatoken.tokens.codec import DEFAULT_LIFETIME_MINUTES, TokenCodec
from mediatoken.tokens.models import IssuedToken
from mediatoken.utils.urls import build_access_url

logger = logging.getLogger(__name__)

GALLERIES_PATH = pathlib.Path(__file__).with_name("galleries.yml")


def load_galleries(path: pathlib.Path | None = None) -> dict[str, Gallery]:
    data = yaml.safe_load((path or GALLERIES_PATH).read_text()) or {}
    return {name: Gallery(name=name, **item) for name, item in data.items()}


def sign_gallery(
    codec: TokenCodec, gallery: Gallery, lifetime_minutes: int = DEFAULT_LIFETIME_MINUTES
) -> dict[str, str]:
    """Map every resource in ``gallery`` to its signed access URL.

    Entries that cannot be signed keep their unsigned name so the page can
    still render a placeholder.
    """
    urls: dict[str, str] = {}
    for resource, result in zip(gallery.resources, codec.batch_generate(gallery.resources, lifetime_minutes)):
        if isinstance(result, IssuedToken):
            urls[resource] = result.url or build_access_url("", result.resource, result.token)
        else:
            logger.warning("Gallery %s: cannot sign %r (%s)", gallery.name, resource, result.detail)
            urls[resource] = resource
    return urls
