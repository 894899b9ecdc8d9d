"""Print a signed access URL for a media resource."""

from __future__ import annotations

import sys

from mediatoken.config import load_settings
from mediatoken.tokens.models import IssuedToken


def main() -> None:
    if len(sys.argv) < 2:
        raise SystemExit("usage: issue_token.py RESOURCE [MINUTES]")
    settings = load_settings()
    minutes = sys.argv[2] if len(sys.argv) > 2 else settings.default_minutes
    result = settings.codec().generate(sys.argv[1], minutes)
    if not isinstance(result, IssuedToken):
        raise SystemExit(f"Cannot sign {sys.argv[1]!r}: {result.detail}")
    print(result.url)
    print("Expires at", result.expires_at)


if __name__ == "__main__":
    main()
