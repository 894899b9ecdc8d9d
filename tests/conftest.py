import pytest

from mediatoken.api import main
from mediatoken.config import Settings
from mediatoken.tokens.codec import TokenCodec

T0 = 1_700_000_000
SECRET = "secret123"
BASE_URL = "https://media.example"


class FakeClock:
    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock(T0)


@pytest.fixture()
def codec(clock):
    return TokenCodec(SECRET, clock=clock)


@pytest.fixture()
def url_codec(clock):
    return TokenCodec(SECRET, base_url=BASE_URL, clock=clock)


@pytest.fixture()
def settings():
    return Settings(secret=SECRET, base_url=BASE_URL)


@pytest.fixture()
def api(settings, url_codec):
    main.token_cache.clear()
    main.app.dependency_overrides[main.get_settings] = lambda: settings
    main.app.dependency_overrides[main.get_codec] = lambda: url_codec
    yield main.app
    main.app.dependency_overrides.clear()
    main.token_cache.clear()
