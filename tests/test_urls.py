import pytest

from mediatoken.errors import InvalidResourceError
from mediatoken.utils.urls import build_access_url, normalize_resource, resource_from_url


def test_normalize_strips_leading_slashes():
    assert normalize_resource("/a/b.jpg") == "a/b.jpg"
    assert normalize_resource("///a/b.jpg") == "a/b.jpg"
    assert normalize_resource("a/b.jpg") == "a/b.jpg"


@pytest.mark.parametrize("name", ["/a/b.jpg", "a/b/", "photo/street/1.jpg", "x..y.jpg"])
def test_normalize_is_idempotent(name):
    once = normalize_resource(name)
    assert normalize_resource(once) == once


@pytest.mark.parametrize("name", ["", "/", "..", "a/../b", "a/..", "bad\x00name", "tab\tname", "http://x/a.jpg", "a#frag", "a?b"])
def test_normalize_rejects(name):
    with pytest.raises(InvalidResourceError):
        normalize_resource(name)


def test_invalid_resource_error_is_value_error():
    with pytest.raises(ValueError):
        normalize_resource("")


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://oss.example.com/photo/street/1.jpg?token=abc.def", "photo/street/1.jpg"),
        ("http://oss.example.com//game/cover.jpg", "game/cover.jpg"),
        ("/game/cover.jpg", "game/cover.jpg"),
        ("game/cover.jpg?token=old#top", "game/cover.jpg"),
        ("https://oss.example.com/video/clip%20one.mp4", "video/clip one.mp4"),
        ("https://oss.example.com/", None),
        ("", None),
        (None, None),
    ],
)
def test_resource_from_url(url, expected):
    assert resource_from_url(url) == expected


def test_build_access_url_quotes_path():
    url = build_access_url("https://oss.example.com/", "/video/clip one.mp4", "abc.def")
    assert url == "https://oss.example.com/video/clip%20one.mp4?token=abc.def"
    assert resource_from_url(url) == "video/clip one.mp4"


def test_build_access_url_relative():
    assert build_access_url("", "a.jpg", "t.k") == "/a.jpg?token=t.k"
