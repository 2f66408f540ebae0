import asyncio
import logging

from card_localizer.errors import DownloadError
from card_localizer.mapping import build_url_map


def test_indices_follow_successful_resolutions(caplog):
    calls = []

    async def resolve(url, index):
        calls.append((url, index))
        if url.endswith("bad.png"):
            raise DownloadError("boom")
        return f"/user/images/c/{index}.png"

    urls = ["https://x.test/a.png", "https://x.test/bad.png", "https://x.test/c.png"]
    with caplog.at_level(logging.WARNING, logger="card_localizer"):
        url_map = asyncio.run(build_url_map(urls, resolve))

    assert url_map == {
        "https://x.test/a.png": "/user/images/c/0.png",
        "https://x.test/c.png": "/user/images/c/1.png",
    }
    assert calls == [
        ("https://x.test/a.png", 0),
        ("https://x.test/bad.png", 1),
        ("https://x.test/c.png", 1),
    ]
    assert "https://x.test/bad.png" in caplog.text


def test_unexpected_errors_do_not_escape():
    async def resolve(url, index):
        raise ValueError("unexpected")

    assert asyncio.run(build_url_map(["https://x.test/a.png"], resolve)) == {}


def test_empty_path_treated_as_failure():
    async def resolve(url, index):
        return ""

    assert asyncio.run(build_url_map(["https://x.test/a.png"], resolve)) == {}


def test_no_urls():
    async def resolve(url, index):  # pragma: no cover
        raise AssertionError("should not be called")

    assert asyncio.run(build_url_map([], resolve)) == {}
