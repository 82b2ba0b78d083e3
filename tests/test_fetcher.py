import asyncio

import pytest
from aiohttp import web

from mediascribe.exceptions import DownloadException
from mediascribe.media.fetcher import MediaFetcher, url_suffix

PAYLOAD = b"\x00\x01fake-media" * 4096


async def _media(request):
    return web.Response(body=PAYLOAD, content_type="video/mp4")


async def _missing(request):
    return web.Response(status=404, text="not here")


async def _slow(request):
    await asyncio.sleep(2)
    return web.Response(body=b"late")


@pytest.fixture
async def media_server():
    app = web.Application()
    app.router.add_get("/clip.mp4", _media)
    app.router.add_get("/missing.mp3", _missing)
    app.router.add_get("/slow.wav", _slow)
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", 0)
    await site.start()
    port = runner.addresses[0][1]
    yield f"http://127.0.0.1:{port}"
    await runner.cleanup()


async def test_download_streams_to_disk(media_server, temp_dir):
    output = temp_dir / "input.mp4"

    result = await MediaFetcher().download(f"{media_server}/clip.mp4", str(output))

    assert output.read_bytes() == PAYLOAD
    assert result.size_bytes == len(PAYLOAD)
    assert result.content_type == "video/mp4"
    assert result.download_time_ms >= 0


async def test_http_error_status_raises(media_server, temp_dir):
    with pytest.raises(DownloadException) as exc_info:
        await MediaFetcher().download(f"{media_server}/missing.mp3", str(temp_dir / "x.mp3"))
    assert "404" in exc_info.value.message
    assert exc_info.value.details["status"] == 404


async def test_timeout_raises_download_exception(media_server, temp_dir):
    with pytest.raises(DownloadException) as exc_info:
        await MediaFetcher(timeout_seconds=0.2).download(f"{media_server}/slow.wav", str(temp_dir / "x.wav"))
    assert exc_info.value.error_code == "DOWNLOAD_TIMEOUT"


async def test_unreachable_host_raises_download_exception(temp_dir):
    with pytest.raises(DownloadException):
        await MediaFetcher(timeout_seconds=5).download("http://127.0.0.1:9/clip.mp4", str(temp_dir / "x.mp4"))


@pytest.mark.parametrize("url,expected", [
    ("https://cdn.example.com/media/talk.MP3?sig=abc", ".mp3"),
    ("https://cdn.example.com/media/talk.mp4", ".mp4"),
    ("https://cdn.example.com/media/stream", ".bin"),
    ("https://cdn.example.com/download.php-x", ".bin"),
])
def test_url_suffix(url, expected):
    assert url_suffix(url) == expected
