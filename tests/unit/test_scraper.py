"""Tests for the profile scraper."""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from reelsmith.models.errors import ScrapeError
from reelsmith.scraper.tiktok import (
    TikTokScraper,
    absolute_links,
    clean_username,
    video_id_from_url,
)

VIDEO_URL = "https://www.tiktok.com/@someone/video/{id}"


def resolver_transport(failing=()):
    """Mock resolver API plus CDN."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.test":
            url = request.url.params["url"]
            video_id = video_id_from_url(url, "")
            if video_id in failing:
                return httpx.Response(200, json={"code": -1, "msg": "Url parsing is failed"})
            return httpx.Response(
                200, json={"code": 0, "data": {"play": f"https://cdn.test/{video_id}.mp4"}}
            )
        if request.url.host == "cdn.test":
            return httpx.Response(200, content=b"video-bytes-" + request.url.path.encode())
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def scraper_settings(settings):
    return settings.model_copy(update={"scraper_api_url": "https://api.test/"})


class TestHelpers:
    def test_clean_username(self):
        assert clean_username(" @someone ") == "someone"
        assert clean_username("someone") == "someone"

    def test_video_id_from_url(self):
        assert video_id_from_url(VIDEO_URL.format(id="742") + "?lang=en", "x") == "742"
        assert video_id_from_url("https://www.tiktok.com/@someone", "video_3") == "video_3"

    def test_absolute_links(self):
        hrefs = ["/@a/video/1", "https://www.tiktok.com/@a/video/2", None, "/@a/video/1", "#"]
        assert absolute_links(hrefs) == [
            "https://www.tiktok.com/@a/video/1",
            "https://www.tiktok.com/@a/video/2",
        ]


class TestDownloads:
    def test_downloads_and_skips_failures(self, scraper_settings, tmp_dir):
        client = httpx.AsyncClient(transport=resolver_transport(failing={"2"}))
        scraper = TikTokScraper(scraper_settings, client=client)
        links = [VIDEO_URL.format(id=i) for i in (1, 2, 3)]
        events = []

        files = asyncio.run(scraper.download_videos(links, tmp_dir, on_progress=events.append))

        assert [f.name for f in files] == ["1.mp4", "3.mp4"]
        assert (tmp_dir / "1.mp4").read_bytes() == b"video-bytes-/1.mp4"
        assert not (tmp_dir / "2.mp4").exists()
        assert [e["current"] for e in events] == [1, 2, 3]
        assert all(e["status"] == "downloading" and e["total"] == 3 for e in events)

    def test_existing_files_skipped(self, scraper_settings, tmp_dir):
        (tmp_dir / "1.mp4").write_bytes(b"already here")
        client = httpx.AsyncClient(transport=resolver_transport())
        scraper = TikTokScraper(scraper_settings, client=client)
        files = asyncio.run(scraper.download_videos([VIDEO_URL.format(id=1)], tmp_dir))
        assert files == [tmp_dir / "1.mp4"]
        assert (tmp_dir / "1.mp4").read_bytes() == b"already here"

    def test_cancellation(self, scraper_settings, tmp_dir):
        client = httpx.AsyncClient(transport=resolver_transport())
        scraper = TikTokScraper(scraper_settings, client=client)
        links = [VIDEO_URL.format(id=i) for i in (1, 2, 3)]
        downloaded = []

        def should_cancel():
            return len(downloaded) >= 1

        def on_progress(event):
            downloaded.append(event["current"])

        files = asyncio.run(
            scraper.download_videos(links, tmp_dir, on_progress, should_cancel=should_cancel)
        )
        assert [f.name for f in files] == ["1.mp4"]

    def test_resolver_error(self, scraper_settings, tmp_dir):
        async def run():
            async with httpx.AsyncClient(transport=resolver_transport(failing={"9"})) as client:
                scraper = TikTokScraper(scraper_settings, client=client)
                await scraper.download_video(client, VIDEO_URL.format(id=9), tmp_dir / "9.mp4")

        with pytest.raises(ScrapeError, match="Url parsing is failed"):
            asyncio.run(run())


class TestScrapeUser:
    def test_scrape_user_flow(self, scraper_settings, tmp_dir):
        client = httpx.AsyncClient(transport=resolver_transport())
        scraper = TikTokScraper(scraper_settings, client=client)
        events = []
        with patch.object(
            TikTokScraper,
            "collect_video_links",
            new_callable=AsyncMock,
            return_value=[VIDEO_URL.format(id=5)],
        ) as collect:
            files = asyncio.run(scraper.scrape_user("@someone", tmp_dir, events.append))

        collect.assert_awaited_once_with("someone")
        assert files == [tmp_dir / "someone" / "5.mp4"]
        assert [e["status"] for e in events] == ["scraping_links", "links_found", "downloading"]
        assert events[1]["count"] == 1

    def test_empty_username(self, scraper_settings, tmp_dir):
        with pytest.raises(ScrapeError):
            asyncio.run(TikTokScraper(scraper_settings).scrape_user("@", tmp_dir))
