"""Profile scraper: enumerate a user's videos and download them."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from urllib.parse import urljoin

import httpx

from reelsmith.config import Settings, get_settings
from reelsmith.models.errors import ScrapeError

logger = logging.getLogger(__name__)

ScrapeProgress = Callable[[dict], Awaitable[None] | None]
CancelCheck = Callable[[], bool]

VIDEO_LINK_SELECTOR = 'a[href*="/video/"]'
PROFILE_ORIGIN = "https://www.tiktok.com"


def clean_username(username: str) -> str:
    username = username.strip()
    return username[1:] if username.startswith("@") else username


def video_id_from_url(url: str, fallback: str) -> str:
    """Extract the numeric id from a ``.../video/<id>?...`` link."""
    if "/video/" not in url:
        return fallback
    video_id = url.split("/video/", 1)[1].split("?", 1)[0].strip("/")
    return video_id or fallback


def absolute_links(hrefs: list[str | None]) -> list[str]:
    """Deduplicate hrefs, keeping page order, and make them absolute."""
    links: list[str] = []
    for href in hrefs:
        if not href:
            continue
        if href.startswith("http"):
            url = href
        elif href.startswith("/"):
            url = urljoin(PROFILE_ORIGIN, href)
        else:
            continue
        if url not in links:
            links.append(url)
    return links


class TikTokScraper:
    """Collects video links with a headless browser and downloads them via a
    public resolver API."""

    def __init__(self, settings: Settings | None = None, client: httpx.AsyncClient | None = None):
        self.settings = settings or get_settings()
        self._client = client

    async def scrape_user(
        self,
        username: str,
        output_dir: Path,
        on_progress: ScrapeProgress | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> list[Path]:
        """Download every video of ``username`` into ``output_dir/<username>``."""
        user = clean_username(username)
        if not user:
            raise ScrapeError("Username is required")
        user_dir = Path(output_dir) / user
        user_dir.mkdir(parents=True, exist_ok=True)

        await _emit(
            on_progress,
            {"status": "scraping_links", "message": f"Navigating to {user}'s profile..."},
        )
        links = await self.collect_video_links(user)
        logger.info("Found %d videos for %s", len(links), user)
        await _emit(on_progress, {"status": "links_found", "count": len(links)})

        if should_cancel is not None and should_cancel():
            return []
        return await self.download_videos(links, user_dir, on_progress, should_cancel)

    async def collect_video_links(self, username: str) -> list[str]:
        """Open the public profile page and read its video links."""
        from playwright.async_api import Error as PlaywrightError
        from playwright.async_api import async_playwright

        profile_url = self.settings.scraper_profile_url.format(username=username)
        timeout_ms = self.settings.scraper_navigation_timeout * 1000
        logger.info("Navigating to %s", profile_url)
        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=self.settings.scraper_headless)
                try:
                    context = await browser.new_context(user_agent=self.settings.scraper_user_agent)
                    page = await context.new_page()
                    await page.goto(profile_url, wait_until="networkidle", timeout=timeout_ms)
                    try:
                        await page.wait_for_selector(VIDEO_LINK_SELECTOR, timeout=15000)
                    except PlaywrightError:
                        logger.warning("No video links visible on %s", profile_url)
                        return []
                    hrefs = await page.eval_on_selector_all(
                        VIDEO_LINK_SELECTOR, "els => els.map(e => e.getAttribute('href'))"
                    )
                finally:
                    await browser.close()
        except PlaywrightError as e:
            raise ScrapeError(
                f"Failed to load profile {profile_url}: {e}", details={"url": profile_url}
            ) from e
        return absolute_links(hrefs)

    async def download_videos(
        self,
        links: list[str],
        user_dir: Path,
        on_progress: ScrapeProgress | None = None,
        should_cancel: CancelCheck | None = None,
    ) -> list[Path]:
        """Download ``links`` sequentially; failed items are skipped."""
        downloaded: list[Path] = []
        client = self._client or httpx.AsyncClient(timeout=60.0, follow_redirects=True)
        try:
            for i, url in enumerate(links):
                if should_cancel is not None and should_cancel():
                    logger.info("Stop requested, ending download loop")
                    break

                video_id = video_id_from_url(url, f"video_{i}")
                target = user_dir / f"{video_id}.mp4"
                if target.exists():
                    logger.info("Skipping already downloaded: %s", video_id)
                    downloaded.append(target)
                    continue

                await _emit(
                    on_progress,
                    {
                        "status": "downloading",
                        "current": i + 1,
                        "total": len(links),
                        "message": f"Downloading video {i + 1}/{len(links)}",
                    },
                )
                try:
                    await self.download_video(client, url, target)
                    downloaded.append(target)
                except (httpx.HTTPError, ScrapeError) as e:
                    logger.warning("Error downloading %s: %s", url, e)
                    target.unlink(missing_ok=True)

                if self.settings.scraper_download_delay > 0:
                    await asyncio.sleep(self.settings.scraper_download_delay)
        finally:
            if self._client is None:
                await client.aclose()
        return downloaded

    async def download_video(self, client: httpx.AsyncClient, url: str, target: Path) -> Path:
        """Resolve ``url`` to a direct media URL and stream it to ``target``."""
        response = await client.get(self.settings.scraper_api_url, params={"url": url})
        response.raise_for_status()
        payload = response.json()
        play_url = (payload.get("data") or {}).get("play") if payload.get("code") == 0 else None
        if not play_url:
            raise ScrapeError(
                f"No download link for {url}: {payload.get('msg', 'unknown error')}",
                details={"url": url},
            )
        async with client.stream("GET", play_url) as media:
            media.raise_for_status()
            with open(target, "wb") as f:
                async for chunk in media.aiter_bytes():
                    f.write(chunk)
        return target


async def _emit(on_progress: ScrapeProgress | None, payload: dict) -> None:
    if on_progress is None:
        return
    maybe_awaitable = on_progress(payload)
    if inspect.isawaitable(maybe_awaitable):
        await maybe_awaitable
