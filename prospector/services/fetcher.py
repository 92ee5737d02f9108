import logging
from urllib.parse import urlparse
from urllib.robotparser import RobotFileParser

import httpx

from prospector.config import DEFAULT_USER_AGENT
from prospector.exceptions.custom import BrowserLaunchError, FetchCause, FetchError
from prospector.schemas.scraper import FetchedPage, ScrapeOptions
from prospector.services.browser import BrowserLauncher

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 5.0

_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"
_ACCEPT_LANGUAGE = "en-US,en;q=0.9"


def _exists(status_code: int) -> bool:
    """2xx, or a site that exists but is access-controlled."""
    return 200 <= status_code < 300 or status_code in (401, 403)


class PageFetcher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        browser: BrowserLauncher | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self._client = client
        self._browser = browser
        self._user_agent = user_agent

    async def fetch(self, url: str, options: ScrapeOptions | None = None) -> FetchedPage:
        """Fetch a page. Raises FetchError (or BrowserLaunchError in headless mode)."""
        options = options or ScrapeOptions()
        user_agent = options.user_agent or self._user_agent

        if options.use_headless_browser:
            if self._browser is None:
                raise BrowserLaunchError("Headless browser is not configured")
            return await self._browser.render(url, options.timeout_ms, user_agent)

        try:
            resp = await self._client.get(
                url,
                follow_redirects=True,
                timeout=options.timeout_ms / 1000,
                headers={
                    "User-Agent": user_agent,
                    "Accept": _ACCEPT,
                    "Accept-Language": _ACCEPT_LANGUAGE,
                },
            )
        except httpx.TimeoutException as exc:
            raise FetchError(f"Timed out fetching {url}", cause=FetchCause.timeout, url=url) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                f"Network error fetching {url}: {exc}", cause=FetchCause.network, url=url
            ) from exc

        if resp.status_code >= 400:
            raise FetchError(
                f"HTTP {resp.status_code}",
                cause=FetchCause.http_error,
                url=url,
                status_code=resp.status_code,
            )

        return FetchedPage(html=resp.text, status=resp.status_code, final_url=str(resp.url))

    async def _probe(self, url: str) -> int | None:
        """HEAD request; status code, or None when the host is unreachable."""
        try:
            resp = await self._client.head(url, follow_redirects=True, timeout=PROBE_TIMEOUT)
        except httpx.HTTPError:
            logger.debug("Probe failed for %s", url)
            return None
        return resp.status_code

    async def has_website(self, domain: str) -> bool:
        """HTTPS first, then plain HTTP."""
        for scheme in ("https", "http"):
            status = await self._probe(f"{scheme}://{domain}")
            if status is not None and _exists(status):
                return True
        return False

    async def can_scrape(self, url: str, user_agent: str | None = None) -> bool:
        """Check robots.txt. Missing or unreachable robots.txt allows scraping."""
        parsed = urlparse(url)
        robots_url = f"{parsed.scheme}://{parsed.netloc}/robots.txt"
        try:
            resp = await self._client.get(robots_url, follow_redirects=True, timeout=PROBE_TIMEOUT)
        except httpx.HTTPError:
            logger.debug("Could not fetch %s", robots_url)
            return True
        if resp.status_code >= 300:
            return True

        rp = RobotFileParser()
        rp.parse(resp.text.splitlines())
        return rp.can_fetch(user_agent or self._user_agent, url)
