"""Headless Chromium rendering for JS-heavy pages.

Which browser binary to use is decided once at startup by
``resolve_browser_launcher``. Every ``render`` call launches its own browser
and closes it before returning, whatever happens during navigation.
"""

import logging
import os

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from prospector.config import Settings
from prospector.exceptions.custom import BrowserLaunchError, FetchCause, FetchError
from prospector.schemas.scraper import FetchedPage

logger = logging.getLogger(__name__)

_VIEWPORT = {"width": 1920, "height": 1080}

LOCAL_CHROME_PATHS = (
    r"C:\Program Files\Google\Chrome\Application\chrome.exe",
    r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/usr/bin/google-chrome",
    "/usr/bin/chromium-browser",
    "/usr/bin/chromium",
)


def find_local_chrome(chrome_path: str = "") -> str | None:
    """CHROME_PATH first, then well-known install locations."""
    candidates = [chrome_path] if chrome_path else []
    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        candidates.append(os.path.join(local_app_data, "Google", "Chrome", "Application", "chrome.exe"))
    candidates.extend(LOCAL_CHROME_PATHS)

    for path in candidates:
        if os.path.exists(path):
            return path
    return None


class BrowserLauncher:
    """Base strategy: launch arguments plus an optional executable."""

    name = "base"
    launch_args: tuple[str, ...] = ()

    def __init__(self, executable_path: str | None = None):
        self.executable_path = executable_path

    def _launch_options(self) -> dict:
        options: dict = {"headless": True, "args": list(self.launch_args)}
        if self.executable_path:
            options["executable_path"] = self.executable_path
        return options

    async def render(self, url: str, timeout_ms: int, user_agent: str) -> FetchedPage:
        async with async_playwright() as p:
            try:
                browser = await p.chromium.launch(**self._launch_options())
            except PlaywrightError as exc:
                raise BrowserLaunchError(f"Could not launch {self.name} browser: {exc}") from exc

            try:
                context = await browser.new_context(user_agent=user_agent, viewport=_VIEWPORT)
                page = await context.new_page()
                response = await page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")
                html = await page.content()
                final_url = page.url
            except PlaywrightTimeoutError as exc:
                raise FetchError(
                    f"Timed out rendering {url}", cause=FetchCause.timeout, url=url
                ) from exc
            except PlaywrightError as exc:
                raise FetchError(
                    f"Failed to render {url}: {exc}", cause=FetchCause.network, url=url
                ) from exc
            finally:
                await browser.close()

        status = response.status if response is not None else 200
        if status >= 400:
            raise FetchError(
                f"HTTP {status}", cause=FetchCause.http_error, url=url, status_code=status
            )
        return FetchedPage(html=html, status=status, final_url=final_url or url)


class BundledChromiumLauncher(BrowserLauncher):
    """Playwright's bundled Chromium with flags for serverless hosts."""

    name = "bundled-chromium"
    launch_args = (
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--single-process",
        "--no-zygote",
    )


class LocalChromeLauncher(BrowserLauncher):
    """A Chrome install discovered on the host."""

    name = "local-chrome"
    launch_args = (
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
    )

    async def render(self, url: str, timeout_ms: int, user_agent: str) -> FetchedPage:
        if not self.executable_path:
            raise BrowserLaunchError(
                "Chrome not found. Install Google Chrome or set the CHROME_PATH environment variable."
            )
        return await super().render(url, timeout_ms, user_agent)


def resolve_browser_launcher(settings: Settings) -> BrowserLauncher:
    if settings.serverless:
        logger.info("Headless rendering uses bundled Chromium")
        return BundledChromiumLauncher()

    executable_path = find_local_chrome(settings.chrome_path)
    if executable_path:
        logger.info("Headless rendering uses local Chrome at %s", executable_path)
    else:
        logger.warning("No local Chrome found; headless rendering requests will fail")
    return LocalChromeLauncher(executable_path)
