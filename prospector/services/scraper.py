import asyncio
import logging

from prospector.exceptions.custom import ExtractionError, FetchError
from prospector.schemas.scraper import FetchedPage, ScrapedContact, ScrapeOptions, ScrapeResult
from prospector.services.batching import run_in_batches
from prospector.services.extractor import dedupe_contacts, extract_contacts, find_contact_page_urls
from prospector.services.fetcher import PageFetcher

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10


class ScraperService:
    def __init__(self, fetcher: PageFetcher, concurrency_limit: int = DEFAULT_CONCURRENCY):
        self._fetcher = fetcher
        self._concurrency_limit = concurrency_limit

    async def scrape_page(self, url: str, options: ScrapeOptions | None = None) -> ScrapeResult:
        """Fetch one page and extract its contacts.

        Fetch and extraction failures are reported in ``errors``.
        BrowserLaunchError propagates: without a browser the request cannot run.
        """
        options = options or ScrapeOptions()
        contacts, page, error = await self._scrape_one(url, options)
        return ScrapeResult(
            contacts=contacts,
            pages_scraped=1 if page is not None else 0,
            errors=[error] if error else [],
        )

    async def scrape_contact_pages(
        self, base_url: str, options: ScrapeOptions | None = None
    ) -> ScrapeResult:
        """Scrape a homepage plus the contact/about/team pages it links to."""
        options = options or ScrapeOptions()

        if options.respect_robots and not await self._fetcher.can_scrape(base_url, options.user_agent):
            logger.info("robots.txt disallows %s", base_url)
            return ScrapeResult(errors=["Blocked by robots.txt"])

        contacts, page, error = await self._scrape_one(base_url, options)
        if page is None or error:
            return ScrapeResult(pages_scraped=1 if page is not None else 0, errors=[error] if error else [])

        pages_scraped = 1
        errors: list[str] = []
        # Resolve links against where the homepage landed after redirects (acme.io -> www.acme.io)
        homepage_urls = {base_url.rstrip("/"), page.final_url.rstrip("/")}
        links = find_contact_page_urls(page.html, page.final_url, limit=options.max_contact_pages)
        links = [link for link in links if link.rstrip("/") not in homepage_urls]
        logger.info("Found %d contact page candidates on %s", len(links), base_url)

        for link in links:
            if options.delay_ms > 0:
                await asyncio.sleep(options.delay_ms / 1000)
            page_contacts, sub_page, page_error = await self._scrape_one(link, options)
            if sub_page is not None:
                pages_scraped += 1
            if page_error:
                errors.append(page_error)
            contacts.extend(page_contacts)

        return ScrapeResult(
            contacts=dedupe_contacts(contacts),
            pages_scraped=pages_scraped,
            errors=errors,
        )

    async def scrape_multiple_sites(
        self, urls: list[str], options: ScrapeOptions | None = None
    ) -> dict[str, ScrapeResult]:
        """Scrape each URL once, at most ``concurrency_limit`` at a time.

        A failure for one URL lands in that URL's ``errors`` and never aborts
        the others. Contact pages are not followed.
        """
        options = options or ScrapeOptions()
        outcomes = await run_in_batches(
            urls,
            lambda url: self.scrape_page(url, options),
            self._concurrency_limit,
        )

        results: dict[str, ScrapeResult] = {}
        for url, outcome in zip(urls, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Scrape failed for %s: %s", url, outcome)
                outcome = ScrapeResult(errors=[f"Failed to scrape {url}: {outcome}"])
            results[url] = outcome
        return results

    async def _scrape_one(
        self, url: str, options: ScrapeOptions
    ) -> tuple[list[ScrapedContact], FetchedPage | None, str | None]:
        """(contacts, fetched page, error message)."""
        try:
            page = await self._fetcher.fetch(url, options)
        except FetchError as exc:
            logger.warning("Failed to fetch %s: %s (cause=%s)", url, exc.message, exc.cause)
            return [], None, f"Failed to scrape {url}: {exc.message}"

        try:
            contacts = extract_contacts(page.html, url)
        except ExtractionError as exc:
            logger.warning("Extraction failed for %s: %s", url, exc.message)
            return [], page, f"Failed to extract contacts from {url}: {exc.message}"
        return contacts, page, None
