import logging
from typing import Any
from urllib.parse import urlparse

from fastapi import APIRouter, HTTPException

from prospector.dependencies import ScraperDep, SettingsDep
from prospector.mappers.scrape_summary import build_scrape_response
from prospector.schemas.scraper import ScrapeOptions, ScrapeRequest, ScrapeResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _is_valid_url(url: Any) -> bool:
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@router.post("/scraper", response_model=ScrapeResponse, response_model_exclude_none=True)
async def scrape_urls(
    request: ScrapeRequest,
    service: ScraperDep,
    settings: SettingsDep,
) -> ScrapeResponse:
    if request.urls is not None:
        urls = request.urls
    else:
        urls = [request.url] if request.url else []

    if not urls:
        raise HTTPException(status_code=400, detail="url or urls is required")
    if len(urls) > settings.max_urls_per_request:
        raise HTTPException(
            status_code=400,
            detail=f"Maximum {settings.max_urls_per_request} URLs per request",
        )
    for url in urls:
        if not _is_valid_url(url):
            raise HTTPException(status_code=400, detail=f"Invalid URL: {url}")

    options = request.options or ScrapeOptions()

    # Only a single URL is expanded into its contact pages; batches are one pass per URL
    if len(urls) == 1:
        if request.include_contact_pages or options.follow_contact_links:
            results = [await service.scrape_contact_pages(urls[0], options)]
        else:
            results = [await service.scrape_page(urls[0], options)]
    else:
        by_url = await service.scrape_multiple_sites(urls, options)
        results = list(by_url.values())

    response = build_scrape_response(results, urls_requested=len(urls))
    logger.info(
        "Scraped %d URLs: %d contacts, %d errors",
        len(urls), response.summary.total_contacts, response.summary.errors,
    )
    return response
