import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from prospector.config import Settings
from prospector.exceptions.custom import BrowserLaunchError, FetchError, SearchError
from prospector.exceptions.handlers import (
    browser_launch_error_handler,
    fetch_error_handler,
    search_error_handler,
    unhandled_error_handler,
)
from prospector.routers.domains import router as domains_router
from prospector.routers.scraper import router as scraper_router
from prospector.routers.search import router as search_router
from prospector.services.browser import resolve_browser_launcher
from prospector.services.domain_check import DomainCheckService
from prospector.services.fetcher import PageFetcher
from prospector.services.scraper import ScraperService
from prospector.services.web_search import WebSearchService


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    async with httpx.AsyncClient(timeout=30.0) as client:
        browser = resolve_browser_launcher(settings)
        fetcher = PageFetcher(client, browser=browser, user_agent=settings.user_agent)

        app.state.settings = settings
        app.state.scraper_service = ScraperService(
            fetcher, concurrency_limit=settings.scrape_concurrency
        )
        app.state.web_search_service = WebSearchService(client, settings.brave_search_api_key)
        app.state.domain_check_service = DomainCheckService(fetcher)

        yield


app = FastAPI(title="Prospector", lifespan=lifespan)

app.add_exception_handler(BrowserLaunchError, browser_launch_error_handler)
app.add_exception_handler(FetchError, fetch_error_handler)
app.add_exception_handler(SearchError, search_error_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

app.include_router(scraper_router)
app.include_router(search_router)
app.include_router(domains_router)
