"""Tests for ScraperService."""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest
import respx
from httpx import Response

from prospector.exceptions.custom import BrowserLaunchError, ExtractionError
from prospector.schemas.scraper import ScrapeOptions, ScrapeResult
from prospector.services.fetcher import PageFetcher
from prospector.services.scraper import ScraperService

NO_DELAY = ScrapeOptions(delay_ms=0, respect_robots=False)


@pytest.fixture
async def client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture
def scraper(client):
    return ScraperService(PageFetcher(client), concurrency_limit=10)


def _html(body: str) -> str:
    return f"<html><body>{body}</body></html>"


# --- scrape_page ---


@respx.mock
async def test_scrape_page_extracts_contacts(scraper):
    respx.get("https://acme.io").mock(
        return_value=Response(200, html=_html("<p>sales@acme.io (555) 123-4567</p>"))
    )
    result = await scraper.scrape_page("https://acme.io")

    assert result.pages_scraped == 1
    assert result.errors == []
    assert len(result.contacts) == 1
    assert result.contacts[0].email == "sales@acme.io"
    assert result.contacts[0].phone == "5551234567"


@respx.mock
async def test_scrape_page_fetch_error_recorded(scraper):
    respx.get("https://acme.io").mock(return_value=Response(500))
    result = await scraper.scrape_page("https://acme.io")

    assert result.contacts == []
    assert result.pages_scraped == 0
    assert result.errors == ["Failed to scrape https://acme.io: HTTP 500"]


@respx.mock
async def test_scrape_page_extraction_error_is_not_fatal(scraper):
    respx.get("https://acme.io").mock(return_value=Response(200, html="<p>x</p>"))
    with patch(
        "prospector.services.scraper.extract_contacts",
        side_effect=ExtractionError("bad markup", source_url="https://acme.io"),
    ):
        result = await scraper.scrape_page("https://acme.io")

    assert result.contacts == []
    assert result.pages_scraped == 1
    assert len(result.errors) == 1


async def test_scrape_page_browser_launch_error_propagates(scraper):
    with pytest.raises(BrowserLaunchError):
        await scraper.scrape_page("https://acme.io", ScrapeOptions(use_headless_browser=True))


# --- scrape_contact_pages ---


@respx.mock
async def test_contact_pages_followed_and_deduped(scraper):
    respx.get("https://acme.io/contact").mock(
        return_value=Response(200, html=_html("<p>sales@acme.io</p><p>hello@acme.io</p>"))
    )
    respx.get("https://acme.io/about").mock(
        return_value=Response(200, html=_html("<p>Founded 2019. Call 555-222-3333</p>"))
    )
    respx.get("https://acme.io").mock(
        return_value=Response(
            200,
            html=_html(
                '<p>sales@acme.io</p><a href="/about">About</a><a href="/contact">Contact</a>'
            ),
        )
    )

    result = await scraper.scrape_contact_pages("https://acme.io", NO_DELAY)

    assert result.pages_scraped == 3
    assert result.errors == []
    assert [c.email for c in result.contacts] == ["sales@acme.io", None, "hello@acme.io"]
    assert result.contacts[0].source_url == "https://acme.io"
    assert result.contacts[1].phone == "5552223333"


@respx.mock
async def test_contact_page_failure_recorded(scraper):
    respx.get("https://acme.io/contact").mock(side_effect=httpx.ConnectError("down"))
    respx.get("https://acme.io").mock(
        return_value=Response(200, html=_html('<p>a@acme.io</p><a href="/contact">Contact</a>'))
    )

    result = await scraper.scrape_contact_pages("https://acme.io", NO_DELAY)

    assert result.pages_scraped == 1
    assert [c.email for c in result.contacts] == ["a@acme.io"]
    assert len(result.errors) == 1
    assert "https://acme.io/contact" in result.errors[0]


@respx.mock
async def test_contact_pages_limited_by_max_contact_pages(scraper):
    links = "".join(f'<a href="/contact-{i}">Contact</a>' for i in range(5))
    sub_pages = respx.get(url__regex=r"https://acme\.io/contact-\d").mock(
        return_value=Response(200, html=_html("<p>nothing</p>"))
    )
    respx.get("https://acme.io").mock(return_value=Response(200, html=_html(links)))

    options = ScrapeOptions(delay_ms=0, respect_robots=False, max_contact_pages=2)
    result = await scraper.scrape_contact_pages("https://acme.io", options)

    assert sub_pages.call_count == 2
    assert result.pages_scraped == 3


@respx.mock
async def test_contact_pages_respect_robots(scraper):
    respx.get("https://acme.io/robots.txt").mock(
        return_value=Response(200, text="User-agent: *\nDisallow: /\n")
    )
    result = await scraper.scrape_contact_pages("https://acme.io/", ScrapeOptions(delay_ms=0))

    assert result.errors == ["Blocked by robots.txt"]
    assert result.pages_scraped == 0
    assert result.contacts == []


@respx.mock
async def test_contact_pages_delay_between_sub_pages(scraper):
    respx.get("https://acme.io/contact").mock(return_value=Response(200, html=_html("")))
    respx.get("https://acme.io/about").mock(return_value=Response(200, html=_html("")))
    respx.get("https://acme.io").mock(
        return_value=Response(200, html=_html('<a href="/about">About</a><a href="/contact">Contact</a>'))
    )

    with patch("prospector.services.scraper.asyncio.sleep", new=AsyncMock()) as sleep:
        await scraper.scrape_contact_pages(
            "https://acme.io", ScrapeOptions(delay_ms=250, respect_robots=False)
        )

    assert sleep.await_count == 2
    sleep.assert_awaited_with(0.25)


@respx.mock
async def test_contact_pages_homepage_failure(scraper):
    respx.get("https://acme.io").mock(return_value=Response(404))
    result = await scraper.scrape_contact_pages("https://acme.io", NO_DELAY)

    assert result.pages_scraped == 0
    assert result.contacts == []
    assert result.errors == ["Failed to scrape https://acme.io: HTTP 404"]


# --- scrape_multiple_sites ---


@respx.mock
async def test_multiple_sites_isolates_failures(scraper):
    respx.get("https://a.com").mock(side_effect=httpx.ConnectError("refused"))
    respx.get("https://b.com").mock(return_value=Response(200, html=_html("<p>team@b.com</p>")))
    respx.get("https://c.com").mock(return_value=Response(200, html=_html("<p>555-444-3333</p>")))

    results = await scraper.scrape_multiple_sites(
        ["https://a.com", "https://b.com", "https://c.com"], NO_DELAY
    )

    assert list(results) == ["https://a.com", "https://b.com", "https://c.com"]
    assert results["https://a.com"].errors
    assert results["https://a.com"].contacts == []
    assert results["https://b.com"].contacts[0].email == "team@b.com"
    assert results["https://c.com"].contacts[0].phone == "5554443333"


@respx.mock
async def test_multiple_sites_do_not_follow_contact_pages(scraper):
    respx.get("https://a.com").mock(
        return_value=Response(200, html=_html('<a href="/contact">Contact</a>'))
    )
    respx.get("https://b.com").mock(
        return_value=Response(200, html=_html('<a href="/contact">Contact</a>'))
    )

    results = await scraper.scrape_multiple_sites(
        ["https://a.com", "https://b.com"],
        ScrapeOptions(follow_contact_links=True, delay_ms=0),
    )

    assert respx.calls.call_count == 2
    assert all(r.pages_scraped == 1 for r in results.values())


async def test_multiple_sites_concurrency_rounds():
    in_flight = 0
    peak = 0

    async def fake_scrape_page(url, options):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.001)
        in_flight -= 1
        return ScrapeResult(pages_scraped=1)

    scraper = ScraperService(AsyncMock(), concurrency_limit=3)
    with patch.object(scraper, "scrape_page", side_effect=fake_scrape_page) as scrape_page:
        urls = [f"https://site{i}.com" for i in range(7)]
        results = await scraper.scrape_multiple_sites(urls)

    assert scrape_page.call_count == 7
    assert peak <= 3
    assert len(results) == 7


async def test_multiple_sites_unexpected_error_captured():
    scraper = ScraperService(AsyncMock(), concurrency_limit=10)
    with patch.object(scraper, "scrape_page", side_effect=BrowserLaunchError("Chrome not found")):
        results = await scraper.scrape_multiple_sites(["https://a.com", "https://b.com"])

    assert results["https://a.com"].errors == ["Failed to scrape https://a.com: Chrome not found"]
    assert results["https://b.com"].errors


@respx.mock
async def test_contact_pages_follow_redirected_homepage(scraper):
    respx.get("https://www.acme.io/contact").mock(
        return_value=Response(200, html=_html("<p>hello@acme.io</p>"))
    )
    respx.get("https://www.acme.io/").mock(
        return_value=Response(
            200,
            html=_html(
                '<a href="https://www.acme.io/">About us</a>'
                '<a href="https://www.acme.io/contact">Contact</a>'
            ),
        )
    )
    respx.get("https://acme.io").mock(
        return_value=Response(301, headers={"Location": "https://www.acme.io/"})
    )

    result = await scraper.scrape_contact_pages("https://acme.io", NO_DELAY)

    assert result.pages_scraped == 2
    assert [c.email for c in result.contacts] == ["hello@acme.io"]
    assert result.errors == []
