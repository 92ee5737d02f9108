from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class ScrapedContact(BaseModel):
    email: str | None = None  # lower-cased
    phone: str | None = None  # digits only, US 10/11 digits
    name: str | None = None
    title: str | None = None
    company: str | None = None
    social_links: dict[str, str] = {}  # platform -> profile URL
    source_url: str
    scraped_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ScrapeOptions(BaseModel):
    timeout_ms: int = 15000
    follow_contact_links: bool = False
    max_contact_pages: int = 5
    user_agent: str | None = None  # falls back to the configured default
    use_headless_browser: bool = False
    delay_ms: int = 500  # pause between contact sub-pages
    respect_robots: bool = True


class ScrapeResult(BaseModel):
    contacts: list[ScrapedContact] = []
    pages_scraped: int = 0
    errors: list[str] = []


class FetchedPage(BaseModel):
    html: str
    status: int
    final_url: str


class ScrapeRequest(BaseModel):
    # Entries are checked by the endpoint so malformed ones get a 400, not a 422
    url: Any = None
    urls: list[Any] | None = None
    options: ScrapeOptions | None = None
    include_contact_pages: bool = False


class ScrapeSummary(BaseModel):
    urls_requested: int
    pages_scraped: int
    total_contacts: int
    unique_emails: int
    unique_phones: int
    errors: int


class ScrapeResponse(BaseModel):
    success: bool
    contacts: list[ScrapedContact]
    summary: ScrapeSummary
    errors: list[str] | None = None
