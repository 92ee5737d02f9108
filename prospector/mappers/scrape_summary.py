from prospector.schemas.scraper import ScrapeResponse, ScrapeResult, ScrapeSummary


def build_scrape_response(results: list[ScrapeResult], urls_requested: int) -> ScrapeResponse:
    """Merge per-URL results into the endpoint response.

    Emails and phones are counted as unique independently: a contact with no
    email simply does not count toward ``unique_emails``.
    """
    contacts = [c for r in results for c in r.contacts]
    errors = [e for r in results for e in r.errors]

    unique_emails = {c.email for c in contacts if c.email}
    unique_phones = {c.phone for c in contacts if c.phone}

    return ScrapeResponse(
        success=True,
        contacts=contacts,
        summary=ScrapeSummary(
            urls_requested=urls_requested,
            pages_scraped=sum(r.pages_scraped for r in results),
            total_contacts=len(contacts),
            unique_emails=len(unique_emails),
            unique_phones=len(unique_phones),
            errors=len(errors),
        ),
        errors=errors or None,
    )
