from prospector.mappers.scrape_summary import build_scrape_response
from prospector.schemas.scraper import ScrapedContact, ScrapeResult


def _contact(email=None, phone=None, url="https://acme.io"):
    return ScrapedContact(email=email, phone=phone, source_url=url)


def test_counts_emails_and_phones_independently():
    results = [
        ScrapeResult(
            contacts=[
                _contact("sales@acme.io", "5551112222"),
                _contact("sales@acme.io", "5553334444"),
            ],
            pages_scraped=2,
        ),
        ScrapeResult(contacts=[_contact(phone="5551112222", url="https://b.com")], pages_scraped=1),
    ]

    response = build_scrape_response(results, urls_requested=2)

    assert response.success is True
    assert len(response.contacts) == 3
    assert response.summary.urls_requested == 2
    assert response.summary.pages_scraped == 3
    assert response.summary.total_contacts == 3
    assert response.summary.unique_emails == 1
    assert response.summary.unique_phones == 2
    assert response.summary.errors == 0
    assert response.errors is None


def test_errors_concatenated_in_order():
    results = [
        ScrapeResult(errors=["Failed to scrape https://a.com: HTTP 500"]),
        ScrapeResult(contacts=[_contact("hi@b.com", url="https://b.com")], pages_scraped=1),
        ScrapeResult(errors=["Failed to scrape https://c.com: timed out"]),
    ]

    response = build_scrape_response(results, urls_requested=3)

    assert response.errors == [
        "Failed to scrape https://a.com: HTTP 500",
        "Failed to scrape https://c.com: timed out",
    ]
    assert response.summary.errors == 2
    assert response.summary.pages_scraped == 1


def test_empty_results():
    response = build_scrape_response([], urls_requested=0)

    assert response.contacts == []
    assert response.summary.total_contacts == 0
    assert response.errors is None
