import logging
import re
from collections.abc import Callable
from urllib.parse import urlparse

import httpx

from prospector.exceptions.custom import SearchError, SearchErrorKind
from prospector.schemas.search import SearchResult, SearchStrategy

logger = logging.getLogger(__name__)

SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"
MAX_RESULTS_PER_REQUEST = 20  # Brave API limit

_CAMEL_RE = re.compile(r"([a-z])([A-Z])")

# Sites that never carry useful sales contacts
BLOCKED_DOMAINS = (
    # Social media
    "facebook.com", "twitter.com", "x.com", "linkedin.com", "instagram.com",
    "pinterest.com", "reddit.com", "tiktok.com", "threads.net",
    # News and media
    "cnn.com", "bbc.com", "nytimes.com", "washingtonpost.com", "theguardian.com",
    "reuters.com", "apnews.com", "bloomberg.com", "forbes.com", "businessinsider.com",
    "techcrunch.com", "theverge.com", "wired.com", "arstechnica.com", "engadget.com",
    "mashable.com", "venturebeat.com", "zdnet.com", "cnet.com", "gizmodo.com",
    "inc.com", "fastcompany.com", "fortune.com", "huffpost.com", "huffingtonpost.com",
    "news.yahoo.com", "news.google.com", "msn.com", "foxnews.com", "foxweather.com",
    "weather.com", "interestingengineering.com", "financialcontent.com",
    "newsfilecorp.com", "prnewswire.com", "globenewswire.com", "businesswire.com",
    # Research and academic
    "wikipedia.org", "arxiv.org", "nature.com", "science.org", "ieee.org", "acm.org",
    "researchgate.net", "academia.edu", "scholar.google.com", "deepmind.google",
    "research.google", "ai.google", "research.microsoft.com", "research.facebook.com",
    "openai.com",
    # E-commerce and retail
    "amazon.com", "ebay.com", "walmart.com", "target.com", "barnesandnoble.com",
    "bestbuy.com", "newegg.com", "aliexpress.com", "alibaba.com", "etsy.com", "shopify.com",
    # Job boards and reviews
    "glassdoor.com", "indeed.com", "monster.com", "ziprecruiter.com", "yelp.com",
    "trustpilot.com", "bbb.org", "craigslist.org",
    # Developer and tech
    "github.com", "gitlab.com", "bitbucket.org", "stackoverflow.com", "stackexchange.com",
    "npmjs.com", "pypi.org", "docs.google.com", "drive.google.com",
    "colab.research.google.com",
    # Content platforms
    "medium.com", "substack.com", "quora.com", "wordpress.com", "blogger.com",
    "tumblr.com", "youtube.com", "vimeo.com",
    # Directories and aggregators
    "crunchbase.com", "pitchbook.com", "owler.com", "zoominfo.com", "dnb.com",
    "hoovers.com", "manta.com", "yellowpages.com", "whitepages.com", "seedtable.com",
    "tracxn.com", "ventureradar.com", "startus-insights.com", "climatesort.com",
    "ai-startups.pro", "reportsanddata.com", "researchandmarkets.com",
    # Podcasts and media hosting
    "spotify.com", "apple.com", "soundcloud.com", "anchor.fm",
)

BLOCKED_TLDS = ("gov", "edu")


def _split_words(domain_name: str) -> str:
    return _CAMEL_RE.sub(r"\1 \2", domain_name).lower()


def _keyword_phrase(words: str, fallback: str) -> str:
    long_words = [w for w in words.split() if len(w) > 2]
    return " ".join(long_words) if long_words else fallback


def generate_upgrade_search_queries(domain_name: str) -> list[str]:
    """Queries for companies in the space that settled for a weaker domain."""
    words = _split_words(domain_name)
    keyword_phrase = _keyword_phrase(words, words.strip())

    queries = [
        f'"get{domain_name}" OR "try{domain_name}" OR "use{domain_name}"',
        f'"{domain_name}.io" OR "{domain_name}.co" OR "{domain_name}.ai"',
    ]
    if " " in words:
        hyphenated = "-".join(words.split())
        queries.append(f'"{hyphenated}" site:.com')
    if keyword_phrase:
        queries.extend([
            f'{keyword_phrase} company -"{domain_name}.com"',
            f"{keyword_phrase} startup website",
            f"{keyword_phrase} brand new company",
        ])
    return queries


def generate_seo_search_queries(domain_name: str) -> list[str]:
    """Queries surfacing companies that bid on the domain's keywords."""
    keyword_phrase = _keyword_phrase(_split_words(domain_name), domain_name.lower())
    return [
        keyword_phrase,
        f"{keyword_phrase} software",
        f"{keyword_phrase} platform",
        f"{keyword_phrase} company",
        f"{keyword_phrase} startup",
        f"best {keyword_phrase}",
    ]


def generate_startup_search_queries(domain_name: str) -> list[str]:
    keyword_phrase = _keyword_phrase(_split_words(domain_name), domain_name.lower())
    return [
        f"{keyword_phrase} startup",
        f"{keyword_phrase} site:producthunt.com",
        f"{keyword_phrase} site:crunchbase.com",
        f'{keyword_phrase} "series a" OR "seed funding"',
        f'{keyword_phrase} YC OR "Y Combinator"',
    ]


QUERY_GENERATORS: dict[SearchStrategy, Callable[[str], list[str]]] = {
    SearchStrategy.domain_upgrade: generate_upgrade_search_queries,
    SearchStrategy.seo_bidders: generate_seo_search_queries,
    SearchStrategy.emerging_startups: generate_startup_search_queries,
}


def _is_blocked(domain: str) -> bool:
    domain = domain.lower()
    if domain.rsplit(".", 1)[-1] in BLOCKED_TLDS:
        return True
    return any(domain == blocked or domain.endswith("." + blocked) for blocked in BLOCKED_DOMAINS)


def filter_results(results: list[SearchResult]) -> list[SearchResult]:
    """Drop social, news, directory and other low-value domains. Order is kept."""
    return [r for r in results if not _is_blocked(r.domain)]


class WebSearchService:
    def __init__(self, client: httpx.AsyncClient, api_key: str):
        self._client = client
        self._api_key = api_key

    async def search(
        self, query: str, max_results: int = 20, timeout: float = 30.0
    ) -> list[SearchResult]:
        if not self._api_key:
            raise SearchError(
                "BRAVE_SEARCH_API_KEY is not configured", kind=SearchErrorKind.config
            )

        headers = {
            "X-Subscription-Token": self._api_key,
            "Accept": "application/json",
        }
        params = {"q": query, "count": str(min(max_results, MAX_RESULTS_PER_REQUEST))}

        try:
            resp = await self._client.get(SEARCH_URL, params=params, headers=headers, timeout=timeout)
        except httpx.TimeoutException as exc:
            raise SearchError(f"Search timed out for {query!r}", kind=SearchErrorKind.timeout) from exc
        except httpx.HTTPError as exc:
            raise SearchError(f"Search request failed: {exc}", kind=SearchErrorKind.network) from exc

        if resp.status_code >= 400:
            raise SearchError(
                f"Brave Search API failed: {resp.status_code} - {resp.text}",
                kind=SearchErrorKind.status,
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise SearchError("Malformed search response", kind=SearchErrorKind.parse) from exc
        if not isinstance(data, dict):
            raise SearchError("Malformed search response", kind=SearchErrorKind.parse)

        results: list[SearchResult] = []
        for item in (data.get("web") or {}).get("results", []):
            url = item.get("url") or ""
            host = urlparse(url).hostname
            if not host:
                continue
            results.append(SearchResult(
                title=item.get("title") or "",
                url=url,
                snippet=item.get("description") or "",
                domain=host.removeprefix("www."),
            ))

        logger.info("Search %r returned %d results", query, len(results))
        return results[:max_results]
