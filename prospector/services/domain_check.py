import logging

import dns.asyncresolver
import dns.exception

from prospector.schemas.domains import DomainCheckResult
from prospector.services.batching import run_in_batches
from prospector.services.fetcher import PageFetcher

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 50
CONCURRENCY_LIMIT = 10
DNS_TIMEOUT = 5.0

_RECORD_TYPES = ("A", "AAAA", "CNAME")


class DomainCheckService:
    def __init__(self, fetcher: PageFetcher, concurrency_limit: int = CONCURRENCY_LIMIT):
        self._fetcher = fetcher
        self._concurrency_limit = concurrency_limit

    async def has_dns(self, domain: str) -> bool:
        """Any A, AAAA or CNAME record."""
        for record_type in _RECORD_TYPES:
            try:
                await dns.asyncresolver.resolve(domain, record_type, lifetime=DNS_TIMEOUT)
                return True
            except dns.exception.DNSException:
                continue
        return False

    async def check_domain(self, domain: str) -> DomainCheckResult:
        if not await self.has_dns(domain):
            return DomainCheckResult(domain=domain, isActive=False, hasWebsite=False)

        has_website = await self._fetcher.has_website(domain)
        return DomainCheckResult(domain=domain, isActive=True, hasWebsite=has_website)

    async def check_domains(self, domains: list[str]) -> list[DomainCheckResult]:
        """Check up to MAX_BATCH_SIZE domains; extra domains are ignored."""
        to_check = domains[:MAX_BATCH_SIZE]
        outcomes = await run_in_batches(to_check, self.check_domain, self._concurrency_limit)

        results: list[DomainCheckResult] = []
        for domain, outcome in zip(to_check, outcomes):
            if isinstance(outcome, BaseException):
                logger.error("Domain check failed for %s: %s", domain, outcome)
                outcome = DomainCheckResult(
                    domain=domain, isActive=False, hasWebsite=False, error=str(outcome) or "Unknown error"
                )
            results.append(outcome)
        return results
