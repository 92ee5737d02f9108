from pydantic import BaseModel


class DomainCheckResult(BaseModel):
    domain: str
    isActive: bool
    hasWebsite: bool
    error: str | None = None


class DomainCheckResponse(BaseModel):
    results: list[DomainCheckResult]
