from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class SearchStrategy(StrEnum):
    domain_upgrade = "domain-upgrade"
    seo_bidders = "seo-bidders"
    emerging_startups = "emerging-startups"


class SearchResult(BaseModel):
    title: str
    url: str
    snippet: str = ""
    domain: str  # host without leading "www."


class GetQueriesRequest(BaseModel):
    action: Literal["get-queries"]
    strategy: str
    domainName: str


class RunQueryRequest(BaseModel):
    action: Literal["run-query"]
    query: str
    maxResults: int = Field(10, ge=1)


class GetQueriesResponse(BaseModel):
    queries: list[str]


class RunQueryResponse(BaseModel):
    results: list[SearchResult]
    query: str
    resultCount: int
    error: str | None = None
