import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException
from pydantic import ValidationError

from prospector.dependencies import WebSearchDep
from prospector.exceptions.custom import SearchError
from prospector.schemas.search import (
    GetQueriesRequest,
    GetQueriesResponse,
    RunQueryRequest,
    RunQueryResponse,
    SearchStrategy,
)
from prospector.services.web_search import QUERY_GENERATORS, WebSearchService, filter_results

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_QUERIES = 6
EXTRA_RESULTS = 5  # headroom for results dropped by filtering
SEARCH_TIMEOUT = 30.0


def _get_queries(payload: dict[str, Any]) -> GetQueriesResponse:
    try:
        request = GetQueriesRequest.model_validate(payload)
    except ValidationError:
        raise HTTPException(status_code=400, detail="strategy and domainName are required")
    if not request.strategy or not request.domainName:
        raise HTTPException(status_code=400, detail="strategy and domainName are required")

    try:
        strategy = SearchStrategy(request.strategy)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid strategy")

    queries = QUERY_GENERATORS[strategy](request.domainName)
    return GetQueriesResponse(queries=queries[:MAX_QUERIES])


async def _run_query(payload: dict[str, Any], service: WebSearchService) -> RunQueryResponse:
    try:
        request = RunQueryRequest.model_validate(payload)
    except ValidationError as exc:
        fields = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        if "query" in fields:
            raise HTTPException(status_code=400, detail="query is required")
        raise HTTPException(status_code=400, detail="maxResults must be a positive integer")
    if not request.query:
        raise HTTPException(status_code=400, detail="query is required")

    try:
        results = await service.search(
            request.query,
            max_results=request.maxResults + EXTRA_RESULTS,
            timeout=SEARCH_TIMEOUT,
        )
    except SearchError as exc:
        logger.warning("Search failed for query %r: %s (kind=%s)", request.query, exc.message, exc.kind)
        return RunQueryResponse(results=[], query=request.query, resultCount=0, error=exc.message)

    filtered = filter_results(results)[:request.maxResults]
    return RunQueryResponse(results=filtered, query=request.query, resultCount=len(filtered))


@router.post(
    "/search",
    response_model=GetQueriesResponse | RunQueryResponse,
    response_model_exclude_none=True,
)
async def search(
    service: WebSearchDep,
    payload: dict[str, Any] = Body(...),
) -> GetQueriesResponse | RunQueryResponse:
    action = payload.get("action")
    if action == "get-queries":
        return _get_queries(payload)
    if action == "run-query":
        return await _run_query(payload, service)
    raise HTTPException(status_code=400, detail="Invalid action. Use 'get-queries' or 'run-query'")
