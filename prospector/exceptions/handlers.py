import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import BrowserLaunchError, FetchError, SearchError

logger = logging.getLogger(__name__)


async def browser_launch_error_handler(_request: Request, exc: BrowserLaunchError) -> JSONResponse:
    logger.error("Browser launch failed: %s", exc.message)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Browser launch failed: {exc.message}"},
    )


async def fetch_error_handler(_request: Request, exc: FetchError) -> JSONResponse:
    logger.error("Fetch error for %s: %s (cause=%s)", exc.url, exc.message, exc.cause)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Fetch error: {exc.message}"},
    )


async def search_error_handler(_request: Request, exc: SearchError) -> JSONResponse:
    logger.error("Search error: %s (kind=%s, status=%s)", exc.message, exc.kind, exc.status_code)
    return JSONResponse(
        status_code=502,
        content={"detail": f"Search error: {exc.message}"},
    )


async def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc) or "Internal server error"},
    )
