from typing import Any

from fastapi import APIRouter, Body, HTTPException

from prospector.dependencies import DomainCheckDep
from prospector.schemas.domains import DomainCheckResponse

router = APIRouter()


@router.post("/domains/check", response_model=DomainCheckResponse, response_model_exclude_none=True)
async def check_domains(
    service: DomainCheckDep,
    payload: dict[str, Any] = Body(...),
) -> DomainCheckResponse:
    domains = payload.get("domains")
    if not isinstance(domains, list) or not all(isinstance(d, str) for d in domains):
        raise HTTPException(status_code=400, detail="domains array is required")

    results = await service.check_domains(domains)
    return DomainCheckResponse(results=results)
