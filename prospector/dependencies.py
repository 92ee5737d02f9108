from typing import Annotated

from fastapi import Depends, Request

from prospector.config import Settings
from prospector.services.domain_check import DomainCheckService
from prospector.services.scraper import ScraperService
from prospector.services.web_search import WebSearchService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_scraper_service(request: Request) -> ScraperService:
    return request.app.state.scraper_service


def get_web_search_service(request: Request) -> WebSearchService:
    return request.app.state.web_search_service


def get_domain_check_service(request: Request) -> DomainCheckService:
    return request.app.state.domain_check_service


SettingsDep = Annotated[Settings, Depends(get_settings)]
ScraperDep = Annotated[ScraperService, Depends(get_scraper_service)]
WebSearchDep = Annotated[WebSearchService, Depends(get_web_search_service)]
DomainCheckDep = Annotated[DomainCheckService, Depends(get_domain_check_service)]
