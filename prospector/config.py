from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    brave_search_api_key: str = ""
    log_level: str = "INFO"
    user_agent: str = DEFAULT_USER_AGENT
    scrape_concurrency: int = 10
    max_urls_per_request: int = 10
    # Hosting flag: selects the bundled Chromium launcher instead of a local Chrome
    serverless: bool = Field(False, validation_alias=AliasChoices("serverless", "vercel"))
    chrome_path: str = ""
