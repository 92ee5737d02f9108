import httpx
import pytest
from httpx import ASGITransport


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("BRAVE_SEARCH_API_KEY", "test-brave-key")
    monkeypatch.setenv("SERVERLESS", "false")
    monkeypatch.setenv("CHROME_PATH", "")
    monkeypatch.delenv("VERCEL", raising=False)


@pytest.fixture
async def client(mock_env):
    from prospector.main import app, lifespan

    async with lifespan(app):
        async with httpx.AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
        ) as c:
            yield c
