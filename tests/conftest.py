import os

os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("DB_DSN", "sqlite+aiosqlite:///./chirper-test.db")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from chirper.core.database import database  # noqa: E402
from chirper.main import app  # noqa: E402

DEFAULT_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def client(tmp_path):
    """每个测试一个独立的 SQLite 库"""
    await database.connect(f"sqlite+aiosqlite:///{tmp_path / 'chirper.db'}")
    await database.create_all()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    await database.disconnect()


@pytest.fixture
def register(client):
    """注册并返回 data（令牌 + profile）"""

    async def _register(username: str, email: str | None = None, password: str = DEFAULT_PASSWORD) -> dict:
        response = await client.post(
            "/api/auth/register",
            json={
                "username": username,
                "display_name": username.title(),
                "email": email or f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _register


def auth_headers(tokens: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {tokens['access_token']}"}
