import pytest

from chirper.core.database import database
from chirper.seed import CHIRPS, DEFAULT_PASSWORD, LIKES, PROFILES, seed


@pytest.mark.asyncio
async def test_seed_loads_demo_data(client):
    async with database.transaction() as session:
        counts = await seed(session)

    assert counts == {"profiles": len(PROFILES), "chirps": len(CHIRPS), "likes": len(LIKES)}

    feed = await client.get("/api/chirps", params={"limit": 100})
    assert len(feed.json()["data"]) == len(CHIRPS)
    assert sum(c["like_count"] for c in feed.json()["data"]) == len(LIKES)

    login = await client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD}
    )
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_seed_is_repeatable(client):
    for _ in range(2):
        async with database.transaction() as session:
            await seed(session)

    feed = await client.get("/api/chirps", params={"limit": 100})
    assert len(feed.json()["data"]) == len(CHIRPS)
