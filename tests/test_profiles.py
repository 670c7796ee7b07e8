import pytest

from .conftest import auth_headers


@pytest.mark.asyncio
async def test_public_profile_hides_email(client, register):
    alice = await register("alice_dev")
    profile_id = alice["profile"]["id"]

    by_id = await client.get(f"/api/profiles/{profile_id}")
    by_username = await client.get("/api/profiles/username/alice_dev")

    assert by_id.status_code == 200
    assert by_id.json()["data"]["username"] == "alice_dev"
    assert "email" not in by_id.json()["data"]
    assert by_username.json()["data"]["id"] == profile_id
    assert "email" not in by_username.json()["data"]


@pytest.mark.asyncio
async def test_missing_profile_returns_404(client):
    assert (await client.get("/api/profiles/username/ghost")).status_code == 404
    assert (await client.get("/api/profiles/0192f0c8-0000-7000-8000-000000000000")).status_code == 404


@pytest.mark.asyncio
async def test_my_profile_includes_email(client, register):
    alice = await register("alice_dev", "alice@example.com")

    response = await client.get("/api/profiles/me", headers=auth_headers(alice))

    assert response.status_code == 200
    assert response.json()["data"]["email"] == "alice@example.com"


@pytest.mark.asyncio
async def test_update_my_profile(client, register):
    alice = await register("alice_dev")

    response = await client.put(
        "/api/profiles/me",
        json={"display_name": "Alice D.", "bio": "Coffee first"},
        headers=auth_headers(alice),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["display_name"] == "Alice D."
    assert data["bio"] == "Coffee first"
    assert data["username"] == "alice_dev"


@pytest.mark.asyncio
async def test_update_username_conflict(client, register):
    await register("alice_dev")
    bob = await register("bob_codes")

    response = await client.put(
        "/api/profiles/me", json={"username": "alice_dev"}, headers=auth_headers(bob)
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_update_rejects_bad_avatar_url(client, register):
    alice = await register("alice_dev")

    response = await client.put(
        "/api/profiles/me", json={"avatar_url": "not a url"}, headers=auth_headers(alice)
    )

    assert response.status_code == 400
    assert response.json()["detail"]["errors"][0]["field"] == "avatar_url"
