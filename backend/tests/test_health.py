"""Test health, status and stats endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["service"] == "files-manager"
    assert "version" in data


@pytest.mark.asyncio
async def test_ping(client: AsyncClient):
    resp = await client.get("/ping")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_status_both_alive(client: AsyncClient):
    resp = await client.get("/status")
    assert resp.status_code == 200
    assert resp.json() == {"redis": True, "db": True}


@pytest.mark.asyncio
async def test_status_reports_outages(client: AsyncClient, fake_redis, metadata_store):
    fake_redis.alive = False
    metadata_store.alive = False

    resp = await client.get("/status")
    assert resp.status_code == 200
    assert resp.json() == {"redis": False, "db": False}


@pytest.mark.asyncio
async def test_stats_counts_users_and_files(client: AsyncClient, metadata_store, auth_headers):
    await metadata_store.users.insert_one({"email": "bob@example.com"})
    await client.post("/files", json={"name": "docs", "type": "folder"}, headers=auth_headers)
    await client.post("/files", json={"name": "pics", "type": "folder"}, headers=auth_headers)

    resp = await client.get("/stats")
    assert resp.status_code == 200
    assert resp.json() == {"users": 1, "files": 2}
