"""조회 API 테스트.

Lookup tests — stores, materials, buildings and rooms, worker picker and
worker availability.
"""

import pytest_asyncio
from httpx import AsyncClient

from app.models.catalog import Building, Room
from tests.conftest import auth_header


@pytest_asyncio.fixture
async def buildings(db):
    """건물 2동 — Palm Residence (호실 역순 입력), Marina Tower."""
    palm = Building(name="Palm Residence", rooms=[Room(room_number=n) for n in ("201", "102", "101")])
    marina = Building(name="Marina Tower", rooms=[Room(room_number="1204")])
    db.add_all([palm, marina])
    await db.flush()
    return {"palm": palm.id, "marina": marina.id}


class TestCatalog:
    """매장/자재/작업자 목록 테스트."""

    async def test_stores_and_materials(self, client: AsyncClient, db, worker_a_token, store, materials):
        """비활성 항목은 숨김."""
        materials[2].active = False
        await db.flush()

        res = await client.get("/api/lookups/stores", headers=auth_header(worker_a_token))
        assert res.json() == [{"id": store.id, "name": "Main Warehouse"}]

        res = await client.get("/api/lookups/materials", headers=auth_header(worker_a_token))
        assert [m["name"] for m in res.json()] == ["Pipe fitting", "Sealant"]

    async def test_requires_login(self, client: AsyncClient):
        res = await client.get("/api/lookups/stores")
        assert res.status_code == 401

    async def test_workers_for_supervisor(
        self, client: AsyncClient, supervisor_token, worker_a, worker_b, tenant
    ):
        res = await client.get("/api/users/workers", headers=auth_header(supervisor_token))
        assert res.status_code == 200
        assert [w["email"] for w in res.json()] == ["alice@test.com", "bob@test.com"]

    async def test_workers_hidden_from_workers(self, client: AsyncClient, worker_a_token):
        res = await client.get("/api/users/workers", headers=auth_header(worker_a_token))
        assert res.status_code == 403


class TestBuildingsAndRooms:
    """건물/호실 목록 테스트."""

    async def test_buildings_by_name(self, client: AsyncClient, tenant_token, buildings):
        res = await client.get("/api/buildings", headers=auth_header(tenant_token))
        assert res.status_code == 200
        assert [b["name"] for b in res.json()] == ["Marina Tower", "Palm Residence"]

    async def test_rooms_by_number(self, client: AsyncClient, tenant_token, buildings):
        """건물의 호실만, 호실 번호순."""
        res = await client.get(
            "/api/rooms", params={"buildingId": buildings["palm"]}, headers=auth_header(tenant_token)
        )
        assert res.status_code == 200
        rows = res.json()
        assert [r["room_number"] for r in rows] == ["101", "102", "201"]
        assert {r["building_id"] for r in rows} == {buildings["palm"]}

    async def test_rooms_unknown_building(self, client: AsyncClient, tenant_token, buildings):
        res = await client.get("/api/rooms", params={"buildingId": 9999}, headers=auth_header(tenant_token))
        assert res.json() == []

    async def test_rooms_need_building_id(self, client: AsyncClient, tenant_token):
        res = await client.get("/api/rooms", headers=auth_header(tenant_token))
        assert res.status_code == 400
        assert "Building ID is required" in res.json()["detail"]

    async def test_requires_login(self, client: AsyncClient):
        res = await client.get("/api/buildings")
        assert res.status_code == 401


class TestAvailability:
    """작업자 가용성 테스트."""

    async def test_scheduled_and_sessions(
        self, client: AsyncClient, supervisor_token, worker_a_token, complaint, worker_a, worker_b
    ):
        """예정 배정과 기록된 세션이 모두 바쁜 시간으로 표시."""
        res = await client.post(
            f"/api/complaints/{complaint.id}/assign",
            json={
                "worker_ids": [str(worker_a.id)],
                "leader_id": str(worker_a.id),
                "scheduled_start": "2026-03-01T08:00:00Z",
                "scheduled_end": "2026-03-01T12:00:00Z",
            },
            headers=auth_header(supervisor_token),
        )
        assignment_id = res.json()[0]["id"]
        await client.put(
            f"/api/assignments/{assignment_id}/detail",
            json={"time_in": "2026-03-01T09:00:00Z", "time_out": "2026-03-01T11:00:00Z"},
            headers=auth_header(worker_a_token),
        )
        await client.patch(
            f"/api/assignments/{assignment_id}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )

        res = await client.get(
            "/api/workers/availability",
            params={"day": "2026-03-01", "worker_ids": f"{worker_a.id},{worker_b.id}"},
            headers=auth_header(supervisor_token),
        )
        assert res.status_code == 200
        busy = res.json()["busy"]
        assert [w["source"] for w in busy] == ["scheduled", "session"]
        assert all(w["worker_id"] == str(worker_a.id) for w in busy)
        assert all(w["complaint_id"] == complaint.id for w in busy)

        res = await client.get(
            "/api/workers/availability",
            params={"day": "2026-03-05", "worker_ids": str(worker_a.id)},
            headers=auth_header(supervisor_token),
        )
        assert res.json()["busy"] == []

    async def test_worker_ids_required(self, client: AsyncClient, supervisor_token):
        res = await client.get(
            "/api/workers/availability", params={"day": "2026-03-01"}, headers=auth_header(supervisor_token)
        )
        assert res.status_code == 400

    async def test_bad_worker_id(self, client: AsyncClient, supervisor_token):
        res = await client.get(
            "/api/workers/availability",
            params={"day": "2026-03-01", "worker_ids": "abc"},
            headers=auth_header(supervisor_token),
        )
        assert res.status_code == 400
