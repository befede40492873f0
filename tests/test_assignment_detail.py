"""방문 상세(업서트) API 테스트.

Assignment detail tests — open-visit upsert, revisit auto-close, material
replacement, validation errors and access control.
"""

import pytest_asyncio
from httpx import AsyncClient

from tests.conftest import auth_header

URL = "/api/assignments/{id}/detail"


@pytest_asyncio.fixture
async def assignment_id(client: AsyncClient, supervisor_token, complaint, worker_a) -> int:
    """작업자 A 단독 배정 (리더)."""
    res = await client.post(
        f"/api/complaints/{complaint.id}/assign",
        json={"worker_ids": [str(worker_a.id)], "leader_id": str(worker_a.id)},
        headers=auth_header(supervisor_token),
    )
    return res.json()[0]["id"]


class TestDetailUpsert:
    """열린 방문 업서트 테스트."""

    async def test_create_open_visit(self, client: AsyncClient, assignment_id, worker_a_token, store):
        """첫 저장 시 열린 방문 생성 (time_in 기본값 지금)."""
        res = await client.put(
            URL.format(id=assignment_id),
            json={"store_id": store.id, "note": "Checked the trap"},
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 200
        data = res.json()
        visit = data["latest_visit"]
        assert visit["store_id"] == store.id
        assert visit["store_name"] == "Main Warehouse"
        assert visit["time_in"] is not None
        assert visit["time_out"] is None
        assert visit["outcome"] is None
        assert visit["note"] == "Checked the trap"
        assert len(data["visits"]) == 1

    async def test_repeat_is_idempotent(self, client: AsyncClient, assignment_id, worker_a_token, store):
        """같은 요청 반복 → 방문 1개, 같은 값."""
        body = {"store_id": store.id, "time_in": "2026-03-01T09:00:00Z"}
        first = await client.put(URL.format(id=assignment_id), json=body, headers=auth_header(worker_a_token))
        second = await client.put(URL.format(id=assignment_id), json=body, headers=auth_header(worker_a_token))
        assert len(second.json()["visits"]) == 1
        assert first.json()["latest_visit"]["id"] == second.json()["latest_visit"]["id"]
        assert second.json()["latest_visit"]["time_in"] == first.json()["latest_visit"]["time_in"]

    async def test_close_then_new_visit(self, client: AsyncClient, assignment_id, worker_a_token):
        """종료된 방문 뒤 저장은 새 방문을 엶."""
        await client.put(
            URL.format(id=assignment_id),
            json={"time_in": "2026-03-01T09:00:00Z", "time_out": "2026-03-01T10:00:00Z"},
            headers=auth_header(worker_a_token),
        )
        res = await client.put(
            URL.format(id=assignment_id),
            json={"time_in": "2026-03-02T09:00:00Z"},
            headers=auth_header(worker_a_token),
        )
        visits = res.json()["visits"]
        assert len(visits) == 2
        assert visits[0]["time_out"] is None
        assert visits[1]["outcome"] == "completed"

    async def test_needs_revisit_auto_closes(self, client: AsyncClient, assignment_id, worker_a_token):
        """재방문 필요 → outcome revisit, 종료 시각 자동 설정."""
        res = await client.put(
            URL.format(id=assignment_id),
            json={"time_in": "2026-03-01T09:00:00Z", "needs_revisit": True},
            headers=auth_header(worker_a_token),
        )
        visit = res.json()["latest_visit"]
        assert visit["outcome"] == "revisit"
        assert visit["needs_revisit"] is True
        assert visit["time_out"] is not None

    async def test_needs_revisit_without_times_creates_closed_visit(
        self, client: AsyncClient, assignment_id, worker_a_token, store
    ):
        """시각 없이 재방문 표시 → 새 방문 생성 후 즉시 종료."""
        res = await client.put(
            URL.format(id=assignment_id),
            json={
                "store_id": store.id,
                "materials": [],
                "time_in": None,
                "time_out": None,
                "needs_revisit": True,
                "note": "Part on order",
            },
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 200
        visit = res.json()["latest_visit"]
        assert visit["outcome"] == "revisit"
        assert visit["time_in"] is not None
        assert visit["time_out"] == visit["time_in"]

    async def test_needs_revisit_only_flag(self, client: AsyncClient, assignment_id, worker_a_token, store):
        res = await client.put(
            URL.format(id=assignment_id),
            json={"store_id": store.id, "needs_revisit": True},
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 200
        assert res.json()["latest_visit"]["outcome"] == "revisit"

    async def test_needs_revisit_keeps_explicit_time_out(
        self, client: AsyncClient, assignment_id, worker_a_token
    ):
        """재방문 + 명시적 종료 시각은 그대로 유지."""
        res = await client.put(
            URL.format(id=assignment_id),
            json={
                "time_in": "2026-03-01T09:00:00Z",
                "time_out": "2026-03-01T09:45:00Z",
                "needs_revisit": True,
            },
            headers=auth_header(worker_a_token),
        )
        visit = res.json()["latest_visit"]
        assert visit["outcome"] == "revisit"
        assert visit["time_out"].startswith("2026-03-01T09:45:00")

    async def test_materials_replaced(self, client: AsyncClient, assignment_id, worker_a_token, materials):
        """자재 목록은 전체 교체."""
        first_ids = [materials[0].id, materials[1].id, materials[1].id]
        res = await client.put(
            URL.format(id=assignment_id),
            json={"materials": first_ids},
            headers=auth_header(worker_a_token),
        )
        assert sorted(m["id"] for m in res.json()["latest_visit"]["materials"]) == sorted(
            [materials[0].id, materials[1].id]
        )

        res = await client.put(
            URL.format(id=assignment_id),
            json={"materials": [materials[2].id]},
            headers=auth_header(worker_a_token),
        )
        assert [m["name"] for m in res.json()["latest_visit"]["materials"]] == ["Washer"]

        # 키 생략 시 자재 유지 — Omitted key keeps the current materials
        res = await client.put(
            URL.format(id=assignment_id),
            json={"note": "still working"},
            headers=auth_header(worker_a_token),
        )
        assert [m["name"] for m in res.json()["latest_visit"]["materials"]] == ["Washer"]

    async def test_inverted_window(self, client: AsyncClient, assignment_id, worker_a_token):
        """종료 ≤ 시작 → 400."""
        res = await client.put(
            URL.format(id=assignment_id),
            json={"time_in": "2026-03-01T10:00:00Z", "time_out": "2026-03-01T09:00:00Z"},
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 400

    async def test_unknown_store_and_material(self, client: AsyncClient, assignment_id, worker_a_token):
        """알 수 없는 매장/자재 → 400, 방문 생성 안 됨."""
        res = await client.put(
            URL.format(id=assignment_id), json={"store_id": 9999}, headers=auth_header(worker_a_token)
        )
        assert res.status_code == 400
        res = await client.put(
            URL.format(id=assignment_id), json={"materials": [9999]}, headers=auth_header(worker_a_token)
        )
        assert res.status_code == 400

        res = await client.get(URL.format(id=assignment_id), headers=auth_header(worker_a_token))
        assert res.json()["visits"] == []


class TestDetailAccess:
    """방문 상세 권한 테스트."""

    async def test_other_worker_cannot_write(self, client: AsyncClient, assignment_id, worker_b_token):
        """배정되지 않은 작업자의 저장 → 403."""
        res = await client.put(
            URL.format(id=assignment_id), json={"note": "x"}, headers=auth_header(worker_b_token)
        )
        assert res.status_code == 403

    async def test_other_worker_cannot_read(self, client: AsyncClient, assignment_id, worker_b_token):
        """팀원이 아닌 작업자의 조회 → 403."""
        res = await client.get(URL.format(id=assignment_id), headers=auth_header(worker_b_token))
        assert res.status_code == 403

    async def test_supervisor_reads_detail(self, client: AsyncClient, assignment_id, supervisor_token):
        """감독자는 상세 조회 가능 (민원 요약, 팀원 포함)."""
        res = await client.get(URL.format(id=assignment_id), headers=auth_header(supervisor_token))
        assert res.status_code == 200
        data = res.json()
        assert data["complaint"]["type_name"] == "Plumbing"
        assert data["complaint"]["building_name"] == "Marina Tower"
        assert data["teammates"][0]["is_leader"] is True
        assert data["latest_visit"] is None

    async def test_missing_assignment(self, client: AsyncClient, worker_a_token):
        res = await client.get(URL.format(id=424242), headers=auth_header(worker_a_token))
        assert res.status_code == 404

    async def test_completed_assignment_is_read_only(
        self, client: AsyncClient, assignment_id, worker_a_token, supervisor_token
    ):
        """승인 완료된 배정은 수정 불가."""
        await client.put(
            URL.format(id=assignment_id),
            json={"time_in": "2026-03-01T09:00:00Z", "time_out": "2026-03-01T10:00:00Z"},
            headers=auth_header(worker_a_token),
        )
        await client.patch(
            f"/api/assignments/{assignment_id}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )
        res = await client.patch(
            f"/api/assignments/{assignment_id}/status",
            json={"action": "approve"},
            headers=auth_header(supervisor_token),
        )
        assert res.json()["complaint_status"] == "completed"

        res = await client.put(
            URL.format(id=assignment_id), json={"note": "late edit"}, headers=auth_header(worker_a_token)
        )
        assert res.status_code == 400
