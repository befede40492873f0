"""팀 작업 세션 정산 테스트.

Work-session reconciliation tests — interval cleaning and planning as pure
functions, then the leader's mark_done end to end: default leader window,
per-worker and legacy overrides, re-submission after reopen, and the
failure cases that must leave nothing behind.
"""

import uuid
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.database import get_db
from app.main import app
from app.models.assignment import ComplaintAssignment
from app.models.complaint import Complaint
from app.models.visit import AssignmentWorkSession
from app.repositories.visit_repository import work_session_repository
from app.schemas.assignment import LegacyAssignmentOverride, OverrideInterval, WorkerIntervalsOverride
from app.services.work_session_service import clean_intervals, plan_team_intervals
from app.utils.datetime_utils import ensure_utc
from app.utils.exceptions import BadRequestError
from tests.conftest import auth_header, utc

NINE = "2026-03-01T09:00:00Z"
ELEVEN = "2026-03-01T11:00:00Z"


async def session_windows(db, assignment_id: int) -> list[tuple]:
    """배정의 세션 구간 (UTC) — Stored intervals of one assignment."""
    result = await db.execute(
        select(AssignmentWorkSession)
        .where(AssignmentWorkSession.assignment_id == assignment_id)
        .order_by(AssignmentWorkSession.start_at, AssignmentWorkSession.id)
    )
    return [(ensure_utc(s.start_at), ensure_utc(s.end_at)) for s in result.scalars().all()]


class TestCleanIntervals:
    """구간 정리 테스트."""

    def test_drops_incomplete_and_inverted(self):
        """끝점 누락, 역전, 길이 0 구간은 제거."""
        raw = [
            OverrideInterval(start_at=utc(2026, 3, 1, 9), end_at=utc(2026, 3, 1, 10)),
            OverrideInterval(start_at=utc(2026, 3, 1, 10), end_at=None),
            OverrideInterval(start_at=None, end_at=utc(2026, 3, 1, 11)),
            OverrideInterval(start_at=utc(2026, 3, 1, 12), end_at=utc(2026, 3, 1, 11)),
            OverrideInterval(start_at=utc(2026, 3, 1, 13), end_at=utc(2026, 3, 1, 13)),
            OverrideInterval(start_at=utc(2026, 3, 1, 14), end_at=utc(2026, 3, 1, 15)),
        ]
        assert clean_intervals(raw) == [
            (utc(2026, 3, 1, 9), utc(2026, 3, 1, 10)),
            (utc(2026, 3, 1, 14), utc(2026, 3, 1, 15)),
        ]

    def test_empty(self):
        assert clean_intervals([]) == []


class TestPlanTeamIntervals:
    """팀 구간 계획 테스트 (DB 없음)."""

    def _team(self):
        leader = ComplaintAssignment(id=1, complaint_id=42, worker_id=uuid.uuid4(), is_leader=True)
        mate = ComplaintAssignment(id=2, complaint_id=42, worker_id=uuid.uuid4(), is_leader=False)
        return leader, mate

    def test_default_is_leader_window(self):
        """오버라이드 없으면 모두 리더 구간."""
        leader, mate = self._team()
        window = (utc(2026, 3, 1, 9), utc(2026, 3, 1, 11))
        plan = plan_team_intervals([leader, mate], window)
        assert plan == {1: [window], 2: [window]}

    def test_worker_override_replaces_window(self):
        """작업자별 구간은 해당 팀원만 대체, 반복 항목은 합쳐짐."""
        leader, mate = self._team()
        window = (utc(2026, 3, 1, 9), utc(2026, 3, 1, 11))
        overrides = [
            WorkerIntervalsOverride(
                worker_id=mate.worker_id,
                intervals=[OverrideInterval(start_at=utc(2026, 3, 1, 9, 30), end_at=utc(2026, 3, 1, 10))],
            ),
            WorkerIntervalsOverride(
                worker_id=mate.worker_id,
                intervals=[OverrideInterval(start_at=utc(2026, 3, 1, 10, 30), end_at=utc(2026, 3, 1, 11))],
            ),
        ]
        plan = plan_team_intervals([leader, mate], window, overrides)
        assert plan[1] == [window]
        assert plan[2] == [
            (utc(2026, 3, 1, 9, 30), utc(2026, 3, 1, 10)),
            (utc(2026, 3, 1, 10, 30), utc(2026, 3, 1, 11)),
        ]

    def test_legacy_override_per_endpoint(self):
        """구형 오버라이드는 지정된 끝점만 대체."""
        leader, mate = self._team()
        window = (utc(2026, 3, 1, 9), utc(2026, 3, 1, 11))
        plan = plan_team_intervals(
            [leader, mate], window, [LegacyAssignmentOverride(assignment_id=2, end_at=utc(2026, 3, 1, 10))]
        )
        assert plan[2] == [(utc(2026, 3, 1, 9), utc(2026, 3, 1, 10))]

    def test_legacy_override_inverted_gives_nothing(self):
        """구형 오버라이드 결과가 역전되면 세션 없음."""
        leader, mate = self._team()
        window = (utc(2026, 3, 1, 9), utc(2026, 3, 1, 11))
        plan = plan_team_intervals(
            [leader, mate], window, [LegacyAssignmentOverride(assignment_id=2, start_at=utc(2026, 3, 1, 12))]
        )
        assert plan[2] == []

    def test_foreign_worker_or_assignment(self):
        """팀 외 작업자/배정은 400."""
        leader, mate = self._team()
        window = (utc(2026, 3, 1, 9), utc(2026, 3, 1, 11))
        with pytest.raises(BadRequestError):
            plan_team_intervals([leader, mate], window, [WorkerIntervalsOverride(worker_id=uuid.uuid4(), intervals=[])])
        with pytest.raises(BadRequestError):
            plan_team_intervals([leader, mate], window, [LegacyAssignmentOverride(assignment_id=99)])


@pytest_asyncio.fixture
async def team(client: AsyncClient, supervisor_token, complaint, worker_a, worker_b):
    """A(리더)와 B로 구성된 팀을 배정합니다."""
    res = await client.post(
        f"/api/complaints/{complaint.id}/assign",
        json={"worker_ids": [str(worker_a.id), str(worker_b.id)], "leader_id": str(worker_a.id)},
        headers=auth_header(supervisor_token),
    )
    assert res.status_code == 201
    by_worker = {row["worker_id"]: row["id"] for row in res.json()}
    return {"leader": by_worker[str(worker_a.id)], "mate": by_worker[str(worker_b.id)]}


async def log_leader_visit(client: AsyncClient, token: str, assignment_id: int, store_id: int) -> dict:
    res = await client.put(
        f"/api/assignments/{assignment_id}/detail",
        json={"store_id": store_id, "time_in": NINE, "time_out": ELEVEN},
        headers=auth_header(token),
    )
    assert res.status_code == 200
    return res.json()


class TestLeaderMarkDone:
    """리더 완료 보고 시 팀 세션 정산."""

    async def test_default_window_for_whole_team(
        self, client: AsyncClient, db, team, store, worker_a_token, supervisor_token, complaint
    ):
        """오버라이드 없이 완료 → 팀원 모두 리더 구간 1개, 모두 검토 대기."""
        await log_leader_visit(client, worker_a_token, team["leader"], store.id)

        res = await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 200
        body = res.json()
        assert body["ok"] is True
        assert body["status"] == "pending_review"
        assert body["complaint_status"] == "pending_review"

        window = (utc(2026, 3, 1, 9), utc(2026, 3, 1, 11))
        assert await session_windows(db, team["leader"]) == [window]
        assert await session_windows(db, team["mate"]) == [window]

        listing = await client.get(
            f"/api/complaints/{complaint.id}/assignments", headers=auth_header(supervisor_token)
        )
        assert {row["status"] for row in listing.json()} == {"pending_review"}

    async def test_resubmission_replaces_mate_sessions(
        self, client: AsyncClient, db, team, store, worker_a_token, supervisor_token, worker_b
    ):
        """재작업 후 작업자별 오버라이드로 다시 완료 → B는 정확히 두 구간, A는 리더 구간 유지."""
        await log_leader_visit(client, worker_a_token, team["leader"], store.id)
        await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )

        res = await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={"action": "reopen"},
            headers=auth_header(supervisor_token),
        )
        assert res.json()["status"] == "in_progress"

        res = await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={
                "action": "mark_done",
                "overrides": [{
                    "worker_id": str(worker_b.id),
                    "intervals": [
                        {"start_at": "2026-03-01T09:30:00Z", "end_at": "2026-03-01T10:00:00Z"},
                        {"start_at": "2026-03-01T10:30:00Z", "end_at": "2026-03-01T11:00:00Z"},
                    ],
                }],
            },
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 200
        assert res.json()["complaint_status"] == "pending_review"

        assert await session_windows(db, team["mate"]) == [
            (utc(2026, 3, 1, 9, 30), utc(2026, 3, 1, 10)),
            (utc(2026, 3, 1, 10, 30), utc(2026, 3, 1, 11)),
        ]
        assert await session_windows(db, team["leader"]) == [(utc(2026, 3, 1, 9), utc(2026, 3, 1, 11))]

    async def test_legacy_override(self, client: AsyncClient, db, team, store, worker_a_token):
        """구형 배정별 오버라이드 — 종료 시각만 대체."""
        await log_leader_visit(client, worker_a_token, team["leader"], store.id)
        res = await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={
                "action": "MARK_DONE",
                "overrides": [{"assignment_id": team["mate"], "end_at": "2026-03-01T10:00:00Z"}],
            },
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 200
        assert await session_windows(db, team["mate"]) == [(utc(2026, 3, 1, 9), utc(2026, 3, 1, 10))]

    async def test_sessions_visible_on_leader_visit(self, client: AsyncClient, team, store, worker_a_token):
        """상세 조회 시 리더 방문에 팀 세션이 붙어 나옴."""
        await log_leader_visit(client, worker_a_token, team["leader"], store.id)
        await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )
        res = await client.get(
            f"/api/assignments/{team['leader']}/detail", headers=auth_header(worker_a_token)
        )
        latest = res.json()["latest_visit"]
        assert latest["store_name"] == "Main Warehouse"
        assert sorted(s["assignment_id"] for s in latest["sessions"]) == sorted([team["leader"], team["mate"]])
        assert {s["minutes"] for s in latest["sessions"]} == {120}

    async def test_missing_visit_times(
        self, client: AsyncClient, db, team, worker_a_token, supervisor_token, complaint
    ):
        """방문 기록 없이 완료 → 400, 아무것도 변경되지 않음."""
        res = await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 400
        assert "Add time in and time out first" in res.json()["detail"]

        listing = await client.get(
            f"/api/complaints/{complaint.id}/assignments",
            headers=auth_header(supervisor_token),
        )
        assert {row["status"] for row in listing.json()} == {"assigned"}
        assert await session_windows(db, team["mate"]) == []

    async def test_open_visit_is_not_enough(self, client: AsyncClient, db, team, store, worker_a_token):
        """종료 시각 없는 열린 방문 → 400."""
        await client.put(
            f"/api/assignments/{team['leader']}/detail",
            json={"store_id": store.id, "time_in": NINE},
            headers=auth_header(worker_a_token),
        )
        res = await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 400
        assert await session_windows(db, team["leader"]) == []

    async def test_unknown_override_worker(self, client: AsyncClient, db, team, store, worker_a_token):
        """팀에 없는 작업자 오버라이드 → 400, 세션/상태 변경 없음."""
        await log_leader_visit(client, worker_a_token, team["leader"], store.id)
        res = await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={
                "action": "mark_done",
                "overrides": [{"worker_id": str(uuid.uuid4()), "intervals": []}],
            },
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 400
        assert await session_windows(db, team["leader"]) == []
        assert await session_windows(db, team["mate"]) == []

        detail = await client.get(
            f"/api/assignments/{team['leader']}/detail", headers=auth_header(worker_a_token)
        )
        assert {m["status"] for m in detail.json()["teammates"]} == {"assigned"}

    async def test_rejected_mate_excluded(self, client: AsyncClient, db, team, store, worker_a_token, worker_b_token):
        """거절한 팀원은 세션/상태 이동 대상에서 제외."""
        res = await client.patch(
            f"/api/assignments/{team['mate']}",
            json={"status": "rejected"},
            headers=auth_header(worker_b_token),
        )
        assert res.json()["status"] == "rejected"

        await log_leader_visit(client, worker_a_token, team["leader"], store.id)
        res = await client.patch(
            f"/api/assignments/{team['leader']}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 200
        assert res.json()["complaint_status"] == "pending_review"
        assert await session_windows(db, team["mate"]) == []

    async def test_non_leader_overrides_forbidden(self, client: AsyncClient, team, worker_b_token, worker_a):
        """리더가 아닌 작업자의 오버라이드 → 403."""
        res = await client.patch(
            f"/api/assignments/{team['mate']}/status",
            json={
                "action": "mark_done",
                "overrides": [{"worker_id": str(worker_a.id), "intervals": []}],
            },
            headers=auth_header(worker_b_token),
        )
        assert res.status_code == 403

    async def test_non_leader_mark_done_alone(self, client: AsyncClient, db, team, worker_b_token):
        """리더가 아닌 작업자의 완료는 본인 상태만 변경, 세션 없음."""
        res = await client.patch(
            f"/api/assignments/{team['mate']}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_b_token),
        )
        assert res.status_code == 200
        assert res.json()["status"] == "pending_review"
        assert res.json()["complaint_status"] == "in_progress"
        assert await session_windows(db, team["mate"]) == []


@pytest_asyncio.fixture
async def committed_team(client: AsyncClient, db, team, store, worker_a_token) -> dict:
    """리더 방문까지 기록 후 커밋된 팀 — Team with a closed leader visit, committed."""
    await log_leader_visit(client, worker_a_token, team["leader"], store.id)
    await db.commit()
    return team


@pytest_asyncio.fixture
async def session_per_request_client(
    engine: AsyncEngine, committed_team
) -> AsyncGenerator[AsyncClient, None]:
    """요청마다 새 세션 — Each request gets its own session, like get_db in production."""
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def _fresh_session() -> AsyncGenerator[AsyncSession, None]:
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _fresh_session
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestMarkDoneRollback:
    """정산 도중 저장 실패 시 전체 롤백."""

    async def test_store_failure_reverts_whole_call(
        self,
        session_per_request_client: AsyncClient,
        engine: AsyncEngine,
        committed_team,
        complaint,
        worker_a_token,
        monkeypatch,
    ):
        """두 번째 팀원 세션 저장 실패 → 상태/세션 모두 이전 그대로."""
        original = work_session_repository.replace_for_visit
        calls: list[int] = []

        async def fail_on_second(db, **kwargs):
            calls.append(kwargs["assignment_id"])
            if len(calls) == 2:
                raise RuntimeError("connection lost")
            return await original(db, **kwargs)

        monkeypatch.setattr(work_session_repository, "replace_for_visit", fail_on_second)

        res = await session_per_request_client.patch(
            f"/api/assignments/{committed_team['leader']}/status",
            json={"action": "mark_done"},
            headers=auth_header(worker_a_token),
        )
        assert res.status_code == 500
        assert len(calls) == 2

        factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
        async with factory() as check:
            statuses = (
                await check.execute(
                    select(ComplaintAssignment.status)
                    .where(ComplaintAssignment.complaint_id == complaint.id)
                    .order_by(ComplaintAssignment.id)
                )
            ).scalars().all()
            session_count = (
                await check.execute(select(func.count()).select_from(AssignmentWorkSession))
            ).scalar()
            complaint_status = (
                await check.execute(select(Complaint.status).where(Complaint.id == complaint.id))
            ).scalar()

        assert statuses == ["assigned", "assigned"]
        assert session_count == 0
        assert complaint_status == "assigned"
