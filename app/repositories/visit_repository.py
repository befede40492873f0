"""방문 레포지토리 — 방문 기록, 사용 자재, 작업 세션 DB 쿼리 담당.

Visit Repository — Handles visit, visit-material and work-session queries.
"""

from collections import defaultdict
from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import Material
from app.models.visit import AssignmentVisit, AssignmentVisitMaterial, AssignmentWorkSession
from app.repositories.base import BaseRepository


class VisitRepository(BaseRepository[AssignmentVisit]):
    """방문 레포지토리.

    Visit repository with open/latest/history queries and material sync.

    Extends:
        BaseRepository[AssignmentVisit]
    """

    def __init__(self) -> None:
        super().__init__(AssignmentVisit)

    async def get_open_visit(
        self,
        db: AsyncSession,
        assignment_id: int,
    ) -> AssignmentVisit | None:
        """배정의 열린 방문(time_out 없음)을 조회합니다.

        Retrieve the open visit (time_out still null) of an assignment.
        At most one exists; the newest wins if legacy data holds more.
        """
        result = await db.execute(
            select(AssignmentVisit)
            .where(
                AssignmentVisit.assignment_id == assignment_id,
                AssignmentVisit.time_out.is_(None),
            )
            .order_by(AssignmentVisit.created_at.desc(), AssignmentVisit.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_latest(
        self,
        db: AsyncSession,
        assignment_id: int,
    ) -> AssignmentVisit | None:
        """배정의 가장 최근 방문 — Most recently created visit of an assignment."""
        result = await db.execute(
            select(AssignmentVisit)
            .where(AssignmentVisit.assignment_id == assignment_id)
            .order_by(AssignmentVisit.created_at.desc(), AssignmentVisit.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_history(
        self,
        db: AsyncSession,
        assignment_ids: list[int],
    ) -> Sequence[AssignmentVisit]:
        """여러 배정의 방문 이력 (최신순) — Visit history, newest first."""
        if not assignment_ids:
            return []
        result = await db.execute(
            select(AssignmentVisit)
            .where(AssignmentVisit.assignment_id.in_(assignment_ids))
            .order_by(AssignmentVisit.created_at.desc(), AssignmentVisit.id.desc())
        )
        return result.scalars().all()

    async def get_material_map(
        self,
        db: AsyncSession,
        visit_ids: list[int],
    ) -> dict[int, list[dict]]:
        """방문별 사용 자재 목록을 조회합니다.

        Retrieve the materials used on each visit.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            visit_ids: 방문 ID 목록 (Visit ids)

        Returns:
            dict[int, list[dict]]: 방문 ID → [{"id", "name"}] (Materials per visit)
        """
        materials: dict[int, list[dict]] = defaultdict(list)
        if not visit_ids:
            return materials
        result = await db.execute(
            select(AssignmentVisitMaterial.visit_id, Material.id, Material.name)
            .join(Material, Material.id == AssignmentVisitMaterial.material_id)
            .where(AssignmentVisitMaterial.visit_id.in_(visit_ids))
            .order_by(Material.name)
        )
        for visit_id, material_id, name in result.all():
            materials[visit_id].append({"id": material_id, "name": name})
        return materials

    async def replace_materials(
        self,
        db: AsyncSession,
        visit_id: int,
        material_ids: list[int],
    ) -> None:
        """방문의 사용 자재를 통째로 교체합니다.

        Replace the material set of one visit. Other visits are untouched.
        """
        await db.execute(
            delete(AssignmentVisitMaterial).where(AssignmentVisitMaterial.visit_id == visit_id)
        )
        # 순서 유지 중복 제거 — Order-preserving de-duplication
        for material_id in dict.fromkeys(material_ids):
            db.add(AssignmentVisitMaterial(visit_id=visit_id, material_id=material_id))
        await db.flush()

    async def delete_for_assignments(self, db: AsyncSession, assignment_ids: list[int]) -> None:
        """배정에 딸린 방문/자재/세션을 삭제합니다 (팀 제외 시).

        Delete visits, their materials and all work sessions of the given
        assignments. Used when a supervisor removes members from a team.
        """
        if not assignment_ids:
            return
        visit_ids_query = select(AssignmentVisit.id).where(
            AssignmentVisit.assignment_id.in_(assignment_ids)
        )
        await db.execute(
            delete(AssignmentVisitMaterial).where(
                AssignmentVisitMaterial.visit_id.in_(visit_ids_query)
            )
        )
        await db.execute(
            delete(AssignmentWorkSession).where(
                or_(
                    AssignmentWorkSession.assignment_id.in_(assignment_ids),
                    AssignmentWorkSession.visit_id.in_(visit_ids_query),
                )
            )
        )
        await db.execute(
            delete(AssignmentVisit).where(AssignmentVisit.assignment_id.in_(assignment_ids))
        )
        await db.flush()


class WorkSessionRepository(BaseRepository[AssignmentWorkSession]):
    """작업 세션 레포지토리.

    Work session repository — per-worker time intervals for reporting.

    Extends:
        BaseRepository[AssignmentWorkSession]
    """

    def __init__(self) -> None:
        super().__init__(AssignmentWorkSession)

    async def replace_for_visit(
        self,
        db: AsyncSession,
        visit_id: int,
        worker_id: UUID,
        assignment_id: int,
        intervals: list[tuple[datetime, datetime]],
    ) -> list[AssignmentWorkSession]:
        """방문 + 작업자 단위로 세션을 교체합니다.

        Replace the sessions of one worker tied to one visit: delete every
        existing row for (visit_id, worker_id), then insert one row per
        interval. Rows tied to other visits are untouched.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            visit_id: 기준 방문 ID (Visit the sessions are tied to)
            worker_id: 작업자 ID (Worker the sessions belong to)
            assignment_id: 작업자의 배정 ID (That worker's assignment on the complaint)
            intervals: (start_at, end_at) 목록, 이미 정리된 값
                       (Already-cleaned (start_at, end_at) pairs)

        Returns:
            list[AssignmentWorkSession]: 새로 생성된 세션 (Inserted sessions)
        """
        await db.execute(
            delete(AssignmentWorkSession).where(
                AssignmentWorkSession.visit_id == visit_id,
                AssignmentWorkSession.worker_id == worker_id,
            )
        )
        sessions: list[AssignmentWorkSession] = [
            AssignmentWorkSession(
                assignment_id=assignment_id,
                worker_id=worker_id,
                visit_id=visit_id,
                start_at=start_at,
                end_at=end_at,
            )
            for start_at, end_at in intervals
        ]
        db.add_all(sessions)
        await db.flush()
        return sessions

    async def get_for_visits(
        self,
        db: AsyncSession,
        visit_ids: list[int],
    ) -> dict[int, list[AssignmentWorkSession]]:
        """방문별 작업 세션 — Work sessions grouped by visit id."""
        sessions: dict[int, list[AssignmentWorkSession]] = defaultdict(list)
        if not visit_ids:
            return sessions
        result = await db.execute(
            select(AssignmentWorkSession)
            .where(AssignmentWorkSession.visit_id.in_(visit_ids))
            .order_by(AssignmentWorkSession.start_at, AssignmentWorkSession.id)
        )
        for session in result.scalars().all():
            sessions[session.visit_id].append(session)
        return sessions

    async def get_in_range(
        self,
        db: AsyncSession,
        start: datetime | None = None,
        end: datetime | None = None,
        worker_ids: list[UUID] | None = None,
    ) -> Sequence[AssignmentWorkSession]:
        """기간과 겹치는 작업 세션 (보고서/가용성용).

        Work sessions overlapping [start, end), optionally limited to some
        workers, ordered by start time.
        """
        query: Select = select(AssignmentWorkSession)
        if start is not None:
            query = query.where(AssignmentWorkSession.end_at > start)
        if end is not None:
            query = query.where(AssignmentWorkSession.start_at < end)
        if worker_ids is not None:
            query = query.where(AssignmentWorkSession.worker_id.in_(worker_ids))
        query = query.order_by(AssignmentWorkSession.start_at, AssignmentWorkSession.id)
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instances
visit_repository: VisitRepository = VisitRepository()
work_session_repository: WorkSessionRepository = WorkSessionRepository()
