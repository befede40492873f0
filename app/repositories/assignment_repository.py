"""민원 배정 레포지토리 — 배정/팀 관련 DB 쿼리 담당.

Complaint Assignment Repository — Handles assignment and team queries.
A "team" is every assignment row of one complaint.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assignment import ComplaintAssignment
from app.repositories.base import BaseRepository


class AssignmentRepository(BaseRepository[ComplaintAssignment]):
    """민원 배정 레포지토리.

    Complaint assignment repository with team and worker queries.

    Extends:
        BaseRepository[ComplaintAssignment]
    """

    def __init__(self) -> None:
        super().__init__(ComplaintAssignment)

    async def get_team(
        self,
        db: AsyncSession,
        complaint_id: int,
        include_rejected: bool = True,
    ) -> Sequence[ComplaintAssignment]:
        """민원의 모든 배정(팀)을 조회합니다.

        Retrieve every assignment of a complaint, leader first.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            complaint_id: 민원 ID (Complaint id)
            include_rejected: 거절된 배정 포함 여부 (Whether rejected rows are included)

        Returns:
            Sequence[ComplaintAssignment]: 팀 배정 목록 (Team assignment rows)
        """
        query: Select = select(ComplaintAssignment).where(
            ComplaintAssignment.complaint_id == complaint_id
        )
        if not include_rejected:
            query = query.where(ComplaintAssignment.status != "rejected")
        query = query.order_by(
            ComplaintAssignment.is_leader.desc(), ComplaintAssignment.id
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_leader(
        self,
        db: AsyncSession,
        complaint_id: int,
    ) -> ComplaintAssignment | None:
        """민원의 리더 배정 — The leader row of a complaint, if any."""
        result = await db.execute(
            select(ComplaintAssignment).where(
                ComplaintAssignment.complaint_id == complaint_id,
                ComplaintAssignment.is_leader.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def clear_leader(self, db: AsyncSession, complaint_id: int) -> None:
        """민원의 리더 플래그를 모두 해제합니다.

        Clear the leader flag on every row of the complaint. Flushed before the
        caller sets the new leader so the partial unique index never sees two.
        """
        await db.execute(
            update(ComplaintAssignment)
            .where(
                ComplaintAssignment.complaint_id == complaint_id,
                ComplaintAssignment.is_leader.is_(True),
            )
            .values(is_leader=False)
            .execution_options(synchronize_session="fetch")
        )
        await db.flush()

    async def get_by_worker(
        self,
        db: AsyncSession,
        worker_id: UUID,
        status: str | None = None,
    ) -> Sequence[ComplaintAssignment]:
        """작업자 본인의 배정 목록 — A worker's assignments, newest first."""
        query: Select = select(ComplaintAssignment).where(
            ComplaintAssignment.worker_id == worker_id
        )
        if status is not None:
            query = query.where(ComplaintAssignment.status == status)
        query = query.order_by(ComplaintAssignment.created_at.desc(), ComplaintAssignment.id.desc())
        result = await db.execute(query)
        return result.scalars().all()

    async def get_scheduled_overlapping(
        self,
        db: AsyncSession,
        worker_ids: list[UUID],
        start: datetime,
        end: datetime,
    ) -> Sequence[ComplaintAssignment]:
        """기간과 겹치는 예정 배정 (가용성 조회용).

        Scheduled, non-rejected assignments of the given workers whose planned
        window overlaps [start, end).
        """
        if not worker_ids:
            return []
        result = await db.execute(
            select(ComplaintAssignment)
            .where(
                ComplaintAssignment.worker_id.in_(worker_ids),
                ComplaintAssignment.status != "rejected",
                ComplaintAssignment.scheduled_start.is_not(None),
                ComplaintAssignment.scheduled_end.is_not(None),
                ComplaintAssignment.scheduled_start < end,
                ComplaintAssignment.scheduled_end > start,
            )
            .order_by(ComplaintAssignment.scheduled_start)
        )
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
assignment_repository: AssignmentRepository = AssignmentRepository()
