"""민원 레포지토리 — 민원 및 민원 유형 DB 쿼리 담당.

Complaint Repository — Handles complaint and complaint-type database queries.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.complaint import Complaint, ComplaintType
from app.models.user import Profile
from app.repositories.base import BaseRepository


class ComplaintTypeRepository(BaseRepository[ComplaintType]):
    """민원 유형 레포지토리 — Complaint type repository."""

    def __init__(self) -> None:
        super().__init__(ComplaintType)

    async def get_all_ordered(self, db: AsyncSession) -> Sequence[ComplaintType]:
        """이름순 민원 유형 목록 — Complaint types ordered by name."""
        return await self.get_all(db, order_by=ComplaintType.name)


class ComplaintRepository(BaseRepository[Complaint]):
    """민원 레포지토리.

    Complaint repository with supervisor filtering and tenant queries.

    Extends:
        BaseRepository[Complaint]
    """

    def __init__(self) -> None:
        super().__init__(Complaint)

    async def get_by_filters(
        self,
        db: AsyncSession,
        status: str | None = None,
        type_id: int | None = None,
        tenant_email: str | None = None,
        building_name: str | None = None,
        room_number: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Complaint], int]:
        """필터 조건에 맞는 민원을 페이지네이션하여 조회합니다.

        Retrieve paginated complaints matching the given filters, newest first.
        Tenant filters match case-insensitively against the filing profile.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            status: 상태 필터, 선택 (Optional complaint status filter)
            type_id: 민원 유형 필터, 선택 (Optional category filter)
            tenant_email: 입주자 이메일 부분 일치 (Tenant email substring)
            building_name: 건물명 부분 일치 (Building name substring)
            room_number: 호실 일치 (Flat / room number)
            page: 페이지 번호, 1부터 시작 (Page number, 1-based)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[Complaint], int]: (민원 목록, 전체 개수)
                                              (List of complaints, total count)
        """
        query: Select = select(Complaint)

        if status is not None:
            query = query.where(Complaint.status == status)
        if type_id is not None:
            query = query.where(Complaint.type_id == type_id)

        # 입주자 조건이 있을 때만 조인 — Join profiles only when filtering by tenant
        if tenant_email or building_name or room_number:
            query = query.join(Profile, Profile.id == Complaint.tenant_id)
            if tenant_email:
                query = query.where(Profile.email.ilike(f"%{tenant_email.strip()}%"))
            if building_name:
                query = query.where(Profile.building_name.ilike(f"%{building_name.strip()}%"))
            if room_number:
                query = query.where(Profile.room_number.ilike(room_number.strip()))

        query = query.order_by(Complaint.created_at.desc(), Complaint.id.desc())

        return await self.get_paginated(db, query, page, per_page)

    async def get_by_tenant(
        self,
        db: AsyncSession,
        tenant_id: UUID,
    ) -> Sequence[Complaint]:
        """입주자 본인의 민원 목록 — A tenant's own complaints, newest first."""
        result = await db.execute(
            select(Complaint)
            .where(Complaint.tenant_id == tenant_id)
            .order_by(Complaint.created_at.desc(), Complaint.id.desc())
        )
        return result.scalars().all()

    async def get_created_between(
        self,
        db: AsyncSession,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Sequence[Complaint]:
        """기간 내 접수된 민원 (보고서용) — Complaints filed in [start, end), oldest first."""
        query: Select = select(Complaint)
        if start is not None:
            query = query.where(Complaint.created_at >= start)
        if end is not None:
            query = query.where(Complaint.created_at < end)
        result = await db.execute(query.order_by(Complaint.created_at, Complaint.id))
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instances
complaint_repository: ComplaintRepository = ComplaintRepository()
complaint_type_repository: ComplaintTypeRepository = ComplaintTypeRepository()
