"""프로필 레포지토리 — 사용자(입주자/작업자/감독자) 조회 쿼리.

Profile Repository — Lookup queries for tenants, workers and supervisors.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import ROLE_WORKER, Profile
from app.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """profiles 테이블 레포지토리.

    Repository handling database queries for the profiles table.
    """

    def __init__(self) -> None:
        super().__init__(Profile)

    async def get_by_email(self, db: AsyncSession, email: str) -> Profile | None:
        """이메일로 프로필을 조회합니다 (대소문자 무시).

        Retrieve a profile by email, case-insensitively.
        """
        result = await db.execute(
            select(Profile).where(Profile.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_many(
        self,
        db: AsyncSession,
        profile_ids: list[UUID],
    ) -> dict[UUID, Profile]:
        """여러 프로필을 ID → 프로필 딕셔너리로 조회합니다.

        Retrieve several profiles keyed by id. Unknown ids are simply absent.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            profile_ids: 조회할 프로필 ID 목록 (Profile ids to load)

        Returns:
            dict[UUID, Profile]: ID별 프로필 (Profiles keyed by id)
        """
        if not profile_ids:
            return {}
        result = await db.execute(select(Profile).where(Profile.id.in_(profile_ids)))
        return {p.id: p for p in result.scalars().all()}

    async def get_workers(
        self,
        db: AsyncSession,
        active_only: bool = True,
    ) -> Sequence[Profile]:
        """작업자 역할 프로필 목록 — List worker profiles ordered by name."""
        query: Select = select(Profile).where(Profile.role == ROLE_WORKER)
        if active_only:
            query = query.where(Profile.is_active.is_(True))
        query = query.order_by(Profile.name, Profile.email)
        result = await db.execute(query)
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
profile_repository: ProfileRepository = ProfileRepository()
