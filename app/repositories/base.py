"""기본 레포지토리 — 모든 레포지토리의 부모 클래스.

Base Repository — Parent class of every domain repository.
Repositories only flush; the route handler that owns the request session
commits once at the end.

Usage:
    class VisitRepository(BaseRepository[AssignmentVisit]):
        def __init__(self) -> None:
            super().__init__(AssignmentVisit)
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

# 제네릭 모델 타입 — Any mapped model class
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """제네릭 레포지토리.

    Generic repository with primary-key lookup, listing, pagination and
    flush-only create/update.

    Attributes:
        model: SQLAlchemy 모델 클래스 (Mapped model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(self, db: AsyncSession, record_id: Any) -> ModelType | None:
        """기본 키로 조회 — Integer or UUID primary key lookup, None if missing."""
        return await db.get(self.model, record_id)

    async def get_all(
        self,
        db: AsyncSession,
        order_by: Any | None = None,
        **filters: Any,
    ) -> Sequence[ModelType]:
        """등호 조건으로 목록을 조회합니다.

        List records whose columns equal the given keyword values. None
        values are skipped so optional query params can be passed through.
        """
        query: Select = select(self.model)
        for column_name, value in filters.items():
            if value is not None:
                query = query.where(getattr(self.model, column_name) == value)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await db.execute(query)
        return result.scalars().all()

    async def get_paginated(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """페이지 단위로 조회합니다.

        Run a prepared SELECT one page at a time.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            query: 필터/정렬이 적용된 쿼리 (Filtered, ordered query)
            page: 페이지 번호, 1부터 (1-based page number)
            per_page: 페이지 크기 (Page size)

        Returns:
            tuple[Sequence[ModelType], int]: (현재 페이지 항목, 전체 개수)
                                             (Items on this page, total matches)
        """
        total: int = (
            await db.execute(select(func.count()).select_from(query.subquery()))
        ).scalar() or 0
        result = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
        return result.scalars().all(), total

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """레코드 생성 후 flush — Insert a row and load its generated columns."""
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        db_obj: ModelType,
        update_data: dict[str, Any],
    ) -> ModelType:
        """로드된 레코드에 값을 적용합니다.

        Apply values to a loaded row. Keys usually come from a request's set
        fields, so None here is a real value to store.
        """
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj
