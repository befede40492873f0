"""카탈로그 레포지토리 — 매장/자재/건물/호실 조회 쿼리.

Catalog Repository — Store, material, building and room lookups used by
visit records, lookups endpoints and reports.
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.catalog import Building, Material, Room, Store
from app.repositories.base import BaseRepository


class StoreRepository(BaseRepository[Store]):
    """매장 레포지토리 — Store repository."""

    def __init__(self) -> None:
        super().__init__(Store)

    async def get_active(self, db: AsyncSession) -> Sequence[Store]:
        """활성 매장 목록 (이름순) — Active stores ordered by name."""
        result = await db.execute(
            select(Store).where(Store.active.is_(True)).order_by(Store.name)
        )
        return result.scalars().all()


class MaterialRepository(BaseRepository[Material]):
    """자재 레포지토리 — Material repository."""

    def __init__(self) -> None:
        super().__init__(Material)

    async def get_active(self, db: AsyncSession) -> Sequence[Material]:
        """활성 자재 목록 (이름순) — Active materials ordered by name."""
        result = await db.execute(
            select(Material).where(Material.active.is_(True)).order_by(Material.name)
        )
        return result.scalars().all()

    async def get_existing_ids(self, db: AsyncSession, material_ids: list[int]) -> set[int]:
        """존재하는 자재 ID 집합 — Subset of the given ids that exist."""
        if not material_ids:
            return set()
        result = await db.execute(select(Material.id).where(Material.id.in_(material_ids)))
        return set(result.scalars().all())


class BuildingRepository(BaseRepository[Building]):
    """건물 레포지토리 — Building repository."""

    def __init__(self) -> None:
        super().__init__(Building)


class RoomRepository(BaseRepository[Room]):
    """호실 레포지토리 — Room repository."""

    def __init__(self) -> None:
        super().__init__(Room)

    async def get_for_building(self, db: AsyncSession, building_id: int) -> Sequence[Room]:
        """건물의 호실 목록 (호실 번호순) — Rooms of one building by room number."""
        result = await db.execute(
            select(Room).where(Room.building_id == building_id).order_by(Room.room_number)
        )
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instances
store_repository: StoreRepository = StoreRepository()
material_repository: MaterialRepository = MaterialRepository()
building_repository: BuildingRepository = BuildingRepository()
room_repository: RoomRepository = RoomRepository()
