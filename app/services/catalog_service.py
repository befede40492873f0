"""조회 서비스 — 매장/자재/건물/호실/작업자 목록과 작업자 가용성.

Lookup Service — Stores, materials, buildings and rooms, worker pickers and
worker availability.
Availability merges planned assignment windows with recorded work sessions
for one calendar day in the report timezone.
"""

from datetime import date, datetime, time, timedelta
from typing import Sequence
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.assignment import ComplaintAssignment
from app.models.catalog import Building
from app.models.visit import AssignmentWorkSession
from app.repositories.assignment_repository import assignment_repository
from app.repositories.catalog_repository import (
    building_repository,
    material_repository,
    room_repository,
    store_repository,
)
from app.repositories.user_repository import profile_repository
from app.repositories.visit_repository import work_session_repository
from app.schemas.lookup import (
    AvailabilityResponse,
    BuildingResponse,
    BusyWindow,
    MaterialResponse,
    RoomResponse,
    StoreResponse,
    WorkerResponse,
)
from app.utils.datetime_utils import ensure_utc
from app.utils.exceptions import BadRequestError


class CatalogService:
    """조회용 목록 서비스 — Lookup lists and availability."""

    async def list_stores(self, db: AsyncSession) -> list[StoreResponse]:
        return [StoreResponse(id=s.id, name=s.name) for s in await store_repository.get_active(db)]

    async def list_materials(self, db: AsyncSession) -> list[MaterialResponse]:
        return [MaterialResponse(id=m.id, name=m.name) for m in await material_repository.get_active(db)]

    async def list_buildings(self, db: AsyncSession) -> list[BuildingResponse]:
        buildings = await building_repository.get_all(db, order_by=Building.name)
        return [BuildingResponse(id=b.id, name=b.name) for b in buildings]

    async def list_rooms(self, db: AsyncSession, building_id: int) -> list[RoomResponse]:
        """건물의 호실 목록 — Rooms of a building; an unknown building has none."""
        return [
            RoomResponse(id=r.id, building_id=r.building_id, room_number=r.room_number)
            for r in await room_repository.get_for_building(db, building_id)
        ]

    async def list_workers(self, db: AsyncSession) -> list[WorkerResponse]:
        """활성 작업자 목록 — Active workers for assignment pickers."""
        return [
            WorkerResponse(id=str(w.id), name=w.name, email=w.email, mobile=w.mobile)
            for w in await profile_repository.get_workers(db)
        ]

    def day_bounds(self, day: date) -> tuple[datetime, datetime]:
        """보고서 타임존 기준 하루의 UTC 구간 — UTC bounds of a local calendar day."""
        tz: ZoneInfo = ZoneInfo(settings.REPORT_TIMEZONE)
        start: datetime = datetime.combine(day, time.min, tzinfo=tz)
        return ensure_utc(start), ensure_utc(start + timedelta(days=1))

    async def get_availability(
        self,
        db: AsyncSession,
        day: date,
        worker_ids: list[UUID],
    ) -> AvailabilityResponse:
        """작업자들의 하루 바쁜 시간대를 조회합니다.

        Busy windows of the given workers on one day: planned assignment
        windows ("scheduled") and recorded work sessions ("session").

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            day: 조회 날짜, 보고서 타임존 기준 (Day in REPORT_TIMEZONE)
            worker_ids: 작업자 ID 목록 (Workers to check)

        Returns:
            AvailabilityResponse: 시작순 바쁜 시간대 (Busy windows by start)

        Raises:
            BadRequestError: 작업자 ID가 없을 때 (No worker ids given)
        """
        if not worker_ids:
            raise BadRequestError("day and worker_ids are required")

        start, end = self.day_bounds(day)

        scheduled: Sequence[ComplaintAssignment] = await assignment_repository.get_scheduled_overlapping(
            db, worker_ids, start, end
        )
        sessions: Sequence[AssignmentWorkSession] = await work_session_repository.get_in_range(
            db, start, end, worker_ids=worker_ids
        )
        session_complaints: dict[int, int | None] = {}
        for session in sessions:
            if session.assignment_id not in session_complaints:
                owner: ComplaintAssignment | None = await assignment_repository.get_by_id(db, session.assignment_id)
                session_complaints[session.assignment_id] = owner.complaint_id if owner else None

        busy: list[BusyWindow] = [
            BusyWindow(
                worker_id=str(a.worker_id),
                start_at=ensure_utc(a.scheduled_start),
                end_at=ensure_utc(a.scheduled_end),
                source="scheduled",
                complaint_id=a.complaint_id,
            )
            for a in scheduled
        ]
        busy.extend(
            BusyWindow(
                worker_id=str(s.worker_id),
                start_at=ensure_utc(s.start_at),
                end_at=ensure_utc(s.end_at),
                source="session",
                complaint_id=session_complaints.get(s.assignment_id),
            )
            for s in sessions
        )
        busy.sort(key=lambda w: (w.start_at, w.worker_id))
        return AvailabilityResponse(day=day, busy=busy)


# 싱글턴 인스턴스 — Singleton instance
catalog_service: CatalogService = CatalogService()
