"""조회 라우터 — 매장, 자재, 건물, 호실, 작업자, 작업자 가용성 API.

Lookup Router — Stores, materials, buildings, rooms, worker list and worker
availability.
"""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_supervisor
from app.database import get_db
from app.models.user import Profile
from app.schemas.lookup import (
    AvailabilityResponse,
    BuildingResponse,
    MaterialResponse,
    RoomResponse,
    StoreResponse,
    WorkerResponse,
)
from app.services.catalog_service import catalog_service
from app.utils.exceptions import BadRequestError

router: APIRouter = APIRouter()


@router.get("/lookups/stores", response_model=list[StoreResponse])
async def list_stores(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> list[StoreResponse]:
    """활성 매장 목록 — Active stores."""
    return await catalog_service.list_stores(db)


@router.get("/lookups/materials", response_model=list[MaterialResponse])
async def list_materials(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> list[MaterialResponse]:
    """활성 자재 목록 — Active materials."""
    return await catalog_service.list_materials(db)


@router.get("/buildings", response_model=list[BuildingResponse])
async def list_buildings(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> list[BuildingResponse]:
    """건물 목록 (이름순) — Buildings by name."""
    return await catalog_service.list_buildings(db)


@router.get("/rooms", response_model=list[RoomResponse])
async def list_rooms(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
    building_id: Annotated[int | None, Query(alias="buildingId")] = None,
) -> list[RoomResponse]:
    """건물의 호실 목록 (호실 번호순) — Rooms of one building by room number."""
    if building_id is None:
        raise BadRequestError("건물 ID가 필요합니다 (Building ID is required)")
    return await catalog_service.list_rooms(db, building_id)


@router.get("/users/workers", response_model=list[WorkerResponse])
async def list_workers(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_supervisor)],
) -> list[WorkerResponse]:
    """작업자 목록 (감독자) — Active workers for assignment pickers."""
    return await catalog_service.list_workers(db)


@router.get("/workers/availability", response_model=AvailabilityResponse)
async def get_worker_availability(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_supervisor)],
    day: Annotated[date, Query()],
    worker_ids: Annotated[str, Query(description="쉼표로 구분된 작업자 ID (Comma-separated worker ids)")] = "",
) -> AvailabilityResponse:
    """작업자 가용성 조회 (감독자).

    Busy windows of the given workers on one day.
    """
    try:
        ids: list[UUID] = [UUID(part.strip()) for part in worker_ids.split(",") if part.strip()]
    except ValueError:
        raise BadRequestError("worker_ids must be comma-separated UUIDs")
    return await catalog_service.get_availability(db, day, ids)
