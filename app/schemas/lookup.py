"""조회용 Pydantic 응답 스키마 — 매장, 자재, 건물, 호실, 작업자, 가용성.

Lookup response schemas: stores, materials, buildings, rooms, workers and
availability.
"""

from datetime import date, datetime

from pydantic import BaseModel


class StoreResponse(BaseModel):
    id: int
    name: str


class MaterialResponse(BaseModel):
    id: int
    name: str


class BuildingResponse(BaseModel):
    id: int
    name: str


class RoomResponse(BaseModel):
    """호실 응답 — Room of a building."""

    id: int
    building_id: int
    room_number: str


class WorkerResponse(BaseModel):
    """작업자 응답 — Worker profile summary for assignment pickers."""

    id: str
    name: str | None = None
    email: str
    mobile: str | None = None


class BusyWindow(BaseModel):
    """바쁜 시간대 — One busy window of a worker.

    Attributes:
        worker_id: 작업자 ID (Worker id)
        start_at: 시작 (Window start)
        end_at: 종료 (Window end)
        source: "scheduled" (예정 배정) 또는 "session" (기록된 작업 세션)
        complaint_id: 관련 민원 ID (Related complaint)
    """

    worker_id: str
    start_at: datetime
    end_at: datetime
    source: str
    complaint_id: int | None = None


class AvailabilityResponse(BaseModel):
    """작업자 가용성 응답 — Busy windows of the requested workers for one day."""

    day: date
    busy: list[BusyWindow]
