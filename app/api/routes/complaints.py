"""민원 라우터 — 민원 접수/조회/수정 및 팀 배정 API.

Complaint Router — Filing, listing and updating complaints, plus team
assignment management for supervisors.
"""

from typing import Annotated, Sequence

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_supervisor, require_tenant
from app.database import get_db
from app.models.assignment import ComplaintAssignment
from app.models.complaint import Complaint
from app.models.user import ROLE_SUPERVISOR, ROLE_TENANT, Profile
from app.repositories.user_repository import profile_repository
from app.schemas.assignment import (
    AssignmentResponse,
    AssignTeamRequest,
    TeamAssignmentResponse,
    TeamUpdateRequest,
)
from app.schemas.common import PaginatedResponse
from app.schemas.complaint import (
    ComplaintCreate,
    ComplaintResponse,
    ComplaintTypeResponse,
    ComplaintUpdate,
)
from app.services.assignment_service import assignment_service
from app.services.complaint_service import complaint_service
from app.services.team_service import team_service
from app.utils.exceptions import ForbiddenError

router: APIRouter = APIRouter()


@router.get("/complaints/types", response_model=list[ComplaintTypeResponse])
async def list_complaint_types(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> list[ComplaintTypeResponse]:
    """민원 유형 목록 — Complaint categories."""
    return await complaint_service.list_types(db)


@router.post("/complaints", response_model=ComplaintResponse, status_code=201)
async def create_complaint(
    data: ComplaintCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_tenant)],
) -> ComplaintResponse:
    """민원을 접수합니다 (입주자).

    File a new complaint as the calling tenant.
    """
    complaint: Complaint = await complaint_service.create_complaint(db, current_user, data)
    await db.commit()
    return await complaint_service.build_response(db, complaint)


@router.get("/complaints/mine", response_model=list[ComplaintResponse])
async def list_my_complaints(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_tenant)],
) -> list[ComplaintResponse]:
    """내 민원 목록 (입주자) — The calling tenant's complaints."""
    complaints: Sequence[Complaint] = await complaint_service.list_mine(db, current_user.id)
    return [await complaint_service.build_response(db, c) for c in complaints]


@router.get("/complaints", response_model=PaginatedResponse)
async def list_complaints(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_supervisor)],
    status: Annotated[str | None, Query()] = None,
    type_id: Annotated[int | None, Query()] = None,
    tenant_email: Annotated[str | None, Query()] = None,
    building: Annotated[str | None, Query()] = None,
    flat: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=100)] = 20,
) -> PaginatedResponse:
    """민원 목록을 필터링하여 조회합니다 (감독자).

    List complaints with status, category and tenant filters.
    """
    complaints, total = await complaint_service.list_complaints(
        db,
        status=status,
        type_id=type_id,
        tenant_email=tenant_email,
        building_name=building,
        room_number=flat,
        page=page,
        per_page=per_page,
    )
    items: list[ComplaintResponse] = [await complaint_service.build_response(db, c) for c in complaints]
    return PaginatedResponse(items=items, total=total, page=page, per_page=per_page)


@router.get("/complaints/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(
    complaint_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> ComplaintResponse:
    """민원 상세 — 감독자 또는 접수한 입주자만.

    Complaint detail, visible to supervisors and the filing tenant.
    """
    complaint: Complaint = await complaint_service.get_complaint(db, complaint_id)
    if current_user.role != ROLE_SUPERVISOR and not (
        current_user.role == ROLE_TENANT and complaint.tenant_id == current_user.id
    ):
        raise ForbiddenError("이 민원을 조회할 권한이 없습니다 (Forbidden)")
    return await complaint_service.build_response(db, complaint)


@router.patch("/complaints/{complaint_id}", response_model=ComplaintResponse)
async def update_complaint(
    complaint_id: int,
    data: ComplaintUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_supervisor)],
) -> ComplaintResponse:
    """민원 우선순위를 변경합니다 (감독자).

    Update complaint priority. Status is derived and cannot be set.
    """
    complaint: Complaint = await complaint_service.update_complaint(db, complaint_id, data)
    await db.commit()
    return await complaint_service.build_response(db, complaint)


@router.post(
    "/complaints/{complaint_id}/assign",
    response_model=list[AssignmentResponse],
    status_code=201,
)
async def assign_team(
    complaint_id: int,
    data: AssignTeamRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_supervisor)],
) -> list[AssignmentResponse]:
    """민원에 작업자 팀을 배정합니다 (감독자).

    Assign a batch of workers. The first batch must name its leader.
    """
    created: list[ComplaintAssignment] = await team_service.assign_team(db, complaint_id, data, current_user)
    await db.commit()
    return await _with_workers(db, created)


@router.get("/complaints/{complaint_id}/assignments", response_model=list[TeamAssignmentResponse])
async def list_complaint_assignments(
    complaint_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_supervisor)],
) -> list[TeamAssignmentResponse]:
    """민원의 배정 목록 (작업자, 최신 방문 포함) — Team view for supervisors."""
    return await assignment_service.list_for_complaint(db, complaint_id)


@router.patch("/complaints/{complaint_id}/assignments", response_model=list[TeamAssignmentResponse])
async def update_complaint_team(
    complaint_id: int,
    data: TeamUpdateRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_supervisor)],
) -> list[TeamAssignmentResponse]:
    """민원 팀을 수정합니다 (리더 변경, 팀원 제외).

    Change the leader and/or remove members that have not started work.
    """
    await team_service.update_team(db, complaint_id, data)
    await db.commit()
    return await assignment_service.list_for_complaint(db, complaint_id)


async def _with_workers(
    db: AsyncSession,
    assignments: list[ComplaintAssignment],
) -> list[AssignmentResponse]:
    workers = await profile_repository.get_many(db, [a.worker_id for a in assignments])
    return [await assignment_service.build_response(a, workers.get(a.worker_id)) for a in assignments]
