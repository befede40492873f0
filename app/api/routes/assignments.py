"""배정 라우터 — 상태 변경, 수락/거절, 방문 상세, 내 배정 API.

Assignment Router — Status commands, accept/reject, visit detail upsert and
the worker's own assignment list.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, require_worker
from app.database import get_db
from app.models.assignment import ComplaintAssignment
from app.models.user import Profile
from app.schemas.assignment import (
    AssignmentDetailResponse,
    AssignmentDetailUpdate,
    AssignmentRespondRequest,
    AssignmentResponse,
    MyAssignmentResponse,
    StatusChangeRequest,
    StatusChangeResponse,
)
from app.services.assignment_service import assignment_service
from app.services.visit_service import visit_service

router: APIRouter = APIRouter()


@router.get("/assignments/mine", response_model=list[MyAssignmentResponse])
async def list_my_assignments(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_worker)],
    status: Annotated[str | None, Query()] = None,
) -> list[MyAssignmentResponse]:
    """내 배정 목록을 조회합니다 (작업자).

    List the calling worker's assignments with complaint summaries.
    """
    return await assignment_service.list_mine(db, current_user, status=status)


@router.patch("/assignments/{assignment_id}/status", response_model=StatusChangeResponse)
async def change_assignment_status(
    assignment_id: int,
    data: StatusChangeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> StatusChangeResponse:
    """배정 상태를 변경합니다 (start / mark_done / approve / reopen).

    Apply a status action. The body is parsed into a typed command first;
    unknown actions fail with 400 before anything is loaded.
    A leader's mark_done also reconciles teammate work sessions.
    """
    command = data.to_command()
    result: StatusChangeResponse = await assignment_service.change_status(
        db, assignment_id, command, current_user
    )
    await db.commit()
    return result


@router.patch("/assignments/{assignment_id}", response_model=AssignmentResponse)
async def respond_to_assignment(
    assignment_id: int,
    data: AssignmentRespondRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(require_worker)],
) -> AssignmentResponse:
    """배정을 수락하거나 거절합니다 (배정된 작업자).

    Accept or reject an assignment as its bound worker.
    """
    assignment: ComplaintAssignment = await assignment_service.respond(
        db, assignment_id, data.status, current_user
    )
    await db.commit()
    return await assignment_service.build_response(assignment, current_user)


@router.get("/assignments/{assignment_id}/detail", response_model=AssignmentDetailResponse)
async def get_assignment_detail(
    assignment_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> AssignmentDetailResponse:
    """배정 상세를 조회합니다 (최신 방문, 방문 이력, 팀원).

    Composite assignment view for the team or a supervisor.
    """
    return await assignment_service.get_detail(db, assignment_id, current_user)


@router.put("/assignments/{assignment_id}/detail", response_model=AssignmentDetailResponse)
async def upsert_assignment_detail(
    assignment_id: int,
    data: AssignmentDetailUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[Profile, Depends(get_current_user)],
) -> AssignmentDetailResponse:
    """방문 상세를 저장합니다 (열린 방문 업서트).

    Create or update the open visit of the caller's assignment, then return
    the refreshed detail view.
    """
    assignment: ComplaintAssignment = await assignment_service.get_assignment(db, assignment_id)
    await visit_service.upsert_detail(db, assignment, current_user, data)
    await db.commit()
    return await assignment_service.get_detail(db, assignment_id, current_user)
