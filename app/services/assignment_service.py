"""민원 배정 서비스 — 상태 변경, 수락/거절, 조회 응답 구성.

Assignment Service — Business logic for the assignment workflow.
Applies status commands (start, mark_done, approve, reopen), runs team
session reconciliation when a leader marks done, and builds the composite
read views (detail, per-complaint list, my assignments).

All writes of one command happen inside the request session; the route
commits once at the end, so a failure anywhere leaves nothing behind.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assignment import ComplaintAssignment
from app.models.complaint import Complaint, ComplaintType
from app.models.user import ROLE_SUPERVISOR, Profile
from app.models.visit import AssignmentVisit
from app.repositories.assignment_repository import assignment_repository
from app.repositories.user_repository import profile_repository
from app.repositories.visit_repository import visit_repository
from app.schemas.assignment import (
    AssignmentDetailResponse,
    AssignmentResponse,
    ComplaintSummary,
    MarkDoneCommand,
    MyAssignmentResponse,
    StatusChangeResponse,
    TeamAssignmentResponse,
    TeammateResponse,
    VisitResponse,
)
from app.services.assignment_workflow import (
    ACTIVE_STATUSES,
    PENDING_REVIEW,
    next_status,
    respond_status,
)
from app.services.complaint_service import complaint_service
from app.services.visit_service import visit_service
from app.services.work_session_service import plan_team_intervals, work_session_service
from app.utils.datetime_utils import ensure_utc
from app.utils.exceptions import BadRequestError, ForbiddenError, NotFoundError


class AssignmentService:
    """민원 배정 서비스.

    Assignment service handling status commands, worker responses and
    read-side aggregation.
    """

    async def get_assignment(self, db: AsyncSession, assignment_id: int) -> ComplaintAssignment:
        """배정을 조회합니다.

        Raises:
            NotFoundError: 배정이 없을 때 (When assignment not found)
        """
        assignment: ComplaintAssignment | None = await assignment_repository.get_by_id(db, assignment_id)
        if assignment is None:
            raise NotFoundError("배정을 찾을 수 없습니다 (Assignment not found)")
        return assignment

    async def change_status(
        self,
        db: AsyncSession,
        assignment_id: int,
        command,
        current_user: Profile,
    ) -> StatusChangeResponse:
        """배정 상태 명령을 적용합니다.

        Apply a typed status command to an assignment.

        When the bound worker is the team leader and marks done, the leader's
        latest visit must have both time_in and time_out; live teammates
        follow into pending_review and every teammate's sessions for that
        visit are replaced (see work_session_service).

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            assignment_id: 배정 ID (Assignment id)
            command: StartCommand | MarkDoneCommand | ApproveCommand | ReopenCommand
            current_user: 요청자 (Caller)

        Returns:
            StatusChangeResponse: 새 배정 상태와 민원 상태 (New assignment and complaint status)

        Raises:
            NotFoundError: 배정이 없을 때 (When assignment not found)
            ForbiddenError: 권한 없는 요청자, 또는 리더가 아닌 작업자의 오버라이드
                            (Wrong actor, or overrides sent by a non-leader)
            BadRequestError: 허용되지 않는 전이, 시간 미입력, 팀 외 오버라이드
                             (Invalid transition, missing visit times, foreign override)
        """
        assignment: ComplaintAssignment = await self.get_assignment(db, assignment_id)

        status: str = next_status(
            command.action,
            assignment.status,
            current_user.role,
            is_bound_worker=assignment.worker_id == current_user.id,
        )

        if isinstance(command, MarkDoneCommand):
            if assignment.is_leader:
                await self._mark_done_as_leader(db, assignment, command)
            elif command.overrides:
                raise ForbiddenError(
                    "팀 리더만 팀원 작업 시간을 지정할 수 있습니다 (Only the team leader can set teammate times)"
                )

        assignment.status = status
        await db.flush()

        complaint_status: str = await complaint_service.refresh_status(db, assignment.complaint_id)
        return StatusChangeResponse(id=assignment.id, status=status, complaint_status=complaint_status)

    async def _mark_done_as_leader(
        self,
        db: AsyncSession,
        leader: ComplaintAssignment,
        command: MarkDoneCommand,
    ) -> None:
        """리더 완료 보고 — 팀원 상태 이동 및 작업 세션 정산.

        Leader mark_done: validate the visit window and overrides, then move
        live teammates to pending_review and reconcile their sessions.
        """
        visit: AssignmentVisit | None = await visit_repository.get_latest(db, leader.id)
        if visit is None or visit.time_in is None or visit.time_out is None:
            raise BadRequestError(
                "완료 전에 방문 시작/종료 시각을 입력하세요 (Add time in and time out first)"
            )

        team: Sequence[ComplaintAssignment] = await assignment_repository.get_team(
            db, leader.complaint_id, include_rejected=False
        )
        # 쓰기 전에 전체 검증 — Plan (and validate overrides) before any write
        plan = plan_team_intervals(team, (visit.time_in, visit.time_out), command.overrides)

        for member in team:
            if member.id != leader.id and member.status in ACTIVE_STATUSES:
                member.status = PENDING_REVIEW
        await db.flush()

        await work_session_service.reconcile_team_sessions(db, visit, team, plan)

    async def respond(
        self,
        db: AsyncSession,
        assignment_id: int,
        response: str,
        current_user: Profile,
    ) -> ComplaintAssignment:
        """작업자가 배정을 수락하거나 거절합니다.

        Accept or reject an assignment as its bound worker.

        Raises:
            NotFoundError: 배정이 없을 때 (When assignment not found)
            ForbiddenError: 본인 배정이 아닐 때 (Not the bound worker)
            BadRequestError: 작업 시작 후 응답 (Work already started)
        """
        assignment: ComplaintAssignment = await self.get_assignment(db, assignment_id)
        if assignment.worker_id != current_user.id:
            raise ForbiddenError("본인에게 배정된 작업만 응답할 수 있습니다 (Forbidden)")

        assignment.status = respond_status(response, assignment.status)
        await db.flush()
        await complaint_service.refresh_status(db, assignment.complaint_id)
        return assignment

    # --- 조회 (Read side) ---

    async def build_response(
        self,
        assignment: ComplaintAssignment,
        worker: Profile | None,
    ) -> AssignmentResponse:
        """배정 응답을 구성합니다 (작업자 이름 포함).

        Build the assignment response with worker name, email and mobile.
        """
        return AssignmentResponse(**self._assignment_fields(assignment, worker))

    def _assignment_fields(self, assignment: ComplaintAssignment, worker: Profile | None) -> dict:
        return {
            "id": assignment.id,
            "complaint_id": assignment.complaint_id,
            "worker_id": str(assignment.worker_id),
            "worker_name": worker.name if worker else None,
            "worker_email": worker.email if worker else None,
            "worker_mobile": worker.mobile if worker else None,
            "assigned_by": str(assignment.assigned_by) if assignment.assigned_by else None,
            "status": assignment.status,
            "is_leader": assignment.is_leader,
            "scheduled_start": ensure_utc(assignment.scheduled_start),
            "scheduled_end": ensure_utc(assignment.scheduled_end),
            "created_at": ensure_utc(assignment.created_at),
            "updated_at": ensure_utc(assignment.updated_at),
        }

    async def _complaint_summaries(
        self,
        db: AsyncSession,
        complaint_ids: list[int],
    ) -> dict[int, ComplaintSummary]:
        """민원 요약 (유형명, 입주자 건물/호실 포함) — Complaint summaries by id."""
        if not complaint_ids:
            return {}
        result = await db.execute(
            select(Complaint, ComplaintType.name, Profile.building_name, Profile.room_number)
            .join(ComplaintType, ComplaintType.id == Complaint.type_id)
            .join(Profile, Profile.id == Complaint.tenant_id)
            .where(Complaint.id.in_(complaint_ids))
        )
        summaries: dict[int, ComplaintSummary] = {}
        for complaint, type_name, building_name, room_number in result.all():
            summaries[complaint.id] = ComplaintSummary(
                id=complaint.id,
                description=complaint.description,
                status=complaint.status,
                priority=complaint.priority,
                type_name=type_name,
                building_name=building_name,
                room_number=room_number,
                image_path=complaint.image_path,
                created_at=ensure_utc(complaint.created_at),
            )
        return summaries

    async def get_detail(
        self,
        db: AsyncSession,
        assignment_id: int,
        current_user: Profile,
    ) -> AssignmentDetailResponse:
        """배정 상세 복합 응답을 구성합니다.

        Build the composite detail view: assignment, complaint summary,
        latest visit, visit history (newest first, with materials and
        sessions) and teammate roster.

        Raises:
            NotFoundError: 배정이 없을 때 (When assignment not found)
            ForbiddenError: 배정 작업자, 팀원, 감독자가 아닐 때
                            (Caller is not the worker, a teammate or a supervisor)
        """
        assignment: ComplaintAssignment = await self.get_assignment(db, assignment_id)
        team: Sequence[ComplaintAssignment] = await assignment_repository.get_team(db, assignment.complaint_id)

        if current_user.role != ROLE_SUPERVISOR and current_user.id not in {a.worker_id for a in team}:
            raise ForbiddenError("이 배정을 조회할 권한이 없습니다 (Forbidden)")

        workers: dict[UUID, Profile] = await profile_repository.get_many(db, [a.worker_id for a in team])
        summaries: dict[int, ComplaintSummary] = await self._complaint_summaries(db, [assignment.complaint_id])

        visits: Sequence[AssignmentVisit] = await visit_repository.get_history(db, [assignment.id])
        visit_responses: list[VisitResponse] = await visit_service.build_visit_responses(db, visits)

        return AssignmentDetailResponse(
            assignment=await self.build_response(assignment, workers.get(assignment.worker_id)),
            complaint=summaries[assignment.complaint_id],
            latest_visit=visit_responses[0] if visit_responses else None,
            visits=visit_responses,
            teammates=[
                TeammateResponse(
                    assignment_id=a.id,
                    worker_id=str(a.worker_id),
                    worker_name=workers[a.worker_id].name if a.worker_id in workers else None,
                    worker_email=workers[a.worker_id].email if a.worker_id in workers else None,
                    is_leader=a.is_leader,
                    status=a.status,
                )
                for a in team
            ],
        )

    async def list_for_complaint(
        self,
        db: AsyncSession,
        complaint_id: int,
    ) -> list[TeamAssignmentResponse]:
        """민원의 배정 목록 (작업자 프로필, 최신 방문 포함).

        List a complaint's assignments with worker profile and latest visit
        (store and material names) for the supervisor view.

        Raises:
            NotFoundError: 민원이 없을 때 (When complaint not found)
        """
        await complaint_service.get_complaint(db, complaint_id)
        team: Sequence[ComplaintAssignment] = await assignment_repository.get_team(db, complaint_id)
        workers: dict[UUID, Profile] = await profile_repository.get_many(db, [a.worker_id for a in team])

        items: list[TeamAssignmentResponse] = []
        for a in team:
            latest: AssignmentVisit | None = await visit_repository.get_latest(db, a.id)
            rendered: list[VisitResponse] = (
                await visit_service.build_visit_responses(db, [latest]) if latest else []
            )
            items.append(
                TeamAssignmentResponse(
                    **self._assignment_fields(a, workers.get(a.worker_id)),
                    latest_visit=rendered[0] if rendered else None,
                )
            )
        return items

    async def list_mine(
        self,
        db: AsyncSession,
        worker: Profile,
        status: str | None = None,
    ) -> list[MyAssignmentResponse]:
        """작업자 본인 배정 목록 (민원 요약 포함).

        List the calling worker's assignments with complaint summaries.
        """
        assignments: Sequence[ComplaintAssignment] = await assignment_repository.get_by_worker(
            db, worker.id, status=status
        )
        summaries: dict[int, ComplaintSummary] = await self._complaint_summaries(
            db, list({a.complaint_id for a in assignments})
        )
        return [
            MyAssignmentResponse(
                **self._assignment_fields(a, worker),
                complaint=summaries[a.complaint_id],
            )
            for a in assignments
            if a.complaint_id in summaries
        ]


# 싱글턴 인스턴스 — Singleton instance
assignment_service: AssignmentService = AssignmentService()
