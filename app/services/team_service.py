"""팀 배정 서비스 — 민원별 작업자 팀 구성 및 리더 지정.

Team Service — Builds and edits the worker team of a complaint.

Rules:
    - 첫 배정 묶음은 worker_ids 중 leader_id 필수
      (The first batch must name a leader among its workers)
    - 리더가 이미 있으면 다른 leader_id 지정 불가
      (A different leader cannot be passed while one exists)
    - 팀 제외는 작업 시작 전 상태에서만 가능 (Removal only before work begins)
    - 리더 플래그 변경은 _designate_leader() 한 곳에서만 수행
      (Every leader flag write goes through _designate_leader)
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assignment import ComplaintAssignment
from app.models.complaint import Complaint
from app.models.user import ROLE_WORKER, Profile
from app.repositories.assignment_repository import assignment_repository
from app.repositories.user_repository import profile_repository
from app.repositories.visit_repository import visit_repository
from app.schemas.assignment import AssignTeamRequest, TeamUpdateRequest
from app.services.assignment_workflow import ASSIGNED, REJECTED, REMOVABLE_STATUSES
from app.services.complaint_service import complaint_service
from app.utils.datetime_utils import ensure_utc
from app.utils.exceptions import BadRequestError, DuplicateError


class TeamService:
    """민원 팀 구성 서비스.

    Service handling team assignment, member removal and leader changes.
    """

    async def _designate_leader(
        self,
        db: AsyncSession,
        complaint_id: int,
        leader: ComplaintAssignment,
    ) -> None:
        """민원의 리더를 지정합니다 (유일한 리더 변경 경로).

        Make one assignment the leader of its complaint. Existing flags are
        cleared and flushed first so at most one row is ever flagged.
        """
        if leader.is_leader:
            return
        await assignment_repository.clear_leader(db, complaint_id)
        leader.is_leader = True
        await db.flush()

    async def assign_team(
        self,
        db: AsyncSession,
        complaint_id: int,
        data: AssignTeamRequest,
        assigned_by: Profile,
    ) -> list[ComplaintAssignment]:
        """민원에 작업자들을 배정합니다.

        Assign a batch of workers to a complaint.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            complaint_id: 민원 ID (Complaint id)
            data: 배정 요청 (Worker ids, leader, schedule)
            assigned_by: 배정하는 감독자 (Supervisor creating the rows)

        Returns:
            list[ComplaintAssignment]: 새로 생성된 배정 (Created assignments)

        Raises:
            NotFoundError: 민원이 없을 때 (When complaint not found)
            BadRequestError: 리더 누락/불일치, 작업자가 아님, 역전된 일정
                             (Missing or conflicting leader, non-worker id, inverted schedule)
            DuplicateError: 이미 배정된 작업자 (Worker already on this complaint)
        """
        complaint: Complaint = await complaint_service.get_complaint(db, complaint_id)

        scheduled_start = ensure_utc(data.scheduled_start)
        scheduled_end = ensure_utc(data.scheduled_end)
        if scheduled_start is not None and scheduled_end is not None and scheduled_end < scheduled_start:
            raise BadRequestError(
                "예정 종료가 예정 시작보다 빠릅니다 (scheduled_end is before scheduled_start)"
            )

        # 순서 유지 중복 제거 — Order-preserving de-duplication
        worker_ids: list[UUID] = list(dict.fromkeys(data.worker_ids))

        profiles: dict[UUID, Profile] = await profile_repository.get_many(db, worker_ids)
        invalid: list[str] = [
            str(wid) for wid in worker_ids
            if wid not in profiles or profiles[wid].role != ROLE_WORKER or not profiles[wid].is_active
        ]
        if invalid:
            raise BadRequestError(
                f"작업자 역할의 사용자만 배정할 수 있습니다 (Not active workers: {', '.join(invalid)})"
            )

        team: Sequence[ComplaintAssignment] = await assignment_repository.get_team(db, complaint.id)
        already: list[str] = [str(a.worker_id) for a in team if a.worker_id in worker_ids]
        if already:
            raise DuplicateError(
                f"이미 배정된 작업자입니다 (Already assigned: {', '.join(already)})"
            )

        current_leader: ComplaintAssignment | None = next((a for a in team if a.is_leader), None)
        if current_leader is None:
            if data.leader_id is None or data.leader_id not in worker_ids:
                raise BadRequestError(
                    "첫 배정에는 작업자 중 리더 지정이 필요합니다 (leader_id must be one of worker_ids)"
                )
        elif data.leader_id is not None and data.leader_id != current_leader.worker_id:
            raise BadRequestError(
                "이미 리더가 있습니다. 리더 변경은 팀 수정으로 하세요 "
                "(A leader already exists; change it through the team update)"
            )

        created: list[ComplaintAssignment] = []
        for worker_id in worker_ids:
            created.append(
                await assignment_repository.create(
                    db,
                    {
                        "complaint_id": complaint.id,
                        "worker_id": worker_id,
                        "assigned_by": assigned_by.id,
                        "status": ASSIGNED,
                        "is_leader": False,
                        "scheduled_start": scheduled_start,
                        "scheduled_end": scheduled_end,
                    },
                )
            )

        if current_leader is None:
            leader: ComplaintAssignment = next(a for a in created if a.worker_id == data.leader_id)
            await self._designate_leader(db, complaint.id, leader)

        await complaint_service.refresh_status(db, complaint.id)
        return created

    async def update_team(
        self,
        db: AsyncSession,
        complaint_id: int,
        data: TeamUpdateRequest,
    ) -> Sequence[ComplaintAssignment]:
        """민원 팀을 수정합니다 (리더 변경, 팀원 제외).

        Change the leader and/or remove members before work begins.
        Every check runs before the first write.

        Returns:
            Sequence[ComplaintAssignment]: 수정 후 팀 (Team after the change)

        Raises:
            NotFoundError: 민원이 없을 때 (When complaint not found)
            BadRequestError: 다른 민원의 배정, 작업 시작 후 제외, 리더 부재
                             (Foreign assignment id, member already working, no leader left)
        """
        complaint: Complaint = await complaint_service.get_complaint(db, complaint_id)
        team: Sequence[ComplaintAssignment] = await assignment_repository.get_team(db, complaint.id)
        by_id: dict[int, ComplaintAssignment] = {a.id: a for a in team}

        remove_ids: list[int] = list(dict.fromkeys(data.remove_assignment_ids))
        foreign: list[int] = [rid for rid in remove_ids if rid not in by_id]
        if foreign:
            raise BadRequestError(
                f"이 민원의 배정이 아닙니다 (Assignments not on this complaint: {foreign})"
            )
        started: list[int] = [rid for rid in remove_ids if by_id[rid].status not in REMOVABLE_STATUSES]
        if started:
            raise BadRequestError(
                f"작업이 시작된 배정은 제외할 수 없습니다 (Work already started on assignments {started})"
            )

        remaining: list[ComplaintAssignment] = [a for a in team if a.id not in remove_ids]

        new_leader: ComplaintAssignment | None = None
        if data.leader_id is not None:
            new_leader = next(
                (a for a in remaining if a.worker_id == data.leader_id and a.status != REJECTED),
                None,
            )
            if new_leader is None:
                raise BadRequestError(
                    "리더는 남아 있는 팀원 중에서 지정해야 합니다 (leader_id must be a remaining team member)"
                )
        elif remaining and not any(a.is_leader for a in remaining):
            raise BadRequestError(
                "팀에 리더가 남아 있거나 새로 지정되어야 합니다 (A leader must remain or be designated)"
            )

        if remove_ids:
            await visit_repository.delete_for_assignments(db, remove_ids)
            for rid in remove_ids:
                await db.delete(by_id[rid])
            await db.flush()

        if new_leader is not None:
            await self._designate_leader(db, complaint.id, new_leader)

        await complaint_service.refresh_status(db, complaint.id)
        return await assignment_repository.get_team(db, complaint.id)


# 싱글턴 인스턴스 — Singleton instance
team_service: TeamService = TeamService()
