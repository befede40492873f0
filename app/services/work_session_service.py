"""작업 세션 정산 서비스 — 리더 완료 보고 시 팀원 작업 시간 기록.

Work Session Reconciliation Service.
When the team leader marks an assignment done, every live teammate on the
same complaint gets work-session rows tied to the leader's latest visit:
either the leader's window, a legacy per-assignment endpoint override, or an
explicit per-worker interval list.

Planning (plan_team_intervals) is pure and raises before anything is
written; reconcile_team_sessions only applies an already validated plan.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assignment import ComplaintAssignment
from app.models.visit import AssignmentVisit
from app.repositories.visit_repository import work_session_repository
from app.schemas.assignment import (
    LegacyAssignmentOverride,
    OverrideInterval,
    WorkerIntervalsOverride,
)
from app.utils.datetime_utils import ensure_utc
from app.utils.exceptions import BadRequestError

Interval = tuple[datetime, datetime]


def clean_intervals(intervals: Sequence[OverrideInterval]) -> list[Interval]:
    """구간 목록을 정리합니다.

    Clean a raw interval list: drop intervals missing either endpoint,
    normalize to UTC, and discard intervals with end <= start. Order is kept.

    Args:
        intervals: 요청으로 받은 구간 목록 (Raw intervals from the request)

    Returns:
        list[Interval]: 유효한 (start_at, end_at) 목록 (Valid UTC pairs)
    """
    cleaned: list[Interval] = []
    for interval in intervals:
        if interval.start_at is None or interval.end_at is None:
            continue
        start_at: datetime = ensure_utc(interval.start_at)
        end_at: datetime = ensure_utc(interval.end_at)
        if end_at <= start_at:
            continue
        cleaned.append((start_at, end_at))
    return cleaned


def plan_team_intervals(
    team: Sequence[ComplaintAssignment],
    window: Interval,
    overrides: Sequence[WorkerIntervalsOverride | LegacyAssignmentOverride] | None = None,
) -> dict[int, list[Interval]]:
    """팀원별 작업 구간 계획을 세웁니다.

    Decide the session intervals of every teammate.

    Args:
        team: 거절되지 않은 팀 배정 목록, 리더 포함 (Live team rows, leader included)
        window: 리더 최신 방문의 (time_in, time_out) (Leader's latest visit window)
        overrides: 작업자별 구간 또는 배정별 단일 구간 (Per-worker or legacy overrides)

    Returns:
        dict[int, list[Interval]]: 배정 ID → 구간 목록 (Intervals per assignment id)

    Raises:
        BadRequestError: 팀에 없는 작업자/배정을 지정한 경우
                         (An override names a worker or assignment outside the team)
    """
    window_start: datetime = ensure_utc(window[0])
    window_end: datetime = ensure_utc(window[1])

    by_worker: dict[UUID, ComplaintAssignment] = {a.worker_id: a for a in team}
    by_assignment: dict[int, ComplaintAssignment] = {a.id: a for a in team}

    worker_intervals: dict[int, list[Interval]] = {}
    legacy: dict[int, LegacyAssignmentOverride] = {}

    for override in overrides or []:
        if isinstance(override, WorkerIntervalsOverride):
            member: ComplaintAssignment | None = by_worker.get(override.worker_id)
            if member is None:
                raise BadRequestError(
                    f"팀에 없는 작업자입니다 (Worker {override.worker_id} is not on this team)"
                )
            # 같은 작업자가 여러 번 오면 구간을 합침 — Repeated entries accumulate
            worker_intervals.setdefault(member.id, []).extend(clean_intervals(override.intervals))
        else:
            if override.assignment_id not in by_assignment:
                raise BadRequestError(
                    f"팀에 없는 배정입니다 (Assignment {override.assignment_id} is not on this team)"
                )
            legacy[override.assignment_id] = override

    plan: dict[int, list[Interval]] = {}
    for member in team:
        if member.id in worker_intervals:
            plan[member.id] = worker_intervals[member.id]
            continue

        start_at: datetime = window_start
        end_at: datetime = window_end
        legacy_override: LegacyAssignmentOverride | None = legacy.get(member.id)
        if legacy_override is not None:
            if legacy_override.start_at is not None:
                start_at = ensure_utc(legacy_override.start_at)
            if legacy_override.end_at is not None:
                end_at = ensure_utc(legacy_override.end_at)
        plan[member.id] = [(start_at, end_at)] if end_at > start_at else []

    return plan


class WorkSessionService:
    """작업 세션 정산 서비스.

    Applies a reconciliation plan to assignment_work_sessions.
    """

    async def reconcile_team_sessions(
        self,
        db: AsyncSession,
        visit: AssignmentVisit,
        team: Sequence[ComplaintAssignment],
        plan: dict[int, list[Interval]],
    ) -> None:
        """계획된 구간으로 팀원 세션을 교체합니다.

        Replace each teammate's sessions tied to this visit with the planned
        intervals. Runs inside the caller's transaction; nothing is committed
        here, so a failure on any teammate leaves no partial sessions.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            visit: 리더의 최신 방문 (Leader's latest visit)
            team: 팀 배정 목록 (Team rows)
            plan: plan_team_intervals() 결과 (Validated plan)
        """
        for member in team:
            await work_session_repository.replace_for_visit(
                db,
                visit_id=visit.id,
                worker_id=member.worker_id,
                assignment_id=member.id,
                intervals=plan.get(member.id, []),
            )


# 싱글턴 인스턴스 — Singleton instance
work_session_service: WorkSessionService = WorkSessionService()
