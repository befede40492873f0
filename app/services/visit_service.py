"""방문 서비스 — 방문 상세 저장(업서트) 및 방문 응답 구성.

Visit Service — Upserts the open visit of an assignment from
PUT /assignments/{id}/detail and renders visits for read endpoints.

Upsert rules:
    - 열린 방문(time_out 없음)이 있으면 수정, 없으면 새로 생성
      (Update the open visit, or create one: time_in defaults to now)
    - 요청에 포함된 키만 적용 (Only keys present in the body are applied)
    - needs_revisit=true → outcome "revisit", time_out 미지정 시 지금 시각으로 종료
      (Auto-closed at now unless an explicit time_out is given)
    - 그 외 outcome = time_out 있으면 "completed", 없으면 null
    - materials는 해당 방문 범위에서 전체 교체 (Full replace per visit)
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.assignment import ComplaintAssignment
from app.models.catalog import Store
from app.models.user import Profile
from app.models.visit import AssignmentVisit, AssignmentWorkSession
from app.repositories.catalog_repository import material_repository, store_repository
from app.repositories.visit_repository import visit_repository, work_session_repository
from app.schemas.assignment import (
    AssignmentDetailUpdate,
    MaterialRef,
    VisitResponse,
    WorkSessionResponse,
)
from app.services.assignment_workflow import TERMINAL_STATUSES
from app.utils.datetime_utils import ensure_utc, minutes_between, utcnow
from app.utils.exceptions import BadRequestError, ForbiddenError


class VisitService:
    """방문 기록 서비스.

    Service handling visit upserts, material sync and visit rendering.
    """

    async def _validate_references(self, db: AsyncSession, data: AssignmentDetailUpdate) -> None:
        """매장/자재 ID 존재 여부를 검증합니다.

        Raises:
            BadRequestError: 알 수 없는 매장 또는 자재 (Unknown store or material id)
        """
        fields: set[str] = data.model_fields_set
        if "store_id" in fields and data.store_id is not None:
            if await store_repository.get_by_id(db, data.store_id) is None:
                raise BadRequestError(f"알 수 없는 매장입니다 (Unknown store {data.store_id})")

        if "materials" in fields and data.materials:
            existing: set[int] = await material_repository.get_existing_ids(db, data.materials)
            missing: list[int] = sorted(set(data.materials) - existing)
            if missing:
                raise BadRequestError(f"알 수 없는 자재입니다 (Unknown materials {missing})")

    async def upsert_detail(
        self,
        db: AsyncSession,
        assignment: ComplaintAssignment,
        current_user: Profile,
        data: AssignmentDetailUpdate,
    ) -> AssignmentVisit:
        """배정의 열린 방문을 생성하거나 수정합니다.

        Create or update the open visit of an assignment.
        Repeating the same body against an open visit leaves one visit with
        the same values.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            assignment: 대상 배정 (Target assignment)
            current_user: 요청자 — 배정된 작업자여야 함 (Caller, must be the bound worker)
            data: 방문 상세 (Visit fields)

        Returns:
            AssignmentVisit: 저장된 방문 (Saved visit)

        Raises:
            ForbiddenError: 본인 배정이 아닐 때 (Not the bound worker)
            BadRequestError: 종료된 배정, 역전된 시간, 알 수 없는 매장/자재
                             (Terminal assignment, inverted window, unknown store/material)
        """
        if assignment.worker_id != current_user.id:
            raise ForbiddenError("본인에게 배정된 작업만 기록할 수 있습니다 (Forbidden)")
        if assignment.status in TERMINAL_STATUSES:
            raise BadRequestError(
                f"'{assignment.status}' 배정은 수정할 수 없습니다 (Assignment is {assignment.status})"
            )

        await self._validate_references(db, data)

        fields: set[str] = data.model_fields_set
        now: datetime = utcnow()
        visit: AssignmentVisit | None = await visit_repository.get_open_visit(db, assignment.id)

        # 새 값 계산 — Resolve the resulting values before touching the row
        time_in: datetime | None = ensure_utc(visit.time_in) if visit is not None else None
        if "time_in" in fields:
            time_in = ensure_utc(data.time_in)
        if visit is None and time_in is None:
            time_in = now

        time_out: datetime | None = ensure_utc(visit.time_out) if visit is not None else None
        if "time_out" in fields:
            time_out = ensure_utc(data.time_out)

        auto_closed: bool = False
        if "needs_revisit" in fields and data.needs_revisit:
            outcome: str | None = "revisit"
            if time_out is None:
                # 지금 닫힘 — a visit opened in this same call closes with zero length
                time_out = now
                auto_closed = True
        else:
            outcome = "completed" if time_out is not None else None

        if not auto_closed and time_in is not None and time_out is not None and time_out <= time_in:
            raise BadRequestError(
                "종료 시각은 시작 시각 이후여야 합니다 (time_out must be after time_in)"
            )

        values: dict = {"time_in": time_in, "time_out": time_out, "outcome": outcome}
        if "store_id" in fields:
            values["store_id"] = data.store_id
        if "note" in fields:
            values["note"] = data.note

        if visit is None:
            values.update({"assignment_id": assignment.id, "created_by": current_user.id})
            visit = await visit_repository.create(db, values)
        else:
            visit = await visit_repository.update(db, visit, values)

        if "materials" in fields and data.materials is not None:
            await visit_repository.replace_materials(db, visit.id, data.materials)

        return visit

    async def build_visit_responses(
        self,
        db: AsyncSession,
        visits: Sequence[AssignmentVisit],
    ) -> list[VisitResponse]:
        """방문 응답 목록을 구성합니다 (매장명, 자재, 작업 세션 포함).

        Render visits with store names, materials and their work sessions.
        """
        if not visits:
            return []
        visit_ids: list[int] = [v.id for v in visits]

        store_ids: set[int] = {v.store_id for v in visits if v.store_id is not None}
        store_names: dict[int, str] = {}
        if store_ids:
            result = await db.execute(select(Store.id, Store.name).where(Store.id.in_(store_ids)))
            store_names = {row.id: row.name for row in result.all()}

        materials: dict[int, list[dict]] = await visit_repository.get_material_map(db, visit_ids)
        sessions: dict[int, list[AssignmentWorkSession]] = await work_session_repository.get_for_visits(
            db, visit_ids
        )

        return [
            VisitResponse(
                id=v.id,
                assignment_id=v.assignment_id,
                store_id=v.store_id,
                store_name=store_names.get(v.store_id) if v.store_id is not None else None,
                time_in=ensure_utc(v.time_in),
                time_out=ensure_utc(v.time_out),
                outcome=v.outcome,
                needs_revisit=v.needs_revisit,
                note=v.note,
                materials=[MaterialRef(**m) for m in materials.get(v.id, [])],
                sessions=[self.session_response(s) for s in sessions.get(v.id, [])],
                created_at=ensure_utc(v.created_at),
            )
            for v in visits
        ]

    def session_response(self, session: AssignmentWorkSession) -> WorkSessionResponse:
        return WorkSessionResponse(
            id=session.id,
            assignment_id=session.assignment_id,
            worker_id=str(session.worker_id),
            visit_id=session.visit_id,
            start_at=ensure_utc(session.start_at),
            end_at=ensure_utc(session.end_at),
            minutes=minutes_between(session.start_at, session.end_at),
        )


# 싱글턴 인스턴스 — Singleton instance
visit_service: VisitService = VisitService()
