"""민원 배정 관련 Pydantic 요청/응답 스키마 정의.

Assignment-related Pydantic request/response schema definitions.
Includes the status command variants, leader time overrides, visit detail
upsert, team management, and the composite read models.
"""

from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from app.utils.exceptions import BadRequestError


# === 리더 시간 오버라이드 (Leader time overrides) ===

class OverrideInterval(BaseModel):
    """작업 구간 — 한쪽 끝이 없으면 정리 단계에서 버려짐.

    One work interval. Intervals missing either endpoint are dropped later.
    """

    start_at: datetime | None = None
    end_at: datetime | None = None


class WorkerIntervalsOverride(BaseModel):
    """작업자별 구간 목록 오버라이드.

    Per-worker override: several non-contiguous intervals for one teammate.

    Attributes:
        worker_id: 팀원 프로필 ID (Teammate profile id)
        intervals: 작업 구간 목록 (Work intervals)
    """

    worker_id: UUID
    intervals: list[OverrideInterval]


class LegacyAssignmentOverride(BaseModel):
    """배정별 단일 구간 오버라이드 (구형 포맷).

    Legacy per-assignment override. Each endpoint that is set replaces the
    matching endpoint of the leader window.

    Attributes:
        assignment_id: 팀원 배정 ID (Teammate assignment id)
        start_at: 시작 시각 대체값 (Start override, optional)
        end_at: 종료 시각 대체값 (End override, optional)
    """

    assignment_id: int
    start_at: datetime | None = None
    end_at: datetime | None = None


TimeOverrides = list[WorkerIntervalsOverride] | list[LegacyAssignmentOverride]


# === 상태 변경 명령 (Status commands) ===

class StartCommand(BaseModel):
    """작업 시작 — Worker starts the assignment."""

    action: Literal["start"]


class MarkDoneCommand(BaseModel):
    """작업 완료 보고 — Worker reports done; a leader may attach overrides."""

    action: Literal["mark_done"]
    overrides: TimeOverrides | None = None


class ApproveCommand(BaseModel):
    """승인 — Supervisor approves reviewed work."""

    action: Literal["approve"]


class ReopenCommand(BaseModel):
    """재작업 — Supervisor sends work back to in_progress."""

    action: Literal["reopen"]


StatusCommand = Annotated[
    Union[StartCommand, MarkDoneCommand, ApproveCommand, ReopenCommand],
    Field(discriminator="action"),
]

_status_command_adapter: TypeAdapter = TypeAdapter(StatusCommand)


class StatusChangeRequest(BaseModel):
    """배정 상태 변경 요청 바디 (PATCH /assignments/{id}/status).

    Raw status change body. to_command() turns it into one of the typed
    command variants before any persistence call.

    Attributes:
        action: 동작 이름, 대소문자 무시 (Action name, case-insensitive)
        overrides: 리더 시간 오버라이드 (Leader time overrides, mark_done only)
    """

    action: str = ""
    overrides: TimeOverrides | None = None

    def to_command(self) -> StartCommand | MarkDoneCommand | ApproveCommand | ReopenCommand:
        """요청을 타입이 지정된 명령으로 변환합니다.

        Raises:
            BadRequestError: 알 수 없는 동작 (Unknown action → 400 "Invalid action")
        """
        payload: dict = {"action": self.action.strip().lower()}
        if payload["action"] == "mark_done":
            payload["overrides"] = self.overrides
        try:
            return _status_command_adapter.validate_python(payload)
        except ValidationError:
            raise BadRequestError("Invalid action")


class AssignmentRespondRequest(BaseModel):
    """배정 수락/거절 요청 (PATCH /assignments/{id}).

    Attributes:
        status: accepted | rejected
    """

    status: Literal["accepted", "rejected"]


# === 방문 상세 (Visit detail) ===

class AssignmentDetailUpdate(BaseModel):
    """방문 상세 저장 요청 (PUT /assignments/{id}/detail).

    Visit upsert body. Only keys present in the request are applied, so an
    explicit null (e.g. "time_out": null) is different from an absent key.

    Attributes:
        store_id: 매장 ID (Store visited)
        materials: 사용 자재 ID 목록, 전체 교체 (Material ids, full replace)
        time_in: 도착 시각 (Arrival time)
        time_out: 종료 시각 (Departure time)
        needs_revisit: 재방문 필요 여부 (Revisit flag)
        note: 메모 (Free-text note)
    """

    store_id: int | None = None
    materials: list[int] | None = None
    time_in: datetime | None = None
    time_out: datetime | None = None
    needs_revisit: bool | None = None
    note: str | None = None


# === 팀 관리 (Team management) ===

class AssignTeamRequest(BaseModel):
    """팀 배정 요청 (POST /complaints/{id}/assign).

    Attributes:
        worker_ids: 배정할 작업자 ID 목록 (Workers to add)
        leader_id: 리더 작업자 ID (Leader, required for the first batch)
        scheduled_start: 예정 시작 (Planned start, optional)
        scheduled_end: 예정 종료 (Planned end, optional)
    """

    worker_ids: list[UUID] = Field(min_length=1)
    leader_id: UUID | None = None
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None


class TeamUpdateRequest(BaseModel):
    """팀 수정 요청 (PATCH /complaints/{id}/assignments).

    Attributes:
        leader_id: 새 리더 작업자 ID (New leader, optional)
        remove_assignment_ids: 제외할 배정 ID 목록 (Assignments to remove)
    """

    leader_id: UUID | None = None
    remove_assignment_ids: list[int] = Field(default_factory=list)


# === 응답 (Responses) ===

class MaterialRef(BaseModel):
    """자재 참조 — Material id and name."""

    id: int
    name: str


class WorkSessionResponse(BaseModel):
    """작업 세션 응답 — One worker time interval."""

    id: int
    assignment_id: int
    worker_id: str
    visit_id: int | None = None
    start_at: datetime
    end_at: datetime
    minutes: int


class VisitResponse(BaseModel):
    """방문 응답 스키마.

    Visit detail with store name, materials and the work sessions tied to it.
    """

    id: int
    assignment_id: int
    store_id: int | None = None
    store_name: str | None = None
    time_in: datetime | None = None
    time_out: datetime | None = None
    outcome: str | None = None
    needs_revisit: bool = False
    note: str | None = None
    materials: list[MaterialRef] = []
    sessions: list[WorkSessionResponse] = []
    created_at: datetime


class AssignmentResponse(BaseModel):
    """배정 응답 스키마 (작업자 이름 포함).

    Assignment response schema with worker name and email.
    """

    id: int
    complaint_id: int
    worker_id: str
    worker_name: str | None = None
    worker_email: str | None = None
    worker_mobile: str | None = None
    assigned_by: str | None = None
    status: str
    is_leader: bool
    scheduled_start: datetime | None = None
    scheduled_end: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ComplaintSummary(BaseModel):
    """배정 화면용 민원 요약 — Complaint summary shown next to assignments."""

    id: int
    description: str
    status: str
    priority: str
    type_name: str | None = None
    building_name: str | None = None
    room_number: str | None = None
    image_path: str | None = None
    created_at: datetime


class StatusChangeResponse(BaseModel):
    """상태 변경 응답 — Result of a status action."""

    ok: bool = True
    id: int
    status: str
    complaint_status: str


class TeammateResponse(BaseModel):
    """팀원 응답 — Teammate roster entry."""

    assignment_id: int
    worker_id: str
    worker_name: str | None = None
    worker_email: str | None = None
    is_leader: bool
    status: str


class AssignmentDetailResponse(BaseModel):
    """배정 상세 응답 스키마 (GET /assignments/{id}/detail).

    Composite view: assignment, complaint summary, latest visit, visit
    history (newest first) and teammate roster.
    """

    assignment: AssignmentResponse
    complaint: ComplaintSummary
    latest_visit: VisitResponse | None = None
    visits: list[VisitResponse] = []
    teammates: list[TeammateResponse] = []


class MyAssignmentResponse(AssignmentResponse):
    """내 배정 응답 — Own assignment with complaint summary."""

    complaint: ComplaintSummary


class TeamAssignmentResponse(AssignmentResponse):
    """민원별 배정 응답 — Assignment with latest visit (supervisor view)."""

    latest_visit: VisitResponse | None = None
