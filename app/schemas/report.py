"""보고서 Pydantic 스키마 — 작업자/민원 보고서 행.

Report row schemas. The JSON format returns these rows directly; CSV and
xlsx exports are rendered from the same rows.
"""

from datetime import datetime

from pydantic import BaseModel


class WorkerReportRow(BaseModel):
    """작업자 보고서 행 — One row per work session.

    Attributes:
        worker_id: 작업자 ID (Worker id)
        assignment_id: 배정 ID (Assignment the session belongs to)
        complaint_id: 민원 ID (Complaint worked)
        is_leader: 리더 여부 (Leader flag of the assignment)
        status: 배정 상태 (Assignment status)
        session_start / session_end: 세션 구간 (Session window)
        session_minutes: 분 단위 길이 (Length in whole minutes)
        store_id / store_name: 방문 매장 (Store of the linked visit)
        complaint_desc: 민원 내용 (Complaint description)
    """

    worker_id: str
    worker_name: str | None = None
    worker_email: str | None = None
    assignment_id: int
    complaint_id: int
    is_leader: bool
    status: str | None = None
    session_start: datetime
    session_end: datetime
    session_minutes: int
    store_id: int | None = None
    store_name: str | None = None
    complaint_desc: str | None = None


class WorkDetail(BaseModel):
    """민원 보고서의 방문별 작업 내역 — Per-visit work detail."""

    worker_id: str
    worker_name: str | None = None
    worker_email: str | None = None
    store_name: str | None = None
    time_in: datetime | None = None
    time_out: datetime | None = None
    materials: list[str] = []
    needs_revisit: bool = False


class ComplaintReportRow(BaseModel):
    """민원 보고서 행 — One row per complaint."""

    complaint_id: int
    created_at: datetime
    tenant_id: str
    tenant_name: str | None = None
    tenant_email: str | None = None
    building: str | None = None
    flat: str | None = None
    description: str | None = None
    status: str
    priority: str
    staff: str | None = None
    work_details: list[WorkDetail] = []
