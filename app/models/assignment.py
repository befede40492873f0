"""민원 배정 SQLAlchemy ORM 모델 정의.

Complaint assignment SQLAlchemy ORM model definition.
One row per (complaint, worker). A complaint with several rows is worked by a
team; exactly one row of the team carries is_leader=True.

Tables:
    - complaint_assignments: 작업자 배정 (Worker claims on complaints)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey, Index, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ComplaintAssignment(Base):
    """민원 배정 모델 — 한 작업자의 민원 담당 기록.

    Complaint assignment model — One worker's claim on one complaint.

    Status lifecycle:
        assigned → accepted → in_progress → pending_review → completed
        reopen: pending_review/completed → in_progress
        rejected: 초기 상태(assigned/accepted)에서만 도달, 이후 변경 불가
                  (absorbing, reachable from assigned/accepted only)

    Attributes:
        id: 고유 식별자 (Unique identifier)
        complaint_id: 민원 FK (Complaint being worked)
        worker_id: 작업자 FK (Assigned worker profile)
        assigned_by: 배정한 감독자 FK (Supervisor who created the row)
        status: 진행 상태 (Workflow status, see above)
        is_leader: 팀 리더 여부 (Team leader flag, one per complaint)
        scheduled_start: 예정 시작 시각 (Planned start, optional)
        scheduled_end: 예정 종료 시각 (Planned end, optional)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)

    Constraints:
        uq_assignment_complaint_worker: 민원당 작업자 1회 배정
            (A worker is assigned to a complaint at most once)
        uq_assignment_one_leader: 민원당 리더 1명 (partial unique index on is_leader)
    """

    __tablename__ = "complaint_assignments"

    # 배정 고유 식별자 — Assignment identifier (auto-increment)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 민원 FK — Complaint (CASCADE: 민원 삭제 시 배정도 삭제)
    complaint_id: Mapped[int] = mapped_column(Integer, ForeignKey("complaints.id", ondelete="CASCADE"), nullable=False, index=True)
    # 작업자 FK — Assigned worker
    worker_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    # 배정자 FK — Supervisor who assigned (nullable for seeded rows)
    assigned_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=True)
    # 진행 상태 — assigned, accepted, in_progress, pending_review, completed, rejected
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="assigned")
    # 팀 리더 여부 — Team leader flag
    is_leader: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 예정 작업 시간 — Planned work window (optional)
    scheduled_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    scheduled_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("complaint_id", "worker_id", name="uq_assignment_complaint_worker"),
        Index(
            "uq_assignment_one_leader",
            "complaint_id",
            unique=True,
            postgresql_where=text("is_leader"),
            sqlite_where=text("is_leader"),
        ),
    )
