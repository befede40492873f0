"""방문/작업 세션 SQLAlchemy ORM 모델 정의.

Visit and work-session SQLAlchemy ORM model definitions.

A visit is one trip to the site recorded against an assignment: which store
the materials came from, when the worker arrived and left, and whether the
job needs another visit. Work sessions attribute time to individual workers;
the leader's mark_done writes one set of sessions per visit for the whole
team.

Tables:
    - assignment_visits: 방문 기록 (Visits, at most one open per assignment)
    - assignment_visit_materials: 방문별 사용 자재 (Materials used on a visit)
    - assignment_work_sessions: 작업자별 작업 시간 (Per-worker time intervals)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer, Text, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class AssignmentVisit(Base):
    """방문 모델 — 배정에 대한 한 번의 현장 작업.

    Visit model — One bounded trip against an assignment.
    A visit with time_out NULL is "open"; the detail upsert keeps at most one
    open visit per assignment by updating it instead of creating another.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        assignment_id: 배정 FK (Assignment the visit belongs to)
        store_id: 자재 매장 FK (Store used on this visit, optional)
        time_in: 도착 시각 (Arrival time)
        time_out: 퇴장 시각 (Departure time, NULL while open)
        outcome: 결과 (Outcome: "completed" | "revisit" | NULL while open)
        note: 메모 (Free-text note)
        created_by: 작성자 FK (Profile that opened the visit)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "assignment_visits"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 배정 FK — Owning assignment (CASCADE: 배정 삭제 시 방문도 삭제)
    assignment_id: Mapped[int] = mapped_column(Integer, ForeignKey("complaint_assignments.id", ondelete="CASCADE"), nullable=False, index=True)
    # 자재 매장 FK — Store (nullable, 매장 없이 방문 가능)
    store_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("stores.id"), nullable=True)
    # 작업 시간 — Visit window (time_out NULL = open visit)
    time_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    time_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 결과 — "completed" | "revisit" | NULL
    outcome: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # 메모 — Free-text note
    note: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 작성자 FK — Profile that created the visit
    created_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def needs_revisit(self) -> bool:
        """재방문 필요 여부 — outcome이 "revisit"이면 True."""
        return self.outcome == "revisit"


class AssignmentVisitMaterial(Base):
    """방문-자재 연결 모델.

    Visit ↔ material join row. Synced with delete-then-insert semantics.
    """

    __tablename__ = "assignment_visit_materials"

    visit_id: Mapped[int] = mapped_column(Integer, ForeignKey("assignment_visits.id", ondelete="CASCADE"), primary_key=True)
    material_id: Mapped[int] = mapped_column(Integer, ForeignKey("materials.id"), primary_key=True)


class AssignmentWorkSession(Base):
    """작업 세션 모델 — 작업자 한 명의 작업 시간 구간.

    Work session model — A time interval attributed to one worker on one
    assignment. Sessions written by the leader's mark_done carry the visit id
    so that a re-submission for the same visit replaces them.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        assignment_id: 배정 FK (Teammate's assignment)
        worker_id: 작업자 FK (Worker the time is attributed to)
        visit_id: 방문 FK (Leader visit that produced the session, optional)
        start_at: 시작 시각 (Interval start)
        end_at: 종료 시각 (Interval end, strictly after start_at)
        created_at: 생성 일시 UTC (Creation timestamp)

    Constraints:
        ck_work_session_window: start_at < end_at
    """

    __tablename__ = "assignment_work_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 배정 FK — Teammate assignment (CASCADE)
    assignment_id: Mapped[int] = mapped_column(Integer, ForeignKey("complaint_assignments.id", ondelete="CASCADE"), nullable=False)
    # 작업자 FK — Worker profile
    worker_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    # 방문 FK — Scoping visit (리더 방문 단위로 교체됨)
    visit_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("assignment_visits.id", ondelete="CASCADE"), nullable=True)
    # 작업 구간 — Interval (start_at < end_at)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("start_at < end_at", name="ck_work_session_window"),
        Index("ix_work_sessions_visit_worker", "visit_id", "worker_id"),
    )
