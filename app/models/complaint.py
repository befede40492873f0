"""민원 관련 SQLAlchemy ORM 모델 정의.

Complaint-related SQLAlchemy ORM model definitions.

Tables:
    - complaint_types: 민원 유형 (Complaint categories, e.g. plumbing, electrical)
    - complaints: 세입자 민원 (Tenant complaint tickets)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, Integer, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ComplaintType(Base):
    """민원 유형 모델.

    Complaint type (category) model.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        name: 유형 이름 (Category name, unique)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "complaint_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Complaint(Base):
    """민원 모델 — 세입자가 접수한 유지보수 요청.

    Complaint model — A maintenance ticket filed by a tenant.

    The status column is never written directly by API callers. It is
    recomputed from the complaint's assignments every time one of them
    changes (see assignment_workflow.derive_complaint_status):
        pending → assigned → in_progress → pending_review → completed

    Attributes:
        id: 고유 식별자 (Unique identifier)
        tenant_id: 접수한 세입자 FK (Tenant profile who filed the complaint)
        type_id: 민원 유형 FK (Complaint category)
        description: 상세 내용 (Free-text description)
        status: 파생 상태 (Derived status, see above)
        priority: 우선순위 (Priority: "low" | "medium" | "high")
        image_path: 첨부 이미지 경로 (Storage path of the uploaded photo, optional)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "complaints"

    # 민원 고유 식별자 — Complaint identifier (auto-increment)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 세입자 FK — Tenant who filed the complaint
    tenant_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    # 민원 유형 FK — Complaint category
    type_id: Mapped[int] = mapped_column(Integer, ForeignKey("complaint_types.id"), nullable=False)
    # 상세 내용 — Description
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # 파생 상태 — Derived from assignment statuses, never set by callers
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    # 우선순위 — "low" | "medium" | "high"
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    # 첨부 이미지 경로 — Uploaded photo path (업로드 자체는 외부 스토리지 담당)
    image_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
