"""사용자 프로필 SQLAlchemy ORM 모델 정의.

Profile SQLAlchemy ORM model definition.
Every account (tenant, worker, supervisor) is a row in `profiles`; the role
column drives route-level authorization.

Tables:
    - profiles: 사용자 계정 및 역할 (User accounts with role and tenant address)
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# 역할 이름 — Role names stored in profiles.role
ROLE_TENANT: str = "tenant"
ROLE_WORKER: str = "worker"
ROLE_SUPERVISOR: str = "supervisor"
ROLES: tuple[str, ...] = (ROLE_TENANT, ROLE_WORKER, ROLE_SUPERVISOR)


class Profile(Base):
    """사용자 프로필 모델 — 시스템 사용자 계정 정보.

    Profile model — System user account information.
    Tenants carry their building/room so supervisors can locate the complaint;
    workers and supervisors leave those columns empty.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        email: 로그인 이메일 (Login email, globally unique)
        name: 표시 이름 (Display name, optional)
        role: 역할 (Role: "tenant" | "worker" | "supervisor")
        mobile: 휴대폰 번호 (Mobile number, optional)
        building_name: 건물 이름 (Tenant building, optional)
        room_number: 호실 번호 (Tenant room/flat, optional)
        password_hash: bcrypt 해시된 비밀번호 (bcrypt-hashed password)
        is_active: 활성 상태 (Active status, soft-delete pattern)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "profiles"

    # 사용자 고유 식별자 — Profile unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 로그인 이메일 — Login email (전역 고유, globally unique)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    # 표시 이름 — Display name
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 역할 — "tenant" | "worker" | "supervisor"
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_TENANT)
    # 휴대폰 번호 — Mobile number
    mobile: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 건물/호실 — Tenant address (세입자만 사용)
    building_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    room_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 비밀번호 해시 — bcrypt hashed password (평문 저장 금지, never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # 활성 상태 — Whether the account is active
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성 일시 — Record creation timestamp (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    # 수정 일시 — Last modification timestamp (UTC, auto-updated)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    @property
    def display_name(self) -> str:
        """이름이 없으면 이메일을 표시 이름으로 사용합니다."""
        return self.name or self.email
