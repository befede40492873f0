"""조회용 카탈로그 SQLAlchemy ORM 모델 정의.

Lookup catalog SQLAlchemy ORM model definitions.
Stores (where materials are picked up), materials (what was used on a
visit), buildings and their rooms are maintained by supervisors and only
read by the workflow.

Tables:
    - stores: 자재 매장 (Supply stores a worker visits)
    - materials: 자재 (Materials that can be logged on a visit)
    - buildings: 건물 (Residential buildings)
    - rooms: 호실 (Rooms per building)
"""

from datetime import datetime, timezone
from sqlalchemy import String, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Store(Base):
    """자재 매장 모델.

    Supply store model. Inactive stores stay referenced by old visits but are
    hidden from the lookup list.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        name: 매장 이름 (Store name)
        active: 활성 상태 (Shown in lookups when True)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "stores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Material(Base):
    """자재 모델.

    Material model. Linked to visits through assignment_visit_materials.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        name: 자재 이름 (Material name)
        active: 활성 상태 (Shown in lookups when True)
        created_at: 생성 일시 UTC (Creation timestamp)
    """

    __tablename__ = "materials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


class Building(Base):
    """건물 모델.

    Building model. Tenants pick their building (and then their room) when
    their profile is set up; the profile keeps the chosen names.

    Attributes:
        id: 고유 식별자 (Unique identifier)
        name: 건물 이름 (Building name)
        rooms: 호실 목록 (Rooms in this building)
    """

    __tablename__ = "buildings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    rooms: Mapped[list["Room"]] = relationship(back_populates="building", cascade="all, delete-orphan")


class Room(Base):
    """호실 모델 — Room (flat) inside a building."""

    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("building_id", "room_number", name="uq_room_building_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    building_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("buildings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    room_number: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    building: Mapped["Building"] = relationship(back_populates="rooms")
