"""초기 데이터 시드 스크립트 — 카탈로그와 데모 계정 생성.

Seed script — Creates the lookup catalog and demo accounts.
Run this script once to bootstrap the database with required initial data.

Usage:
    python -m app.seed

Creates:
    - 민원 유형: Plumbing, Electrical, AC / Cooling, Carpentry, Painting, Other (Complaint types)
    - 매장 3곳, 자재 8종, 건물 2동과 호실 (3 stores, 8 materials, 2 buildings with rooms)
    - 데모 계정: supervisor / worker 2명 / tenant, 비밀번호 demo1234
      (Demo accounts, password demo1234)
"""

import asyncio

from sqlalchemy import select

from app.database import async_session, engine, Base
from app.models import Building, ComplaintType, Material, Profile, Room, Store
from app.models.user import ROLE_SUPERVISOR, ROLE_TENANT, ROLE_WORKER
from app.utils.password import hash_password

COMPLAINT_TYPES: list[str] = ["Plumbing", "Electrical", "AC / Cooling", "Carpentry", "Painting", "Other"]
STORES: list[str] = ["Main Warehouse", "Al Quoz Hardware", "Deira Supplies"]
MATERIALS: list[str] = [
    "PVC pipe", "Pipe fitting", "Sealant", "Light bulb", "Circuit breaker",
    "AC filter", "Wood screws", "Paint (white)",
]
# 건물별 호실 (Rooms per building)
BUILDINGS: dict[str, list[str]] = {
    "Marina Tower": ["1201", "1202", "1203", "1204"],
    "Palm Residence": ["101", "102", "201", "202"],
}

DEMO_PASSWORD: str = "demo1234"

# (email, name, role, building, room)
DEMO_PROFILES: list[tuple[str, str, str, str | None, str | None]] = [
    ("supervisor@example.com", "Sara Supervisor", ROLE_SUPERVISOR, None, None),
    ("worker1@example.com", "Wael Worker", ROLE_WORKER, None, None),
    ("worker2@example.com", "Omar Worker", ROLE_WORKER, None, None),
    ("tenant@example.com", "Tina Tenant", ROLE_TENANT, "Marina Tower", "1204"),
]


async def seed() -> None:
    """데이터베이스를 초기 데이터로 시드합니다.

    Seed the database with initial data.
    Creates tables if they don't exist, then inserts the catalog and the
    demo accounts.

    Idempotent: 이미 시드된 경우 건너뜁니다 (Skips if already seeded).
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as db:
        # 민원 유형이 하나라도 있으면 건너뜀 (Any complaint type means already seeded)
        result = await db.execute(select(ComplaintType).limit(1))
        if result.scalar_one_or_none():
            print("Already seeded. Skipping.")
            return

        db.add_all(ComplaintType(name=name) for name in COMPLAINT_TYPES)
        db.add_all(Store(name=name) for name in STORES)
        db.add_all(Material(name=name) for name in MATERIALS)
        for building_name, room_numbers in BUILDINGS.items():
            db.add(Building(name=building_name, rooms=[Room(room_number=n) for n in room_numbers]))

        password_hash: str = hash_password(DEMO_PASSWORD)
        for email, name, role, building, room in DEMO_PROFILES:
            db.add(
                Profile(
                    email=email,
                    name=name,
                    role=role,
                    building_name=building,
                    room_number=room,
                    password_hash=password_hash,
                    is_active=True,
                )
            )

        await db.commit()
        print(f"Seeded: {len(DEMO_PROFILES)} demo accounts (password {DEMO_PASSWORD})")


if __name__ == "__main__":
    asyncio.run(seed())
