"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
test schema creation.

Modules:
    user: 사용자 프로필 (Profiles: tenants, workers, supervisors)
    catalog: 자재 매장, 자재, 건물, 호실 (Stores, materials, buildings, rooms)
    complaint: 민원 유형, 민원 (Complaint types and complaints)
    assignment: 민원 배정 (Worker assignments with leader flag)
    visit: 방문, 방문 자재, 작업 세션 (Visits, visit materials, work sessions)
"""

from app.models.user import Profile
from app.models.catalog import Store, Material, Building, Room
from app.models.complaint import ComplaintType, Complaint
from app.models.assignment import ComplaintAssignment
from app.models.visit import AssignmentVisit, AssignmentVisitMaterial, AssignmentWorkSession

__all__ = [
    "Profile",
    "Store", "Material", "Building", "Room",
    "ComplaintType", "Complaint",
    "ComplaintAssignment",
    "AssignmentVisit", "AssignmentVisitMaterial", "AssignmentWorkSession",
]
