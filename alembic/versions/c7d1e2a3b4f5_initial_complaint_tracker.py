"""initial_complaint_tracker

Revision ID: c7d1e2a3b4f5
Revises:
Create Date: 2026-10-19 09:00:00.000000

민원 관리 초기 스키마: 프로필, 카탈로그, 민원, 팀 배정, 방문, 작업 세션.
Initial complaint tracker schema: profiles, catalog, complaints, team
assignments, visits, visit materials and per-worker work sessions.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'c7d1e2a3b4f5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # profiles — 사용자 계정 (tenant / worker / supervisor)
    # User accounts with role and tenant address
    op.create_table(
        'profiles',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), server_default='tenant', nullable=False),
        sa.Column('mobile', sa.String(50), nullable=True),
        sa.Column('building_name', sa.String(255), nullable=True),
        sa.Column('room_number', sa.String(50), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # stores, materials — 조회용 카탈로그 (Lookup catalog)
    op.create_table(
        'stores',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'materials',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # complaint_types, complaints — 민원 유형 및 세입자 민원
    # Complaint categories and tenant tickets
    op.create_table(
        'complaint_types',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        'complaints',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('tenant_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type_id', sa.Integer(), sa.ForeignKey('complaint_types.id'), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('priority', sa.String(10), server_default='medium', nullable=False),
        sa.Column('image_path', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_complaints_tenant_id', 'complaints', ['tenant_id'])

    # complaint_assignments — 작업자 배정 (one row per complaint × worker)
    # Worker claims on complaints, one leader per complaint
    op.create_table(
        'complaint_assignments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('complaint_id', sa.Integer(), sa.ForeignKey('complaints.id', ondelete='CASCADE'), nullable=False),
        sa.Column('worker_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_by', UUID(as_uuid=True), sa.ForeignKey('profiles.id'), nullable=True),
        sa.Column('status', sa.String(20), server_default='assigned', nullable=False),
        sa.Column('is_leader', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('scheduled_start', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scheduled_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_complaint_assignments_complaint_id', 'complaint_assignments', ['complaint_id'])
    op.create_index('ix_complaint_assignments_worker_id', 'complaint_assignments', ['worker_id'])
    op.create_unique_constraint(
        'uq_assignment_complaint_worker', 'complaint_assignments', ['complaint_id', 'worker_id']
    )
    # 민원당 리더 1명 — At most one leader per complaint (partial unique index)
    op.create_index(
        'uq_assignment_one_leader',
        'complaint_assignments',
        ['complaint_id'],
        unique=True,
        postgresql_where=sa.text('is_leader'),
    )

    # assignment_visits — 방문 기록 (Visits against an assignment)
    op.create_table(
        'assignment_visits',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('assignment_id', sa.Integer(), sa.ForeignKey('complaint_assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('store_id', sa.Integer(), sa.ForeignKey('stores.id'), nullable=True),
        sa.Column('time_in', sa.DateTime(timezone=True), nullable=True),
        sa.Column('time_out', sa.DateTime(timezone=True), nullable=True),
        sa.Column('outcome', sa.String(20), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('created_by', UUID(as_uuid=True), sa.ForeignKey('profiles.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_assignment_visits_assignment_id', 'assignment_visits', ['assignment_id'])

    # assignment_visit_materials — 방문별 사용 자재 (Visit ↔ material)
    op.create_table(
        'assignment_visit_materials',
        sa.Column('visit_id', sa.Integer(), sa.ForeignKey('assignment_visits.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('material_id', sa.Integer(), sa.ForeignKey('materials.id'), primary_key=True),
    )

    # assignment_work_sessions — 작업자별 작업 시간 (Per-worker time intervals)
    op.create_table(
        'assignment_work_sessions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('assignment_id', sa.Integer(), sa.ForeignKey('complaint_assignments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('worker_id', UUID(as_uuid=True), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('visit_id', sa.Integer(), sa.ForeignKey('assignment_visits.id', ondelete='CASCADE'), nullable=True),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('start_at < end_at', name='ck_work_session_window'),
    )
    op.create_index('ix_work_sessions_visit_worker', 'assignment_work_sessions', ['visit_id', 'worker_id'])


def downgrade() -> None:
    # 의존 순서의 역순으로 삭제 (인덱스, 제약은 테이블과 함께 삭제됨)
    # Drop in reverse dependency order (indexes and constraints go with the tables)
    op.drop_table('assignment_work_sessions')
    op.drop_table('assignment_visit_materials')
    op.drop_table('assignment_visits')
    op.drop_table('complaint_assignments')
    op.drop_table('complaints')
    op.drop_table('complaint_types')
    op.drop_table('materials')
    op.drop_table('stores')
    op.drop_table('profiles')
