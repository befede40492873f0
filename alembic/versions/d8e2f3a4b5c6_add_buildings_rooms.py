"""add_buildings_rooms

Revision ID: d8e2f3a4b5c6
Revises: c7d1e2a3b4f5
Create Date: 2026-10-19 15:00:00.000000

건물/호실 카탈로그 추가.
Add the building and room catalog used by the tenant address pickers.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'd8e2f3a4b5c6'
down_revision: Union[str, None] = 'c7d1e2a3b4f5'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # buildings — 건물 (Residential buildings)
    op.create_table(
        'buildings',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # rooms — 건물별 호실, 건물 내 번호 유일 (Room numbers are unique per building)
    op.create_table(
        'rooms',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('building_id', sa.Integer(), sa.ForeignKey('buildings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('room_number', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('building_id', 'room_number', name='uq_room_building_number'),
    )
    op.create_index('ix_rooms_building_id', 'rooms', ['building_id'])


def downgrade() -> None:
    op.drop_index('ix_rooms_building_id', table_name='rooms')
    op.drop_table('rooms')
    op.drop_table('buildings')
