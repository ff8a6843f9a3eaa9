"""initial armory schema

Revision ID: 3c1f9a7d2b64
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2b64'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'divisions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_divisions_name', 'divisions', ['name'], unique=True)

    op.create_table(
        'soldiers',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('division_id', sa.Integer(), sa.ForeignKey('divisions.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_soldiers_division_id', 'soldiers', ['division_id'])

    op.create_table(
        'soldier_documents',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('soldier_id', sa.String(length=32), sa.ForeignKey('soldiers.id'), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False),
        sa.Column('storage_path', sa.String(length=512), nullable=False),
        sa.Column('download_url', sa.String(length=1024), nullable=False),
        sa.Column('file_type', sa.String(length=128), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_soldier_documents_soldier_id', 'soldier_documents', ['soldier_id'])

    op.create_table(
        'armory_item_types',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('is_unique', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_armory_item_types_name', 'armory_item_types', ['name'], unique=True)

    op.create_table(
        'armory_items',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('item_type_id', sa.Integer(), sa.ForeignKey('armory_item_types.id'), nullable=False),
        sa.Column('is_unique_item', sa.Boolean(), nullable=False),
        sa.Column('item_id', sa.String(length=128), nullable=True),
        sa.Column('linked_soldier_id', sa.String(length=32), sa.ForeignKey('soldiers.id'), nullable=True),
        sa.Column('total_quantity', sa.Integer(), nullable=True),
        sa.Column('assignments', sa.JSON(), nullable=False),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_armory_items_item_type_id', 'armory_items', ['item_type_id'])
    op.create_index('ix_armory_items_linked_soldier_id', 'armory_items', ['linked_soldier_id'])


def downgrade() -> None:
    op.drop_index('ix_armory_items_linked_soldier_id', table_name='armory_items')
    op.drop_index('ix_armory_items_item_type_id', table_name='armory_items')
    op.drop_table('armory_items')
    op.drop_index('ix_armory_item_types_name', table_name='armory_item_types')
    op.drop_table('armory_item_types')
    op.drop_index('ix_soldier_documents_soldier_id', table_name='soldier_documents')
    op.drop_table('soldier_documents')
    op.drop_index('ix_soldiers_division_id', table_name='soldiers')
    op.drop_table('soldiers')
    op.drop_index('ix_divisions_name', table_name='divisions')
    op.drop_table('divisions')
