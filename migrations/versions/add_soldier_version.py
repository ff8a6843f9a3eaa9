"""add soldier version counter

Revision ID: add_soldier_version
Revises: 3c1f9a7d2b64
Create Date: 2026-10-16 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'add_soldier_version'
down_revision: Union[str, None] = '3c1f9a7d2b64'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing soldiers start at version 1
    op.add_column('soldiers', sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'))


def downgrade() -> None:
    op.drop_column('soldiers', 'version_id')
