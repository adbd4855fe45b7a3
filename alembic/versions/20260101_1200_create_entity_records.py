"""Create entity_records table

Revision ID: create_entity_records
Revises:
Create Date: 2026-01-01 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'create_entity_records'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """实体集合存储表：每条记录一行"""
    op.create_table('entity_records',
        sa.Column('id', sa.BigInteger().with_variant(sa.Integer(), 'sqlite'), autoincrement=True, nullable=False),
        sa.Column('entity_type', sa.String(length=32), nullable=False, comment='实体类型'),
        sa.Column('position', sa.Integer(), nullable=False, comment='集合内顺序'),
        sa.Column('payload', sa.JSON(), nullable=False, comment='记录内容'),
        sa.Column('written_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False, comment='写入时间'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_entity_records_type_position', 'entity_records', ['entity_type', 'position'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_entity_records_type_position', table_name='entity_records')
    op.drop_table('entity_records')
