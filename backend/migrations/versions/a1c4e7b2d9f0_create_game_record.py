"""create game_record table

Revision ID: a1c4e7b2d9f0
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1c4e7b2d9f0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'game_record' in set(insp.get_table_names()):
        return

    op.create_table(
        'game_record',
        sa.Column('game_id', sa.String(length=128), nullable=False),
        sa.Column('data', sa.Text(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.String(length=32), nullable=True),
        sa.Column('updated_at', sa.String(length=32), nullable=True),
        sa.PrimaryKeyConstraint('game_id'),
    )
    op.create_index('ix_game_record_created_at', 'game_record', ['created_at'], unique=False)


def downgrade():
    op.drop_index('ix_game_record_created_at', table_name='game_record')
    op.drop_table('game_record')
