"""create player and award_record tables

Revision ID: 5b2e9c7d1a40
Revises:
Create Date: 2026-10-19 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5b2e9c7d1a40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    tables = set(insp.get_table_names())
    # Databases bootstrapped by SEED_ON_STARTUP already have the tables
    if 'player' not in tables:
        op.create_table(
            'player',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('player') as batch_op:
            batch_op.create_index(batch_op.f('ix_player_username'), ['username'], unique=True)
    if 'award_record' not in tables:
        op.create_table(
            'award_record',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('player_id', sa.Integer(), nullable=False),
            sa.Column('points_awarded', sa.Integer(), nullable=False),
            sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['player_id'], ['player.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('award_record') as batch_op:
            batch_op.create_index(batch_op.f('ix_award_record_player_id'), ['player_id'], unique=False)
            batch_op.create_index(batch_op.f('ix_award_record_timestamp'), ['timestamp'], unique=False)


def downgrade():
    with op.batch_alter_table('award_record') as batch_op:
        batch_op.drop_index(batch_op.f('ix_award_record_timestamp'))
        batch_op.drop_index(batch_op.f('ix_award_record_player_id'))
    op.drop_table('award_record')
    with op.batch_alter_table('player') as batch_op:
        batch_op.drop_index(batch_op.f('ix_player_username'))
    op.drop_table('player')
