"""create users, hooks and hook_runs

Revision ID: 5c1e9a7d2b40
Revises:
Create Date: 2026-09-02 11:18:42.104517

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = '5c1e9a7d2b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('provider_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_superuser', sa.Boolean(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_provider_id'), 'users', ['provider_id'], unique=True)

    op.create_table(
        'hooks',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'trigger_type',
            sa.Enum('ONCHAIN', 'CRON', 'WEBHOOK', 'MANUAL', name='hook_trigger_type'),
            nullable=False,
        ),
        sa.Column('trigger_config', sa.JSON(), nullable=False),
        sa.Column('actions', sa.JSON(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('ACTIVE', 'PAUSED', 'ERROR', name='hook_status'),
            nullable=False,
        ),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_executed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_checked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('alchemy_webhook_id', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_hooks_user_id', 'hooks', ['user_id'], unique=False)
    op.create_index('ix_hooks_trigger_type', 'hooks', ['trigger_type'], unique=False)
    op.create_index('ix_hooks_status', 'hooks', ['status'], unique=False)

    op.create_table(
        'hook_runs',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('hook_id', sa.String(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('PENDING', 'SUCCESS', 'FAILED', name='hook_run_status'),
            nullable=False,
        ),
        sa.Column('triggered_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(['hook_id'], ['hooks.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'ix_hook_runs_hook_id_triggered_at',
        'hook_runs',
        ['hook_id', 'triggered_at'],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index('ix_hook_runs_hook_id_triggered_at', table_name='hook_runs')
    op.drop_table('hook_runs')
    op.drop_index('ix_hooks_status', table_name='hooks')
    op.drop_index('ix_hooks_trigger_type', table_name='hooks')
    op.drop_index('ix_hooks_user_id', table_name='hooks')
    op.drop_table('hooks')
    op.drop_index(op.f('ix_users_provider_id'), table_name='users')
    op.drop_table('users')
    sa.Enum(name='hook_run_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='hook_status').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='hook_trigger_type').drop(op.get_bind(), checkfirst=True)
