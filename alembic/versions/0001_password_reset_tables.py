"""Add password reset token and rate limit tables

Revision ID: 0001_password_reset_tables
Revises:
Create Date: 2026-10-19 09:00:00.000000

The ``users`` table belongs to the account-management side of the backend and
must already exist.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001_password_reset_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create password_reset_tokens and password_reset_rate_limits."""
    op.create_table(
        'password_reset_tokens',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('token_hash', sa.String(length=255), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )
    op.create_index('ix_password_reset_tokens_user_id', 'password_reset_tokens', ['user_id'], unique=False)
    op.create_index('ix_password_reset_tokens_expires_at', 'password_reset_tokens', ['expires_at'], unique=False)

    op.create_table(
        'password_reset_rate_limits',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('attempt_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('window_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    )
    op.create_index('ix_password_reset_rate_limits_email', 'password_reset_rate_limits', ['email'], unique=True)
    op.create_index('ix_password_reset_rate_limits_window_start', 'password_reset_rate_limits', ['window_start'], unique=False)


def downgrade() -> None:
    """Drop the password workflow tables."""
    op.drop_index('ix_password_reset_rate_limits_window_start', table_name='password_reset_rate_limits')
    op.drop_index('ix_password_reset_rate_limits_email', table_name='password_reset_rate_limits')
    op.drop_table('password_reset_rate_limits')

    op.drop_index('ix_password_reset_tokens_expires_at', table_name='password_reset_tokens')
    op.drop_index('ix_password_reset_tokens_user_id', table_name='password_reset_tokens')
    op.drop_table('password_reset_tokens')
