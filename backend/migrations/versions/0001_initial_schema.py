"""Initial schema: users, districts, sessions, movements, knowledge base, notifications, audit

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18

Districts are stored one row per district in user_districts (ordered by
position) instead of a delimited string column on users.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ==========================================================================
    # 1. USERS
    # ==========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('id_number', sa.String(length=64), nullable=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('position', sa.String(length=128), nullable=True),
        sa.Column('division', sa.String(length=128), nullable=True),
        sa.Column('base_office', sa.String(length=128), nullable=True),
        sa.Column('role', sa.String(length=64), nullable=False),
        sa.Column('supervisor_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('avatar_url', sa.String(length=512), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone_number', sa.String(length=64), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('date_of_birth', sa.String(length=32), nullable=True),
        sa.Column('language', sa.String(length=64), nullable=True),
        sa.Column('locale', sa.String(length=64), nullable=True),
        sa.Column('first_day_of_week', sa.String(length=16), nullable=True),
        sa.Column('website', sa.String(length=255), nullable=True),
        sa.Column('x_handle', sa.String(length=128), nullable=True),
        sa.Column('fediverse_handle', sa.String(length=128), nullable=True),
        sa.Column('organisation', sa.String(length=255), nullable=True),
        sa.Column('profile_role', sa.String(length=128), nullable=True),
        sa.Column('headline', sa.String(length=255), nullable=True),
        sa.Column('about', sa.Text(), nullable=True),
        sa.Column('online_status', sa.String(length=64), nullable=False, server_default='Online'),
        sa.Column('status_message', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['supervisor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_users_username'),
        sa.UniqueConstraint('id_number', name='uq_users_id_number'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=False)
    op.create_index('ix_users_role', 'users', ['role'], unique=False)
    op.create_index('ix_users_supervisor_id', 'users', ['supervisor_id'], unique=False)

    op.create_table('user_districts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('district', sa.String(length=128), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'district', name='uq_user_districts_user_district'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_user_districts_user_id', 'user_districts', ['user_id'], unique=False)
    op.create_index('ix_user_districts_district', 'user_districts', ['district'], unique=False)

    # ==========================================================================
    # 2. SESSION TOKENS
    # ==========================================================================
    op.create_table('session_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('revoked_reason', sa.String(length=255), nullable=True),
        sa.Column('user_agent', sa.String(length=512), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_session_tokens_user_id', 'session_tokens', ['user_id'], unique=False)
    op.create_index('ix_session_tokens_token_hash', 'session_tokens', ['token_hash'], unique=True)

    # ==========================================================================
    # 3. MOVEMENTS
    # ==========================================================================
    op.create_table('movements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('staff_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.String(length=10), nullable=True),
        sa.Column('time_in', sa.String(length=8), nullable=True),
        sa.Column('time_out', sa.String(length=8), nullable=True),
        sa.Column('due_date', sa.String(length=10), nullable=True),
        sa.Column('division', sa.String(length=128), nullable=True),
        sa.Column('district', sa.String(length=128), nullable=True),
        sa.Column('area', sa.String(length=128), nullable=True),
        sa.Column('branch', sa.String(length=128), nullable=True),
        sa.Column('purpose', sa.Text(), nullable=True),
        sa.Column('transport_mode', sa.String(length=64), nullable=True),
        sa.Column('accomplishments', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('supervisor_remarks', sa.Text(), nullable=True),
        sa.Column('approved_by', sa.Integer(), nullable=True),
        sa.Column('assigned_supervisor_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['staff_id'], ['users.id']),
        sa.ForeignKeyConstraint(['approved_by'], ['users.id']),
        sa.ForeignKeyConstraint(['assigned_supervisor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_movements_staff_id', 'movements', ['staff_id'], unique=False)
    op.create_index('ix_movements_district', 'movements', ['district'], unique=False)
    op.create_index('ix_movements_approved_by', 'movements', ['approved_by'], unique=False)
    op.create_index('ix_movements_assigned_supervisor_id', 'movements', ['assigned_supervisor_id'], unique=False)
    op.create_index('ix_movements_date_created', 'movements', ['date', 'created_at'], unique=False)
    op.create_index('ix_movements_status', 'movements', ['status'], unique=False)

    # ==========================================================================
    # 4. KNOWLEDGE BASE, NOTIFICATIONS, AUDIT
    # ==========================================================================
    op.create_table('knowledge_base',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=128), nullable=True),
        sa.Column('type', sa.String(length=16), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('version', sa.String(length=32), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_knowledge_base_created_by', 'knowledge_base', ['created_by'], unique=False)

    op.create_table('notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'], unique=False)
    op.create_index('ix_notifications_user_created', 'notifications', ['user_id', 'created_at'], unique=False)

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'], unique=False)
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'], unique=False)
    op.create_index('ix_audit_logs_timestamp', 'audit_logs', ['timestamp'], unique=False)
    op.create_index('ix_audit_logs_user_timestamp', 'audit_logs', ['user_id', 'timestamp'], unique=False)


def downgrade():
    op.drop_table('audit_logs')
    op.drop_table('notifications')
    op.drop_table('knowledge_base')
    op.drop_table('movements')
    op.drop_table('session_tokens')
    op.drop_table('user_districts')
    op.drop_table('users')
