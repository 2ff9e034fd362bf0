"""initial recruiting schema

Revision ID: 001
Revises:
Create Date: 2026-09-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid():
    return postgresql.UUID(as_uuid=True)


def _ts(name, nullable=False, server_default=True):
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text('now()') if server_default else None,
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        'user_account',
        sa.Column('id', _uuid(), primary_key=True),
        _ts('created_at'),
        sa.Column('email', sa.Text(), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        _ts('email_confirmed_at', nullable=True, server_default=False),
        sa.Column('is_blocked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint("role IN ('athlete', 'coach', 'admin')", name='ck_user_account_role'),
    )

    op.create_table(
        'school',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('division', sa.Text(), nullable=True),
        sa.Column('city', sa.Text(), nullable=True),
        sa.Column('state', sa.String(2), nullable=True),
    )
    op.create_index('ix_school_name', 'school', ['name'])

    op.create_table(
        'athlete_profile',
        sa.Column('user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('sport', sa.Text(), nullable=True),
        sa.Column('positions', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('grad_year', sa.Integer(), nullable=True),
        sa.Column('city', sa.Text(), nullable=True),
        sa.Column('state', sa.String(2), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('gpa', sa.Float(), nullable=True),
        sa.Column('sat_score', sa.Integer(), nullable=True),
        sa.Column('act_score', sa.Integer(), nullable=True),
        sa.Column('height_feet', sa.Integer(), nullable=True),
        sa.Column('height_inches', sa.Integer(), nullable=True),
        sa.Column('weight', sa.Integer(), nullable=True),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('completeness_score', sa.Integer(), nullable=False, server_default='0'),
        _ts('created_at'),
        _ts('updated_at'),
    )
    op.create_index('ix_athlete_profile_search', 'athlete_profile', ['is_public', 'sport', 'state', 'grad_year'])

    op.create_table(
        'coach_profile',
        sa.Column('user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('school', sa.Text(), nullable=False),
        sa.Column('school_id', _uuid(), sa.ForeignKey('school.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('sports', postgresql.JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column('verification_status', sa.Text(), nullable=False, server_default='pending'),
        sa.Column('looking_for', sa.Text(), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
        sa.CheckConstraint(
            "verification_status IN ('pending', 'verified', 'rejected')",
            name='ck_coach_profile_verification_status',
        ),
    )

    op.create_table(
        'coach_camp',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('coach_user_id', _uuid(), sa.ForeignKey('coach_profile.user_id', ondelete='CASCADE'), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('location', sa.Text(), nullable=True),
        sa.Column('date', sa.Text(), nullable=True),
        sa.Column('url', sa.Text(), nullable=True),
    )
    op.create_index('ix_coach_camp_coach_user_id', 'coach_camp', ['coach_user_id'])

    op.create_table(
        'athlete_school_interest',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('athlete_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('school_id', _uuid(), sa.ForeignKey('school.id', ondelete='CASCADE'), nullable=False),
        sa.Column('interest_type', sa.Text(), nullable=False, server_default='LIKE'),
        sa.Column('visibility', sa.Text(), nullable=False, server_default='PUBLIC_TO_VERIFIED_COACHES'),
        _ts('created_at'),
        sa.UniqueConstraint('athlete_user_id', 'school_id', name='uq_interest_athlete_school'),
        sa.CheckConstraint("interest_type IN ('LIKE', 'FOLLOW', 'TOP_CHOICE')", name='ck_interest_type'),
        sa.CheckConstraint(
            "visibility IN ('PUBLIC_TO_VERIFIED_COACHES', 'PRIVATE_UNTIL_APPROVED', 'PRIVATE')",
            name='ck_interest_visibility',
        ),
    )
    op.create_index('ix_athlete_school_interest_school_id', 'athlete_school_interest', ['school_id'])

    op.create_table(
        'highlight',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('athlete_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        _ts('created_at'),
    )
    op.create_index('ix_highlight_athlete_user_id', 'highlight', ['athlete_user_id'])

    op.create_table(
        'stat',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('athlete_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('season', sa.Text(), nullable=False),
        sa.Column('stat_key', sa.Text(), nullable=False),
        sa.Column('stat_value', sa.Text(), nullable=False),
        sa.Column('source_type', sa.Text(), nullable=False),
        sa.Column('source_url', sa.Text(), nullable=True),
        sa.Column('provider', sa.Text(), nullable=True),
        sa.Column('verification_status', sa.Text(), nullable=False),
        _ts('created_at'),
        sa.CheckConstraint("source_type IN ('self_reported', 'source_link', 'upload')", name='ck_stat_source_type'),
    )
    op.create_index('ix_stat_athlete_user_id', 'stat', ['athlete_user_id'])

    op.create_table(
        'saved_athlete',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('coach_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('athlete_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        _ts('created_at'),
        sa.UniqueConstraint('coach_user_id', 'athlete_user_id', name='uq_saved_athlete_pair'),
    )

    op.create_table(
        'contact_request',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('coach_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('athlete_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), nullable=False, server_default='pending'),
        _ts('created_at'),
        _ts('responded_at', nullable=True, server_default=False),
        sa.CheckConstraint("status IN ('pending', 'accepted', 'declined')", name='ck_contact_request_status'),
    )
    op.create_index('ix_contact_request_coach_user_id', 'contact_request', ['coach_user_id'])
    op.create_index('ix_contact_request_athlete_user_id', 'contact_request', ['athlete_user_id'])

    op.create_table(
        'conversation',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('athlete_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('coach_user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='OPEN'),
        sa.Column('initiated_by', _uuid(), sa.ForeignKey('user_account.id', ondelete='SET NULL'), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
        sa.UniqueConstraint('athlete_user_id', 'coach_user_id', name='uq_conversation_pair'),
        sa.CheckConstraint("status IN ('OPEN', 'CLOSED')", name='ck_conversation_status'),
    )
    op.create_index('ix_conversation_coach_updated', 'conversation', ['coach_user_id', 'updated_at'])
    op.create_index('ix_conversation_athlete_updated', 'conversation', ['athlete_user_id', 'updated_at'])

    op.create_table(
        'message',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('conversation_id', _uuid(), sa.ForeignKey('conversation.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_role', sa.Text(), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        _ts('created_at'),
        _ts('read_at', nullable=True, server_default=False),
        sa.CheckConstraint("sender_role IN ('ATHLETE', 'COACH')", name='ck_message_sender_role'),
    )
    op.create_index('ix_message_conversation_created', 'message', ['conversation_id', 'created_at'])

    op.create_table(
        'notification',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('user_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        sa.Column('related_id', _uuid(), nullable=True),
        _ts('created_at'),
        _ts('read_at', nullable=True, server_default=False),
        sa.CheckConstraint(
            "type IN ('MESSAGE', 'CONTACT_REQUEST', 'CONTACT_RESPONSE', 'VERIFICATION', 'SYSTEM')",
            name='ck_notification_type',
        ),
    )
    op.create_index('ix_notification_user_created', 'notification', ['user_id', 'created_at'])

    op.create_table(
        'discussion_thread',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('created_by', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_hidden', sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts('created_at'),
    )

    op.create_table(
        'discussion_post',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('thread_id', _uuid(), sa.ForeignKey('discussion_thread.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('is_hidden', sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts('created_at'),
    )
    op.create_index('ix_discussion_post_thread_id', 'discussion_post', ['thread_id'])

    op.create_table(
        'report',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('reporter_id', _uuid(), sa.ForeignKey('user_account.id', ondelete='CASCADE'), nullable=False),
        sa.Column('target_type', sa.Text(), nullable=False),
        sa.Column('target_id', _uuid(), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), nullable=False, server_default='pending'),
        _ts('created_at'),
        _ts('resolved_at', nullable=True, server_default=False),
        sa.Column('resolved_by', _uuid(), sa.ForeignKey('user_account.id', ondelete='SET NULL'), nullable=True),
        sa.CheckConstraint("target_type IN ('thread', 'post')", name='ck_report_target_type'),
        sa.CheckConstraint("status IN ('pending', 'reviewed', 'dismissed')", name='ck_report_status'),
    )


def downgrade() -> None:
    for table in (
        'report',
        'discussion_post',
        'discussion_thread',
        'notification',
        'message',
        'conversation',
        'contact_request',
        'saved_athlete',
        'stat',
        'highlight',
        'athlete_school_interest',
        'coach_camp',
        'coach_profile',
        'athlete_profile',
        'school',
        'user_account',
    ):
        op.drop_table(table)
