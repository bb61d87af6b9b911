"""Initial schema - accounts, pregnancies, village, updates, events, email outbox.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

Creates:
- users
- pregnancies, milestones
- village_members, access_requests
- pregnancy_updates, update_photos
- pregnancy_events
- jobs, email_notifications
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(with_updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]
    if with_updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False)
        )
    return columns


def upgrade() -> None:
    # ==========================================================================
    # users
    # ==========================================================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.text('0'), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    # ==========================================================================
    # pregnancies
    # ==========================================================================
    op.create_table(
        'pregnancies',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('partner_name', sa.String(255), nullable=True),
        sa.Column('partner_email', sa.String(255), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('conception_date', sa.Date(), nullable=True),
        sa.Column('current_week', sa.Integer(), server_default=sa.text('1'), nullable=False),
        sa.Column('baby_name', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('1'), nullable=False),
        sa.Column('share_id', sa.String(64), nullable=False),
        sa.Column('cover_photo_filename', sa.String(255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('share_id'),
    )
    op.create_index(
        'uq_pregnancies_user_active',
        'pregnancies',
        ['user_id'],
        unique=True,
        sqlite_where=sa.text('is_active = 1'),
    )

    op.create_table(
        'milestones',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pregnancy_id', sa.Integer(), nullable=False),
        sa.Column('milestone_type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=True),
        sa.Column('completed_date', sa.Date(), nullable=True),
        sa.Column('is_completed', sa.Boolean(), server_default=sa.text('0'), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('week_number', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['pregnancy_id'], ['pregnancies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_milestones_pregnancy', 'milestones', ['pregnancy_id', 'week_number'])

    # ==========================================================================
    # village
    # ==========================================================================
    op.create_table(
        'village_members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pregnancy_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('relationship', sa.String(50), nullable=False),
        sa.Column('is_told', sa.Boolean(), server_default=sa.text('0'), nullable=False),
        sa.Column('told_date', sa.DateTime(), nullable=True),
        sa.Column('is_subscribed', sa.Boolean(), server_default=sa.text('1'), nullable=False),
        sa.Column('unsubscribe_token', sa.String(64), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['pregnancy_id'], ['pregnancies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('pregnancy_id', 'email', name='uq_village_member_email'),
        sa.UniqueConstraint('unsubscribe_token'),
    )
    op.create_index('idx_village_members_pregnancy', 'village_members', ['pregnancy_id', 'created_at'])

    op.create_table(
        'access_requests',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pregnancy_id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('relationship', sa.String(50), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), server_default=sa.text("'pending'"), nullable=False),
        sa.Column('resolved_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['pregnancy_id'], ['pregnancies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_access_requests_pending',
        'access_requests',
        ['pregnancy_id', 'status', 'created_at'],
    )

    # ==========================================================================
    # updates
    # ==========================================================================
    op.create_table(
        'pregnancy_updates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pregnancy_id', sa.Integer(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('update_type', sa.String(30), server_default=sa.text("'general'"), nullable=False),
        sa.Column('appointment_type', sa.String(50), nullable=True),
        sa.Column('is_shared', sa.Boolean(), server_default=sa.text('0'), nullable=False),
        sa.Column('shared_at', sa.DateTime(), nullable=True),
        sa.Column('update_date', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['pregnancy_id'], ['pregnancies.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_updates_pregnancy', 'pregnancy_updates', ['pregnancy_id', 'update_date'])

    op.create_table(
        'update_photos',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('update_id', sa.Integer(), nullable=False),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('original_filename', sa.String(255), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('sort_order', sa.Integer(), server_default=sa.text('0'), nullable=False),
        *_timestamps(with_updated=False),
        sa.ForeignKeyConstraint(['update_id'], ['pregnancy_updates.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_update_photos_update', 'update_photos', ['update_id', 'sort_order'])

    # ==========================================================================
    # events
    # ==========================================================================
    op.create_table(
        'pregnancy_events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pregnancy_id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_data', sa.JSON(), nullable=True),
        sa.Column('week_number', sa.Integer(), nullable=True),
        sa.Column('created_by', sa.Integer(), nullable=True),
        *_timestamps(with_updated=False),
        sa.ForeignKeyConstraint(['pregnancy_id'], ['pregnancies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_events_pregnancy', 'pregnancy_events', ['pregnancy_id', 'created_at'])

    # ==========================================================================
    # jobs (outbox) and email notifications
    # ==========================================================================
    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('job_type', sa.String(50), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('run_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('status', sa.String(20), server_default=sa.text("'pending'"), nullable=False),
        sa.Column('attempts', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.Column('max_attempts', sa.Integer(), server_default=sa.text('3'), nullable=False),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('idempotency_key', sa.String(255), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_jobs_pending', 'jobs', ['status', 'run_at'])
    op.create_index(
        'uq_job_idempotency',
        'jobs',
        ['idempotency_key'],
        unique=True,
        sqlite_where=sa.text('idempotency_key IS NOT NULL'),
    )

    op.create_table(
        'email_notifications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pregnancy_id', sa.Integer(), nullable=True),
        sa.Column('village_member_id', sa.Integer(), nullable=True),
        sa.Column('update_id', sa.Integer(), nullable=True),
        sa.Column('milestone_id', sa.Integer(), nullable=True),
        sa.Column('job_id', sa.Integer(), nullable=True),
        sa.Column('to_email', sa.String(255), nullable=False),
        sa.Column('to_name', sa.String(255), nullable=True),
        sa.Column('email_type', sa.String(30), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('html_body', sa.Text(), nullable=False),
        sa.Column('text_body', sa.Text(), nullable=False),
        sa.Column('delivery_status', sa.String(20), server_default=sa.text("'pending'"), nullable=False),
        sa.Column('ses_message_id', sa.String(255), nullable=True),
        sa.Column('error', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['pregnancy_id'], ['pregnancies.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['village_member_id'], ['village_members.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['update_id'], ['pregnancy_updates.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['milestone_id'], ['milestones.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(
        'idx_email_notifications_pregnancy',
        'email_notifications',
        ['pregnancy_id', 'created_at'],
    )
    op.create_index('idx_email_notifications_status', 'email_notifications', ['delivery_status'])


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table('email_notifications')
    op.drop_table('jobs')
    op.drop_table('pregnancy_events')
    op.drop_table('update_photos')
    op.drop_table('pregnancy_updates')
    op.drop_table('access_requests')
    op.drop_table('village_members')
    op.drop_table('milestones')
    op.drop_table('pregnancies')
    op.drop_table('users')
