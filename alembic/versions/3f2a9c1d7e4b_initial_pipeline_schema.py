"""initial_pipeline_schema

Revision ID: 3f2a9c1d7e4b
Revises:
Create Date: 2026-10-19 10:12:31.482913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e4b'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCORE_COLUMNS = (
    'resume_match_score',
    'mcq_score',
    'interview_score',
    'live_interview_score',
    'overall_score',
)

job_status = postgresql.ENUM('draft', 'active', 'closed', name='jobstatus', create_type=False)
application_status = postgresql.ENUM(
    'pending', 'shortlisted', 'in_progress', 'rejected', 'hired',
    name='applicationstatus', create_type=False
)
stage = postgresql.ENUM(
    'resume_screening', 'mcq_test', 'async_interview', 'live_interview', 'offer', 'hired', 'rejected',
    name='stage', create_type=False
)


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    job_status.create(bind, checkfirst=True)
    application_status.create(bind, checkfirst=True)
    stage.create(bind, checkfirst=True)

    op.create_table(
        'jobs',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('skills', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('experience_min', sa.Integer(), nullable=True),
        sa.Column('experience_max', sa.Integer(), nullable=True),
        sa.Column('status', job_status, nullable=False),
        sa.Column('pipeline_config', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_by', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_jobs_id'), 'jobs', ['id'], unique=False)
    op.create_index(op.f('ix_jobs_title'), 'jobs', ['title'], unique=False)
    op.create_index(op.f('ix_jobs_status'), 'jobs', ['status'], unique=False)

    op.create_table(
        'applications',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('job_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('resume_url', sa.String(), nullable=True),
        sa.Column('resume_text', sa.Text(), nullable=True),
        sa.Column('skills', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('experience_years', sa.Float(), nullable=True),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('status', application_status, nullable=False),
        sa.Column('current_stage', stage, nullable=False),
        sa.Column('stage_history', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('resume_match_score', sa.Float(), nullable=True),
        sa.Column('mcq_score', sa.Float(), nullable=True),
        sa.Column('interview_score', sa.Float(), nullable=True),
        sa.Column('live_interview_score', sa.Float(), nullable=True),
        sa.Column('overall_score', sa.Float(), nullable=True),
        sa.Column('ai_match_data', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('test_token', sa.String(length=64), nullable=True),
        sa.Column('interview_token', sa.String(length=64), nullable=True),
        sa.Column('test_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('interview_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        *[
            sa.CheckConstraint(
                f'{column} IS NULL OR ({column} >= 0 AND {column} <= 100)',
                name=f'ck_applications_{column}_range'
            )
            for column in SCORE_COLUMNS
        ]
    )
    op.create_index(op.f('ix_applications_id'), 'applications', ['id'], unique=False)
    op.create_index(op.f('ix_applications_job_id'), 'applications', ['job_id'], unique=False)
    op.create_index(op.f('ix_applications_email'), 'applications', ['email'], unique=False)
    op.create_index(op.f('ix_applications_status'), 'applications', ['status'], unique=False)
    op.create_index(op.f('ix_applications_current_stage'), 'applications', ['current_stage'], unique=False)
    op.create_index(op.f('ix_applications_overall_score'), 'applications', ['overall_score'], unique=False)
    op.create_index(op.f('ix_applications_test_token'), 'applications', ['test_token'], unique=True)
    op.create_index(op.f('ix_applications_interview_token'), 'applications', ['interview_token'], unique=True)

    op.create_table(
        'interview_scorecards',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('application_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('interviewer_id', sa.String(), nullable=False),
        sa.Column('interviewer_email', sa.String(), nullable=True),
        sa.Column('technical_skills', sa.Integer(), nullable=True),
        sa.Column('communication', sa.Integer(), nullable=True),
        sa.Column('problem_solving', sa.Integer(), nullable=True),
        sa.Column('cultural_fit', sa.Integer(), nullable=True),
        sa.Column('leadership', sa.Integer(), nullable=True),
        sa.Column('overall_rating', sa.Integer(), nullable=False),
        sa.Column('recommendation', sa.String(), nullable=True),
        sa.Column('strengths', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('concerns', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('application_id', 'interviewer_id', name='uq_scorecard_application_interviewer')
    )
    op.create_index(op.f('ix_interview_scorecards_id'), 'interview_scorecards', ['id'], unique=False)
    op.create_index(op.f('ix_interview_scorecards_application_id'), 'interview_scorecards', ['application_id'], unique=False)
    op.create_index(op.f('ix_interview_scorecards_interviewer_id'), 'interview_scorecards', ['interviewer_id'], unique=False)

    op.create_table(
        'candidate_notes',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('application_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('author_id', sa.String(), nullable=False),
        sa.Column('author_email', sa.String(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_candidate_notes_id'), 'candidate_notes', ['id'], unique=False)
    op.create_index(op.f('ix_candidate_notes_application_id'), 'candidate_notes', ['application_id'], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('candidate_notes')
    op.drop_table('interview_scorecards')
    op.drop_table('applications')
    op.drop_table('jobs')

    bind = op.get_bind()
    stage.drop(bind, checkfirst=True)
    application_status.drop(bind, checkfirst=True)
    job_status.drop(bind, checkfirst=True)
