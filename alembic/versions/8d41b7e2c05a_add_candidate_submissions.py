"""add_candidate_submissions

Revision ID: 8d41b7e2c05a
Revises: 3f2a9c1d7e4b
Create Date: 2026-10-21 09:47:05.118302

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '8d41b7e2c05a'
down_revision: Union[str, Sequence[str], None] = '3f2a9c1d7e4b'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column('jobs', sa.Column('mcq_questions', postgresql.JSONB(astext_type=sa.Text()), nullable=True))
    op.add_column('applications', sa.Column('interview_transcript', sa.Text(), nullable=True))
    op.add_column(
        'applications',
        sa.Column('interview_evaluation', postgresql.JSONB(astext_type=sa.Text()), nullable=True)
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_column('applications', 'interview_evaluation')
    op.drop_column('applications', 'interview_transcript')
    op.drop_column('jobs', 'mcq_questions')
