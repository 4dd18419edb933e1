"""students, quiz_results, grading_results

Revision ID: 5c1d2e3f4a5b
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '5c1d2e3f4a5b'
down_revision = None
branch_labels = None
depends_on = None


def _json():
    return sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def upgrade() -> None:
    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('class_name', sa.String(length=255), nullable=False),
        sa.Column('avatar', sa.String(length=512), nullable=False),
        sa.Column('trend', sa.String(length=16), server_default='stable', nullable=False),
        sa.Column('alerts', _json(), nullable=False),
        sa.Column('accommodations', _json(), nullable=False),
        sa.Column('last_positive_note', sa.Text(), nullable=False),
        sa.Column('assessment_history', _json(), nullable=False),
        sa.Column('submission_patterns', _json(), nullable=False),
        sa.Column('behavioral_observations', _json(), nullable=False),
        sa.Column('communication_history', _json(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_students_id'), 'students', ['id'], unique=False)
    op.create_index(op.f('ix_students_class_name'), 'students', ['class_name'], unique=False)

    op.create_table(
        'quiz_results',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('quiz_name', sa.String(length=255), nullable=False),
        sa.Column('quiz_data', _json(), nullable=False),
        sa.Column('score_percent', sa.Integer(), nullable=True),
        sa.Column('saved_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['students.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_quiz_results_student_id'), 'quiz_results', ['student_id'], unique=False)
    op.create_index(op.f('ix_quiz_results_saved_at'), 'quiz_results', ['saved_at'], unique=False)

    op.create_table(
        'grading_results',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_name', sa.String(length=255), nullable=False),
        sa.Column('class_name', sa.String(length=255), nullable=False),
        sa.Column('subject', sa.String(length=255), nullable=False),
        sa.Column('exam_topic', sa.String(length=255), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('total_marks', sa.Float(), nullable=False),
        sa.Column('feedback', sa.Text(), nullable=False),
        sa.Column('graded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade() -> None:
    op.drop_table('grading_results')
    op.drop_index(op.f('ix_quiz_results_saved_at'), table_name='quiz_results')
    op.drop_index(op.f('ix_quiz_results_student_id'), table_name='quiz_results')
    op.drop_table('quiz_results')
    op.drop_index(op.f('ix_students_class_name'), table_name='students')
    op.drop_index(op.f('ix_students_id'), table_name='students')
    op.drop_table('students')
