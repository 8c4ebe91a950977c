"""initial schema

Revision ID: 3f2a9c4d1b7e
Revises:
Create Date: 2025-11-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f2a9c4d1b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'admins',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_admins'),
    )
    op.create_index('ix_admins_username', 'admins', ['username'], unique=True)

    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('submission_start', sa.DateTime(), nullable=True),
        sa.Column('submission_end', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_projects'),
    )

    op.create_table(
        'students',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('token', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_students'),
    )
    op.create_index('ix_students_token', 'students', ['token'], unique=True)

    op.create_table(
        'project_students',
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name='fk_project_students_project_id_projects', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], name='fk_project_students_student_id_students', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('project_id', 'student_id', name='pk_project_students'),
    )

    op.create_table(
        'time_sections',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('label', sa.String(length=64), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name='fk_time_sections_project_id_projects', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_time_sections'),
    )
    op.create_index('ix_time_sections_project_id', 'time_sections', ['project_id'])

    op.create_table(
        'courses',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('capacity IS NULL OR capacity >= 1', name='ck_courses_capacity_positive'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name='fk_courses_project_id_projects', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_courses'),
    )
    op.create_index('ix_courses_project_id', 'courses', ['project_id'])

    op.create_table(
        'tags',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('color', sa.String(length=32), nullable=False),
        sa.Column('min_required', sa.Integer(), nullable=False),
        sa.Column('max_allowed', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('min_required >= 0', name='ck_tags_min_required_non_negative'),
        sa.CheckConstraint('max_allowed IS NULL OR max_allowed >= 1', name='ck_tags_max_allowed_positive'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name='fk_tags_project_id_projects', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_tags'),
    )
    op.create_index('ix_tags_project_id', 'tags', ['project_id'])

    op.create_table(
        'course_tags',
        sa.Column('course_id', sa.Uuid(), nullable=False),
        sa.Column('tag_id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], name='fk_course_tags_course_id_courses', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], ['tags.id'], name='fk_course_tags_tag_id_tags', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('course_id', 'tag_id', name='pk_course_tags'),
    )

    op.create_table(
        'course_occurrences',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('course_id', sa.Uuid(), nullable=False),
        sa.Column('section_id', sa.Uuid(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_course_occurrences_day_of_week_range'),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], name='fk_course_occurrences_course_id_courses', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['section_id'], ['time_sections.id'], name='fk_course_occurrences_section_id_time_sections', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_course_occurrences'),
    )
    op.create_index('ix_course_occurrences_course_id', 'course_occurrences', ['course_id'])

    op.create_table(
        'enrollments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('course_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("status IN ('PENDING','CONFIRMED','CANCELLED')", name='ck_enrollments_status_valid'),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], name='fk_enrollments_course_id_courses', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], name='fk_enrollments_student_id_students', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_enrollments'),
        sa.UniqueConstraint('student_id', 'course_id', name='uq_enrollment_student_course'),
    )
    op.create_index('ix_enrollments_student_id', 'enrollments', ['student_id'])
    op.create_index('ix_enrollments_course_id', 'enrollments', ['course_id'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('student_id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name='fk_submissions_project_id_projects', ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], name='fk_submissions_student_id_students', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_submissions'),
        sa.UniqueConstraint('student_id', 'project_id', name='uq_submission_student_project'),
    )
    op.create_index('ix_submissions_student_id', 'submissions', ['student_id'])
    op.create_index('ix_submissions_project_id', 'submissions', ['project_id'])


def downgrade():
    op.drop_table('submissions')
    op.drop_table('enrollments')
    op.drop_table('course_occurrences')
    op.drop_table('course_tags')
    op.drop_table('tags')
    op.drop_table('courses')
    op.drop_table('time_sections')
    op.drop_table('project_students')
    op.drop_index('ix_students_token', table_name='students')
    op.drop_table('students')
    op.drop_table('projects')
    op.drop_index('ix_admins_username', table_name='admins')
    op.drop_table('admins')
