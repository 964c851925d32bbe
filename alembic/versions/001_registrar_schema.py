"""Create academic record tables

Revision ID: 001_registrar
Revises:
Create Date: 2025-01-13

Tables added:
- periods: Academic periods (bimesters) with enrollment, withdrawal and grading windows
- courses: Catalog courses with credits, category and prerequisite codes
- sections: Course sections per period with capacity and grading state
- programs: Degree programs
- program_requirements: Versioned credit and GPA requirement sets
- program_courses: Course to program mapping with category overrides
- enrollments: Student enrollments with grades and status history
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_registrar'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # periods - Academic bimesters
    op.create_table(
        'periods',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(20), nullable=False, unique=True),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('bimester', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), default='planning'),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('enrollment_start', sa.DateTime(), nullable=True),
        sa.Column('enrollment_end', sa.DateTime(), nullable=True),
        sa.Column('withdrawal_deadline', sa.DateTime(), nullable=True),
        sa.Column('grading_start', sa.DateTime(), nullable=True),
        sa.Column('grading_deadline', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_periods_year_bimester', 'periods', ['year', 'bimester'])

    # courses - Catalog
    op.create_table(
        'courses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(20), nullable=False, unique=True, index=True),
        sa.Column('title', sa.String(200), default=''),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('credits', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(20), nullable=False),  # humanities, core, elective, general
        sa.Column('prerequisites', sa.JSON(), nullable=True),  # List of course codes
        sa.Column('is_active', sa.Boolean(), default=True),
    )

    # sections - Course offerings per period
    op.create_table(
        'sections',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False, index=True),
        sa.Column('period_id', sa.Integer(), sa.ForeignKey('periods.id'), nullable=False, index=True),
        sa.Column('professor_id', sa.Integer(), nullable=False, index=True),
        sa.Column('crn', sa.String(40), nullable=False, unique=True),
        sa.Column('group_number', sa.String(10), default='01'),
        sa.Column('status', sa.String(20), default='draft'),
        sa.Column('capacity', sa.Integer(), nullable=True),  # NULL = unlimited
        sa.Column('enrolled', sa.Integer(), default=0),
        sa.Column('grades_submitted', sa.Boolean(), default=False),
        sa.Column('grades_submitted_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), onupdate=sa.func.now()),
    )
    op.create_index('ix_sections_professor_period', 'sections', ['professor_id', 'period_id'])

    # programs - Degree programs
    op.create_table(
        'programs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(20), nullable=False, unique=True, index=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('program_type', sa.String(20), default='bachelor'),
        sa.Column('total_credits', sa.Integer(), nullable=False),
        sa.Column('duration_bimesters', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), default=True),
    )

    # program_requirements - Versioned requirement sets
    op.create_table(
        'program_requirements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('program_id', sa.Integer(), sa.ForeignKey('programs.id'), nullable=False, index=True),
        sa.Column('humanities_credits', sa.Integer(), default=0),
        sa.Column('core_credits', sa.Integer(), default=0),
        sa.Column('elective_credits', sa.Integer(), default=0),
        sa.Column('general_credits', sa.Integer(), default=0),
        sa.Column('total_credits', sa.Integer(), nullable=False),
        sa.Column('min_gpa', sa.Float(), nullable=False),
        sa.Column('min_cgpa', sa.Float(), nullable=True),
        sa.Column('probation_gpa', sa.Float(), nullable=True),
        sa.Column('suspension_gpa', sa.Float(), nullable=True),
        sa.Column('max_bimesters', sa.Integer(), nullable=False),
        sa.Column('effective_date', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), default=True),
    )
    op.create_index('ix_program_requirements_active', 'program_requirements', ['program_id', 'is_active'])

    # program_courses - Course membership per program
    op.create_table(
        'program_courses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('program_id', sa.Integer(), sa.ForeignKey('programs.id'), nullable=False, index=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False, index=True),
        sa.Column('is_required', sa.Boolean(), default=False),
        sa.Column('category_override', sa.String(20), nullable=True),
        sa.Column('is_active', sa.Boolean(), default=True),
    )
    op.create_index('ix_program_courses_program_course', 'program_courses', ['program_id', 'course_id'], unique=True)

    # enrollments - Student enrollments with grades
    op.create_table(
        'enrollments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), nullable=False, index=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id'), nullable=False, index=True),
        sa.Column('section_id', sa.Integer(), sa.ForeignKey('sections.id'), nullable=False, index=True),
        sa.Column('period_id', sa.Integer(), sa.ForeignKey('periods.id'), nullable=False, index=True),
        sa.Column('status', sa.String(20), default='enrolled'),
        sa.Column('percentage_grade', sa.Float(), nullable=True),
        sa.Column('letter_grade', sa.String(3), nullable=True),
        sa.Column('grade_points', sa.Float(), nullable=True),
        sa.Column('quality_points', sa.Float(), nullable=True),
        sa.Column('grade_notes', sa.Text(), nullable=True),
        sa.Column('graded_by', sa.Integer(), nullable=True),
        sa.Column('graded_at', sa.DateTime(), nullable=True),
        sa.Column('counts_for_gpa', sa.Boolean(), default=True),
        sa.Column('counts_for_progress', sa.Boolean(), default=True),
        sa.Column('is_auditing', sa.Boolean(), default=False),
        sa.Column('is_retake', sa.Boolean(), default=False),
        sa.Column('incomplete_deadline', sa.DateTime(), nullable=True),
        sa.Column('status_changed_at', sa.DateTime(), nullable=True),
        sa.Column('status_changed_by', sa.Integer(), nullable=True),
        sa.Column('status_change_reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), onupdate=sa.func.now()),
    )
    op.create_index('ix_enrollments_student_section', 'enrollments', ['student_id', 'section_id'])
    op.create_index('ix_enrollments_student_period', 'enrollments', ['student_id', 'period_id'])
    op.create_index('ix_enrollments_student_course', 'enrollments', ['student_id', 'course_id'])


def downgrade() -> None:
    op.drop_table('enrollments')
    op.drop_table('program_courses')
    op.drop_table('program_requirements')
    op.drop_table('programs')
    op.drop_table('sections')
    op.drop_table('courses')
    op.drop_table('periods')
