"""
Registrar - Test Configuration and Fixtures
"""
import os
from datetime import datetime
from typing import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set testing environment before settings are loaded
os.environ['REGISTRAR_DATABASE_URL'] = 'sqlite://'
os.environ['REGISTRAR_ENFORCE_SECTION_CAPACITY'] = 'false'

from registrar.models.database import (
    Base, Course, Enrollment, Period, Program, ProgramCourse,
    ProgramRequirement, Section,
)
from registrar.models.records import (
    CourseCategory, CourseRecord, EnrollmentRecord, EnrollmentStatus,
    PeriodRecord, PeriodStatus, ProgramRecord, ProgramRequirementRecord,
    SectionRecord, SectionStatus,
)


# =============================================================================
# Record builders
# =============================================================================

@pytest.fixture
def make_course():
    """Build a CourseRecord with sensible defaults."""
    def _make(id=1, code="CS101", credits=3, category=CourseCategory.CORE, prerequisites=()):
        return CourseRecord(
            id=id, code=code, credits=credits, category=category,
            prerequisites=tuple(prerequisites),
        )
    return _make


@pytest.fixture
def make_enrollment():
    """Build an EnrollmentRecord with sensible defaults."""
    def _make(
        id=1,
        student_id=100,
        course_id=1,
        section_id=1,
        period_id=1,
        status=EnrollmentStatus.COMPLETED,
        percentage_grade=None,
        **kwargs,
    ):
        return EnrollmentRecord(
            id=id, student_id=student_id, course_id=course_id,
            section_id=section_id, period_id=period_id, status=status,
            percentage_grade=percentage_grade, **kwargs,
        )
    return _make


@pytest.fixture
def make_section():
    """Build a SectionRecord with sensible defaults."""
    def _make(id=1, course_id=1, period_id=1, professor_id=10,
              status=SectionStatus.OPEN, enrolled=0, capacity=None):
        return SectionRecord(
            id=id, course_id=course_id, period_id=period_id,
            professor_id=professor_id, crn=f"CRN-{id}", status=status,
            enrolled=enrolled, capacity=capacity,
        )
    return _make


@pytest.fixture
def make_period():
    """Build a PeriodRecord with sensible defaults."""
    def _make(id=1, status=PeriodStatus.ACTIVE, **kwargs):
        return PeriodRecord(
            id=id,
            code=f"2025-{id}",
            year=2025,
            bimester=id,
            status=status,
            start_date=kwargs.pop("start_date", datetime(2025, 1, 6)),
            end_date=kwargs.pop("end_date", datetime(2025, 2, 28)),
            **kwargs,
        )
    return _make


@pytest.fixture
def program():
    return ProgramRecord(id=1, code="BSCS", name="Computer Science", total_credits=12,
                         duration_bimesters=6)


@pytest.fixture
def make_requirement():
    """Build a ProgramRequirementRecord that matches the `program` fixture."""
    def _make(humanities=3, core=7, elective=2, general=0, total_credits=12, min_gpa=2.0,
              **kwargs):
        return ProgramRequirementRecord(
            id=kwargs.pop("id", 1),
            program_id=kwargs.pop("program_id", 1),
            humanities=humanities,
            core=core,
            elective=elective,
            general=general,
            total_credits=total_credits,
            min_gpa=min_gpa,
            max_bimesters=kwargs.pop("max_bimesters", 12),
            **kwargs,
        )
    return _make


# =============================================================================
# Database
# =============================================================================

@pytest.fixture(scope='function')
def engine() -> Generator:
    """Fresh in-memory database for each test."""
    test_engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(test_engine)
    yield test_engine
    Base.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def seeded(session_factory):
    """
    A small registrar dataset.

    Student 100 passed CS101 (90) and GEN101 (80) in 2025-1, CS201 (85) in
    2025-2, and is enrolled in HUM101 in 2025-3. Students 101 and 102 await
    grades in the CS201 section, which is in its grading period.
    """
    with session_factory() as session:
        session.add_all([
            Period(id=1, code="2025-1", year=2025, bimester=1, status="closed",
                   start_date=datetime(2025, 1, 6), end_date=datetime(2025, 2, 28),
                   withdrawal_deadline=datetime(2025, 1, 31)),
            Period(id=2, code="2025-2", year=2025, bimester=2, status="grading",
                   start_date=datetime(2025, 3, 3), end_date=datetime(2025, 4, 30),
                   withdrawal_deadline=datetime(2025, 3, 31),
                   grading_start=datetime(2025, 4, 25), grading_deadline=datetime(2025, 5, 5)),
            Period(id=3, code="2025-3", year=2025, bimester=3, status="enrollment",
                   start_date=datetime(2025, 5, 5), end_date=datetime(2025, 6, 30),
                   enrollment_start=datetime(2025, 4, 20), enrollment_end=datetime(2025, 5, 10),
                   withdrawal_deadline=datetime(2025, 5, 31)),
        ])
        session.add_all([
            Course(id=1, code="CS101", title="Intro to Programming", credits=3, category="core"),
            Course(id=2, code="CS201", title="Data Structures", credits=4, category="core",
                   prerequisites=["CS101"]),
            Course(id=3, code="GEN101", title="Study Skills", credits=2, category="general"),
            Course(id=4, code="HUM101", title="Ethics", credits=3, category="humanities"),
            Course(id=5, code="CS301", title="Algorithms", credits=3, category="core",
                   prerequisites=["CS201", "MATH101"]),
        ])
        session.add_all([
            Section(id=1, course_id=1, period_id=1, professor_id=10, crn="CS101-01-2025-1",
                    status="completed", enrolled=1, grades_submitted=True),
            Section(id=2, course_id=2, period_id=2, professor_id=10, crn="CS201-01-2025-2",
                    status="grading", enrolled=3),
            Section(id=3, course_id=3, period_id=1, professor_id=11, crn="GEN101-01-2025-1",
                    status="completed", enrolled=1, grades_submitted=True),
            Section(id=4, course_id=4, period_id=3, professor_id=11, crn="HUM101-01-2025-3",
                    status="open", enrolled=1),
            Section(id=5, course_id=5, period_id=3, professor_id=10, crn="CS301-01-2025-3",
                    status="open", enrolled=1, capacity=1),
        ])
        session.add_all([
            Program(id=1, code="BSCS", name="Computer Science", total_credits=12,
                    duration_bimesters=6),
            Program(id=2, code="BAHIST", name="History", total_credits=12,
                    duration_bimesters=6),
            Program(id=3, code="BSMATH", name="Mathematics", total_credits=12,
                    duration_bimesters=6),
        ])
        session.add_all([
            ProgramRequirement(id=1, program_id=1, humanities_credits=3, core_credits=7,
                               elective_credits=2, general_credits=0, total_credits=12,
                               min_gpa=2.0, max_bimesters=12, is_active=True),
            # Program 2 only has a retired requirement set
            ProgramRequirement(id=2, program_id=2, humanities_credits=6, core_credits=6,
                               total_credits=12, min_gpa=2.0, max_bimesters=12,
                               end_date=datetime(2024, 12, 31), is_active=False),
            # Categories do not add up to the total
            ProgramRequirement(id=3, program_id=3, humanities_credits=3, core_credits=3,
                               total_credits=12, min_gpa=2.0, max_bimesters=12, is_active=True),
        ])
        session.add_all([
            ProgramCourse(program_id=1, course_id=1, is_required=True),
            ProgramCourse(program_id=1, course_id=2, is_required=True),
            ProgramCourse(program_id=1, course_id=4, is_required=True),
            ProgramCourse(program_id=1, course_id=3, category_override="elective"),
        ])
        session.add_all([
            Enrollment(id=1, student_id=100, course_id=1, section_id=1, period_id=1,
                       status="completed", percentage_grade=90, letter_grade="A-",
                       grade_points=3.7, quality_points=11.1),
            Enrollment(id=2, student_id=100, course_id=3, section_id=3, period_id=1,
                       status="completed", percentage_grade=80, letter_grade="B-",
                       grade_points=2.7, quality_points=5.4),
            Enrollment(id=3, student_id=100, course_id=2, section_id=2, period_id=2,
                       status="completed", percentage_grade=85, letter_grade="B",
                       grade_points=3.0, quality_points=12.0),
            Enrollment(id=4, student_id=100, course_id=4, section_id=4, period_id=3,
                       status="enrolled"),
            Enrollment(id=5, student_id=101, course_id=2, section_id=2, period_id=2,
                       status="enrolled"),
            Enrollment(id=6, student_id=102, course_id=2, section_id=2, period_id=2,
                       status="in_progress"),
            Enrollment(id=7, student_id=103, course_id=5, section_id=5, period_id=3,
                       status="enrolled"),
        ])
        session.commit()
    return session_factory
