"""
SQLAlchemy database models for the Registrar.

These tables are owned by the surrounding application. The academic record
engine only reads them, through `to_record()` snapshots; the grading service
is the one place that writes grade and status fields.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import (
    create_engine,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Float,
    JSON,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    relationship,
    sessionmaker,
    Mapped,
    mapped_column,
)

from registrar.config import settings
from registrar.models.records import (
    CourseCategory,
    CourseRecord,
    EnrollmentRecord,
    EnrollmentStatus,
    PeriodRecord,
    PeriodStatus,
    ProgramCourseRecord,
    ProgramRecord,
    ProgramRequirementRecord,
    SectionRecord,
    SectionStatus,
)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Period(Base):
    """
    An academic period (bimester).

    Six bimesters per year; `code` is e.g. "2025-3".
    """
    __tablename__ = "periods"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    bimester: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=PeriodStatus.PLANNING.value)  # planning, enrollment, active, grading, closed

    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    enrollment_start: Mapped[Optional[datetime]] = mapped_column(DateTime)
    enrollment_end: Mapped[Optional[datetime]] = mapped_column(DateTime)
    withdrawal_deadline: Mapped[Optional[datetime]] = mapped_column(DateTime)
    grading_start: Mapped[Optional[datetime]] = mapped_column(DateTime)
    grading_deadline: Mapped[Optional[datetime]] = mapped_column(DateTime)

    __table_args__ = (
        Index("ix_periods_year_bimester", "year", "bimester"),
    )

    def to_record(self) -> PeriodRecord:
        return PeriodRecord(
            id=self.id,
            code=self.code,
            year=self.year,
            bimester=self.bimester,
            status=PeriodStatus(self.status),
            start_date=self.start_date,
            end_date=self.end_date,
            enrollment_start=self.enrollment_start,
            enrollment_end=self.enrollment_end,
            withdrawal_deadline=self.withdrawal_deadline,
            grading_start=self.grading_start,
            grading_deadline=self.grading_deadline,
        )

    def __repr__(self) -> str:
        return f"<Period(id={self.id}, code='{self.code}', status='{self.status}')>"


class Course(Base):
    """
    A catalog course (e.g., CS101).

    Prerequisites are a JSON list of course codes.
    """
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    title: Mapped[str] = mapped_column(String(200), default="")
    description: Mapped[Optional[str]] = mapped_column(Text)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)  # humanities, core, elective, general
    prerequisites: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    sections: Mapped[list["Section"]] = relationship("Section", back_populates="course")

    def to_record(self) -> CourseRecord:
        return CourseRecord(
            id=self.id,
            code=self.code,
            credits=self.credits,
            category=CourseCategory(self.category),
            prerequisites=tuple(self.prerequisites or ()),
            title=self.title or "",
            is_active=self.is_active,
        )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, code='{self.code}', credits={self.credits})>"


class Section(Base):
    """
    A section of a course offered in a period.

    capacity NULL means unlimited seats.
    """
    __tablename__ = "sections"

    id: Mapped[int] = mapped_column(primary_key=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), index=True)
    period_id: Mapped[int] = mapped_column(ForeignKey("periods.id"), index=True)
    professor_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Course Reference Number: course code + group + period code
    crn: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    group_number: Mapped[str] = mapped_column(String(10), default="01")
    status: Mapped[str] = mapped_column(String(20), default=SectionStatus.DRAFT.value)

    capacity: Mapped[Optional[int]] = mapped_column(Integer)
    enrolled: Mapped[int] = mapped_column(Integer, default=0)

    grades_submitted: Mapped[bool] = mapped_column(Boolean, default=False)
    grades_submitted_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    course: Mapped["Course"] = relationship("Course", back_populates="sections")

    __table_args__ = (
        Index("ix_sections_professor_period", "professor_id", "period_id"),
    )

    def to_record(self) -> SectionRecord:
        return SectionRecord(
            id=self.id,
            course_id=self.course_id,
            period_id=self.period_id,
            professor_id=self.professor_id,
            crn=self.crn,
            status=SectionStatus(self.status),
            enrolled=self.enrolled or 0,
            capacity=self.capacity,
            grades_submitted=self.grades_submitted,
        )

    def __repr__(self) -> str:
        return f"<Section(id={self.id}, crn='{self.crn}', status='{self.status}')>"


class Program(Base):
    """A degree program (diploma, bachelor, master, doctorate)."""
    __tablename__ = "programs"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    program_type: Mapped[str] = mapped_column(String(20), default="bachelor")
    total_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_bimesters: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    requirements: Mapped[list["ProgramRequirement"]] = relationship(
        "ProgramRequirement", back_populates="program", cascade="all, delete-orphan"
    )

    def to_record(self) -> ProgramRecord:
        return ProgramRecord(
            id=self.id,
            code=self.code,
            name=self.name,
            total_credits=self.total_credits,
            duration_bimesters=self.duration_bimesters,
        )

    def __repr__(self) -> str:
        return f"<Program(id={self.id}, code='{self.code}', name='{self.name[:30]}')>"


class ProgramRequirement(Base):
    """
    A versioned requirement set for a program.

    Only one row per program is active at a time; older rows keep an end_date.
    """
    __tablename__ = "program_requirements"

    id: Mapped[int] = mapped_column(primary_key=True)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id"), index=True)

    # Credits required per category
    humanities_credits: Mapped[int] = mapped_column(Integer, default=0)
    core_credits: Mapped[int] = mapped_column(Integer, default=0)
    elective_credits: Mapped[int] = mapped_column(Integer, default=0)
    general_credits: Mapped[int] = mapped_column(Integer, default=0)
    total_credits: Mapped[int] = mapped_column(Integer, nullable=False)

    # GPA thresholds
    min_gpa: Mapped[float] = mapped_column(Float, nullable=False)
    min_cgpa: Mapped[Optional[float]] = mapped_column(Float)
    probation_gpa: Mapped[Optional[float]] = mapped_column(Float)
    suspension_gpa: Mapped[Optional[float]] = mapped_column(Float)

    max_bimesters: Mapped[int] = mapped_column(Integer, nullable=False)

    effective_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    program: Mapped["Program"] = relationship("Program", back_populates="requirements")

    __table_args__ = (
        Index("ix_program_requirements_active", "program_id", "is_active"),
    )

    def to_record(self) -> ProgramRequirementRecord:
        return ProgramRequirementRecord(
            id=self.id,
            program_id=self.program_id,
            humanities=self.humanities_credits,
            core=self.core_credits,
            elective=self.elective_credits,
            general=self.general_credits,
            total_credits=self.total_credits,
            min_gpa=self.min_gpa,
            max_bimesters=self.max_bimesters,
            probation_gpa=self.probation_gpa,
            suspension_gpa=self.suspension_gpa,
            min_cgpa=self.min_cgpa,
            effective_date=self.effective_date,
            end_date=self.end_date,
            is_active=self.is_active,
        )

    def __repr__(self) -> str:
        return f"<ProgramRequirement(id={self.id}, program_id={self.program_id}, active={self.is_active})>"


class ProgramCourse(Base):
    """
    Links a course to a program.

    category_override reclassifies a shared course for this program only.
    """
    __tablename__ = "program_courses"

    id: Mapped[int] = mapped_column(primary_key=True)
    program_id: Mapped[int] = mapped_column(ForeignKey("programs.id"), index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), index=True)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False)
    category_override: Mapped[Optional[str]] = mapped_column(String(20))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    course: Mapped["Course"] = relationship("Course")

    __table_args__ = (
        Index("ix_program_courses_program_course", "program_id", "course_id", unique=True),
    )

    def to_record(self) -> ProgramCourseRecord:
        return ProgramCourseRecord(
            program_id=self.program_id,
            course_id=self.course_id,
            is_required=self.is_required,
            category_override=CourseCategory(self.category_override) if self.category_override else None,
            is_active=self.is_active,
        )


class Enrollment(Base):
    """
    A student's enrollment in a section.

    letter_grade, grade_points and quality_points are always rewritten
    together with percentage_grade.
    """
    __tablename__ = "enrollments"

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), index=True)
    section_id: Mapped[int] = mapped_column(ForeignKey("sections.id"), index=True)
    period_id: Mapped[int] = mapped_column(ForeignKey("periods.id"), index=True)

    status: Mapped[str] = mapped_column(String(20), default=EnrollmentStatus.ENROLLED.value)

    # Grades
    percentage_grade: Mapped[Optional[float]] = mapped_column(Float)
    letter_grade: Mapped[Optional[str]] = mapped_column(String(3))
    grade_points: Mapped[Optional[float]] = mapped_column(Float)
    quality_points: Mapped[Optional[float]] = mapped_column(Float)
    grade_notes: Mapped[Optional[str]] = mapped_column(Text)
    graded_by: Mapped[Optional[int]] = mapped_column(Integer)
    graded_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Flags
    counts_for_gpa: Mapped[bool] = mapped_column(Boolean, default=True)
    counts_for_progress: Mapped[bool] = mapped_column(Boolean, default=True)
    is_auditing: Mapped[bool] = mapped_column(Boolean, default=False)
    is_retake: Mapped[bool] = mapped_column(Boolean, default=False)

    incomplete_deadline: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Status history
    status_changed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    status_changed_by: Mapped[Optional[int]] = mapped_column(Integer)
    status_change_reason: Mapped[Optional[str]] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_enrollments_student_section", "student_id", "section_id"),
        Index("ix_enrollments_student_period", "student_id", "period_id"),
        Index("ix_enrollments_student_course", "student_id", "course_id"),
    )

    def to_record(self) -> EnrollmentRecord:
        return EnrollmentRecord(
            id=self.id,
            student_id=self.student_id,
            course_id=self.course_id,
            section_id=self.section_id,
            period_id=self.period_id,
            status=EnrollmentStatus(self.status),
            percentage_grade=self.percentage_grade,
            letter_grade=self.letter_grade,
            grade_points=self.grade_points,
            quality_points=self.quality_points,
            counts_for_gpa=self.counts_for_gpa,
            counts_for_progress=self.counts_for_progress,
            is_auditing=self.is_auditing,
            is_retake=self.is_retake,
            incomplete_deadline=self.incomplete_deadline,
        )

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, student_id={self.student_id}, status='{self.status}')>"


# =============================================================================
# Database Engine and Session
# =============================================================================

_engine = None
_session_factory = None


def get_engine(url: Optional[str] = None):
    """Get or create the database engine."""
    global _engine
    if _engine is None:
        url = url or settings.database_url
        if url.startswith("sqlite"):
            _engine = create_engine(url, echo=settings.debug)
        else:
            _engine = create_engine(
                url,
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                echo=settings.debug,
            )
    return _engine


def get_session_factory(engine=None):
    """Get or create the session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(
            bind=engine or get_engine(),
            expire_on_commit=False,
        )
    return _session_factory


def init_db(engine=None):
    """Create all tables."""
    if engine is None:
        engine = get_engine()
    Base.metadata.create_all(engine)
