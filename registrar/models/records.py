"""
Read-only record snapshots consumed by the academic record engine.

The persistence layer owns and mutates these records; the engine only ever
receives immutable copies of them.
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class CourseCategory(str, Enum):
    HUMANITIES = "humanities"
    CORE = "core"
    ELECTIVE = "elective"
    GENERAL = "general"


class EnrollmentStatus(str, Enum):
    """
    Enrollment lifecycle states.

    ENROLLED is the initial state. COMPLETED, FAILED, WITHDRAWN and DROPPED are
    terminal. INCOMPLETE is a holding state resolved later to COMPLETED or FAILED.
    """
    ENROLLED = "enrolled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    INCOMPLETE = "incomplete"
    WITHDRAWN = "withdrawn"
    DROPPED = "dropped"


class SectionStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    CLOSED = "closed"
    ACTIVE = "active"
    GRADING = "grading"
    COMPLETED = "completed"


class PeriodStatus(str, Enum):
    PLANNING = "planning"
    ENROLLMENT = "enrollment"
    ACTIVE = "active"
    GRADING = "grading"
    CLOSED = "closed"


class AcademicStanding(str, Enum):
    GOOD_STANDING = "good_standing"
    PROBATION = "probation"
    SUSPENSION = "suspension"


@dataclass(frozen=True)
class CourseRecord:
    """A catalog course. Prerequisites are stored as course codes."""
    id: int
    code: str
    credits: int
    category: CourseCategory
    prerequisites: tuple[str, ...] = ()
    title: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class PeriodRecord:
    """
    An academic period (one bimester).

    Dates are naive UTC datetimes. withdrawal_deadline and grading_start are
    optional in the source data.
    """
    id: int
    code: str
    year: int
    bimester: int
    status: PeriodStatus
    start_date: datetime
    end_date: datetime
    enrollment_start: Optional[datetime] = None
    enrollment_end: Optional[datetime] = None
    withdrawal_deadline: Optional[datetime] = None
    grading_start: Optional[datetime] = None
    grading_deadline: Optional[datetime] = None


@dataclass(frozen=True)
class SectionRecord:
    """
    A course section in a period.

    capacity is None for sections with unlimited seats.
    """
    id: int
    course_id: int
    period_id: int
    professor_id: int
    crn: str
    status: SectionStatus
    enrolled: int = 0
    capacity: Optional[int] = None
    grades_submitted: bool = False


@dataclass(frozen=True)
class EnrollmentRecord:
    """
    A student's enrollment in a section.

    letter_grade, grade_points and quality_points are derived from
    percentage_grade and stay None until the enrollment is graded.
    """
    id: int
    student_id: int
    course_id: int
    section_id: int
    period_id: int
    status: EnrollmentStatus
    percentage_grade: Optional[float] = None
    letter_grade: Optional[str] = None
    grade_points: Optional[float] = None
    quality_points: Optional[float] = None
    counts_for_gpa: bool = True
    counts_for_progress: bool = True
    is_auditing: bool = False
    is_retake: bool = False
    incomplete_deadline: Optional[datetime] = None


@dataclass(frozen=True)
class ProgramRecord:
    id: int
    code: str
    name: str
    total_credits: int
    duration_bimesters: int


@dataclass(frozen=True)
class ProgramRequirementRecord:
    """
    Formal requirement set for a program.

    The four category requirements must sum to total_credits, which must match
    the program's own total credits.
    """
    id: int
    program_id: int
    humanities: int
    core: int
    elective: int
    general: int
    total_credits: int
    min_gpa: float
    max_bimesters: int
    probation_gpa: Optional[float] = None
    suspension_gpa: Optional[float] = None
    min_cgpa: Optional[float] = None
    effective_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: bool = True

    def required_for(self, category: CourseCategory) -> int:
        return getattr(self, CourseCategory(category).value)

    @property
    def category_total(self) -> int:
        return self.humanities + self.core + self.elective + self.general


@dataclass(frozen=True)
class ProgramCourseRecord:
    """
    Association of a course with a program.

    category_override, when set, supersedes the course's own category for
    this program only.
    """
    program_id: int
    course_id: int
    is_required: bool = False
    category_override: Optional[CourseCategory] = None
    is_active: bool = True


@dataclass(frozen=True)
class GradedCredit:
    """The subset of an enrollment the GPA aggregator needs."""
    credits: int
    percentage_grade: Optional[float] = None
    counts_for_gpa: bool = True
    is_auditing: bool = False
    period_id: Optional[int] = None
    course_code: Optional[str] = None


@dataclass
class CategoryCredits:
    required: int
    completed: int = 0

