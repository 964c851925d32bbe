"""
Pydantic schemas for API request/response models.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from registrar.services.access import Role


# =============================================================================
# Grade Schemas
# =============================================================================

class GradeInfoResponse(BaseModel):
    """A percentage grade with everything derived from it."""
    percentage_grade: float
    letter_grade: str
    grade_points: float
    quality_points: float
    is_passing: bool


class GradeSummaryResponse(BaseModel):
    """Credit totals and GPA over a set of enrollments."""
    model_config = ConfigDict(from_attributes=True)

    attempted_credits: int
    total_credits: int  # GPA-bearing credits
    earned_credits: int
    grade_points: float  # Total quality points, unrounded
    gpa: float


class EnrollmentSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    section_id: int
    status: str
    percentage_grade: Optional[float] = None
    letter_grade: Optional[str] = None
    counts_for_gpa: bool
    is_auditing: bool


class PeriodSummaryResponse(BaseModel):
    period_id: int
    period_code: str
    start_date: datetime
    enrollments: list[EnrollmentSummaryResponse]
    summary: GradeSummaryResponse


class AcademicHistoryResponse(BaseModel):
    student_id: int
    periods: list[PeriodSummaryResponse]


class SectionStatisticsResponse(BaseModel):
    """Grade distribution and statistics for one section."""
    model_config = ConfigDict(from_attributes=True)

    section_id: int
    distribution: dict[str, int]
    total_students: int
    graded_students: int
    pending_grades: int
    average_grade: float
    median_grade: float
    pass_rate: float
    highest_grade: float
    lowest_grade: float


# =============================================================================
# Enrollment Schemas
# =============================================================================

class EnrollmentValidationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    can_enroll: bool
    reasons: list[str] = []
    warnings: list[str] = []


# =============================================================================
# Progress Schemas
# =============================================================================

class CategoryCreditsResponse(BaseModel):
    required: int
    completed: int


class AcademicProgressResponse(BaseModel):
    program_id: int
    total_credits_required: int
    credits_completed: int
    credits_by_category: dict[str, CategoryCreditsResponse]
    gpa: float
    cgpa: float
    academic_standing: str  # good_standing, probation, suspension
    completion_percentage: int


class CategoryRequirementResponse(BaseModel):
    category: str
    required: int
    completed: int
    remaining: int


class CreditRequirementResponse(BaseModel):
    required: int
    completed: int


class GPARequirementResponse(BaseModel):
    minimum: float
    current: float


class GraduationValidationResponse(BaseModel):
    """Graduation verdict with every figure needed to show what is left."""
    is_eligible: bool
    total_credits: CreditRequirementResponse
    remaining_credits: int
    category_requirements: list[CategoryRequirementResponse]
    gpa_requirement: GPARequirementResponse
    missing_courses: list[str] = []


# =============================================================================
# Grading Schemas
# =============================================================================

class GradeEntry(BaseModel):
    """One student's grade in a batch. Range is checked with the whole batch."""
    student_id: int
    percentage_grade: float
    grade_notes: Optional[str] = None


class SectionGradesRequest(BaseModel):
    """Grade batch for a section, submitted on behalf of an acting user."""
    actor_id: int
    actor_role: Role
    grades: list[GradeEntry] = Field(..., min_length=1)
    mark_as_submitted: bool = False


class GradeUpdateResponse(BaseModel):
    enrollment_id: int
    student_id: int
    percentage_grade: float
    letter_grade: str
    grade_points: float
    quality_points: float
    status: str


class SectionGradesResponse(BaseModel):
    section_id: int
    grades_processed: int
    section_marked_as_submitted: bool
    results: list[GradeUpdateResponse]


class GradePreviewResponse(BaseModel):
    section_id: int
    total_submitted: int
    valid_grades: int
    can_proceed: bool
    errors: list[str] = []
    results: list[GradeUpdateResponse] = []
