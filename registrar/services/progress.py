"""
Academic progress tracking.

Aggregates completed, passing credits by requirement category for one
program, derives the completion percentage, and classifies academic standing
from the cumulative GPA.

Algorithm:
1. Validate the program's requirement set (categories sum to the total).
2. For each enrollment that counts toward progress, resolve the course's
   effective category for this program and add its credits there.
3. Compute the cumulative GPA over every GPA-counting enrollment.
4. Standing: suspension first, then probation, else good standing.
"""
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from registrar.errors import NotFoundError, ValidationError
from registrar.models.records import (
    AcademicStanding, CategoryCredits, CourseCategory, CourseRecord,
    EnrollmentRecord, ProgramCourseRecord, ProgramRecord,
    ProgramRequirementRecord,
)
from registrar.services.gpa import GradeSummary, aggregate_gpa, graded_credits
from registrar.services.grading import round_half_up
from registrar.services.prerequisites import is_completed_and_passing


DEFAULT_PROBATION_GPA = 2.0
DEFAULT_SUSPENSION_GPA = 1.0
MAX_GPA = 4.0


@dataclass
class AcademicProgress:
    program_id: int
    total_credits_required: int
    credits_completed: int
    credits_by_category: dict[CourseCategory, CategoryCredits]
    gpa: float
    academic_standing: AcademicStanding
    completion_percentage: int
    grade_summary: GradeSummary = field(default_factory=GradeSummary)

    @property
    def cgpa(self) -> float:
        # No separate cumulative scale yet; cumulative GPA is the GPA
        return self.gpa


def effective_category(
    course: CourseRecord,
    program_course: Optional[ProgramCourseRecord] = None,
) -> CourseCategory:
    """
    Resolve the category a course counts under for a program.

    Step 1: a program-specific override, when present, wins.
    Step 2: otherwise the course's own category applies.
    """
    if program_course is not None and program_course.category_override is not None:
        return CourseCategory(program_course.category_override)
    return CourseCategory(course.category)


def _check_gpa_threshold(name: str, value: Optional[float]) -> None:
    if value is not None and not (0 <= value <= MAX_GPA):
        raise ValidationError(f"{name} must be between 0 and {MAX_GPA}, got {value}")


def validate_requirement_set(
    requirement: ProgramRequirementRecord,
    program: ProgramRecord,
) -> ProgramRequirementRecord:
    """Reject malformed requirement sets before any computation uses them."""
    if program.total_credits <= 0:
        raise ValidationError(f"Program {program.code} must have positive total credits")

    if requirement.program_id != program.id:
        raise ValidationError(
            f"Requirement set {requirement.id} belongs to program "
            f"{requirement.program_id}, not {program.id}"
        )

    for category in CourseCategory:
        if requirement.required_for(category) < 0:
            raise ValidationError(f"Required {category.value} credits cannot be negative")

    if requirement.category_total != requirement.total_credits:
        raise ValidationError(
            "Sum of category requirements must equal total requirements",
            details={
                "category_total": requirement.category_total,
                "total_credits": requirement.total_credits,
            },
        )

    if requirement.total_credits != program.total_credits:
        raise ValidationError(
            "Total requirements must match program total credits",
            details={
                "total_credits": requirement.total_credits,
                "program_total_credits": program.total_credits,
            },
        )

    _check_gpa_threshold("Minimum GPA", requirement.min_gpa)
    _check_gpa_threshold("Probation GPA", requirement.probation_gpa)
    _check_gpa_threshold("Suspension GPA", requirement.suspension_gpa)
    return requirement


def select_active_requirement(
    requirements: Iterable[ProgramRequirementRecord],
    program_id: int,
) -> ProgramRequirementRecord:
    """Return the single active requirement set of a program."""
    active = [r for r in requirements if r.program_id == program_id and r.is_active]
    if not active:
        raise NotFoundError(f"No active requirement set for program {program_id}")
    if len(active) > 1:
        raise ValidationError(
            f"Program {program_id} has {len(active)} active requirement sets; expected one"
        )
    return active[0]


def determine_standing(
    gpa: float,
    probation_gpa: float = DEFAULT_PROBATION_GPA,
    suspension_gpa: float = DEFAULT_SUSPENSION_GPA,
) -> AcademicStanding:
    if gpa < suspension_gpa:
        return AcademicStanding.SUSPENSION
    if gpa < probation_gpa:
        return AcademicStanding.PROBATION
    return AcademicStanding.GOOD_STANDING


def counts_toward_progress(enrollment: EnrollmentRecord) -> bool:
    """Completed, passing, flagged for progress, and not audited."""
    return (
        is_completed_and_passing(enrollment)
        and enrollment.counts_for_progress
        and not enrollment.is_auditing
    )


def compute_progress(
    program: ProgramRecord,
    requirement: ProgramRequirementRecord,
    enrollments: Iterable[EnrollmentRecord],
    courses: Mapping[int, CourseRecord],
    program_courses: Iterable[ProgramCourseRecord] = (),
    default_probation_gpa: float = DEFAULT_PROBATION_GPA,
    default_suspension_gpa: float = DEFAULT_SUSPENSION_GPA,
) -> AcademicProgress:
    """
    Compute a student's progress toward a program.

    enrollments is the student's full history; filtering happens here.
    Raises ValidationError for a malformed requirement set and NotFoundError
    when an enrollment references a course missing from `courses`.
    """
    validate_requirement_set(requirement, program)
    enrollments = list(enrollments)

    overrides = {
        pc.course_id: pc
        for pc in program_courses
        if pc.program_id == program.id
    }

    credits_by_category = {
        category: CategoryCredits(required=requirement.required_for(category))
        for category in CourseCategory
    }

    for enrollment in enrollments:
        if not counts_toward_progress(enrollment):
            continue
        course = courses.get(enrollment.course_id)
        if course is None:
            raise NotFoundError(
                f"Course {enrollment.course_id} not found for enrollment {enrollment.id}"
            )
        category = effective_category(course, overrides.get(course.id))
        credits_by_category[category].completed += course.credits

    credits_completed = sum(c.completed for c in credits_by_category.values())

    summary = aggregate_gpa(graded_credits(enrollments, courses))

    probation_gpa = (
        requirement.probation_gpa if requirement.probation_gpa is not None
        else default_probation_gpa
    )
    suspension_gpa = (
        requirement.suspension_gpa if requirement.suspension_gpa is not None
        else default_suspension_gpa
    )

    completion = round_half_up(credits_completed / program.total_credits * 100, 0)

    return AcademicProgress(
        program_id=program.id,
        total_credits_required=program.total_credits,
        credits_completed=credits_completed,
        credits_by_category=credits_by_category,
        gpa=summary.gpa,
        academic_standing=determine_standing(summary.gpa, probation_gpa, suspension_gpa),
        completion_percentage=int(completion),
        grade_summary=summary,
    )
