"""
Graduation validation.

Compares a student's computed progress against the program's formal
requirement set and its required courses. Every intermediate figure is
returned so callers can show what is left, not just the verdict.
"""
from dataclasses import dataclass, field
from typing import Iterable

from registrar.models.records import (
    CourseCategory, CourseRecord, EnrollmentRecord, ProgramRequirementRecord,
)
from registrar.services.prerequisites import is_completed_and_passing
from registrar.services.progress import AcademicProgress


@dataclass(frozen=True)
class CategoryRequirement:
    category: CourseCategory
    required: int
    completed: int
    remaining: int


@dataclass(frozen=True)
class CreditRequirement:
    required: int
    completed: int


@dataclass(frozen=True)
class GPARequirement:
    minimum: float
    current: float


@dataclass(frozen=True)
class GraduationValidation:
    is_eligible: bool
    total_credits: CreditRequirement
    category_requirements: list[CategoryRequirement]
    gpa_requirement: GPARequirement
    missing_courses: list[str] = field(default_factory=list)

    @property
    def remaining_credits(self) -> int:
        return max(0, self.total_credits.required - self.total_credits.completed)


def validate_graduation(
    progress: AcademicProgress,
    requirement: ProgramRequirementRecord,
    required_courses: Iterable[CourseRecord],
    enrollments: Iterable[EnrollmentRecord],
) -> GraduationValidation:
    """
    Decide graduation eligibility.

    required_courses are the program's required course associations resolved
    to courses. A required course is satisfied by a completed, passing,
    non-audit enrollment in that course.
    """
    passed_course_ids = {
        e.course_id for e in enrollments
        if is_completed_and_passing(e) and not e.is_auditing
    }

    missing_courses = [
        course.code for course in required_courses
        if course.id not in passed_course_ids
    ]

    category_requirements = [
        CategoryRequirement(
            category=category,
            required=credits.required,
            completed=credits.completed,
            remaining=max(0, credits.required - credits.completed),
        )
        for category, credits in progress.credits_by_category.items()
    ]

    is_eligible = (
        progress.credits_completed >= progress.total_credits_required
        and progress.gpa >= requirement.min_gpa
        and not missing_courses
        and all(c.remaining == 0 for c in category_requirements)
    )

    return GraduationValidation(
        is_eligible=is_eligible,
        total_credits=CreditRequirement(
            required=progress.total_credits_required,
            completed=progress.credits_completed,
        ),
        category_requirements=category_requirements,
        gpa_requirement=GPARequirement(
            minimum=requirement.min_gpa,
            current=progress.gpa,
        ),
        missing_courses=missing_courses,
    )
