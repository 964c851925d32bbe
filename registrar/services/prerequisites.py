"""
Prerequisite validation.

Prerequisites are stored as course codes, and a course keeps its code when it
is re-offered across periods, so matching is always by code rather than by
internal id.
"""
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from registrar.models.records import CourseRecord, EnrollmentRecord, EnrollmentStatus
from registrar.services.grading import is_passing, validate_percentage


@dataclass(frozen=True)
class PrerequisiteValidation:
    is_valid: bool
    missing_prerequisites: list[str] = field(default_factory=list)
    completed_prerequisites: list[str] = field(default_factory=list)


def is_completed_and_passing(enrollment: EnrollmentRecord) -> bool:
    """
    Completed status with a passing percentage grade.

    A stored grade outside 0-100 raises ValidationError.
    """
    if enrollment.status != EnrollmentStatus.COMPLETED or enrollment.percentage_grade is None:
        return False
    return is_passing(validate_percentage(enrollment.percentage_grade))


def passed_course_codes(
    enrollments: Iterable[EnrollmentRecord],
    courses: Mapping[int, CourseRecord],
) -> set[str]:
    """
    Codes of every course the student completed with a passing grade.

    Enrollments whose course is not in the mapping are ignored; they cannot
    satisfy a code-based prerequisite.
    """
    codes = set()
    for enrollment in enrollments:
        if not is_completed_and_passing(enrollment):
            continue
        course = courses.get(enrollment.course_id)
        if course is not None:
            codes.add(course.code)
    return codes


def validate_prerequisites(
    prerequisites: Iterable[str],
    completed_codes: Iterable[str],
) -> PrerequisiteValidation:
    """
    Check a course's prerequisite codes against the student's passed courses.

    Both result lists keep the order of the prerequisite list. An empty
    prerequisite list is always valid.
    """
    completed = set(completed_codes)
    prerequisites = list(prerequisites)

    missing = [code for code in prerequisites if code not in completed]
    satisfied = [code for code in prerequisites if code in completed]

    return PrerequisiteValidation(
        is_valid=not missing,
        missing_prerequisites=missing,
        completed_prerequisites=satisfied,
    )
