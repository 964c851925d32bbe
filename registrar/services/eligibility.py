"""
Enrollment eligibility.

Combines the section-state, duplicate-enrollment, prerequisite and capacity
checks into one admit/deny decision. Every failing check contributes a
reason; a heavy course load is reported as a warning and never blocks.
"""
from dataclasses import dataclass, field
from typing import Iterable

from registrar.models.records import (
    EnrollmentRecord, EnrollmentStatus, SectionRecord, SectionStatus,
)
from registrar.services.prerequisites import PrerequisiteValidation


HEAVY_COURSE_LOAD_THRESHOLD = 6

REASON_SECTION_NOT_OPEN = "section not open"
REASON_SECTION_AT_CAPACITY = "section at capacity"
REASON_ALREADY_ENROLLED = "already enrolled"
REASON_MISSING_PREREQUISITES = "missing prerequisites"

ACTIVE_LOAD_STATUSES = frozenset({EnrollmentStatus.ENROLLED, EnrollmentStatus.IN_PROGRESS})


@dataclass(frozen=True)
class EnrollmentPolicy:
    """
    Institution-level enrollment rules.

    With enforce_capacity off every section is treated as unlimited. With it
    on, sections whose capacity is None are still unlimited.
    """
    enforce_capacity: bool = False
    heavy_course_load_threshold: int = HEAVY_COURSE_LOAD_THRESHOLD


@dataclass(frozen=True)
class EnrollmentValidation:
    can_enroll: bool
    reasons: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def has_capacity(section: SectionRecord, policy: EnrollmentPolicy) -> bool:
    if not policy.enforce_capacity or section.capacity is None:
        return True
    return section.enrolled < section.capacity


def check_enrollment_eligibility(
    section: SectionRecord,
    student_id: int,
    existing_enrollments: Iterable[EnrollmentRecord],
    prerequisite_result: PrerequisiteValidation,
    policy: EnrollmentPolicy = EnrollmentPolicy(),
) -> EnrollmentValidation:
    """
    Decide whether a student may enroll in a section.

    existing_enrollments are the student's current enrollments in any section;
    records belonging to other students are ignored. All checks run, so the
    caller sees every reason at once.
    """
    reasons: list[str] = []
    warnings: list[str] = []

    own = [e for e in existing_enrollments if e.student_id == student_id]

    if section.status != SectionStatus.OPEN:
        reasons.append(f"{REASON_SECTION_NOT_OPEN} (status: {SectionStatus(section.status).value})")

    # A dropped enrollment still occupies the section; only withdrawal frees it
    duplicate = any(
        e.section_id == section.id and e.status != EnrollmentStatus.WITHDRAWN
        for e in own
    )
    if duplicate:
        reasons.append(f"{REASON_ALREADY_ENROLLED} in this section")

    if not prerequisite_result.is_valid:
        reasons.append(
            f"{REASON_MISSING_PREREQUISITES}: "
            f"{', '.join(prerequisite_result.missing_prerequisites)}"
        )

    if not has_capacity(section, policy):
        reasons.append(f"{REASON_SECTION_AT_CAPACITY} ({section.enrolled}/{section.capacity})")

    current_load = sum(
        1 for e in own
        if e.period_id == section.period_id
        and e.section_id != section.id
        and e.status in ACTIVE_LOAD_STATUSES
    )
    if current_load >= policy.heavy_course_load_threshold:
        warnings.append(
            f"heavy course load: already enrolled in {current_load} courses this period"
        )

    return EnrollmentValidation(
        can_enroll=not reasons,
        reasons=reasons,
        warnings=warnings,
    )
