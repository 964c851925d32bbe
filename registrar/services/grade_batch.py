"""
Batch grade submission planning.

A batch is handled in two passes:
1. Validate every entry (percentage range, section membership, duplicates)
   and collect all errors.
2. Only when pass 1 found nothing, derive the full update for every entry.

The caller applies the resulting updates in a single transaction, so one bad
entry can never leave part of a batch applied.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from registrar.errors import GradeBatchError, ValidationError
from registrar.models.records import EnrollmentRecord, EnrollmentStatus
from registrar.services.grading import LetterGrade, convert_grade, validate_percentage
from registrar.services.lifecycle import ALLOWED_TRANSITIONS, status_for_grade

logger = logging.getLogger(__name__)

GRADABLE_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items()
    if EnrollmentStatus.COMPLETED in targets and EnrollmentStatus.FAILED in targets
)


@dataclass(frozen=True)
class GradeSubmission:
    student_id: int
    percentage_grade: float
    grade_notes: Optional[str] = None


@dataclass(frozen=True)
class GradeUpdate:
    """The complete set of derived fields to write for one enrollment."""
    enrollment_id: int
    student_id: int
    percentage_grade: float
    letter_grade: LetterGrade
    grade_points: float
    quality_points: float
    status: EnrollmentStatus
    grade_notes: Optional[str] = None


@dataclass
class GradeBatchPreview:
    total_submitted: int
    errors: list[str] = field(default_factory=list)
    results: list[GradeUpdate] = field(default_factory=list)

    @property
    def valid_grades(self) -> int:
        return len(self.results)

    @property
    def can_proceed(self) -> bool:
        return not self.errors


def _validate_entries(
    section_enrollments: Iterable[EnrollmentRecord],
    submissions: list[GradeSubmission],
) -> tuple[list[str], list[tuple[GradeSubmission, EnrollmentRecord]]]:
    gradable = {
        e.student_id: e for e in section_enrollments
        if e.status in GRADABLE_STATUSES
    }

    errors: list[str] = []
    accepted: list[tuple[GradeSubmission, EnrollmentRecord]] = []
    seen: set[int] = set()

    for submission in submissions:
        student_id = submission.student_id
        if student_id in seen:
            errors.append(f"Student {student_id} appears more than once in the batch")
            continue
        seen.add(student_id)

        enrollment = gradable.get(student_id)
        if enrollment is None:
            errors.append(f"Student {student_id} is not enrolled in this section")
            continue

        pct = submission.percentage_grade
        try:
            validate_percentage(pct)
        except ValidationError:
            errors.append(f"Invalid grade {pct} for student {student_id}. Must be 0-100")
            continue

        accepted.append((submission, enrollment))

    return errors, accepted


def _build_update(
    submission: GradeSubmission,
    enrollment: EnrollmentRecord,
    credits: int,
) -> GradeUpdate:
    info = convert_grade(submission.percentage_grade, credits)
    return GradeUpdate(
        enrollment_id=enrollment.id,
        student_id=submission.student_id,
        percentage_grade=info.percentage_grade,
        letter_grade=info.letter_grade,
        grade_points=info.grade_points,
        quality_points=info.quality_points,
        status=status_for_grade(info.percentage_grade),
        grade_notes=submission.grade_notes,
    )


def plan_grade_batch(
    section_enrollments: Iterable[EnrollmentRecord],
    submissions: Iterable[GradeSubmission],
    credits: int,
) -> list[GradeUpdate]:
    """
    Validate a whole batch, then plan its updates.

    Raises GradeBatchError listing every invalid entry; in that case no
    update is returned at all.
    """
    if credits <= 0:
        raise ValidationError(f"Credits must be positive, got {credits}")

    submissions = list(submissions)
    errors, accepted = _validate_entries(section_enrollments, submissions)
    if errors:
        logger.warning(f"Rejected grade batch of {len(submissions)}: {len(errors)} error(s)")
        raise GradeBatchError(errors)

    return [_build_update(submission, enrollment, credits) for submission, enrollment in accepted]


def preview_grade_batch(
    section_enrollments: Iterable[EnrollmentRecord],
    submissions: Iterable[GradeSubmission],
    credits: int,
) -> GradeBatchPreview:
    """Validate a batch without raising, reporting valid entries and errors."""
    submissions = list(submissions)
    errors, accepted = _validate_entries(section_enrollments, submissions)
    return GradeBatchPreview(
        total_submitted=len(submissions),
        errors=errors,
        results=[_build_update(s, e, credits) for s, e in accepted],
    )
