"""
Enrollment lifecycle and period windows.

The engine never changes an enrollment itself; mutation handlers use these
helpers to decide the next status and to check that the move is legal.
Every time-dependent check takes an explicit `now` instead of looking up a
"current period".
"""
from datetime import datetime

from registrar.errors import ValidationError
from registrar.models.records import EnrollmentStatus, PeriodRecord, PeriodStatus
from registrar.services.grading import is_passing, validate_percentage


ALLOWED_TRANSITIONS: dict[EnrollmentStatus, frozenset[EnrollmentStatus]] = {
    EnrollmentStatus.ENROLLED: frozenset({
        EnrollmentStatus.IN_PROGRESS,
        EnrollmentStatus.COMPLETED,
        EnrollmentStatus.FAILED,
        EnrollmentStatus.INCOMPLETE,
        EnrollmentStatus.WITHDRAWN,
        EnrollmentStatus.DROPPED,
    }),
    EnrollmentStatus.IN_PROGRESS: frozenset({
        EnrollmentStatus.COMPLETED,
        EnrollmentStatus.FAILED,
        EnrollmentStatus.INCOMPLETE,
        EnrollmentStatus.WITHDRAWN,
        EnrollmentStatus.DROPPED,
    }),
    EnrollmentStatus.INCOMPLETE: frozenset({
        EnrollmentStatus.COMPLETED,
        EnrollmentStatus.FAILED,
    }),
    EnrollmentStatus.COMPLETED: frozenset(),
    EnrollmentStatus.FAILED: frozenset(),
    EnrollmentStatus.WITHDRAWN: frozenset(),
    EnrollmentStatus.DROPPED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def ensure_transition(current: EnrollmentStatus, target: EnrollmentStatus) -> EnrollmentStatus:
    """Raise ValidationError unless current -> target is a legal move."""
    current = EnrollmentStatus(current)
    target = EnrollmentStatus(target)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ValidationError(
            f"Cannot move enrollment from {current.value} to {target.value}",
            details={"from": current.value, "to": target.value},
        )
    return target


def status_for_grade(pct: float) -> EnrollmentStatus:
    """Final status on grade submission: completed when passing, else failed."""
    validate_percentage(pct)
    return EnrollmentStatus.COMPLETED if is_passing(pct) else EnrollmentStatus.FAILED


def withdrawal_status(period: PeriodRecord, now: datetime) -> EnrollmentStatus:
    """
    Withdrawn on or before the period's withdrawal deadline, dropped after it.

    A period without a deadline only allows drops.
    """
    deadline = period.withdrawal_deadline
    if deadline is not None and now <= deadline:
        return EnrollmentStatus.WITHDRAWN
    return EnrollmentStatus.DROPPED


def is_enrollment_open(period: PeriodRecord, now: datetime) -> bool:
    if period.status == PeriodStatus.ENROLLMENT:
        return True
    if period.enrollment_start is None or period.enrollment_end is None:
        return False
    return period.enrollment_start <= now <= period.enrollment_end


def is_grading_open(period: PeriodRecord, now: datetime) -> bool:
    if period.status == PeriodStatus.GRADING:
        return True
    if period.grading_start is None or period.grading_deadline is None:
        return False
    return period.grading_start <= now <= period.grading_deadline
