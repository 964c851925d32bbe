"""
GPA aggregation.

Sums credits and quality points over a set of graded records to produce a
GradeSummary. Only records that count for GPA and are not audited take part;
only records with a percentage grade contribute to the GPA denominator.
"""
import math
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Protocol

from registrar.errors import NotFoundError
from registrar.models.records import (
    CourseRecord, EnrollmentRecord, GradedCredit, PeriodRecord,
)
from registrar.services.grading import (
    grade_points, is_passing, quality_points, round_half_up, validate_percentage,
)


class GPARecord(Protocol):
    percentage_grade: Optional[float]
    credits: int
    counts_for_gpa: bool
    is_auditing: bool


@dataclass(frozen=True)
class GradeSummary:
    """
    Aggregate credit and GPA figures.

    grade_points is the unrounded total of quality points; gpa is rounded to
    two decimals for reporting.
    """
    attempted_credits: int = 0
    total_credits: int = 0
    earned_credits: int = 0
    grade_points: float = 0.0
    gpa: float = 0.0


@dataclass
class PeriodSummary:
    period: PeriodRecord
    enrollments: list[EnrollmentRecord] = field(default_factory=list)
    summary: GradeSummary = field(default_factory=GradeSummary)


def aggregate_gpa(records: Iterable[GPARecord]) -> GradeSummary:
    """
    Compute a GradeSummary from enrollment-like records.

    The result does not depend on the order of the records. An empty input
    yields gpa 0.
    """
    attempted_credits = 0
    total_credits = 0
    earned_credits = 0
    quality_point_terms: list[float] = []

    for record in records:
        if record.is_auditing or not record.counts_for_gpa:
            continue

        attempted_credits += record.credits

        if record.percentage_grade is None:
            continue
        validate_percentage(record.percentage_grade)

        total_credits += record.credits
        quality_point_terms.append(quality_points(
            grade_points(record.percentage_grade), record.credits
        ))
        if is_passing(record.percentage_grade):
            earned_credits += record.credits

    # fsum is exact, so the total does not depend on input order
    total_quality_points = math.fsum(quality_point_terms)
    gpa = total_quality_points / total_credits if total_credits > 0 else 0.0

    return GradeSummary(
        attempted_credits=attempted_credits,
        total_credits=total_credits,
        earned_credits=earned_credits,
        grade_points=total_quality_points,
        gpa=round_half_up(gpa),
    )


def graded_credits(
    enrollments: Iterable[EnrollmentRecord],
    courses: Mapping[int, CourseRecord],
) -> list[GradedCredit]:
    """Join enrollments with their courses' credits for aggregation."""
    result = []
    for enrollment in enrollments:
        course = courses.get(enrollment.course_id)
        if course is None:
            raise NotFoundError(
                f"Course {enrollment.course_id} not found for enrollment {enrollment.id}"
            )
        result.append(GradedCredit(
            credits=course.credits,
            percentage_grade=enrollment.percentage_grade,
            counts_for_gpa=enrollment.counts_for_gpa,
            is_auditing=enrollment.is_auditing,
            period_id=enrollment.period_id,
            course_code=course.code,
        ))
    return result


def student_gpa(
    enrollments: Iterable[EnrollmentRecord],
    courses: Mapping[int, CourseRecord],
    period_id: Optional[int] = None,
) -> GradeSummary:
    """Cumulative GPA, or the GPA of a single period when period_id is given."""
    if period_id is not None:
        enrollments = [e for e in enrollments if e.period_id == period_id]
    return aggregate_gpa(graded_credits(enrollments, courses))


def summarize_by_period(
    enrollments: Iterable[EnrollmentRecord],
    courses: Mapping[int, CourseRecord],
    periods: Mapping[int, PeriodRecord],
) -> list[PeriodSummary]:
    """
    Group enrollments by period and summarize each one.

    Periods missing from the mapping are skipped. Newest period first.
    """
    by_period: dict[int, list[EnrollmentRecord]] = defaultdict(list)
    for enrollment in enrollments:
        by_period[enrollment.period_id].append(enrollment)

    summaries = []
    for period_id, period_enrollments in by_period.items():
        period = periods.get(period_id)
        if period is None:
            continue
        summaries.append(PeriodSummary(
            period=period,
            enrollments=period_enrollments,
            summary=aggregate_gpa(graded_credits(period_enrollments, courses)),
        ))

    summaries.sort(key=lambda s: s.period.start_date, reverse=True)
    return summaries
