"""
Grade conversion.

Maps percentage scores (0-100) to letter grades and 4.0-scale grade points,
and derives quality points from grade points and course credits.

Also computes the grade statistics shown for a graded section.
"""
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from statistics import fmean
from typing import Iterable, Optional

from registrar.errors import ValidationError


class LetterGrade(str, Enum):
    A_PLUS = "A+"
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"
    D_PLUS = "D+"
    D = "D"
    F = "F"


# Inclusive lower bound -> (letter, points). Highest threshold <= pct wins.
GRADE_SCALE: tuple[tuple[float, LetterGrade, float], ...] = (
    (97, LetterGrade.A_PLUS, 4.0),
    (93, LetterGrade.A, 4.0),
    (90, LetterGrade.A_MINUS, 3.7),
    (87, LetterGrade.B_PLUS, 3.3),
    (83, LetterGrade.B, 3.0),
    (80, LetterGrade.B_MINUS, 2.7),
    (77, LetterGrade.C_PLUS, 2.3),
    (73, LetterGrade.C, 2.0),
    (70, LetterGrade.C_MINUS, 1.7),
    (67, LetterGrade.D_PLUS, 1.3),
    (65, LetterGrade.D, 1.0),
    (0, LetterGrade.F, 0.0),
)

PASSING_THRESHOLD = 65
MIN_PERCENTAGE = 0
MAX_PERCENTAGE = 100


@dataclass(frozen=True)
class GradeInfo:
    """Everything derived from a single percentage grade."""
    percentage_grade: float
    letter_grade: LetterGrade
    grade_points: float
    quality_points: float
    is_passing: bool


def validate_percentage(pct: float) -> float:
    """
    Reject percentages outside [0, 100].

    Out-of-range values (and NaN) are never clamped.
    """
    if isinstance(pct, bool) or not isinstance(pct, (int, float)):
        raise ValidationError(f"Invalid grade: {pct!r}. Must be a number between 0-100")
    if not (MIN_PERCENTAGE <= pct <= MAX_PERCENTAGE):
        raise ValidationError(
            f"Invalid grade: {pct}. Must be between 0-100",
            details={"percentage_grade": pct},
        )
    return pct


def _scale_entry(pct: float) -> tuple[float, LetterGrade, float]:
    for threshold, letter, points in GRADE_SCALE:
        if pct >= threshold:
            return threshold, letter, points
    # Only reachable for negative input, which callers must reject first
    return GRADE_SCALE[-1]


def letter_grade(pct: float) -> LetterGrade:
    return _scale_entry(pct)[1]


def grade_points(pct: float) -> float:
    return _scale_entry(pct)[2]


def is_passing(pct: float) -> bool:
    return pct >= PASSING_THRESHOLD


def quality_points(points: float, credits: int) -> float:
    """Grade points times credits. Never rounded here."""
    return points * credits


def convert_grade(pct: float, credits: int = 1) -> GradeInfo:
    """Validate a percentage and derive letter, points and quality points."""
    validate_percentage(pct)
    if credits <= 0:
        raise ValidationError(f"Credits must be positive, got {credits}")

    points = grade_points(pct)
    return GradeInfo(
        percentage_grade=pct,
        letter_grade=letter_grade(pct),
        grade_points=points,
        quality_points=quality_points(points, credits),
        is_passing=is_passing(pct),
    )


def round_half_up(value: float, places: int = 2) -> float:
    """Round for display the way report cards do (x.xx5 rounds up)."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


# =============================================================================
# Section statistics
# =============================================================================

@dataclass
class SectionGradeStatistics:
    distribution: dict[str, int]
    total_students: int
    graded_students: int
    pending_grades: int
    average_grade: float
    median_grade: float
    pass_rate: float
    highest_grade: float
    lowest_grade: float


def section_grade_statistics(
    percentages: Iterable[Optional[float]],
) -> SectionGradeStatistics:
    """
    Summarize the grades of one section.

    Ungraded entries (None) count toward total_students and pending_grades.
    The median is the upper median of the sorted grades. With nothing graded,
    highest/lowest fall back to 0/100. Any grade outside 0-100 raises
    ValidationError.
    """
    all_entries = list(percentages)
    graded = sorted(validate_percentage(p) for p in all_entries if p is not None)

    distribution = {letter.value: 0 for _, letter, _ in GRADE_SCALE}
    for pct in graded:
        distribution[letter_grade(pct).value] += 1

    if graded:
        average = fmean(graded)
        median = graded[math.floor(len(graded) / 2)]
        pass_rate = sum(1 for p in graded if is_passing(p)) / len(graded) * 100
    else:
        average = median = pass_rate = 0

    return SectionGradeStatistics(
        distribution=distribution,
        total_students=len(all_entries),
        graded_students=len(graded),
        pending_grades=len(all_entries) - len(graded),
        average_grade=round_half_up(average),
        median_grade=median,
        pass_rate=round_half_up(pass_rate),
        highest_grade=max(graded, default=0),
        lowest_grade=min(graded, default=100),
    )
