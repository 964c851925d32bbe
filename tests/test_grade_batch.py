"""
Tests for batch grade planning.
"""
import pytest

from registrar.errors import GradeBatchError, ValidationError
from registrar.models.records import EnrollmentStatus
from registrar.services.grade_batch import (
    GRADABLE_STATUSES,
    GradeSubmission,
    plan_grade_batch,
    preview_grade_batch,
)
from registrar.services.grading import LetterGrade


@pytest.fixture
def section_enrollments(make_enrollment):
    return [
        make_enrollment(id=1, student_id=100, status=EnrollmentStatus.ENROLLED),
        make_enrollment(id=2, student_id=101, status=EnrollmentStatus.IN_PROGRESS),
        make_enrollment(id=3, student_id=102, status=EnrollmentStatus.INCOMPLETE),
        make_enrollment(id=4, student_id=103, status=EnrollmentStatus.WITHDRAWN),
        make_enrollment(id=5, student_id=104, status=EnrollmentStatus.COMPLETED, percentage_grade=88),
    ]


class TestPlanGradeBatch:

    def test_gradable_statuses(self):
        assert GRADABLE_STATUSES == {
            EnrollmentStatus.ENROLLED,
            EnrollmentStatus.IN_PROGRESS,
            EnrollmentStatus.INCOMPLETE,
        }

    def test_plan(self, section_enrollments):
        updates = plan_grade_batch(
            section_enrollments,
            [
                GradeSubmission(100, 91, "Strong final"),
                GradeSubmission(101, 64.99),
                GradeSubmission(102, 65),
            ],
            credits=3,
        )

        assert [u.enrollment_id for u in updates] == [1, 2, 3]

        assert updates[0].letter_grade == LetterGrade.A_MINUS
        assert updates[0].grade_points == 3.7
        assert updates[0].quality_points == 3.7 * 3
        assert updates[0].status == EnrollmentStatus.COMPLETED
        assert updates[0].grade_notes == "Strong final"

        assert updates[1].letter_grade == LetterGrade.F
        assert updates[1].status == EnrollmentStatus.FAILED

        assert updates[2].letter_grade == LetterGrade.D
        assert updates[2].status == EnrollmentStatus.COMPLETED

    def test_one_bad_entry_rejects_whole_batch(self, section_enrollments):
        with pytest.raises(GradeBatchError) as exc_info:
            plan_grade_batch(
                section_enrollments,
                [GradeSubmission(100, 91), GradeSubmission(101, 105)],
                credits=3,
            )

        assert exc_info.value.errors == ["Invalid grade 105 for student 101. Must be 0-100"]

    def test_all_errors_collected(self, section_enrollments):
        with pytest.raises(GradeBatchError) as exc_info:
            plan_grade_batch(
                section_enrollments,
                [
                    GradeSubmission(100, -1),
                    GradeSubmission(103, 80),
                    GradeSubmission(104, 80),
                    GradeSubmission(999, 80),
                    GradeSubmission(101, 70),
                    GradeSubmission(101, 75),
                ],
                credits=3,
            )

        errors = exc_info.value.errors
        assert len(errors) == 5
        assert errors[0] == "Invalid grade -1 for student 100. Must be 0-100"
        assert errors[1] == "Student 103 is not enrolled in this section"
        assert errors[2] == "Student 104 is not enrolled in this section"
        assert errors[3] == "Student 999 is not enrolled in this section"
        assert errors[4] == "Student 101 appears more than once in the batch"
        assert "5 error(s)" in str(exc_info.value)

    def test_batch_error_is_validation_error(self, section_enrollments):
        with pytest.raises(ValidationError):
            plan_grade_batch(section_enrollments, [GradeSubmission(999, 80)], credits=3)

    def test_non_positive_credits(self, section_enrollments):
        with pytest.raises(ValidationError, match="Credits must be positive"):
            plan_grade_batch(section_enrollments, [GradeSubmission(100, 80)], credits=0)


class TestPreviewGradeBatch:

    def test_preview_reports_valid_and_invalid(self, section_enrollments):
        preview = preview_grade_batch(
            section_enrollments,
            [GradeSubmission(100, 91), GradeSubmission(101, 150)],
            credits=4,
        )

        assert preview.total_submitted == 2
        assert preview.valid_grades == 1
        assert not preview.can_proceed
        assert preview.results[0].quality_points == 3.7 * 4
        assert preview.errors == ["Invalid grade 150 for student 101. Must be 0-100"]

    def test_preview_clean_batch(self, section_enrollments):
        preview = preview_grade_batch(section_enrollments, [GradeSubmission(102, 77)], credits=2)

        assert preview.can_proceed
        assert preview.results[0].letter_grade == LetterGrade.C_PLUS
