"""
Tests for prerequisite validation.
"""
import pytest

from registrar.errors import ValidationError
from registrar.models.records import EnrollmentStatus
from registrar.services.prerequisites import (
    is_completed_and_passing,
    passed_course_codes,
    validate_prerequisites,
)


class TestValidatePrerequisites:

    def test_empty_prerequisites_always_valid(self):
        result = validate_prerequisites([], [])

        assert result.is_valid
        assert result.missing_prerequisites == []
        assert result.completed_prerequisites == []

    def test_empty_prerequisites_with_history(self):
        result = validate_prerequisites([], {"CS101", "MATH101"})

        assert result.is_valid
        assert result.completed_prerequisites == []

    def test_passed_prerequisite(self, make_course, make_enrollment):
        courses = {1: make_course(id=1, code="CS101")}
        enrollments = [make_enrollment(course_id=1, percentage_grade=70)]

        result = validate_prerequisites(["CS101"], passed_course_codes(enrollments, courses))

        assert result.is_valid
        assert result.completed_prerequisites == ["CS101"]

    def test_missing_keeps_prerequisite_order(self):
        result = validate_prerequisites(["MATH101", "CS101", "CS102"], {"CS101"})

        assert not result.is_valid
        assert result.missing_prerequisites == ["MATH101", "CS102"]
        assert result.completed_prerequisites == ["CS101"]


class TestPassedCourseCodes:
    """Which enrollments satisfy a prerequisite"""

    def test_only_completed_and_passing(self, make_course, make_enrollment):
        courses = {
            1: make_course(id=1, code="CS101"),
            2: make_course(id=2, code="CS102"),
            3: make_course(id=3, code="CS103"),
            4: make_course(id=4, code="CS104"),
        }
        enrollments = [
            make_enrollment(id=1, course_id=1, percentage_grade=65),
            make_enrollment(id=2, course_id=2, percentage_grade=64.99),
            make_enrollment(id=3, course_id=3, status=EnrollmentStatus.FAILED, percentage_grade=40),
            make_enrollment(id=4, course_id=4, status=EnrollmentStatus.ENROLLED),
        ]

        assert passed_course_codes(enrollments, courses) == {"CS101"}

    def test_matches_by_code_across_offerings(self, make_course, make_enrollment):
        # Same code, re-offered under a new internal id
        courses = {
            7: make_course(id=7, code="CS101"),
            8: make_course(id=8, code="CS101"),
        }
        enrollments = [make_enrollment(course_id=8, percentage_grade=88)]

        result = validate_prerequisites(["CS101"], passed_course_codes(enrollments, courses))

        assert result.is_valid

    def test_unknown_course_ignored(self, make_enrollment):
        enrollments = [make_enrollment(course_id=99, percentage_grade=90)]

        assert passed_course_codes(enrollments, {}) == set()

    def test_completed_without_grade_not_passing(self, make_enrollment):
        assert not is_completed_and_passing(make_enrollment(percentage_grade=None))

    @pytest.mark.parametrize('pct', [150.0, -5.0])
    def test_stored_grade_out_of_range_rejected(self, make_course, make_enrollment, pct):
        enrollments = [make_enrollment(course_id=1, percentage_grade=pct)]

        with pytest.raises(ValidationError):
            passed_course_codes(enrollments, {1: make_course(id=1, code="CS101")})
