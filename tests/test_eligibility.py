"""
Tests for enrollment eligibility.
"""
import pytest

from registrar.models.records import EnrollmentStatus, SectionStatus
from registrar.services.eligibility import (
    EnrollmentPolicy,
    check_enrollment_eligibility,
    has_capacity,
)
from registrar.services.prerequisites import validate_prerequisites


PREREQS_OK = validate_prerequisites([], [])


class TestEnrollmentEligibility:
    """Admit/deny decision for a student and section"""

    def test_eligible(self, make_section):
        result = check_enrollment_eligibility(make_section(), 100, [], PREREQS_OK)

        assert result.can_enroll
        assert result.reasons == []
        assert result.warnings == []

    @pytest.mark.parametrize('status', [
        SectionStatus.DRAFT, SectionStatus.CLOSED, SectionStatus.ACTIVE,
        SectionStatus.GRADING, SectionStatus.COMPLETED,
    ])
    def test_section_not_open(self, make_section, status):
        result = check_enrollment_eligibility(make_section(status=status), 100, [], PREREQS_OK)

        assert not result.can_enroll
        assert "section not open" in result.reasons[0]
        assert status.value in result.reasons[0]

    def test_already_enrolled(self, make_section, make_enrollment):
        existing = [make_enrollment(section_id=1, status=EnrollmentStatus.ENROLLED)]

        result = check_enrollment_eligibility(make_section(id=1), 100, existing, PREREQS_OK)

        assert not result.can_enroll
        assert len(result.reasons) == 1
        assert "already enrolled" in result.reasons[0]

    def test_dropped_still_blocks(self, make_section, make_enrollment):
        existing = [make_enrollment(section_id=1, status=EnrollmentStatus.DROPPED)]

        result = check_enrollment_eligibility(make_section(id=1), 100, existing, PREREQS_OK)

        assert not result.can_enroll

    def test_withdrawn_allows_reenrollment(self, make_section, make_enrollment):
        existing = [make_enrollment(section_id=1, status=EnrollmentStatus.WITHDRAWN)]

        result = check_enrollment_eligibility(make_section(id=1), 100, existing, PREREQS_OK)

        assert result.can_enroll

    def test_other_students_ignored(self, make_section, make_enrollment):
        existing = [make_enrollment(student_id=200, section_id=1, status=EnrollmentStatus.ENROLLED)]

        result = check_enrollment_eligibility(make_section(id=1), 100, existing, PREREQS_OK)

        assert result.can_enroll

    def test_missing_prerequisites_listed(self, make_section):
        prereqs = validate_prerequisites(["CS101", "MATH101"], set())

        result = check_enrollment_eligibility(make_section(), 100, [], prereqs)

        assert not result.can_enroll
        assert result.reasons == ["missing prerequisites: CS101, MATH101"]

    def test_all_reasons_collected_in_order(self, make_section, make_enrollment):
        existing = [make_enrollment(section_id=1, status=EnrollmentStatus.IN_PROGRESS)]
        prereqs = validate_prerequisites(["CS101"], set())

        result = check_enrollment_eligibility(
            make_section(id=1, status=SectionStatus.CLOSED), 100, existing, prereqs
        )

        assert not result.can_enroll
        assert len(result.reasons) == 3
        assert result.reasons[0].startswith("section not open")
        assert result.reasons[1].startswith("already enrolled")
        assert result.reasons[2].startswith("missing prerequisites")


class TestHeavyCourseLoad:
    """Course load warning never blocks"""

    def _load(self, make_enrollment, count, status=EnrollmentStatus.ENROLLED, period_id=1):
        return [
            make_enrollment(id=i, section_id=100 + i, period_id=period_id, status=status)
            for i in range(count)
        ]

    def test_warning_at_threshold(self, make_section, make_enrollment):
        result = check_enrollment_eligibility(
            make_section(), 100, self._load(make_enrollment, 6), PREREQS_OK
        )

        assert result.can_enroll
        assert len(result.warnings) == 1
        assert "heavy course load" in result.warnings[0]
        assert "6 courses" in result.warnings[0]

    def test_no_warning_below_threshold(self, make_section, make_enrollment):
        result = check_enrollment_eligibility(
            make_section(), 100, self._load(make_enrollment, 5), PREREQS_OK
        )

        assert result.warnings == []

    def test_only_active_enrollments_in_same_period(self, make_section, make_enrollment):
        existing = (
            self._load(make_enrollment, 5, status=EnrollmentStatus.COMPLETED)
            + self._load(make_enrollment, 5, period_id=2)
            + self._load(make_enrollment, 5, status=EnrollmentStatus.IN_PROGRESS)
        )

        result = check_enrollment_eligibility(make_section(period_id=1), 100, existing, PREREQS_OK)

        assert result.warnings == []

    def test_custom_threshold(self, make_section, make_enrollment):
        policy = EnrollmentPolicy(heavy_course_load_threshold=2)

        result = check_enrollment_eligibility(
            make_section(), 100, self._load(make_enrollment, 2), PREREQS_OK, policy
        )

        assert result.warnings


class TestCapacity:
    """Capacity is only checked when the policy enforces it"""

    def test_unlimited_by_default(self, make_section):
        section = make_section(enrolled=30, capacity=30)

        result = check_enrollment_eligibility(section, 100, [], PREREQS_OK)

        assert result.can_enroll

    def test_enforced(self, make_section):
        section = make_section(enrolled=30, capacity=30)
        policy = EnrollmentPolicy(enforce_capacity=True)

        result = check_enrollment_eligibility(section, 100, [], PREREQS_OK, policy)

        assert not result.can_enroll
        assert result.reasons == ["section at capacity (30/30)"]

    def test_enforced_with_room(self, make_section):
        policy = EnrollmentPolicy(enforce_capacity=True)

        assert has_capacity(make_section(enrolled=29, capacity=30), policy)

    def test_enforced_without_capacity_is_unlimited(self, make_section):
        policy = EnrollmentPolicy(enforce_capacity=True)

        assert has_capacity(make_section(enrolled=500, capacity=None), policy)

    def test_capacity_reported_after_other_reasons(self, make_section, make_enrollment):
        section = make_section(id=1, status=SectionStatus.CLOSED, enrolled=1, capacity=1)
        existing = [make_enrollment(section_id=1, status=EnrollmentStatus.ENROLLED)]
        prereqs = validate_prerequisites(["CS101"], set())
        policy = EnrollmentPolicy(enforce_capacity=True)

        result = check_enrollment_eligibility(section, 100, existing, prereqs, policy)

        assert result.reasons == [
            "section not open (status: closed)",
            "already enrolled in this section",
            "missing prerequisites: CS101",
            "section at capacity (1/1)",
        ]
