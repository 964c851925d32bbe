"""
Academic Record Service.

Loads read-only snapshots from the database and runs the academic record
engine over them:
- Grade conversion
- Cumulative and per-period GPA, academic history
- Prerequisite and enrollment eligibility checks
- Category progress and graduation validation
- Section grade statistics

Nothing here writes to the database.
"""
import logging
from typing import Iterable, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from registrar.config import settings
from registrar.errors import NotFoundError
from registrar.models.database import (
    Course, Enrollment, Period, Program, ProgramCourse, ProgramRequirement,
    Section, get_session_factory,
)
from registrar.models.records import CourseRecord, EnrollmentRecord
from registrar.services.eligibility import (
    EnrollmentPolicy, EnrollmentValidation, check_enrollment_eligibility,
)
from registrar.services.gpa import GradeSummary, PeriodSummary, student_gpa, summarize_by_period
from registrar.services.grading import (
    GradeInfo, SectionGradeStatistics, convert_grade, section_grade_statistics,
)
from registrar.services.graduation import GraduationValidation, validate_graduation
from registrar.services.prerequisites import (
    PrerequisiteValidation, passed_course_codes, validate_prerequisites,
)
from registrar.services.progress import (
    AcademicProgress, compute_progress, select_active_requirement,
)

logger = logging.getLogger(__name__)


class AcademicRecordService:
    """Service for computing derived academic figures from stored records."""

    def __init__(self, session_factory=None, policy: Optional[EnrollmentPolicy] = None):
        if session_factory is None:
            session_factory = get_session_factory()
        self.session_factory = session_factory
        self.policy = policy or EnrollmentPolicy(
            enforce_capacity=settings.enforce_section_capacity,
            heavy_course_load_threshold=settings.heavy_course_load_threshold,
        )

    # =========================================================================
    # Grades and GPA
    # =========================================================================

    def convert_grade(self, percentage: float, credits: int = 1) -> GradeInfo:
        return convert_grade(percentage, credits)

    def student_gpa(self, student_id: int, period_id: Optional[int] = None) -> GradeSummary:
        """Cumulative GPA, or one period's GPA when period_id is given."""
        with self.session_factory() as session:
            if period_id is not None:
                self._get(session, Period, period_id)
            enrollments = self._student_enrollments(session, student_id)
            courses = self._courses_for(session, enrollments)
            return student_gpa(enrollments, courses, period_id)

    def academic_history(self, student_id: int) -> list[PeriodSummary]:
        """Enrollments grouped by period with a GPA summary each, newest first."""
        with self.session_factory() as session:
            enrollments = self._student_enrollments(session, student_id)
            courses = self._courses_for(session, enrollments)
            period_ids = {e.period_id for e in enrollments}
            periods = {
                p.id: p.to_record()
                for p in session.execute(
                    select(Period).where(Period.id.in_(period_ids))
                ).scalars().all()
            } if period_ids else {}
            return summarize_by_period(enrollments, courses, periods)

    def section_statistics(self, section_id: int) -> SectionGradeStatistics:
        with self.session_factory() as session:
            self._get(session, Section, section_id)
            grades = session.execute(
                select(Enrollment.percentage_grade)
                .where(Enrollment.section_id == section_id)
            ).scalars().all()
            return section_grade_statistics(grades)

    # =========================================================================
    # Enrollment
    # =========================================================================

    def validate_prerequisites(self, student_id: int, course_id: int) -> PrerequisiteValidation:
        with self.session_factory() as session:
            course = self._get(session, Course, course_id).to_record()
            return self._validate_prerequisites(session, student_id, course)

    def check_eligibility(self, student_id: int, section_id: int) -> EnrollmentValidation:
        """Run every enrollment check for a student and section."""
        with self.session_factory() as session:
            section = self._get(session, Section, section_id).to_record()
            course = self._get(session, Course, section.course_id).to_record()

            prerequisites = self._validate_prerequisites(session, student_id, course)
            existing = self._student_enrollments(session, student_id)

            result = check_enrollment_eligibility(
                section, student_id, existing, prerequisites, self.policy
            )
            logger.info(
                f"Eligibility for student {student_id} in section {section.crn}: "
                f"can_enroll={result.can_enroll} reasons={len(result.reasons)}"
            )
            return result

    # =========================================================================
    # Progress and Graduation
    # =========================================================================

    def student_progress(self, student_id: int, program_id: int) -> AcademicProgress:
        with self.session_factory() as session:
            return self._compute_progress(session, student_id, program_id)[0]

    def graduation_status(self, student_id: int, program_id: int) -> GraduationValidation:
        """Check graduation eligibility against the program's active requirements."""
        with self.session_factory() as session:
            progress, requirement, enrollments = self._compute_progress(
                session, student_id, program_id
            )

            required_rows = session.execute(
                select(ProgramCourse)
                .where(
                    ProgramCourse.program_id == program_id,
                    ProgramCourse.is_required.is_(True),
                    ProgramCourse.is_active.is_(True),
                )
            ).scalars().all()
            required_courses = self._load_courses(
                session, [pc.course_id for pc in required_rows]
            )

            result = validate_graduation(
                progress, requirement, required_courses.values(), enrollments
            )
            logger.info(
                f"Graduation check for student {student_id} in program {program_id}: "
                f"eligible={result.is_eligible} missing={result.missing_courses}"
            )
            return result

    def _compute_progress(self, session: Session, student_id: int, program_id: int):
        program = self._get(session, Program, program_id).to_record()

        requirement_rows = session.execute(
            select(ProgramRequirement)
            .where(
                ProgramRequirement.program_id == program_id,
                ProgramRequirement.is_active.is_(True),
            )
        ).scalars().all()
        requirement = select_active_requirement(
            (r.to_record() for r in requirement_rows), program_id
        )

        enrollments = self._student_enrollments(session, student_id)
        courses = self._courses_for(session, enrollments)
        program_courses = [
            pc.to_record()
            for pc in session.execute(
                select(ProgramCourse).where(ProgramCourse.program_id == program_id)
            ).scalars().all()
        ]

        progress = compute_progress(
            program,
            requirement,
            enrollments,
            courses,
            program_courses,
            default_probation_gpa=settings.default_probation_gpa,
            default_suspension_gpa=settings.default_suspension_gpa,
        )
        return progress, requirement, enrollments

    # =========================================================================
    # Loading
    # =========================================================================

    def _get(self, session: Session, model, record_id: int):
        row = session.get(model, record_id)
        if row is None:
            raise NotFoundError(f"{model.__name__} {record_id} not found")
        return row

    def _student_enrollments(self, session: Session, student_id: int) -> list[EnrollmentRecord]:
        rows = session.execute(
            select(Enrollment)
            .where(Enrollment.student_id == student_id)
            .order_by(Enrollment.id)
        ).scalars().all()
        return [row.to_record() for row in rows]

    def _load_courses(self, session: Session, course_ids: Iterable[int]) -> dict[int, CourseRecord]:
        course_ids = set(course_ids)
        if not course_ids:
            return {}
        rows = session.execute(
            select(Course).where(Course.id.in_(course_ids))
        ).scalars().all()
        return {row.id: row.to_record() for row in rows}

    def _courses_for(
        self, session: Session, enrollments: list[EnrollmentRecord]
    ) -> dict[int, CourseRecord]:
        return self._load_courses(session, (e.course_id for e in enrollments))

    def _validate_prerequisites(
        self, session: Session, student_id: int, course: CourseRecord
    ) -> PrerequisiteValidation:
        if not course.prerequisites:
            return validate_prerequisites([], [])
        enrollments = self._student_enrollments(session, student_id)
        courses = self._courses_for(session, enrollments)
        return validate_prerequisites(
            course.prerequisites, passed_course_codes(enrollments, courses)
        )


def create_record_service() -> AcademicRecordService:
    """Create an AcademicRecordService instance with default configuration."""
    return AcademicRecordService()
