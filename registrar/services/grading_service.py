"""
Grading Service.

Write-side handlers that change enrollment grades and status:
- Section grade submission (validate the whole batch, then commit once)
- Batch preview without writing
- Withdrawal / drop
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from registrar.errors import NotFoundError, PermissionDeniedError, ValidationError
from registrar.models.database import Course, Enrollment, Period, Section, get_session_factory
from registrar.models.records import EnrollmentRecord, EnrollmentStatus, SectionRecord
from registrar.services.access import Actor, can_grade_section
from registrar.services.grade_batch import (
    GradeBatchPreview, GradeSubmission, GradeUpdate, plan_grade_batch, preview_grade_batch,
)
from registrar.services.lifecycle import ensure_transition, is_grading_open, withdrawal_status

logger = logging.getLogger(__name__)


@dataclass
class GradeBatchResult:
    section_id: int
    section_marked_as_submitted: bool
    results: list[GradeUpdate] = field(default_factory=list)

    @property
    def grades_processed(self) -> int:
        return len(self.results)


class GradingService:
    """Service for submitting grades and changing enrollment status."""

    def __init__(self, session_factory=None):
        if session_factory is None:
            session_factory = get_session_factory()
        self.session_factory = session_factory

    def submit_section_grades(
        self,
        actor: Actor,
        section_id: int,
        grades: Iterable[GradeSubmission],
        now: Optional[datetime] = None,
        mark_as_submitted: bool = False,
    ) -> GradeBatchResult:
        """
        Grade every listed student of a section in one transaction.

        The whole batch is validated before anything is written; if any entry
        is invalid a GradeBatchError lists every problem and no enrollment
        changes.
        """
        now = now or datetime.utcnow()
        grades = list(grades)

        with self.session_factory() as session:
            section_row = self._get(session, Section, section_id)
            section = section_row.to_record()
            self._check_can_grade(actor, section)

            period = self._get(session, Period, section.period_id).to_record()
            if not is_grading_open(period, now):
                raise ValidationError(f"Grading period {period.code} is closed")

            course = self._get(session, Course, section.course_id)
            enrollments = self._section_enrollments(session, section_id)

            updates = plan_grade_batch(enrollments, grades, course.credits)

            for update in updates:
                row = session.get(Enrollment, update.enrollment_id)
                ensure_transition(EnrollmentStatus(row.status), update.status)
                row.percentage_grade = update.percentage_grade
                row.letter_grade = update.letter_grade.value
                row.grade_points = update.grade_points
                row.quality_points = update.quality_points
                row.status = update.status.value
                row.grade_notes = update.grade_notes
                row.graded_by = actor.user_id
                row.graded_at = now
                row.updated_at = now

            if mark_as_submitted:
                section_row.grades_submitted = True
                section_row.grades_submitted_at = now
                section_row.updated_at = now

            session.commit()

        logger.info(
            f"Recorded {len(updates)} grade(s) for section {section.crn} by user {actor.user_id}"
        )
        return GradeBatchResult(
            section_id=section_id,
            section_marked_as_submitted=mark_as_submitted,
            results=updates,
        )

    def preview_section_grades(
        self,
        actor: Actor,
        section_id: int,
        grades: Iterable[GradeSubmission],
    ) -> GradeBatchPreview:
        """Validate a batch and report what would be written, without writing."""
        with self.session_factory() as session:
            section = self._get(session, Section, section_id).to_record()
            self._check_can_grade(actor, section)
            course = self._get(session, Course, section.course_id)
            enrollments = self._section_enrollments(session, section_id)
            return preview_grade_batch(enrollments, grades, course.credits)

    def withdraw(
        self,
        student_id: int,
        enrollment_id: int,
        now: Optional[datetime] = None,
        reason: Optional[str] = None,
    ) -> EnrollmentStatus:
        """
        Withdraw a student from a section.

        Before the period's withdrawal deadline the enrollment becomes
        withdrawn, afterwards dropped.
        """
        now = now or datetime.utcnow()

        with self.session_factory() as session:
            row = self._get(session, Enrollment, enrollment_id)
            if row.student_id != student_id:
                raise PermissionDeniedError("You can only withdraw from your own enrollments")

            period = self._get(session, Period, row.period_id).to_record()
            new_status = ensure_transition(
                EnrollmentStatus(row.status), withdrawal_status(period, now)
            )

            row.status = new_status.value
            row.status_changed_at = now
            row.status_changed_by = student_id
            row.status_change_reason = reason
            row.updated_at = now

            section = session.get(Section, row.section_id)
            if section is not None:
                section.enrolled = max(0, (section.enrolled or 0) - 1)
                section.updated_at = now

            session.commit()

        logger.info(f"Enrollment {enrollment_id} of student {student_id} is now {new_status.value}")
        return new_status

    def _check_can_grade(self, actor: Actor, section: SectionRecord) -> None:
        if not can_grade_section(actor, section):
            raise PermissionDeniedError(
                f"User {actor.user_id} may not grade section {section.crn}"
            )

    def _get(self, session: Session, model, record_id: int):
        row = session.get(model, record_id)
        if row is None:
            raise NotFoundError(f"{model.__name__} {record_id} not found")
        return row

    def _section_enrollments(self, session: Session, section_id: int) -> list[EnrollmentRecord]:
        rows = session.execute(
            select(Enrollment).where(Enrollment.section_id == section_id)
        ).scalars().all()
        return [row.to_record() for row in rows]


def create_grading_service() -> GradingService:
    """Create a GradingService instance with default configuration."""
    return GradingService()
