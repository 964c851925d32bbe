"""
Academic record API endpoints.

Handles:
- Grade conversion
- GPA and academic history
- Enrollment eligibility
- Progress and graduation validation
- Section grade statistics and grade submission
"""
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from registrar.api.schemas import (
    # Grades
    GradeInfoResponse,
    GradeSummaryResponse,
    EnrollmentSummaryResponse,
    PeriodSummaryResponse,
    AcademicHistoryResponse,
    SectionStatisticsResponse,
    # Enrollment
    EnrollmentValidationResponse,
    # Progress
    CategoryCreditsResponse,
    AcademicProgressResponse,
    CategoryRequirementResponse,
    CreditRequirementResponse,
    GPARequirementResponse,
    GraduationValidationResponse,
    # Grading
    SectionGradesRequest,
    GradeUpdateResponse,
    SectionGradesResponse,
    GradePreviewResponse,
)
from registrar.errors import GradeBatchError, NotFoundError, PermissionDeniedError
from registrar.services.access import Actor
from registrar.services.grade_batch import GradeSubmission, GradeUpdate
from registrar.services.grading_service import GradingService, create_grading_service
from registrar.services.record_service import AcademicRecordService, create_record_service

router = APIRouter(tags=["Academic Records"])

# Service instances
_record_service: Optional[AcademicRecordService] = None
_grading_service: Optional[GradingService] = None


def get_record_service() -> AcademicRecordService:
    """Dependency to get AcademicRecordService instance."""
    global _record_service
    if _record_service is None:
        _record_service = create_record_service()
    return _record_service


def get_grading_service() -> GradingService:
    """Dependency to get GradingService instance."""
    global _grading_service
    if _grading_service is None:
        _grading_service = create_grading_service()
    return _grading_service


def _update_response(update: GradeUpdate) -> GradeUpdateResponse:
    return GradeUpdateResponse(
        enrollment_id=update.enrollment_id,
        student_id=update.student_id,
        percentage_grade=update.percentage_grade,
        letter_grade=update.letter_grade.value,
        grade_points=update.grade_points,
        quality_points=update.quality_points,
        status=update.status.value,
    )


# =============================================================================
# Grades and GPA
# =============================================================================

@router.get("/grades/convert", response_model=GradeInfoResponse)
async def convert_grade(
    percentage: float = Query(..., description="Percentage grade, 0-100"),
    credits: int = Query(1, ge=1, description="Course credits for quality points"),
    service: AcademicRecordService = Depends(get_record_service),
):
    """Convert a percentage grade to letter grade, grade points and quality points."""
    try:
        info = service.convert_grade(percentage, credits)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return GradeInfoResponse(
        percentage_grade=info.percentage_grade,
        letter_grade=info.letter_grade.value,
        grade_points=info.grade_points,
        quality_points=info.quality_points,
        is_passing=info.is_passing,
    )


@router.get("/students/{student_id}/gpa", response_model=GradeSummaryResponse)
async def get_student_gpa(
    student_id: int,
    period_id: Optional[int] = Query(None, description="Limit to one period"),
    service: AcademicRecordService = Depends(get_record_service),
):
    """Get cumulative GPA, or a single period's GPA."""
    try:
        summary = service.student_gpa(student_id, period_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return GradeSummaryResponse.model_validate(summary)


@router.get("/students/{student_id}/history", response_model=AcademicHistoryResponse)
async def get_academic_history(
    student_id: int,
    service: AcademicRecordService = Depends(get_record_service),
):
    """Get enrollments grouped by period, newest first, each with its GPA."""
    try:
        summaries = service.academic_history(student_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return AcademicHistoryResponse(
        student_id=student_id,
        periods=[
            PeriodSummaryResponse(
                period_id=s.period.id,
                period_code=s.period.code,
                start_date=s.period.start_date,
                enrollments=[
                    EnrollmentSummaryResponse(
                        id=e.id,
                        course_id=e.course_id,
                        section_id=e.section_id,
                        status=e.status.value,
                        percentage_grade=e.percentage_grade,
                        letter_grade=e.letter_grade,
                        counts_for_gpa=e.counts_for_gpa,
                        is_auditing=e.is_auditing,
                    )
                    for e in s.enrollments
                ],
                summary=GradeSummaryResponse.model_validate(s.summary),
            )
            for s in summaries
        ],
    )


@router.get("/sections/{section_id}/statistics", response_model=SectionStatisticsResponse)
async def get_section_statistics(
    section_id: int,
    service: AcademicRecordService = Depends(get_record_service),
):
    """Get grade distribution and statistics for a section."""
    try:
        stats = service.section_statistics(section_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return SectionStatisticsResponse(
        section_id=section_id,
        distribution=stats.distribution,
        total_students=stats.total_students,
        graded_students=stats.graded_students,
        pending_grades=stats.pending_grades,
        average_grade=stats.average_grade,
        median_grade=stats.median_grade,
        pass_rate=stats.pass_rate,
        highest_grade=stats.highest_grade,
        lowest_grade=stats.lowest_grade,
    )


# =============================================================================
# Enrollment
# =============================================================================

@router.get("/students/{student_id}/eligibility", response_model=EnrollmentValidationResponse)
async def check_eligibility(
    student_id: int,
    section_id: int = Query(..., description="Section to enroll in"),
    service: AcademicRecordService = Depends(get_record_service),
):
    """Check whether a student can enroll in a section."""
    try:
        result = service.check_eligibility(student_id, section_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return EnrollmentValidationResponse.model_validate(result)


# =============================================================================
# Progress and Graduation
# =============================================================================

@router.get("/students/{student_id}/progress", response_model=AcademicProgressResponse)
async def get_progress(
    student_id: int,
    program_id: int = Query(..., description="Program to measure progress against"),
    service: AcademicRecordService = Depends(get_record_service),
):
    """Get credits by category, GPA, standing and completion for a program."""
    try:
        progress = service.student_progress(student_id, program_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AcademicProgressResponse(
        program_id=progress.program_id,
        total_credits_required=progress.total_credits_required,
        credits_completed=progress.credits_completed,
        credits_by_category={
            category.value: CategoryCreditsResponse(
                required=credits.required,
                completed=credits.completed,
            )
            for category, credits in progress.credits_by_category.items()
        },
        gpa=progress.gpa,
        cgpa=progress.cgpa,
        academic_standing=progress.academic_standing.value,
        completion_percentage=progress.completion_percentage,
    )


@router.get("/students/{student_id}/graduation", response_model=GraduationValidationResponse)
async def get_graduation_status(
    student_id: int,
    program_id: int = Query(..., description="Program to validate against"),
    service: AcademicRecordService = Depends(get_record_service),
):
    """Check graduation eligibility and what remains."""
    try:
        result = service.graduation_status(student_id, program_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return GraduationValidationResponse(
        is_eligible=result.is_eligible,
        total_credits=CreditRequirementResponse(
            required=result.total_credits.required,
            completed=result.total_credits.completed,
        ),
        remaining_credits=result.remaining_credits,
        category_requirements=[
            CategoryRequirementResponse(
                category=c.category.value,
                required=c.required,
                completed=c.completed,
                remaining=c.remaining,
            )
            for c in result.category_requirements
        ],
        gpa_requirement=GPARequirementResponse(
            minimum=result.gpa_requirement.minimum,
            current=result.gpa_requirement.current,
        ),
        missing_courses=result.missing_courses,
    )


# =============================================================================
# Grade Submission
# =============================================================================

@router.post("/sections/{section_id}/grades/preview", response_model=GradePreviewResponse)
async def preview_section_grades(
    section_id: int,
    request: SectionGradesRequest,
    service: GradingService = Depends(get_grading_service),
):
    """Validate a grade batch without saving it."""
    actor = Actor(user_id=request.actor_id, role=request.actor_role)
    submissions = [
        GradeSubmission(g.student_id, g.percentage_grade, g.grade_notes)
        for g in request.grades
    ]
    try:
        preview = service.preview_section_grades(actor, section_id, submissions)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))

    return GradePreviewResponse(
        section_id=section_id,
        total_submitted=preview.total_submitted,
        valid_grades=preview.valid_grades,
        can_proceed=preview.can_proceed,
        errors=preview.errors,
        results=[_update_response(u) for u in preview.results],
    )


@router.post("/sections/{section_id}/grades", response_model=SectionGradesResponse)
async def submit_section_grades(
    section_id: int,
    request: SectionGradesRequest,
    service: GradingService = Depends(get_grading_service),
):
    """Submit grades for a section. Nothing is saved unless every entry is valid."""
    actor = Actor(user_id=request.actor_id, role=request.actor_role)
    submissions = [
        GradeSubmission(g.student_id, g.percentage_grade, g.grade_notes)
        for g in request.grades
    ]
    try:
        result = service.submit_section_grades(
            actor, section_id, submissions, mark_as_submitted=request.mark_as_submitted
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PermissionDeniedError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except GradeBatchError as e:
        raise HTTPException(status_code=400, detail={"message": e.message, "errors": e.errors})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return SectionGradesResponse(
        section_id=result.section_id,
        grades_processed=result.grades_processed,
        section_marked_as_submitted=result.section_marked_as_submitted,
        results=[_update_response(u) for u in result.results],
    )
