# club_selection/api/routers/students.py - Student self-service: lookup, projects, enroll, submit
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from club_selection.core.db import get_db
from club_selection.core.security import token_manager
from club_selection.services.enrollment_service import EnrollmentService
from club_selection.services.submission_service import SubmissionService
from club_selection.services.student_service import StudentService, StudentProjectView
from club_selection.schemas.student import (
    ValidateIdentifierIn,
    ValidateIdentifierOut,
    StudentOut,
    AssignedProjectOut,
    StudentProjectListOut,
    StudentBriefOut,
    StudentProjectOut,
    ProjectDetailOut,
    TimeSectionOut,
    TagOut,
    CourseOut,
    OccurrenceOut,
    EnrollIn,
    EnrollOut,
    UnenrollOut,
    SubmitOut,
)

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/validate-token", response_model=ValidateIdentifierOut)
def validate_identifier(
    data: ValidateIdentifierIn,
    db: Session = Depends(get_db)
):
    """Exchange a plain identifier for the student's token and a session JWT"""
    student, projects = StudentService(db).lookup_identifier(data.token)

    access_token = token_manager.create_access_token(
        subject=student.id,
        role="student",
        additional_claims={"token": student.token},
    )

    return ValidateIdentifierOut(
        token=access_token,
        student=StudentOut.model_validate(student),
        projects=[AssignedProjectOut.model_validate(p) for p in projects],
    )


@router.get("/{token}/projects", response_model=StudentProjectListOut)
def list_student_projects(
    token: str,
    db: Session = Depends(get_db)
):
    student, summaries = StudentService(db).list_projects(token)
    return StudentProjectListOut(
        student=StudentBriefOut.model_validate(student),
        projects=[
            StudentProjectOut(
                id=s.project.id,
                name=s.project.name,
                description=s.project.description,
                timezone=s.project.timezone,
                submission_start=s.project.submission_start,
                submission_end=s.project.submission_end,
                has_enrollment=s.has_enrollment,
                has_submitted=s.has_submitted,
            )
            for s in summaries
        ],
    )


def _project_detail(view: StudentProjectView) -> ProjectDetailOut:
    project = view.project
    courses = sorted(project.courses, key=lambda c: c.name)

    return ProjectDetailOut(
        id=project.id,
        name=project.name,
        description=project.description,
        timezone=project.timezone,
        submission_start=project.submission_start,
        submission_end=project.submission_end,
        time_sections=[TimeSectionOut.model_validate(s) for s in project.time_sections],
        tags=[TagOut.model_validate(t) for t in project.tags],
        courses=[
            CourseOut(
                id=course.id,
                name=course.name,
                description=course.description,
                capacity=course.capacity,
                enrolled_count=view.seats_taken.get(course.id, 0),
                is_enrolled=course.id in view.enrolled_course_ids,
                occurrences=[OccurrenceOut.model_validate(o) for o in course.occurrences],
                tags=[TagOut.model_validate(t) for t in course.tags],
            )
            for course in courses
        ],
        status=view.status.status,
        status_message=view.status.message,
        has_submitted=view.has_submitted,
        submitted_at=view.submitted_at,
    )


@router.get("/{token}/projects/{project_id}", response_model=ProjectDetailOut)
def get_student_project(
    token: str,
    project_id: UUID,
    db: Session = Depends(get_db)
):
    """Project page: courses with seat counts, tags, sections and status"""
    view = StudentService(db).get_project_view(token, project_id)
    return _project_detail(view)


@router.post("/{token}/enroll", response_model=EnrollOut, status_code=status.HTTP_201_CREATED)
def enroll(
    token: str,
    data: EnrollIn,
    db: Session = Depends(get_db)
):
    enrollment = EnrollmentService(db).enroll(token, data.course_id)
    return EnrollOut(
        enrollment_id=enrollment.id,
        course_id=enrollment.course_id,
        status=enrollment.status,
        created_at=enrollment.created_at,
    )


@router.delete("/{token}/enroll/{course_id}", response_model=UnenrollOut)
def unenroll(
    token: str,
    course_id: UUID,
    db: Session = Depends(get_db)
):
    EnrollmentService(db).unenroll(token, course_id)
    return UnenrollOut()


@router.post("/{token}/projects/{project_id}/submit", response_model=SubmitOut, status_code=status.HTTP_201_CREATED)
def submit(
    token: str,
    project_id: UUID,
    db: Session = Depends(get_db)
):
    """Finalize selections; fails on a tag quota violation or a second submit"""
    submission = SubmissionService(db).submit(token, project_id)
    return SubmitOut(
        submission_id=submission.id,
        submitted_at=submission.submitted_at,
    )
