# club_selection/api/routers/admin.py - Project, roster and catalogue authoring
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from club_selection.core.db import get_db
from club_selection.api.deps.auth import require_admin
from club_selection.models.admin import Admin
from club_selection.services.admin_service import AdminService
from club_selection.schemas.student import TagOut, TimeSectionOut
from club_selection.schemas.admin import (
    ProjectIn,
    ProjectOut,
    ProjectProgressOut,
    ProjectListOut,
    ImportStudentsIn,
    ImportStudentsOut,
    AdminStudentOut,
    StudentListOut,
    TagIn,
    TagListOut,
    TimeSectionIn,
    SectionListOut,
    CourseIn,
    AdminCourseOut,
    CourseListOut,
    ExportSubmissionsIn,
    ExportSubmissionsOut,
    ResetSubmissionsOut,
    SuccessOut,
)

logger = logging.getLogger(__name__)
router = APIRouter()


# Projects

@router.get("/projects", response_model=ProjectListOut)
def list_projects(
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """All projects with completed / in-progress student counts"""
    progress = AdminService(db).list_projects()
    return ProjectListOut(projects=[
        ProjectProgressOut(
            **ProjectOut.model_validate(p.project).model_dump(),
            completed_count=p.completed_count,
            in_progress_count=p.in_progress_count,
        )
        for p in progress
    ])


@router.post("/projects", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    data: ProjectIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    project = AdminService(db).create_project(data)
    logger.info(f"Project {project.id} created by {admin.username}")
    return project


@router.get("/projects/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AdminService(db).get_project(project_id)


@router.put("/projects/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: UUID,
    data: ProjectIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Update project settings; refused once any enrollment exists"""
    return AdminService(db).update_project(project_id, data)


# Students

@router.post("/projects/{project_id}/students", response_model=ImportStudentsOut)
def import_students(
    project_id: UUID,
    data: ImportStudentsIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Bulk-assign students by identifier (one per entry, blanks skipped)"""
    students = AdminService(db).import_students(project_id, data.identifiers)
    return ImportStudentsOut(
        added_count=len(students),
        students=[AdminStudentOut.model_validate(s) for s in students],
    )


@router.get("/projects/{project_id}/students", response_model=StudentListOut)
def list_students(
    project_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    students = AdminService(db).list_students(project_id)
    return StudentListOut(
        count=len(students),
        students=[AdminStudentOut.model_validate(s) for s in students],
    )


@router.delete("/projects/{project_id}/students", response_model=SuccessOut)
def remove_students(
    project_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    removed = AdminService(db).remove_students(project_id)
    return SuccessOut(message=f"Removed {removed} student(s) from project")


# Submissions

@router.post("/projects/{project_id}/submissions/export", response_model=ExportSubmissionsOut)
def export_submissions(
    project_id: UUID,
    data: ExportSubmissionsIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Submission time and enrollments for each listed identifier"""
    export = AdminService(db).export_submissions(project_id, data.identifiers)
    return ExportSubmissionsOut.model_validate(export)


@router.delete("/projects/{project_id}/submissions", response_model=ResetSubmissionsOut)
def reset_submissions(
    project_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Clear every enrollment and submission in the project"""
    reset = AdminService(db).reset_submissions(project_id)
    logger.warning(f"Project {project_id} reset by {admin.username}")
    return ResetSubmissionsOut.model_validate(reset)



# Tags

@router.get("/projects/{project_id}/tags", response_model=TagListOut)
def list_tags(
    project_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    tags = AdminService(db).list_tags(project_id)
    return TagListOut(tags=[TagOut.model_validate(t) for t in tags])


@router.post("/projects/{project_id}/tags", response_model=TagOut, status_code=status.HTTP_201_CREATED)
def create_tag(
    project_id: UUID,
    data: TagIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AdminService(db).create_tag(project_id, data)


@router.put("/projects/{project_id}/tags/{tag_id}", response_model=TagOut)
def update_tag(
    project_id: UUID,
    tag_id: UUID,
    data: TagIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AdminService(db).update_tag(project_id, tag_id, data)


@router.delete("/projects/{project_id}/tags/{tag_id}", response_model=SuccessOut)
def delete_tag(
    project_id: UUID,
    tag_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    AdminService(db).delete_tag(project_id, tag_id)
    return SuccessOut(message="Tag deleted")


# Time sections

@router.get("/projects/{project_id}/sections", response_model=SectionListOut)
def list_sections(
    project_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    sections = AdminService(db).list_sections(project_id)
    return SectionListOut(sections=[TimeSectionOut.model_validate(s) for s in sections])


@router.post("/projects/{project_id}/sections", response_model=TimeSectionOut, status_code=status.HTTP_201_CREATED)
def create_section(
    project_id: UUID,
    data: TimeSectionIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AdminService(db).create_section(project_id, data)


@router.put("/projects/{project_id}/sections/{section_id}", response_model=TimeSectionOut)
def update_section(
    project_id: UUID,
    section_id: UUID,
    data: TimeSectionIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return AdminService(db).update_section(project_id, section_id, data)


@router.delete("/projects/{project_id}/sections/{section_id}", response_model=SuccessOut)
def delete_section(
    project_id: UUID,
    section_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Delete a section; refused while course occurrences use it"""
    AdminService(db).delete_section(project_id, section_id)
    return SuccessOut(message="Section deleted")



# Courses

@router.get("/projects/{project_id}/courses", response_model=CourseListOut)
def list_courses(
    project_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    courses = AdminService(db).list_courses(project_id)
    return CourseListOut(courses=[AdminCourseOut.model_validate(c) for c in courses])


@router.post("/projects/{project_id}/courses", response_model=AdminCourseOut, status_code=status.HTTP_201_CREATED)
def create_course(
    project_id: UUID,
    data: CourseIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Create a course; tags and sections must belong to the same project"""
    return AdminService(db).create_course(project_id, data)


@router.put("/projects/{project_id}/courses/{course_id}", response_model=AdminCourseOut)
def update_course(
    project_id: UUID,
    course_id: UUID,
    data: CourseIn,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Replace a course's fields, tags and occurrences"""
    return AdminService(db).update_course(project_id, course_id, data)


@router.delete("/projects/{project_id}/courses/{course_id}", response_model=SuccessOut)
def delete_course(
    project_id: UUID,
    course_id: UUID,
    admin: Admin = Depends(require_admin),
    db: Session = Depends(get_db)
):
    AdminService(db).delete_course(project_id, course_id)
    return SuccessOut(message="Course deleted")
