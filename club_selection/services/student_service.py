# club_selection/services/student_service.py - Student self-lookup and project views
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Tuple
from uuid import UUID
import logging

from club_selection.core.exceptions import NotFoundError, ValidationError
from club_selection.core.security import resolve_student_token
from club_selection.models.base import utcnow
from club_selection.models.course import Course, CourseOccurrence
from club_selection.models.enrollment import Enrollment, EnrollmentStatus, Submission
from club_selection.models.project import Project, project_students
from club_selection.models.student import Student
from club_selection.services.enrollment_service import get_student_by_token
from club_selection.services.project_status import ProjectStatus, derive_project_status
from club_selection.services.submission_service import confirmed_course_ids

logger = logging.getLogger(__name__)


@dataclass
class StudentProjectSummary:
    project: Project
    has_enrollment: bool
    has_submitted: bool


@dataclass
class StudentProjectView:
    """Everything the student project page and the embed widget render"""
    student: Student
    project: Project
    submission: Optional[Submission]
    status: ProjectStatus
    enrolled_course_ids: Set[UUID] = field(default_factory=set)
    seats_taken: Dict[UUID, int] = field(default_factory=dict)

    @property
    def has_submitted(self) -> bool:
        return self.submission is not None

    @property
    def submitted_at(self) -> Optional[datetime]:
        return self.submission.submitted_at if self.submission else None


def status_for(project: Project, submission: Optional[Submission], now: Optional[datetime] = None) -> ProjectStatus:
    """Project status for one student, as shown by every read path"""
    return derive_project_status(
        now=now or utcnow(),
        submission_start=project.submission_start,
        submission_end=project.submission_end,
        has_submitted=submission is not None,
        submitted_at=submission.submitted_at if submission else None,
        timezone_name=project.timezone,
    )


class StudentService:
    """Read paths used by students, plus identifier self-lookup"""

    def __init__(self, db: Session):
        self.db = db

    def lookup_identifier(self, identifier: str) -> Tuple[Student, List[Project]]:
        """
        Resolve a plain identifier typed by a student to their record.

        Raises:
            ValidationError: Blank identifier
            NotFoundError: No student was imported under this identifier
        """
        try:
            token = resolve_student_token(identifier)
        except ValueError:
            raise ValidationError("Identifier is required")

        student = self.db.execute(
            select(Student)
            .where(Student.token == token)
            .options(selectinload(Student.projects))
        ).scalar_one_or_none()

        if not student:
            logger.info("Self-lookup with unknown identifier")
            raise NotFoundError("Invalid identifier")

        projects = sorted(student.projects, key=lambda p: p.name)
        return student, projects

    def _submission(self, student_id: UUID, project_id: UUID) -> Optional[Submission]:
        return self.db.execute(
            select(Submission).where(
                Submission.student_id == student_id,
                Submission.project_id == project_id,
            )
        ).scalar_one_or_none()

    def list_projects(self, token: str) -> Tuple[Student, List[StudentProjectSummary]]:
        """All projects the student is assigned to with enrollment/submission flags"""
        student = get_student_by_token(self.db, token)

        projects = self.db.execute(
            select(Project)
            .join(project_students, project_students.c.project_id == Project.id)
            .where(project_students.c.student_id == student.id)
            .order_by(Project.name)
        ).scalars().all()

        enrolled_project_ids = set(self.db.execute(
            select(Course.project_id)
            .join(Enrollment, Enrollment.course_id == Course.id)
            .where(Enrollment.student_id == student.id)
        ).scalars().all())

        submitted_project_ids = set(self.db.execute(
            select(Submission.project_id).where(Submission.student_id == student.id)
        ).scalars().all())

        summaries = [
            StudentProjectSummary(
                project=project,
                has_enrollment=project.id in enrolled_project_ids,
                has_submitted=project.id in submitted_project_ids,
            )
            for project in projects
        ]
        return student, summaries

    def _assigned_project(self, student: Student, project_id: Optional[UUID]) -> Optional[Project]:
        query = (
            select(Project)
            .join(project_students, project_students.c.project_id == Project.id)
            .where(project_students.c.student_id == student.id)
        )
        if project_id is not None:
            query = query.where(Project.id == project_id)
        return self.db.execute(query.order_by(Project.name).limit(1)).scalar_one_or_none()

    def get_project_view(self, token: str, project_id: UUID, now: Optional[datetime] = None) -> StudentProjectView:
        """
        Full project page for a student: courses, tags, sections and status.

        Raises:
            NotFoundError: Unknown student, or project absent / not assigned
        """
        student = get_student_by_token(self.db, token)

        project = self.db.execute(
            select(Project)
            .join(project_students, project_students.c.project_id == Project.id)
            .where(Project.id == project_id, project_students.c.student_id == student.id)
            .options(
                selectinload(Project.time_sections),
                selectinload(Project.tags),
                selectinload(Project.courses).selectinload(Course.tags),
                selectinload(Project.courses)
                .selectinload(Course.occurrences)
                .selectinload(CourseOccurrence.section),
            )
        ).scalar_one_or_none()

        if not project:
            raise NotFoundError("Project not found or not assigned to student")

        submission = self._submission(student.id, project.id)

        seats_taken = dict(self.db.execute(
            select(Enrollment.course_id, func.count(Enrollment.id))
            .join(Course, Course.id == Enrollment.course_id)
            .where(
                Course.project_id == project.id,
                Enrollment.status == EnrollmentStatus.CONFIRMED.value,
            )
            .group_by(Enrollment.course_id)
        ).all())

        return StudentProjectView(
            student=student,
            project=project,
            submission=submission,
            status=status_for(project, submission, now),
            enrolled_course_ids=confirmed_course_ids(self.db, student.id, project.id),
            seats_taken=seats_taken,
        )

    def get_embed_view(
        self,
        token: str,
        project_id: Optional[UUID] = None,
        now: Optional[datetime] = None,
    ) -> StudentProjectView:
        """
        Compact status for the embeddable widget.

        Without a project id the student's first assigned project (by name)
        is used.

        Raises:
            NotFoundError: Unknown student or no matching assigned project
        """
        student = get_student_by_token(self.db, token)

        project = self._assigned_project(student, project_id)
        if not project:
            raise NotFoundError("No project found for this student")

        submission = self._submission(student.id, project.id)
        return StudentProjectView(
            student=student,
            project=project,
            submission=submission,
            status=status_for(project, submission, now),
        )
