# club_selection/services/submission_service.py - Tag quota validation and final submission
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from typing import Dict, Iterable, List, Set
from uuid import UUID
import logging

from club_selection.core.exceptions import (
    EnrollmentError,
    NotFoundError,
    ConflictError,
    QuotaViolationError,
)
from club_selection.models.course import Course, Tag
from club_selection.models.enrollment import Enrollment, EnrollmentStatus, Submission
from club_selection.models.project import Project, project_students
from club_selection.services.enrollment_service import get_student_by_token

logger = logging.getLogger(__name__)


def confirmed_course_ids(db: Session, student_id: UUID, project_id: UUID) -> Set[UUID]:
    """Ids of the project's courses the student holds a CONFIRMED enrollment in"""
    rows = db.execute(
        select(Enrollment.course_id)
        .join(Course, Course.id == Enrollment.course_id)
        .where(
            Course.project_id == project_id,
            Enrollment.student_id == student_id,
            Enrollment.status == EnrollmentStatus.CONFIRMED.value,
        )
    ).scalars().all()
    return set(rows)


def count_by_tag(tags: Iterable[Tag], enrolled_course_ids: Set[UUID]) -> Dict[UUID, int]:
    """Number of enrolled courses carrying each tag"""
    return {
        tag.id: sum(1 for course in tag.courses if course.id in enrolled_course_ids)
        for tag in tags
    }


def check_tag_quotas(tags: Iterable[Tag], enrolled_course_ids: Set[UUID]) -> None:
    """
    Validate every tag's min/max quota against the enrolled courses.

    Tags are checked in ascending name order and the first violation is
    raised; for a single tag the minimum is checked before the maximum.

    Raises:
        QuotaViolationError: On the first tag whose count is out of bounds
    """
    ordered: List[Tag] = sorted(tags, key=lambda t: (t.name, str(t.id)))
    counts = count_by_tag(ordered, enrolled_course_ids)

    for tag in ordered:
        count = counts[tag.id]
        if count < tag.min_required:
            raise QuotaViolationError(tag.name, min_required=tag.min_required)
        if tag.max_allowed is not None and count > tag.max_allowed:
            raise QuotaViolationError(tag.name, max_allowed=tag.max_allowed)


class SubmissionService:
    """Finalizes a student's selections for a project"""

    def __init__(self, db: Session):
        self.db = db

    def submit(self, student_token: str, project_id: UUID) -> Submission:
        """
        Validate tag quotas and record the student's submission.

        Args:
            student_token: Opaque student token
            project_id: Project being submitted

        Returns:
            The created Submission

        Raises:
            NotFoundError: Unknown student, or project absent / not assigned
            QuotaViolationError: A tag's min or max is not satisfied
            ConflictError: The student already submitted for this project
        """
        try:
            student = get_student_by_token(self.db, student_token)

            project = self.db.execute(
                select(Project)
                .join(project_students, project_students.c.project_id == Project.id)
                .where(
                    Project.id == project_id,
                    project_students.c.student_id == student.id,
                )
                .options(selectinload(Project.tags).selectinload(Tag.courses))
            ).scalar_one_or_none()

            if not project:
                raise NotFoundError("Project not found or not assigned to student")

            existing = self.db.execute(
                select(Submission.id).where(
                    Submission.student_id == student.id,
                    Submission.project_id == project.id,
                )
            ).first()

            if existing:
                raise ConflictError("You have already submitted your selections for this project")

            enrolled = confirmed_course_ids(self.db, student.id, project.id)
            check_tag_quotas(project.tags, enrolled)

            submission = Submission(student_id=student.id, project_id=project.id)
            self.db.add(submission)
            self.db.commit()

        except EnrollmentError as e:
            self.db.rollback()
            logger.info(f"Submission rejected for project {project_id}: {e.message}")
            raise
        except IntegrityError:
            # uq_submission_student_project is the authoritative create-once guard
            self.db.rollback()
            logger.warning(f"Duplicate submission blocked by constraint for project {project_id}")
            raise ConflictError("You have already submitted your selections for this project")

        logger.info(
            f"Student {student.id} submitted project {project.name} ({project.id}) "
            f"with {len(enrolled)} course(s)"
        )
        return submission
