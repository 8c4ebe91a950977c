# club_selection/services/enrollment_service.py - Course enrollment business logic
from sqlalchemy.orm import Session
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from uuid import UUID
import logging

from club_selection.core.exceptions import (
    EnrollmentError,
    NotFoundError,
    ForbiddenError,
    ConflictError,
    CapacityExceededError,
)
from club_selection.models.course import Course
from club_selection.models.enrollment import Enrollment, EnrollmentStatus
from club_selection.models.project import project_students
from club_selection.models.student import Student

logger = logging.getLogger(__name__)


def get_student_by_token(db: Session, token: str) -> Student:
    """
    Resolve a student from their opaque token.

    Raises:
        NotFoundError: If no student carries the token
    """
    student = db.execute(
        select(Student).where(Student.token == token)
    ).scalar_one_or_none()

    if not student:
        raise NotFoundError("Student not found")
    return student


def is_assigned(db: Session, student_id: UUID, project_id: UUID) -> bool:
    """Whether the student is assigned to the project"""
    row = db.execute(
        select(project_students.c.project_id).where(
            project_students.c.project_id == project_id,
            project_students.c.student_id == student_id,
        )
    ).first()
    return row is not None


class EnrollmentService:
    """Creates and removes a student's course enrollments"""

    def __init__(self, db: Session):
        self.db = db

    def enroll(self, student_token: str, course_id: UUID) -> Enrollment:
        """
        Enroll a student in a course.

        The course row is locked for the rest of the transaction so that the
        capacity count and the insert cannot interleave with another
        enroller on the same course.

        Args:
            student_token: Opaque student token
            course_id: Course to enroll in

        Returns:
            The new CONFIRMED enrollment

        Raises:
            NotFoundError: Unknown student or course
            ForbiddenError: Student not assigned to the course's project
            ConflictError: Student already enrolled in the course
            CapacityExceededError: Course is full
        """
        try:
            student = get_student_by_token(self.db, student_token)

            course = self.db.execute(
                select(Course).where(Course.id == course_id).with_for_update()
            ).scalar_one_or_none()

            if not course:
                raise NotFoundError("Course not found")

            if not is_assigned(self.db, student.id, course.project_id):
                raise ForbiddenError("You are not assigned to this project")

            existing = self.db.execute(
                select(Enrollment.id).where(
                    Enrollment.student_id == student.id,
                    Enrollment.course_id == course.id,
                )
            ).first()

            if existing:
                raise ConflictError("You are already enrolled in this course")

            if course.capacity is not None:
                confirmed = self.db.execute(
                    select(func.count(Enrollment.id)).where(
                        Enrollment.course_id == course.id,
                        Enrollment.status == EnrollmentStatus.CONFIRMED.value,
                    )
                ).scalar_one()

                if confirmed >= course.capacity:
                    raise CapacityExceededError(course.name, course.capacity)

            enrollment = Enrollment(
                student_id=student.id,
                course_id=course.id,
                status=EnrollmentStatus.CONFIRMED.value,
            )
            self.db.add(enrollment)
            self.db.commit()

        except EnrollmentError as e:
            self.db.rollback()
            logger.info(f"Enroll rejected for course {course_id}: {e.message}")
            raise
        except IntegrityError:
            # Lost a race on uq_enrollment_student_course
            self.db.rollback()
            logger.warning(f"Duplicate enrollment blocked by constraint for course {course_id}")
            raise ConflictError("You are already enrolled in this course")

        logger.info(f"Student {student.id} enrolled in course {course.name} ({course.id})")
        return enrollment

    def unenroll(self, student_token: str, course_id: UUID) -> None:
        """
        Remove a student's enrollment from a course (hard delete).

        Raises:
            NotFoundError: Unknown student or no such enrollment
            ForbiddenError: Student not assigned to the course's project
        """
        try:
            student = get_student_by_token(self.db, student_token)

            enrollment = self.db.execute(
                select(Enrollment).where(
                    Enrollment.student_id == student.id,
                    Enrollment.course_id == course_id,
                )
            ).scalar_one_or_none()

            if not enrollment:
                raise NotFoundError("Enrollment not found")

            if not is_assigned(self.db, student.id, enrollment.course.project_id):
                raise ForbiddenError("You are not assigned to this project")

            self.db.delete(enrollment)
            self.db.commit()

        except EnrollmentError as e:
            self.db.rollback()
            logger.info(f"Unenroll rejected for course {course_id}: {e.message}")
            raise

        logger.info(f"Student {student.id} unenrolled from course {course_id}")
