# club_selection/models/enrollment.py - Course enrollments and project submissions
from __future__ import annotations
import enum
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from club_selection.models.base import Base, utcnow


class EnrollmentStatus(str, enum.Enum):
    """Only CONFIRMED is produced today; the others are reserved"""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class Enrollment(Base):
    """
    A student's seat in a course.

    CONFIRMED enrollments count toward the course capacity and toward every
    tag the course carries. Unenrolling deletes the row.
    """
    __tablename__ = "enrollments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=EnrollmentStatus.CONFIRMED.value)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    student: Mapped["Student"] = relationship("Student", back_populates="enrollments")
    course: Mapped["Course"] = relationship("Course", back_populates="enrollments")

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollment_student_course"),
        CheckConstraint("status IN ('PENDING','CONFIRMED','CANCELLED')", name="status_valid"),
    )


class Submission(Base):
    """
    Marks a student's selections for a project as final.

    Create-once: there is no update or delete path, and the unique constraint
    on (student_id, project_id) is what enforces it under concurrency.
    """
    __tablename__ = "submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    student: Mapped["Student"] = relationship("Student", back_populates="submissions")
    project: Mapped["Project"] = relationship("Project", back_populates="submissions")

    __table_args__ = (
        UniqueConstraint("student_id", "project_id", name="uq_submission_student_project"),
    )
