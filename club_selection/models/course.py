# club_selection/models/course.py - Courses, their meeting times and selection tags
from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Table, Column, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from club_selection.models.base import Base, utcnow

course_tags = Table(
    "course_tags",
    Base.metadata,
    Column("course_id", Uuid, ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    # None means unlimited seats
    capacity: Mapped[int | None] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    project: Mapped["Project"] = relationship("Project", back_populates="courses")
    tags: Mapped[list["Tag"]] = relationship("Tag", secondary=course_tags, back_populates="courses")
    occurrences: Mapped[list["CourseOccurrence"]] = relationship(
        "CourseOccurrence", back_populates="course", cascade="all, delete-orphan"
    )
    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment", back_populates="course", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("capacity IS NULL OR capacity >= 1", name="capacity_positive"),
    )


class CourseOccurrence(Base):
    """A weekly meeting of a course: day of week (0-6) in a time section"""
    __tablename__ = "course_occurrences"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    course_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("time_sections.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)

    course: Mapped["Course"] = relationship("Course", back_populates="occurrences")
    section: Mapped["TimeSection"] = relationship("TimeSection")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="day_of_week_range"),
    )


class Tag(Base):
    """
    Selection constraint over courses of one project.

    A student's CONFIRMED enrollments in courses carrying the tag must number
    at least min_required and, when max_allowed is set, at most max_allowed.
    """
    __tablename__ = "tags"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    color: Mapped[str] = mapped_column(String(32), nullable=False, default="#6b7280")
    min_required: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_allowed: Mapped[int | None] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    project: Mapped["Project"] = relationship("Project", back_populates="tags")
    courses: Mapped[list["Course"]] = relationship("Course", secondary=course_tags, back_populates="tags")

    __table_args__ = (
        CheckConstraint("min_required >= 0", name="min_required_non_negative"),
        CheckConstraint("max_allowed IS NULL OR max_allowed >= 1", name="max_allowed_positive"),
    )
