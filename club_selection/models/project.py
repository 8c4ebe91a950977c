# club_selection/models/project.py - Enrollment campaigns and their time grid
from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, Text, Integer, DateTime, ForeignKey, Table, Column, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from club_selection.models.base import Base, utcnow

# Assignment of students to projects. Being assigned is what allows a student
# to enroll in the project's courses; it is not itself an enrollment.
project_students = Table(
    "project_students",
    Base.metadata,
    Column("project_id", Uuid, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("student_id", Uuid, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")

    # Either bound may be absent, meaning unbounded on that side
    submission_start: Mapped[datetime | None] = mapped_column(DateTime)
    submission_end: Mapped[datetime | None] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    courses: Mapped[list["Course"]] = relationship(
        "Course", back_populates="project", cascade="all, delete-orphan"
    )
    tags: Mapped[list["Tag"]] = relationship(
        "Tag", back_populates="project", cascade="all, delete-orphan", order_by="Tag.name"
    )
    time_sections: Mapped[list["TimeSection"]] = relationship(
        "TimeSection", back_populates="project", cascade="all, delete-orphan", order_by="TimeSection.order"
    )
    students: Mapped[list["Student"]] = relationship(
        "Student", secondary=project_students, back_populates="projects"
    )
    submissions: Mapped[list["Submission"]] = relationship(
        "Submission", back_populates="project", cascade="all, delete-orphan"
    )


class TimeSection(Base):
    """A named slot in the daily timetable, e.g. "Period 1" 08:00-08:45"""
    __tablename__ = "time_sections"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    label: Mapped[str] = mapped_column(String(64), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    project: Mapped["Project"] = relationship("Project", back_populates="time_sections")
