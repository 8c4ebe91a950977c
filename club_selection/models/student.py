# club_selection/models/student.py - Students identified by an opaque token
from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from club_selection.models.base import Base, utcnow
from club_selection.models.project import project_students


class Student(Base):
    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str | None] = mapped_column(String(255))
    # resolve_student_token() of the real-world identifier; never the identifier itself
    token: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    projects: Mapped[list["Project"]] = relationship(
        "Project", secondary=project_students, back_populates="students"
    )
    enrollments: Mapped[list["Enrollment"]] = relationship(
        "Enrollment", back_populates="student", cascade="all, delete-orphan"
    )
    submissions: Mapped[list["Submission"]] = relationship(
        "Submission", back_populates="student", cascade="all, delete-orphan"
    )
