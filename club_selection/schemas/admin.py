# club_selection/schemas/admin.py - Administrative request/response models
from pydantic import Field, validator
from typing import List, Optional
from datetime import datetime
from uuid import UUID
import re

import pytz

from club_selection.core.config import settings
from club_selection.models.base import as_utc
from club_selection.schemas.base import CamelModel, UtcDatetime
from club_selection.schemas.student import TagOut, TimeSectionOut, OccurrenceOut, ProjectBriefOut

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class LoginIn(CamelModel):
    username: str
    password: str


class LoginOut(CamelModel):
    access_token: str
    token_type: str = "bearer"


class ProjectIn(CamelModel):
    name: str
    description: Optional[str] = None
    timezone: str = Field(default_factory=lambda: settings.DEFAULT_TIMEZONE)
    submission_start: Optional[datetime] = None
    submission_end: Optional[datetime] = None

    @validator("name")
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Project name is required")
        return v.strip()

    @validator("timezone")
    def validate_timezone(cls, v):
        v = (v or "").strip() or settings.DEFAULT_TIMEZONE
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @validator("submission_end")
    def validate_window(cls, v, values):
        start = values.get("submission_start")
        if v is not None and start is not None:
            # Naive values are UTC
            if as_utc(v) <= as_utc(start):
                raise ValueError("Submission end must be after submission start")
        return v


class ProjectOut(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    timezone: str
    submission_start: Optional[UtcDatetime] = None
    submission_end: Optional[UtcDatetime] = None
    created_at: UtcDatetime


class ProjectProgressOut(ProjectOut):
    completed_count: int
    in_progress_count: int


class ProjectListOut(CamelModel):
    success: bool = True
    projects: List[ProjectProgressOut]


class ImportStudentsIn(CamelModel):
    identifiers: List[str]


class AdminStudentOut(CamelModel):
    id: UUID
    name: Optional[str] = None
    token: str


class ImportStudentsOut(CamelModel):
    success: bool = True
    added_count: int
    students: List[AdminStudentOut]


class StudentListOut(CamelModel):
    count: int
    students: List[AdminStudentOut]


class TagIn(CamelModel):
    name: str
    color: str = "#6b7280"
    min_required: int = Field(default=0, ge=0)
    max_allowed: Optional[int] = Field(default=None, ge=1)

    @validator("name")
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Tag name is required")
        return v.strip()

    @validator("max_allowed")
    def validate_bounds(cls, v, values):
        min_required = values.get("min_required")
        if v is not None and min_required is not None and v < min_required:
            raise ValueError("Max allowed cannot be lower than min required")
        return v


class TimeSectionIn(CamelModel):
    label: str
    start_time: str
    end_time: str
    order: Optional[int] = Field(default=None, ge=0)

    @validator("label")
    def validate_label(cls, v):
        if not v or not v.strip():
            raise ValueError("Label is required")
        return v.strip()

    @validator("start_time", "end_time")
    def validate_time(cls, v):
        if not HHMM_PATTERN.match(v):
            raise ValueError("Invalid time format (use HH:MM)")
        return v

    @validator("end_time")
    def validate_order(cls, v, values):
        start = values.get("start_time")
        if start is not None and v <= start:
            raise ValueError("End time must be after start time")
        return v


class OccurrenceIn(CamelModel):
    day_of_week: int = Field(ge=0, le=6)
    section_id: UUID


class CourseIn(CamelModel):
    name: str
    description: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    tag_ids: List[UUID] = []
    occurrences: List[OccurrenceIn] = []

    @validator("name")
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Course name is required")
        return v.strip()


class AdminCourseOut(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    capacity: Optional[int] = None
    occurrences: List[OccurrenceOut] = []
    tags: List[TagOut] = []
    created_at: UtcDatetime


class TagListOut(CamelModel):
    tags: List[TagOut]


class SectionListOut(CamelModel):
    sections: List[TimeSectionOut]


class CourseListOut(CamelModel):
    courses: List[AdminCourseOut]


class SuccessOut(CamelModel):
    success: bool = True
    message: Optional[str] = None


class ExportSubmissionsIn(CamelModel):
    identifiers: List[str]


class ExportedEnrollmentOut(CamelModel):
    course_name: str
    status: str


class ExportedSubmissionOut(CamelModel):
    identifier: str
    token: str
    student_name: Optional[str] = None
    submitted_at: Optional[UtcDatetime] = None
    enrollments: List[ExportedEnrollmentOut] = []


class ExportSubmissionsOut(CamelModel):
    project: ProjectBriefOut
    submissions: List[ExportedSubmissionOut]
    not_found: List[str]


class ResetSubmissionsOut(CamelModel):
    success: bool = True
    deleted_count: int
    deleted_submission_count: int
