# club_selection/schemas/student.py - Student-facing request/response models
from typing import List, Optional
from uuid import UUID

from club_selection.schemas.base import CamelModel, UtcDatetime


class ValidateIdentifierIn(CamelModel):
    # Plain identifier, sent under the "token" key
    token: str


class StudentOut(CamelModel):
    id: UUID
    name: Optional[str] = None
    token: str


class AssignedProjectOut(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None


class ValidateIdentifierOut(CamelModel):
    success: bool = True
    token: str
    student: StudentOut
    projects: List[AssignedProjectOut]


class StudentProjectOut(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    timezone: str
    submission_start: Optional[UtcDatetime] = None
    submission_end: Optional[UtcDatetime] = None
    has_enrollment: bool
    has_submitted: bool


class StudentBriefOut(CamelModel):
    id: UUID
    name: Optional[str] = None


class StudentProjectListOut(CamelModel):
    student: StudentBriefOut
    projects: List[StudentProjectOut]


class TimeSectionOut(CamelModel):
    id: UUID
    label: str
    start_time: str
    end_time: str
    order: int


class TagOut(CamelModel):
    id: UUID
    name: str
    color: str
    min_required: int
    max_allowed: Optional[int] = None


class OccurrenceOut(CamelModel):
    id: UUID
    day_of_week: int
    section_id: UUID
    section: Optional[TimeSectionOut] = None


class CourseOut(CamelModel):
    id: UUID
    name: str
    description: Optional[str] = None
    capacity: Optional[int] = None
    enrolled_count: int = 0
    is_enrolled: bool = False
    occurrences: List[OccurrenceOut] = []
    tags: List[TagOut] = []


class ProjectStatusOut(CamelModel):
    status: str
    status_message: str
    has_submitted: bool
    submitted_at: Optional[UtcDatetime] = None


class ProjectDetailOut(ProjectStatusOut):
    id: UUID
    name: str
    description: Optional[str] = None
    timezone: str
    submission_start: Optional[UtcDatetime] = None
    submission_end: Optional[UtcDatetime] = None
    time_sections: List[TimeSectionOut]
    tags: List[TagOut]
    courses: List[CourseOut]


class ProjectBriefOut(CamelModel):
    id: UUID
    name: str


class EmbedStatusOut(ProjectStatusOut):
    project: ProjectBriefOut


class EnrollIn(CamelModel):
    course_id: UUID


class EnrollOut(CamelModel):
    enrollment_id: UUID
    course_id: UUID
    status: str
    created_at: UtcDatetime


class UnenrollOut(CamelModel):
    success: bool = True
    message: str = "Successfully unenrolled from course"


class SubmitOut(CamelModel):
    submission_id: UUID
    submitted_at: UtcDatetime
