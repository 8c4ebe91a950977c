# club_selection/models/__init__.py - Import all models so SQLAlchemy can discover them

from club_selection.models.base import Base

from club_selection.models.admin import Admin
from club_selection.models.project import Project, TimeSection, project_students
from club_selection.models.course import Course, CourseOccurrence, Tag, course_tags
from club_selection.models.student import Student
from club_selection.models.enrollment import Enrollment, EnrollmentStatus, Submission

__all__ = [
    "Base",
    "Admin",
    "Project",
    "TimeSection",
    "project_students",
    "Course",
    "CourseOccurrence",
    "Tag",
    "course_tags",
    "Student",
    "Enrollment",
    "EnrollmentStatus",
    "Submission",
]
