# club_selection/services/admin_service.py - Administrative authoring of projects and rosters
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select, func, delete, and_
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence
from uuid import UUID
import logging

from club_selection.core.exceptions import NotFoundError, ConflictError, ValidationError
from club_selection.core.security import hash_password, verify_password, resolve_student_token
from club_selection.models.admin import Admin
from club_selection.models.base import utcnow, to_naive_utc
from club_selection.models.course import Course, CourseOccurrence, Tag
from club_selection.models.enrollment import Enrollment, Submission
from club_selection.models.project import Project, TimeSection, project_students
from club_selection.models.student import Student
from club_selection.schemas.admin import (
    ProjectIn,
    TagIn,
    TimeSectionIn,
    CourseIn,
)

logger = logging.getLogger(__name__)


@dataclass
class ProjectProgress:
    project: Project
    completed_count: int
    in_progress_count: int


@dataclass
class ExportedEnrollment:
    course_name: str
    status: str


@dataclass
class ExportedStudent:
    identifier: str
    token: str
    student_name: Optional[str]
    submitted_at: Optional[datetime]
    enrollments: List[ExportedEnrollment] = field(default_factory=list)


@dataclass
class SubmissionExport:
    project: Project
    submissions: List[ExportedStudent]
    not_found: List[str]


@dataclass
class SubmissionReset:
    deleted_count: int
    deleted_submission_count: int


class AdminService:
    """Service class for administrator operations"""

    def __init__(self, db: Session):
        self.db = db

    # --- Accounts -------------------------------------------------------

    def authenticate(self, username: str, password: str) -> Optional[Admin]:
        """
        Authenticate an admin with username and password

        Returns:
            Admin if the credentials match, None otherwise
        """
        admin = self.db.execute(
            select(Admin).where(Admin.username == username.strip())
        ).scalar_one_or_none()

        if not admin or not verify_password(password, admin.password_hash):
            logger.warning(f"Failed admin login for {username!r}")
            return None

        admin.last_login = utcnow()
        self.db.commit()
        logger.info(f"Admin authenticated: {admin.username}")
        return admin

    def upsert_admin(self, username: str, password: str, name: Optional[str] = None) -> Admin:
        """Create an admin account, or reset the password of an existing one"""
        username = username.strip()
        admin = self.db.execute(
            select(Admin).where(Admin.username == username)
        ).scalar_one_or_none()

        if admin:
            admin.password_hash = hash_password(password)
            if name:
                admin.name = name
        else:
            admin = Admin(username=username, password_hash=hash_password(password), name=name)
            self.db.add(admin)

        self.db.commit()
        logger.info(f"Admin account saved: {username}")
        return admin

    # --- Projects -------------------------------------------------------

    def get_project(self, project_id: UUID) -> Project:
        project = self.db.get(Project, project_id)
        if not project:
            raise NotFoundError("Project not found")
        return project

    def list_projects(self) -> List[ProjectProgress]:
        """
        All projects, newest first, with submission progress.

        completed = students who submitted; in progress = students holding
        at least one enrollment in the project but no submission.
        """
        projects = self.db.execute(
            select(Project).order_by(Project.created_at.desc())
        ).scalars().all()

        completed = dict(self.db.execute(
            select(Submission.project_id, func.count(Submission.id))
            .group_by(Submission.project_id)
        ).all())

        in_progress = dict(self.db.execute(
            select(Course.project_id, func.count(func.distinct(Enrollment.student_id)))
            .select_from(Enrollment)
            .join(Course, Course.id == Enrollment.course_id)
            .outerjoin(Submission, and_(
                Submission.student_id == Enrollment.student_id,
                Submission.project_id == Course.project_id,
            ))
            .where(Submission.id.is_(None))
            .group_by(Course.project_id)
        ).all())

        return [
            ProjectProgress(
                project=project,
                completed_count=completed.get(project.id, 0),
                in_progress_count=in_progress.get(project.id, 0),
            )
            for project in projects
        ]

    def create_project(self, data: ProjectIn) -> Project:
        project = Project(
            name=data.name,
            description=data.description,
            timezone=data.timezone,
            submission_start=to_naive_utc(data.submission_start),
            submission_end=to_naive_utc(data.submission_end),
        )
        self.db.add(project)
        self.db.commit()
        logger.info(f"Project created: {project.name} ({project.id})")
        return project

    def update_project(self, project_id: UUID, data: ProjectIn) -> Project:
        """
        Update a project's settings.

        Raises:
            ConflictError: Once any student holds an enrollment in the project
        """
        project = self.get_project(project_id)

        enrollment_count = self.db.execute(
            select(func.count(Enrollment.id))
            .join(Course, Course.id == Enrollment.course_id)
            .where(Course.project_id == project.id)
        ).scalar_one()

        if enrollment_count:
            raise ConflictError("Cannot edit project with existing enrollments")

        project.name = data.name
        project.description = data.description
        project.timezone = data.timezone
        project.submission_start = to_naive_utc(data.submission_start)
        project.submission_end = to_naive_utc(data.submission_end)
        self.db.commit()
        logger.info(f"Project updated: {project.name} ({project.id})")
        return project

    # --- Students -------------------------------------------------------

    def import_students(self, project_id: UUID, identifiers: Sequence[str]) -> List[Student]:
        """
        Bulk-assign students to a project by their plain identifiers.

        Each identifier is resolved to its token; existing students with that
        token are reused, new ones are created with the identifier as display
        name. Blank identifiers are skipped and repeated imports are harmless.
        """
        project = self.get_project(project_id)

        students = []
        seen_tokens = set()
        for identifier in identifiers:
            try:
                token = resolve_student_token(identifier)
            except ValueError:
                continue
            if token in seen_tokens:
                continue
            seen_tokens.add(token)

            student = self.db.execute(
                select(Student).where(Student.token == token)
            ).scalar_one_or_none()
            if not student:
                student = Student(token=token, name=identifier.strip())
                self.db.add(student)
            students.append(student)

        for student in students:
            if student not in project.students:
                project.students.append(student)

        self.db.commit()
        logger.info(f"Imported {len(students)} student(s) into project {project.id}")
        return students

    def list_students(self, project_id: UUID) -> List[Student]:
        self.get_project(project_id)
        return list(self.db.execute(
            select(Student)
            .join(project_students, project_students.c.student_id == Student.id)
            .where(project_students.c.project_id == project_id)
            .order_by(Student.name)
        ).scalars().all())

    def remove_students(self, project_id: UUID) -> int:
        """Unassign every student from the project; student records are kept"""
        self.get_project(project_id)
        result = self.db.execute(
            delete(project_students).where(project_students.c.project_id == project_id)
        )
        self.db.commit()
        logger.info(f"Removed {result.rowcount} student assignment(s) from project {project_id}")
        return result.rowcount

    # --- Submissions ----------------------------------------------------

    def export_submissions(self, project_id: UUID, identifiers: Sequence[str]) -> SubmissionExport:
        """
        Collect submission state for the given plain identifiers.

        Identifiers are resolved to tokens the same way as on import. Those
        with no student assigned to the project end up in ``not_found``, in
        the order given. Blank identifiers are skipped.
        """
        project = self.get_project(project_id)

        by_token = {}
        for identifier in identifiers:
            try:
                token = resolve_student_token(identifier)
            except ValueError:
                continue
            by_token.setdefault(token, identifier.strip())

        students = []
        if by_token:
            students = self.db.execute(
                select(Student)
                .join(project_students, project_students.c.student_id == Student.id)
                .where(
                    project_students.c.project_id == project.id,
                    Student.token.in_(list(by_token)),
                )
            ).scalars().all()
        found = {student.token: student for student in students}
        student_ids = [student.id for student in students]

        submitted_at = {}
        enrollments = {}
        if student_ids:
            submitted_at = dict(self.db.execute(
                select(Submission.student_id, Submission.submitted_at).where(
                    Submission.project_id == project.id,
                    Submission.student_id.in_(student_ids),
                )
            ).all())
            rows = self.db.execute(
                select(Enrollment.student_id, Course.name, Enrollment.status)
                .join(Course, Course.id == Enrollment.course_id)
                .where(Course.project_id == project.id, Enrollment.student_id.in_(student_ids))
                .order_by(Course.name)
            ).all()
            for student_id, course_name, enrollment_status in rows:
                enrollments.setdefault(student_id, []).append(
                    ExportedEnrollment(course_name=course_name, status=enrollment_status)
                )

        entries = []
        not_found = []
        for token, identifier in by_token.items():
            student = found.get(token)
            if student is None:
                not_found.append(identifier)
                continue
            entries.append(ExportedStudent(
                identifier=identifier,
                token=token,
                student_name=student.name,
                submitted_at=submitted_at.get(student.id),
                enrollments=enrollments.get(student.id, []),
            ))

        logger.info(
            f"Exported {len(entries)} student(s) from project {project.id}, "
            f"{len(not_found)} not found"
        )
        return SubmissionExport(project=project, submissions=entries, not_found=not_found)

    def reset_submissions(self, project_id: UUID) -> SubmissionReset:
        """
        Delete every enrollment and submission in the project.

        Students stay assigned, so the project starts over for all of them.
        """
        project = self.get_project(project_id)

        course_ids = select(Course.id).where(Course.project_id == project.id)
        enrollments = self.db.execute(
            delete(Enrollment).where(Enrollment.course_id.in_(course_ids))
        )
        submissions = self.db.execute(
            delete(Submission).where(Submission.project_id == project.id)
        )
        self.db.commit()
        self.db.expire_all()

        logger.info(
            f"Reset project {project.id}: removed {enrollments.rowcount} enrollment(s) "
            f"and {submissions.rowcount} submission(s)"
        )
        return SubmissionReset(
            deleted_count=enrollments.rowcount,
            deleted_submission_count=submissions.rowcount,
        )

    # --- Tags -----------------------------------------------------------

    def _get_tag(self, project_id: UUID, tag_id: UUID) -> Tag:
        tag = self.db.get(Tag, tag_id)
        if not tag or tag.project_id != project_id:
            raise NotFoundError("Tag not found")
        return tag

    def list_tags(self, project_id: UUID) -> List[Tag]:
        return list(self.get_project(project_id).tags)

    def create_tag(self, project_id: UUID, data: TagIn) -> Tag:
        self.get_project(project_id)
        tag = Tag(
            project_id=project_id,
            name=data.name,
            color=data.color,
            min_required=data.min_required,
            max_allowed=data.max_allowed,
        )
        self.db.add(tag)
        self.db.commit()
        logger.info(f"Tag created: {tag.name} ({tag.id}) in project {project_id}")
        return tag

    def update_tag(self, project_id: UUID, tag_id: UUID, data: TagIn) -> Tag:
        tag = self._get_tag(project_id, tag_id)
        tag.name = data.name
        tag.color = data.color
        tag.min_required = data.min_required
        tag.max_allowed = data.max_allowed
        self.db.commit()
        return tag

    def delete_tag(self, project_id: UUID, tag_id: UUID) -> None:
        tag = self._get_tag(project_id, tag_id)
        self.db.delete(tag)
        self.db.commit()
        logger.info(f"Tag deleted: {tag_id}")

    # --- Time sections --------------------------------------------------

    def _get_section(self, project_id: UUID, section_id: UUID) -> TimeSection:
        section = self.db.get(TimeSection, section_id)
        if not section or section.project_id != project_id:
            raise NotFoundError("Time section not found")
        return section

    def list_sections(self, project_id: UUID) -> List[TimeSection]:
        return list(self.get_project(project_id).time_sections)

    def create_section(self, project_id: UUID, data: TimeSectionIn) -> TimeSection:
        self.get_project(project_id)

        order = data.order
        if order is None:
            max_order = self.db.execute(
                select(func.max(TimeSection.order)).where(TimeSection.project_id == project_id)
            ).scalar_one()
            order = 0 if max_order is None else max_order + 1

        section = TimeSection(
            project_id=project_id,
            label=data.label,
            start_time=data.start_time,
            end_time=data.end_time,
            order=order,
        )
        self.db.add(section)
        self.db.commit()
        return section

    def update_section(self, project_id: UUID, section_id: UUID, data: TimeSectionIn) -> TimeSection:
        section = self._get_section(project_id, section_id)
        section.label = data.label
        section.start_time = data.start_time
        section.end_time = data.end_time
        if data.order is not None:
            section.order = data.order
        self.db.commit()
        return section

    def delete_section(self, project_id: UUID, section_id: UUID) -> None:
        """
        Delete a time section.

        Raises:
            ValidationError: Course occurrences still meet in this section
        """
        section = self._get_section(project_id, section_id)

        in_use = self.db.execute(
            select(func.count(CourseOccurrence.id)).where(CourseOccurrence.section_id == section.id)
        ).scalar_one()
        if in_use:
            raise ValidationError(
                f"This section is used by {in_use} course occurrence(s). Please remove those first.",
                extra={"occurrenceCount": in_use},
            )

        self.db.delete(section)
        self.db.commit()
        logger.info(f"Time section deleted: {section_id}")

    # --- Courses --------------------------------------------------------

    def _get_course(self, project_id: UUID, course_id: UUID) -> Course:
        course = self.db.get(Course, course_id)
        if not course or course.project_id != project_id:
            raise NotFoundError("Course not found")
        return course

    def _resolve_course_refs(self, project_id: UUID, data: CourseIn) -> List[Tag]:
        """Tags for the course; every referenced tag and section must be in the project"""
        tags = []
        if data.tag_ids:
            tags = list(self.db.execute(
                select(Tag).where(Tag.id.in_(data.tag_ids), Tag.project_id == project_id)
            ).scalars().all())
            if len(tags) != len(set(data.tag_ids)):
                raise ValidationError("One or more tags do not belong to this project")

        section_ids = {occ.section_id for occ in data.occurrences}
        if section_ids:
            found = self.db.execute(
                select(func.count(TimeSection.id)).where(
                    TimeSection.id.in_(section_ids), TimeSection.project_id == project_id
                )
            ).scalar_one()
            if found != len(section_ids):
                raise ValidationError("One or more time sections do not belong to this project")

        return tags

    def list_courses(self, project_id: UUID) -> List[Course]:
        self.get_project(project_id)
        return list(self.db.execute(
            select(Course)
            .where(Course.project_id == project_id)
            .options(
                selectinload(Course.tags),
                selectinload(Course.occurrences).selectinload(CourseOccurrence.section),
            )
            .order_by(Course.name)
        ).scalars().all())

    def create_course(self, project_id: UUID, data: CourseIn) -> Course:
        """
        Create a course with its tags and weekly occurrences.

        Raises:
            ValidationError: A referenced tag or time section belongs to another project
        """
        self.get_project(project_id)
        tags = self._resolve_course_refs(project_id, data)

        course = Course(
            project_id=project_id,
            name=data.name,
            description=data.description,
            capacity=data.capacity,
            tags=tags,
            occurrences=[
                CourseOccurrence(day_of_week=occ.day_of_week, section_id=occ.section_id)
                for occ in data.occurrences
            ],
        )
        self.db.add(course)
        self.db.commit()
        logger.info(f"Course created: {course.name} ({course.id}) in project {project_id}")
        return course

    def update_course(self, project_id: UUID, course_id: UUID, data: CourseIn) -> Course:
        """
        Replace a course's fields, tags and occurrences.

        Existing enrollments are kept even when the new capacity is lower
        than the number of confirmed seats.
        """
        course = self._get_course(project_id, course_id)
        tags = self._resolve_course_refs(project_id, data)

        course.name = data.name
        course.description = data.description
        course.capacity = data.capacity
        course.tags = tags
        course.occurrences = [
            CourseOccurrence(day_of_week=occ.day_of_week, section_id=occ.section_id)
            for occ in data.occurrences
        ]
        self.db.commit()
        logger.info(f"Course updated: {course.name} ({course.id})")
        return course

    def delete_course(self, project_id: UUID, course_id: UUID) -> None:
        course = self._get_course(project_id, course_id)
        self.db.delete(course)
        self.db.commit()
        logger.info(f"Course deleted: {course_id}")
