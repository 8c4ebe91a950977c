import threading
from uuid import uuid4

import pytest
from sqlalchemy import select, func

from club_selection.core.exceptions import (
    NotFoundError,
    ForbiddenError,
    ConflictError,
    CapacityExceededError,
)
from club_selection.models.enrollment import Enrollment, EnrollmentStatus
from club_selection.models.student import Student
from club_selection.schemas.admin import CourseIn
from club_selection.services.admin_service import AdminService
from club_selection.services.enrollment_service import EnrollmentService
from club_selection.services.submission_service import SubmissionService

pytestmark = pytest.mark.integration


def test_enroll_creates_confirmed_enrollment(db, seed):
    enrollment = EnrollmentService(db).enroll(seed.tokens["alice"], seed.courses["Tennis"])
    assert enrollment.status == EnrollmentStatus.CONFIRMED.value
    assert enrollment.course_id == seed.courses["Tennis"]


def test_duplicate_enroll_conflicts(db, seed):
    service = EnrollmentService(db)
    service.enroll(seed.tokens["alice"], seed.courses["Tennis"])
    with pytest.raises(ConflictError):
        service.enroll(seed.tokens["alice"], seed.courses["Tennis"])

    count = db.execute(select(func.count(Enrollment.id))).scalar_one()
    assert count == 1


def test_unknown_student_or_course(db, seed):
    service = EnrollmentService(db)
    with pytest.raises(NotFoundError, match="Student not found"):
        service.enroll("000000000000", seed.courses["Tennis"])
    with pytest.raises(NotFoundError, match="Course not found"):
        service.enroll(seed.tokens["alice"], uuid4())


def test_unassigned_student_is_forbidden(db, seed):
    with pytest.raises(ForbiddenError):
        EnrollmentService(db).enroll(seed.tokens["carol"], seed.courses["Tennis"])


def test_capacity_one_first_come_first_served(db, seed):
    service = EnrollmentService(db)
    service.enroll(seed.tokens["alice"], seed.courses["Football"])

    with pytest.raises(CapacityExceededError) as exc:
        service.enroll(seed.tokens["bob"], seed.courses["Football"])
    assert exc.value.to_dict() == {
        "detail": "This course is full",
        "code": "capacity_exceeded",
        "courseName": "Football",
        "capacity": 1,
    }

    # A seat frees up once the holder leaves
    service.unenroll(seed.tokens["alice"], seed.courses["Football"])
    service.enroll(seed.tokens["bob"], seed.courses["Football"])


def test_unlimited_capacity(db, seed):
    service = EnrollmentService(db)
    service.enroll(seed.tokens["alice"], seed.courses["Painting"])
    service.enroll(seed.tokens["bob"], seed.courses["Painting"])


def test_unenroll_missing_enrollment(db, seed):
    with pytest.raises(NotFoundError, match="Enrollment not found"):
        EnrollmentService(db).unenroll(seed.tokens["alice"], seed.courses["Tennis"])


def test_concurrent_enrollers_never_exceed_capacity(database, seed):
    capacity = 3
    contenders = 10

    with database.transaction() as session:
        service = AdminService(session)
        course = service.create_course(seed.project_id, CourseIn(name="Robotics", capacity=capacity))
        identifiers = [f"racer{i}@example.com" for i in range(contenders)]
        students = service.import_students(seed.project_id, identifiers)
        course_id = course.id
        tokens = [s.token for s in students]

    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(contenders)

    def attempt(token):
        session = database.SessionLocal()
        try:
            barrier.wait()
            try:
                EnrollmentService(session).enroll(token, course_id)
                outcome = "ok"
            except CapacityExceededError:
                outcome = "full"
        finally:
            session.close()
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt, args=(t,)) for t in tokens]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == capacity
    assert results.count("full") == contenders - capacity

    session = database.SessionLocal()
    try:
        seated = session.execute(
            select(func.count(Enrollment.id)).where(Enrollment.course_id == course_id)
        ).scalar_one()
    finally:
        session.close()
    assert seated == capacity


def test_enrollment_remains_mutable_after_submission(db, seed):
    enrollments = EnrollmentService(db)
    enrollments.enroll(seed.tokens["alice"], seed.courses["Tennis"])
    SubmissionService(db).submit(seed.tokens["alice"], seed.project_id)

    enrollments.enroll(seed.tokens["alice"], seed.courses["Painting"])
    enrollments.unenroll(seed.tokens["alice"], seed.courses["Tennis"])


def test_unenroll_after_unassignment_is_forbidden(db, seed):
    service = EnrollmentService(db)
    service.enroll(seed.tokens["alice"], seed.courses["Tennis"])
    AdminService(db).remove_students(seed.project_id)

    with pytest.raises(ForbiddenError) as exc:
        service.unenroll(seed.tokens["alice"], seed.courses["Tennis"])
    assert exc.value.to_dict() == {"detail": "You are not assigned to this project", "code": "forbidden"}

    # The enrollment is left in place
    count = db.execute(select(func.count(Enrollment.id))).scalar_one()
    assert count == 1


def test_duplicate_missed_by_lookup_hits_constraint(db, seed):
    student = db.execute(select(Student).where(Student.token == seed.tokens["alice"])).scalar_one()
    # Pending and unflushed, so the duplicate lookup cannot see it
    db.add(Enrollment(student_id=student.id, course_id=seed.courses["Tennis"]))

    with pytest.raises(ConflictError) as exc:
        EnrollmentService(db).enroll(seed.tokens["alice"], seed.courses["Tennis"])
    assert exc.value.to_dict() == {"detail": "You are already enrolled in this course", "code": "conflict"}

    count = db.execute(select(func.count(Enrollment.id))).scalar_one()
    assert count == 0


def test_concurrent_duplicate_enrolls_create_one_enrollment(database, seed):
    contenders = 5
    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(contenders)

    def attempt():
        session = database.SessionLocal()
        try:
            barrier.wait()
            try:
                EnrollmentService(session).enroll(seed.tokens["alice"], seed.courses["Painting"])
                outcome = "ok"
            except ConflictError:
                outcome = "conflict"
        finally:
            session.close()
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt) for _ in range(contenders)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 1
    assert results.count("conflict") == contenders - 1

    session = database.SessionLocal()
    try:
        count = session.execute(
            select(func.count(Enrollment.id)).where(Enrollment.course_id == seed.courses["Painting"])
        ).scalar_one()
    finally:
        session.close()
    assert count == 1
