import threading

import pytest
from sqlalchemy import select, func

from club_selection.core.exceptions import NotFoundError, ConflictError, QuotaViolationError
from club_selection.models.enrollment import Submission
from club_selection.models.student import Student
from club_selection.services import submission_service
from club_selection.services.enrollment_service import EnrollmentService
from club_selection.services.submission_service import SubmissionService

pytestmark = pytest.mark.integration


def enroll(db, seed, student, *courses):
    service = EnrollmentService(db)
    for name in courses:
        service.enroll(seed.tokens[student], seed.courses[name])


def test_sports_with_no_courses_fails_minimum(db, seed):
    with pytest.raises(QuotaViolationError) as exc:
        SubmissionService(db).submit(seed.tokens["alice"], seed.project_id)
    assert exc.value.tag_name == "Sports"
    assert exc.value.min_required == 1


def test_sports_with_three_courses_fails_maximum(db, seed):
    enroll(db, seed, "alice", "Football", "Tennis", "Swimming")
    with pytest.raises(QuotaViolationError) as exc:
        SubmissionService(db).submit(seed.tokens["alice"], seed.project_id)
    assert exc.value.max_allowed == 2


def test_sports_with_one_course_submits(db, seed):
    enroll(db, seed, "alice", "Tennis")
    submission = SubmissionService(db).submit(seed.tokens["alice"], seed.project_id)
    assert submission.project_id == seed.project_id
    assert submission.submitted_at is not None


def test_second_submit_conflicts_even_after_changes(db, seed):
    enroll(db, seed, "alice", "Tennis")
    service = SubmissionService(db)
    service.submit(seed.tokens["alice"], seed.project_id)

    enroll(db, seed, "alice", "Swimming")
    with pytest.raises(ConflictError):
        service.submit(seed.tokens["alice"], seed.project_id)


def test_second_submit_conflicts_even_when_quota_now_broken(db, seed):
    enroll(db, seed, "alice", "Tennis")
    service = SubmissionService(db)
    service.submit(seed.tokens["alice"], seed.project_id)

    # Sports is now below its minimum; the existing submission still wins
    EnrollmentService(db).unenroll(seed.tokens["alice"], seed.courses["Tennis"])
    with pytest.raises(ConflictError):
        service.submit(seed.tokens["alice"], seed.project_id)


def test_unassigned_project_is_not_found(db, seed):
    with pytest.raises(NotFoundError):
        SubmissionService(db).submit(seed.tokens["carol"], seed.project_id)


def test_unknown_student_is_not_found(db, seed):
    with pytest.raises(NotFoundError, match="Student not found"):
        SubmissionService(db).submit("ffffffffffff", seed.project_id)


def test_submission_committed_after_duplicate_check_hits_constraint(database, db, seed, monkeypatch):
    enroll(db, seed, "alice", "Tennis")
    real_check = submission_service.check_tag_quotas

    def check_then_let_other_writer_in(tags, enrolled):
        real_check(tags, enrolled)
        # Another request slips its submission in before ours is inserted
        db.commit()
        with database.transaction() as other:
            student = other.execute(
                select(Student).where(Student.token == seed.tokens["alice"])
            ).scalar_one()
            other.add(Submission(student_id=student.id, project_id=seed.project_id))

    monkeypatch.setattr(submission_service, "check_tag_quotas", check_then_let_other_writer_in)

    with pytest.raises(ConflictError) as exc:
        SubmissionService(db).submit(seed.tokens["alice"], seed.project_id)
    assert exc.value.to_dict() == {
        "detail": "You have already submitted your selections for this project",
        "code": "conflict",
    }

    count = db.execute(select(func.count(Submission.id))).scalar_one()
    assert count == 1


def test_concurrent_submits_create_one_submission(database, seed):
    contenders = 5

    session = database.SessionLocal()
    try:
        EnrollmentService(session).enroll(seed.tokens["alice"], seed.courses["Tennis"])
    finally:
        session.close()

    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(contenders)

    def attempt():
        session = database.SessionLocal()
        try:
            barrier.wait()
            try:
                SubmissionService(session).submit(seed.tokens["alice"], seed.project_id)
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
        count = session.execute(select(func.count(Submission.id))).scalar_one()
    finally:
        session.close()
    assert count == 1
