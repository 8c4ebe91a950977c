from datetime import datetime, timezone

import pytest

from club_selection.services.project_status import (
    ProjectPhase,
    derive_project_status,
    format_datetime,
    format_date,
)

pytestmark = pytest.mark.unit

START = datetime(2025, 11, 5, 14, 30)
END = datetime(2025, 11, 20, 17, 0)


def status_at(now, **kwargs):
    params = dict(submission_start=START, submission_end=END, has_submitted=False)
    params.update(kwargs)
    return derive_project_status(now=now, **params)


def test_waiting_before_start():
    status = status_at(datetime(2025, 11, 1))
    assert status.phase is ProjectPhase.WAITING
    assert status.status == "waiting"
    assert status.message == "Opens on Nov 5, 2025, 02:30 PM"


def test_open_inside_window():
    status = status_at(datetime(2025, 11, 10))
    assert status.status == "open"
    assert status.message == "Open until Nov 20, 2025, 05:00 PM"


def test_closed_after_end_shows_date_only():
    status = status_at(datetime(2025, 12, 1))
    assert status.status == "closed"
    assert status.message == "Closed on Nov 20, 2025"


def test_open_without_bounds():
    status = status_at(datetime(2025, 12, 1), submission_start=None, submission_end=None)
    assert status.status == "open"
    assert status.message == "Open for enrollment"


def test_only_start_bound():
    status = status_at(datetime(2025, 12, 1), submission_end=None)
    assert status.message == "Open for enrollment"


def test_submission_overrides_window():
    submitted_at = datetime(2025, 11, 12, 9, 5)
    # Even after the window closed, a submitted student sees the submission
    status = status_at(datetime(2026, 1, 1), has_submitted=True, submitted_at=submitted_at)
    assert status.is_submitted
    assert status.status == "open"
    assert status.message == "Submitted on Nov 12, 2025, 09:05 AM"


def test_submission_without_timestamp():
    status = status_at(datetime(2025, 11, 10), has_submitted=True)
    assert status.message == "Submitted"


def test_boundaries_are_inclusive_of_the_window():
    assert status_at(START).status == "open"
    assert status_at(END).status == "open"


def test_aware_now_is_compared_in_utc():
    now = datetime(2025, 11, 5, 14, 29, tzinfo=timezone.utc)
    assert status_at(now).status == "waiting"


def test_messages_render_in_project_timezone():
    status = status_at(datetime(2025, 11, 1), timezone_name="Asia/Taipei")
    assert status.message == "Opens on Nov 5, 2025, 10:30 PM"


def test_unknown_timezone_falls_back_to_utc():
    assert format_datetime(START, "Nowhere/Special") == "Nov 5, 2025, 02:30 PM"


def test_date_formatting_crosses_midnight_in_local_zone():
    assert format_date(datetime(2025, 11, 20, 20, 0), "Asia/Tokyo") == "Nov 21, 2025"
