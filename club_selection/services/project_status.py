# club_selection/services/project_status.py - Submission window status for a student
"""
Derive the display status of a project for one student.

Both the student project view and the embeddable status widget call
``derive_project_status``; neither re-implements the branching.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytz

from club_selection.models.base import as_utc

logger = logging.getLogger(__name__)


class ProjectPhase(str, enum.Enum):
    SUBMITTED = "submitted"
    WAITING = "waiting"
    OPEN = "open"
    CLOSED = "closed"


# Wire value reported for each phase. A submitted student is reported as
# "open"; clients key off hasSubmitted and the message for that state.
WIRE_STATUS = {
    ProjectPhase.SUBMITTED: "open",
    ProjectPhase.WAITING: "waiting",
    ProjectPhase.OPEN: "open",
    ProjectPhase.CLOSED: "closed",
}


@dataclass(frozen=True)
class ProjectStatus:
    phase: ProjectPhase
    message: str

    @property
    def status(self) -> str:
        return WIRE_STATUS[self.phase]

    @property
    def is_submitted(self) -> bool:
        return self.phase is ProjectPhase.SUBMITTED


def _zone(timezone_name: Optional[str]):
    try:
        return pytz.timezone(timezone_name or "UTC")
    except pytz.UnknownTimeZoneError:
        logger.warning(f"Unknown project timezone {timezone_name!r}, rendering in UTC")
        return pytz.utc


def format_datetime(value: datetime, timezone_name: Optional[str] = None) -> str:
    """Render e.g. "Nov 5, 2025, 02:30 PM" in the project's timezone"""
    local = as_utc(value).astimezone(_zone(timezone_name))
    return f"{local:%b} {local.day}, {local.year}, {local:%I:%M %p}"


def format_date(value: datetime, timezone_name: Optional[str] = None) -> str:
    """Render e.g. "Nov 5, 2025" in the project's timezone"""
    local = as_utc(value).astimezone(_zone(timezone_name))
    return f"{local:%b} {local.day}, {local.year}"


def derive_project_status(
    now: datetime,
    submission_start: Optional[datetime],
    submission_end: Optional[datetime],
    has_submitted: bool,
    submitted_at: Optional[datetime] = None,
    timezone_name: str = "UTC",
) -> ProjectStatus:
    """
    Compute the status and message shown to a student for a project.

    A submission overrides the window entirely. Otherwise the project is
    waiting before its start, closed after its end and open in between (or
    when a bound is absent).

    Args:
        now: Current instant; naive values are taken as UTC
        submission_start: Window start or None for unbounded
        submission_end: Window end or None for unbounded
        has_submitted: Whether a Submission exists for (student, project)
        submitted_at: Timestamp of that submission
        timezone_name: IANA zone the messages are rendered in

    Returns:
        ProjectStatus with phase, wire status and message
    """
    now = as_utc(now)

    if has_submitted:
        if submitted_at is not None:
            message = f"Submitted on {format_datetime(submitted_at, timezone_name)}"
        else:
            message = "Submitted"
        return ProjectStatus(ProjectPhase.SUBMITTED, message)

    if submission_start is not None and now < as_utc(submission_start):
        return ProjectStatus(
            ProjectPhase.WAITING,
            f"Opens on {format_datetime(submission_start, timezone_name)}",
        )

    if submission_end is not None and now > as_utc(submission_end):
        return ProjectStatus(
            ProjectPhase.CLOSED,
            f"Closed on {format_date(submission_end, timezone_name)}",
        )

    if submission_end is not None:
        return ProjectStatus(
            ProjectPhase.OPEN,
            f"Open until {format_datetime(submission_end, timezone_name)}",
        )
    return ProjectStatus(ProjectPhase.OPEN, "Open for enrollment")
