# club_selection/core/exceptions.py - Domain errors raised by the enrollment engine
# Each error carries its HTTP status, a stable ``code`` and optional ``extra``
# fields merged into the JSON error body.
from typing import Any, Dict, Optional

from fastapi import status


class EnrollmentError(Exception):
    """Base class for all client-facing enrollment errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "enrollment_error"

    def __init__(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self.message = message
        self.extra = extra or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body = {"detail": self.message, "code": self.code}
        body.update(self.extra)
        return body


class NotFoundError(EnrollmentError):
    """Student, course, project or enrollment is absent or not visible to the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class ForbiddenError(EnrollmentError):
    """Student is not assigned to the project that owns the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class ConflictError(EnrollmentError):
    """Duplicate enrollment or duplicate submission."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


class CapacityExceededError(EnrollmentError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "capacity_exceeded"

    def __init__(self, course_name: str, capacity: int):
        self.course_name = course_name
        self.capacity = capacity
        super().__init__(
            "This course is full",
            extra={"courseName": course_name, "capacity": capacity},
        )


class QuotaViolationError(EnrollmentError):
    """A tag's minimum or maximum course count is not met at submission time."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "quota_violation"

    def __init__(
        self,
        tag_name: str,
        min_required: Optional[int] = None,
        max_allowed: Optional[int] = None,
    ):
        self.tag_name = tag_name
        self.min_required = min_required
        self.max_allowed = max_allowed

        if min_required is not None:
            message = f'You must select at least {min_required} course(s) from "{tag_name}"'
            extra = {"tagName": tag_name, "minRequired": min_required}
        else:
            message = f'You can select at most {max_allowed} course(s) from "{tag_name}"'
            extra = {"tagName": tag_name, "maxAllowed": max_allowed}
        super().__init__(message, extra=extra)


class ValidationError(EnrollmentError):
    """Request data is well-formed but semantically invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"
