"""Enrollment records, their persistence, and pending enrollment tracking."""

from .models import EnrolledUser
from .pending import PendingEnrollment, PendingEnrollments
from .repository import EnrollmentRepository
from .store import EnrollmentStore

__all__ = [
    "EnrolledUser",
    "EnrollmentRepository",
    "EnrollmentStore",
    "PendingEnrollment",
    "PendingEnrollments",
]
