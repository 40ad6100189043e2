"""Core data model, error taxonomy and session state."""

from .errors import (
    AuthError,
    DuplicateApplication,
    InvalidTransition,
    NotFound,
    PortalError,
    TransportError,
    ValidationError,
)
from .models import (
    AnalyticsSummary,
    ApplicantStats,
    Application,
    ApplicationStatus,
    Job,
    JobDraft,
    JobStatus,
    Resume,
    User,
    UserRole,
)
from .session import FileSessionStorage, MemorySessionStorage, Session, SessionStore

__all__ = [
    "AuthError",
    "DuplicateApplication",
    "InvalidTransition",
    "NotFound",
    "PortalError",
    "TransportError",
    "ValidationError",
    "AnalyticsSummary",
    "ApplicantStats",
    "Application",
    "ApplicationStatus",
    "Job",
    "JobDraft",
    "JobStatus",
    "Resume",
    "User",
    "UserRole",
    "FileSessionStorage",
    "MemorySessionStorage",
    "Session",
    "SessionStore",
]
