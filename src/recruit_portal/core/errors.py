"""Error taxonomy shared by the gateway, lifecycle engine and dashboards."""

from typing import Any, Dict, Optional


class PortalError(Exception):
    """Base class for every error the client reports to its caller."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and display."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class AuthError(PortalError):
    """Bad credentials, expired token or no active session."""


class ValidationError(PortalError):
    """Client-side validation failure, raised before any network call."""


class DuplicateApplication(ValidationError):
    """An application for the same (job, applicant) pair already exists."""

    def __init__(
        self,
        job_id: Optional[str] = None,
        applicant_id: Optional[str] = None,
        message: Optional[str] = None,
    ):
        super().__init__(
            message or f"Applicant {applicant_id} has already applied to job {job_id}",
            {"job_id": job_id, "applicant_id": applicant_id},
        )
        self.job_id = job_id
        self.applicant_id = applicant_id


class InvalidTransition(PortalError):
    """Illegal application status change."""

    def __init__(self, current: Any, requested: Any, reason: str = "transition not allowed"):
        current_value = getattr(current, "value", current)
        requested_value = getattr(requested, "value", requested)
        super().__init__(
            f"Cannot move application from '{current_value}' to '{requested_value}': {reason}",
            {"current": current_value, "requested": requested_value, "reason": reason},
        )
        self.current = current
        self.requested = requested
        self.reason = reason


class TransportError(PortalError):
    """Network failure, timeout or unparseable response."""


class NotFound(PortalError):
    """A referenced job, resume or application does not exist."""

    def __init__(self, resource: str, identifier: Optional[str] = None, message: Optional[str] = None):
        if message is None:
            label = resource.capitalize()
            message = f"{label} {identifier} not found" if identifier else f"{label} not found"
        super().__init__(message, {"resource": resource, "identifier": identifier})
        self.resource = resource
        self.identifier = identifier
