"""Core data models shared between the client and the screening service."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class UserRole(str, Enum):
    """Closed set of actor roles."""
    APPLICANT = "applicant"
    HR = "hr"


class JobStatus(str, Enum):
    """Job posting status."""
    ACTIVE = "active"
    CLOSED = "closed"


class ApplicationStatus(str, Enum):
    """Lifecycle stage of a single application."""
    APPLIED = "applied"
    UNDER_REVIEW = "under_review"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"
    HIRED = "hired"


def empty_status_counts() -> Dict[ApplicationStatus, int]:
    """Status counter with every status present at zero."""
    return {status: 0 for status in ApplicationStatus}


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PortalModel(BaseModel):
    """Base model: snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with the service's field names."""
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class User(PortalModel):
    """Authenticated identity. The role is fixed at registration."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="User identifier")
    email: str = Field("", description="Email address")
    name: str = Field("", description="Display name")
    role: UserRole = Field(UserRole.APPLICANT, description="Actor role")

    @model_validator(mode="before")
    @classmethod
    def lift_user_metadata(cls, data: Any) -> Any:
        # Auth provider payloads keep name and role under user_metadata
        if isinstance(data, dict) and isinstance(data.get("user_metadata"), dict):
            metadata = data["user_metadata"]
            data = {k: v for k, v in data.items() if k != "user_metadata"}
            for key in ("name", "role"):
                if key not in data and metadata.get(key) is not None:
                    data[key] = metadata[key]
        return data

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return "HR Manager" if self.role == UserRole.HR else "User"


class Resume(PortalModel):
    """Uploaded resume with skills extracted by the parsing service."""
    id: str = Field(..., description="Resume identifier")
    user_id: str = Field(..., description="Owning applicant identifier")
    file_name: str = Field("", description="Original file name")
    file_url: Optional[str] = Field(None, description="Uploaded file reference")
    skills: List[str] = Field(default_factory=list, description="Extracted skills")
    uploaded_at: Optional[datetime] = Field(None, description="Upload timestamp")


class JobDraft(PortalModel):
    """Editable fields of a job posting."""
    title: str = Field(..., description="Job title")
    description: str = Field("", description="Job description")
    type: str = Field("full-time", description="Employment type")
    location: str = Field("", description="Job location")
    experience_level: str = Field("", description="Required experience level")
    required_skills: List[str] = Field(default_factory=list, description="Required skills, in order")
    status: JobStatus = Field(JobStatus.ACTIVE, description="Posting status")


class Job(JobDraft):
    """Job posting owned by an HR user."""
    id: str = Field(..., description="Job identifier")
    hr_id: str = Field(..., description="Owning HR user identifier")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    applicant_count: Optional[int] = Field(
        None,
        description="Server-side projection; not authoritative on the client",
    )

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    @property
    def is_active(self) -> bool:
        return self.status == JobStatus.ACTIVE


class Application(PortalModel):
    """Application of one applicant to one job.

    Frozen: status only changes by producing a new value through the
    lifecycle engine, and the match score never changes on the client.
    Score and timestamp come from the service only; an item without them
    does not validate.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Application identifier")
    job_id: str = Field(..., description="Referenced job")
    applicant_id: str = Field(..., description="Applicant identifier")
    resume_id: str = Field(..., description="Resume submitted with the application")
    match_score: float = Field(..., ge=0.0, le=100.0, description="Externally computed match score")
    status: ApplicationStatus = Field(ApplicationStatus.APPLIED, description="Lifecycle status")
    created_at: datetime = Field(..., description="Creation timestamp")

    # Display projections supplied by the service
    applicant_name: Optional[str] = Field(None, description="Applicant display name")
    applicant_email: Optional[str] = Field(None, description="Applicant email")
    job_title: Optional[str] = Field(None, description="Title of the referenced job")
    resume: Optional[Resume] = Field(None, description="Embedded copy of the submitted resume")

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)


class AnalyticsSummary(PortalModel):
    """Derived aggregate over an HR user's jobs and applications."""
    total_jobs: int = Field(0, ge=0)
    active_jobs: int = Field(0, ge=0)
    total_applications: int = Field(0, ge=0)
    avg_match_score: float = Field(0.0)
    status_counts: Dict[ApplicationStatus, int] = Field(default_factory=empty_status_counts)

    @field_validator("status_counts", mode="before")
    @classmethod
    def fill_missing_statuses(cls, value: Any) -> Any:
        counts: Dict[str, Any] = {status.value: 0 for status in ApplicationStatus}
        if isinstance(value, dict):
            for key, count in value.items():
                key = getattr(key, "value", key)
                if key in counts:
                    counts[key] = count or 0
        return counts


class ApplicantStats(PortalModel):
    """Counters shown on the applicant dashboard."""
    total: int = Field(0, ge=0)
    resumes: int = Field(0, ge=0)
    status_counts: Dict[ApplicationStatus, int] = Field(default_factory=empty_status_counts)

    def count(self, status: ApplicationStatus) -> int:
        return self.status_counts.get(status, 0)
