"""Dashboard aggregates derived from job and application collections."""

from collections import Counter
from typing import Dict, Iterable, Sequence

from recruit_portal.core.models import (
    AnalyticsSummary,
    ApplicantStats,
    Application,
    ApplicationStatus,
    Job,
    JobStatus,
    Resume,
    empty_status_counts,
)


def status_counts(applications: Iterable[Application]) -> Dict[ApplicationStatus, int]:
    """Count applications per status. Every status is present, zeros included."""
    counts = empty_status_counts()
    for application in applications:
        counts[application.status] += 1
    return counts


def average_match_score(applications: Sequence[Application]) -> float:
    """Arithmetic mean of match scores; 0 for an empty collection."""
    if not applications:
        return 0.0
    return sum(application.match_score for application in applications) / len(applications)


def summarize(jobs: Sequence[Job], applications: Sequence[Application]) -> AnalyticsSummary:
    """
    Build the HR dashboard summary.

    Args:
        jobs: Jobs owned by the HR user
        applications: Applications across those jobs

    Returns:
        AnalyticsSummary computed from the inputs only
    """
    jobs = list(jobs)
    applications = list(applications)
    return AnalyticsSummary(
        total_jobs=len(jobs),
        active_jobs=sum(1 for job in jobs if job.status == JobStatus.ACTIVE),
        total_applications=len(applications),
        avg_match_score=average_match_score(applications),
        status_counts=status_counts(applications),
    )


def applicant_stats(resumes: Sequence[Resume], applications: Sequence[Application]) -> ApplicantStats:
    """Counters for the applicant dashboard."""
    applications = list(applications)
    return ApplicantStats(
        total=len(applications),
        resumes=len(resumes),
        status_counts=status_counts(applications),
    )


def applicant_counts(applications: Iterable[Application]) -> Dict[str, int]:
    """Applicants per job id, derived locally from the application collection."""
    return dict(Counter(application.job_id for application in applications))
