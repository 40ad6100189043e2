"""Terminal renderers for the dashboards, one per role."""

from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from recruit_portal.core.models import ApplicationStatus, Job, UserRole
from recruit_portal.dashboard.loader import ApplicantSnapshot, HRSnapshot, Resource, Snapshot
from recruit_portal.ranking.view import RankedCandidate

STATUS_STYLES = {
    ApplicationStatus.APPLIED: "blue",
    ApplicationStatus.UNDER_REVIEW: "cyan",
    ApplicationStatus.SHORTLISTED: "green",
    ApplicationStatus.REJECTED: "red",
    ApplicationStatus.HIRED: "magenta",
}

MAX_SKILLS_SHOWN = 8


def _status(status: ApplicationStatus) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.value.replace('_', ' ')}[/{style}]"


def _failure(console: Console, label: str, resource: Resource) -> bool:
    if resource.failed:
        console.print(f"[red]Could not load {label}: {resource.error.message}[/red]")
        return True
    return False


def _skills(skills: List[str]) -> str:
    shown = ", ".join(skills[:MAX_SKILLS_SHOWN])
    if len(skills) > MAX_SKILLS_SHOWN:
        shown += f" +{len(skills) - MAX_SKILLS_SHOWN} more"
    return shown


def render_applicant_dashboard(snapshot: ApplicantSnapshot, console: Console) -> None:
    """Job seeker view: counters, applications and resumes."""
    console.print(f"[bold]Job Seeker Portal[/bold] - Welcome, {snapshot.user.display_name}")

    stats = snapshot.stats
    if stats is not None:
        overview = Table(title="Overview")
        overview.add_column("Total Applications", justify="right")
        overview.add_column("Under Review", justify="right")
        overview.add_column("Shortlisted", justify="right")
        overview.add_column("Resumes", justify="right")
        overview.add_row(
            str(stats.total),
            str(stats.count(ApplicationStatus.UNDER_REVIEW)),
            str(stats.count(ApplicationStatus.SHORTLISTED)),
            str(stats.resumes),
        )
        console.print(overview)

    if not _failure(console, "applications", snapshot.applications):
        table = Table(title="My Applications")
        table.add_column("Job")
        table.add_column("Match", justify="right")
        table.add_column("Status")
        table.add_column("Applied")
        unresolved = 0
        for application in snapshot.applications.data:
            # The service embeds the job title; without it the job is gone
            if not application.job_title:
                unresolved += 1
                continue
            table.add_row(
                application.job_title,
                f"{application.match_score:.0f}%",
                _status(application.status),
                application.created_at.strftime("%Y-%m-%d"),
            )
        console.print(table)
        if unresolved:
            console.print(f"[yellow]{unresolved} application(s) hidden: job posting no longer available[/yellow]")

    if not _failure(console, "resumes", snapshot.resumes):
        table = Table(title="Resumes")
        table.add_column("ID")
        table.add_column("File")
        table.add_column("Skills")
        for resume in snapshot.resumes.data:
            table.add_row(resume.id, resume.file_name, _skills(resume.skills))
        console.print(table)


def render_hr_dashboard(snapshot: HRSnapshot, console: Console) -> None:
    """HR view: summary and job postings."""
    console.print(f"[bold]HR Manager Portal[/bold] - Welcome, {snapshot.user.display_name}")

    summary = snapshot.summary
    if summary is not None:
        overview = Table(title="Overview")
        overview.add_column("Total Jobs", justify="right")
        overview.add_column("Applications", justify="right")
        overview.add_column("Avg Match Score", justify="right")
        overview.add_column("Shortlisted", justify="right")
        overview.add_row(
            f"{summary.total_jobs} ({summary.active_jobs} active)",
            str(summary.total_applications),
            f"{summary.avg_match_score:.1f}%",
            str(summary.status_counts[ApplicationStatus.SHORTLISTED]),
        )
        console.print(overview)

        counts = Table(title="Applications by Status")
        for status in ApplicationStatus:
            counts.add_column(status.value.replace("_", " ").title(), justify="right")
        counts.add_row(*(str(summary.status_counts[status]) for status in ApplicationStatus))
        console.print(counts)
    else:
        _failure(console, "analytics", snapshot.analytics)

    _failure(console, "applications", snapshot.applications)
    if _failure(console, "jobs", snapshot.jobs):
        return

    render_jobs(snapshot.jobs.data, console, snapshot.applicant_counts if snapshot.applications.loaded else None)


def render_jobs(jobs: List[Job], console: Console, counts: Optional[Dict[str, int]] = None) -> None:
    if not jobs:
        console.print("No job postings yet")
        return

    table = Table(title="Your Job Postings")
    table.add_column("ID")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("Location")
    table.add_column("Level")
    table.add_column("Applicants", justify="right")
    table.add_column("Status")
    table.add_column("Posted")
    table.add_column("Required Skills")
    for job in jobs:
        applicants = counts.get(job.id, 0) if counts is not None else "-"
        table.add_row(
            job.id,
            job.title,
            job.type,
            job.location,
            job.experience_level,
            str(applicants),
            job.status.value,
            job.created_at.strftime("%Y-%m-%d") if job.created_at else "",
            _skills(job.required_skills),
        )
    console.print(table)


def render_candidates(job: Job, candidates: List[RankedCandidate], console: Console) -> None:
    """Ranked candidates of one job."""
    if not candidates:
        console.print(f"No applications for {job.title} yet")
        return

    table = Table(title=f"Candidate Rankings - {job.title}")
    table.add_column("#", justify="right")
    table.add_column("Application")
    table.add_column("Candidate")
    table.add_column("Match", justify="right")
    table.add_column("Status")
    table.add_column("Matched Skills")
    table.add_column("Missing Skills")
    for candidate in candidates:
        application = candidate.application
        resume = candidate.resume
        table.add_row(
            str(candidate.rank),
            application.id,
            application.applicant_name or application.applicant_email or application.applicant_id,
            f"{application.match_score:.1f}%",
            _status(application.status),
            ", ".join(resume.matched_skills) if resume else "",
            ", ".join(resume.missing_skills) if resume else "",
        )
    console.print(table)


RENDERERS: Dict[UserRole, Callable[[Snapshot, Console], None]] = {
    UserRole.APPLICANT: render_applicant_dashboard,
    UserRole.HR: render_hr_dashboard,
}


def render_dashboard(snapshot: Snapshot, console: Console) -> None:
    """Pick the renderer for the snapshot's role."""
    RENDERERS[snapshot.role](snapshot, console)
