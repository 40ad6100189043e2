"""Candidate ranking for HR review of a single job."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from recruit_portal.applications.lifecycle import LifecycleEngine
from recruit_portal.core.errors import NotFound
from recruit_portal.core.models import Application, ApplicationStatus, Job, Resume, User
from recruit_portal.gateway.client import ResourceGateway
from recruit_portal.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ResumeDisplay:
    """Resume-derived data shown next to a ranked candidate."""
    resume_id: str
    file_name: str
    skills: Tuple[str, ...]
    matched_skills: Tuple[str, ...]
    missing_skills: Tuple[str, ...]


@dataclass(frozen=True)
class RankedCandidate:
    """One row of the ranking."""
    rank: int
    application: Application
    resume: Optional[ResumeDisplay] = None


def ranking_key(application: Application) -> Tuple[float, object]:
    """Score descending, then earlier applications first."""
    return (-application.match_score, application.created_at)


def rank_applications(applications: Iterable[Application]) -> List[Application]:
    """
    Order applications for review.

    ``sorted`` is stable, so applications with the same score and timestamp
    keep their order from the source collection.
    """
    return sorted(applications, key=ranking_key)


def resume_display(resume: Resume, job: Job) -> ResumeDisplay:
    """Compare a resume's extracted skills with the job's required skills."""
    have = {skill.strip().lower() for skill in resume.skills}
    matched = tuple(skill for skill in job.required_skills if skill.strip().lower() in have)
    missing = tuple(skill for skill in job.required_skills if skill.strip().lower() not in have)
    return ResumeDisplay(
        resume_id=resume.id,
        file_name=resume.file_name,
        skills=tuple(resume.skills),
        matched_skills=matched,
        missing_skills=missing,
    )


class CandidateRankingView:
    """
    Ranked applications of one job.

    The view never edits statuses itself; ``request_status_change`` goes
    through the lifecycle engine and the local copy is replaced only with
    the server-confirmed application.
    """

    def __init__(
        self,
        job: Job,
        applications: Iterable[Application],
        resumes: Iterable[Resume] = (),
        engine: Optional[LifecycleEngine] = None
    ):
        self.job = job
        self.engine = engine or LifecycleEngine([job])
        self.logger = logger.bind(component="candidate_ranking", job_id=job.id)

        # Applications of other jobs are dropped: their job is not this view's
        self._applications: List[Application] = [
            application for application in applications if application.job_id == job.id
        ]
        self._resumes: Dict[str, Resume] = {resume.id: resume for resume in resumes}

    @property
    def applications(self) -> Tuple[Application, ...]:
        return tuple(self._applications)

    def candidates(self) -> List[RankedCandidate]:
        """Ranked candidates with their resume display data."""
        ranked = []
        for position, application in enumerate(rank_applications(self._applications), start=1):
            resume = self._resumes.get(application.resume_id) or application.resume
            ranked.append(RankedCandidate(
                rank=position,
                application=application,
                resume=resume_display(resume, self.job) if resume else None,
            ))
        return ranked

    def filter(self, status: Union[ApplicationStatus, str]) -> List[RankedCandidate]:
        """Ranked candidates in one status; ranks refer to the full ranking."""
        status = ApplicationStatus(status)
        return [c for c in self.candidates() if c.application.status == status]

    async def request_status_change(
        self,
        application_id: str,
        new_status: Union[ApplicationStatus, str],
        actor: User,
        gateway: ResourceGateway
    ) -> Application:
        """
        Route a status change through the lifecycle engine.

        Raises:
            NotFound: If the application is not part of this view
            InvalidTransition: If the change is not allowed
            PortalError: If the service did not confirm the change
        """
        for index, application in enumerate(self._applications):
            if application.id == application_id:
                break
        else:
            raise NotFound("application", application_id)

        confirmed = await self.engine.apply(application, new_status, actor, gateway)
        self._applications[index] = confirmed

        self.logger.info(
            "Candidate status updated",
            application_id=application_id,
            status=confirmed.status.value
        )
        return confirmed
