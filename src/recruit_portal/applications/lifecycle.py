"""Application status workflow and the rules for who may change it."""

import inspect
from datetime import datetime, timezone
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Union,
)

from recruit_portal.core.errors import DuplicateApplication, InvalidTransition, NotFound
from recruit_portal.core.models import Application, ApplicationStatus, Job, User, UserRole
from recruit_portal.utils.logging import get_logger

if TYPE_CHECKING:
    from recruit_portal.gateway.client import ResourceGateway

logger = get_logger(__name__)

INITIAL_STATUS = ApplicationStatus.APPLIED

# One-hop transitions. rejected and hired are terminal.
TRANSITIONS: Dict[ApplicationStatus, FrozenSet[ApplicationStatus]] = {
    ApplicationStatus.APPLIED: frozenset({ApplicationStatus.UNDER_REVIEW}),
    ApplicationStatus.UNDER_REVIEW: frozenset({
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.REJECTED,
    }),
    ApplicationStatus.SHORTLISTED: frozenset({ApplicationStatus.HIRED}),
    ApplicationStatus.REJECTED: frozenset(),
    ApplicationStatus.HIRED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[ApplicationStatus] = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)

TransitionListener = Callable[[Application, Application, User], Union[None, Awaitable[None]]]


def allowed_transitions(status: ApplicationStatus) -> FrozenSet[ApplicationStatus]:
    """Statuses reachable from ``status`` in one hop."""
    return TRANSITIONS[ApplicationStatus(status)]


def can_transition(current: ApplicationStatus, requested: ApplicationStatus) -> bool:
    return ApplicationStatus(requested) in allowed_transitions(current)


def is_terminal(status: ApplicationStatus) -> bool:
    return ApplicationStatus(status) in TERMINAL_STATUSES


def list_by_status(applications: Iterable[Application], status: ApplicationStatus) -> List[Application]:
    """Applications in ``status``, each counted once even if repeated in the input."""
    status = ApplicationStatus(status)
    seen = set()
    matching = []
    for application in applications:
        if application.status != status or application.id in seen:
            continue
        seen.add(application.id)
        matching.append(application)
    return matching


def ensure_unique_application(
    applications: Iterable[Application],
    job_id: str,
    applicant_id: str
) -> None:
    """Reject a second application for the same (job, applicant) pair."""
    for application in applications:
        if application.job_id == job_id and application.applicant_id == applicant_id:
            raise DuplicateApplication(job_id=job_id, applicant_id=applicant_id)


def new_application(
    application_id: str,
    job_id: str,
    applicant_id: str,
    resume_id: str,
    match_score: float,
    created_at: Optional[datetime] = None,
    **projections: Any
) -> Application:
    """Build an application in the initial status."""
    return Application(
        id=application_id,
        job_id=job_id,
        applicant_id=applicant_id,
        resume_id=resume_id,
        match_score=match_score,
        status=INITIAL_STATUS,
        created_at=created_at or datetime.now(timezone.utc),
        **projections
    )


class LifecycleEngine:
    """
    State machine governing application status.

    The engine resolves each application's job from the collection it was
    built with, checks that the actor is the HR owner of that job, and only
    allows one-hop moves along ``TRANSITIONS``.
    """

    def __init__(self, jobs: Iterable[Job] = ()):
        self.logger = logger.bind(component="lifecycle_engine")
        self.jobs: Dict[str, Job] = {job.id: job for job in jobs}
        self._listeners: List[TransitionListener] = []

    def update_jobs(self, jobs: Iterable[Job]) -> None:
        """Replace the job collection used to resolve applications."""
        self.jobs = {job.id: job for job in jobs}

    def add_listener(self, listener: TransitionListener) -> None:
        """Register a callback fired after every confirmed transition."""
        self._listeners.append(listener)

    def resolve_job(self, application: Application) -> Job:
        job = self.jobs.get(application.job_id)
        if job is None:
            raise NotFound("job", application.job_id)
        return job

    def transition(
        self,
        application: Application,
        new_status: Union[ApplicationStatus, str],
        actor: User
    ) -> Application:
        """
        Validate a status change and return the updated application.

        Args:
            application: Application to move
            new_status: Requested status
            actor: User requesting the change

        Returns:
            A new Application carrying ``new_status``; the input is untouched

        Raises:
            InvalidTransition: If the actor may not make the change or the
                status is not one hop away
            NotFound: If the application's job cannot be resolved
        """
        current = application.status
        try:
            requested = ApplicationStatus(new_status)
        except ValueError:
            raise InvalidTransition(current, new_status, "unknown status") from None

        job = self.resolve_job(application)

        if actor.role != UserRole.HR:
            raise InvalidTransition(current, requested, "only HR users can change application status")
        if job.hr_id != actor.id:
            raise InvalidTransition(current, requested, f"user {actor.id} does not own job {job.id}")
        if not can_transition(current, requested):
            reason = "status is terminal" if is_terminal(current) else "not reachable in one step"
            raise InvalidTransition(current, requested, reason)

        return application.model_copy(update={"status": requested})

    async def apply(
        self,
        application: Application,
        new_status: Union[ApplicationStatus, str],
        actor: User,
        gateway: "ResourceGateway"
    ) -> Application:
        """
        Validate a transition, persist it and notify listeners.

        The caller's copy is only replaced with the returned value, which is
        the server-confirmed application.

        Raises:
            InvalidTransition, NotFound: From ``transition``
            PortalError: If the service did not confirm the change
        """
        proposed = self.transition(application, new_status, actor)

        self.logger.info(
            "Requesting status change",
            application_id=application.id,
            current=application.status.value,
            requested=proposed.status.value
        )

        result = await gateway.update_application(application.id, proposed.status)
        if not result.success:
            self.logger.error(
                "Status change not confirmed",
                application_id=application.id,
                error=str(result.error)
            )
            raise result.error

        confirmed = result.data or proposed

        for listener in self._listeners:
            outcome = listener(application, confirmed, actor)
            if inspect.isawaitable(outcome):
                await outcome

        self.logger.info(
            "Status change confirmed",
            application_id=application.id,
            status=confirmed.status.value
        )
        return confirmed
