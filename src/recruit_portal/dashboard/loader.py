"""Role-based dashboard loading with all-or-nothing load cycles."""

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Dict, Generic, List, Optional, TypeVar, Union

from recruit_portal.analytics.aggregator import applicant_counts, applicant_stats, summarize
from recruit_portal.applications.lifecycle import LifecycleEngine
from recruit_portal.core.errors import AuthError, NotFound, PortalError
from recruit_portal.core.models import (
    AnalyticsSummary,
    ApplicantStats,
    Application,
    Job,
    JobDraft,
    Resume,
    User,
    UserRole,
)
from recruit_portal.core.session import SessionStore
from recruit_portal.gateway.client import GatewayResult, ResourceGateway
from recruit_portal.ranking.view import CandidateRankingView
from recruit_portal.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ResourceState(str, Enum):
    """Load state of one resource in a snapshot."""
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class Resource(Generic[T]):
    """A fetched resource, or the reason it could not be fetched."""
    state: ResourceState
    data: Optional[T] = None
    error: Optional[PortalError] = None

    @classmethod
    def from_result(cls, result: GatewayResult[T]) -> "Resource[T]":
        if result.success:
            return cls(state=ResourceState.LOADED, data=result.data)
        return cls(state=ResourceState.FAILED, error=result.error)

    @property
    def loaded(self) -> bool:
        return self.state == ResourceState.LOADED

    @property
    def failed(self) -> bool:
        return self.state == ResourceState.FAILED


@dataclass(frozen=True)
class ApplicantSnapshot:
    """Everything the applicant dashboard shows for one load cycle."""
    user: User
    resumes: Resource[List[Resume]]
    applications: Resource[List[Application]]

    @property
    def role(self) -> UserRole:
        return UserRole.APPLICANT

    @property
    def complete(self) -> bool:
        return self.resumes.loaded and self.applications.loaded

    @property
    def stats(self) -> Optional[ApplicantStats]:
        """Counters, only when both collections loaded."""
        if not self.complete:
            return None
        return applicant_stats(self.resumes.data, self.applications.data)


@dataclass(frozen=True)
class HRSnapshot:
    """Everything the HR dashboard shows for one load cycle."""
    user: User
    jobs: Resource[List[Job]]
    applications: Resource[List[Application]]
    analytics: Resource[AnalyticsSummary]

    @property
    def role(self) -> UserRole:
        return UserRole.HR

    @property
    def complete(self) -> bool:
        return self.jobs.loaded and self.applications.loaded and self.analytics.loaded

    @property
    def summary(self) -> Optional[AnalyticsSummary]:
        """
        Dashboard summary for this cycle.

        Derived from the cycle's jobs and applications when both loaded,
        otherwise the service's own aggregate, otherwise None.
        """
        if self.jobs.loaded and self.applications.loaded:
            return summarize(self.jobs.data, self.visible_applications)
        if self.analytics.loaded:
            return self.analytics.data
        return None

    @property
    def visible_applications(self) -> List[Application]:
        """Applications whose job is part of this snapshot."""
        if not (self.jobs.loaded and self.applications.loaded):
            return []
        job_ids = {job.id for job in self.jobs.data}
        return [a for a in self.applications.data if a.job_id in job_ids]

    @property
    def applicant_counts(self) -> Dict[str, int]:
        return applicant_counts(self.visible_applications)


Snapshot = Union[ApplicantSnapshot, HRSnapshot]


class DashboardLoader:
    """
    Loads and refreshes one dashboard view.

    Each ``load`` is a load cycle: its fetches run concurrently and the
    snapshot is committed only when all of them have resolved. Results of a
    superseded cycle, or of any cycle after ``close``, are discarded.
    """

    def __init__(self, gateway: ResourceGateway, session: SessionStore):
        self.gateway = gateway
        self.session = session
        self.logger = logger.bind(component="dashboard_loader")

        self.snapshot: Optional[Snapshot] = None
        self.loading = False
        self._cycle = 0
        self._closed = False

        self._loaders: Dict[UserRole, Callable[[User], Awaitable[Snapshot]]] = {
            UserRole.APPLICANT: self._load_applicant,
            UserRole.HR: self._load_hr,
        }

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Leave the view; pending and future results are dropped."""
        self._closed = True
        self.loading = False
        self.logger.debug("Dashboard closed", cycle=self._cycle)

    def _current_user(self) -> User:
        user = self.session.user
        if user is None:
            raise AuthError("Not logged in")
        return user

    def _is_stale(self, cycle: int) -> bool:
        return self._closed or cycle != self._cycle

    async def load(self) -> Optional[Snapshot]:
        """
        Run a load cycle for the logged-in user's role.

        Returns:
            The committed snapshot, or None when the result was discarded

        Raises:
            AuthError: If nobody is logged in
        """
        if self._closed:
            return None

        user = self._current_user()
        self._cycle += 1
        cycle = self._cycle
        self.loading = True

        snapshot = await self._loaders[user.role](user)

        if self._is_stale(cycle):
            self.logger.info("Discarding stale dashboard load", cycle=cycle, current_cycle=self._cycle)
            return None

        self.snapshot = snapshot
        self.loading = False
        self.logger.info(
            "Dashboard loaded",
            role=user.role.value,
            cycle=cycle,
            complete=snapshot.complete
        )
        return snapshot

    async def _load_applicant(self, user: User) -> ApplicantSnapshot:
        resumes, applications = await asyncio.gather(
            self.gateway.list_my_resumes(),
            self.gateway.list_my_applications(),
        )
        return ApplicantSnapshot(
            user=user,
            resumes=Resource.from_result(resumes),
            applications=Resource.from_result(applications),
        )

    async def _load_hr(self, user: User) -> HRSnapshot:
        jobs, applications, analytics = await asyncio.gather(
            self.gateway.list_my_jobs(),
            self.gateway.list_my_applications(),
            self.gateway.get_dashboard_analytics(),
        )
        return HRSnapshot(
            user=user,
            jobs=Resource.from_result(jobs),
            applications=Resource.from_result(applications),
            analytics=Resource.from_result(analytics),
        )

    # ------------------------------------------------------------------
    # HR actions
    # ------------------------------------------------------------------

    async def refresh_analytics(self) -> Optional[HRSnapshot]:
        """
        Re-fetch the inputs of the analytics summary after a mutation.

        The new applications and service aggregate replace the old ones
        together; a discarded cycle leaves the snapshot untouched.
        """
        if self._closed or not isinstance(self.snapshot, HRSnapshot):
            return None

        cycle = self._cycle
        applications, analytics = await asyncio.gather(
            self.gateway.list_my_applications(),
            self.gateway.get_dashboard_analytics(),
        )
        if self._is_stale(cycle) or not isinstance(self.snapshot, HRSnapshot):
            self.logger.info("Discarding stale analytics refresh", cycle=cycle)
            return None

        self.snapshot = replace(
            self.snapshot,
            applications=Resource.from_result(applications),
            analytics=Resource.from_result(analytics),
        )
        return self.snapshot

    def attach(self, engine: LifecycleEngine) -> LifecycleEngine:
        """Refresh analytics after every confirmed status transition."""

        async def on_transition(before: Application, after: Application, actor: User) -> None:
            await self.refresh_analytics()

        engine.add_listener(on_transition)
        return engine

    async def delete_job(self, job_id: str) -> GatewayResult[None]:
        """Delete a job; the dashboard reloads only after server confirmation."""
        result = await self.gateway.delete_job(job_id)
        if result.success:
            await self.load()
        return result

    async def create_job(self, draft: JobDraft) -> GatewayResult[Job]:
        """Post a job; the dashboard reloads only after server confirmation."""
        result = await self.gateway.create_job(draft)
        if result.success:
            await self.load()
        return result

    async def update_job(self, job_id: str, draft: JobDraft) -> GatewayResult[Job]:
        result = await self.gateway.update_job(job_id, draft)
        if result.success:
            await self.load()
        return result

    async def candidate_view(self, job_id: str) -> CandidateRankingView:
        """
        Ranking view for one of the HR user's jobs.

        Uses the current snapshot when it holds both collections, otherwise
        loads a fresh one.

        Raises:
            NotFound: If the job is not among the user's jobs
            PortalError: If jobs or applications could not be fetched
        """
        snapshot = self.snapshot
        if not (isinstance(snapshot, HRSnapshot) and snapshot.jobs.loaded and snapshot.applications.loaded):
            snapshot = await self.load()
        if snapshot is None:
            raise PortalError("Dashboard is closed")
        if not isinstance(snapshot, HRSnapshot):
            raise AuthError("Candidate rankings are only available to HR users")
        for resource in (snapshot.jobs, snapshot.applications):
            if resource.failed:
                raise resource.error

        job = next((job for job in snapshot.jobs.data if job.id == job_id), None)
        if job is None:
            raise NotFound("job", job_id)

        engine = self.attach(LifecycleEngine(snapshot.jobs.data))
        return CandidateRankingView(job, snapshot.applications.data, engine=engine)

    # ------------------------------------------------------------------
    # Applicant actions
    # ------------------------------------------------------------------

    async def apply_to_job(self, job_id: str, resume_id: str) -> GatewayResult[Application]:
        """Submit an application; applications are re-fetched on success."""
        existing: List[Application] = []
        if isinstance(self.snapshot, ApplicantSnapshot) and self.snapshot.applications.loaded:
            existing = self.snapshot.applications.data

        result = await self.gateway.create_application(job_id, resume_id, existing=existing)
        if result.success:
            await self.load()
        return result

    async def upload_resume(self, file_path: Union[str, Path]) -> GatewayResult[Resume]:
        result = await self.gateway.create_resume(file_path)
        if result.success:
            await self.load()
        return result

    async def delete_resume(self, resume_id: str) -> GatewayResult[None]:
        result = await self.gateway.delete_resume(resume_id)
        if result.success:
            await self.load()
        return result

    async def withdraw_application(self, application_id: str) -> GatewayResult[None]:
        """Withdraw an application; applications are re-fetched on success."""
        result = await self.gateway.delete_application(application_id)
        if result.success:
            await self.load()
        return result
