"""Property-based tests for the application lifecycle engine."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from hypothesis import given, settings, strategies as st

from recruit_portal.applications.lifecycle import (
    INITIAL_STATUS,
    TERMINAL_STATUSES,
    TRANSITIONS,
    LifecycleEngine,
    allowed_transitions,
    can_transition,
    ensure_unique_application,
    is_terminal,
    list_by_status,
    new_application,
)
from recruit_portal.core.errors import DuplicateApplication, InvalidTransition, NotFound, TransportError
from recruit_portal.core.models import Application, ApplicationStatus, Job, User, UserRole
from recruit_portal.gateway.client import GatewayResult, ResourceGateway


HR_OWNER = User(id="hr-1", email="owner@corp.test", name="Owner", role=UserRole.HR)
OTHER_HR = User(id="hr-2", email="other@corp.test", name="Other", role=UserRole.HR)
APPLICANT = User(id="u-1", email="seeker@mail.test", name="Seeker", role=UserRole.APPLICANT)

JOB = Job(id="job-1", hr_id=HR_OWNER.id, title="Backend Engineer", required_skills=["Python", "SQL"])


def make_application(status=ApplicationStatus.APPLIED, app_id="app-1", job_id=JOB.id, applicant_id="u-1"):
    return Application(
        id=app_id,
        job_id=job_id,
        applicant_id=applicant_id,
        resume_id="res-1",
        match_score=72.5,
        status=status,
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


def confirming_gateway():
    """Gateway whose status updates are always confirmed by the service."""
    gateway = AsyncMock(spec=ResourceGateway)

    async def update_application(application_id, status):
        return GatewayResult.ok(make_application(status=status, app_id=application_id))

    gateway.update_application.side_effect = update_application
    return gateway


@st.composite
def application_strategy(draw):
    """Generate applications spread over a few jobs and applicants."""
    return Application(
        id=draw(st.sampled_from(["a1", "a2", "a3", "a4", "a5", "a6"])),
        job_id=draw(st.sampled_from(["j1", "j2", "j3"])),
        applicant_id=draw(st.sampled_from(["u1", "u2", "u3"])),
        resume_id="r1",
        match_score=draw(st.floats(min_value=0.0, max_value=100.0, allow_nan=False)),
        status=draw(st.sampled_from(list(ApplicationStatus))),
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


class TestTransitionTableProperties:
    """Property tests for the status transition table."""

    def test_table_covers_every_status(self):
        assert set(TRANSITIONS) == set(ApplicationStatus)

    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {ApplicationStatus.REJECTED, ApplicationStatus.HIRED}
        assert INITIAL_STATUS == ApplicationStatus.APPLIED

    def test_forward_path(self):
        assert can_transition(ApplicationStatus.APPLIED, ApplicationStatus.UNDER_REVIEW)
        assert can_transition(ApplicationStatus.UNDER_REVIEW, ApplicationStatus.SHORTLISTED)
        assert can_transition(ApplicationStatus.UNDER_REVIEW, ApplicationStatus.REJECTED)
        assert can_transition(ApplicationStatus.SHORTLISTED, ApplicationStatus.HIRED)

    def test_no_skipping_or_reversal(self):
        assert not can_transition(ApplicationStatus.APPLIED, ApplicationStatus.SHORTLISTED)
        assert not can_transition(ApplicationStatus.APPLIED, ApplicationStatus.HIRED)
        assert not can_transition(ApplicationStatus.SHORTLISTED, ApplicationStatus.UNDER_REVIEW)
        assert not can_transition(ApplicationStatus.SHORTLISTED, ApplicationStatus.REJECTED)

    @given(
        current=st.sampled_from(list(ApplicationStatus)),
        requested=st.sampled_from(list(ApplicationStatus)),
    )
    @settings(max_examples=50, deadline=None)
    @pytest.mark.property
    def test_engine_agrees_with_table(self, current, requested):
        """
        Property 1: An HR owner's transition succeeds exactly when the table allows it.
        """
        engine = LifecycleEngine([JOB])
        application = make_application(status=current)

        if requested in allowed_transitions(current):
            updated = engine.transition(application, requested, HR_OWNER)
            assert updated.status == requested
            assert application.status == current, "Input application must not be modified"
            assert updated.match_score == application.match_score
        else:
            with pytest.raises(InvalidTransition) as exc_info:
                engine.transition(application, requested, HR_OWNER)
            assert exc_info.value.current == current
            assert exc_info.value.requested == requested

    @given(current=st.sampled_from(sorted(TERMINAL_STATUSES)), requested=st.sampled_from(list(ApplicationStatus)))
    @settings(max_examples=20, deadline=None)
    @pytest.mark.property
    def test_terminal_statuses_never_move(self, current, requested):
        """
        Property 2: Nothing leaves rejected or hired.
        """
        assert is_terminal(current)
        with pytest.raises(InvalidTransition) as exc_info:
            LifecycleEngine([JOB]).transition(make_application(status=current), requested, HR_OWNER)
        assert exc_info.value.reason == "status is terminal"


class TestTransitionAuthorization:
    """Tests for who may change an application's status."""

    def test_applicant_cannot_transition(self):
        engine = LifecycleEngine([JOB])
        with pytest.raises(InvalidTransition) as exc_info:
            engine.transition(make_application(), ApplicationStatus.UNDER_REVIEW, APPLICANT)
        assert "only HR users" in exc_info.value.reason

    def test_non_owner_hr_cannot_transition(self):
        engine = LifecycleEngine([JOB])
        with pytest.raises(InvalidTransition) as exc_info:
            engine.transition(make_application(), ApplicationStatus.UNDER_REVIEW, OTHER_HR)
        assert "does not own" in exc_info.value.reason

    def test_unknown_job_is_not_found(self):
        engine = LifecycleEngine([JOB])
        with pytest.raises(NotFound):
            engine.transition(make_application(job_id="missing"), ApplicationStatus.UNDER_REVIEW, HR_OWNER)

    def test_unknown_status_rejected(self):
        engine = LifecycleEngine([JOB])
        with pytest.raises(InvalidTransition) as exc_info:
            engine.transition(make_application(), "interviewing", HR_OWNER)
        assert exc_info.value.reason == "unknown status"

    def test_status_given_as_string(self):
        engine = LifecycleEngine([JOB])
        updated = engine.transition(make_application(), "under_review", HR_OWNER)
        assert updated.status == ApplicationStatus.UNDER_REVIEW

    def test_update_jobs_replaces_collection(self):
        engine = LifecycleEngine([JOB])
        engine.update_jobs([])
        with pytest.raises(NotFound):
            engine.resolve_job(make_application())


class TestApplyProperties:
    """Tests for persisting transitions through the gateway."""

    def test_apply_returns_confirmed_application(self):
        async def run_test():
            engine = LifecycleEngine([JOB])
            gateway = confirming_gateway()
            application = make_application(status=ApplicationStatus.UNDER_REVIEW)

            confirmed = await engine.apply(application, ApplicationStatus.SHORTLISTED, HR_OWNER, gateway)

            assert confirmed.status == ApplicationStatus.SHORTLISTED
            gateway.update_application.assert_awaited_once_with("app-1", ApplicationStatus.SHORTLISTED)

        asyncio.run(run_test())

    def test_invalid_transition_never_reaches_gateway(self):
        async def run_test():
            engine = LifecycleEngine([JOB])
            gateway = confirming_gateway()

            with pytest.raises(InvalidTransition):
                await engine.apply(make_application(), ApplicationStatus.HIRED, HR_OWNER, gateway)
            gateway.update_application.assert_not_awaited()

        asyncio.run(run_test())

    def test_unconfirmed_change_raises_and_skips_listeners(self):
        async def run_test():
            engine = LifecycleEngine([JOB])
            listener = AsyncMock()
            engine.add_listener(listener)

            gateway = AsyncMock(spec=ResourceGateway)
            gateway.update_application.return_value = GatewayResult.fail(TransportError("Network error"))

            with pytest.raises(TransportError):
                await engine.apply(make_application(), ApplicationStatus.UNDER_REVIEW, HR_OWNER, gateway)
            listener.assert_not_awaited()

        asyncio.run(run_test())

    def test_listeners_fire_after_confirmation(self):
        async def run_test():
            engine = LifecycleEngine([JOB])
            seen = []

            def sync_listener(before, after, actor):
                seen.append(("sync", before.status, after.status, actor.id))

            async def async_listener(before, after, actor):
                seen.append(("async", before.status, after.status, actor.id))

            engine.add_listener(sync_listener)
            engine.add_listener(async_listener)

            await engine.apply(make_application(), ApplicationStatus.UNDER_REVIEW, HR_OWNER, confirming_gateway())

            expected = (ApplicationStatus.APPLIED, ApplicationStatus.UNDER_REVIEW, HR_OWNER.id)
            assert seen == [("sync",) + expected, ("async",) + expected]

        asyncio.run(run_test())


class TestApplicationCollectionProperties:
    """Property tests for application collections."""

    @given(
        applications=st.lists(application_strategy(), max_size=20),
        status=st.sampled_from(list(ApplicationStatus)),
    )
    @settings(max_examples=50, deadline=None)
    @pytest.mark.property
    def test_list_by_status_counts_each_application_once(self, applications, status):
        """
        Property 3: Listing by status yields distinct ids, all in the requested status.
        """
        listed = list_by_status(applications, status)
        ids = [a.id for a in listed]

        assert len(ids) == len(set(ids)), "Each application must appear at most once"
        assert all(a.status == status for a in listed)

        expected_ids = {a.id for a in applications if a.status == status}
        assert set(ids) == expected_ids

    def test_list_by_status_with_repeated_entries(self):
        application = make_application(status=ApplicationStatus.SHORTLISTED)
        assert list_by_status([application, application], ApplicationStatus.SHORTLISTED) == [application]

    @given(applications=st.lists(application_strategy(), max_size=20))
    @settings(max_examples=50, deadline=None)
    @pytest.mark.property
    def test_duplicate_pair_rejected(self, applications):
        """
        Property 4: A second application for an existing (job, applicant) pair is rejected.
        """
        pairs = {(a.job_id, a.applicant_id) for a in applications}
        for job_id in ["j1", "j2", "j3"]:
            for applicant_id in ["u1", "u2", "u3"]:
                if (job_id, applicant_id) in pairs:
                    with pytest.raises(DuplicateApplication):
                        ensure_unique_application(applications, job_id, applicant_id)
                else:
                    ensure_unique_application(applications, job_id, applicant_id)

    def test_new_application_starts_applied(self):
        application = new_application("a1", "j1", "u1", "r1", 88.0, job_title="Backend Engineer")
        assert application.status == ApplicationStatus.APPLIED
        assert application.created_at.tzinfo is not None
        assert application.job_title == "Backend Engineer"
