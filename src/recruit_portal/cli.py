"""Command-line interface for Recruit Portal."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from recruit_portal.config import settings
from recruit_portal.core.errors import AuthError, NotFound, PortalError
from recruit_portal.core.models import ApplicationStatus, JobDraft, JobStatus, UserRole
from recruit_portal.core.session import FileSessionStorage, SessionStore
from recruit_portal.dashboard.loader import DashboardLoader, HRSnapshot
from recruit_portal.dashboard.render import render_candidates, render_dashboard
from recruit_portal.gateway.client import GatewayResult, ResourceGateway
from recruit_portal.gateway.reports import save_report
from recruit_portal.utils.logging import configure_logging

app = typer.Typer(
    name="recruit",
    help="Recruit Portal - resume screening and job matching client",
    add_completion=False,
)
console = Console()


@app.callback()
def main_callback(
    log_level: Optional[str] = typer.Option(None, help="Override the configured log level"),
) -> None:
    configure_logging(level=log_level)


def create_session_store() -> SessionStore:
    store = SessionStore(FileSessionStorage(settings.session_file))
    store.init()
    return store


@asynccontextmanager
async def open_gateway() -> AsyncIterator[Tuple[SessionStore, ResourceGateway]]:
    store = create_session_store()
    gateway = ResourceGateway(
        settings.api_base_url,
        store,
        timeout=settings.request_timeout,
        anon_key=settings.anon_key,
        auth_token_url=settings.resolved_auth_token_url,
        min_password_length=settings.min_password_length,
    )
    async with gateway:
        yield store, gateway


def fail(error: PortalError) -> None:
    console.print(f"[red]{error.message}[/red]")
    raise typer.Exit(code=1)


def check(result: GatewayResult):
    if not result.success:
        fail(result.error)
    return result.data


def require_login(store: SessionStore) -> None:
    if not store.is_authenticated:
        fail(AuthError("Not logged in. Run 'recruit login' first."))


def parse_skills(text: str) -> List[str]:
    return [skill.strip() for skill in text.split(",") if skill.strip()]


@app.command()
def login(
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Account password"),
) -> None:
    """Sign in and persist the session."""

    async def run() -> None:
        async with open_gateway() as (_, gateway):
            session = check(await gateway.sign_in(email, password))
            console.print(f"✅ Logged in as {session.user.display_name} ({session.user.role.value})")

    asyncio.run(run())


@app.command()
def register(
    name: str = typer.Option(..., prompt=True, help="Full name"),
    email: str = typer.Option(..., prompt=True, help="Account email"),
    role: UserRole = typer.Option(UserRole.APPLICANT, help="Account role"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Password"),
    confirm_password: str = typer.Option(..., prompt="Confirm password", hide_input=True),
) -> None:
    """Create an account and sign in."""

    async def run() -> None:
        async with open_gateway() as (_, gateway):
            session = check(await gateway.register(name, email, password, confirm_password, role))
            console.print(f"✅ Account created. Signed in as {session.user.display_name}")

    asyncio.run(run())


@app.command()
def logout() -> None:
    """Clear the stored session."""
    create_session_store().teardown()
    console.print("Logged out")


@app.command()
def whoami() -> None:
    """Show the logged-in user."""
    store = create_session_store()
    require_login(store)
    user = store.user
    console.print(f"{user.display_name} <{user.email}> - {user.role.value}")


@app.command()
def dashboard() -> None:
    """Show the dashboard for the logged-in user's role."""

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            loader = DashboardLoader(gateway, store)
            try:
                with console.status("Loading dashboard..."):
                    snapshot = await loader.load()
            finally:
                loader.close()
            if snapshot is not None:
                render_dashboard(snapshot, console)

    asyncio.run(run())


@app.command()
def rank(
    job_id: str = typer.Argument(..., help="Job to rank candidates for"),
    status: Optional[ApplicationStatus] = typer.Option(None, help="Only show candidates in this status"),
) -> None:
    """Rank a job's candidates by match score."""

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            loader = DashboardLoader(gateway, store)
            try:
                view = await loader.candidate_view(job_id)
            except PortalError as e:
                fail(e)
            finally:
                loader.close()
            candidates = view.filter(status) if status else view.candidates()
            render_candidates(view.job, candidates, console)

    asyncio.run(run())


@app.command("set-status")
def set_status(
    application_id: str = typer.Argument(..., help="Application to update"),
    status: ApplicationStatus = typer.Argument(..., help="New status"),
) -> None:
    """Move an application to its next status."""

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            loader = DashboardLoader(gateway, store)
            try:
                snapshot = await loader.load()
                if not isinstance(snapshot, HRSnapshot):
                    raise AuthError("Only HR users can change application status")
                if snapshot.applications.failed:
                    raise snapshot.applications.error
                application = next(
                    (a for a in snapshot.applications.data if a.id == application_id), None
                )
                if application is None:
                    raise NotFound("application", application_id)

                view = await loader.candidate_view(application.job_id)
                confirmed = await view.request_status_change(application_id, status, store.user, gateway)
            except PortalError as e:
                fail(e)
            finally:
                loader.close()
            console.print(f"✅ Application {confirmed.id} is now {confirmed.status.value}")

    asyncio.run(run())


@app.command("delete-job")
def delete_job(
    job_id: str = typer.Argument(..., help="Job to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete one of your job postings."""
    if not yes and not typer.confirm("Are you sure you want to delete this job posting?"):
        raise typer.Abort()

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            check(await gateway.delete_job(job_id))
            console.print(f"🗑️  Job {job_id} deleted")

    asyncio.run(run())


@app.command("create-job")
def create_job(
    title: str = typer.Option(..., prompt=True, help="Job title"),
    description: str = typer.Option("", help="Job description"),
    job_type: str = typer.Option("full-time", "--type", help="Employment type"),
    location: str = typer.Option("", help="Job location"),
    experience_level: str = typer.Option("", help="Required experience level"),
    skills: str = typer.Option("", help="Required skills, comma-separated"),
) -> None:
    """Post a new job."""
    draft = JobDraft(
        title=title,
        description=description,
        type=job_type,
        location=location,
        experience_level=experience_level,
        required_skills=parse_skills(skills),
    )

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            loader = DashboardLoader(gateway, store)
            try:
                job = check(await loader.create_job(draft))
            finally:
                loader.close()
            console.print(f"✅ Job posted: {job.title} ({job.id})")

    asyncio.run(run())


@app.command("edit-job")
def edit_job(
    job_id: str = typer.Argument(..., help="Job to edit"),
    title: Optional[str] = typer.Option(None, help="Job title"),
    description: Optional[str] = typer.Option(None, help="Job description"),
    job_type: Optional[str] = typer.Option(None, "--type", help="Employment type"),
    location: Optional[str] = typer.Option(None, help="Job location"),
    experience_level: Optional[str] = typer.Option(None, help="Required experience level"),
    skills: Optional[str] = typer.Option(None, help="Required skills, comma-separated"),
    status: Optional[JobStatus] = typer.Option(None, help="Posting status"),
) -> None:
    """Edit one of your job postings; unset options keep their value."""
    changes = {
        "title": title,
        "description": description,
        "type": job_type,
        "location": location,
        "experience_level": experience_level,
        "required_skills": parse_skills(skills) if skills is not None else None,
        "status": status,
    }

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            loader = DashboardLoader(gateway, store)
            try:
                snapshot = await loader.load()
                if not isinstance(snapshot, HRSnapshot):
                    raise AuthError("Only HR users can edit job postings")
                if snapshot.jobs.failed:
                    raise snapshot.jobs.error
                job = next((j for j in snapshot.jobs.data if j.id == job_id), None)
                if job is None:
                    raise NotFound("job", job_id)

                draft = JobDraft.model_validate(job.model_dump(include=set(JobDraft.model_fields)))
                draft = draft.model_copy(update={k: v for k, v in changes.items() if v is not None})
                updated = check(await loader.update_job(job_id, draft))
            except PortalError as e:
                fail(e)
            finally:
                loader.close()
            console.print(f"✅ Job updated: {updated.title} ({updated.id})")

    asyncio.run(run())


@app.command("export-report")
def export_report(
    job_id: str = typer.Argument(..., help="Job to export"),
    output_dir: str = typer.Option(settings.reports_dir, help="Directory for the CSV file"),
) -> None:
    """Download a job's candidate report as CSV."""

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            csv_text = check(await gateway.export_report(job_id))
            path = save_report(csv_text, job_id, output_dir)
            console.print(f"📄 Report saved to {path}")

    asyncio.run(run())


@app.command("upload-resume")
def upload_resume(path: str = typer.Argument(..., help="Resume file (PDF, DOCX)")) -> None:
    """Upload a resume for skill extraction."""

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            resume = check(await gateway.create_resume(path))
            console.print(f"✅ Uploaded {resume.file_name} ({len(resume.skills)} skills extracted)")

    asyncio.run(run())


@app.command("delete-resume")
def delete_resume(
    resume_id: str = typer.Argument(..., help="Resume to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete one of your resumes."""
    if not yes and not typer.confirm("Are you sure you want to delete this resume?"):
        raise typer.Abort()

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            loader = DashboardLoader(gateway, store)
            try:
                check(await loader.delete_resume(resume_id))
            finally:
                loader.close()
            console.print(f"🗑️  Resume {resume_id} deleted")

    asyncio.run(run())


@app.command()
def withdraw(
    application_id: str = typer.Argument(..., help="Application to withdraw"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Withdraw one of your applications."""
    if not yes and not typer.confirm("Are you sure you want to withdraw this application?"):
        raise typer.Abort()

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            loader = DashboardLoader(gateway, store)
            try:
                check(await loader.withdraw_application(application_id))
            finally:
                loader.close()
            console.print(f"Application {application_id} withdrawn")

    asyncio.run(run())


@app.command()
def apply(
    job_id: str = typer.Argument(..., help="Job to apply to"),
    resume_id: str = typer.Argument(..., help="Resume to submit"),
) -> None:
    """Apply to a job with one of your resumes."""

    async def run() -> None:
        async with open_gateway() as (store, gateway):
            require_login(store)
            loader = DashboardLoader(gateway, store)
            try:
                await loader.load()
                application = check(await loader.apply_to_job(job_id, resume_id))
            finally:
                loader.close()
            console.print(
                f"✅ Applied to {application.job_title or job_id} "
                f"(match score {application.match_score:.0f}%)"
            )

    asyncio.run(run())


@app.command()
def config() -> None:
    """Show current configuration."""
    table = Table(title="Recruit Portal Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    # Show non-sensitive settings
    table.add_row("API Base URL", settings.api_base_url)
    table.add_row("Auth Token URL", settings.resolved_auth_token_url)
    table.add_row("Anon Key", "configured" if settings.anon_key else "not set")
    table.add_row("Session File", settings.session_file)
    table.add_row("Reports Directory", settings.reports_dir)
    table.add_row("Request Timeout", f"{settings.request_timeout}s")
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Log Level", settings.log_level)

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from recruit_portal import __version__
    console.print(f"Recruit Portal v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
