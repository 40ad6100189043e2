"""Typed HTTP gateway to the resume-screening and job-matching service."""

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar, Union

import httpx
from jose import JWTError, jwt
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from recruit_portal.applications.lifecycle import ensure_unique_application
from recruit_portal.core.errors import (
    AuthError,
    DuplicateApplication,
    NotFound,
    PortalError,
    TransportError,
    ValidationError,
)
from recruit_portal.core.models import (
    AnalyticsSummary,
    Application,
    ApplicationStatus,
    Job,
    JobDraft,
    Resume,
    User,
    UserRole,
)
from recruit_portal.core.session import Session, SessionStore
from recruit_portal.utils.logging import get_logger, log_request

logger = get_logger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

RESOURCE_NAMES = {
    "resumes": "resume",
    "jobs": "job",
    "applications": "application",
    "reports": "report",
}


@dataclass
class GatewayResult(Generic[T]):
    """Outcome of a gateway call. Failures carry the normalized error."""
    success: bool
    data: Optional[T] = None
    error: Optional[PortalError] = None

    @classmethod
    def ok(cls, data: Optional[T] = None) -> "GatewayResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: PortalError) -> "GatewayResult[T]":
        return cls(success=False, error=error)

    def unwrap(self) -> T:
        """Return the data or raise the error."""
        if not self.success:
            raise self.error
        return self.data


def validate_registration(
    password: str,
    confirm_password: str,
    min_length: int = 6
) -> None:
    """Local password rules, checked before any network call."""
    if password != confirm_password:
        raise ValidationError("Passwords do not match!")
    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters long")



def identity_from_token(
    token: str,
    email: str,
    profile: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build an identity payload for a token-only credential exchange.

    Claims are read without verifying the signature; the service verifies
    the token on every request. An opaque token identifies the user by the
    email that signed in.
    """
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        claims = {}

    identity: Dict[str, Any] = {"id": email, "email": email}
    identity.update({k: v for k, v in (profile or {}).items() if v is not None})
    if claims.get("sub"):
        identity["id"] = claims["sub"]
    if claims.get("email"):
        identity["email"] = claims["email"]
    metadata = claims.get("user_metadata")
    if isinstance(metadata, dict):
        identity.update({k: metadata[k] for k in ("name", "role") if metadata.get(k) is not None})
    return identity


class ResourceGateway:
    """
    Request functions for resumes, jobs, applications, analytics and reports.

    Every call returns a ``GatewayResult``: network, parse, HTTP and
    service-level failures are logged and reported as errors instead of
    being raised. A response without ``success: true`` is a failure even on
    HTTP 2xx, and no data is returned from it.
    """

    def __init__(
        self,
        base_url: str,
        session: SessionStore,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
        anon_key: str = "",
        auth_token_url: Optional[str] = None,
        min_password_length: int = 6
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.anon_key = anon_key
        self.auth_token_url = auth_token_url or f"{self.base_url}/auth/token"
        self.min_password_length = min_password_length
        self.logger = logger.bind(component="resource_gateway")

        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "ResourceGateway":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _auth_headers(self, authenticated: bool) -> Optional[Dict[str, str]]:
        if authenticated:
            token = self.session.token
            if not token:
                return None
            return {"Authorization": f"Bearer {token}"}
        if self.anon_key:
            return {"Authorization": f"Bearer {self.anon_key}", "apikey": self.anon_key}
        return {}

    def _status_error(self, response: httpx.Response, family: str, body: Any = None) -> PortalError:
        """Map an HTTP error status to the error taxonomy."""
        message = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("message")
        message = str(message) if message else f"HTTP {response.status_code}"
        code = response.status_code

        if code in (401, 403):
            return AuthError(message, {"status_code": code})
        if code == 404:
            return NotFound(RESOURCE_NAMES.get(family, family), message=message)
        if code == 409 and family == "applications":
            return DuplicateApplication(message=message)
        if code in (400, 409, 422):
            return ValidationError(message, {"status_code": code})
        return TransportError(message, {"status_code": code})

    def _failed(self, method: str, path: str, error: PortalError) -> GatewayResult[Any]:
        self.logger.error(
            "Gateway request failed",
            **log_request(method, path),
            error=error.message,
            error_type=type(error).__name__
        )
        return GatewayResult.fail(error)

    async def _request(
        self,
        method: str,
        path: str,
        family: str,
        authenticated: bool = True,
        require_body: bool = True,
        **kwargs: Any
    ) -> GatewayResult[Dict[str, Any]]:
        """
        Issue one request and normalize the outcome.

        Args:
            method: HTTP method
            path: Path relative to the base URL
            family: Resource family, used for error mapping
            authenticated: Attach the session's bearer token
            require_body: Expect a JSON body with ``success: true``;
                when False only the HTTP status decides
        """
        headers = self._auth_headers(authenticated)
        if headers is None:
            return self._failed(method, path, AuthError("Not logged in"))

        self.logger.debug("Gateway request", **log_request(method, path))

        try:
            response = await self.client.request(method, self._url(path), headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            return self._failed(method, path, TransportError(f"Request timed out: {e}"))
        except httpx.HTTPError as e:
            return self._failed(method, path, TransportError(f"Network error: {e}"))

        try:
            body = response.json()
        except ValueError:
            body = None

        if not require_body:
            if response.is_success:
                return GatewayResult.ok({})
            return self._failed(method, path, self._status_error(response, family, body))

        if body is None and response.is_success:
            return self._failed(method, path, TransportError("Response is not valid JSON"))

        if not response.is_success:
            return self._failed(method, path, self._status_error(response, family, body))

        if not isinstance(body, dict) or body.get("success") is not True:
            detail = body.get("error") if isinstance(body, dict) else None
            return self._failed(
                method,
                path,
                TransportError(str(detail) if detail else "Response did not report success")
            )

        return GatewayResult.ok(body)

    def _parse_item(
        self,
        result: GatewayResult[Dict[str, Any]],
        key: str,
        model: Type[M],
        method: str,
        path: str
    ) -> GatewayResult[M]:
        if not result.success:
            return GatewayResult.fail(result.error)
        try:
            return GatewayResult.ok(model.model_validate(result.data[key]))
        except (KeyError, TypeError, PydanticValidationError) as e:
            return self._failed(method, path, TransportError(f"Malformed '{key}' in response: {e}"))

    def _parse_list(
        self,
        result: GatewayResult[Dict[str, Any]],
        key: str,
        model: Type[M],
        method: str,
        path: str
    ) -> GatewayResult[List[M]]:
        if not result.success:
            return GatewayResult.fail(result.error)
        items = result.data.get(key)
        if not isinstance(items, list):
            return self._failed(method, path, TransportError(f"Missing '{key}' list in response"))
        try:
            return GatewayResult.ok([model.model_validate(item) for item in items])
        except PydanticValidationError as e:
            return self._failed(method, path, TransportError(f"Malformed '{key}' in response: {e}"))

    async def _get_list(self, path: str, family: str, key: str, model: Type[M]) -> GatewayResult[List[M]]:
        result = await self._request("GET", path, family)
        return self._parse_list(result, key, model, "GET", path)

    async def _send_item(
        self,
        method: str,
        path: str,
        family: str,
        key: str,
        model: Type[M],
        **kwargs: Any
    ) -> GatewayResult[M]:
        result = await self._request(method, path, family, **kwargs)
        return self._parse_item(result, key, model, method, path)

    async def _delete(self, path: str, family: str) -> GatewayResult[None]:
        result = await self._request("DELETE", path, family, require_body=False)
        if not result.success:
            return GatewayResult.fail(result.error)
        self.logger.info("Resource deleted", path=path)
        return GatewayResult.ok(None)

    # ------------------------------------------------------------------
    # Resumes
    # ------------------------------------------------------------------

    async def list_my_resumes(self) -> GatewayResult[List[Resume]]:
        return await self._get_list("resumes/my-resumes", "resumes", "resumes", Resume)

    async def create_resume(self, file_path: Union[str, Path]) -> GatewayResult[Resume]:
        """Upload a resume file; skills are extracted by the service."""
        path = Path(file_path)
        try:
            content = path.read_bytes()
        except OSError as e:
            return self._failed("POST", "resumes/upload", ValidationError(f"Cannot read resume file: {e}"))

        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return await self._send_item(
            "POST", "resumes/upload", "resumes", "resume", Resume,
            files={"file": (path.name, content, content_type)}
        )

    async def update_resume(self, resume_id: str, changes: Dict[str, Any]) -> GatewayResult[Resume]:
        return await self._send_item("PUT", f"resumes/{resume_id}", "resumes", "resume", Resume, json=changes)

    async def delete_resume(self, resume_id: str) -> GatewayResult[None]:
        return await self._delete(f"resumes/{resume_id}", "resumes")

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def list_my_jobs(self) -> GatewayResult[List[Job]]:
        return await self._get_list("jobs/my-jobs", "jobs", "jobs", Job)

    async def create_job(self, draft: JobDraft) -> GatewayResult[Job]:
        return await self._send_item("POST", "jobs", "jobs", "job", Job, json=draft.to_wire())

    async def update_job(self, job_id: str, draft: JobDraft) -> GatewayResult[Job]:
        return await self._send_item("PUT", f"jobs/{job_id}", "jobs", "job", Job, json=draft.to_wire())

    async def delete_job(self, job_id: str) -> GatewayResult[None]:
        return await self._delete(f"jobs/{job_id}", "jobs")

    async def export_report(self, job_id: str) -> GatewayResult[str]:
        """CSV report of a job's candidates."""
        return await self.get_report(job_id)

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    async def list_my_applications(self) -> GatewayResult[List[Application]]:
        return await self._get_list(
            "applications/my-applications", "applications", "applications", Application
        )

    async def create_application(
        self,
        job_id: str,
        resume_id: str,
        existing: Sequence[Application] = ()
    ) -> GatewayResult[Application]:
        """
        Apply to a job with one of the applicant's resumes.

        ``existing`` is the applicant's current application collection; a
        second application to the same job is rejected locally.
        """
        user = self.session.user
        if user is not None:
            try:
                ensure_unique_application(existing, job_id, user.id)
            except DuplicateApplication as e:
                return self._failed("POST", "applications", e)

        return await self._send_item(
            "POST", "applications", "applications", "application", Application,
            json={"jobId": job_id, "resumeId": resume_id}
        )

    async def update_application(
        self,
        application_id: str,
        status: ApplicationStatus
    ) -> GatewayResult[Application]:
        return await self._send_item(
            "PUT", f"applications/{application_id}/status", "applications", "application", Application,
            json={"status": ApplicationStatus(status).value}
        )

    async def delete_application(self, application_id: str) -> GatewayResult[None]:
        return await self._delete(f"applications/{application_id}", "applications")

    # ------------------------------------------------------------------
    # Analytics and reports
    # ------------------------------------------------------------------

    async def get_dashboard_analytics(self) -> GatewayResult[AnalyticsSummary]:
        return await self._send_item("GET", "analytics/dashboard", "analytics", "analytics", AnalyticsSummary)

    async def get_report(self, job_id: str) -> GatewayResult[str]:
        path = f"reports/{job_id}"
        result = await self._request("GET", path, "reports")
        if not result.success:
            return GatewayResult.fail(result.error)
        csv_text = result.data.get("csv")
        if not isinstance(csv_text, str):
            return self._failed("GET", path, TransportError("Missing 'csv' in response"))
        return GatewayResult.ok(csv_text)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def sign_in(
        self,
        email: str,
        password: str,
        profile: Optional[Dict[str, Any]] = None
    ) -> GatewayResult[Session]:
        """
        Exchange credentials for an access token and start a session.

        The identity comes from the response's ``user`` object when present,
        otherwise from the token claims. ``profile`` supplies name and role
        for a token that does not carry them, such as right after
        registration.
        """
        path = "auth/token"
        headers = self._auth_headers(authenticated=False)
        try:
            response = await self.client.post(
                self.auth_token_url,
                json={"email": email, "password": password},
                headers=headers
            )
        except httpx.HTTPError as e:
            return self._failed("POST", path, TransportError(f"Network error: {e}"))

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.is_success:
            error = self._status_error(response, "auth", body)
            if not isinstance(error, AuthError):
                error = AuthError(error.message or "Login failed. Please check your credentials.")
            return self._failed("POST", path, error)

        if not isinstance(body, dict):
            return self._failed("POST", path, TransportError("Response is not valid JSON"))

        token = body.get("accessToken") or body.get("access_token")
        if not token:
            return self._failed("POST", path, AuthError("No access token in response"))

        try:
            if body.get("user") is not None:
                user = User.model_validate(body["user"])
            else:
                user = User.model_validate(identity_from_token(token, email, profile))
        except PydanticValidationError as e:
            return self._failed("POST", path, TransportError(f"Malformed user in response: {e}"))

        return GatewayResult.ok(self.session.login(user, token))

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        confirm_password: str,
        role: UserRole = UserRole.APPLICANT
    ) -> GatewayResult[Session]:
        """Create an account, then sign in with the same credentials."""
        try:
            validate_registration(password, confirm_password, self.min_password_length)
        except ValidationError as e:
            return self._failed("POST", "auth/register", e)

        result = await self._request(
            "POST", "auth/register", "auth",
            authenticated=False,
            require_body=False,
            json={"email": email, "password": password, "name": name, "role": UserRole(role).value}
        )
        if not result.success:
            return GatewayResult.fail(result.error)

        self.logger.info("Account created", email=email, role=UserRole(role).value)
        return await self.sign_in(email, password, profile={"name": name, "role": UserRole(role).value})
