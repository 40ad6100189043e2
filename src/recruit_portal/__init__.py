"""
Recruit Portal: a client for resume screening and job matching.

This package implements the application lifecycle, analytics aggregation,
candidate ranking and role-based dashboards on top of the recruitment
service's REST API.
"""

__version__ = "0.1.0"

from recruit_portal.core.models import Application, ApplicationStatus, Job, Resume, User, UserRole
from recruit_portal.core.session import SessionStore
from recruit_portal.applications.lifecycle import LifecycleEngine
from recruit_portal.gateway.client import GatewayResult, ResourceGateway
from recruit_portal.dashboard.loader import DashboardLoader

__all__ = [
    "Application",
    "ApplicationStatus",
    "DashboardLoader",
    "GatewayResult",
    "Job",
    "LifecycleEngine",
    "ResourceGateway",
    "Resume",
    "SessionStore",
    "User",
    "UserRole",
]
