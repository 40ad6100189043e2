"""Dashboard composition."""

from .loader import (
    ApplicantSnapshot,
    DashboardLoader,
    HRSnapshot,
    Resource,
    ResourceState,
    Snapshot,
)
from .render import RENDERERS, render_candidates, render_dashboard

__all__ = [
    "ApplicantSnapshot",
    "DashboardLoader",
    "HRSnapshot",
    "Resource",
    "ResourceState",
    "Snapshot",
    "RENDERERS",
    "render_candidates",
    "render_dashboard",
]
