"""Candidate ranking."""

from .view import (
    CandidateRankingView,
    RankedCandidate,
    ResumeDisplay,
    rank_applications,
    ranking_key,
    resume_display,
)

__all__ = [
    "CandidateRankingView",
    "RankedCandidate",
    "ResumeDisplay",
    "rank_applications",
    "ranking_key",
    "resume_display",
]
