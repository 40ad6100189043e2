"""Analytics aggregation."""

from .aggregator import (
    applicant_counts,
    applicant_stats,
    average_match_score,
    status_counts,
    summarize,
)

__all__ = [
    "applicant_counts",
    "applicant_stats",
    "average_match_score",
    "status_counts",
    "summarize",
]
