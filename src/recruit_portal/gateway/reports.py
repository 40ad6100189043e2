"""Saving candidate reports exported by the service."""

from pathlib import Path
from typing import Union

from recruit_portal.utils.logging import get_logger

logger = get_logger(__name__)


def report_filename(job_id: str) -> str:
    return f"candidates-report-{job_id}.csv"


def save_report(csv_text: str, job_id: str, directory: Union[str, Path] = ".") -> Path:
    """
    Write a job's CSV report to ``directory``.

    The text is written verbatim; the service owns the column layout.

    Returns:
        Path of the written file
    """
    target_dir = Path(directory).expanduser()
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / report_filename(job_id)
    target.write_text(csv_text, encoding="utf-8", newline="")

    logger.info("Report saved", job_id=job_id, path=str(target), size=len(csv_text))
    return target
