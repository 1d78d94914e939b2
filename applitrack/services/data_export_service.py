"""
Data Export Service.
Renders application lists as CSV or JSON files.
"""
import csv
import io
import json
import logging
from typing import List, Sequence, Tuple

from applitrack.core.constants import EXPORT_VERSION
from applitrack.schemas.filters import ExportOptions, FilterOptions
from applitrack.schemas.job import JobApplication
from applitrack.services.date_utils import now_iso
from applitrack.services.search_service import filter_jobs

logger = logging.getLogger(__name__)

CSV_HEADERS: List[str] = [
    "Company",
    "Role",
    "Status",
    "Applied Date",
    "Work Location",
    "Job Type",
    "Work Mode",
    "Experience Level",
    "Category",
    "Salary Min",
    "Salary Max",
    "Currency",
    "Priority",
    "Interview Date",
    "Job Posting URL",
    "Interview Link",
    "Notes",
]


def _csv_row(job: JobApplication) -> List[str]:
    salary = job.salary_range
    return [
        job.company,
        job.role,
        job.status,
        job.applied_date,
        job.work_location,
        job.job_type,
        job.work_mode,
        job.experience_level or "",
        job.category or "",
        salary.min or "",
        salary.max or "",
        salary.currency or "",
        job.priority or "",
        job.interview_date or "",
        job.job_posting_url or "",
        job.interview_link or "",
        job.notes or "",
    ]


def export_to_csv(jobs: Sequence[JobApplication]) -> str:
    """One header row plus one row per record; fields quoted as needed."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for job in jobs:
        writer.writerow(_csv_row(job))
    return buffer.getvalue()


def export_to_json(jobs: Sequence[JobApplication]) -> str:
    """Records in a dated, versioned envelope."""
    return json.dumps(
        {
            "exportDate": now_iso(),
            "version": EXPORT_VERSION,
            "jobs": [job.to_storage() for job in jobs],
        },
        indent=2,
    )


def export_jobs(jobs: Sequence[JobApplication], options: ExportOptions) -> Tuple[str, str, str]:
    """
    Select and render records for download.

    Args:
        jobs: All records
        options: Format, archived inclusion and optional applied-date window

    Returns:
        Tuple of (filename, content, mime_type)
    """
    selected = list(jobs)
    if not options.include_archived:
        selected = filter_jobs(selected, FilterOptions(archived=False))
    if options.date_range is not None:
        selected = filter_jobs(selected, FilterOptions(date_range=options.date_range))

    stamp = now_iso()[:10]
    if options.format == "json":
        result = (f"job-applications-{stamp}.json", export_to_json(selected), "application/json")
    else:
        result = (f"job-applications-{stamp}.csv", export_to_csv(selected), "text/csv")

    logger.info(f"Applications exported: format={options.format}, count={len(selected)}, total={len(jobs)}")
    return result
