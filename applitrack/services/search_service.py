"""
Search, filter and sort pipeline for the application list.

The list view recomputes apply_view() on every change: free-text search
first, then the structured filter, then the sort. All functions are pure and
return new lists; the input is never reordered in place.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from applitrack.core.constants import (
    ALL,
    PRIORITY_ORDER,
    SALARY_MIN_DEFAULT,
    SALARY_MAX_DEFAULT,
)
from applitrack.schemas.filters import FilterOptions, SortOptions
from applitrack.schemas.job import JobApplication, JobStats
from applitrack.services.date_utils import (
    parse_date,
    parse_leading_int,
    timestamp_or_epoch,
    utcnow,
)
from applitrack.services.search_index import index_fields, searchable_text

logger = logging.getLogger(__name__)


# ============================================
# Linear search
# ============================================

def _linear_search_text(job: JobApplication) -> str:
    fields = index_fields(job)
    fields.append(job.salary_range.currency if job.salary_range else None)
    for contact in job.contacts:
        fields.extend([contact.name, contact.title, contact.email])
    fields.extend(document.name for document in job.documents)
    return searchable_text(fields)


def search_jobs(jobs: Sequence[JobApplication], query: str) -> List[JobApplication]:
    """
    Substring search: a record matches when every query term occurs somewhere
    in its text, including contact names/titles/emails and document names.

    Terms are separated by single spaces. A blank query returns every record.
    """
    if not query or not query.strip():
        return list(jobs)

    terms = [term for term in query.lower().split(" ") if term]
    return [
        job for job in jobs
        if all(term in _linear_search_text(job) for term in terms)
    ]


# ============================================
# Structured filter
# ============================================

def _constrains(value: Optional[str]) -> bool:
    return bool(value) and value != ALL


def _salary_overlaps(job: JobApplication, low: int, high: int) -> bool:
    salary = job.salary_range
    raw_min = salary.min if salary and salary.min else None
    raw_max = salary.max if salary and salary.max else None

    job_min = SALARY_MIN_DEFAULT if raw_min is None else parse_leading_int(raw_min)
    job_max = SALARY_MAX_DEFAULT if raw_max is None else parse_leading_int(raw_max)

    # Salary text that is present but not numeric excludes the record
    if job_min is None or job_max is None:
        return False

    return not (job_max < low or job_min > high)


def _in_date_range(job: JobApplication, start: Optional[str], end: Optional[str]) -> bool:
    applied = parse_date(job.applied_date)
    if applied is None:
        return False

    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date is not None and applied < start_date:
        return False
    if end_date is not None and applied > end_date:
        return False
    return True


def matches_filters(job: JobApplication, filters: FilterOptions) -> bool:
    """True when the record satisfies every constraint set on filters."""
    exact_fields: List[Tuple[Optional[str], Optional[str]]] = [
        (filters.status, job.status),
        (filters.job_type, job.job_type),
        (filters.work_mode, job.work_mode),
        (filters.experience_level, job.experience_level),
        (filters.priority, job.priority),
        (filters.category, job.category),
    ]
    for wanted, actual in exact_fields:
        if _constrains(wanted) and actual != wanted:
            return False

    if filters.location and filters.location.lower() not in (job.work_location or "").lower():
        return False

    if filters.salary_range is not None:
        if not _salary_overlaps(job, filters.salary_range.min, filters.salary_range.max):
            return False

    if filters.date_range is not None:
        if not _in_date_range(job, filters.date_range.start, filters.date_range.end):
            return False

    if filters.has_interview is not None and job.has_interview != filters.has_interview:
        return False

    if filters.archived is not None and job.archived != filters.archived:
        return False

    return True


def filter_jobs(
    jobs: Sequence[JobApplication],
    filters: Optional[FilterOptions] = None,
) -> List[JobApplication]:
    """
    Keep the records satisfying all specified filter predicates.

    Unset fields and the "all" sentinel impose no constraint, so an empty
    FilterOptions returns the input unchanged.
    """
    if filters is None or filters.is_empty():
        return list(jobs)
    return [job for job in jobs if matches_filters(job, filters)]


# ============================================
# Sort
# ============================================

def _text_key(value: Optional[str]) -> Tuple[str, str]:
    # Case-insensitive collation, case-sensitive tie-break
    value = value or ""
    return (value.casefold(), value)


SORT_KEYS: Dict[str, Callable[[JobApplication], object]] = {
    "appliedDate": lambda job: timestamp_or_epoch(job.applied_date),
    "company": lambda job: _text_key(job.company),
    "role": lambda job: _text_key(job.role),
    "status": lambda job: _text_key(job.status),
    "priority": lambda job: PRIORITY_ORDER.get(job.priority or "", 0),
    "interviewDate": lambda job: timestamp_or_epoch(job.interview_date),
}


def sort_jobs(
    jobs: Sequence[JobApplication],
    sort: Optional[SortOptions] = None,
) -> List[JobApplication]:
    """
    Return the records ordered by the sort field.

    Missing or unparsable dates sort as the epoch; missing priority weighs 0.
    The sort is stable in both directions.
    """
    sort = sort or SortOptions()
    key = SORT_KEYS[sort.field]
    return sorted(jobs, key=key, reverse=sort.order == "desc")


# ============================================
# View pipeline and dashboard helpers
# ============================================

def apply_view(
    jobs: Sequence[JobApplication],
    query: str = "",
    filters: Optional[FilterOptions] = None,
    sort: Optional[SortOptions] = None,
) -> List[JobApplication]:
    """Search, then filter, then sort - the list the tracker displays."""
    searched = search_jobs(jobs, query) if query else list(jobs)
    filtered = filter_jobs(searched, filters)
    result = sort_jobs(filtered, sort)
    logger.debug(f"View computed: total={len(jobs)}, searched={len(searched)}, shown={len(result)}")
    return result


def get_categories(jobs: Sequence[JobApplication]) -> List[str]:
    """Distinct non-empty categories, alphabetically."""
    return sorted({job.category for job in jobs if job.category})


def get_stats(jobs: Sequence[JobApplication], now: Optional[datetime] = None) -> JobStats:
    """Counts by status plus upcoming interviews and high-priority records."""
    now = now or utcnow()

    def _upcoming(job: JobApplication) -> bool:
        interview = parse_date(job.interview_date)
        return interview is not None and interview > now

    return JobStats(
        total=len(jobs),
        applied=sum(1 for job in jobs if job.status == "applied"),
        interviews=sum(1 for job in jobs if job.status == "interview"),
        offers=sum(1 for job in jobs if job.status == "offered"),
        rejected=sum(1 for job in jobs if job.status == "rejected"),
        upcoming_interviews=sum(1 for job in jobs if _upcoming(job)),
        high_priority=sum(1 for job in jobs if job.priority == "high"),
    )
