"""
Domain constants for job application tracking.

Single source of truth for enumerated field values, storage keys and the
numeric tables used by filtering, sorting and status automation.
"""
from typing import Dict, List

# Enumerated record fields
JOB_STATUSES: List[str] = ["applied", "shortlisted", "interview", "rejected", "offered"]
JOB_TYPES: List[str] = ["full-time", "part-time", "contract", "freelance", "internship"]
WORK_MODES: List[str] = ["remote", "on-site", "hybrid"]
EXPERIENCE_LEVELS: List[str] = ["entry", "mid", "senior", "lead", "executive"]
PRIORITIES: List[str] = ["low", "medium", "high"]
CONTACT_TYPES: List[str] = ["recruiter", "hiring-manager", "team-member", "other"]
DOCUMENT_TYPES: List[str] = ["resume", "cover-letter", "portfolio", "other"]
RULE_CONDITIONS: List[str] = ["time_elapsed", "interview_date_passed", "manual_trigger"]
SORT_FIELDS: List[str] = ["appliedDate", "company", "role", "status", "interviewDate", "priority"]


def enum_pattern(values: List[str]) -> str:
    """Build an anchored regex accepting exactly one of the given values."""
    return "^(" + "|".join(values) + ")$"


def filter_pattern(values: List[str]) -> str:
    """Same as enum_pattern, plus the "all" sentinel used by filters."""
    return enum_pattern(values + ["all"])


# Filter sentinel meaning "no constraint"
ALL = "all"

# Priority weights (sorting and smart suggestion ranking)
PRIORITY_ORDER: Dict[str, int] = {
    "high": 3,
    "medium": 2,
    "low": 1,
}

# Salary filter defaults for records without salary data
SALARY_MIN_DEFAULT = 0
SALARY_MAX_DEFAULT = 999999

# Storage keys (one JSON document per key)
JOBS_STORAGE_KEY = "job-applications"
JOBS_STORAGE_VERSION = "2.0"
STATUS_RULES_STORAGE_KEY = "applitrack-status-rules"
DOCUMENTS_STORAGE_KEY = "applitrack-documents"
FILTER_PRESETS_STORAGE_KEY = "job-tracker-filter-presets"

# Export envelope version
EXPORT_VERSION = "1.0"

# Document upload limits per type: allowed extensions and max size in MB
DOCUMENT_CATEGORIES: Dict[str, Dict] = {
    "resume": {
        "name": "Resume",
        "allowed_types": [".pdf", ".doc", ".docx"],
        "max_size_mb": 5,
    },
    "cover-letter": {
        "name": "Cover Letter",
        "allowed_types": [".pdf", ".doc", ".docx", ".txt"],
        "max_size_mb": 2,
    },
    "portfolio": {
        "name": "Portfolio",
        "allowed_types": [".pdf", ".doc", ".docx", ".ppt", ".pptx", ".zip"],
        "max_size_mb": 50,
    },
    "other": {
        "name": "Other",
        "allowed_types": [".pdf", ".doc", ".docx", ".txt", ".jpg", ".jpeg", ".png"],
        "max_size_mb": 10,
    },
}
