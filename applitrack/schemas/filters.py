"""
Pydantic schemas for filtering, sorting and saved filter presets.
"""
from typing import Optional
from pydantic import Field

from applitrack.core.constants import (
    JOB_STATUSES,
    JOB_TYPES,
    WORK_MODES,
    EXPERIENCE_LEVELS,
    PRIORITIES,
    SORT_FIELDS,
    enum_pattern,
    filter_pattern,
)
from applitrack.schemas.base import CamelModel


class SalaryFilter(CamelModel):
    """Salary interval a record's range must overlap."""
    min: int = Field(0, description="Lower bound")
    max: int = Field(..., description="Upper bound")


class DateRange(CamelModel):
    """Inclusive applied-date window."""
    start: str = Field(..., description="Start date (YYYY-MM-DD)")
    end: str = Field(..., description="End date (YYYY-MM-DD)")


class FilterOptions(CamelModel):
    """
    Structured filter over job applications.

    Every field is optional. None or the "all" sentinel imposes no constraint;
    all specified predicates must hold.
    """
    status: Optional[str] = Field(None, description="Exact status", pattern=filter_pattern(JOB_STATUSES))
    job_type: Optional[str] = Field(None, description="Exact job type", pattern=filter_pattern(JOB_TYPES))
    work_mode: Optional[str] = Field(None, description="Exact work mode", pattern=filter_pattern(WORK_MODES))
    experience_level: Optional[str] = Field(
        None, description="Exact experience level", pattern=filter_pattern(EXPERIENCE_LEVELS)
    )
    priority: Optional[str] = Field(None, description="Exact priority", pattern=filter_pattern(PRIORITIES))
    category: Optional[str] = Field(None, description="Exact category")
    location: Optional[str] = Field(None, description="Case-insensitive substring of work location")
    salary_range: Optional[SalaryFilter] = Field(None, description="Salary overlap window")
    date_range: Optional[DateRange] = Field(None, description="Applied date window")
    has_interview: Optional[bool] = Field(None, description="Interview stage reached/scheduled/linked")
    archived: Optional[bool] = Field(None, description="Archived flag")

    def is_empty(self) -> bool:
        """True when no field constrains the result."""
        return not any(
            value not in (None, "", "all")
            for value in self.model_dump().values()
        )


class SortOptions(CamelModel):
    """Sort field and direction."""
    field: str = Field("appliedDate", description="Sort field", pattern=enum_pattern(SORT_FIELDS))
    order: str = Field("desc", description="Sort order", pattern="^(asc|desc)$")


class FilterPreset(CamelModel):
    """A named, saved filter and sort combination."""
    id: str = Field(..., description="Preset ID")
    name: str = Field(..., min_length=1, description="Preset name")
    filters: FilterOptions = Field(default_factory=FilterOptions)
    sort: SortOptions = Field(default_factory=SortOptions)
    created_date: str = Field(..., description="ISO timestamp of creation")


class ExportOptions(CamelModel):
    """What to export and in which format."""
    format: str = Field("csv", description="Output format", pattern="^(csv|json)$")
    include_archived: bool = Field(False, description="Include archived records")
    date_range: Optional[DateRange] = Field(None, description="Applied date window")
