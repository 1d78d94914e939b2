"""
Pydantic schemas for job application records.
"""
from typing import Optional, List
from pydantic import Field, field_validator

from applitrack.core.constants import (
    JOB_STATUSES,
    JOB_TYPES,
    WORK_MODES,
    EXPERIENCE_LEVELS,
    PRIORITIES,
    CONTACT_TYPES,
    DOCUMENT_TYPES,
    enum_pattern,
)
from applitrack.schemas.base import CamelModel


STATUS_PATTERN = enum_pattern(JOB_STATUSES)
JOB_TYPE_PATTERN = enum_pattern(JOB_TYPES)
WORK_MODE_PATTERN = enum_pattern(WORK_MODES)
EXPERIENCE_LEVEL_PATTERN = enum_pattern(EXPERIENCE_LEVELS)
PRIORITY_PATTERN = enum_pattern(PRIORITIES)


class SalaryRange(CamelModel):
    """Salary bounds as entered by the user (free-form numeric strings)."""
    min: Optional[str] = Field(None, description="Lower bound, e.g. '85000'")
    max: Optional[str] = Field(None, description="Upper bound, e.g. '120000'")
    currency: Optional[str] = Field(None, description="Currency code")


class StatusHistoryEntry(CamelModel):
    """One entry of the append-only status audit trail."""
    id: str = Field(..., description="Entry ID")
    status: str = Field(..., description="Status entered", pattern=STATUS_PATTERN)
    date: str = Field(..., description="ISO timestamp of the transition")
    notes: Optional[str] = Field(None, description="What changed")


class ContactCreate(CamelModel):
    """Schema for adding a contact to an application."""
    name: str = Field(..., min_length=1, description="Full name")
    title: Optional[str] = Field(None, description="Job title")
    email: Optional[str] = Field(None, description="Email address")
    phone: Optional[str] = Field(None, description="Phone number")
    linked_in: Optional[str] = Field(None, description="LinkedIn profile URL")
    type: str = Field("other", description="Contact role", pattern=enum_pattern(CONTACT_TYPES))


class Contact(ContactCreate):
    """A person associated with an application."""
    id: str = Field(..., description="Contact ID")


class ContactUpdate(CamelModel):
    """Partial contact update."""
    name: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    linked_in: Optional[str] = None
    type: Optional[str] = Field(None, pattern=enum_pattern(CONTACT_TYPES))


class Document(CamelModel):
    """An uploaded file, optionally linked to an application."""
    id: str = Field(..., description="Document ID")
    name: str = Field(..., min_length=1, description="File name")
    type: str = Field(..., description="Document type", pattern=enum_pattern(DOCUMENT_TYPES))
    url: Optional[str] = Field(None, description="External URL")
    upload_date: str = Field(..., description="ISO timestamp of upload")
    file_size: Optional[int] = Field(None, ge=0, description="Size in bytes")
    mime_type: Optional[str] = Field(None, description="MIME type")
    content: Optional[str] = Field(None, description="Base64 data URL")
    job_id: Optional[str] = Field(None, description="Linked application ID")


class JobBase(CamelModel):
    """Fields shared by stored records and creation requests."""
    company: str = Field(..., min_length=1, description="Company name")
    role: str = Field(..., min_length=1, description="Job role")
    salary_range: SalaryRange = Field(default_factory=SalaryRange, description="Salary range")
    work_location: str = Field(..., min_length=1, description="Work location")
    job_type: str = Field("full-time", description="Job type", pattern=JOB_TYPE_PATTERN)
    work_mode: str = Field("on-site", description="Work mode", pattern=WORK_MODE_PATTERN)
    status: str = Field("applied", description="Application status", pattern=STATUS_PATTERN)
    interview_link: Optional[str] = Field(None, description="Interview meeting link")
    applied_date: str = Field(..., description="Date applied (YYYY-MM-DD)")
    notes: Optional[str] = Field(None, description="Free-form notes")
    category: Optional[str] = Field(None, description="e.g. Software Engineering, Marketing")
    experience_level: Optional[str] = Field(None, description="Seniority", pattern=EXPERIENCE_LEVEL_PATTERN)
    job_posting_url: Optional[str] = Field(None, description="Job posting URL")
    interview_date: Optional[str] = Field(None, description="Interview date/time")
    follow_up_date: Optional[str] = Field(None, description="Planned follow-up date")
    priority: Optional[str] = Field(None, description="Priority", pattern=PRIORITY_PATTERN)
    contacts: List[Contact] = Field(default_factory=list, description="Associated contacts")
    documents: List[Document] = Field(default_factory=list, description="Linked documents")

    @field_validator(
        "experience_level", "priority", "interview_link", "interview_date",
        "follow_up_date", "job_posting_url", "category", mode="before"
    )
    @classmethod
    def blank_to_none(cls, v):
        """Forms store cleared optional fields as empty strings."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class JobCreate(JobBase):
    """Schema for creating a new application."""
    pass


class JobApplication(JobBase):
    """A stored application record."""
    id: str = Field(..., min_length=1, description="Opaque record ID")
    status_history: List[StatusHistoryEntry] = Field(default_factory=list, description="Status audit trail")
    archived: bool = Field(False, description="Soft-delete flag")

    @property
    def has_interview(self) -> bool:
        """Interview stage reached, scheduled or linked."""
        return self.status == "interview" or bool(self.interview_date) or bool(self.interview_link)


class JobUpdate(CamelModel):
    """Schema for a partial update. Only fields explicitly set are applied."""
    company: Optional[str] = Field(None, min_length=1, description="Company name")
    role: Optional[str] = Field(None, min_length=1, description="Job role")
    salary_range: Optional[SalaryRange] = Field(None, description="Salary range")
    work_location: Optional[str] = Field(None, min_length=1, description="Work location")
    job_type: Optional[str] = Field(None, description="Job type", pattern=JOB_TYPE_PATTERN)
    work_mode: Optional[str] = Field(None, description="Work mode", pattern=WORK_MODE_PATTERN)
    status: Optional[str] = Field(None, description="Application status", pattern=STATUS_PATTERN)
    interview_link: Optional[str] = Field(None, description="Interview meeting link")
    applied_date: Optional[str] = Field(None, description="Date applied (YYYY-MM-DD)")
    notes: Optional[str] = Field(None, description="Free-form notes")
    category: Optional[str] = Field(None, description="Category")
    experience_level: Optional[str] = Field(None, description="Seniority", pattern=EXPERIENCE_LEVEL_PATTERN)
    job_posting_url: Optional[str] = Field(None, description="Job posting URL")
    interview_date: Optional[str] = Field(None, description="Interview date/time")
    follow_up_date: Optional[str] = Field(None, description="Planned follow-up date")
    priority: Optional[str] = Field(None, description="Priority", pattern=PRIORITY_PATTERN)
    contacts: Optional[List[Contact]] = Field(None, description="Associated contacts")
    documents: Optional[List[Document]] = Field(None, description="Linked documents")
    archived: Optional[bool] = Field(None, description="Soft-delete flag")

    @field_validator(
        "company", "role", "salary_range", "work_location", "job_type", "work_mode",
        "status", "applied_date", "contacts", "documents", "archived"
    )
    @classmethod
    def required_fields_not_cleared(cls, v, info):
        """Fields required on a record may be omitted but not set to None."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be cleared")
        return v


class ImportResult(CamelModel):
    """Outcome of a JSON import."""
    success: bool
    message: str
    imported: int = 0


class JobStats(CamelModel):
    """Dashboard counters over a record collection."""
    total: int = 0
    applied: int = 0
    interviews: int = 0
    offers: int = 0
    rejected: int = 0
    upcoming_interviews: int = 0
    high_priority: int = 0
