"""
Pydantic schemas for status automation rules and suggestions.
"""
from typing import Optional
from pydantic import Field

from applitrack.core.constants import JOB_STATUSES, PRIORITIES, RULE_CONDITIONS, enum_pattern
from applitrack.schemas.base import CamelModel

STATUS_PATTERN = enum_pattern(JOB_STATUSES)


class StatusRuleBase(CamelModel):
    """Rule fields supplied by the user."""
    name: str = Field(..., min_length=1, description="Display name")
    description: str = Field("", description="What the rule suggests")
    from_status: str = Field(..., description="Status the record must be in", pattern=STATUS_PATTERN)
    to_status: str = Field(..., description="Status to suggest", pattern=STATUS_PATTERN)
    condition: str = Field(..., description="Trigger condition", pattern=enum_pattern(RULE_CONDITIONS))
    time_delay: Optional[int] = Field(None, gt=0, description="Threshold in days")
    is_active: bool = Field(True, description="Whether the rule is evaluated")
    auto_apply: bool = Field(False, description="Allow automatic progression on high confidence")


class StatusRuleCreate(StatusRuleBase):
    """Schema for creating a rule."""
    pass


class StatusRuleUpdate(CamelModel):
    """Partial rule update."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    from_status: Optional[str] = Field(None, pattern=STATUS_PATTERN)
    to_status: Optional[str] = Field(None, pattern=STATUS_PATTERN)
    condition: Optional[str] = Field(None, pattern=enum_pattern(RULE_CONDITIONS))
    time_delay: Optional[int] = Field(None, gt=0)
    is_active: Optional[bool] = None
    auto_apply: Optional[bool] = None


class StatusRule(StatusRuleBase):
    """A persisted rule."""
    id: str = Field(..., description="Rule ID")
    created_at: str = Field(..., description="ISO timestamp of creation")


class StatusSuggestion(CamelModel):
    """Advisory status change produced by a rule."""
    job_id: str
    current_status: str
    suggested_status: str
    reason: str
    confidence: float = Field(..., ge=0, le=1)
    auto_apply: bool = False


class SmartSuggestion(CamelModel):
    """Heuristic action reminder for a record."""
    job_id: str
    suggestion: str
    action: str
    priority: str = Field(..., pattern=enum_pattern(PRIORITIES))


class BatchAnalysisSummary(CamelModel):
    """Counts across both suggestion passes."""
    total_jobs: int
    status_suggestions: int
    smart_suggestions: int
    urgent_actions: int
    summary: str
