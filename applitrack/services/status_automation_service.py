"""
Status automation service.

Scans applications against time-based rules and heuristics and returns
ranked, advisory suggestions. Nothing here changes a record's status on its
own; auto_progress_status only acts on suggestions from rules explicitly
marked auto_apply, and the default rules are not.
"""
import logging
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from applitrack.core.constants import PRIORITY_ORDER, STATUS_RULES_STORAGE_KEY
from applitrack.core.exceptions import RecordNotFoundError
from applitrack.schemas.automation import (
    BatchAnalysisSummary,
    SmartSuggestion,
    StatusRule,
    StatusRuleCreate,
    StatusRuleUpdate,
    StatusSuggestion,
)
from applitrack.schemas.job import JobApplication, StatusHistoryEntry
from applitrack.services.date_utils import now_iso, parse_date, utcnow, whole_days_between
from applitrack.services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)

AUTO_APPLY_MIN_CONFIDENCE = 0.8


def default_rules() -> List[StatusRule]:
    """The rule set written on first use."""
    created_at = now_iso()
    return [
        StatusRule(
            id="applied-to-followup",
            name="Applied → Follow-up Needed",
            description="Suggest follow-up after 7 days of applying",
            from_status="applied",
            to_status="applied",  # Status stays the same, the rule suggests an action
            condition="time_elapsed",
            time_delay=7,
            is_active=True,
            created_at=created_at,
        ),
        StatusRule(
            id="interview-to-followup",
            name="Interview → Follow-up",
            description="Suggest follow-up 3 days after interview date",
            from_status="interview",
            to_status="interview",
            condition="interview_date_passed",
            time_delay=3,
            is_active=True,
            created_at=created_at,
        ),
        StatusRule(
            id="shortlisted-stale",
            name="Shortlisted → Follow-up",
            description="Follow up on shortlisted applications after 10 days",
            from_status="shortlisted",
            to_status="shortlisted",
            condition="time_elapsed",
            time_delay=10,
            is_active=True,
            created_at=created_at,
        ),
    ]


def overdue_confidence(days: int, threshold: int, base: float, weight: float, cap: float) -> float:
    """
    Confidence for a rule that fired: base at the threshold, rising by weight
    for every further threshold-length of delay, capped.
    """
    overdue_ratio = (days - threshold) / threshold
    return min(cap, base + overdue_ratio * weight)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


class StatusAutomationService:
    """
    Rule-driven suggestion engine.

    Rules are persisted through the injected store and defaulted lazily: the
    first read on an empty store writes the default rule set.

    Args:
        store: Key-value store holding the rule list
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._rules: Optional[List[StatusRule]] = None

    # ============================================
    # Rule management
    # ============================================

    def _load_rules(self) -> List[StatusRule]:
        if self._rules is None:
            raw_rules = self.store.get_json(STATUS_RULES_STORAGE_KEY, default=[]) or []
            rules = []
            for raw in raw_rules:
                try:
                    rules.append(StatusRule.model_validate(raw))
                except (ValueError, TypeError) as e:
                    logger.warning(f"Skipping unreadable status rule: {e}")
            self._rules = rules
            if not rules:
                self._rules = default_rules()
                self._save_rules()
                logger.info(f"Default status rules initialized: count={len(self._rules)}")
        return self._rules

    def _save_rules(self) -> None:
        self.store.set_json(STATUS_RULES_STORAGE_KEY, [rule.to_storage() for rule in self._rules or []])

    def get_rules(self) -> List[StatusRule]:
        return list(self._load_rules())

    def get_active_rules(self) -> List[StatusRule]:
        return [rule for rule in self._load_rules() if rule.is_active]

    def create_rule(self, rule_data: StatusRuleCreate) -> StatusRule:
        rules = self._load_rules()
        rule = StatusRule(
            **rule_data.model_dump(),
            id=f"rule-{uuid.uuid4().hex[:12]}",
            created_at=now_iso(),
        )
        rules.append(rule)
        self._save_rules()
        logger.info(f"Status rule created: rule_id={rule.id}, condition={rule.condition}")
        return rule

    def update_rule(self, rule_id: str, rule_data: StatusRuleUpdate) -> StatusRule:
        rules = self._load_rules()
        for position, rule in enumerate(rules):
            if rule.id == rule_id:
                merged = rule.model_dump()
                merged.update(rule_data.model_dump(exclude_unset=True))
                rules[position] = StatusRule.model_validate(merged)
                self._save_rules()
                logger.info(f"Status rule updated: rule_id={rule_id}")
                return rules[position]
        raise RecordNotFoundError("Status rule", rule_id)

    def delete_rule(self, rule_id: str) -> None:
        rules = self._load_rules()
        remaining = [rule for rule in rules if rule.id != rule_id]
        if len(remaining) == len(rules):
            raise RecordNotFoundError("Status rule", rule_id)
        self._rules = remaining
        self._save_rules()
        logger.info(f"Status rule deleted: rule_id={rule_id}")

    # ============================================
    # Analysis
    # ============================================

    def analyze_jobs(
        self,
        jobs: Sequence[JobApplication],
        now: Optional[datetime] = None,
    ) -> List[StatusSuggestion]:
        """
        Evaluate every active rule against every record in the rule's status.

        time_elapsed rules measure whole days since the applied date;
        interview_date_passed rules measure whole days since the interview
        date and skip records without one.

        Confidence is min(cap, base + (days - threshold) / threshold * weight):
        base 0.5, weight 0.4, cap 0.9 for time_elapsed and base 0.6,
        weight 0.35, cap 0.95 for interview_date_passed. This measures
        lateness past the threshold rather than the plain ratio
        days / threshold, which is at least 1 whenever a rule fires and
        would put every suggestion at the cap, so older records could never
        outrank newer ones.

        Returns:
            Suggestions ordered by confidence, highest first
        """
        now = now or utcnow()
        active_rules = self.get_active_rules()
        suggestions: List[StatusSuggestion] = []

        for job in jobs:
            for rule in active_rules:
                if job.status != rule.from_status or not rule.time_delay:
                    continue

                if rule.condition == "time_elapsed":
                    applied = parse_date(job.applied_date)
                    if applied is None:
                        continue
                    days = whole_days_between(applied, now)
                    if days < rule.time_delay:
                        continue
                    reason = f"{days} days since application"
                    confidence = overdue_confidence(days, rule.time_delay, base=0.5, weight=0.4, cap=0.9)

                elif rule.condition == "interview_date_passed":
                    interview = parse_date(job.interview_date)
                    if interview is None:
                        continue
                    days = whole_days_between(interview, now)
                    if days < rule.time_delay:
                        continue
                    reason = f"{days} days since interview"
                    confidence = overdue_confidence(days, rule.time_delay, base=0.6, weight=0.35, cap=0.95)

                else:
                    # manual_trigger rules never fire from analysis
                    continue

                suggestions.append(StatusSuggestion(
                    job_id=job.id,
                    current_status=job.status,
                    suggested_status=rule.to_status,
                    reason=f"{rule.name}: {reason}",
                    confidence=confidence,
                    auto_apply=rule.auto_apply,
                ))

        suggestions.sort(key=lambda suggestion: suggestion.confidence, reverse=True)
        logger.debug(f"Status rules analyzed: jobs={len(jobs)}, rules={len(active_rules)}, suggestions={len(suggestions)}")
        return suggestions

    def get_smart_status_suggestions(
        self,
        jobs: Sequence[JobApplication],
        now: Optional[datetime] = None,
    ) -> List[SmartSuggestion]:
        """
        Heuristic reminders: upcoming interviews, due follow-ups, unanswered
        applications and interviews with no news.

        Returns:
            Suggestions ordered high, medium, low priority
        """
        now = now or utcnow()
        suggestions: List[SmartSuggestion] = []

        for job in jobs:
            interview = parse_date(job.interview_date)
            if interview is not None:
                days_until_interview = whole_days_between(now, interview)
                if days_until_interview == 1:
                    suggestions.append(SmartSuggestion(
                        job_id=job.id,
                        suggestion="Interview tomorrow - prepare and confirm details",
                        action="prepare-interview",
                        priority="high",
                    ))
                elif 0 < days_until_interview <= 3:
                    suggestions.append(SmartSuggestion(
                        job_id=job.id,
                        suggestion=f"Interview in {days_until_interview} days - start preparing",
                        action="prepare-interview",
                        priority="medium",
                    ))

            follow_up = parse_date(job.follow_up_date)
            if follow_up is not None:
                days_until_follow_up = whole_days_between(now, follow_up)
                if days_until_follow_up <= 0:
                    suggestions.append(SmartSuggestion(
                        job_id=job.id,
                        suggestion="Follow-up date reached - send follow-up message",
                        action="send-followup",
                        priority="high",
                    ))
                elif days_until_follow_up <= 2:
                    suggestions.append(SmartSuggestion(
                        job_id=job.id,
                        suggestion=f"Follow-up due in {days_until_follow_up} days",
                        action="prepare-followup",
                        priority="medium",
                    ))

            applied = parse_date(job.applied_date)
            if applied is not None and job.status == "applied" and not job.follow_up_date:
                days_since_applied = whole_days_between(applied, now)
                if days_since_applied >= 14:
                    suggestions.append(SmartSuggestion(
                        job_id=job.id,
                        suggestion=f"No response for {days_since_applied} days - consider following up",
                        action="schedule-followup",
                        priority="low",
                    ))

            if job.status == "interview" and interview is not None:
                days_since_interview = whole_days_between(interview, now)
                if 5 <= days_since_interview <= 10:
                    suggestions.append(SmartSuggestion(
                        job_id=job.id,
                        suggestion=f"{days_since_interview} days since interview - consider following up",
                        action="interview-followup",
                        priority="medium",
                    ))

        suggestions.sort(key=lambda suggestion: PRIORITY_ORDER[suggestion.priority], reverse=True)
        return suggestions

    def auto_progress_status(
        self,
        job: JobApplication,
        suggestions: Sequence[StatusSuggestion],
    ) -> Optional[JobApplication]:
        """
        Apply the first auto-apply suggestion for this record whose confidence
        exceeds 0.8.

        Returns:
            An updated copy with one new history entry, or None when no
            suggestion qualifies. The caller persists the result.
        """
        applicable = next(
            (
                suggestion for suggestion in suggestions
                if suggestion.job_id == job.id
                and suggestion.auto_apply
                and suggestion.confidence > AUTO_APPLY_MIN_CONFIDENCE
            ),
            None,
        )
        if applicable is None:
            return None

        entry = StatusHistoryEntry(
            id=str(uuid.uuid4()),
            status=applicable.suggested_status,
            date=now_iso(),
            notes=f"Auto-updated: {applicable.reason}",
        )
        logger.info(
            f"Status auto-progressed: job_id={job.id}, "
            f"from={job.status}, to={applicable.suggested_status}"
        )
        return job.model_copy(update={
            "status": applicable.suggested_status,
            "status_history": [*job.status_history, entry],
        })

    def get_batch_analysis_summary(
        self,
        jobs: Sequence[JobApplication],
        now: Optional[datetime] = None,
    ) -> BatchAnalysisSummary:
        """Run both passes and summarize the most pressing outcome in one line."""
        now = now or utcnow()
        status_suggestions = self.analyze_jobs(jobs, now=now)
        smart_suggestions = self.get_smart_status_suggestions(jobs, now=now)
        urgent_actions = sum(1 for suggestion in smart_suggestions if suggestion.priority == "high")

        if urgent_actions:
            summary = f"{_plural(urgent_actions, 'urgent action')} needed"
        elif status_suggestions:
            summary = f"{_plural(len(status_suggestions), 'status update')} suggested"
        elif smart_suggestions:
            summary = f"{_plural(len(smart_suggestions), 'recommendation')} available"
        else:
            summary = "All applications are up to date"

        return BatchAnalysisSummary(
            total_jobs=len(jobs),
            status_suggestions=len(status_suggestions),
            smart_suggestions=len(smart_suggestions),
            urgent_actions=urgent_actions,
            summary=summary,
        )
