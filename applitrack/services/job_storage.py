"""
Job application storage.

Loads, migrates and persists the full application list under a single
storage key. Status changes are recorded in each record's append-only
status history.
"""
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from applitrack.core.constants import JOBS_STORAGE_KEY, JOBS_STORAGE_VERSION
from applitrack.core.exceptions import RecordNotFoundError
from applitrack.schemas.job import (
    Contact,
    ContactCreate,
    ContactUpdate,
    ImportResult,
    JobApplication,
    JobCreate,
    JobUpdate,
    StatusHistoryEntry,
)
from applitrack.services.date_utils import now_iso
from applitrack.services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)


def _history_entry(status: str, date: str, notes: str) -> Dict[str, Any]:
    return {"id": str(uuid.uuid4()), "status": status, "date": date, "notes": notes}


def migrate_job_application(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring a stored record up to the current shape.

    Format is decided by key presence: a record with a statusHistory key, or
    with all of salaryRange, workLocation, jobType and workMode, is current
    and keeps its history; it only gains missing collections and defaults.
    Legacy records (single "expectedSalary" string, no work details) are
    converted field by field.
    """
    migrated = dict(raw)
    migrated_history = [
        _history_entry(raw.get("status", "applied"), f"{raw.get('appliedDate', '')}T00:00:00.000Z", "Migrated from old format")
    ]

    # Key presence decides the format; a record with a history is never legacy
    is_current = "statusHistory" in raw or all(
        key in raw for key in ("salaryRange", "workLocation", "jobType", "workMode")
    )
    if is_current:
        if raw.get("statusHistory") is None:
            migrated["statusHistory"] = migrated_history
        migrated["salaryRange"] = raw.get("salaryRange") or {}
        migrated["workLocation"] = raw.get("workLocation") or "Not specified"
        migrated["jobType"] = raw.get("jobType") or "full-time"
        migrated["workMode"] = raw.get("workMode") or "on-site"
        migrated["contacts"] = raw.get("contacts") or []
        migrated["documents"] = raw.get("documents") or []
        migrated["priority"] = raw.get("priority") or "medium"
        migrated["archived"] = bool(raw.get("archived", False))
        return migrated

    expected = raw.get("expectedSalary") or ""
    parts = [part.strip() for part in expected.split("-")] if expected else []
    migrated.pop("expectedSalary", None)
    migrated.update({
        "salaryRange": {
            "min": parts[0] if len(parts) > 0 else "",
            "max": parts[1] if len(parts) > 1 else "",
            "currency": "USD",
        },
        "workLocation": raw.get("workLocation") or "Not specified",
        "jobType": raw.get("jobType") or "full-time",
        "workMode": raw.get("workMode") or "on-site",
        "category": raw.get("category") or "",
        "experienceLevel": raw.get("experienceLevel") or "mid",
        "jobPostingUrl": raw.get("jobPostingUrl") or "",
        "statusHistory": migrated_history,
        "contacts": [],
        "documents": [],
        "priority": "medium",
        "archived": False,
    })
    return migrated


class JobStorage:
    """
    CRUD over the stored application list.

    Args:
        store: Key-value store holding the serialized list
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    # ----------------------------------------
    # Collection
    # ----------------------------------------

    def get_all(self) -> List[JobApplication]:
        """All records, migrated to the current shape. Unreadable records are skipped."""
        raw_jobs = self.store.get_json(JOBS_STORAGE_KEY, default=[])
        if not isinstance(raw_jobs, list):
            logger.error(f"Stored applications are not a list: type={type(raw_jobs).__name__}")
            return []

        jobs = []
        for raw in raw_jobs:
            try:
                jobs.append(JobApplication.model_validate(migrate_job_application(raw)))
            except (ValueError, AttributeError, TypeError) as e:
                logger.warning(f"Skipping unreadable application record: {e}")
        return jobs

    def save(self, jobs: List[JobApplication]) -> None:
        self.store.set_json(JOBS_STORAGE_KEY, [job.to_storage() for job in jobs])

    def get(self, job_id: str) -> JobApplication:
        for job in self.get_all():
            if job.id == job_id:
                return job
        raise RecordNotFoundError("Job application", job_id)

    def exists(self, job_id: str) -> bool:
        return any(job.id == job_id for job in self.get_all())

    # ----------------------------------------
    # Lifecycle
    # ----------------------------------------

    def add(self, job_data: JobCreate) -> JobApplication:
        """Create a record with a fresh id and its initial history entry."""
        job = JobApplication(
            **job_data.model_dump(),
            id=uuid.uuid4().hex,
            status_history=[
                StatusHistoryEntry(**_history_entry(job_data.status, now_iso(), "Application created"))
            ],
            archived=False,
        )

        jobs = self.get_all()
        jobs.append(job)
        self.save(jobs)

        logger.info(f"Job application created: job_id={job.id}, company={job.company}, total={len(jobs)}")
        return job

    def update(self, job_id: str, job_data: JobUpdate) -> JobApplication:
        """
        Apply a partial update.

        Only fields explicitly set on job_data change. A status change appends
        one history entry; existing entries are never modified.
        """
        jobs = self.get_all()
        index = self._index_of(jobs, job_id)
        existing = jobs[index]

        update_data = job_data.model_dump(exclude_unset=True)
        merged = existing.model_dump()
        merged.update(update_data)
        merged["id"] = existing.id
        merged["status_history"] = [entry.model_dump() for entry in existing.status_history]

        new_status = update_data.get("status")
        if new_status and new_status != existing.status:
            merged["status_history"].append(
                _history_entry(new_status, now_iso(), f"Status changed from {existing.status} to {new_status}")
            )
            logger.info(f"Status changed: job_id={job_id}, from={existing.status}, to={new_status}")

        updated = JobApplication.model_validate(merged)
        jobs[index] = updated
        self.save(jobs)

        logger.info(f"Job application updated: job_id={job_id}, fields={sorted(update_data)}")
        return updated

    def delete(self, job_id: str) -> None:
        """Remove a record permanently."""
        jobs = self.get_all()
        remaining = [job for job in jobs if job.id != job_id]
        if len(remaining) == len(jobs):
            raise RecordNotFoundError("Job application", job_id)
        self.save(remaining)
        logger.info(f"Job application deleted: job_id={job_id}")

    def archive(self, job_id: str) -> JobApplication:
        return self.update(job_id, JobUpdate(archived=True))

    def unarchive(self, job_id: str) -> JobApplication:
        return self.update(job_id, JobUpdate(archived=False))

    # ----------------------------------------
    # Contacts
    # ----------------------------------------

    def add_contact(self, job_id: str, contact_data: ContactCreate) -> Contact:
        job = self.get(job_id)
        contact = Contact(**contact_data.model_dump(), id=str(uuid.uuid4()))
        self.update(job_id, JobUpdate(contacts=[*job.contacts, contact]))
        logger.info(f"Contact added: job_id={job_id}, contact_id={contact.id}")
        return contact

    def update_contact(self, job_id: str, contact_id: str, contact_data: ContactUpdate) -> Contact:
        job = self.get(job_id)
        contacts = list(job.contacts)
        for position, contact in enumerate(contacts):
            if contact.id == contact_id:
                merged = contact.model_dump()
                merged.update(contact_data.model_dump(exclude_unset=True))
                contacts[position] = Contact.model_validate(merged)
                self.update(job_id, JobUpdate(contacts=contacts))
                return contacts[position]
        raise RecordNotFoundError("Contact", contact_id)

    def delete_contact(self, job_id: str, contact_id: str) -> None:
        job = self.get(job_id)
        contacts = [contact for contact in job.contacts if contact.id != contact_id]
        if len(contacts) == len(job.contacts):
            raise RecordNotFoundError("Contact", contact_id)
        self.update(job_id, JobUpdate(contacts=contacts))
        logger.info(f"Contact deleted: job_id={job_id}, contact_id={contact_id}")

    # ----------------------------------------
    # Backup
    # ----------------------------------------

    def export_data(self) -> str:
        """All records in a versioned JSON envelope."""
        return json.dumps(
            {
                "version": JOBS_STORAGE_VERSION,
                "exportDate": now_iso(),
                "applications": [job.to_storage() for job in self.get_all()],
            },
            indent=2,
        )

    def import_data(self, json_data: str) -> ImportResult:
        """
        Replace all records with those from an export envelope.

        Records are migrated on the way in. Duplicate ids keep their first
        occurrence. Nothing is written when the payload is unusable.
        """
        try:
            data = json.loads(json_data)
        except (TypeError, ValueError) as e:
            logger.warning(f"Import payload is not valid JSON: {e}")
            return ImportResult(success=False, message="Failed to parse import data", imported=0)

        applications: Optional[list] = data.get("applications") if isinstance(data, dict) else None
        if not isinstance(applications, list):
            return ImportResult(success=False, message="Invalid data format", imported=0)

        jobs: List[JobApplication] = []
        seen_ids = set()
        for position, raw in enumerate(applications):
            try:
                job = JobApplication.model_validate(migrate_job_application(raw))
            except (ValueError, AttributeError, TypeError) as e:
                logger.warning(f"Import rejected: invalid record at position {position}: {e}")
                return ImportResult(
                    success=False,
                    message=f"Invalid application at position {position}",
                    imported=0,
                )
            if job.id in seen_ids:
                logger.warning(f"Import skipped duplicate id: job_id={job.id}")
                continue
            seen_ids.add(job.id)
            jobs.append(job)

        self.save(jobs)
        logger.info(f"Applications imported: count={len(jobs)}")
        return ImportResult(success=True, message="Data imported successfully", imported=len(jobs))

    @staticmethod
    def _index_of(jobs: List[JobApplication], job_id: str) -> int:
        for index, job in enumerate(jobs):
            if job.id == job_id:
                return index
        raise RecordNotFoundError("Job application", job_id)
