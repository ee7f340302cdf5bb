"""
Lead Store
==========
Record repository for discovery jobs and business leads.

The engine depends only on the LeadStore interface; InMemoryLeadStore is the
default backing implementation. Every read returns a copy and every update
replaces a whole record under a lock, so concurrent readers never observe a
half-applied update.
"""

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any

from pydantic import ValidationError

from ..errors import StoreError
from ..models.schemas import BusinessLead, DiscoveryJob, JobStatus


class LeadStore(ABC):
    """Create/read/update/list contract over jobs and leads."""

    # Jobs
    @abstractmethod
    def create_job(self, job: DiscoveryJob) -> DiscoveryJob: ...

    @abstractmethod
    def get_job(self, job_id: str) -> Optional[DiscoveryJob]: ...

    @abstractmethod
    def update_job(self, job_id: str, **updates: Any) -> Optional[DiscoveryJob]: ...

    @abstractmethod
    def list_jobs(self) -> List[DiscoveryJob]: ...

    def list_active_jobs(self) -> List[DiscoveryJob]:
        return [
            job for job in self.list_jobs()
            if job.status in (JobStatus.PENDING, JobStatus.RUNNING)
        ]

    # Leads
    @abstractmethod
    def create_lead(self, lead: BusinessLead) -> BusinessLead: ...

    @abstractmethod
    def get_lead(self, lead_id: str) -> Optional[BusinessLead]: ...

    @abstractmethod
    def update_lead(self, lead_id: str, **updates: Any) -> Optional[BusinessLead]: ...

    @abstractmethod
    def list_leads(self, job_id: Optional[str] = None) -> List[BusinessLead]: ...

    @abstractmethod
    def delete_lead(self, lead_id: str) -> bool: ...


class InMemoryLeadStore(LeadStore):
    """
    Thread-safe in-memory store keyed by record id.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._jobs: Dict[str, DiscoveryJob] = {}
        self._leads: Dict[str, BusinessLead] = {}

    # =========================================================================
    # Jobs
    # =========================================================================

    def create_job(self, job: DiscoveryJob) -> DiscoveryJob:
        with self._lock:
            if job.id in self._jobs:
                raise StoreError(f"Job already exists: {job.id}")
            self._jobs[job.id] = job.model_copy(deep=True)
            return job.model_copy(deep=True)

    def get_job(self, job_id: str) -> Optional[DiscoveryJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    def update_job(self, job_id: str, **updates: Any) -> Optional[DiscoveryJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                return None
            updated = self._merge(DiscoveryJob, job, updates)
            self._jobs[job_id] = updated
            return updated.model_copy(deep=True)

    def list_jobs(self) -> List[DiscoveryJob]:
        with self._lock:
            jobs = [job.model_copy(deep=True) for job in self._jobs.values()]
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)

    # =========================================================================
    # Leads
    # =========================================================================

    def create_lead(self, lead: BusinessLead) -> BusinessLead:
        with self._lock:
            if lead.id in self._leads:
                raise StoreError(f"Lead already exists: {lead.id}")
            self._leads[lead.id] = lead.model_copy(deep=True)
            return lead.model_copy(deep=True)

    def get_lead(self, lead_id: str) -> Optional[BusinessLead]:
        with self._lock:
            lead = self._leads.get(lead_id)
            return lead.model_copy(deep=True) if lead else None

    def update_lead(self, lead_id: str, **updates: Any) -> Optional[BusinessLead]:
        with self._lock:
            lead = self._leads.get(lead_id)
            if lead is None:
                return None
            updated = self._merge(BusinessLead, lead, updates)
            self._leads[lead_id] = updated
            return updated.model_copy(deep=True)

    def list_leads(self, job_id: Optional[str] = None) -> List[BusinessLead]:
        with self._lock:
            leads = [
                lead.model_copy(deep=True) for lead in self._leads.values()
                if job_id is None or lead.job_id == job_id
            ]
        return sorted(leads, key=lambda l: l.lead_score, reverse=True)

    def delete_lead(self, lead_id: str) -> bool:
        with self._lock:
            return self._leads.pop(lead_id, None) is not None

    # =========================================================================
    # Helpers
    # =========================================================================

    def _merge(self, model, record, updates: Dict[str, Any]):
        """Validate a partial update and build the replacement record."""
        updates = {k: v for k, v in updates.items() if k != "id"}
        unknown = set(updates) - set(model.model_fields)
        if unknown:
            raise StoreError(f"Unknown fields for {model.__name__}: {sorted(unknown)}")

        data = record.model_dump()
        for key, value in updates.items():
            data[key] = value.model_dump() if hasattr(value, "model_dump") else value
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise StoreError(f"Invalid update for {model.__name__} {record.id}: {e}") from e
