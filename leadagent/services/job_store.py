"""
In-memory registry of phone-enrichment jobs.

Jobs are keyed by a locally generated correlation id that is embedded in the
callback URL handed to the provider. Three call paths touch the store: the
enrichment request (create), the provider callback (complete / fail) and the
background sweep (delete). A single lock serializes all of them.

Lifecycle:
  create  →  pending
  pending →  completed | failed   (first terminal write wins)
  any     →  removed by sweep once older than the retention window
"""

import asyncio
import contextlib
import dataclasses
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from leadagent.errors import DuplicateJobError
from leadagent.schemas.enrich import Contact

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class EnrichmentJob:
    job_id: str
    company_url: str
    company_name: str
    contact_ids: list[str]
    created_at: float
    status: JobStatus = JobStatus.PENDING
    contacts: list[Contact] = field(default_factory=list)
    completed_at: float | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not JobStatus.PENDING


class JobStore:
    """Owned service: construct once, start() the sweep, stop() it on shutdown."""

    def __init__(
        self,
        retention_seconds: float = 60 * 60,
        sweep_interval_seconds: float = 10 * 60,
        clock: Callable[[], float] = time.time,
    ):
        self.retention_seconds = retention_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._clock = clock
        self._jobs: dict[str, EnrichmentJob] = {}
        self._lock = threading.Lock()
        self._sweep_task: asyncio.Task | None = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    # ── Mutations ────────────────────────────────────────────────────────────

    def create(
        self, job_id: str, company_url: str, company_name: str, contact_ids: list[str]
    ) -> EnrichmentJob:
        """Insert a pending job. Raises DuplicateJobError if the id is taken."""
        with self._lock:
            if job_id in self._jobs:
                raise DuplicateJobError(f"Job {job_id} already exists")
            job = EnrichmentJob(
                job_id=job_id,
                company_url=company_url,
                company_name=company_name,
                contact_ids=list(contact_ids),
                created_at=self._clock(),
            )
            self._jobs[job_id] = job
        logger.info("Created phone enrichment job %s for %s", job_id, company_name)
        return _snapshot(job)

    def complete(self, job_id: str, contacts: list[Contact]) -> bool:
        """pending → completed. Returns False (and logs) when nothing changed."""
        return self._settle(job_id, JobStatus.COMPLETED, contacts=list(contacts))

    def fail(self, job_id: str, error: str) -> bool:
        """pending → failed. Same no-op rule as complete()."""
        return self._settle(job_id, JobStatus.FAILED, error=error)

    def _settle(
        self,
        job_id: str,
        status: JobStatus,
        contacts: list[Contact] | None = None,
        error: str | None = None,
    ) -> bool:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                logger.warning("Job %s not found for %s update", job_id, status.value)
                return False
            if job.is_terminal:
                logger.warning(
                    "Job %s already %s; ignoring %s update", job_id, job.status.value, status.value
                )
                return False
            job.status = status
            job.completed_at = self._clock()
            if contacts is not None:
                job.contacts = contacts
            if error is not None:
                job.error = error

        if status is JobStatus.COMPLETED:
            logger.info("Updated job %s with %d enriched contacts", job_id, len(job.contacts))
        else:
            logger.warning("Job %s failed: %s", job_id, error)
        return True

    # ── Reads ────────────────────────────────────────────────────────────────

    def get(self, job_id: str) -> EnrichmentJob | None:
        """Copy of the job, or None when unknown or already swept."""
        with self._lock:
            job = self._jobs.get(job_id)
            return _snapshot(job) if job is not None else None

    # ── Expiry ───────────────────────────────────────────────────────────────

    def sweep(self) -> int:
        """Remove every job created before the retention window, whatever its status."""
        cutoff = self._clock() - self.retention_seconds
        with self._lock:
            expired = [job_id for job_id, job in self._jobs.items() if job.created_at < cutoff]
            for job_id in expired:
                del self._jobs[job_id]
        if expired:
            logger.info("Cleaned up %d old phone enrichment jobs", len(expired))
        return len(expired)

    def start(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.get_running_loop().create_task(
            self._sweep_forever(), name="job-store-sweep"
        )

    async def stop(self) -> None:
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    @property
    def running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                self.sweep()
            except Exception:
                logger.exception("Phone enrichment job sweep failed")


def _snapshot(job: EnrichmentJob) -> EnrichmentJob:
    return dataclasses.replace(job, contact_ids=list(job.contact_ids), contacts=list(job.contacts))
