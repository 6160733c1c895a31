"""
Client-side polling for phone-enrichment jobs.

Bounded loop: at most `max_attempts` rounds, `interval` seconds apart
(30 × 2s by default). Each round asks for the status of every outstanding
job; one failing lookup never stops the others. Completed jobs have their
phone numbers merged into the caller's results by contact display name.

Display names are not unique: two contacts with the same name at one
company both receive the first matching phone.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx

from leadagent.schemas.enrich import CompanyResult, JobStatusResponse
from leadagent.services.job_store import JobStore

logger = logging.getLogger(__name__)

# Returns the status body for a job, or None when the job is unknown/expired.
StatusQuery = Callable[[str], Awaitable[dict[str, Any] | None]]


class PollState(str, Enum):
    COMPLETE = "complete"  # every job completed
    PARTIAL = "partial"
    FAILED = "failed"  # no job completed


@dataclass
class PollOutcome:
    completed: set[str] = field(default_factory=set)
    failed: set[str] = field(default_factory=set)
    unresolved: set[str] = field(default_factory=set)
    phones_merged: int = 0
    attempts: int = 0

    @property
    def state(self) -> PollState:
        if not (self.failed or self.unresolved):
            return PollState.COMPLETE
        return PollState.PARTIAL if self.completed else PollState.FAILED


async def poll_phone_jobs(
    fetch_status: StatusQuery,
    jobs: Mapping[str, str],
    results: list[CompanyResult],
    *,
    max_attempts: int = 30,
    interval: float = 2.0,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    deadline: float | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> PollOutcome:
    """
    Poll until every job in `jobs` (job id → company URL) settles or the budget runs out.

    `deadline` is a `clock()` value after which no further round starts.
    Cancelling the awaiting task stops the loop between lookups.
    """
    outstanding = dict(jobs)
    outcome = PollOutcome()

    while outstanding and outcome.attempts < max_attempts:
        if outcome.attempts:
            if deadline is not None and clock() + interval > deadline:
                logger.info("Polling deadline reached with %d jobs outstanding", len(outstanding))
                break
            await sleep(interval)
        outcome.attempts += 1

        for job_id, company_url in list(outstanding.items()):
            try:
                data = await fetch_status(job_id)
            except Exception:
                logger.exception("Error polling job %s", job_id)
                continue

            status = (data or {}).get("status")
            if status == "completed":
                del outstanding[job_id]
                outcome.completed.add(job_id)
                outcome.phones_merged += merge_phones(results, company_url, data.get("contacts") or [])
            elif status == "failed":
                del outstanding[job_id]
                outcome.failed.add(job_id)
                logger.warning("Phone enrichment failed for job %s: %s", job_id, data.get("error"))

    outcome.unresolved = set(outstanding)
    if outcome.unresolved:
        logger.warning(
            "Phone enrichment timed out after %d attempts; %d jobs unresolved",
            outcome.attempts,
            len(outcome.unresolved),
        )
    return outcome


def merge_phones(results: list[CompanyResult], company_url: str, enriched: list[dict]) -> int:
    """Copy phones onto the contacts of the result for `company_url`, matching by name."""
    merged = 0
    for result in results:
        if result.url != company_url:
            continue
        for contact in result.contacts:
            match = next((c for c in enriched if c.get("name") == contact.name), None)
            if match and match.get("phone"):
                contact.phone = match["phone"]
                merged += 1
    return merged


class HttpStatusQuery:
    """StatusQuery over HTTP against a running service."""

    def __init__(self, http: httpx.AsyncClient, base_url: str):
        self._http = http
        self._base_url = base_url.rstrip("/")

    async def __call__(self, job_id: str) -> dict[str, Any] | None:
        response = await self._http.get(f"{self._base_url}/enrichment/status/{job_id}")
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()


def local_status_query(store: JobStore) -> StatusQuery:
    """StatusQuery reading a JobStore in the same process."""

    async def fetch(job_id: str) -> dict[str, Any] | None:
        job = store.get(job_id)
        if job is None:
            return None
        return JobStatusResponse.from_job(job).model_dump(mode="json", by_alias=True, exclude_none=True)

    return fetch
