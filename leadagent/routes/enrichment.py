"""
/enrichment — company contact enrichment with asynchronous phone reveal.

  POST /enrichment                    →  contacts now, phoneJobId per company
  POST /enrichment/webhook?jobId=...  ←  provider callback with phone numbers
  GET  /enrichment/status/{job_id}    →  job status for the polling client
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from leadagent.config import settings
from leadagent.deps import get_apollo_client, get_job_store
from leadagent.errors import NotFoundError, ValidationError
from leadagent.schemas.enrich import EnrichRequest, EnrichResponse, JobStatusResponse
from leadagent.services.apollo import ApolloClient
from leadagent.services.enrichment import enrich_companies
from leadagent.services.job_store import JobStore
from leadagent.services.webhook import receive_callback

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/enrichment", tags=["enrichment"])


@router.post("", response_model=EnrichResponse, response_model_exclude_none=True)
async def enrich(
    data: EnrichRequest,
    apollo: ApolloClient = Depends(get_apollo_client),
    store: JobStore = Depends(get_job_store),
):
    """
    Find and enrich contacts for the top `limit` companies.

    - Sequential: one company at a time, rate-limited.
    - Per-company failures land in that company's `error`; siblings continue.
    - With `includePhones`, a `phoneJobId` is returned to poll on.
    """
    results = await enrich_companies(
        data,
        apollo,
        store,
        webhook_url=settings.webhook_url,
        company_delay=settings.company_delay_seconds,
    )
    return EnrichResponse(results=results)


@router.post("/webhook")
async def apollo_webhook(
    request: Request,
    job_id: str | None = Query(None, alias="jobId"),
    store: JobStore = Depends(get_job_store),
):
    """
    Provider callback. Always acknowledged once a jobId is present, even if
    the job is unknown or the body is unusable, so the provider never retries.
    """
    if not job_id:
        logger.warning("Webhook received without jobId")
        raise ValidationError("Missing jobId parameter")

    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Webhook for job %s had an unparseable body", job_id)
        return {"success": True}

    receive_callback(store, job_id, payload)
    return {"success": True}


@router.get("/status/{job_id}", response_model=JobStatusResponse, response_model_exclude_none=True)
async def phone_enrichment_status(job_id: str, store: JobStore = Depends(get_job_store)):
    """Job status for the polling client. `createdAt` / `completedAt` are epoch milliseconds."""
    job = store.get(job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return JobStatusResponse.from_job(job)
