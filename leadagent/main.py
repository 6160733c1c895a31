"""
Lead Agent — FastAPI Service

Inbound lead qualification plus company contact enrichment with
asynchronous, webhook-delivered phone numbers.
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from leadagent.config import settings
from leadagent.errors import LeadAgentError, lead_agent_error_handler
from leadagent.routes import enrichment, leads, search
from leadagent.services.approvals import ApprovalStore
from leadagent.services.job_store import JobStore

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("leadagent")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the job store (and its sweep), the approval queue and the shared HTTP client."""
    app.state.job_store = JobStore(
        retention_seconds=settings.job_retention_seconds,
        sweep_interval_seconds=settings.job_sweep_interval_seconds,
    )
    app.state.approval_store = ApprovalStore()
    app.state.http_client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
    app.state.job_store.start()
    logger.info("Phone enrichment job sweep started")
    try:
        yield
    finally:
        await app.state.job_store.stop()
        await app.state.http_client.aclose()
        logger.info("Phone enrichment job sweep stopped")


app = FastAPI(
    title="Lead Agent API",
    description="Inbound lead qualification and company contact enrichment.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(LeadAgentError, lead_agent_error_handler)

app.include_router(enrichment.router)
app.include_router(search.router)
app.include_router(leads.router)


@app.get("/health", tags=["health"])
async def health():
    """Health check for load balancers and container orchestration."""
    return {"status": "ok"}
