"""FastAPI dependencies resolving the collaborators owned by the app lifespan."""

import httpx
from fastapi import Request

from leadagent.config import settings
from leadagent.errors import ConfigurationError
from leadagent.services.apollo import ApolloClient
from leadagent.services.approvals import ApprovalStore
from leadagent.services.job_store import JobStore
from leadagent.services.search import ExaClient


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_approval_store(request: Request) -> ApprovalStore:
    return request.app.state.approval_store


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_apollo_client(request: Request) -> ApolloClient:
    """Fails the whole request up front when the provider key is missing."""
    if not settings.apollo_api_key:
        raise ConfigurationError("Apollo API key not configured")
    return ApolloClient(
        get_http_client(request),
        api_key=settings.apollo_api_key,
        base_url=settings.apollo_base_url,
        page_size=settings.search_page_size,
        batch_size=settings.enrich_batch_size,
        batch_delay=settings.enrich_batch_delay_seconds,
    )


def get_exa_client(request: Request) -> ExaClient:
    if not settings.exa_api_key:
        raise ConfigurationError("Exa API key not configured")
    return ExaClient(get_http_client(request), api_key=settings.exa_api_key, base_url=settings.exa_base_url)
