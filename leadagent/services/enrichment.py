"""
Company → contacts enrichment pipeline.

Companies are processed strictly one after another with a fixed pause
between them; only the first `limit` companies are touched. Per company:

  1. extract domain        (invalid URL → error result, no provider call)
  2. people search         (failure → error result)
  3. batched email reveal  (failure → keep search-only contacts)
  4. phone reveal request  (failure → result without phoneJobId)
"""

import asyncio
import logging
from urllib.parse import urlencode, urlparse
from uuid import uuid4

from leadagent.errors import UpstreamError
from leadagent.schemas.enrich import CompanyInput, CompanyResult, EnrichRequest, ProviderContact
from leadagent.services.apollo import ApolloClient, Sleep
from leadagent.services.job_store import JobStore

logger = logging.getLogger(__name__)

INVALID_URL_ERROR = "Invalid URL - could not extract domain"


def extract_domain(url: str) -> str:
    """Hostname without a leading www., or "" when the URL has none."""
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return ""
    if not hostname:
        return ""
    return hostname.removeprefix("www.")


def callback_url_for(webhook_url: str, job_id: str) -> str:
    return f"{webhook_url}?{urlencode({'jobId': job_id})}"


async def enrich_companies(
    request: EnrichRequest,
    apollo: ApolloClient,
    store: JobStore,
    *,
    webhook_url: str,
    company_delay: float = 0.5,
    sleep: Sleep = asyncio.sleep,
) -> list[CompanyResult]:
    companies = request.companies[: request.limit]
    logger.info("Starting Apollo enrichment for %d companies", len(companies))

    results: list[CompanyResult] = []
    for index, company in enumerate(companies):
        if index:
            await sleep(company_delay)
        logger.info("[%d/%d] Processing %s (%s)", index + 1, len(companies), company.title, company.url)
        results.append(
            await _enrich_company(
                company, apollo, store, include_phones=request.include_phones, webhook_url=webhook_url
            )
        )

    logger.info(
        "Enrichment complete: %d companies, %d with contacts",
        len(results),
        sum(1 for r in results if r.contacts),
    )
    return results


async def _enrich_company(
    company: CompanyInput,
    apollo: ApolloClient,
    store: JobStore,
    *,
    include_phones: bool,
    webhook_url: str,
) -> CompanyResult:
    domain = extract_domain(company.url)
    if not domain:
        logger.warning("Invalid domain for %s: %r", company.title, company.url)
        return CompanyResult(company=company.title, url=company.url, error=INVALID_URL_ERROR)

    try:
        contacts = await apollo.search_people(domain)
    except UpstreamError as e:
        logger.error("Error enriching %s: %s", company.title, e)
        return CompanyResult(company=company.title, url=company.url, error=str(e))

    enriched = contacts
    if contacts:
        try:
            enriched = await apollo.bulk_enrich_emails(contacts)
        except UpstreamError as e:
            logger.warning("Email enrichment failed for %s, returning search results: %s", company.title, e)

    phone_job_id = None
    if include_phones and enriched:
        phone_job_id = await _start_phone_job(company, enriched, apollo, store, webhook_url)

    return CompanyResult(
        company=company.title,
        url=company.url,
        contacts=[c.to_contact() for c in enriched],
        phone_job_id=phone_job_id,
    )


async def _start_phone_job(
    company: CompanyInput,
    contacts: list[ProviderContact],
    apollo: ApolloClient,
    store: JobStore,
    webhook_url: str,
) -> str | None:
    # Registered before the outbound call so an early callback always finds its job.
    job_id = uuid4().hex
    store.create(job_id, company.url, company.title, [c.id for c in contacts if c.id])
    try:
        await apollo.request_phone_enrichment(contacts, callback_url_for(webhook_url, job_id))
    except UpstreamError as e:
        logger.warning("Phone enrichment request failed for %s: %s", company.title, e)
        store.fail(job_id, f"Phone enrichment request rejected: {e}")
        return None
    return job_id
