"""
Apollo contact-enrichment client.

Emails come back synchronously from bulk match; phone numbers are only
delivered later through a webhook the provider calls.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from leadagent.errors import UpstreamError
from leadagent.schemas.enrich import ProviderContact
from leadagent.services.contacts import contact_from_match, contact_from_person

logger = logging.getLogger(__name__)

PERSON_TITLES = ("CTO", "VP", "Chief", "Head of Engineering", "Director", "CEO")

Sleep = Callable[[float], Awaitable[None]]


class ApolloClient:
    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        base_url: str = "https://api.apollo.io/api/v1",
        page_size: int = 10,
        batch_size: int = 10,
        batch_delay: float = 0.5,
        sleep: Sleep = asyncio.sleep,
    ):
        self._http = http
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.batch_size = batch_size
        self.batch_delay = batch_delay
        self._sleep = sleep

    async def search_people(self, domain: str) -> list[ProviderContact]:
        """Executives and technical leads with a verified email at `domain`."""
        params: list[tuple[str, str]] = [
            ("q_organization_domains_list[]", domain),
            ("per_page", str(self.page_size)),
            ("contact_email_status[]", "verified"),
        ]
        params.extend(("person_titles[]", title) for title in PERSON_TITLES)

        data = await self._post("/mixed_people/api_search", params=params, body={})
        contacts = [contact_from_person(p) for p in data.get("people") or [] if isinstance(p, dict)]
        logger.info("Apollo search for %s returned %d people", domain, len(contacts))
        return contacts

    async def bulk_enrich_emails(self, contacts: list[ProviderContact]) -> list[ProviderContact]:
        """
        Reveal emails in batches of `batch_size`, one batch at a time.

        Batches run sequentially with `batch_delay` between them; results keep
        the input order. Matches line up with the request details by position,
        and a null match (person not found) keeps the search-time contact.
        Any failing batch fails the whole call.
        """
        batches = [
            contacts[i : i + self.batch_size] for i in range(0, len(contacts), self.batch_size)
        ]
        enriched: list[ProviderContact] = []
        for index, batch in enumerate(batches):
            if index:
                logger.debug("Waiting %.1fs before next enrichment batch", self.batch_delay)
                await self._sleep(self.batch_delay)
            data = await self._post(
                "/people/bulk_match",
                params={"reveal_personal_emails": "true"},
                body={"details": _details(batch)},
            )
            matches = data.get("matches")
            if not isinstance(matches, list):
                matches = []
            for position, contact in enumerate(batch):
                match = matches[position] if position < len(matches) else None
                if isinstance(match, dict):
                    enriched.append(contact_from_match({**match, "id": match.get("id") or contact.id}))
                else:
                    enriched.append(contact)
        logger.info("Enriched %d contacts in %d batches", len(enriched), len(batches))
        return enriched

    async def request_phone_enrichment(
        self, contacts: list[ProviderContact], callback_url: str
    ) -> None:
        """Ask the provider to reveal phones and call `callback_url` when ready.

        Returning means the request was accepted, not that phones are available.
        """
        await self._post(
            "/people/bulk_match",
            params={"reveal_phone_number": "true", "webhook_url": callback_url},
            body={"details": _details(contacts)},
        )
        logger.info("Phone enrichment accepted for %d contacts", len(contacts))

    async def _post(self, path: str, params: Any, body: dict) -> dict:
        try:
            response = await self._http.post(
                f"{self._base_url}{path}",
                params=params,
                json=body,
                headers={
                    "accept": "application/json",
                    "Cache-Control": "no-cache",
                    "X-Api-Key": self._api_key,
                },
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Apollo request failed: {e}") from e

        if response.is_error:
            raise UpstreamError(
                f"Apollo API error: {response.status_code} - {response.text}",
                provider_status=response.status_code,
            )
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Apollo returned a non-JSON response") from e
        return data if isinstance(data, dict) else {}


def _details(contacts: list[ProviderContact]) -> list[dict]:
    return [
        {"id": c.id, "first_name": c.first_name, "last_name": c.last_name} for c in contacts
    ]
