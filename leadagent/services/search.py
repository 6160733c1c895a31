"""Exa company search."""

import logging

import httpx

from leadagent.errors import UpstreamError
from leadagent.schemas.search import SearchResult

logger = logging.getLogger(__name__)


class ExaClient:
    def __init__(self, http: httpx.AsyncClient, api_key: str, base_url: str = "https://api.exa.ai"):
        self._http = http
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    async def search_companies(self, query: str, num_results: int = 100) -> list[SearchResult]:
        body = {
            "query": query,
            "numResults": num_results,
            "type": "auto",
            "category": "company",
            "contents": {
                "summary": {"query": query},
                "text": {"maxCharacters": 1000},
                "highlights": {"query": query, "numSentences": 3},
            },
        }
        try:
            response = await self._http.post(
                f"{self._base_url}/search",
                json=body,
                headers={"x-api-key": self._api_key, "accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Exa API error: {e.response.status_code} - {e.response.text}",
                provider_status=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Exa request failed: {e}") from e

        results = [SearchResult.model_validate(r) for r in response.json().get("results") or []]
        logger.info("Exa search returned %d companies", len(results))
        return results
