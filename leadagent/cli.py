"""
Command-line client for a running Lead Agent service.

    leadagent-enrich "Acme=https://acme.com" "Globex=https://globex.com" --phones

Submits the companies for enrichment, then polls phone jobs until they
settle or the polling budget runs out, and prints the merged results as JSON.
Exit code 0 when every phone job completed, 2 when only some did, 3 when
none did (all failed or timed out).
"""

import argparse
import asyncio
import json
import logging
import sys

import httpx

from leadagent.config import settings
from leadagent.schemas.enrich import MAX_COMPANIES, CompanyInput, EnrichRequest, EnrichResponse
from leadagent.services.polling import HttpStatusQuery, PollState, poll_phone_jobs

logger = logging.getLogger("leadagent.cli")

EXIT_CODES = {PollState.COMPLETE: 0, PollState.PARTIAL: 2, PollState.FAILED: 3}


def parse_company(value: str) -> CompanyInput:
    title, sep, url = value.partition("=")
    if not sep or not title or not url:
        raise argparse.ArgumentTypeError(f"expected TITLE=URL, got {value!r}")
    return CompanyInput(title=title, url=url)


def parse_limit(value: str) -> int:
    try:
        limit = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if not 1 <= limit <= MAX_COMPANIES:
        raise argparse.ArgumentTypeError(f"limit must be between 1 and {MAX_COMPANIES}")
    return limit


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="leadagent-enrich", description=__doc__.split("\n\n")[0])
    parser.add_argument("companies", nargs="+", type=parse_company, metavar="TITLE=URL")
    parser.add_argument("--base-url", default=settings.public_base_url)
    parser.add_argument("--limit", type=parse_limit, default=10)
    parser.add_argument("--phones", action="store_true", help="request phone numbers (takes longer)")
    parser.add_argument("--attempts", type=int, default=settings.poll_max_attempts)
    parser.add_argument("--interval", type=float, default=settings.poll_interval_seconds)
    return parser


async def run(args: argparse.Namespace) -> int:
    request = EnrichRequest(companies=args.companies, limit=args.limit, include_phones=args.phones)
    base_url = args.base_url.rstrip("/")

    # Server-side enrichment is sequential and rate-limited; allow for it.
    async with httpx.AsyncClient(timeout=httpx.Timeout(30.0, read=300.0)) as http:
        response = await http.post(
            f"{base_url}/enrichment", json=request.model_dump(mode="json", by_alias=True)
        )
        response.raise_for_status()
        results = EnrichResponse.model_validate(response.json()).results

        jobs = {r.phone_job_id: r.url for r in results if r.phone_job_id}
        state = PollState.COMPLETE
        if jobs:
            logger.info("Pulling phone numbers for %d companies...", len(jobs))
            outcome = await poll_phone_jobs(
                HttpStatusQuery(http, base_url),
                jobs,
                results,
                max_attempts=args.attempts,
                interval=args.interval,
            )
            state = outcome.state

    payload = [r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in results]
    print(json.dumps({"results": payload, "phones": state.value}, indent=2))
    return EXIT_CODES[state]


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(message)s")
    try:
        return asyncio.run(run(args))
    except httpx.HTTPError as e:
        logger.error("Enrichment request failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
