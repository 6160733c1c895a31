import json

import httpx
import pytest

from leadagent.config import settings
from leadagent.services.apollo import ApolloClient


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def person(pid, first, last, title="CTO"):
    return {
        "id": pid,
        "first_name": first,
        "last_name": last,
        "title": title,
        "organization": {"name": "Acme"},
        "has_email": True,
    }


class FakeApollo:
    """httpx MockTransport handler imitating the Apollo endpoints used here."""

    def __init__(self, people_by_domain=None, fail_enrich=False, fail_phone=False):
        self.people_by_domain = people_by_domain or {}
        self.fail_enrich = fail_enrich
        self.fail_phone = fail_phone
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.path.endswith("/mixed_people/api_search"):
            domain = request.url.params.get("q_organization_domains_list[]")
            if domain not in self.people_by_domain:
                return httpx.Response(500, text="search exploded")
            return httpx.Response(200, json={"people": self.people_by_domain[domain]})

        details = json.loads(request.content)["details"]
        if "reveal_phone_number" in request.url.params:
            if self.fail_phone:
                return httpx.Response(422, text="no credits")
            return httpx.Response(200, json={"status": "queued"})

        if self.fail_enrich:
            return httpx.Response(429, text="slow down")
        matches = [
            {
                "id": d["id"],
                "first_name": d["first_name"],
                "last_name": d["last_name"],
                "email": f"{d['first_name'].lower()}@example.com",
                "title": "CTO",
            }
            for d in details
        ]
        return httpx.Response(200, json={"matches": matches})

    def batches(self):
        return [
            r for r in self.requests
            if r.url.path.endswith("/people/bulk_match") and "reveal_personal_emails" in r.url.params
        ]

    def phone_requests(self):
        return [r for r in self.requests if "reveal_phone_number" in r.url.params]


def make_apollo(fake, sleep=None):
    return ApolloClient(
        httpx.AsyncClient(transport=httpx.MockTransport(fake)),
        api_key="test-key",
        base_url="https://apollo.test/api/v1",
        sleep=sleep or SleepRecorder(),
    )


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch):
    # Keep tests offline and fast
    monkeypatch.setattr(settings, "apollo_api_key", "test-key")
    monkeypatch.setattr(settings, "exa_api_key", "test-exa")
    monkeypatch.setattr(settings, "openai_api_key", "test-openai")
    monkeypatch.setattr(settings, "public_base_url", "http://testserver")
    monkeypatch.setattr(settings, "company_delay_seconds", 0.0)
    monkeypatch.setattr(settings, "enrich_batch_delay_seconds", 0.0)
