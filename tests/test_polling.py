import asyncio

import pytest

from conftest import FakeClock
from leadagent.schemas.enrich import CompanyResult, Contact
from leadagent.services.job_store import JobStore
from leadagent.services.polling import PollState, local_status_query, merge_phones, poll_phone_jobs


def results():
    return [
        CompanyResult(
            company="Acme",
            url="https://acme.com",
            contacts=[Contact(name="Jane Doe", email="jane@acme.com"), Contact(name="John Roe")],
            phone_job_id="A",
        ),
        CompanyResult(company="Globex", url="https://globex.com", contacts=[Contact(name="Hank Scorpio")], phone_job_id="B"),
    ]


class ScriptedStatus:
    """A completes on its 3rd lookup; B stays pending forever."""

    def __init__(self, b_raises=False):
        self.lookups = {"A": 0, "B": 0}
        self.b_raises = b_raises

    async def __call__(self, job_id):
        self.lookups[job_id] += 1
        if job_id == "B":
            if self.b_raises:
                raise RuntimeError("status endpoint down")
            return {"status": "pending", "contacts": []}
        if self.lookups["A"] < 3:
            return {"status": "pending", "contacts": []}
        return {
            "status": "completed",
            "contacts": [
                {"name": "Jane Doe", "phone": "+1 555 0100"},
                {"name": "John Roe", "phone": "+1 555 0101"},
            ],
        }


JOBS = {"A": "https://acme.com", "B": "https://globex.com"}


@pytest.mark.asyncio
async def test_partial_completion_after_budget(sleep):
    data = results()
    status = ScriptedStatus()

    outcome = await poll_phone_jobs(status, JOBS, data, max_attempts=30, interval=2.0, sleep=sleep)

    assert outcome.completed == {"A"}
    assert outcome.unresolved == {"B"}
    assert outcome.failed == set()
    assert outcome.state is PollState.PARTIAL
    assert outcome.attempts == 30
    assert outcome.phones_merged == 2
    assert sleep.calls == [2.0] * 29
    # A stops being polled once settled
    assert status.lookups == {"A": 3, "B": 30}
    assert [c.phone for c in data[0].contacts] == ["+1 555 0100", "+1 555 0101"]
    assert data[1].contacts[0].phone is None


@pytest.mark.asyncio
async def test_lookup_errors_are_isolated_per_job(sleep):
    data = results()

    outcome = await poll_phone_jobs(ScriptedStatus(b_raises=True), JOBS, data, max_attempts=5, sleep=sleep)

    assert outcome.completed == {"A"}
    assert outcome.unresolved == {"B"}
    assert data[0].contacts[0].phone == "+1 555 0100"


@pytest.mark.asyncio
async def test_completed_and_failed_mix_is_partial(sleep):
    async def fetch(job_id):
        if job_id == "A":
            return {"status": "completed", "contacts": []}
        return {"status": "failed", "error": "provider error"}

    outcome = await poll_phone_jobs(fetch, JOBS, results(), sleep=sleep)

    assert outcome.state is PollState.PARTIAL
    assert outcome.attempts == 1
    assert outcome.completed == {"A"}
    assert outcome.failed == {"B"}
    assert sleep.calls == []


@pytest.mark.asyncio
async def test_every_job_completed_is_complete(sleep):
    async def fetch(job_id):
        return {"status": "completed", "contacts": []}

    outcome = await poll_phone_jobs(fetch, JOBS, results(), sleep=sleep)

    assert outcome.state is PollState.COMPLETE
    assert outcome.completed == {"A", "B"}


@pytest.mark.asyncio
async def test_every_job_failed_is_failed(sleep):
    async def fetch(job_id):
        return {"status": "failed", "error": "provider error"}

    outcome = await poll_phone_jobs(fetch, JOBS, results(), sleep=sleep)

    assert outcome.state is PollState.FAILED
    assert outcome.failed == {"A", "B"}
    assert outcome.completed == set()


@pytest.mark.asyncio
async def test_nothing_resolved_is_failed(sleep):
    async def fetch(job_id):
        return {"status": "pending", "contacts": []}

    outcome = await poll_phone_jobs(fetch, JOBS, results(), max_attempts=3, sleep=sleep)

    assert outcome.state is PollState.FAILED
    assert outcome.unresolved == {"A", "B"}
    assert outcome.attempts == 3


@pytest.mark.asyncio
async def test_not_found_stays_outstanding(sleep):
    async def fetch(job_id):
        return None

    outcome = await poll_phone_jobs(fetch, {"A": "https://acme.com"}, results(), max_attempts=4, sleep=sleep)

    assert outcome.unresolved == {"A"}
    assert outcome.attempts == 4
    assert outcome.state is PollState.FAILED


@pytest.mark.asyncio
async def test_deadline_ends_polling_early(sleep):
    clock = FakeClock(now=100.0)

    async def fetch(job_id):
        clock.advance(2.0)
        return {"status": "pending"}

    outcome = await poll_phone_jobs(
        fetch, {"A": "https://acme.com"}, results(), interval=2.0, sleep=sleep, deadline=105.0, clock=clock
    )

    assert outcome.state is PollState.FAILED
    assert outcome.unresolved == {"A"}
    assert outcome.attempts == 2


@pytest.mark.asyncio
async def test_cancelling_stops_the_loop():
    async def fetch(job_id):
        return {"status": "pending"}

    task = asyncio.create_task(poll_phone_jobs(fetch, {"A": "https://acme.com"}, results(), interval=60))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


def test_merge_by_display_name_hits_every_namesake():
    data = [
        CompanyResult(
            company="Acme",
            url="https://acme.com",
            contacts=[Contact(name="Alex Kim"), Contact(name="Alex Kim", title="VP")],
        )
    ]

    merged = merge_phones(data, "https://acme.com", [{"name": "Alex Kim", "phone": "111"}, {"name": "Alex Kim", "phone": "222"}])

    assert merged == 2
    assert [c.phone for c in data[0].contacts] == ["111", "111"]


@pytest.mark.asyncio
async def test_polling_a_live_store(sleep):
    store = JobStore()
    store.create("A", "https://acme.com", "Acme", ["p1"])
    store.complete("A", [Contact(name="Jane Doe", phone="555")])
    data = results()

    outcome = await poll_phone_jobs(local_status_query(store), {"A": "https://acme.com"}, data, sleep=sleep)

    assert outcome.state is PollState.COMPLETE
    assert data[0].contacts[0].phone == "555"
