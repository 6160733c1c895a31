"""
Provider callback handling.

The job id in the callback URL is the only correlation mechanism; the
provider's own identifiers are never trusted to pick a job. Unknown ids,
settled jobs and malformed bodies are acknowledged and dropped so the
provider does not retry.

NOTE: the callback origin is not authenticated. Anyone who learns a live
job id can complete that job.
"""

import logging
from typing import Any

from leadagent.errors import ValidationError
from leadagent.schemas.enrich import Contact
from leadagent.services.contacts import contact_from_match
from leadagent.services.job_store import JobStore

logger = logging.getLogger(__name__)


def normalize_callback_payload(payload: Any) -> list[Contact]:
    """Turn `{"matches": [...]}` into wire contacts. Raises ValidationError on a malformed body."""
    if not isinstance(payload, dict):
        raise ValidationError("Callback body must be a JSON object")
    matches = payload.get("matches") or []
    if not isinstance(matches, list):
        raise ValidationError("Callback 'matches' must be a list")
    return [contact_from_match(m).to_contact() for m in matches if isinstance(m, dict)]


def receive_callback(store: JobStore, job_id: str, payload: Any) -> bool:
    """Apply a callback to its job. Returns True only if the job was completed by it."""
    try:
        contacts = normalize_callback_payload(payload)
    except ValidationError as e:
        logger.warning("Dropping malformed callback for job %s: %s", job_id, e.message)
        return False

    phones = sum(1 for c in contacts if c.phone)
    logger.info("Callback for job %s: %d/%d contacts with phone numbers", job_id, phones, len(contacts))

    applied = store.complete(job_id, contacts)
    if not applied:
        logger.warning("Callback for job %s ignored (unknown, expired or already settled)", job_id)
    return applied
