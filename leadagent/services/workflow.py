"""
Inbound lead workflow.

research → qualify → (QUALIFIED | FOLLOW_UP) draft email → queue for approval.
Other categories stop after qualification.
"""

import logging
import time
from uuid import uuid4

from leadagent.schemas.leads import ApprovalRequest, LeadForm
from leadagent.services.approvals import ApprovalStore
from leadagent.services.llm import qualify_lead, research_lead, write_email

logger = logging.getLogger(__name__)

ACTIONABLE = ("QUALIFIED", "FOLLOW_UP")


async def process_inbound_lead(lead: LeadForm, approvals: ApprovalStore) -> ApprovalRequest | None:
    research = await research_lead(lead)
    qualification = await qualify_lead(lead, research)
    logger.info("Lead %s qualified as %s: %s", lead.email, qualification.category, qualification.reason)

    if qualification.category not in ACTIONABLE:
        return None

    email = await write_email(research, qualification)
    request = ApprovalRequest(
        id=str(uuid4()),
        research=research,
        email=email,
        qualification=qualification,
        timestamp=time.time(),
    )
    approvals.create(request)
    return request


async def run_inbound_lead(lead: LeadForm, approvals: ApprovalStore) -> None:
    """Background-task entry point; the submitter already got its response."""
    try:
        await process_inbound_lead(lead, approvals)
    except Exception:
        logger.exception("Error processing inbound lead %s", lead.email)
