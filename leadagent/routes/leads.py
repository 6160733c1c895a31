"""
/leads — inbound lead form; /approvals — human review of drafted emails.

The form is acknowledged immediately; research, qualification and drafting
run afterwards as a background task.
"""

from fastapi import APIRouter, BackgroundTasks, Depends

from leadagent.config import settings
from leadagent.deps import get_approval_store
from leadagent.errors import ConfigurationError
from leadagent.schemas.leads import ApprovalUpdate, LeadAccepted, LeadForm, PendingApprovalsResponse
from leadagent.services.approvals import ApprovalStore
from leadagent.services.workflow import run_inbound_lead

router = APIRouter(tags=["leads"])


@router.post("/leads", response_model=LeadAccepted)
async def submit_lead(
    lead: LeadForm,
    background_tasks: BackgroundTasks,
    approvals: ApprovalStore = Depends(get_approval_store),
):
    if not settings.openai_api_key:
        raise ConfigurationError("OpenAI API key not configured")
    background_tasks.add_task(run_inbound_lead, lead, approvals)
    return LeadAccepted()


@router.get("/approvals", response_model=PendingApprovalsResponse)
async def list_pending_approvals(approvals: ApprovalStore = Depends(get_approval_store)):
    return PendingApprovalsResponse(pending=approvals.pending())


@router.post("/approvals")
async def decide_approval(data: ApprovalUpdate, approvals: ApprovalStore = Depends(get_approval_store)):
    approvals.update(str(data.id), "approved" if data.approved else "rejected", data.feedback)
    return {"success": True}
