"""
Schemas for the inbound lead workflow and the approval queue.

Qualification output from the LLM is validated strictly.
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class LeadForm(BaseModel):
    """Contact form submission."""

    email: EmailStr
    name: str = Field(..., min_length=2, max_length=50)
    phone: str | None = None
    company: str | None = None
    message: str = Field(..., min_length=10, max_length=500)

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str | None) -> str | None:
        if not value:
            return None
        if not set(value) <= set("0123456789 -+()"):
            raise ValueError("Please enter a valid phone number.")
        if len(value) < 10:
            raise ValueError("Phone number must be at least 10 digits.")
        return value


class Qualification(BaseModel):
    category: Literal["QUALIFIED", "UNQUALIFIED", "SUPPORT", "FOLLOW_UP"]
    reason: str


class ApprovalRequest(BaseModel):
    """A drafted email waiting on a human decision."""

    id: str
    research: str
    email: str
    qualification: Qualification
    timestamp: float
    status: Literal["pending", "approved", "rejected"] = "pending"
    feedback: str | None = None


class ApprovalUpdate(BaseModel):
    id: UUID
    approved: bool
    feedback: str | None = None


class PendingApprovalsResponse(BaseModel):
    pending: list[ApprovalRequest]


class LeadAccepted(BaseModel):
    message: str = "Form submitted successfully"
