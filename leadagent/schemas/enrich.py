"""
Pydantic schemas for /enrichment.

Optional contact fields are omitted from responses rather than sent as
empty strings; routes serialize with exclude_none.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class Contact(BaseModel):
    """Wire shape of a contact returned to callers."""

    name: str
    email: str | None = None
    phone: str | None = None
    title: str | None = None
    linkedin_url: str | None = None
    organization_name: str | None = None


class ProviderContact(Contact):
    """Contact as the provider knows it, including its opaque person id."""

    id: str | None = None
    first_name: str = ""
    last_name: str = ""
    has_email: bool | None = None
    has_direct_phone: bool | None = None

    def to_contact(self) -> Contact:
        return Contact.model_validate(self.model_dump(include=set(Contact.model_fields)))


MAX_COMPANIES = 20


class CompanyInput(BaseModel):
    title: str
    url: str


class EnrichRequest(BaseModel):
    """Body of POST /enrichment. Companies arrive pre-sorted by relevance."""

    model_config = ConfigDict(populate_by_name=True)

    companies: list[CompanyInput]
    limit: int = Field(10, ge=1, le=MAX_COMPANIES)
    include_phones: bool = Field(False, alias="includePhones")


class CompanyResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    company: str
    url: str
    contacts: list[Contact] = Field(default_factory=list)
    error: str | None = None
    phone_job_id: str | None = Field(None, alias="phoneJobId")


class EnrichResponse(BaseModel):
    results: list[CompanyResult]


class JobStatusResponse(BaseModel):
    """Body of GET /enrichment/status/{job_id}."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["pending", "completed", "failed"]
    contacts: list[Contact] = Field(default_factory=list)
    error: str | None = None
    # Epoch milliseconds
    created_at: int = Field(..., alias="createdAt")
    completed_at: int | None = Field(None, alias="completedAt")

    @classmethod
    def from_job(cls, job) -> "JobStatusResponse":
        return cls(
            status=job.status.value,
            contacts=job.contacts,
            error=job.error,
            created_at=_epoch_ms(job.created_at),
            completed_at=_epoch_ms(job.completed_at) if job.completed_at is not None else None,
        )


def _epoch_ms(ts: float) -> int:
    return int(ts * 1000)
