"""
Error taxonomy shared by routes and services.

Every error renders as {"error": {"code": ..., "message": ...}}.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str) -> dict[str, Any]:
    return {"error": {"code": code, "message": message}}


class LeadAgentError(Exception):
    """Base for errors that map onto an HTTP response."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def payload(self) -> dict[str, Any]:
        return build_error_payload(self.code, self.message)


class ValidationError(LeadAgentError):
    """Malformed request or missing correlation id. Raised before any mutation."""

    status_code = 400
    code = "validation_error"


class NotFoundError(LeadAgentError):
    """Unknown or expired job / approval."""

    status_code = 404
    code = "not_found"


class UpstreamError(LeadAgentError):
    """A provider call failed (transport error or non-2xx)."""

    status_code = 502
    code = "upstream_error"

    def __init__(self, message: str, provider_status: int | None = None):
        super().__init__(message)
        self.provider_status = provider_status


class ConfigurationError(LeadAgentError):
    """Provider credentials are missing."""

    status_code = 500
    code = "configuration_error"


class DuplicateJobError(LeadAgentError):
    status_code = 409
    code = "duplicate_job"


async def lead_agent_error_handler(_: Request, exc: LeadAgentError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)
