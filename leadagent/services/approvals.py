"""In-memory queue of drafted emails awaiting a human decision."""

import logging
import threading
from typing import Literal

from leadagent.errors import NotFoundError
from leadagent.schemas.leads import ApprovalRequest

logger = logging.getLogger(__name__)


class ApprovalStore:
    def __init__(self):
        self._requests: dict[str, ApprovalRequest] = {}
        self._lock = threading.Lock()

    def create(self, request: ApprovalRequest) -> None:
        with self._lock:
            self._requests[request.id] = request.model_copy()
        logger.info("Approval %s queued (%s)", request.id, request.qualification.category)

    def get(self, approval_id: str) -> ApprovalRequest | None:
        with self._lock:
            request = self._requests.get(approval_id)
            return request.model_copy() if request else None

    def update(
        self,
        approval_id: str,
        status: Literal["approved", "rejected"],
        feedback: str | None = None,
    ) -> ApprovalRequest:
        with self._lock:
            request = self._requests.get(approval_id)
            if request is None:
                raise NotFoundError(f"Approval {approval_id} not found")
            request.status = status
            request.feedback = feedback
        logger.info("Approval %s %s", approval_id, status)
        return request.model_copy()

    def pending(self) -> list[ApprovalRequest]:
        with self._lock:
            return [r.model_copy() for r in self._requests.values() if r.status == "pending"]
