"""
Bulk operation request and result schemas.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from app.services.stages import Stage, ApplicationStatus


class BulkActionRequest(BaseModel):
    """
    One bulk operation over a set of applications.

    ``data`` holds the action parameters:
    - update_status: {"status": "shortlisted"}
    - advance_stage: {"target_stage": "live_interview"} (optional)
    - reject: {"send_rejection_email": true, "rejection_reason": "..."}
    - send_email: {"subject": "...", "message": "<p>Hi {name}</p>"}
    """
    action: str
    application_ids: List[UUID]
    data: Dict[str, Any] = Field(default_factory=dict)


class BulkItemResult(BaseModel):
    """
    Outcome for one application.

    The write and the notification are tracked separately: a rejection can be
    stored while its email fails.
    """
    id: UUID
    name: Optional[str] = None
    email: Optional[str] = None
    success: bool = False
    error: Optional[str] = None
    write_succeeded: Optional[bool] = None
    notify_succeeded: Optional[bool] = None
    previous_stage: Optional[Stage] = None
    new_stage: Optional[Stage] = None
    status: Optional[ApplicationStatus] = None


# Action -> name of its count field in the response
ACTION_COUNT_FIELDS = {
    "update_status": "updated_count",
    "advance_stage": "advanced_count",
    "reject": "rejected_count",
    "send_email": "sent_count",
    "send_test_invite": "sent_count",
    "send_interview_invite": "sent_count",
}


class BulkActionSummary(BaseModel):
    success: bool = True
    action: str
    results: List[BulkItemResult] = Field(default_factory=list)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def to_response(self) -> Dict[str, Any]:
        response = {
            "success": self.success,
            "action": self.action,
            "success_count": self.success_count,
            "error_count": self.error_count,
            "results": [r.model_dump(mode="json") for r in self.results],
        }
        response[ACTION_COUNT_FIELDS[self.action]] = self.success_count
        return response
