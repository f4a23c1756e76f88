"""
Bulk operations over a set of applications.

Items are processed one at a time, each in its own committed unit of work.
A failure on one application is recorded in its result and the run moves on;
nothing already committed is undone. Request-level problems (unknown action,
missing parameters) are raised before any application is touched.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFound, PipelineError, ValidationError
from app.crud import application as application_crud
from app.schemas.bulk import ACTION_COUNT_FIELDS, BulkActionSummary, BulkItemResult
from app.services import notifications, transitions
from app.services.stages import ApplicationStatus, Stage

logger = logging.getLogger(__name__)

SUPPORTED_ACTIONS = tuple(ACTION_COUNT_FIELDS)

INVITE_ACTIONS = {
    "send_test_invite": transitions.InviteKind.TEST,
    "send_interview_invite": transitions.InviteKind.INTERVIEW,
}


def _validate_params(action: str, params: Dict[str, Any]) -> Dict[str, Any]:
    """Check the action and normalize its parameters before any write."""
    if action not in SUPPORTED_ACTIONS:
        raise ValidationError(f"Unsupported action: {action}")

    if action == "update_status":
        if not params.get("status"):
            raise ValidationError("Status is required")
        try:
            return {"status": ApplicationStatus(params["status"])}
        except ValueError:
            raise ValidationError(f"Invalid status: {params['status']}")

    if action == "advance_stage":
        target = params.get("target_stage")
        if target is None:
            return {"target_stage": None}
        try:
            return {"target_stage": Stage(target)}
        except ValueError:
            raise ValidationError(f"Invalid stage: {target}")

    if action == "reject":
        return {
            "send_rejection_email": bool(params.get("send_rejection_email", False)),
            "rejection_reason": params.get("rejection_reason"),
        }

    if action == "send_email":
        if not params.get("subject") or not params.get("message"):
            raise ValidationError("Subject and message are required")
        return {"template": notifications.MessageTemplate(subject=params["subject"], body=params["message"])}

    return {}


def _process_one(
    db: Session,
    action: str,
    application,
    params: Dict[str, Any],
    actor: Optional[str],
    item: BulkItemResult,
) -> None:
    """Run ``action`` for one application, filling in ``item``. Raises on failure."""
    if action == "update_status":
        outcome = transitions.update_status(db, application, params["status"], actor=actor)
        item.write_succeeded = True
        item.success = True

    elif action == "advance_stage":
        outcome = transitions.advance(db, application, params["target_stage"], actor=actor)
        item.write_succeeded = True
        item.success = True

    elif action == "reject":
        outcome = transitions.reject(db, application, actor=actor, reason=params["rejection_reason"])
        item.write_succeeded = True
        item.success = True

        # Email only on an actual state change
        if params["send_rejection_email"] and outcome.changed:
            sent = notifications.send(
                notifications.rejection_template(params["rejection_reason"]),
                application,
                application.job,
                extra={"reason": params["rejection_reason"]},
            )
            item.notify_succeeded = sent.sent
            if not sent.sent:
                item.error = sent.error

    elif action == "send_email":
        sent = notifications.send(params["template"], application, application.job)
        item.notify_succeeded = sent.sent
        item.success = sent.sent
        item.error = sent.error
        return

    else:
        invite = transitions.send_stage_invite(db, application, INVITE_ACTIONS[action])
        item.write_succeeded = True
        item.notify_succeeded = invite.notify_succeeded
        item.success = invite.notify_succeeded
        item.error = invite.notify_error
        item.new_stage = application.current_stage
        item.status = application.status
        return

    item.previous_stage = outcome.previous_stage
    item.new_stage = outcome.new_stage
    item.status = outcome.status


def apply_bulk_action(
    db: Session,
    action: str,
    application_ids: List[UUID],
    params: Optional[Dict[str, Any]] = None,
    actor: Optional[str] = None,
) -> BulkActionSummary:
    """
    Apply one action to every listed application, in order.

    Returns:
        BulkActionSummary with one result per id; ``success`` is True when the
        request itself was valid, whatever happened to individual items

    Raises:
        ValidationError: Unknown action, missing parameters or empty id list
    """
    if not application_ids:
        raise ValidationError("No applications selected")
    normalized = _validate_params(action, params or {})

    summary = BulkActionSummary(action=action)
    logger.info(f"Bulk {action} started for {len(application_ids)} applications by {actor}")

    for application_id in application_ids:
        item = BulkItemResult(id=application_id)
        summary.results.append(item)

        try:
            application = application_crud.get_by_id(db, application_id)
            if application is None:
                raise NotFound("Application not found")

            item.name = application.name
            item.email = application.email
            _process_one(db, action, application, normalized, actor, item)

        except PipelineError as e:
            db.rollback()
            item.success = False
            item.error = e.message
            if item.write_succeeded is None and action != "send_email":
                item.write_succeeded = False
            logger.warning(f"Bulk {action} failed for application {application_id}: {e.message}")

        except SQLAlchemyError as e:
            db.rollback()
            item.success = False
            item.write_succeeded = False
            item.error = f"Database error: {e.__class__.__name__}"
            logger.error(f"Bulk {action} database error for application {application_id}: {e}")

    logger.info(
        f"Bulk {action} finished: {summary.success_count} succeeded, {summary.error_count} failed"
    )
    return summary
