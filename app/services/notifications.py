"""
Candidate-facing notifications.

Renders a subject/body template for one application and hands it to the email
sender. A failed delivery is returned to the caller, never raised: the
business operation that triggered the message has already been stored.
"""

import html
import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from app.services.email_service import email_service

logger = logging.getLogger(__name__)

DEFAULT_JOB_TITLE = "the position"

PLACEHOLDER = re.compile(r"\{(\w+)\}")


@dataclass(frozen=True)
class MessageTemplate:
    """
    Subject and HTML body with ``{placeholder}`` fields.

    ``{name}`` and ``{job_title}`` are always available; callers may pass
    extra fields such as ``{link}`` or ``{reason}``.
    """
    subject: str
    body: str


@dataclass
class NotificationResult:
    sent: bool
    error: Optional[str] = None


TEST_INVITE = MessageTemplate(
    subject="MCQ Test Invitation - {job_title}",
    body=(
        "<p>Dear {name},</p>"
        "<p>Congratulations! You have been shortlisted for the {job_title} role.</p>"
        "<p>Please complete the following MCQ test:</p>"
        '<p><a href="{link}">Click here to start your test</a></p>'
        "<p>Good luck!</p>"
        "<p>Best regards,<br>The Hiring Team</p>"
    ),
)

INTERVIEW_INVITE = MessageTemplate(
    subject="Async Interview Invitation - {job_title}",
    body=(
        "<p>Dear {name},</p>"
        "<p>You have been selected for an async interview for the {job_title} role.</p>"
        "<p>Please record your interview at your convenience:</p>"
        '<p><a href="{link}">Click here to start your interview</a></p>'
        "<p>Best regards,<br>The Hiring Team</p>"
    ),
)

APPLICATION_RECEIVED = MessageTemplate(
    subject="Application Received - {job_title}",
    body=(
        "<p>Hi {name},</p>"
        "<p>Thank you for applying! We've received your application for the {job_title} role.</p>"
        "<p><strong>What happens next?</strong></p>"
        "<ul>"
        "<li>Your resume will be matched against the job requirements</li>"
        "<li>Our HR team will review your application</li>"
        "<li>We'll email you at every step of the process</li>"
        "</ul>"
        "<p>Best regards,<br>The Hiring Team</p>"
    ),
)

_REJECTION_BODY = (
    "<p>Dear {name},</p>"
    "<p>Thank you for your interest in the {job_title} role.</p>"
    "<p>After careful consideration, we have decided to move forward with other candidates "
    "whose qualifications more closely match our current needs.</p>"
    "{reason_block}"
    "<p>We appreciate the time you invested in your application and wish you success in your career.</p>"
    "<p>Best regards,<br>The Hiring Team</p>"
)


def rejection_template(reason: Optional[str] = None) -> MessageTemplate:
    """Rejection message, with the HR-supplied reason paragraph when given."""
    return MessageTemplate(
        subject="Application Update - {job_title}",
        body=_REJECTION_BODY.replace("{reason_block}", "<p>{reason}</p>" if reason else ""),
    )


def render(
    template: MessageTemplate,
    application,
    job=None,
    extra: Optional[Dict[str, str]] = None,
) -> Tuple[str, str]:
    """
    Substitute placeholders into a template.

    Values are HTML-escaped in the body and inserted as-is in the subject.
    Unknown placeholders are left untouched.

    Returns:
        (subject, html_body)
    """
    values = {
        "name": application.name or "",
        "job_title": (job.title if job is not None else None) or DEFAULT_JOB_TITLE,
    }
    if extra:
        values.update({key: "" if value is None else str(value) for key, value in extra.items()})

    # Single pass: substituted values are never scanned for placeholders again
    subject = PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template.subject)
    body = PLACEHOLDER.sub(
        lambda m: html.escape(values[m.group(1)]) if m.group(1) in values else m.group(0),
        template.body,
    )

    return subject, body


def send(
    template: MessageTemplate,
    application,
    job=None,
    extra: Optional[Dict[str, str]] = None,
) -> NotificationResult:
    """
    Render and send one message to the application's candidate.

    Returns:
        NotificationResult with ``sent`` and, on failure, the error message
    """
    subject, html_body = render(template, application, job, extra)

    try:
        delivered = email_service.send_email(
            to_email=application.email,
            subject=subject,
            html_body=html_body,
        )
    except Exception as e:
        logger.error(f"Notification for application {application.id} failed: {e}")
        return NotificationResult(sent=False, error=f"Email delivery failed: {e}")

    if not delivered:
        logger.error(f"Notification for application {application.id} was not delivered to {application.email}")
        return NotificationResult(sent=False, error=f"Failed to send email to {application.email}")

    logger.info(f"Notification '{subject}' sent for application {application.id}")
    return NotificationResult(sent=True)
