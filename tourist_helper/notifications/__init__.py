"""Outbound email for booking lifecycle events"""

from typing import Iterable, Optional

from fastapi import BackgroundTasks

from .mailer import Mailer, get_mailer
from .templates import (
    OutgoingEmail, booking_created_emails, booking_approved_email,
    booking_rejected_email, booking_cancelled_email
)


def queue_emails(
    background_tasks: BackgroundTasks,
    mailer: Mailer,
    emails: Iterable[Optional[OutgoingEmail]],
) -> None:
    """Schedule delivery after the response has been sent"""
    for email in emails:
        if email is not None:
            background_tasks.add_task(mailer.send, email.to, email.subject, email.html)


__all__ = [
    "Mailer",
    "get_mailer",
    "OutgoingEmail",
    "queue_emails",
    "booking_created_emails",
    "booking_approved_email",
    "booking_rejected_email",
    "booking_cancelled_email",
]
