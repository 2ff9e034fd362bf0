"""
Email Tasks

Outbound mail is sent from the worker so request latency never depends on SMTP.
"""

from typing import Dict, Optional
from celery import Task
from core.config import settings
from tasks import celery_app
from services.email_service import email_service
import logging

logger = logging.getLogger(__name__)


@celery_app.task(name="tasks.send_confirmation_email", bind=True, max_retries=3, default_retry_delay=60)
def send_confirmation_email_task(self: Task, to_email: str, confirm_url: str) -> Dict:
    """Deliver the sign-up confirmation link."""
    sent = email_service.send_confirmation(to_email, confirm_url)
    if not sent and settings.EMAIL_ENABLED:
        logger.warning(f"Confirmation email to {to_email} failed, retrying")
        raise self.retry()
    return {"status": "sent" if sent else "skipped", "to": to_email}


@celery_app.task(name="tasks.send_notification_email", bind=True)
def send_notification_email_task(
    self: Task,
    to_email: str,
    title: str,
    body: Optional[str] = None,
    route: Optional[str] = None,
) -> Dict:
    """Mirror an in-app notification to the user's inbox."""
    link = f"{settings.WEB_APP_BASE_URL.rstrip('/')}{route}" if route else None
    sent = email_service.send_notification(to_email, title, body, link)
    return {"status": "sent" if sent else "skipped", "to": to_email}
