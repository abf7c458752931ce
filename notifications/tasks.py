# notifications/tasks.py

from celery import shared_task
import logging

from core.exceptions import NotificationDeliveryError
from .dispatch import EmailDispatcher, Notification

logger = logging.getLogger("taskflow.notifications")


@shared_task(ignore_result=True)
def send_notification_task(email: str, subject: str, message: str):
    """
    Worker-side send. Failures are logged, never retried.
    """
    notification = Notification(email=email, subject=subject, message=message)
    try:
        EmailDispatcher().send(notification)
    except NotificationDeliveryError as exc:
        # Avoid crashing worker if email fails
        logger.warning(f"Notification failed in worker: {exc}")


class CeleryDispatcher:
    """
    Fire-and-forget: each notification becomes its own Celery task.
    Only a failure to enqueue is reported back to the caller.
    """

    def send(self, notification: Notification) -> None:
        try:
            send_notification_task.delay(notification.email, notification.subject, notification.message)
        except Exception as exc:
            raise NotificationDeliveryError(notification, exc) from exc
