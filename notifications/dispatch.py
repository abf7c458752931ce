# notifications/dispatch.py
"""
Best-effort notification delivery.

Every notification is attempted on its own: a failure is logged and
recorded in the DispatchReport, it never propagates to the caller and
never stops the remaining sends. Nothing is retried.
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Optional
import logging

from django.conf import settings
from django.core.mail import send_mail
from django.utils.module_loading import import_string

from core.exceptions import NotificationDeliveryError

logger = logging.getLogger("taskflow.notifications")


@dataclass(frozen=True)
class Notification:
    """One message to one recipient."""
    email: str
    subject: str
    message: str


@dataclass
class DispatchReport:
    sent: List[Notification] = field(default_factory=list)
    failed: List[NotificationDeliveryError] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.sent) + len(self.failed)

    def merge(self, other: "DispatchReport") -> "DispatchReport":
        self.sent.extend(other.sent)
        self.failed.extend(other.failed)
        return self


class EmailDispatcher:
    """
    Sends synchronously through Django's configured EMAIL_BACKEND.
    Uses the console backend in dev, locmem under tests.
    """

    def send(self, notification: Notification) -> None:
        try:
            send_mail(
                subject=notification.subject,
                message=notification.message,
                from_email=getattr(settings, "DEFAULT_FROM_EMAIL", None),
                recipient_list=[notification.email],
                fail_silently=False,
            )
        except Exception as exc:
            raise NotificationDeliveryError(notification, exc) from exc


def get_dispatcher():
    """Instantiate the dispatcher named by settings.NOTIFICATION_DISPATCHER."""
    return import_string(settings.NOTIFICATION_DISPATCHER)()


def dispatch_all(notifications: Iterable[Notification], dispatcher=None) -> DispatchReport:
    """
    Attempt every notification independently.

    None entries and recipients without an e-mail address are skipped
    silently.
    """
    if dispatcher is None:
        dispatcher = get_dispatcher()

    report = DispatchReport()
    for notification in notifications:
        if notification is None or not notification.email:
            continue
        try:
            dispatcher.send(notification)
        except NotificationDeliveryError as exc:
            logger.warning(f"Notification failed: to={notification.email} subject={notification.subject!r}: {exc.cause}")
            report.failed.append(exc)
        except Exception as exc:
            logger.warning(f"Notification failed: to={notification.email} subject={notification.subject!r}: {exc}")
            report.failed.append(NotificationDeliveryError(notification, exc))
        else:
            report.sent.append(notification)
    return report


def dispatch(notification: Optional[Notification], dispatcher=None) -> DispatchReport:
    """Single-message convenience wrapper; None is a no-op."""
    if notification is None:
        return DispatchReport()
    return dispatch_all([notification], dispatcher=dispatcher)
