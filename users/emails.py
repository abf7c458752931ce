# users/emails.py
from notifications.dispatch import Notification


def user_removed_email(user):
    if not getattr(user, "email", None):
        return None
    return Notification(
        email=user.email,
        subject="You have been removed",
        message="You have been removed from the team by the Manager.",
    )
