# projects/tasks.py

from celery import shared_task

from .deadlines import scan_deadlines


@shared_task
def check_deadlines():
    """
    Periodic entrypoint (see CELERY_BEAT_SCHEDULE).
    Reads and notifies only; returns a small summary for the result backend.
    """
    result = scan_deadlines()
    return {
        "projects": result.projects,
        "tasks": result.tasks,
        "sent": len(result.report.sent),
        "failed": len(result.report.failed),
    }
