# projects/deadlines.py
"""
Deadline scanner: one read-only pass over soon-due projects and tasks.

Window is [now, now + DEADLINE_WINDOW_HOURS], both ends inclusive.
"""
from dataclasses import dataclass, field
from datetime import timedelta
import logging

from django.conf import settings
from django.utils import timezone

from notifications.dispatch import DispatchReport, dispatch_all, get_dispatcher
from .emails import project_deadline_email, task_deadline_email
from .models import Project, Task

logger = logging.getLogger("taskflow.projects")


@dataclass
class DeadlineScanResult:
    window_start: object
    window_end: object
    projects: int = 0
    tasks: int = 0
    report: DispatchReport = field(default_factory=DispatchReport)


def deadline_window(now=None):
    if now is None:
        now = timezone.now()
    hours = getattr(settings, "DEADLINE_WINDOW_HOURS", 24)
    return now, now + timedelta(hours=hours)


def due_projects(start, end):
    """Active projects whose deadline falls in the window."""
    return (
        Project.objects
        .filter(status=Project.STATUS_ACTIVE, deadline__gte=start, deadline__lte=end)
        .select_related("team_leader")
    )


def due_tasks(start, end):
    """Unfinished tasks whose due date falls in the window."""
    return (
        Task.objects
        .filter(due_date__gte=start, due_date__lte=end)
        .exclude(status=Task.STATUS_DONE)
        .select_related("user")
    )


def scan_deadlines(now=None, dispatcher=None) -> DeadlineScanResult:
    start, end = deadline_window(now)
    result = DeadlineScanResult(window_start=start, window_end=end)
    if dispatcher is None:
        dispatcher = get_dispatcher()

    for project in due_projects(start, end):
        result.projects += 1
        # No team leader assigned: nothing to send
        result.report.merge(dispatch_all([project_deadline_email(project)], dispatcher))

    for task in due_tasks(start, end):
        result.tasks += 1
        result.report.merge(dispatch_all([task_deadline_email(task)], dispatcher))

    logger.info(
        f"Deadline scan {start:%Y-%m-%d %H:%M}..{end:%Y-%m-%d %H:%M}: "
        f"projects={result.projects} tasks={result.tasks} "
        f"sent={len(result.report.sent)} failed={len(result.report.failed)}"
    )
    return result
