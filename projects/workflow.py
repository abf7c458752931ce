# projects/workflow.py
"""
Status-change cascade for projects and tasks.

Pure decisions only: given the previous status, the entity as it is now,
the actor and whatever related rows the caller already loaded, return
the notifications to send and whether the project must be completed.
No queries, no saves, no sending (see services.WorkflowService).

Cascades fire only on update and only when the status actually changed.
"""
from typing import Iterable, List, Optional

from core.constants import ROLE_MANAGER
from notifications.dispatch import Notification
from .emails import (
    project_auto_completed_email,
    project_completed_email,
    project_deleted_email,
    project_on_hold_email,
    task_completed_email,
)
from .models import Project, Task


def _compact(notifications: Iterable[Optional[Notification]]) -> List[Notification]:
    return [n for n in notifications if n is not None]


def status_changed(previous_status: Optional[str], current_status: Optional[str]) -> bool:
    return current_status is not None and current_status != previous_status


def project_team(project: Project, members: Iterable) -> list:
    """Team leader first (if any), then every member, one entry each."""
    team = []
    if project.team_leader is not None:
        team.append(project.team_leader)
    team.extend(members)
    return team


def project_status_notifications(project: Project, previous_status: str, actor, members: Iterable = ()) -> List[Notification]:
    """
    - on-hold set by a manager: the team leader and each member, individually
    - completed (by anyone allowed to update): the manager
    """
    if not status_changed(previous_status, project.status):
        return []

    if project.status == Project.STATUS_ON_HOLD:
        if getattr(actor, "role", None) != ROLE_MANAGER:
            return []
        return _compact(
            project_on_hold_email(project, recipient)
            for recipient in project_team(project, members)
        )

    if project.status == Project.STATUS_COMPLETED:
        return _compact([project_completed_email(project)])

    return []


def task_completed(previous_status: Optional[str], task: Task) -> bool:
    """A transition into done from anything else."""
    return task.status == Task.STATUS_DONE and previous_status != Task.STATUS_DONE


def task_done_notifications(task: Task, previous_status: str, project: Optional[Project], actor) -> List[Notification]:
    if project is None or not task_completed(previous_status, task):
        return []
    return _compact([task_completed_email(task, project, actor)])


def all_tasks_done(statuses: Iterable[str]) -> bool:
    """Vacuously true for a project without tasks."""
    return all(status == Task.STATUS_DONE for status in statuses)


def should_auto_complete(project: Optional[Project], task_statuses: Iterable[str]) -> bool:
    """
    True when every task of the project is done, whatever the project's
    current status. An already-completed project is completed (and its
    manager mailed) again; duplicate completion mails are not suppressed.
    """
    if project is None:
        return False
    return all_tasks_done(task_statuses)


def auto_completion_notifications(project: Project) -> List[Notification]:
    return _compact([project_auto_completed_email(project)])


def project_deleted_notifications(project: Project, members: Iterable = ()) -> List[Notification]:
    return _compact(
        project_deleted_email(project, recipient)
        for recipient in project_team(project, members)
    )
