# projects/emails.py
"""
Message builders for project/task notifications.

Each function returns Notification values; nothing here sends mail.
Users without an e-mail address yield no notification.
"""
from notifications.dispatch import Notification


def _to(user, subject, message):
    if user is None or not getattr(user, "email", None):
        return None
    return Notification(email=user.email, subject=subject, message=message)


def project_assigned_email(project, team_leader):
    message = (
        f"You have been assigned a new project: {project.title}. \n\n"
        f"Description: {project.description}\n"
        f"Deadline: {project.deadline}"
    )
    return _to(team_leader, "New Project Assignment", message)


def project_on_hold_email(project, recipient):
    message = f'The project "{project.title}" has been put on HOLD by the Manager.'
    return _to(recipient, f"Project On Hold: {project.title}", message)


def project_completed_email(project):
    message = f'The project "{project.title}" has been marked as COMPLETED.'
    return _to(project.manager, f"Project Completed: {project.title}", message)


def project_auto_completed_email(project):
    message = (
        f'All tasks in project "{project.title}" are complete. '
        f"The project is now marked as COMPLETED."
    )
    return _to(project.manager, f"Project Completed: {project.title}", message)


def project_deleted_email(project, recipient):
    message = f'The project "{project.title}" has been DELETED by the Manager.'
    return _to(recipient, f"Project Deleted: {project.title}", message)


def project_deadline_email(project):
    message = f'Project "{project.title}" is nearing its deadline ({project.deadline}).'
    return _to(project.team_leader, f"Deadline Alert: {project.title}", message)


def task_assigned_email(task):
    message = (
        f"You have been assigned a new task: {task.title}. \n\n"
        f"Description: {task.description}\n"
        f"Due Date: {task.due_date}"
    )
    return _to(task.user, "New Task Assignment", message)


def task_completed_email(task, project, actor):
    name = getattr(actor, "display_name", None) or getattr(actor, "username", "")
    message = f'Task "{task.title}" has been completed by {name}.'
    return _to(project.team_leader, f"Task Completed: {task.title}", message)


def task_deadline_email(task):
    message = f'Task "{task.title}" is nearing its deadline ({task.due_date}).'
    return _to(task.user, f"Deadline Alert: {task.title}", message)
