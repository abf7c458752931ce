import logging

from notifications.dispatch import DispatchReport, dispatch, dispatch_all, get_dispatcher
from . import workflow
from .emails import project_assigned_email, task_assigned_email
from .models import Project, Task

logger = logging.getLogger("taskflow.projects")


class WorkflowService:
    """
    Runs the cascade after a mutation has been persisted.

    Decisions come from projects.workflow; this class only loads the
    related rows, writes the auto-completion and dispatches. Dispatch is
    best-effort, so none of these methods raise on a failed send.
    """

    @staticmethod
    def project_created(project: Project, dispatcher=None) -> DispatchReport:
        """Tell the team leader about a new assignment."""
        if project.team_leader is None:
            return DispatchReport()
        return dispatch(project_assigned_email(project, project.team_leader), dispatcher)

    @staticmethod
    def project_updated(project: Project, previous_status: str, actor, dispatcher=None) -> DispatchReport:
        if not workflow.status_changed(previous_status, project.status):
            return DispatchReport()

        logger.info(
            f"Project status transition: project={project.id}, "
            f"from={previous_status}, to={project.status}, actor={getattr(actor, 'id', 'unknown')}"
        )
        members = list(project.members.all())
        notifications = workflow.project_status_notifications(project, previous_status, actor, members)
        return dispatch_all(notifications, dispatcher)

    @staticmethod
    def project_deleting(project: Project, dispatcher=None) -> DispatchReport:
        """Called before the row is removed; the delete goes ahead regardless."""
        members = list(project.members.all())
        return dispatch_all(workflow.project_deleted_notifications(project, members), dispatcher)

    @staticmethod
    def task_created(task: Task, creator, dispatcher=None) -> DispatchReport:
        if task.user_id == creator.id:
            return DispatchReport()
        return dispatch(task_assigned_email(task), dispatcher)

    @staticmethod
    def task_updated(task: Task, previous_status: str, actor, dispatcher=None) -> DispatchReport:
        """
        Task moved to done:
          1. notify the project's team leader
          2. re-read every task of the project
          3. if all are done, complete the project and notify its manager
        """
        report = DispatchReport()
        if not workflow.task_completed(previous_status, task) or not task.project_id:
            return report

        project = (
            Project.objects
            .select_related("manager", "team_leader")
            .filter(pk=task.project_id)
            .first()
        )
        if project is None:
            return report
        if dispatcher is None:
            dispatcher = get_dispatcher()

        report.merge(dispatch_all(workflow.task_done_notifications(task, previous_status, project, actor), dispatcher))

        statuses = list(Task.objects.filter(project_id=project.id).values_list("status", flat=True))
        if workflow.should_auto_complete(project, statuses):
            WorkflowService.complete_project(project)
            report.merge(dispatch_all(workflow.auto_completion_notifications(project), dispatcher))

        return report

    @staticmethod
    def complete_project(project: Project) -> None:
        """
        Status-only write. Two tasks finishing at the same moment can both
        get here; the write is idempotent, the manager may be mailed twice.
        """
        previous_status = project.status
        project.status = Project.STATUS_COMPLETED
        project.save(update_fields=["status", "updated_at"])
        logger.info(
            f"Project auto-completed: project={project.id}, from={previous_status}, to={project.status}"
        )
