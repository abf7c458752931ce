# projects/policies.py
"""
Centralized project/task policy layer.

All permission checks for project and task actions are defined here.
Views use these methods instead of inline permission logic.

Capabilities are enumerated per operation (see core.constants); no role
implicitly inherits another's rights. Checks that load nothing from the
database are pure functions of (actor, entity).
"""
from typing import Optional, Tuple

from django.db.models import Q, QuerySet

from core.constants import (
    PROJECT_EDITOR_ROLES,
    PROJECT_LEADER_ROLES,
    PROJECT_OWNER_ROLES,
    PROJECT_PARTICIPANT_ROLES,
    ROLE_MANAGER,
    TASK_ASSIGNER_ROLES,
)
from .models import Project, Task


def is_authenticated(user) -> bool:
    return bool(user and getattr(user, "is_authenticated", False))


def has_role(user, roles) -> bool:
    """True if the user's single role is one of `roles`."""
    if not is_authenticated(user):
        return False
    return getattr(user, "role", None) in roles


def is_project_team_leader(user, project: Optional[Project]) -> bool:
    """Assignment check, independent of the user's role."""
    if not is_authenticated(user) or project is None:
        return False
    return project.team_leader_id is not None and project.team_leader_id == user.id


class ProjectPolicy:
    """
    Permission checks for projects.
    All can_* methods return (allowed, reason).
    """

    @staticmethod
    def visible_projects(user) -> QuerySet:
        """
        Projects the user may list.

        - manager: projects they manage
        - team-leader / co-operator: projects they lead or are a member of
        - anyone else: nothing
        """
        if not is_authenticated(user):
            return Project.objects.none()

        if user.role == ROLE_MANAGER:
            return Project.objects.filter(manager=user)

        if user.role in PROJECT_PARTICIPANT_ROLES:
            return Project.objects.filter(
                Q(team_leader=user) | Q(members=user)
            ).distinct()

        return Project.objects.none()

    @staticmethod
    def can_create_project(user) -> Tuple[bool, str]:
        if not is_authenticated(user):
            return False, "Authentication required"

        if has_role(user, PROJECT_OWNER_ROLES):
            return True, ""

        return False, "Only managers can create projects"

    @staticmethod
    def can_lead_project(candidate) -> Tuple[bool, str]:
        """Check if a user may be assigned as a project's team leader."""
        if candidate is None:
            return False, "Invalid Team Leader"

        if candidate.role in PROJECT_LEADER_ROLES:
            return True, ""

        return False, "User must be a Team Leader or Co-operator"

    @staticmethod
    def can_update_project(user, project: Project) -> Tuple[bool, str]:
        """
        Role gate only: any manager or any team-leader, regardless of
        whether they run this particular project. A co-operator who is
        the project's assigned leader is still refused.
        """
        if not is_authenticated(user):
            return False, "Authentication required"

        if has_role(user, PROJECT_EDITOR_ROLES):
            return True, ""

        return False, "Not authorized to update project"

    @staticmethod
    def can_delete_project(user, project: Project) -> Tuple[bool, str]:
        if not is_authenticated(user):
            return False, "Authentication required"

        if has_role(user, PROJECT_OWNER_ROLES):
            return True, ""

        return False, "Only managers can delete projects"


class TaskPolicy:
    """
    Permission checks for tasks.
    All can_* methods return (allowed, reason).
    """

    @staticmethod
    def visible_tasks(user) -> QuerySet:
        """Only the user's own tasks, whatever their role."""
        if not is_authenticated(user):
            return Task.objects.none()
        return Task.objects.filter(user=user)

    @staticmethod
    def can_create_task(user) -> Tuple[bool, str]:
        if not is_authenticated(user):
            return False, "Authentication required"
        return True, ""

    @staticmethod
    def can_assign_to_others(user, project: Optional[Project]) -> bool:
        """Team leaders by role, or the assigned leader of the given project."""
        if has_role(user, TASK_ASSIGNER_ROLES):
            return True
        return is_project_team_leader(user, project)

    @staticmethod
    def resolve_assignee(user, project: Optional[Project], assigned_to=None):
        """
        The task owner for a new task: the creator, unless they may
        assign to others and named someone.
        """
        if assigned_to is not None and TaskPolicy.can_assign_to_others(user, project):
            return assigned_to
        return user

    @staticmethod
    def can_update_task(user, task: Task) -> Tuple[bool, str]:
        if not is_authenticated(user):
            return False, "User not found"

        if task.user_id == user.id:
            return True, ""

        if task.project_id and is_project_team_leader(user, task.project):
            return True, ""

        return False, "User not authorized"

    @staticmethod
    def can_delete_task(user, task: Task) -> Tuple[bool, str]:
        """Owner only; the project's team leader is not enough."""
        if not is_authenticated(user):
            return False, "User not found"

        if task.user_id == user.id:
            return True, ""

        return False, "User not authorized"

