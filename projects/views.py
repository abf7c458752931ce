import logging

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .models import Project, Task
from .policies import ProjectPolicy, TaskPolicy
from .serializers import (
    TASK_FIELD_MAP,
    ProjectInputSerializer,
    ProjectSerializer,
    TaskInputSerializer,
    TaskSerializer,
)
from .services import WorkflowService

User = get_user_model()
logger = logging.getLogger("taskflow.projects")


def _deny(user, action, reason, status_code=None):
    logger.info(f"Denied {action}: user={getattr(user, 'id', None)} role={getattr(user, 'role', None)}: {reason}")
    raise AuthorizationError(reason, status_code=status_code)


def _project_queryset():
    return Project.objects.select_related("manager", "team_leader").prefetch_related("members")


def resolve_team_leader(team_leader_id):
    """None clears the leader; anything else must be a team-leader or co-operator."""
    if team_leader_id is None:
        return None
    candidate = User.objects.filter(pk=team_leader_id).first()
    allowed, reason = ProjectPolicy.can_lead_project(candidate)
    if not allowed:
        raise ValidationError(reason)
    return candidate


def resolve_members(member_ids):
    ids = set(member_ids or [])
    members = list(User.objects.filter(pk__in=ids))
    if len(members) != len(ids):
        raise ValidationError("Invalid member")
    return members


class ProjectListCreateView(APIView):
    """
    GET  /api/projects
    POST /api/projects
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        qs = ProjectPolicy.visible_projects(request.user).select_related(
            "manager", "team_leader"
        ).prefetch_related("members")
        return Response(ProjectSerializer(qs, many=True).data)

    def post(self, request):
        allowed, reason = ProjectPolicy.can_create_project(request.user)
        if not allowed:
            _deny(request.user, "project create", reason)

        serializer = ProjectInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        title = data.get("title", "")
        if not title:
            raise ValidationError("Please add a title")

        team_leader = resolve_team_leader(data.get("teamLeaderId"))
        members = resolve_members(data.get("members"))

        with transaction.atomic():
            project = Project.objects.create(
                title=title,
                description=data.get("description") or "",
                manager=request.user,
                team_leader=team_leader,
                deadline=data.get("deadline"),
            )
            project.members.set(members)

        logger.info(f"Project created: project={project.id} manager={request.user.id} team_leader={getattr(team_leader, 'id', None)}")
        WorkflowService.project_created(project)

        project = _project_queryset().get(pk=project.pk)
        return Response(ProjectSerializer(project).data, status=status.HTTP_201_CREATED)


class ProjectDetailView(APIView):
    """
    PUT    /api/projects/<id>
    DELETE /api/projects/<id>
    """
    permission_classes = [IsAuthenticated]

    def get_project(self, pk):
        project = _project_queryset().filter(pk=pk).first()
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def put(self, request, pk):
        project = self.get_project(pk)

        allowed, reason = ProjectPolicy.can_update_project(request.user, project)
        if not allowed:
            _deny(request.user, "project update", reason)

        serializer = ProjectInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if "title" in data and not data["title"]:
            raise ValidationError("Please add a title")
        if "teamLeaderId" in data:
            project.team_leader = resolve_team_leader(data["teamLeaderId"])
        members = resolve_members(data["members"]) if "members" in data else None

        previous_status = project.status
        for field in ("title", "status", "deadline"):
            if field in data:
                setattr(project, field, data[field])
        if "description" in data:
            project.description = data["description"] or ""

        with transaction.atomic():
            project.save()
            if members is not None:
                project.members.set(members)

        WorkflowService.project_updated(project, previous_status, request.user)

        project = _project_queryset().get(pk=project.pk)
        return Response(ProjectSerializer(project).data)

    def delete(self, request, pk):
        project = self.get_project(pk)

        allowed, reason = ProjectPolicy.can_delete_project(request.user, project)
        if not allowed:
            _deny(request.user, "project delete", reason)

        # Notify first; the delete proceeds whatever the outcome
        WorkflowService.project_deleting(project)

        project_id = project.id
        project.delete()
        logger.info(f"Project deleted: project={project_id} by user={request.user.id}")
        return Response({"id": project_id})


class TaskListCreateView(APIView):
    """
    GET  /api/tasks
    POST /api/tasks
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(TaskSerializer(TaskPolicy.visible_tasks(request.user), many=True).data)

    def post(self, request):
        allowed, reason = TaskPolicy.can_create_task(request.user)
        if not allowed:
            _deny(request.user, "task create", reason, status_code=status.HTTP_401_UNAUTHORIZED)

        serializer = TaskInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if not data.get("title"):
            raise ValidationError("Please add a text field")

        project = None
        if data.get("projectId") is not None:
            project = Project.objects.filter(pk=data["projectId"]).first()
            if project is None:
                raise ValidationError("Project not found")

        # assignedTo only counts for someone allowed to hand out work
        assigned_to = None
        if data.get("assignedTo") is not None and TaskPolicy.can_assign_to_others(request.user, project):
            assigned_to = User.objects.filter(pk=data["assignedTo"]).first()
            if assigned_to is None:
                raise ValidationError("Assigned user not found")

        fields = {
            model_field: data[key]
            for key, model_field in TASK_FIELD_MAP.items()
            if key in data and data[key] is not None
        }
        task = Task.objects.create(
            user=TaskPolicy.resolve_assignee(request.user, project, assigned_to),
            project=project,
            **fields,
        )
        logger.info(f"Task created: task={task.id} owner={task.user_id} creator={request.user.id} project={task.project_id}")

        WorkflowService.task_created(task, request.user)
        return Response(TaskSerializer(task).data, status=status.HTTP_200_OK)


class TaskDetailView(APIView):
    """
    PUT    /api/tasks/<id>
    DELETE /api/tasks/<id>

    Missing tasks answer 400 and denials 401 on these two routes.
    """
    permission_classes = [IsAuthenticated]

    def get_task(self, pk):
        task = Task.objects.select_related("project").filter(pk=pk).first()
        if task is None:
            raise NotFoundError("Task not found", status_code=status.HTTP_400_BAD_REQUEST)
        return task

    def put(self, request, pk):
        task = self.get_task(pk)

        allowed, reason = TaskPolicy.can_update_task(request.user, task)
        if not allowed:
            _deny(request.user, "task update", reason, status_code=status.HTTP_401_UNAUTHORIZED)

        serializer = TaskInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if "title" in data and not data["title"]:
            raise ValidationError("Please add a text field")

        previous_status = task.status
        for key, model_field in TASK_FIELD_MAP.items():
            if key not in data:
                continue
            value = data[key]
            if value is None and model_field != "due_date":
                continue
            setattr(task, model_field, value)
        task.save()

        WorkflowService.task_updated(task, previous_status, request.user)
        return Response(TaskSerializer(task).data)

    def delete(self, request, pk):
        task = self.get_task(pk)

        allowed, reason = TaskPolicy.can_delete_task(request.user, task)
        if not allowed:
            _deny(request.user, "task delete", reason, status_code=status.HTTP_401_UNAUTHORIZED)

        task_id = task.id
        task.delete()
        return Response({"id": task_id})
