from rest_framework import serializers
from django.contrib.auth import get_user_model

from .models import Project, Task

User = get_user_model()


class UserSummarySerializer(serializers.ModelSerializer):
    """Embedded (populated) view of a referenced user."""

    class Meta:
        model = User
        fields = ["id", "name", "email"]


class ProjectSerializer(serializers.ModelSerializer):
    manager = UserSummarySerializer(read_only=True)
    teamLeader = UserSummarySerializer(source="team_leader", read_only=True)
    members = UserSummarySerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Project
        fields = [
            "id",
            "title",
            "description",
            "manager",
            "teamLeader",
            "members",
            "status",
            "deadline",
            "createdAt",
            "updatedAt",
        ]


class ProjectInputSerializer(serializers.Serializer):
    """
    Request body for create / update. Shape checks only; the title rule
    and the team-leader rule are enforced by the view so they can fail
    after the role check.
    """
    title = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    teamLeaderId = serializers.IntegerField(required=False, allow_null=True)
    members = serializers.ListField(child=serializers.IntegerField(), required=False)
    status = serializers.ChoiceField(choices=Project.STATUS_CHOICES, required=False)
    deadline = serializers.DateTimeField(required=False, allow_null=True)


class TaskSerializer(serializers.ModelSerializer):
    dueDate = serializers.DateTimeField(source="due_date", read_only=True)
    user = serializers.PrimaryKeyRelatedField(read_only=True)
    project = serializers.PrimaryKeyRelatedField(read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Task
        fields = [
            "id",
            "title",
            "description",
            "status",
            "priority",
            "category",
            "dueDate",
            "tags",
            "user",
            "project",
            "createdAt",
            "updatedAt",
        ]


class TaskInputSerializer(serializers.Serializer):
    title = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.ChoiceField(choices=Task.STATUS_CHOICES, required=False)
    priority = serializers.ChoiceField(choices=Task.PRIORITY_CHOICES, required=False)
    category = serializers.CharField(required=False, allow_blank=True)
    dueDate = serializers.DateTimeField(required=False, allow_null=True)
    tags = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)

    # create only
    projectId = serializers.IntegerField(required=False, allow_null=True)
    assignedTo = serializers.IntegerField(required=False, allow_null=True)


# request field -> model field, for the plain scalar fields
TASK_FIELD_MAP = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "category": "category",
    "dueDate": "due_date",
    "tags": "tags",
}
