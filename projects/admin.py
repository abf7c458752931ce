from django.contrib import admin

from .models import Project, Task


class TaskInline(admin.TabularInline):
    model = Task
    extra = 0
    fields = ("title", "user", "status", "priority", "due_date")


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("title", "manager", "team_leader", "status", "deadline", "created_at")
    list_filter = ("status",)
    search_fields = ("title", "description")
    filter_horizontal = ("members",)
    inlines = [TaskInline]


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ("title", "user", "project", "status", "priority", "due_date")
    list_filter = ("status", "priority", "category")
    search_fields = ("title", "description")
