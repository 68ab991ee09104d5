from django.contrib import admin
from .models import Project, Task, ProjectChecklist, TaskChecklist


class ProjectChecklistInline(admin.TabularInline):
    model = ProjectChecklist
    extra = 0


class TaskChecklistInline(admin.TabularInline):
    model = TaskChecklist
    extra = 0


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['name', 'customer', 'status', 'progress', 'value', 'deadline']
    list_filter = ['status']
    search_fields = ['name', 'customer__name']
    inlines = [ProjectChecklistInline]


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'project', 'assigned_to', 'priority', 'status', 'due_date', 'completed_date']
    list_filter = ['status', 'priority']
    search_fields = ['title', 'project__name']
    inlines = [TaskChecklistInline]
