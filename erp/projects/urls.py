from django.urls import path
from .views import (
    project_list_create, project_detail, project_transition,
    project_checklist_list_create, project_checklist_detail,
    task_list_create, task_detail, task_transition,
    task_checklist_list_create, task_checklist_detail, task_checklist_progress,
)

urlpatterns = [
    # Project endpoints
    path('projects/', project_list_create, name='project-list-create'),
    path('projects/<int:pk>/', project_detail, name='project-detail'),
    path('projects/<int:pk>/transition/', project_transition, name='project-transition'),
    path('projects/<int:pk>/checklist/', project_checklist_list_create, name='project-checklist-list-create'),
    path('project-checklist/<int:pk>/', project_checklist_detail, name='project-checklist-detail'),

    # Task endpoints
    path('tasks/', task_list_create, name='task-list-create'),
    path('tasks/<int:pk>/', task_detail, name='task-detail'),
    path('tasks/<int:pk>/transition/', task_transition, name='task-transition'),
    path('tasks/<int:pk>/checklist/', task_checklist_list_create, name='task-checklist-list-create'),
    path('tasks/<int:pk>/checklist/progress/', task_checklist_progress, name='task-checklist-progress'),
    path('task-checklist/<int:pk>/', task_checklist_detail, name='task-checklist-detail'),
]
