from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from erp.core.exceptions import BusinessRuleError
from erp.core.utils import create_audit_log
from .models import Project, Task, ProjectChecklist, TaskChecklist
from .serializers import (
    ProjectSerializer, TaskSerializer,
    ProjectChecklistSerializer, TaskChecklistSerializer,
)
from .services import (
    PROJECT_TRANSITIONS, TASK_TRANSITIONS,
    checklist_progress, recompute_project_progress,
)


def apply_transition(request, table, instance, serializer_class, model_name, object_name):
    target = request.data.get('status')
    if not target:
        return Response({'status': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)

    previous = instance.status
    try:
        instance = table.transition(instance, target, user=request.user)
    except BusinessRuleError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='status_change', model_name=model_name,
                     object_id=instance.id, object_name=object_name,
                     changes={'status': {'from': previous, 'to': instance.status}})
    return Response(serializer_class(instance).data)


# Project views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_list_create(request):
    """List projects or create one"""
    if request.method == 'GET':
        queryset = Project.objects.select_related('customer', 'budget')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        customer = request.query_params.get('customer')
        if customer:
            queryset = queryset.filter(customer_id=customer)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
        return Response(ProjectSerializer(queryset.order_by('deadline', 'id'), many=True).data)
    else:
        serializer = ProjectSerializer(data=request.data)
        if serializer.is_valid():
            project = serializer.save(created_by=request.user)
            create_audit_log(request=request, action='create', model_name='Project',
                             object_id=project.id, object_name=project.name)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_detail(request, pk):
    """Retrieve, update or delete a project"""
    project = get_object_or_404(Project.objects.select_related('customer', 'budget'), pk=pk)

    if request.method == 'GET':
        return Response(ProjectSerializer(project).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProjectSerializer(project, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='Project',
                             object_id=project.id, object_name=project.name,
                             changes={'fields': sorted(serializer.validated_data)})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Project',
                         object_id=project.id, object_name=project.name)
        project.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def project_transition(request, pk):
    """Move a project card to another kanban column"""
    project = get_object_or_404(Project, pk=pk)
    return apply_transition(request, PROJECT_TRANSITIONS, project, ProjectSerializer, 'Project', project.name)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_checklist_list_create(request, pk):
    """List or add checklist items of a project; progress follows the checklist"""
    project = get_object_or_404(Project, pk=pk)
    if request.method == 'GET':
        return Response(ProjectChecklistSerializer(project.checklist.all(), many=True).data)
    else:
        serializer = ProjectChecklistSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(project=project)
            recompute_project_progress(project)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def project_checklist_detail(request, pk):
    """Update or delete one project checklist item"""
    item = get_object_or_404(ProjectChecklist.objects.select_related('project'), pk=pk)
    project = item.project

    if request.method in ('PUT', 'PATCH'):
        serializer = ProjectChecklistSerializer(item, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            recompute_project_progress(project)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        item.delete()
        recompute_project_progress(project)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Task views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def task_list_create(request):
    """List tasks or create one"""
    if request.method == 'GET':
        queryset = Task.objects.select_related('project', 'assigned_to')
        for param in ('status', 'priority'):
            value = request.query_params.get(param)
            if value:
                queryset = queryset.filter(**{param: value})
        project = request.query_params.get('project')
        if project:
            queryset = queryset.filter(project_id=project)
        assigned_to = request.query_params.get('assigned_to')
        if assigned_to:
            queryset = queryset.filter(assigned_to_id=assigned_to)
        return Response(TaskSerializer(queryset.order_by('due_date', 'id'), many=True).data)
    else:
        serializer = TaskSerializer(data=request.data)
        if serializer.is_valid():
            task = serializer.save(created_by=request.user)
            create_audit_log(request=request, action='create', model_name='Task',
                             object_id=task.id, object_name=task.title)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def task_detail(request, pk):
    """Retrieve, update or delete a task"""
    task = get_object_or_404(Task.objects.select_related('project', 'assigned_to'), pk=pk)

    if request.method == 'GET':
        return Response(TaskSerializer(task).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = TaskSerializer(task, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Task',
                         object_id=task.id, object_name=task.title)
        task.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def task_transition(request, pk):
    """Move a task card to another kanban column"""
    task = get_object_or_404(Task, pk=pk)
    return apply_transition(request, TASK_TRANSITIONS, task, TaskSerializer, 'Task', task.title)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def task_checklist_list_create(request, pk):
    task = get_object_or_404(Task, pk=pk)
    if request.method == 'GET':
        return Response(TaskChecklistSerializer(task.checklist.all(), many=True).data)
    else:
        serializer = TaskChecklistSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(task=task)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def task_checklist_detail(request, pk):
    item = get_object_or_404(TaskChecklist, pk=pk)

    if request.method in ('PUT', 'PATCH'):
        serializer = TaskChecklistSerializer(item, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        item.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def task_checklist_progress(request, pk):
    """Completion summary of a task checklist: total, completed and whole percentage"""
    task = get_object_or_404(Task, pk=pk)
    return Response(checklist_progress(task.checklist))
