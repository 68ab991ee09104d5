from rest_framework import serializers
from .models import Project, Task, ProjectChecklist, TaskChecklist


class ProjectChecklistSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProjectChecklist
        fields = ['id', 'project', 'title', 'completed', 'order', 'created_at', 'updated_at']
        read_only_fields = ['project', 'created_at', 'updated_at']


class TaskChecklistSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaskChecklist
        fields = ['id', 'task', 'title', 'completed', 'order', 'created_at', 'updated_at']
        read_only_fields = ['task', 'created_at', 'updated_at']


class ProjectSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    budget_number = serializers.CharField(source='budget.budget_number', read_only=True)
    tasks_count = serializers.SerializerMethodField()

    def get_tasks_count(self, obj):
        return obj.tasks.count()

    class Meta:
        model = Project
        fields = [
            'id', 'name', 'description', 'customer', 'customer_name', 'budget', 'budget_number',
            'status', 'progress', 'value', 'deadline', 'meeting_date', 'approval_date', 'review_date',
            'tasks_count', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['status', 'created_by', 'created_at', 'updated_at']

    def validate_value(self, value):
        if value < 0:
            raise serializers.ValidationError('Value cannot be negative.')
        return value


class TaskSerializer(serializers.ModelSerializer):
    project_name = serializers.CharField(source='project.name', read_only=True)
    assigned_to_name = serializers.CharField(source='assigned_to.get_full_name', read_only=True)

    class Meta:
        model = Task
        fields = [
            'id', 'title', 'description', 'project', 'project_name', 'assigned_to', 'assigned_to_name',
            'priority', 'status', 'estimated_hours', 'due_date', 'completed_date',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['status', 'completed_date', 'created_by', 'created_at', 'updated_at']
