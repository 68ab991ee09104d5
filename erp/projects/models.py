from django.conf import settings
from django.core.validators import MaxValueValidator
from django.db import models
from decimal import Decimal


class Project(models.Model):
    """Kanban card for delivery work, optionally opened from a budget"""
    STATUS_CHOICES = [
        ('project', 'Project'),
        ('development', 'Development'),
        ('design', 'Design'),
        ('review', 'Review'),
        ('launched', 'Launched'),
        ('cancelled', 'Cancelled'),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='projects')
    budget = models.OneToOneField('budgets.Budget', on_delete=models.SET_NULL, null=True, blank=True, related_name='project')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='project')
    progress = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(100)])
    value = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    deadline = models.DateTimeField()
    meeting_date = models.DateTimeField(null=True, blank=True)
    approval_date = models.DateTimeField(null=True, blank=True)
    review_date = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='projects_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'projects'
        ordering = ['deadline']
        indexes = [
            models.Index(fields=['status'], name='projects_status_3a9c51_idx'),
        ]


class Task(models.Model):
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]
    STATUS_CHOICES = [
        ('todo', 'To do'),
        ('in_progress', 'In progress'),
        ('review', 'Review'),
        ('done', 'Done'),
        ('cancelled', 'Cancelled'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    project = models.ForeignKey(Project, on_delete=models.SET_NULL, null=True, blank=True, related_name='tasks')
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_tasks')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='todo')
    estimated_hours = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    due_date = models.DateTimeField(null=True, blank=True)
    completed_date = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='tasks_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'tasks'
        ordering = ['due_date', 'id']
        indexes = [
            models.Index(fields=['status'], name='tasks_status_8e17d2_idx'),
            models.Index(fields=['due_date'], name='tasks_due_dat_4c6b09_idx'),
        ]


class ChecklistItem(models.Model):
    title = models.CharField(max_length=255)
    completed = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        abstract = True
        ordering = ['order', 'id']


class ProjectChecklist(ChecklistItem):
    project = models.ForeignKey(Project, on_delete=models.CASCADE, related_name='checklist')

    class Meta(ChecklistItem.Meta):
        db_table = 'project_checklists'


class TaskChecklist(ChecklistItem):
    task = models.ForeignKey(Task, on_delete=models.CASCADE, related_name='checklist')

    class Meta(ChecklistItem.Meta):
        db_table = 'task_checklists'
