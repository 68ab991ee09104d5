"""Kanban status tables for projects and tasks, and checklist progress"""
import logging

from django.utils import timezone

from erp.core.transitions import TransitionTable, ANY
from .models import Project, Task

logger = logging.getLogger(__name__)

PROJECT_COLUMNS = [status for status, _ in Project.STATUS_CHOICES]
TASK_COLUMNS = [status for status, _ in Task.STATUS_CHOICES]


def open_board(columns):
    """A card may be dropped on any column other than its own"""
    return {column: [target for target in columns if target != column] for column in columns}


PROJECT_TRANSITIONS = TransitionTable('Project', open_board(PROJECT_COLUMNS))

TASK_TRANSITIONS = TransitionTable('Task', open_board(TASK_COLUMNS))


@TASK_TRANSITIONS.on(ANY, 'done')
def stamp_completed_date(task, previous, user=None):
    task.completed_date = timezone.now()
    task.save(update_fields=['completed_date', 'updated_at'])


def clear_completed_date(task, previous, user=None):
    task.completed_date = None
    task.save(update_fields=['completed_date', 'updated_at'])


for _target in TASK_COLUMNS:
    if _target != 'done':
        TASK_TRANSITIONS.on('done', _target)(clear_completed_date)


def percentage(completed, total):
    """Whole percentage rounded half up; 0 for an empty checklist"""
    if not total:
        return 0
    return (completed * 200 + total) // (2 * total)


def checklist_progress(checklist):
    total = checklist.count()
    completed = checklist.filter(completed=True).count()
    return {'total': total, 'completed': completed, 'percentage': percentage(completed, total)}


def recompute_project_progress(project):
    """Store the checklist completion ratio as the project progress"""
    progress = checklist_progress(project.checklist)['percentage']
    if project.progress != progress:
        project.progress = progress
        project.save(update_fields=['progress', 'updated_at'])
        logger.debug("Project #%s progress now %s%%", project.pk, progress)
    return progress
