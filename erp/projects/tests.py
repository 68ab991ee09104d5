"""
Test suite for Projects module
Tests: kanban transitions for projects and tasks, completion stamps, checklist progress
"""
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Project, Task, ProjectChecklist, TaskChecklist
from .services import percentage


class PercentageTests(SimpleTestCase):
    def test_rounds_half_up(self):
        self.assertEqual(percentage(0, 0), 0)
        self.assertEqual(percentage(1, 3), 33)
        self.assertEqual(percentage(2, 3), 67)
        self.assertEqual(percentage(1, 8), 13)
        self.assertEqual(percentage(1, 2), 50)
        self.assertEqual(percentage(3, 3), 100)


class ProjectAPITests(TestCase):
    """Test project CRUD and kanban moves"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def transition(self, project, target):
        return self.client.post(f'/api/v1/projects/{project.id}/transition/', {'status': target}, format='json')

    def test_create_project(self):
        customer = TestDataFactory.create_customer()
        response = self.client.post('/api/v1/projects/', {
            'name': 'Site institucional',
            'customer': customer.id,
            'value': '5000.00',
            'deadline': '2030-01-31T18:00:00Z',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'project')
        self.assertEqual(response.data['progress'], 0)
        self.assertEqual(Project.objects.get().created_by, self.user)

    def test_status_moves_through_transition_endpoint_only(self):
        project = TestDataFactory.create_project(user=self.user)
        response = self.client.patch(f'/api/v1/projects/{project.id}/', {'status': 'launched'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        project.refresh_from_db()
        self.assertEqual(project.status, 'project')

    def test_kanban_moves(self):
        project = TestDataFactory.create_project(user=self.user)
        for target in ('development', 'design', 'review', 'design', 'review', 'launched'):
            response = self.transition(project, target)
            self.assertEqual(response.status_code, status.HTTP_200_OK, target)
        self.assertEqual(response.data['status'], 'launched')

    def test_card_can_be_dropped_on_any_column(self):
        project = TestDataFactory.create_project(user=self.user)
        response = self.transition(project, 'launched')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'launched')
        self.assertEqual(self.transition(project, 'project').status_code, status.HTTP_200_OK)

    def test_same_column_is_rejected(self):
        project = TestDataFactory.create_project(user=self.user)
        response = self.transition(project, 'project')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['allowed'], ['cancelled', 'design', 'development', 'launched', 'review'])

    def test_unknown_column_is_rejected(self):
        project = TestDataFactory.create_project(user=self.user)
        response = self.transition(project, 'archived')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_and_reopen(self):
        project = TestDataFactory.create_project(user=self.user, status='design')
        self.assertEqual(self.transition(project, 'cancelled').status_code, status.HTTP_200_OK)
        self.assertEqual(self.transition(project, 'design').status_code, status.HTTP_200_OK)

    def test_checklist_drives_progress(self):
        project = TestDataFactory.create_project(user=self.user)
        url = f'/api/v1/projects/{project.id}/checklist/'
        ids = []
        for title in ('Briefing', 'Layout', 'Entrega'):
            response = self.client.post(url, {'title': title}, format='json')
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)
            ids.append(response.data['id'])

        response = self.client.patch(f'/api/v1/project-checklist/{ids[0]}/', {'completed': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        project.refresh_from_db()
        self.assertEqual(project.progress, 33)

        self.client.patch(f'/api/v1/project-checklist/{ids[1]}/', {'completed': True}, format='json')
        project.refresh_from_db()
        self.assertEqual(project.progress, 67)

        response = self.client.delete(f'/api/v1/project-checklist/{ids[2]}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        project.refresh_from_db()
        self.assertEqual(project.progress, 100)
        self.assertEqual(ProjectChecklist.objects.filter(project=project).count(), 2)

    def test_unknown_project(self):
        response = self.client.get('/api/v1/projects/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class TaskAPITests(TestCase):
    """Test task moves and checklists"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.project = TestDataFactory.create_project(user=self.user)

    def transition(self, task, target):
        return self.client.post(f'/api/v1/tasks/{task.id}/transition/', {'status': target}, format='json')

    def test_create_task(self):
        response = self.client.post('/api/v1/tasks/', {
            'title': 'Montar protótipo',
            'project': self.project.id,
            'priority': 'high',
            'assigned_to': self.user.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'todo')
        self.assertEqual(response.data['project_name'], self.project.name)

    def test_done_stamps_completion_date(self):
        task = TestDataFactory.create_task(user=self.user, project=self.project)
        for target in ('in_progress', 'review', 'done'):
            response = self.transition(task, target)
            self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data['completed_date'])
        task.refresh_from_db()
        self.assertIsNotNone(task.completed_date)

    def test_reopening_clears_completion_date(self):
        task = TestDataFactory.create_task(user=self.user, project=self.project, status='review')
        self.transition(task, 'done')
        response = self.transition(task, 'review')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['completed_date'])

    def test_todo_can_jump_to_done(self):
        task = TestDataFactory.create_task(user=self.user, project=self.project)
        response = self.transition(task, 'done')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        task.refresh_from_db()
        self.assertEqual(task.status, 'done')
        self.assertIsNotNone(task.completed_date)

    def test_leaving_done_for_any_column_clears_completion_date(self):
        task = TestDataFactory.create_task(user=self.user, project=self.project)
        self.transition(task, 'done')
        response = self.transition(task, 'todo')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['completed_date'])

    def test_same_column_is_rejected(self):
        task = TestDataFactory.create_task(user=self.user, project=self.project, status='review')
        response = self.transition(task, 'review')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['allowed'], ['cancelled', 'done', 'in_progress', 'todo'])

    def test_filter_by_project_and_status(self):
        TestDataFactory.create_task(user=self.user, project=self.project, status='review')
        TestDataFactory.create_task(user=self.user, project=self.project)
        TestDataFactory.create_task(user=self.user)
        response = self.client.get(f'/api/v1/tasks/?project={self.project.id}&status=review')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_task_checklist_progress(self):
        task = TestDataFactory.create_task(user=self.user, project=self.project)
        url = f'/api/v1/tasks/{task.id}/checklist/'
        for title in ('A', 'B', 'C', 'D', 'E', 'F', 'G', 'H'):
            self.client.post(url, {'title': title}, format='json')
        first = TaskChecklist.objects.filter(task=task).first()
        response = self.client.patch(f'/api/v1/task-checklist/{first.id}/', {'completed': True}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(f'/api/v1/tasks/{task.id}/checklist/progress/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'total': 8, 'completed': 1, 'percentage': 13})

    def test_empty_checklist_progress(self):
        task = TestDataFactory.create_task(user=self.user)
        response = self.client.get(f'/api/v1/tasks/{task.id}/checklist/progress/')
        self.assertEqual(response.data, {'total': 0, 'completed': 0, 'percentage': 0})

    def test_delete_task(self):
        task = TestDataFactory.create_task(user=self.user)
        response = self.client.delete(f'/api/v1/tasks/{task.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Task.objects.filter(pk=task.pk).exists())
