"""
Test suite for Scheduling module
Tests: calendar events, merged agenda feed, monthly financial alerts
"""
from datetime import date, datetime, time
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from erp.finance.installments import create_payable_installments, create_receivable_installments
from .models import CalendarEvent
from .services import build_agenda, months_between


def aware(day, hour=9):
    return timezone.make_aware(datetime.combine(day, time(hour, 0)))


class CalendarEventAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_event(self):
        response = self.client.post('/api/v1/calendar/events/', {
            'title': 'Visita técnica',
            'event_type': 'visit',
            'start_date': '2025-06-10T14:00:00Z',
            'end_date': '2025-06-10T15:00:00Z',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(CalendarEvent.objects.get().created_by, self.user)

    def test_event_cannot_end_before_start(self):
        response = self.client.post('/api/v1/calendar/events/', {
            'title': 'Reunião',
            'start_date': '2025-06-10T15:00:00Z',
            'end_date': '2025-06-10T14:00:00Z',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('end_date', response.data)


class AgendaTests(TestCase):
    """The agenda merges every dated item of the period"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_months_between(self):
        self.assertEqual(
            list(months_between(date(2024, 11, 20), date(2025, 2, 1))),
            [(2024, 11), (2024, 12), (2025, 1), (2025, 2)],
        )

    def test_agenda_merges_sources(self):
        CalendarEvent.objects.create(title='Reunião', start_date=aware(date(2025, 6, 12), 10),
                                     end_date=aware(date(2025, 6, 12), 11))
        TestDataFactory.create_task(user=self.user, title='Entregar layout', due_date=aware(date(2025, 6, 20)))
        create_payable_installments(description='Fornecedor X', amount=Decimal('300'), due_date=date(2025, 6, 5))
        create_receivable_installments(description='Pedido', amount=Decimal('800'), due_date=date(2025, 6, 25))
        TestDataFactory.create_recurring_expense(user=self.user, name='Internet', day_of_month=15,
                                                 start_date=date(2025, 1, 1))
        CalendarEvent.objects.create(title='Fora do mês', start_date=aware(date(2025, 7, 2)),
                                     end_date=aware(date(2025, 7, 2), 10))

        response = self.client.get('/api/v1/calendar/agenda/?start_date=2025-06-01&end_date=2025-06-30')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        types = [entry['type'] for entry in response.data]
        self.assertEqual(types, ['payable', 'event', 'recurring', 'task', 'receivable'])
        recurring = response.data[2]
        self.assertEqual(recurring['start'], date(2025, 6, 15))
        self.assertEqual(recurring['title'], '[Despesa Recorrente] Internet')

    def test_multi_day_event_overlapping_range(self):
        CalendarEvent.objects.create(title='Feira', start_date=aware(date(2025, 5, 30)),
                                     end_date=aware(date(2025, 6, 2)))
        entries = build_agenda(date(2025, 6, 1), date(2025, 6, 30))
        self.assertEqual([entry['title'] for entry in entries], ['Feira'])

    def test_quarterly_expense_only_in_billing_months(self):
        TestDataFactory.create_recurring_expense(user=self.user, frequency='quarterly', day_of_month=10,
                                                 start_date=date(2025, 1, 1))
        entries = build_agenda(date(2025, 1, 1), date(2025, 6, 30))
        self.assertEqual([entry['start'] for entry in entries], [date(2025, 1, 10), date(2025, 4, 10)])

    def test_range_validation(self):
        response = self.client.get('/api/v1/calendar/agenda/?start_date=2025-06-30&end_date=2025-06-01')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_range_is_limited_to_a_year(self):
        response = self.client.get('/api/v1/calendar/agenda/?start_date=0001-01-01&end_date=9999-12-31')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/calendar/agenda/?start_date=2024-01-01&end_date=2025-06-30')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/calendar/agenda/?start_date=2025-01-01&end_date=2025-12-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_defaults_to_current_month(self):
        today = timezone.localdate()
        create_payable_installments(description='Hoje', amount=Decimal('10'), due_date=today)
        response = self.client.get('/api/v1/calendar/agenda/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([entry['type'] for entry in response.data], ['payable'])


class FinancialAlertsTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_pending_items_of_the_month(self):
        create_payable_installments(description='Junho', amount=Decimal('10'), due_date=date(2025, 6, 5))
        paid = create_payable_installments(description='Pago', amount=Decimal('10'), due_date=date(2025, 6, 6))[0]
        paid.status = 'paid'
        paid.save()
        create_payable_installments(description='Julho', amount=Decimal('10'), due_date=date(2025, 7, 5))
        create_receivable_installments(description='Receber', amount=Decimal('50'), due_date=date(2025, 6, 30))

        response = self.client.get('/api/v1/calendar/financial-alerts/?year=2025&month=6')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['description'] for p in response.data['payables']], ['Junho'])
        self.assertEqual([r['description'] for r in response.data['receivables']], ['Receber'])

    def test_invalid_month(self):
        response = self.client.get('/api/v1/calendar/financial-alerts/?year=2025&month=13')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/calendar/financial-alerts/?year=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/calendar/financial-alerts/?year=0&month=6')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
