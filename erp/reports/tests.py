"""
Test suite for Reports module
Tests: dashboard totals, cash flow, due-today lists, CSV exports
"""
from datetime import date, timedelta
from decimal import Decimal
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from erp.core.models import AuditLog
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from erp.finance.installments import create_payable_installments, create_receivable_installments
from erp.finance.services import mark_payable_paid, mark_receivable_received


class DashboardTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_dashboard_totals(self):
        product = TestDataFactory.create_product()
        TestDataFactory.create_order(user=self.user, status='completed',
                                     items=[(product, Decimal('2'), Decimal('150.00'))])
        TestDataFactory.create_order(user=self.user, status='pending',
                                     items=[(product, Decimal('1'), Decimal('999.00'))])
        payable = create_payable_installments(description='Luz', amount=Decimal('80.00'), due_date=date(2025, 6, 10))[0]
        create_payable_installments(description='Água', amount=Decimal('40.00'), due_date=date(2025, 6, 10))
        mark_payable_paid(payable)
        create_receivable_installments(description='Serviço', amount=Decimal('500.00'), due_date=date(2025, 6, 10))

        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_sales'], Decimal('300.00'))
        self.assertEqual(response.data['accounts_payable']['pending'], Decimal('40.00'))
        self.assertEqual(response.data['accounts_payable']['paid'], Decimal('80.00'))
        self.assertEqual(response.data['accounts_receivable']['pending'], Decimal('500.00'))
        self.assertEqual(response.data['accounts_receivable']['received'], Decimal('0.00'))

    def test_empty_dashboard(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_sales'], Decimal('0.00'))


class CashFlowTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_monthly_balance(self):
        receivable = create_receivable_installments(description='Serviço', amount=Decimal('500.00'), due_date=date(2025, 3, 1))[0]
        mark_receivable_received(receivable, date(2025, 3, 10))
        payable = create_payable_installments(description='Material', amount=Decimal('200.00'), due_date=date(2025, 3, 1))[0]
        mark_payable_paid(payable, date(2025, 3, 15))
        create_payable_installments(description='Pendente', amount=Decimal('999.00'), due_date=date(2025, 3, 1))

        response = self.client.get('/api/v1/reports/cash-flow/?year=2025')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['months']), 12)
        march = response.data['months'][2]
        self.assertEqual(march['month'], 3)
        self.assertEqual(march['income'], Decimal('500.00'))
        self.assertEqual(march['expense'], Decimal('200.00'))
        self.assertEqual(march['balance'], Decimal('300.00'))
        self.assertEqual(response.data['months'][0]['balance'], Decimal('0.00'))

    def test_invalid_year(self):
        response = self.client.get('/api/v1/reports/cash-flow/?year=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_year_out_of_range(self):
        for year in ('0', '-5', '10000'):
            response = self.client.get(f'/api/v1/reports/cash-flow/?year={year}')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, year)
        response = self.client.get('/api/v1/reports/cash-flow/?year=2030')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class DueTodayTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_payments_due_today(self):
        today = timezone.localdate()
        create_payable_installments(description='Hoje', amount=Decimal('25.00'), due_date=today)
        create_payable_installments(description='Amanhã', amount=Decimal('10.00'), due_date=today + timedelta(days=1))
        response = self.client.get('/api/v1/reports/payments-due-today/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['total_amount'], Decimal('25.00'))

    def test_recurring_due_today(self):
        today = timezone.localdate()
        TestDataFactory.create_recurring_expense(user=self.user, name='Hoje', day_of_month=today.day,
                                                 amount=Decimal('70.00'))
        TestDataFactory.create_recurring_expense(user=self.user, name='Pausada', day_of_month=today.day,
                                                 status='paused')
        response = self.client.get('/api/v1/reports/recurring-due-today/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([e['name'] for e in response.data['expenses']], ['Hoje'])
        self.assertEqual(response.data['total_amount'], Decimal('70.00'))


class ExportTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_export_payables(self):
        create_payable_installments(description='Equipamento', amount=Decimal('90.00'),
                                    due_date=date(2025, 6, 10), installments=3)
        response = self.client.get('/api/v1/reports/export/payables/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('contas-a-pagar.csv', response['Content-Disposition'])
        lines = response.content.decode('utf-8').lstrip('\ufeff').strip().splitlines()
        self.assertEqual(len(lines), 4)
        self.assertIn('Equipamento (1/3)', lines[1])
        self.assertTrue(AuditLog.objects.filter(action='export', model_name='AccountPayable').exists())

    def test_export_receivables_filtered(self):
        create_receivable_installments(description='Junho', amount=Decimal('10'), due_date=date(2025, 6, 10))
        create_receivable_installments(description='Julho', amount=Decimal('10'), due_date=date(2025, 7, 10))
        response = self.client.get('/api/v1/reports/export/receivables/?start_date=2025-07-01')
        content = response.content.decode('utf-8')
        self.assertIn('Julho', content)
        self.assertNotIn('Junho', content)

    def test_export_orders(self):
        order = TestDataFactory.create_order(user=self.user, status='completed')
        response = self.client.get('/api/v1/reports/export/orders/?status=completed')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(order.order_number, response.content.decode('utf-8'))
