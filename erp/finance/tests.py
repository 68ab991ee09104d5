"""
Test suite for Finance module
Tests: installment splitting, payables/receivables API, settlement, recurring expense billing
"""
from io import StringIO
from datetime import date
from decimal import Decimal
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase
from django.utils import timezone
from rest_framework import status
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .installments import (
    split_amount, installment_due_dates, normalize_installment_count,
    create_payable_installments, create_receivable_installments,
)
from .models import AccountPayable, AccountReceivable, RecurringExpense
from .services import generate_monthly_bills, mark_overdue


class SplitAmountTests(SimpleTestCase):
    """Installment amounts always add up to the total"""

    def test_even_split(self):
        self.assertEqual(split_amount(Decimal('1200.00'), 3), [Decimal('400.00')] * 3)

    def test_remainder_goes_to_last_installment(self):
        amounts = split_amount(Decimal('100.00'), 3)
        self.assertEqual(amounts, [Decimal('33.33'), Decimal('33.33'), Decimal('33.34')])

    def test_sum_matches_total(self):
        for total in ('0.01', '10.00', '99.99', '1000.01', '12345.67'):
            for count in (1, 2, 3, 7, 12, 120):
                amounts = split_amount(Decimal(total), count)
                self.assertEqual(len(amounts), count)
                self.assertEqual(sum(amounts), Decimal(total))

    def test_missing_count_means_one(self):
        self.assertEqual(normalize_installment_count(None), 1)
        self.assertEqual(normalize_installment_count(''), 1)

    def test_count_out_of_range(self):
        for value in (0, -1, 121, 'abc'):
            with self.assertRaises(ValueError):
                normalize_installment_count(value)

    def test_monthly_due_dates_keep_the_day(self):
        dates = installment_due_dates(date(2025, 1, 15), 3)
        self.assertEqual(dates, [date(2025, 1, 15), date(2025, 2, 15), date(2025, 3, 15)])

    def test_due_dates_clamped_in_short_months(self):
        dates = installment_due_dates(date(2025, 1, 31), 3)
        self.assertEqual(dates, [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31)])


class InstallmentGeneratorTests(TestCase):
    def test_single_installment_is_a_plain_account(self):
        rows = create_payable_installments(description='Aluguel', amount=Decimal('500.00'), due_date=date(2025, 5, 10))
        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row.description, 'Aluguel')
        self.assertEqual(row.installment_number, 1)
        self.assertEqual(row.total_installments, 1)
        self.assertIsNone(row.parent_payable_id)

    def test_rows_share_the_first_row_as_parent(self):
        rows = create_receivable_installments(
            description='Pedido PED-2025-0001', amount=Decimal('1000.00'),
            due_date=date(2025, 5, 10), installments=3,
        )
        self.assertEqual([row.installment_number for row in rows], [1, 2, 3])
        self.assertEqual({row.parent_receivable_id for row in rows}, {rows[0].id})
        self.assertEqual(rows[1].description, 'Pedido PED-2025-0001 (2/3)')
        self.assertEqual(sum(row.amount for row in rows), Decimal('1000.00'))
        self.assertEqual(rows[2].amount, Decimal('333.34'))
        self.assertEqual(rows[2].due_date, date(2025, 7, 10))


class AccountPayableAPITests(TestCase):
    """Test payables endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier()

    def test_create_single_payable(self):
        response = self.client.post('/api/v1/accounts-payable/', {
            'supplier': self.supplier.id,
            'description': 'Compra de tinta',
            'amount': '250.00',
            'due_date': '2025-06-10',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['status'], 'pending')
        self.assertIsNone(response.data[0]['parent_payable'])

    def test_create_with_installments(self):
        """One request with installments=3 creates three monthly rows"""
        response = self.client.post('/api/v1/accounts-payable/', {
            'supplier': self.supplier.id,
            'description': 'Equipamento',
            'amount': '100.00',
            'due_date': '2025-06-10',
            'installments': 3,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 3)
        self.assertEqual([row['amount'] for row in response.data], ['33.33', '33.33', '33.34'])
        self.assertEqual([row['due_date'] for row in response.data], ['2025-06-10', '2025-07-10', '2025-08-10'])
        self.assertEqual(AccountPayable.objects.filter(created_by=self.user).count(), 3)

    def test_rejects_non_positive_amount(self):
        response = self.client.post('/api/v1/accounts-payable/', {
            'description': 'Nada', 'amount': '0', 'due_date': '2025-06-10',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rejects_too_many_installments(self):
        response = self.client.post('/api/v1/accounts-payable/', {
            'description': 'Muito', 'amount': '10', 'due_date': '2025-06-10', 'installments': 121,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_one_installment_paid(self):
        """Paying an installment leaves its siblings pending"""
        rows = create_payable_installments(
            description='Equipamento', amount=Decimal('300.00'),
            due_date=date(2025, 6, 10), installments=3, supplier=self.supplier,
        )
        response = self.client.post(f'/api/v1/accounts-payable/{rows[1].id}/mark-paid/',
                                    {'payment_date': '2025-07-09'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'paid')
        self.assertEqual(response.data['payment_date'], '2025-07-09')

        statuses = list(AccountPayable.objects.filter(parent_payable=rows[0]).order_by('installment_number')
                        .values_list('status', flat=True))
        self.assertEqual(statuses, ['pending', 'paid', 'pending'])

    def test_mark_paid_defaults_to_today(self):
        payable = create_payable_installments(description='Luz', amount=Decimal('80'), due_date=date(2025, 6, 10))[0]
        response = self.client.post(f'/api/v1/accounts-payable/{payable.id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['payment_date'], timezone.localdate().isoformat())

    def test_mark_paid_with_bad_date(self):
        payable = create_payable_installments(description='Luz', amount=Decimal('80'), due_date=date(2025, 6, 10))[0]
        response = self.client.post(f'/api/v1/accounts-payable/{payable.id}/mark-paid/',
                                    {'payment_date': '10/06/2025'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_paid_with_numeric_date(self):
        payable = create_payable_installments(description='Luz', amount=Decimal('80'), due_date=date(2025, 6, 10))[0]
        response = self.client.post(f'/api/v1/accounts-payable/{payable.id}/mark-paid/',
                                    {'payment_date': 20250101}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('payment_date', response.data)
        payable.refresh_from_db()
        self.assertEqual(payable.status, 'pending')

    def test_cancelled_payable_cannot_be_paid(self):
        payable = create_payable_installments(description='Luz', amount=Decimal('80'), due_date=date(2025, 6, 10))[0]
        payable.status = 'cancelled'
        payable.save()
        response = self.client.post(f'/api/v1/accounts-payable/{payable.id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'payable_cancelled')

    def test_list_filters(self):
        create_payable_installments(description='Luz', amount=Decimal('80'), due_date=date(2025, 6, 10))
        create_payable_installments(description='Água', amount=Decimal('40'), due_date=date(2025, 7, 10))
        response = self.client.get('/api/v1/accounts-payable/?start_date=2025-07-01&end_date=2025-07-31')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['description'], 'Água')

    def test_unknown_payable(self):
        response = self.client.post('/api/v1/accounts-payable/99999/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class AccountReceivableAPITests(TestCase):
    """Test receivables endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()

    def test_create_with_installments(self):
        response = self.client.post('/api/v1/accounts-receivable/', {
            'customer': self.customer.id,
            'description': 'Serviço',
            'amount': '900.00',
            'due_date': '2025-06-05',
            'installments': 2,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual([row['installment_number'] for row in response.data], [1, 2])
        self.assertEqual(response.data[0]['parent_receivable'], response.data[0]['id'])
        self.assertEqual(response.data[1]['parent_receivable'], response.data[0]['id'])

    def test_mark_received(self):
        rows = create_receivable_installments(
            description='Serviço', amount=Decimal('900.00'), due_date=date(2025, 6, 5),
            installments=2, customer=self.customer,
        )
        response = self.client.post(f'/api/v1/accounts-receivable/{rows[0].id}/mark-received/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'received')
        rows[1].refresh_from_db()
        self.assertEqual(rows[1].status, 'pending')

    def test_mark_received_with_numeric_date(self):
        receivable = create_receivable_installments(description='Serviço', amount=Decimal('50'),
                                                    due_date=date(2025, 6, 5))[0]
        response = self.client.post(f'/api/v1/accounts-receivable/{receivable.id}/mark-received/',
                                    {'received_date': 20250101}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('received_date', response.data)

    def test_filter_by_customer(self):
        other = TestDataFactory.create_customer()
        create_receivable_installments(description='A', amount=Decimal('10'), due_date=date(2025, 6, 5), customer=self.customer)
        create_receivable_installments(description='B', amount=Decimal('10'), due_date=date(2025, 6, 5), customer=other)
        response = self.client.get(f'/api/v1/accounts-receivable/?customer={self.customer.id}')
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['description'], 'A')


class OverdueTests(TestCase):
    def test_mark_overdue(self):
        create_payable_installments(description='Atrasada', amount=Decimal('10'), due_date=date(2025, 1, 10))
        create_payable_installments(description='Futura', amount=Decimal('10'), due_date=date(2025, 3, 10))
        create_receivable_installments(description='Atrasada', amount=Decimal('10'), due_date=date(2025, 1, 10))
        payables, receivables = mark_overdue(today=date(2025, 2, 1))
        self.assertEqual((payables, receivables), (1, 1))
        self.assertEqual(AccountPayable.objects.get(description='Futura').status, 'pending')
        self.assertEqual(AccountReceivable.objects.get().status, 'overdue')


class RecurringExpenseTests(TestCase):
    """Billing schedule of recurring expenses"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_due_date_clamped_to_month_end(self):
        expense = TestDataFactory.create_recurring_expense(user=self.user, day_of_month=31,
                                                           start_date=date(2024, 1, 1))
        self.assertEqual(expense.due_date_in(2025, 2), date(2025, 2, 28))
        self.assertEqual(expense.due_date_in(2024, 2), date(2024, 2, 29))
        self.assertEqual(expense.due_date_in(2025, 4), date(2025, 4, 30))

    def test_frequency_schedule(self):
        quarterly = TestDataFactory.create_recurring_expense(user=self.user, frequency='quarterly',
                                                             start_date=date(2025, 1, 1))
        self.assertTrue(quarterly.is_due_in(2025, 1))
        self.assertFalse(quarterly.is_due_in(2025, 2))
        self.assertTrue(quarterly.is_due_in(2025, 4))
        self.assertFalse(quarterly.is_due_in(2024, 12))

        yearly = TestDataFactory.create_recurring_expense(user=self.user, frequency='yearly',
                                                          start_date=date(2025, 3, 1))
        self.assertTrue(yearly.is_due_in(2026, 3))
        self.assertFalse(yearly.is_due_in(2026, 4))

    def test_end_date_stops_billing(self):
        expense = TestDataFactory.create_recurring_expense(user=self.user, day_of_month=15,
                                                           start_date=date(2025, 1, 1))
        expense.end_date = date(2025, 3, 10)
        expense.save()
        self.assertTrue(expense.is_due_in(2025, 2))
        self.assertFalse(expense.is_due_in(2025, 3))

    def test_generate_bills_is_idempotent(self):
        TestDataFactory.create_recurring_expense(user=self.user, name='Internet', amount=Decimal('120.00'),
                                                 day_of_month=5, start_date=date(2025, 1, 1))
        TestDataFactory.create_recurring_expense(user=self.user, name='Aluguel', status='paused',
                                                 start_date=date(2025, 1, 1))

        response = self.client.post('/api/v1/recurring-expenses/generate-bills/', {'year': 2025, 'month': 6}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['created'], 1)
        self.assertEqual(response.data['bills'][0]['due_date'], '2025-06-05')
        self.assertEqual(response.data['bills'][0]['amount'], '120.00')

        response = self.client.post('/api/v1/recurring-expenses/generate-bills/', {'year': 2025, 'month': 6}, format='json')
        self.assertEqual(response.data['created'], 0)
        self.assertEqual(response.data['skipped'], 1)
        self.assertEqual(AccountPayable.objects.count(), 1)

        expense = RecurringExpense.objects.get(name='Internet')
        self.assertEqual(expense.last_generated, date(2025, 6, 5))

    def test_generate_bills_bad_month(self):
        response = self.client.post('/api/v1/recurring-expenses/generate-bills/', {'year': 2025, 'month': 13}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_mark_paid_creates_paid_payable(self):
        expense = TestDataFactory.create_recurring_expense(user=self.user, amount=Decimal('99.90'))
        response = self.client.post(f'/api/v1/recurring-expenses/{expense.id}/mark-paid/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'paid')
        self.assertEqual(response.data['amount'], '99.90')
        self.assertEqual(response.data['recurring_expense'], expense.id)

    def test_create_validates_day_of_month(self):
        response = self.client.post('/api/v1/recurring-expenses/', {
            'name': 'Água', 'amount': '50.00', 'day_of_month': 32, 'start_date': '2025-01-01',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_management_command(self):
        TestDataFactory.create_recurring_expense(user=self.user, day_of_month=20, start_date=date(2025, 1, 1))
        out = StringIO()
        call_command('generate_recurring_bills', '--year', '2025', '--month', '3', stdout=out)
        self.assertIn('1 bill(s) created', out.getvalue())

        created, skipped = generate_monthly_bills(year=2025, month=3)
        self.assertEqual((len(created), len(skipped)), (0, 1))
