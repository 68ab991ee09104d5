"""
Test suite for Sales module
Tests: order CRUD, status transitions, receivables generated on approval, Simples Nacional calculator
"""
from datetime import date
from decimal import Decimal
from dateutil.relativedelta import relativedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from erp.core.exceptions import InvalidTransition
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from erp.finance.models import AccountReceivable
from .models import Order
from .services import ORDER_TRANSITIONS, next_order_number


class OrderAPITests(TestCase):
    """Test order creation and updates"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()
        self.product = TestDataFactory.create_product(price=Decimal('10.50'))

    def test_create_order(self):
        response = self.client.post('/api/v1/orders/', {
            'customer': self.customer.id,
            'items': [
                {'product': self.product.id, 'quantity': '2', 'unit_price': '10.50'},
                {'product': self.product.id, 'quantity': '1', 'unit_price': '5.00'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['total_amount'], '26.00')
        self.assertEqual(len(response.data['items']), 2)
        self.assertRegex(response.data['order_number'], r'^PED-\d{4}-\d{4}$')
        self.assertEqual(Order.objects.get(pk=response.data['id']).created_by, self.user)

    def test_create_with_customer_name_only(self):
        response = self.client.post('/api/v1/orders/', {
            'customer_name': 'Cliente Balcão',
            'items': [{'product': self.product.id, 'quantity': '1', 'unit_price': '10.00'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['display_customer_name'], 'Cliente Balcão')

    def test_create_requires_customer(self):
        response = self.client.post('/api/v1/orders/', {
            'items': [{'product': self.product.id, 'quantity': '1', 'unit_price': '10.00'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_requires_items(self):
        response = self.client.post('/api/v1/orders/', {'customer': self.customer.id, 'items': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_duplicate_order_number(self):
        existing = TestDataFactory.create_order(user=self.user, customer=self.customer)
        response = self.client.post('/api/v1/orders/', {
            'order_number': existing.order_number,
            'customer': self.customer.id,
            'items': [{'product': self.product.id, 'quantity': '1', 'unit_price': '10.00'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_is_not_writable(self):
        order = TestDataFactory.create_order(user=self.user, customer=self.customer)
        response = self.client.patch(f'/api/v1/orders/{order.id}/', {'status': 'completed', 'notes': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, 'pending')
        self.assertEqual(order.notes, 'x')

    def test_list_filters_and_pagination(self):
        TestDataFactory.create_order(user=self.user, customer=self.customer)
        TestDataFactory.create_order(user=self.user, customer=self.customer, status='approved')
        response = self.client.get('/api/v1/orders/?status=approved')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['items_count'], 1)

    def test_order_numbers_increment(self):
        today = date(2031, 5, 1)
        self.assertEqual(next_order_number(today), 'PED-2031-0001')
        Order.objects.create(order_number='PED-2031-0001', customer=self.customer)
        self.assertEqual(next_order_number(today), 'PED-2031-0002')


class OrderTransitionTests(TestCase):
    """Order lifecycle and its effect on accounts receivable"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()

    def transition(self, order, target):
        return self.client.post(f'/api/v1/orders/{order.id}/transition/', {'status': target}, format='json')

    def test_approval_splits_receivables_by_budget_installments(self):
        """Approving an order from a 3-installment budget yields 3 receivables for that order"""
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer,
                                               status='converted', installments=3)
        product = TestDataFactory.create_product()
        order = TestDataFactory.create_order(user=self.user, customer=self.customer, budget=budget,
                                             items=[(product, Decimal('1'), Decimal('1000.00'))])

        response = self.transition(order, 'approved')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')

        receivables = AccountReceivable.objects.filter(order=order).order_by('installment_number')
        self.assertEqual(receivables.count(), 3)
        self.assertEqual([r.installment_number for r in receivables], [1, 2, 3])
        self.assertEqual({r.customer_id for r in receivables}, {self.customer.id})
        self.assertEqual(sum(r.amount for r in receivables), Decimal('1000.00'))
        self.assertEqual({r.parent_receivable_id for r in receivables}, {receivables[0].id})

        first_due = timezone.localdate() + relativedelta(months=1)
        self.assertEqual(receivables[0].due_date, first_due)
        self.assertEqual(receivables[2].due_date, first_due + relativedelta(months=2))

    def test_approval_without_budget_creates_one_receivable(self):
        order = TestDataFactory.create_order(user=self.user, customer=self.customer)
        self.transition(order, 'approved')
        receivable = AccountReceivable.objects.get(order=order)
        self.assertEqual(receivable.amount, order.total_amount)
        self.assertEqual(receivable.description, f"Pedido {order.order_number}")
        self.assertIsNone(receivable.parent_receivable_id)

    def test_full_lifecycle(self):
        order = TestDataFactory.create_order(user=self.user, customer=self.customer)
        for target in ('approved', 'in_production', 'completed'):
            response = self.transition(order, target)
            self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, 'completed')
        self.assertEqual(AccountReceivable.objects.filter(order=order).count(), 1)

    def test_illegal_transition(self):
        order = TestDataFactory.create_order(user=self.user, customer=self.customer)
        response = self.transition(order, 'completed')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'invalid_transition')
        self.assertEqual(response.data['allowed'], ['approved', 'cancelled'])
        order.refresh_from_db()
        self.assertEqual(order.status, 'pending')
        self.assertFalse(AccountReceivable.objects.exists())

    def test_terminal_states(self):
        order = TestDataFactory.create_order(user=self.user, customer=self.customer, status='completed')
        response = self.transition(order, 'cancelled')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['allowed'], [])

    def test_unknown_status(self):
        order = TestDataFactory.create_order(user=self.user, customer=self.customer)
        response = self.transition(order, 'shipped')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_missing_status(self):
        order = TestDataFactory.create_order(user=self.user, customer=self.customer)
        response = self.client.post(f'/api/v1/orders/{order.id}/transition/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_cancels_open_receivables(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer,
                                               status='converted', installments=2)
        order = TestDataFactory.create_order(user=self.user, customer=self.customer, budget=budget)
        self.transition(order, 'approved')
        first = AccountReceivable.objects.get(order=order, installment_number=1)
        first.status = 'received'
        first.save()

        response = self.transition(order, 'cancelled')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        statuses = dict(AccountReceivable.objects.filter(order=order).values_list('installment_number', 'status'))
        self.assertEqual(statuses, {1: 'received', 2: 'cancelled'})

    def test_transition_table_service(self):
        order = TestDataFactory.create_order(user=self.user, customer=self.customer)
        order = ORDER_TRANSITIONS.transition(order, 'cancelled', user=self.user)
        self.assertEqual(order.status, 'cancelled')
        with self.assertRaises(InvalidTransition):
            ORDER_TRANSITIONS.transition(order, 'approved', user=self.user)


class OrderCalculatorAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_calculate(self):
        response = self.client.post('/api/v1/orders/calculate/', {
            'labor_hours': '10', 'labor_rate': '50', 'material_cost': '90',
            'indirect_costs_total': '10', 'profit_margin': '50', 'simples_rate': '6',
            'installments': 4,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['final_price'], '1200.00')
        self.assertEqual(response.data['simples_amount'], '72.00')
        self.assertEqual(response.data['installment_preview']['installment_amount'], '300.00')

    def test_blank_inputs_are_zero(self):
        response = self.client.post('/api/v1/orders/calculate/', {'material_cost': '', 'labor_hours': 'abc'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['final_price'], '0.00')
