"""
Test suite for Budgets module
Tests: calculator arithmetic, budget CRUD with tax defaults, status moves, conversion to order and project, CSV export
"""
import re
from django.test import TestCase, SimpleTestCase
from rest_framework import status
from decimal import Decimal
from erp.core.exceptions import ConversionError
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from erp.parties.models import Customer
from erp.projects.models import Project
from erp.sales.models import Order
from .calculator import (
    calculate_budget, calculate_order, format_amounts, gross_from_costs,
    installment_preview, parse_or_zero,
)
from .models import Budget, BudgetTemplate
from .services import create_project

EXAMPLE_INPUTS = {
    'labor_hours': '10',
    'labor_rate': '50',
    'material_cost': '90',
    'indirect_costs_total': '10',
    'profit_margin': '50',
    'cbs_rate': '12',
    'ibs_rate': '5',
    'irpj_rate': '15',
    'csll_rate': '9',
}


class CalculatorTests(SimpleTestCase):
    """Pure arithmetic of the budget and order calculators"""

    def test_budget_example(self):
        """The reference example produces the documented breakdown"""
        result = format_amounts(calculate_budget(EXAMPLE_INPUTS))
        self.assertEqual(result['labor_cost'], '500.00')
        self.assertEqual(result['total_direct_costs'], '590.00')
        self.assertEqual(result['total_costs'], '600.00')
        self.assertEqual(result['gross_value'], '1200.00')
        self.assertEqual(result['cbs_amount'], '144.00')
        self.assertEqual(result['ibs_amount'], '60.00')
        self.assertEqual(result['net_revenue'], '996.00')
        self.assertEqual(result['profit_before_taxes'], '396.00')
        self.assertEqual(result['irpj_amount'], '59.40')
        self.assertEqual(result['csll_amount'], '35.64')
        self.assertEqual(result['net_profit'], '300.96')
        self.assertEqual(result['final_price'], '1200.00')

    def test_gross_value_leaves_the_margin_over_costs(self):
        for margin in (0, 1, 20, 33.3, 50, 99, 99.9):
            gross = gross_from_costs(600.0, margin)
            self.assertAlmostEqual(gross * (1 - margin / 100), 600.0, places=6)

    def test_margin_of_100_or_more_prices_at_cost(self):
        for margin in (100, 150, 1000):
            self.assertEqual(gross_from_costs(600.0, margin), 600.0)
        result = calculate_budget(dict(EXAMPLE_INPUTS, profit_margin='100'))
        self.assertEqual(result['gross_value'], result['total_costs'])

    def test_supplied_labor_cost_is_ignored(self):
        result = calculate_budget(dict(EXAMPLE_INPUTS, labor_cost='99999'))
        self.assertEqual(result['labor_cost'], 500.0)

    def test_malformed_numbers_become_zero(self):
        self.assertEqual(parse_or_zero('abc'), 0.0)
        self.assertEqual(parse_or_zero(None), 0.0)
        self.assertEqual(parse_or_zero(''), 0.0)
        self.assertEqual(parse_or_zero('nan'), 0.0)
        self.assertEqual(parse_or_zero(' 12.5 '), 12.5)
        result = calculate_budget({'labor_hours': 'ten', 'labor_rate': '50', 'material_cost': '100'})
        self.assertEqual(result['total_costs'], 100.0)

    def test_order_variant_uses_simples_rate(self):
        result = format_amounts(calculate_order({
            'labor_hours': '10', 'labor_rate': '50', 'material_cost': '90',
            'indirect_costs_total': '10', 'profit_margin': '50', 'simples_rate': '6',
        }))
        self.assertEqual(result['gross_value'], '1200.00')
        self.assertEqual(result['simples_amount'], '72.00')
        self.assertEqual(result['net_profit'], '528.00')

    def test_order_variant_default_rate(self):
        result = calculate_order({'material_cost': '100'})
        self.assertAlmostEqual(result['simples_amount'], 10.0)

    def test_installment_preview(self):
        preview = installment_preview(1200, 3)
        self.assertEqual(preview, {'installments': 3, 'installment_amount': '400.00', 'total': '1200.00'})
        self.assertEqual(installment_preview(100, 0)['installments'], 1)


class BudgetAPITests(TestCase):
    """Test budget creation and updates through the API"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()

    def budget_payload(self, **overrides):
        payload = {
            'title': 'Reforma da cozinha',
            'customer': self.customer.id,
            'labor_hours': '10',
            'labor_rate': '50',
            'material_cost': '90',
            'indirect_costs_total': '10',
            'profit_margin': '50',
        }
        payload.update(overrides)
        return payload

    def test_create_without_tax_settings(self):
        """Budgets cannot be priced before the tax rates are configured"""
        response = self.client.post('/api/v1/budgets/', self.budget_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'tax_settings_missing')
        self.assertFalse(Budget.objects.exists())

    def test_create_uses_active_tax_rates(self):
        TestDataFactory.create_tax_setting()
        response = self.client.post('/api/v1/budgets/', self.budget_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'draft')
        self.assertEqual(response.data['cbs_rate'], '12.00')
        self.assertEqual(response.data['final_price'], '1200.00')
        self.assertEqual(response.data['net_profit'], '300.96')
        self.assertRegex(response.data['budget_number'], r'^ORC-\d{4}-\d{3}$')

        budget = Budget.objects.get(pk=response.data['id'])
        self.assertEqual(budget.created_by, self.user)
        self.assertEqual(budget.net_profit, Decimal('300.96'))

    def test_explicit_rates_win_over_settings(self):
        TestDataFactory.create_tax_setting()
        response = self.client.post('/api/v1/budgets/', self.budget_payload(cbs_rate='0', ibs_rate='0'), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['cbs_amount'], '0.00')
        self.assertEqual(response.data['irpj_rate'], '15.00')

    def test_budget_numbers_are_sequential(self):
        TestDataFactory.create_tax_setting()
        first = self.client.post('/api/v1/budgets/', self.budget_payload(), format='json')
        second = self.client.post('/api/v1/budgets/', self.budget_payload(), format='json')
        first_seq = int(re.search(r'(\d+)$', first.data['budget_number']).group(1))
        second_seq = int(re.search(r'(\d+)$', second.data['budget_number']).group(1))
        self.assertEqual(second_seq, first_seq + 1)

    def test_create_with_selected_products(self):
        TestDataFactory.create_tax_setting()
        product = TestDataFactory.create_product(name='Pintura', type='service')
        payload = self.budget_payload(selected_products=[
            {'product': product.id, 'quantity': '2', 'price': '50.00'},
        ])
        response = self.client.post('/api/v1/budgets/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(response.data['items'][0]['description'], 'Pintura')
        self.assertEqual(response.data['items'][0]['total_price'], '100.00')

    def test_invalid_rate(self):
        TestDataFactory.create_tax_setting()
        response = self.client.post('/api/v1/budgets/', self.budget_payload(cbs_rate='150'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_derived_amounts_must_fit_money_columns(self):
        TestDataFactory.create_tax_setting()
        response = self.client.post('/api/v1/budgets/', self.budget_payload(
            labor_hours='1000000', labor_rate='1000000', profit_margin='99'
        ), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('labor_cost', response.data)
        self.assertFalse(Budget.objects.exists())

    def test_update_rejects_oversized_derived_amounts(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer)
        response = self.client.patch(f'/api/v1/budgets/{budget.id}/', {
            'labor_hours': '1000000000', 'labor_rate': '1000'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        budget.refresh_from_db()
        self.assertEqual(budget.final_price, Decimal('1200.00'))

    def test_update_recomputes_derived_amounts(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer)
        self.assertEqual(budget.final_price, Decimal('1200.00'))

        response = self.client.patch(f'/api/v1/budgets/{budget.id}/', {'profit_margin': '20'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['final_price'], '750.00')
        budget.refresh_from_db()
        self.assertEqual(budget.gross_value, Decimal('750.00'))

    def test_update_keeps_stored_rates_when_null_is_sent(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer)
        response = self.client.patch(f'/api/v1/budgets/{budget.id}/', {'cbs_rate': None}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        budget.refresh_from_db()
        self.assertEqual(budget.cbs_rate, Decimal('12.00'))

    def test_update_unknown_budget(self):
        response = self.client.patch('/api/v1/budgets/99999/', {'title': 'x'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_filters_by_status(self):
        TestDataFactory.create_budget(user=self.user, status='draft')
        TestDataFactory.create_budget(user=self.user, status='sent')
        response = self.client.get('/api/v1/budgets/?status=sent')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['status'], 'sent')

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/budgets/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class BudgetLifecycleTests(TestCase):
    """Test status moves and the conversions out of an approved budget"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()

    def test_draft_to_sent_to_approved(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer)
        response = self.client.post(f'/api/v1/budgets/{budget.id}/transition/', {'status': 'sent'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.post(f'/api/v1/budgets/{budget.id}/transition/', {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'approved')

    def test_draft_cannot_skip_to_approved(self):
        budget = TestDataFactory.create_budget(user=self.user)
        response = self.client.post(f'/api/v1/budgets/{budget.id}/transition/', {'status': 'approved'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['allowed'], ['sent'])
        budget.refresh_from_db()
        self.assertEqual(budget.status, 'draft')

    def test_transition_requires_status(self):
        budget = TestDataFactory.create_budget(user=self.user)
        response = self.client.post(f'/api/v1/budgets/{budget.id}/transition/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_convert_to_order(self):
        """An approved budget becomes a pending order for its final price"""
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer, status='approved')
        response = self.client.post(f'/api/v1/budgets/{budget.id}/convert-to-order/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['total_amount'], '1200.00')
        self.assertEqual(response.data['budget'], budget.id)
        self.assertEqual(len(response.data['items']), 1)
        self.assertRegex(response.data['order_number'], r'^PED-\d{4}-\d{4}$')

        budget.refresh_from_db()
        self.assertEqual(budget.status, 'converted')
        order = Order.objects.get(pk=response.data['id'])
        self.assertEqual(order.customer, self.customer)
        self.assertIn(f"#{budget.id}", order.notes)

    def test_convert_creates_customer_from_snapshot(self):
        budget = TestDataFactory.create_budget(user=self.user, status='approved')
        budget.customer_name = 'Carlos Lima'
        budget.customer_email = 'carlos@test.com'
        budget.save()

        response = self.client.post(f'/api/v1/budgets/{budget.id}/convert-to-order/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        customer = Customer.objects.get(name='Carlos Lima')
        self.assertEqual(response.data['customer'], customer.id)

    def test_convert_requires_approved_budget(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer, status='sent')
        response = self.client.post(f'/api/v1/budgets/{budget.id}/convert-to-order/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'conversion_not_allowed')
        self.assertFalse(Order.objects.exists())

    def test_converted_budget_cannot_be_converted_again(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer, status='approved')
        self.client.post(f'/api/v1/budgets/{budget.id}/convert-to-order/')
        response = self.client.post(f'/api/v1/budgets/{budget.id}/convert-to-order/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Order.objects.count(), 1)

    def test_create_project(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer, status='approved')
        response = self.client.post(f'/api/v1/budgets/{budget.id}/create-project/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        project = Project.objects.get(pk=response.data['project_id'])
        self.assertEqual(project.budget, budget)
        self.assertEqual(project.status, 'project')
        self.assertEqual(project.progress, 0)
        self.assertEqual(project.value, Decimal('1200.00'))

    def test_create_project_only_once(self):
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer, status='converted')
        self.client.post(f'/api/v1/budgets/{budget.id}/create-project/')
        response = self.client.post(f'/api/v1/budgets/{budget.id}/create-project/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Project.objects.filter(budget=budget).count(), 1)

    def test_create_project_from_draft(self):
        budget = TestDataFactory.create_budget(user=self.user, status='draft')
        response = self.client.post(f'/api/v1/budgets/{budget.id}/create-project/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_project_checks_the_stored_budget(self):
        """A stale in-memory budget is re-read before the checks run"""
        budget = TestDataFactory.create_budget(user=self.user, customer=self.customer, status='approved')
        stale = Budget.objects.get(pk=budget.pk)
        stale.status = 'draft'
        project = create_project(stale, user=self.user)
        self.assertEqual(project.budget_id, budget.id)

        with self.assertRaises(ConversionError):
            create_project(stale, user=self.user)
        self.assertEqual(Project.objects.filter(budget=budget).count(), 1)


class BudgetExportTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_export_csv(self):
        budget = TestDataFactory.create_budget(user=self.user)
        response = self.client.get(f'/api/v1/budgets/{budget.id}/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/csv'))
        self.assertIn(f'orcamento-{budget.id:06d}.csv', response['Content-Disposition'])
        content = response.content.decode('utf-8')
        self.assertTrue(content.startswith('\ufeff'))
        self.assertIn(budget.budget_number, content)
        self.assertIn('1200.00', content)

    def test_export_unknown_budget(self):
        response = self.client.get('/api/v1/budgets/99999/export/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class BudgetTemplateTests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_template_crud(self):
        response = self.client.post('/api/v1/budget-templates/', {
            'name': 'Pintura padrão', 'labor_hours': '8', 'labor_rate': '40',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        template_id = response.data['id']

        response = self.client.patch(f'/api/v1/budget-templates/{template_id}/', {'profit_margin': '30'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['profit_margin'], '30.00')

        response = self.client.delete(f'/api/v1/budget-templates/{template_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(BudgetTemplate.objects.exists())
