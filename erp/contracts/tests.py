"""
Test suite for Contracts module
Tests: contract CRUD with nested items, validation, customer protection
"""
from django.test import TestCase
from rest_framework import status
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Contract, ContractItem


class ContractAPITests(TestCase):
    """Test contract endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()

    def contract_payload(self, **overrides):
        payload = {
            'customer': self.customer.id,
            'title': 'Manutenção mensal',
            'monthly_value': '450.00',
            'start_date': '2025-01-01',
            'billing_day': 10,
            'items': [
                {'description': 'Visita preventiva', 'quantity': 2, 'unit_price': '150.00'},
                {'description': 'Relatório', 'quantity': 1, 'unit_price': '150.00'},
            ],
        }
        payload.update(overrides)
        return payload

    def test_create_contract_with_items(self):
        response = self.client.post('/api/v1/contracts/', self.contract_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 2)
        self.assertEqual(response.data['items_total'], '450.00')
        self.assertEqual(response.data['items'][0]['line_total'], '300.00')
        self.assertEqual(Contract.objects.get().created_by, self.user)

    def test_billing_day_range(self):
        response = self.client.post('/api/v1/contracts/', self.contract_payload(billing_day=32), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_end_before_start(self):
        response = self.client.post('/api/v1/contracts/', self.contract_payload(end_date='2024-12-31'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_replaces_items(self):
        response = self.client.post('/api/v1/contracts/', self.contract_payload(), format='json')
        contract_id = response.data['id']
        response = self.client.patch(f'/api/v1/contracts/{contract_id}/', {
            'items': [{'description': 'Suporte remoto', 'quantity': 1, 'unit_price': '99.00'}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(ContractItem.objects.filter(contract_id=contract_id).count(), 1)
        self.assertEqual(response.data['items_total'], '99.00')

    def test_update_without_items_keeps_them(self):
        response = self.client.post('/api/v1/contracts/', self.contract_payload(), format='json')
        contract_id = response.data['id']
        response = self.client.patch(f'/api/v1/contracts/{contract_id}/', {'status': 'suspended'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(ContractItem.objects.filter(contract_id=contract_id).count(), 2)

    def test_customer_with_contract_cannot_be_deleted(self):
        self.client.post('/api/v1/contracts/', self.contract_payload(), format='json')
        response = self.client.delete(f'/api/v1/customers/{self.customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Contract.objects.exists())

    def test_delete_contract(self):
        response = self.client.post('/api/v1/contracts/', self.contract_payload(), format='json')
        response = self.client.delete(f"/api/v1/contracts/{response.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(ContractItem.objects.exists())
