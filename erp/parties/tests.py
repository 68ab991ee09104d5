"""
Test suite for Parties module
Tests: customer and supplier CRUD, search
"""
from django.test import TestCase
from rest_framework import status
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Customer, Supplier


class CustomerAPITests(TestCase):
    """Test customer endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer(self):
        response = self.client.post('/api/v1/customers/', {
            'name': 'Mercado Bom Preço',
            'document': '12.345.678/0001-90',
            'city': 'Recife',
            'state': 'pe',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['state'], 'PE')
        self.assertEqual(response.data['created_by'], self.user.id)

    def test_invalid_state(self):
        response = self.client.post('/api/v1/customers/', {'name': 'X', 'state': 'Pernambuco'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_search(self):
        TestDataFactory.create_customer(name='Padaria Pão Quente')
        TestDataFactory.create_customer(name='Oficina do Zé')
        response = self.client.get('/api/v1/customers/?search=padaria')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Padaria Pão Quente'])

    def test_update_and_delete(self):
        customer = TestDataFactory.create_customer()
        response = self.client.patch(f'/api/v1/customers/{customer.id}/', {'city': 'Natal'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['city'], 'Natal')

        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Customer.objects.filter(pk=customer.pk).exists())

    def test_deleting_customer_keeps_orders(self):
        customer = TestDataFactory.create_customer()
        order = TestDataFactory.create_order(user=self.user, customer=customer)
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        order.refresh_from_db()
        self.assertIsNone(order.customer_id)


class SupplierAPITests(TestCase):
    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_supplier_crud(self):
        response = self.client.post('/api/v1/suppliers/', {'name': 'Distribuidora Sul'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        supplier_id = response.data['id']

        response = self.client.get('/api/v1/suppliers/?search=sul')
        self.assertEqual(len(response.data), 1)

        response = self.client.delete(f'/api/v1/suppliers/{supplier_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Supplier.objects.exists())
