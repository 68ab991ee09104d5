"""
Test suite for Catalog module
Tests: product CRUD, query filters, deactivation of products used by orders
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from erp.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from .models import Product


class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Instalação elétrica',
            'type': 'service',
            'price': '350.00',
            'category': 'Serviços',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['price'], '350.00')

    def test_filters(self):
        TestDataFactory.create_product(name='Cabo 2,5mm', price=Decimal('5.00'))
        TestDataFactory.create_product(name='Consultoria', price=Decimal('500.00'), type='service')
        inactive = TestDataFactory.create_product(name='Cabo antigo', price=Decimal('3.00'))
        inactive.is_active = False
        inactive.save()

        response = self.client.get('/api/v1/products/?type=service')
        self.assertEqual([p['name'] for p in response.data], ['Consultoria'])

        response = self.client.get('/api/v1/products/?search=cabo&active_only=true')
        self.assertEqual([p['name'] for p in response.data], ['Cabo 2,5mm'])

        response = self.client.get('/api/v1/products/?min_price=4&max_price=100')
        self.assertEqual([p['name'] for p in response.data], ['Cabo 2,5mm'])

    def test_invalid_filter(self):
        response = self.client.get('/api/v1/products/?type=gadget')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_unused_product(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Product.objects.filter(pk=product.pk).exists())

    def test_product_used_by_orders_is_deactivated(self):
        product = TestDataFactory.create_product()
        TestDataFactory.create_order(user=self.user, items=[(product, Decimal('1'), Decimal('10.00'))])
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        product.refresh_from_db()
        self.assertFalse(product.is_active)
