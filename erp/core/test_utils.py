"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from erp.core.models import TaxSetting
from erp.parties.models import Customer, Supplier
from erp.catalog.models import Product
from erp.budgets.models import Budget
from erp.sales.models import Order, OrderItem
from erp.finance.models import RecurringExpense
from erp.projects.models import Project, Task
from decimal import Decimal
from datetime import timedelta
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='user', is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_tax_setting(cbs_rate='12.00', ibs_rate='5.00', irpj_rate='15.00', csll_rate='9.00', tax_regime='new'):
        """Create the active tax setting"""
        return TaxSetting.objects.create(
            cbs_rate=Decimal(cbs_rate),
            ibs_rate=Decimal(ibs_rate),
            irpj_rate=Decimal(irpj_rate),
            csll_rate=Decimal(csll_rate),
            tax_regime=tax_regime,
            is_active=True
        )

    @staticmethod
    def create_customer(name=None, phone=None, email=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'119{random.randint(10000000, 99999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Customer.objects.create(name=name, phone=phone, email=email)

    @staticmethod
    def create_supplier(name=None, phone=None, email=None):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'119{random.randint(10000000, 99999999)}'
        if not email:
            email = f'{name.lower()}@test.com'
        return Supplier.objects.create(name=name, phone=phone, email=email)

    @staticmethod
    def create_product(name=None, price=None, type='product'):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if price is None:
            price = Decimal('100.00')
        return Product.objects.create(name=name, price=price, type=type)

    @staticmethod
    def create_budget(user=None, customer=None, status='draft', installments=1, **inputs):
        """Create a budget with its derived amounts computed from ``inputs``"""
        values = {
            'labor_hours': Decimal('10'),
            'labor_rate': Decimal('50'),
            'material_cost': Decimal('90'),
            'indirect_costs_total': Decimal('10'),
            'profit_margin': Decimal('50'),
            'cbs_rate': Decimal('12'),
            'ibs_rate': Decimal('5'),
            'irpj_rate': Decimal('15'),
            'csll_rate': Decimal('9'),
        }
        values.update(inputs)
        budget = Budget(
            budget_number=f'ORC-TEST-{TestDataFactory.random_string(6).upper()}',
            title=f'Budget {TestDataFactory.random_string(6)}',
            customer=customer,
            status=status,
            installments=installments,
            created_by=user,
            **values
        )
        budget.recalculate()
        budget.save()
        return budget

    @staticmethod
    def create_order(user=None, customer=None, budget=None, status='pending', items=None):
        """Create an order; ``items`` is a list of (product, quantity, unit_price)"""
        if customer is None:
            customer = TestDataFactory.create_customer()
        if items is None:
            items = [(TestDataFactory.create_product(), Decimal('1'), Decimal('100.00'))]
        order = Order.objects.create(
            order_number=f'PED-TEST-{TestDataFactory.random_string(6).upper()}',
            customer=customer,
            budget=budget,
            status=status,
            created_by=user
        )
        total = Decimal('0.00')
        for product, quantity, unit_price in items:
            item = OrderItem.objects.create(order=order, product=product, quantity=quantity, unit_price=unit_price)
            total += item.subtotal
        order.total_amount = total
        order.save(update_fields=['total_amount'])
        return order

    @staticmethod
    def create_recurring_expense(user=None, name=None, amount=None, day_of_month=10,
                                 frequency='monthly', start_date=None, status='active'):
        """Create a recurring expense"""
        if not name:
            name = f'Expense_{TestDataFactory.random_string(6)}'
        if amount is None:
            amount = Decimal('150.00')
        if start_date is None:
            start_date = timezone.localdate().replace(day=1) - timedelta(days=365)
        return RecurringExpense.objects.create(
            name=name,
            amount=amount,
            day_of_month=day_of_month,
            frequency=frequency,
            start_date=start_date,
            status=status,
            created_by=user
        )

    @staticmethod
    def create_project(user=None, customer=None, status='project', name=None):
        """Create a project due in 30 days"""
        if not name:
            name = f'Project_{TestDataFactory.random_string(6)}'
        return Project.objects.create(
            name=name,
            customer=customer,
            status=status,
            value=Decimal('1000.00'),
            deadline=timezone.now() + timedelta(days=30),
            created_by=user
        )

    @staticmethod
    def create_task(user=None, project=None, status='todo', due_date=None, title=None):
        """Create a task"""
        if not title:
            title = f'Task_{TestDataFactory.random_string(6)}'
        return Task.objects.create(
            title=title,
            project=project,
            status=status,
            due_date=due_date,
            created_by=user
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
