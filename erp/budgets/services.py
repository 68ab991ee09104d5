"""
Budget lifecycle: numbering, creation with the active tax rates, status
moves, conversion into an order and project creation.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from erp.core.exceptions import ConversionError, TaxSettingsMissing
from erp.core.models import TaxSetting
from erp.core.transitions import TransitionTable
from .calculator import BUDGET_INPUT_FIELDS, BUDGET_RATE_FIELDS
from .models import Budget, BudgetItem

logger = logging.getLogger(__name__)

BUDGET_TRANSITIONS = TransitionTable('Budget', {
    'draft': ['sent'],
    'sent': ['approved', 'rejected'],
    'approved': [],
    'rejected': [],
    'converted': [],
})

GENERIC_PRODUCT_NAME = 'Serviço de Orçamento'


def next_budget_number(today=None):
    """Next free ``ORC-YYYY-NNN`` number for the current year"""
    year = (today or timezone.localdate()).year
    prefix = f"ORC-{year}-"
    sequence = Budget.objects.filter(budget_number__startswith=prefix).count() + 1
    budget_number = f"{prefix}{sequence:03d}"
    while Budget.objects.filter(budget_number=budget_number).exists():
        sequence += 1
        budget_number = f"{prefix}{sequence:03d}"
    return budget_number


def save_selected_products(budget, selected_products):
    """Replace the budget items with one ``service`` line per selected product"""
    from erp.catalog.models import Product

    budget.items.all().delete()
    products = Product.objects.in_bulk([entry['product'] for entry in selected_products])
    items = []
    for entry in selected_products:
        product = products.get(entry['product'])
        items.append(BudgetItem.objects.create(
            budget=budget,
            product=product,
            type='service',
            description=product.name if product else 'Serviço',
            quantity=entry['quantity'],
            unit_price=entry['price'],
        ))
    return items


def create_budget(*, selected_products=None, user=None, **fields):
    """Create a budget with every derived amount computed.

    Rates not supplied come from the active tax settings, which must exist.
    """
    tax_setting = TaxSetting.get_active()
    if tax_setting is None:
        raise TaxSettingsMissing()
    for rate_field in BUDGET_RATE_FIELDS:
        if fields.get(rate_field) is None:
            fields[rate_field] = getattr(tax_setting, rate_field)
    fields.setdefault('tax_regime', tax_setting.tax_regime)

    with transaction.atomic():
        budget = Budget(created_by=user, **fields)
        if not budget.budget_number:
            budget.budget_number = next_budget_number()
        budget.recalculate()
        budget.save()
        if selected_products:
            save_selected_products(budget, selected_products)

    logger.info("Budget %s created: final price %s", budget.budget_number, budget.final_price)
    return budget


def update_budget(budget, *, selected_products=None, **fields):
    """Apply ``fields``; derived amounts are recomputed whenever a cost, margin or rate changes"""
    recalculate = any(name in fields for name in BUDGET_INPUT_FIELDS)
    with transaction.atomic():
        for name, value in fields.items():
            setattr(budget, name, value)
        if recalculate:
            budget.recalculate()
        budget.save()
        if selected_products is not None:
            save_selected_products(budget, selected_products)
    return budget


def generic_budget_product():
    from erp.catalog.models import Product

    product = Product.objects.filter(name=GENERIC_PRODUCT_NAME).first()
    if product is None:
        product = Product.objects.create(
            name=GENERIC_PRODUCT_NAME,
            description='Produto genérico para conversão de orçamentos',
            type='service',
            price=Decimal('0.00'),
            category='Serviços',
        )
    return product


def customer_from_snapshot(budget, user=None):
    """Customer record built from the contact data typed into the budget"""
    from erp.parties.models import Customer

    return Customer.objects.create(
        name=budget.customer_name,
        email=budget.customer_email or None,
        phone=budget.customer_phone or None,
        document=budget.customer_document or None,
        address=budget.customer_address or None,
        neighborhood=budget.customer_neighborhood or None,
        city=budget.customer_city or None,
        state=budget.customer_state or None,
        zip_code=budget.customer_zip_code or None,
        created_by=user,
    )


def convert_to_order(budget, user=None):
    """Turn an approved budget into a pending order for its final price.

    The order, its single item, the customer created from the budget
    snapshot and the budget status change are committed together.
    """
    from erp.sales.models import Order, OrderItem
    from erp.sales.services import next_order_number

    with transaction.atomic():
        budget = Budget.objects.select_for_update().get(pk=budget.pk)
        if budget.status != 'approved':
            raise ConversionError('Only approved budgets can be converted into orders')

        if not budget.customer_id and budget.customer_name:
            budget.customer = customer_from_snapshot(budget, user=user)

        order = Order.objects.create(
            order_number=next_order_number(),
            customer=budget.customer,
            customer_name=budget.customer_name,
            customer_email=budget.customer_email,
            customer_phone=budget.customer_phone,
            customer_address=budget.customer_address,
            budget=budget,
            status='pending',
            total_amount=budget.final_price,
            notes=f"Convertido do orçamento #{budget.id}: {budget.title}",
            created_by=user,
        )
        OrderItem.objects.create(
            order=order,
            product=generic_budget_product(),
            quantity=Decimal('1'),
            unit_price=budget.final_price,
        )

        budget.status = 'converted'
        budget.save(update_fields=['customer', 'status', 'updated_at'])

    logger.info("Budget %s converted into order %s", budget.budget_number, order.order_number)
    return order


def create_project(budget, user=None):
    """Open the kanban project for an approved or converted budget; one project per budget.

    The budget row stays locked while the checks and the insert run.
    """
    from erp.projects.models import Project

    with transaction.atomic():
        budget = Budget.objects.select_for_update().get(pk=budget.pk)
        if budget.status not in ('approved', 'converted'):
            raise ConversionError('Only approved budgets can generate projects')
        if Project.objects.filter(budget=budget).exists():
            raise ConversionError('A project already exists for this budget')

        deadline_days = getattr(settings, 'PROJECT_DEADLINE_DAYS', 30)
        project = Project.objects.create(
            name=f"{budget.title} - Orçamento #{budget.id}",
            description=budget.description or f"Projeto gerado a partir do orçamento #{budget.id}",
            customer=budget.customer,
            budget=budget,
            status='project',
            progress=0,
            value=budget.final_price,
            deadline=timezone.now() + timedelta(days=deadline_days),
            created_by=user,
        )
    logger.info("Project #%s created from budget %s", project.id, budget.budget_number)
    return project


BUDGET_EXPORT_HEADER = [
    'Número', 'Título', 'Cliente', 'Status', 'Mão de obra', 'Materiais', 'Terceiros',
    'Outros custos diretos', 'Custos indiretos', 'Custo total', 'Margem (%)', 'Valor bruto',
    'CBS', 'IBS', 'Receita líquida', 'IRPJ', 'CSLL', 'Lucro líquido', 'Preço final', 'Parcelas',
]


def budget_export_row(budget):
    return [
        budget.budget_number, budget.title, budget.get_display_customer_name(), budget.status,
        budget.labor_cost, budget.material_cost, budget.third_party_cost, budget.other_direct_costs,
        budget.indirect_costs_total, budget.total_costs, budget.profit_margin, budget.gross_value,
        budget.cbs_amount, budget.ibs_amount, budget.net_revenue, budget.irpj_amount,
        budget.csll_amount, budget.net_profit, budget.final_price, budget.installments,
    ]
