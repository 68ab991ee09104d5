"""Order numbering, the order status table and the side effects of order status moves"""
import logging
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.db import transaction
from django.utils import timezone

from erp.core.transitions import TransitionTable, ANY
from .models import Order, OrderItem

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS = TransitionTable('Order', {
    'pending': ['approved', 'cancelled'],
    'approved': ['in_production', 'cancelled'],
    'in_production': ['completed', 'cancelled'],
    'completed': [],
    'cancelled': [],
})


def next_order_number(today=None):
    """Next free ``PED-YYYY-NNNN`` number for the current year"""
    year = (today or timezone.localdate()).year
    prefix = f"PED-{year}-"
    sequence = Order.objects.filter(order_number__startswith=prefix).count() + 1
    order_number = f"{prefix}{sequence:04d}"
    while Order.objects.filter(order_number=order_number).exists():
        sequence += 1
        order_number = f"{prefix}{sequence:04d}"
    return order_number


def replace_order_items(order, items):
    """Swap the order's items for ``items`` (dicts with product, quantity, unit_price)"""
    order.items.all().delete()
    return [OrderItem.objects.create(order=order, **item) for item in items]


def create_order(*, items, user=None, **fields):
    """Persist an order with its items; the total is the sum of the item subtotals"""
    with transaction.atomic():
        if not fields.get('order_number'):
            fields['order_number'] = next_order_number()
        order = Order.objects.create(created_by=user, status='pending', **fields)
        created_items = replace_order_items(order, items)
        order.total_amount = sum((item.subtotal for item in created_items), Decimal('0.00'))
        order.save(update_fields=['total_amount', 'updated_at'])
    return order


def first_receivable_due_date(today=None):
    return (today or timezone.localdate()) + relativedelta(months=1)


@ORDER_TRANSITIONS.on('pending', 'approved')
def generate_order_receivables(order, previous, user=None):
    """Approved orders become receivables, split as agreed in the originating budget"""
    from erp.finance.installments import create_receivable_installments

    installments = order.budget.installments if order.budget_id else 1
    rows = create_receivable_installments(
        description=f"Pedido {order.order_number}",
        amount=order.total_amount,
        due_date=first_receivable_due_date(),
        installments=installments or 1,
        user=user,
        order=order,
        customer=order.customer,
    )
    logger.info("Order %s approved: %s receivable(s) generated", order.order_number, len(rows))
    return rows


@ORDER_TRANSITIONS.on(ANY, 'cancelled')
def cancel_open_receivables(order, previous, user=None):
    cancelled = order.receivables.filter(status__in=['pending', 'overdue']).update(
        status='cancelled', updated_at=timezone.now()
    )
    if cancelled:
        logger.info("Order %s cancelled: %s open receivable(s) cancelled", order.order_number, cancelled)
