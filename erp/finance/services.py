import logging

from django.db import transaction
from django.utils import timezone

from erp.core.exceptions import BusinessRuleError
from .models import AccountPayable, AccountReceivable, RecurringExpense

logger = logging.getLogger(__name__)


def mark_payable_paid(payable, payment_date=None):
    """Settle one payable row. Sibling installments are left untouched."""
    if payable.status == 'cancelled':
        raise BusinessRuleError('A cancelled payable cannot be paid', code='payable_cancelled')
    payable.status = 'paid'
    payable.payment_date = payment_date or timezone.localdate()
    payable.save(update_fields=['status', 'payment_date', 'updated_at'])
    return payable


def mark_receivable_received(receivable, received_date=None):
    """Settle one receivable row. Sibling installments are left untouched."""
    if receivable.status == 'cancelled':
        raise BusinessRuleError('A cancelled receivable cannot be received', code='receivable_cancelled')
    receivable.status = 'received'
    receivable.received_date = received_date or timezone.localdate()
    receivable.save(update_fields=['status', 'received_date', 'updated_at'])
    return receivable


def recurring_bill_note(expense):
    return f"Gerado automaticamente de despesa recorrente #{expense.id}"


def generate_monthly_bills(year=None, month=None, user=None):
    """Create the pending payable of every active recurring expense billing in ``year``/``month``.

    An expense that already has a bill dated in that month is skipped, so the
    operation can run any number of times. Returns ``(created, skipped)``.
    """
    today = timezone.localdate()
    year = year or today.year
    month = month or today.month

    created = []
    skipped = []
    expenses = RecurringExpense.objects.filter(status='active').select_related('supplier')
    for expense in expenses:
        if not expense.is_due_in(year, month):
            continue
        if expense.bills.filter(due_date__year=year, due_date__month=month).exists():
            skipped.append(expense)
            continue

        due_date = expense.due_date_in(year, month)
        with transaction.atomic():
            bill = AccountPayable.objects.create(
                recurring_expense=expense,
                supplier=expense.supplier,
                description=f"{expense.name} - {month:02d}/{year}",
                amount=expense.amount,
                due_date=due_date,
                status='pending',
                notes=recurring_bill_note(expense),
                created_by=user or expense.created_by,
            )
            expense.last_generated = due_date
            expense.save(update_fields=['last_generated', 'updated_at'])
        created.append(bill)

    logger.info("Recurring bills for %02d/%s: %s created, %s already existed", month, year, len(created), len(skipped))
    return created, skipped


def mark_recurring_expense_paid(expense, user=None):
    """Register today's payment of a recurring expense as a settled payable"""
    today = timezone.localdate()
    return AccountPayable.objects.create(
        recurring_expense=expense,
        supplier=expense.supplier,
        description=f"{expense.name} - {today.strftime('%d/%m/%Y')}",
        amount=expense.amount,
        due_date=today,
        payment_date=today,
        status='paid',
        notes=recurring_bill_note(expense),
        created_by=user or expense.created_by,
    )


def mark_overdue(today=None):
    """Flag pending rows whose due date has passed. Returns (payables, receivables) counts."""
    today = today or timezone.localdate()
    payables = AccountPayable.objects.filter(status='pending', due_date__lt=today).update(status='overdue', updated_at=timezone.now())
    receivables = AccountReceivable.objects.filter(status='pending', due_date__lt=today).update(status='overdue', updated_at=timezone.now())
    if payables or receivables:
        logger.info("Marked %s payables and %s receivables as overdue", payables, receivables)
    return payables, receivables
