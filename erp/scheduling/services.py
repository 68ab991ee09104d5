"""
Agenda feed: calendar events, task deadlines, payables, receivables and
recurring expenses merged into one list ordered by date.
"""
import calendar
import logging
from datetime import date, datetime, time, timedelta

from django.utils import timezone

from erp.finance.models import AccountPayable, AccountReceivable, RecurringExpense
from erp.projects.models import Task
from .models import CalendarEvent

logger = logging.getLogger(__name__)


def month_bounds(year, month):
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def months_between(start, end):
    """(year, month) pairs from ``start``'s month through ``end``'s month"""
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        yield year, month
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def _day_bounds(start, end):
    tz = timezone.get_current_timezone()
    return (
        timezone.make_aware(datetime.combine(start, time.min), tz),
        timezone.make_aware(datetime.combine(end + timedelta(days=1), time.min), tz),
    )


def _sort_key(entry):
    value = entry['start']
    if isinstance(value, datetime):
        local = timezone.localtime(value) if timezone.is_aware(value) else value
        return local.date(), local.time(), entry['type']
    return value, time.min, entry['type']


def _event_entries(start, end):
    range_start, range_end = _day_bounds(start, end)
    events = CalendarEvent.objects.select_related('customer', 'project').filter(
        start_date__lt=range_end, end_date__gte=range_start,
    )
    for event in events:
        yield {
            'type': 'event',
            'id': event.id,
            'title': event.title,
            'description': event.description,
            'start': event.start_date,
            'end': event.end_date,
            'event_type': event.event_type,
            'customer': event.customer.name if event.customer_id else None,
            'project': event.project.name if event.project_id else None,
            'location': event.location,
        }


def _task_entries(start, end):
    range_start, range_end = _day_bounds(start, end)
    tasks = Task.objects.select_related('project').filter(due_date__gte=range_start, due_date__lt=range_end)
    for task in tasks:
        yield {
            'type': 'task',
            'id': f"task-{task.id}",
            'title': f"[Tarefa] {task.title}",
            'description': task.description,
            'start': task.due_date,
            'end': task.due_date,
            'status': task.status,
            'priority': task.priority,
            'project': task.project.name if task.project_id else None,
        }


def _payable_entries(start, end):
    payables = AccountPayable.objects.select_related('supplier', 'category').filter(
        due_date__gte=start, due_date__lte=end,
    )
    for payable in payables:
        supplier = payable.supplier.name if payable.supplier_id else 'Fornecedor'
        category = payable.category.name if payable.category_id else ''
        yield {
            'type': 'payable',
            'id': f"payable-{payable.id}",
            'title': f"[A Pagar] {supplier} - {category}".rstrip(' -'),
            'description': payable.description,
            'start': payable.due_date,
            'end': payable.due_date,
            'amount': str(payable.amount),
            'status': payable.status,
        }


def _receivable_entries(start, end):
    receivables = AccountReceivable.objects.select_related('customer', 'order').filter(
        due_date__gte=start, due_date__lte=end,
    )
    for receivable in receivables:
        customer = receivable.customer.name if receivable.customer_id else 'Cliente'
        yield {
            'type': 'receivable',
            'id': f"receivable-{receivable.id}",
            'title': f"[A Receber] {customer}",
            'description': receivable.description,
            'start': receivable.due_date,
            'end': receivable.due_date,
            'amount': str(receivable.amount),
            'status': receivable.status,
            'order': receivable.order.order_number if receivable.order_id else None,
        }


def _recurring_entries(start, end):
    expenses = list(RecurringExpense.objects.filter(status='active').select_related('supplier'))
    for year, month in months_between(start, end):
        for expense in expenses:
            if not expense.is_due_in(year, month):
                continue
            due_date = expense.due_date_in(year, month)
            if not start <= due_date <= end:
                continue
            supplier = expense.supplier.name if expense.supplier_id else ''
            yield {
                'type': 'recurring',
                'id': f"recurring-{expense.id}-{year}-{month:02d}",
                'title': f"[Despesa Recorrente] {expense.name}",
                'description': f"{supplier} - {expense.get_frequency_display()}".lstrip(' -'),
                'start': due_date,
                'end': due_date,
                'amount': str(expense.amount),
                'frequency': expense.frequency,
            }


def build_agenda(start, end):
    """Every dated item between ``start`` and ``end`` (inclusive dates), sorted by when it happens"""
    entries = []
    for source in (_event_entries, _task_entries, _payable_entries, _receivable_entries, _recurring_entries):
        entries.extend(source(start, end))
    entries.sort(key=_sort_key)
    logger.debug("Agenda %s..%s: %s entries", start, end, len(entries))
    return entries


def monthly_financial_alerts(year, month):
    """Pending payables and receivables falling due in ``year``/``month``"""
    first_day, last_day = month_bounds(year, month)
    payables = AccountPayable.objects.select_related('supplier', 'category').filter(
        status='pending', due_date__gte=first_day, due_date__lte=last_day,
    ).order_by('due_date', 'id')
    receivables = AccountReceivable.objects.select_related('customer', 'order').filter(
        status='pending', due_date__gte=first_day, due_date__lte=last_day,
    ).order_by('due_date', 'id')
    return payables, receivables
