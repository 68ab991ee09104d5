"""
Installment generator for accounts payable and receivable.

A total is split into N monthly rows. Every row but the last carries
``floor(total / N)`` to the cent and the last one absorbs the remainder,
so the rows always add up to the original total. All rows of one split
point at the first row through their parent reference (the first row
points at itself); a single installment is stored as a plain account
with no parent.
"""
import logging
from decimal import Decimal, ROUND_DOWN, InvalidOperation

from dateutil.relativedelta import relativedelta
from django.db import transaction

from .models import AccountPayable, AccountReceivable

logger = logging.getLogger(__name__)

MIN_INSTALLMENTS = 1
MAX_INSTALLMENTS = 120
CENT = Decimal('0.01')


def normalize_installment_count(value):
    """Missing counts mean a single installment; anything outside 1..120 is rejected"""
    if value in (None, ''):
        return MIN_INSTALLMENTS
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Installment count must be an integer, got {value!r}")
    if not MIN_INSTALLMENTS <= count <= MAX_INSTALLMENTS:
        raise ValueError(f"Installment count must be between {MIN_INSTALLMENTS} and {MAX_INSTALLMENTS}, got {count}")
    return count


def split_amount(total, count):
    """Split ``total`` into ``count`` cent amounts; the last one takes the rounding remainder"""
    count = normalize_installment_count(count)
    try:
        total = Decimal(str(total)).quantize(CENT)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {total!r}")

    base = (total / count).quantize(CENT, rounding=ROUND_DOWN)
    amounts = [base] * (count - 1)
    amounts.append(total - base * (count - 1))
    return amounts


def installment_due_dates(first_due_date, count):
    """One due date per month, on the first due date's day (clamped in shorter months)"""
    count = normalize_installment_count(count)
    return [first_due_date + relativedelta(months=offset) for offset in range(count)]


def installment_description(description, number, count):
    if count == 1:
        return description
    return f"{description} ({number}/{count})"


def _create_installments(model, parent_field, *, description, amount, due_date, installments, user, fields):
    count = normalize_installment_count(installments)
    amounts = split_amount(amount, count)
    due_dates = installment_due_dates(due_date, count)

    rows = []
    with transaction.atomic():
        parent = None
        for number, (row_amount, row_due_date) in enumerate(zip(amounts, due_dates), start=1):
            row = model(
                description=installment_description(description, number, count),
                amount=row_amount,
                due_date=row_due_date,
                installment_number=number,
                total_installments=count,
                created_by=user,
                **fields,
            )
            if parent is not None:
                setattr(row, parent_field, parent)
            row.save()
            if count > 1 and parent is None:
                parent = row
                setattr(row, parent_field, row)
                row.save(update_fields=[parent_field])
            rows.append(row)

    logger.info("Created %s %s installment(s) totalling %s", count, model.__name__, amount)
    return rows


def create_payable_installments(*, description, amount, due_date, installments=1, user=None, **fields):
    """Persist N AccountPayable rows for ``amount``; returns them ordered by installment number"""
    return _create_installments(
        AccountPayable, 'parent_payable',
        description=description, amount=amount, due_date=due_date,
        installments=installments, user=user, fields=fields,
    )


def create_receivable_installments(*, description, amount, due_date, installments=1, user=None, **fields):
    """Persist N AccountReceivable rows for ``amount``; returns them ordered by installment number"""
    return _create_installments(
        AccountReceivable, 'parent_receivable',
        description=description, amount=amount, due_date=due_date,
        installments=installments, user=user, fields=fields,
    )
