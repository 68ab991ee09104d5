import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Q, DecimalField
from django.db.models.functions import ExtractMonth
from django.utils import timezone
from decimal import Decimal

from erp.core.utils import create_audit_log, csv_response, parse_date, parse_year
from erp.finance.models import AccountPayable, AccountReceivable, RecurringExpense
from erp.finance.serializers import AccountPayableSerializer, RecurringExpenseSerializer
from erp.sales.models import Order

logger = logging.getLogger('erp.reports')

ZERO = Decimal('0.00')


def status_sum(status_value):
    return Sum('amount', filter=Q(status=status_value), output_field=DecimalField())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_stats(request):
    """Completed sales plus payable / receivable totals by status"""
    start_date = parse_date(request.query_params.get('start_date'))
    end_date = parse_date(request.query_params.get('end_date'))

    orders = Order.objects.filter(status='completed')
    if start_date:
        orders = orders.filter(order_date__date__gte=start_date)
    if end_date:
        orders = orders.filter(order_date__date__lte=end_date)
    total_sales = orders.aggregate(total=Sum('total_amount', output_field=DecimalField()))['total'] or ZERO

    payables = AccountPayable.objects.aggregate(pending=status_sum('pending'), paid=status_sum('paid'))
    receivables = AccountReceivable.objects.aggregate(pending=status_sum('pending'), received=status_sum('received'))

    return Response({
        'period': {
            'from': start_date.isoformat() if start_date else None,
            'to': end_date.isoformat() if end_date else None,
        },
        'total_sales': total_sales,
        'accounts_payable': {
            'pending': payables['pending'] or ZERO,
            'paid': payables['paid'] or ZERO,
        },
        'accounts_receivable': {
            'pending': receivables['pending'] or ZERO,
            'received': receivables['received'] or ZERO,
        },
    })


def monthly_totals(queryset, date_field):
    rows = queryset.annotate(month=ExtractMonth(date_field)).values('month').annotate(
        total=Sum('amount', output_field=DecimalField())
    )
    return {row['month']: row['total'] for row in rows}


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cash_flow(request):
    """Twelve months of money in (received receivables) and out (paid payables) for ``year``"""
    try:
        year = parse_year(request.query_params.get('year'), timezone.localdate().year)
    except ValueError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    income = monthly_totals(
        AccountReceivable.objects.filter(status='received', received_date__year=year), 'received_date'
    )
    expense = monthly_totals(
        AccountPayable.objects.filter(status='paid', payment_date__year=year), 'payment_date'
    )

    months = []
    for month in range(1, 13):
        month_income = income.get(month) or ZERO
        month_expense = expense.get(month) or ZERO
        months.append({
            'month': month,
            'income': month_income,
            'expense': month_expense,
            'balance': month_income - month_expense,
        })
    return Response({'year': year, 'months': months})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def payments_due_today(request):
    """Pending payables falling due today"""
    today = timezone.localdate()
    accounts = AccountPayable.objects.select_related('supplier', 'category').filter(
        status='pending', due_date=today
    ).order_by('id')
    total = accounts.aggregate(total=Sum('amount', output_field=DecimalField()))['total'] or ZERO
    return Response({
        'date': today.isoformat(),
        'accounts': AccountPayableSerializer(accounts, many=True).data,
        'total_amount': total,
        'count': len(accounts),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recurring_expenses_due_today(request):
    """Active recurring expenses billing today (day 31 bills on the last day of shorter months)"""
    today = timezone.localdate()
    expenses = [
        expense for expense in RecurringExpense.objects.filter(status='active').select_related('supplier')
        if expense.is_due_in(today.year, today.month) and expense.due_date_in(today.year, today.month) == today
    ]
    return Response({
        'date': today.isoformat(),
        'expenses': RecurringExpenseSerializer(expenses, many=True).data,
        'total_amount': sum((expense.amount for expense in expenses), ZERO),
        'count': len(expenses),
    })


def filtered_ledger(request, queryset, date_field='due_date'):
    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    start_date = parse_date(request.query_params.get('start_date'))
    end_date = parse_date(request.query_params.get('end_date'))
    if start_date:
        queryset = queryset.filter(**{f'{date_field}__gte': start_date})
    if end_date:
        queryset = queryset.filter(**{f'{date_field}__lte': end_date})
    return queryset


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_payables(request):
    """CSV of accounts payable (status / due date filters)"""
    payables = filtered_ledger(request, AccountPayable.objects.select_related('supplier', 'category')).order_by('due_date', 'id')
    rows = [
        [p.id, p.description, p.supplier.name if p.supplier_id else '', p.category.name if p.category_id else '',
         p.amount, p.due_date, p.payment_date or '', p.get_status_display(),
         f"{p.installment_number}/{p.total_installments}"]
        for p in payables
    ]
    create_audit_log(request=request, action='export', model_name='AccountPayable',
                     object_id='csv', changes={'rows': len(rows)})
    logger.info("Exported %s payables", len(rows))
    return csv_response(
        'contas-a-pagar.csv',
        ['ID', 'Descrição', 'Fornecedor', 'Categoria', 'Valor', 'Vencimento', 'Pagamento', 'Status', 'Parcela'],
        rows,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_receivables(request):
    """CSV of accounts receivable (status / due date filters)"""
    receivables = filtered_ledger(request, AccountReceivable.objects.select_related('customer', 'order')).order_by('due_date', 'id')
    rows = [
        [r.id, r.description, r.customer.name if r.customer_id else '', r.order.order_number if r.order_id else '',
         r.amount, r.due_date, r.received_date or '', r.get_status_display(),
         f"{r.installment_number}/{r.total_installments}"]
        for r in receivables
    ]
    create_audit_log(request=request, action='export', model_name='AccountReceivable',
                     object_id='csv', changes={'rows': len(rows)})
    logger.info("Exported %s receivables", len(rows))
    return csv_response(
        'contas-a-receber.csv',
        ['ID', 'Descrição', 'Cliente', 'Pedido', 'Valor', 'Vencimento', 'Recebimento', 'Status', 'Parcela'],
        rows,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_orders(request):
    """CSV of orders (status / order date filters)"""
    orders = Order.objects.select_related('customer')
    status_filter = request.query_params.get('status')
    if status_filter:
        orders = orders.filter(status=status_filter)
    start_date = parse_date(request.query_params.get('start_date'))
    end_date = parse_date(request.query_params.get('end_date'))
    if start_date:
        orders = orders.filter(order_date__date__gte=start_date)
    if end_date:
        orders = orders.filter(order_date__date__lte=end_date)

    rows = [
        [o.order_number, o.get_display_customer_name(), timezone.localtime(o.order_date).date(),
         o.get_status_display(), o.total_amount, o.notes or '']
        for o in orders.order_by('order_date', 'id')
    ]
    create_audit_log(request=request, action='export', model_name='Order',
                     object_id='csv', changes={'rows': len(rows)})
    logger.info("Exported %s orders", len(rows))
    return csv_response('pedidos.csv', ['Número', 'Cliente', 'Data', 'Status', 'Total', 'Observações'], rows)
