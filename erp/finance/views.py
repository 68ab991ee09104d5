from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from erp.core.exceptions import BusinessRuleError
from erp.core.utils import create_audit_log, paginate, parse_date
from .models import FinancialCategory, AccountPayable, AccountReceivable, RecurringExpense
from .serializers import (
    FinancialCategorySerializer, AccountPayableSerializer,
    AccountReceivableSerializer, RecurringExpenseSerializer,
)
from .services import (
    mark_payable_paid, mark_receivable_received,
    generate_monthly_bills, mark_recurring_expense_paid,
)


def filter_ledger(request, queryset):
    """Status / due-date range / search filters shared by payables and receivables"""
    status_filter = request.query_params.get('status')
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    start_date = parse_date(request.query_params.get('start_date'))
    end_date = parse_date(request.query_params.get('end_date'))
    if start_date:
        queryset = queryset.filter(due_date__gte=start_date)
    if end_date:
        queryset = queryset.filter(due_date__lte=end_date)
    search = request.query_params.get('search')
    if search:
        queryset = queryset.filter(Q(description__icontains=search) | Q(notes__icontains=search))
    return queryset


# Financial categories
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def category_list_create(request):
    """List financial categories (optionally by type) or create one"""
    if request.method == 'GET':
        queryset = FinancialCategory.objects.all().order_by('name')
        type_filter = request.query_params.get('type')
        if type_filter:
            queryset = queryset.filter(type=type_filter)
        return Response(FinancialCategorySerializer(queryset, many=True).data)
    else:
        serializer = FinancialCategorySerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# Accounts payable
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def payable_list_create(request):
    """List payables (paginated) or create one, split into ``installments`` monthly rows"""
    if request.method == 'GET':
        queryset = AccountPayable.objects.select_related('supplier', 'category')
        queryset = filter_ledger(request, queryset)
        supplier = request.query_params.get('supplier')
        if supplier:
            queryset = queryset.filter(supplier_id=supplier)
        category = request.query_params.get('category')
        if category:
            queryset = queryset.filter(category_id=category)
        queryset = queryset.order_by('-due_date', '-id')
        return Response(paginate(request, queryset, AccountPayableSerializer))
    else:
        serializer = AccountPayableSerializer(data=request.data)
        if serializer.is_valid():
            first = serializer.save(created_by=request.user)
            rows = serializer.created_rows
            create_audit_log(
                request=request,
                action='installments_create' if len(rows) > 1 else 'create',
                model_name='AccountPayable',
                object_id=first.id,
                object_name=first.description,
                changes={'amount': str(serializer.validated_data['amount']), 'installments': len(rows),
                         'ids': [row.id for row in rows]},
            )
            return Response(AccountPayableSerializer(rows, many=True).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def payable_detail(request, pk):
    """Retrieve, update or delete one payable row"""
    payable = get_object_or_404(AccountPayable.objects.select_related('supplier', 'category'), pk=pk)

    if request.method == 'GET':
        return Response(AccountPayableSerializer(payable).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = AccountPayableSerializer(payable, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='AccountPayable',
                             object_id=payable.id, object_name=payable.description,
                             changes={'fields': sorted(k for k in serializer.validated_data if k != 'installments')})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='AccountPayable',
                         object_id=payable.id, object_name=payable.description,
                         changes={'amount': str(payable.amount)})
        payable.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def payable_mark_paid(request, pk):
    """Mark a single payable row as paid on ``payment_date`` (today when omitted)"""
    payable = get_object_or_404(AccountPayable, pk=pk)
    payment_date = parse_date(request.data.get('payment_date'))
    if request.data.get('payment_date') and payment_date is None:
        return Response({'payment_date': ['Use the YYYY-MM-DD format.']}, status=status.HTTP_400_BAD_REQUEST)
    try:
        payable = mark_payable_paid(payable, payment_date)
    except BusinessRuleError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='payment', model_name='AccountPayable',
                     object_id=payable.id, object_name=payable.description,
                     changes={'amount': str(payable.amount), 'payment_date': payable.payment_date.isoformat()})
    return Response(AccountPayableSerializer(payable).data)


# Accounts receivable
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def receivable_list_create(request):
    """List receivables (paginated) or create one, split into ``installments`` monthly rows"""
    if request.method == 'GET':
        queryset = AccountReceivable.objects.select_related('customer', 'order')
        queryset = filter_ledger(request, queryset)
        customer = request.query_params.get('customer')
        if customer:
            queryset = queryset.filter(customer_id=customer)
        order = request.query_params.get('order')
        if order:
            queryset = queryset.filter(order_id=order)
        queryset = queryset.order_by('-due_date', '-id')
        return Response(paginate(request, queryset, AccountReceivableSerializer))
    else:
        serializer = AccountReceivableSerializer(data=request.data)
        if serializer.is_valid():
            first = serializer.save(created_by=request.user)
            rows = serializer.created_rows
            create_audit_log(
                request=request,
                action='installments_create' if len(rows) > 1 else 'create',
                model_name='AccountReceivable',
                object_id=first.id,
                object_name=first.description,
                changes={'amount': str(serializer.validated_data['amount']), 'installments': len(rows),
                         'ids': [row.id for row in rows]},
            )
            return Response(AccountReceivableSerializer(rows, many=True).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def receivable_detail(request, pk):
    """Retrieve, update or delete one receivable row"""
    receivable = get_object_or_404(AccountReceivable.objects.select_related('customer', 'order'), pk=pk)

    if request.method == 'GET':
        return Response(AccountReceivableSerializer(receivable).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = AccountReceivableSerializer(receivable, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='AccountReceivable',
                             object_id=receivable.id, object_name=receivable.description,
                             changes={'fields': sorted(k for k in serializer.validated_data if k != 'installments')})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='AccountReceivable',
                         object_id=receivable.id, object_name=receivable.description,
                         changes={'amount': str(receivable.amount)})
        receivable.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def receivable_mark_received(request, pk):
    """Mark a single receivable row as received on ``received_date`` (today when omitted)"""
    receivable = get_object_or_404(AccountReceivable, pk=pk)
    received_date = parse_date(request.data.get('received_date'))
    if request.data.get('received_date') and received_date is None:
        return Response({'received_date': ['Use the YYYY-MM-DD format.']}, status=status.HTTP_400_BAD_REQUEST)
    try:
        receivable = mark_receivable_received(receivable, received_date)
    except BusinessRuleError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='receipt', model_name='AccountReceivable',
                     object_id=receivable.id, object_name=receivable.description,
                     changes={'amount': str(receivable.amount), 'received_date': receivable.received_date.isoformat()})
    return Response(AccountReceivableSerializer(receivable).data)


# Recurring expenses
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def recurring_expense_list_create(request):
    """List recurring expenses or create one"""
    if request.method == 'GET':
        queryset = RecurringExpense.objects.select_related('supplier')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        return Response(RecurringExpenseSerializer(queryset, many=True).data)
    else:
        serializer = RecurringExpenseSerializer(data=request.data)
        if serializer.is_valid():
            expense = serializer.save(created_by=request.user)
            create_audit_log(request=request, action='create', model_name='RecurringExpense',
                             object_id=expense.id, object_name=expense.name,
                             changes={'amount': str(expense.amount), 'frequency': expense.frequency})
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def recurring_expense_detail(request, pk):
    """Retrieve, update or delete a recurring expense"""
    expense = get_object_or_404(RecurringExpense, pk=pk)

    if request.method == 'GET':
        return Response(RecurringExpenseSerializer(expense).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = RecurringExpenseSerializer(expense, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='RecurringExpense',
                         object_id=expense.id, object_name=expense.name)
        expense.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recurring_expense_mark_paid(request, pk):
    """Register today's payment of a recurring expense as a paid payable"""
    expense = get_object_or_404(RecurringExpense, pk=pk)
    payable = mark_recurring_expense_paid(expense, user=request.user)
    create_audit_log(request=request, action='payment', model_name='RecurringExpense',
                     object_id=expense.id, object_name=expense.name,
                     changes={'payable_id': payable.id, 'amount': str(payable.amount)})
    return Response(AccountPayableSerializer(payable).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def recurring_expense_generate_bills(request):
    """Create this month's (or ``year``/``month``'s) pending bills for active recurring expenses"""
    try:
        year = int(request.data['year']) if request.data.get('year') else None
        month = int(request.data['month']) if request.data.get('month') else None
    except (TypeError, ValueError):
        return Response({'error': 'year and month must be integers'}, status=status.HTTP_400_BAD_REQUEST)
    if month is not None and not 1 <= month <= 12:
        return Response({'error': 'month must be between 1 and 12'}, status=status.HTTP_400_BAD_REQUEST)

    created, skipped = generate_monthly_bills(year=year, month=month, user=request.user)
    if created:
        create_audit_log(request=request, action='bills_generate', model_name='RecurringExpense',
                         object_id=','.join(str(bill.recurring_expense_id) for bill in created)[:100],
                         changes={'payables': [bill.id for bill in created]})
    return Response({
        'created': len(created),
        'skipped': len(skipped),
        'bills': AccountPayableSerializer(created, many=True).data,
    })
