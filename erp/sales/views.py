import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from erp.budgets.calculator import calculate_order, format_amounts, installment_preview
from erp.core.exceptions import BusinessRuleError
from erp.core.utils import create_audit_log, paginate, parse_date
from .models import Order
from .serializers import OrderSerializer, OrderListSerializer, OrderCalculationSerializer
from .services import ORDER_TRANSITIONS

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def order_list_create(request):
    """List orders (paginated) or create one with its items"""
    if request.method == 'GET':
        queryset = Order.objects.select_related('customer', 'budget').prefetch_related('items')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        start_date = parse_date(request.query_params.get('start_date'))
        end_date = parse_date(request.query_params.get('end_date'))
        if start_date:
            queryset = queryset.filter(order_date__date__gte=start_date)
        if end_date:
            queryset = queryset.filter(order_date__date__lte=end_date)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(order_number__icontains=search) |
                Q(customer__name__icontains=search) |
                Q(customer_name__icontains=search)
            )
        queryset = queryset.order_by('-order_date', '-id')
        return Response(paginate(request, queryset, OrderListSerializer))
    else:
        serializer = OrderSerializer(data=request.data)
        if serializer.is_valid():
            order = serializer.save(created_by=request.user)
            create_audit_log(request=request, action='create', model_name='Order',
                             object_id=order.id, object_name=order.get_display_customer_name(),
                             object_reference=order.order_number,
                             changes={'total_amount': str(order.total_amount), 'items': order.items.count()})
            return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    """Retrieve, update or delete an order"""
    order = get_object_or_404(Order.objects.select_related('customer', 'budget'), pk=pk)

    if request.method == 'GET':
        return Response(OrderSerializer(order).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = OrderSerializer(order, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            order = serializer.save()
            create_audit_log(request=request, action='update', model_name='Order',
                             object_id=order.id, object_reference=order.order_number,
                             changes={'fields': sorted(serializer.validated_data)})
            return Response(OrderSerializer(order).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Order',
                         object_id=order.id, object_reference=order.order_number,
                         changes={'total_amount': str(order.total_amount)})
        order.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_transition(request, pk):
    """Move an order to ``status``; approving it generates its receivables in the same transaction"""
    order = get_object_or_404(Order, pk=pk)
    target = request.data.get('status')
    if not target:
        return Response({'status': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)

    previous = order.status
    try:
        order = ORDER_TRANSITIONS.transition(order, target, user=request.user)
    except BusinessRuleError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='status_change', model_name='Order',
                     object_id=order.id, object_reference=order.order_number,
                     changes={'status': {'from': previous, 'to': order.status},
                              'receivables': order.receivables.count()})
    return Response(OrderSerializer(order).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def order_calculate(request):
    """Price an order under Simples Nacional and preview the per-installment amount"""
    serializer = OrderCalculationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    result = calculate_order(data)
    response = format_amounts(result)
    response['installment_preview'] = installment_preview(result['final_price'], data['installments'])
    return Response(response)
