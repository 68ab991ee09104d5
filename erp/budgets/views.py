from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from erp.core.exceptions import BusinessRuleError
from erp.core.utils import create_audit_log, csv_response, paginate
from .models import Budget, BudgetTemplate
from .serializers import BudgetSerializer, BudgetListSerializer, BudgetTemplateSerializer
from .services import (
    BUDGET_TRANSITIONS, BUDGET_EXPORT_HEADER, budget_export_row,
    convert_to_order, create_project,
)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def budget_list_create(request):
    """List budgets (paginated) or create one priced with the active tax rates"""
    if request.method == 'GET':
        queryset = Budget.objects.select_related('customer')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        customer = request.query_params.get('customer')
        if customer:
            queryset = queryset.filter(customer_id=customer)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(budget_number__icontains=search) |
                Q(title__icontains=search) |
                Q(customer_name__icontains=search) |
                Q(customer__name__icontains=search)
            )
        queryset = queryset.order_by('-created_at', '-id')
        return Response(paginate(request, queryset, BudgetListSerializer))
    else:
        serializer = BudgetSerializer(data=request.data)
        if serializer.is_valid():
            try:
                budget = serializer.save(created_by=request.user)
            except BusinessRuleError as e:
                return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)
            create_audit_log(request=request, action='create', model_name='Budget',
                             object_id=budget.id, object_name=budget.title,
                             object_reference=budget.budget_number,
                             changes={'final_price': str(budget.final_price)})
            return Response(BudgetSerializer(budget).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def budget_detail(request, pk):
    """Retrieve, update (recomputing derived amounts) or delete a budget"""
    budget = get_object_or_404(Budget.objects.select_related('customer'), pk=pk)

    if request.method == 'GET':
        return Response(BudgetSerializer(budget).data)
    elif request.method in ('PUT', 'PATCH'):
        previous_price = budget.final_price
        serializer = BudgetSerializer(budget, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            budget = serializer.save()
            changes = {'fields': sorted(k for k in serializer.validated_data if k != 'selected_products')}
            if budget.final_price != previous_price:
                changes['final_price'] = {'from': str(previous_price), 'to': str(budget.final_price)}
            create_audit_log(request=request, action='update', model_name='Budget',
                             object_id=budget.id, object_name=budget.title,
                             object_reference=budget.budget_number, changes=changes)
            return Response(BudgetSerializer(budget).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Budget',
                         object_id=budget.id, object_name=budget.title,
                         object_reference=budget.budget_number)
        budget.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def budget_transition(request, pk):
    """Move a budget along draft -> sent -> approved/rejected"""
    budget = get_object_or_404(Budget, pk=pk)
    target = request.data.get('status')
    if not target:
        return Response({'status': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)

    previous = budget.status
    try:
        budget = BUDGET_TRANSITIONS.transition(budget, target, user=request.user)
    except BusinessRuleError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='status_change', model_name='Budget',
                     object_id=budget.id, object_name=budget.title,
                     object_reference=budget.budget_number,
                     changes={'status': {'from': previous, 'to': budget.status}})
    return Response(BudgetSerializer(budget).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def budget_convert_to_order(request, pk):
    """Create a pending order from an approved budget"""
    from erp.sales.serializers import OrderSerializer

    budget = get_object_or_404(Budget, pk=pk)
    try:
        order = convert_to_order(budget, user=request.user)
    except BusinessRuleError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='budget_convert', model_name='Budget',
                     object_id=budget.id, object_name=budget.title,
                     object_reference=budget.budget_number,
                     changes={'order_id': order.id, 'order_number': order.order_number,
                              'total_amount': str(order.total_amount)})
    return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def budget_create_project(request, pk):
    """Open a kanban project for an approved or converted budget"""
    budget = get_object_or_404(Budget, pk=pk)
    try:
        project = create_project(budget, user=request.user)
    except BusinessRuleError as e:
        return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(request=request, action='project_from_budget', model_name='Budget',
                     object_id=budget.id, object_name=budget.title,
                     object_reference=budget.budget_number,
                     changes={'project_id': project.id})
    return Response({
        'project_id': project.id,
        'message': f"Projeto criado com sucesso a partir do orçamento #{budget.id}",
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def budget_export(request, pk):
    """CSV rendition of one budget: the breakdown row followed by its items"""
    budget = get_object_or_404(Budget.objects.select_related('customer'), pk=pk)
    rows = [budget_export_row(budget)]
    items = list(budget.items.select_related('product'))
    if items:
        rows.append([])
        rows.append(['Item', 'Tipo', 'Quantidade', 'Preço unitário', 'Total'])
        rows.extend([item.description, item.type, item.quantity, item.unit_price, item.total_price] for item in items)

    create_audit_log(request=request, action='export', model_name='Budget',
                     object_id=budget.id, object_reference=budget.budget_number)
    return csv_response(f"orcamento-{budget.id:06d}.csv", BUDGET_EXPORT_HEADER, rows)


# Budget templates
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def template_list_create(request):
    """List budget templates or create one"""
    if request.method == 'GET':
        queryset = BudgetTemplate.objects.all().order_by('name')
        return Response(BudgetTemplateSerializer(queryset, many=True).data)
    else:
        serializer = BudgetTemplateSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save(created_by=request.user)
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def template_detail(request, pk):
    """Retrieve, update or delete a budget template"""
    template = get_object_or_404(BudgetTemplate, pk=pk)

    if request.method == 'GET':
        return Response(BudgetTemplateSerializer(template).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = BudgetTemplateSerializer(template, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        template.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
