from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from erp.core.utils import create_audit_log
from .models import Contract
from .serializers import ContractSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def contract_list_create(request):
    """List contracts or create one with its items"""
    if request.method == 'GET':
        queryset = Contract.objects.select_related('customer').prefetch_related('items')
        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)
        customer = request.query_params.get('customer')
        if customer:
            queryset = queryset.filter(customer_id=customer)
        search = request.query_params.get('search')
        if search:
            queryset = queryset.filter(Q(title__icontains=search) | Q(customer__name__icontains=search))
        return Response(ContractSerializer(queryset, many=True).data)
    else:
        serializer = ContractSerializer(data=request.data)
        if serializer.is_valid():
            contract = serializer.save(created_by=request.user)
            create_audit_log(request=request, action='create', model_name='Contract',
                             object_id=contract.id, object_name=contract.title,
                             changes={'monthly_value': str(contract.monthly_value)})
            return Response(ContractSerializer(contract).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def contract_detail(request, pk):
    """Retrieve, update or delete a contract"""
    contract = get_object_or_404(Contract.objects.select_related('customer'), pk=pk)

    if request.method == 'GET':
        return Response(ContractSerializer(contract).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ContractSerializer(contract, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            contract = serializer.save()
            create_audit_log(request=request, action='update', model_name='Contract',
                             object_id=contract.id, object_name=contract.title,
                             changes={'fields': sorted(serializer.validated_data)})
            return Response(ContractSerializer(contract).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(request=request, action='delete', model_name='Contract',
                         object_id=contract.id, object_name=contract.title)
        contract.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
