from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404
from erp.core.utils import create_audit_log
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def product_list_create(request):
    """List products (filterable with ProductFilter) or create a new product"""
    if request.method == 'GET':
        filterset = ProductFilter(request.query_params, queryset=Product.objects.all())
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        queryset = filterset.qs.order_by('name')
        serializer = ProductSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(request=request, action='create', model_name='Product',
                             object_id=product.id, object_name=product.name,
                             changes={'price': str(product.price)})
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product, pk=pk)

    if request.method == 'GET':
        return Response(ProductSerializer(product).data)
    elif request.method in ('PUT', 'PATCH'):
        old_price = product.price
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            product = serializer.save()
            changes = {'fields': sorted(serializer.validated_data)}
            if product.price != old_price:
                changes['price'] = {'old': str(old_price), 'new': str(product.price)}
            create_audit_log(request=request, action='update', model_name='Product',
                             object_id=product.id, object_name=product.name, changes=changes)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            product.delete()
        except ProtectedError:
            # Referenced by order items: deactivate instead so history stays intact
            product.is_active = False
            product.save(update_fields=['is_active', 'updated_at'])
            return Response(
                {'error': 'Product is used by orders and was deactivated instead of deleted'},
                status=status.HTTP_409_CONFLICT
            )
        create_audit_log(request=request, action='delete', model_name='Product',
                         object_id=pk, object_name=product.name)
        return Response(status=status.HTTP_204_NO_CONTENT)
