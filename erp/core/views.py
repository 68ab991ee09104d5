from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q
from .models import Setting, AuditLog, TaxSetting, CompanySettings
from .permissions import IsAdminRole
from .serializers import (
    UserSerializer, UserCreateSerializer,
    SettingSerializer, AuditLogSerializer,
    TaxSettingSerializer, CompanySettingsSerializer,
)
from .utils import create_audit_log, parse_date

User = get_user_model()


class ERPTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        return token


class ERPTokenObtainPairView(TokenObtainPairView):
    serializer_class = ERPTokenObtainPairSerializer


class ERPTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token instead of a 500"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class ERPTokenRefreshView(TokenRefreshView):
    serializer_class = ERPTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        token = ERPTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role flags"""
    data = UserSerializer(request.user).data
    data['is_admin'] = request.user.is_admin
    return Response(data)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(request=request, action='create', model_name='User',
                             object_id=user.id, object_name=user.username)
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        return Response(UserSerializer(user).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='User',
                             object_id=user.id, object_name=user.username,
                             changes={'fields': sorted(serializer.validated_data)})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        create_audit_log(request=request, action='delete', model_name='User',
                         object_id=user.id, object_name=user.username)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def setting_list_create(request):
    """List all settings or create a new setting"""
    if request.method == 'GET':
        serializer = SettingSerializer(Setting.objects.all().order_by('key'), many=True)
        return Response(serializer.data)
    else:
        serializer = SettingSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        return Response(SettingSerializer(setting).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def tax_settings(request):
    """Active tax rates used as defaults for new budgets.

    PUT updates the active row, creating it on first use. Only admins may write.
    """
    current = TaxSetting.get_active()

    if request.method == 'GET':
        if current is None:
            return Response({'error': 'Tax settings not configured'}, status=status.HTTP_404_NOT_FOUND)
        return Response(TaxSettingSerializer(current).data)

    if not request.user.is_admin:
        return Response({'error': IsAdminRole.message}, status=status.HTTP_403_FORBIDDEN)

    serializer = TaxSettingSerializer(current, data=request.data, partial=current is not None)
    if serializer.is_valid():
        instance = serializer.save(is_active=True)
        TaxSetting.objects.filter(is_active=True).exclude(pk=instance.pk).update(is_active=False)
        create_audit_log(request=request, action='update' if current else 'create', model_name='TaxSetting',
                         object_id=instance.id, changes={k: str(v) for k, v in serializer.validated_data.items()})
        return Response(TaxSettingSerializer(instance).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def company_settings(request):
    """Company identity; a single row that PUT creates or updates"""
    current = CompanySettings.objects.order_by('id').first()

    if request.method == 'GET':
        if current is None:
            return Response({'error': 'Company settings not configured'}, status=status.HTTP_404_NOT_FOUND)
        return Response(CompanySettingsSerializer(current).data)

    serializer = CompanySettingsSerializer(current, data=request.data, partial=current is not None)
    if serializer.is_valid():
        instance = serializer.save()
        create_audit_log(request=request, action='update' if current else 'create', model_name='CompanySettings',
                         object_id=instance.id, object_name=instance.company_name)
        return Response(CompanySettingsSerializer(instance).data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs; non-admins only see their own entries"""
    queryset = AuditLog.objects.select_related('user')

    if not request.user.is_admin:
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action')
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model')
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = parse_date(request.query_params.get('date_from'))
    date_to = parse_date(request.query_params.get('date_to'))
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    serializer = AuditLogSerializer(queryset.order_by('-created_at')[:500], many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.is_admin and audit_log.user_id != request.user.id:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    return Response(AuditLogSerializer(audit_log).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Search customers, suppliers, products, orders and budgets at once"""
    from erp.parties.models import Customer, Supplier
    from erp.parties.serializers import CustomerSerializer, SupplierSerializer
    from erp.catalog.models import Product
    from erp.catalog.serializers import ProductSerializer
    from erp.sales.models import Order
    from erp.sales.serializers import OrderListSerializer
    from erp.budgets.models import Budget
    from erp.budgets.serializers import BudgetListSerializer

    query = request.query_params.get('q', '').strip()
    empty = {'customers': [], 'suppliers': [], 'products': [], 'orders': [], 'budgets': []}
    if not query:
        return Response(empty)

    customers = Customer.objects.filter(
        Q(name__icontains=query) | Q(email__icontains=query) | Q(document__icontains=query)
    )[:20]
    suppliers = Supplier.objects.filter(
        Q(name__icontains=query) | Q(email__icontains=query) | Q(document__icontains=query)
    )[:20]
    products = Product.objects.filter(Q(name__icontains=query) | Q(category__icontains=query))[:20]
    orders = Order.objects.filter(
        Q(order_number__icontains=query) | Q(customer_name__icontains=query)
    ).select_related('customer')[:20]
    budgets = Budget.objects.filter(
        Q(budget_number__icontains=query) | Q(title__icontains=query) | Q(customer_name__icontains=query)
    )[:20]

    return Response({
        'customers': CustomerSerializer(customers, many=True).data,
        'suppliers': SupplierSerializer(suppliers, many=True).data,
        'products': ProductSerializer(products, many=True).data,
        'orders': OrderListSerializer(orders, many=True).data,
        'budgets': BudgetListSerializer(budgets, many=True).data,
    })
