from decimal import Decimal
from django.db import transaction
from rest_framework import serializers
from erp.catalog.models import Product
from .models import Order, OrderItem
from .services import create_order, replace_order_items


class OrderItemSerializer(serializers.ModelSerializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'subtotal']
        read_only_fields = ['subtotal']

    def validate_quantity(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Quantity must be greater than zero.')
        return value

    def validate_unit_price(self, value):
        if value < Decimal('0'):
            raise serializers.ValidationError('Unit price cannot be negative.')
        return value


class OrderListSerializer(serializers.ModelSerializer):
    display_customer_name = serializers.CharField(source='get_display_customer_name', read_only=True)
    items_count = serializers.SerializerMethodField()

    def get_items_count(self, obj):
        return obj.items.count()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer', 'display_customer_name', 'budget',
            'status', 'total_amount', 'items_count', 'order_date'
        ]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True)
    display_customer_name = serializers.CharField(source='get_display_customer_name', read_only=True)
    budget_number = serializers.CharField(source='budget.budget_number', read_only=True)
    order_number = serializers.CharField(max_length=20, required=False, allow_blank=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer', 'display_customer_name',
            'customer_name', 'customer_email', 'customer_phone', 'customer_address',
            'budget', 'budget_number', 'status', 'total_amount', 'notes', 'order_date',
            'created_by', 'created_at', 'updated_at', 'items'
        ]
        read_only_fields = ['status', 'total_amount', 'order_date', 'created_by', 'created_at', 'updated_at']

    def validate_order_number(self, value):
        if value:
            queryset = Order.objects.filter(order_number=value)
            if self.instance:
                queryset = queryset.exclude(pk=self.instance.pk)
            if queryset.exists():
                raise serializers.ValidationError('An order with this number already exists.')
        return value

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError('An order needs at least one item.')
        return value

    def validate(self, attrs):
        if not self.instance and not attrs.get('customer') and not attrs.get('customer_name'):
            raise serializers.ValidationError({'customer': 'Select a customer or provide a customer name.'})
        return attrs

    def create(self, validated_data):
        items = validated_data.pop('items')
        user = validated_data.pop('created_by', None)
        return create_order(items=items, user=user, **validated_data)

    def update(self, instance, validated_data):
        """Items are replaced when supplied; the stored total is left as created"""
        items = validated_data.pop('items', None)
        if not validated_data.get('order_number', True):
            validated_data.pop('order_number')
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if items:
                replace_order_items(instance, items)
        return instance


class OrderCalculationSerializer(serializers.Serializer):
    """Inputs of the Simples Nacional order calculator; everything optional, blanks count as zero"""
    labor_hours = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    labor_rate = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    material_cost = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    third_party_cost = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    other_direct_costs = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    indirect_costs_total = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    profit_margin = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    simples_rate = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    installments = serializers.IntegerField(required=False, default=1, min_value=1, max_value=120)
