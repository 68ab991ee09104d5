from decimal import Decimal
from django.db import transaction
from rest_framework import serializers
from .models import Contract, ContractItem


class ContractItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(source='get_line_total', max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = ContractItem
        fields = ['id', 'description', 'quantity', 'unit_price', 'line_total']

    def validate_unit_price(self, value):
        if value < Decimal('0'):
            raise serializers.ValidationError('Unit price cannot be negative.')
        return value


class ContractSerializer(serializers.ModelSerializer):
    items = ContractItemSerializer(many=True, required=False)
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    items_total = serializers.DecimalField(source='get_items_total', max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = Contract
        fields = [
            'id', 'customer', 'customer_name', 'title', 'description', 'contract_type',
            'contract_content', 'monthly_value', 'start_date', 'end_date', 'renewal_date',
            'adjustment_rate', 'status', 'billing_day', 'notes', 'items', 'items_total',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']

    def validate_monthly_value(self, value):
        if value < Decimal('0'):
            raise serializers.ValidationError('Monthly value cannot be negative.')
        return value

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({'end_date': 'End date cannot be before the start date.'})
        return attrs

    def create(self, validated_data):
        items = validated_data.pop('items', [])
        with transaction.atomic():
            contract = Contract.objects.create(**validated_data)
            for item in items:
                ContractItem.objects.create(contract=contract, **item)
        return contract

    def update(self, instance, validated_data):
        """Items are replaced as a whole when supplied"""
        items = validated_data.pop('items', None)
        with transaction.atomic():
            instance = super().update(instance, validated_data)
            if items is not None:
                instance.items.all().delete()
                for item in items:
                    ContractItem.objects.create(contract=instance, **item)
        return instance
