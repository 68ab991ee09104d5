import re
from decimal import Decimal
from rest_framework import serializers
from .installments import (
    MIN_INSTALLMENTS, MAX_INSTALLMENTS,
    create_payable_installments, create_receivable_installments,
)
from .models import FinancialCategory, AccountPayable, AccountReceivable, RecurringExpense

HEX_COLOR = re.compile(r'^#[0-9a-fA-F]{6}$')


class FinancialCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = FinancialCategory
        fields = ['id', 'name', 'type', 'color', 'created_at']

    def validate_color(self, value):
        if not HEX_COLOR.match(value):
            raise serializers.ValidationError('Color must be a hex value like #6366f1.')
        return value


class AccountPayableSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    category_name = serializers.CharField(source='category.name', read_only=True)
    installments = serializers.IntegerField(
        write_only=True, required=False, default=1,
        min_value=MIN_INSTALLMENTS, max_value=MAX_INSTALLMENTS,
    )

    class Meta:
        model = AccountPayable
        fields = [
            'id', 'supplier', 'supplier_name', 'category', 'category_name', 'recurring_expense',
            'description', 'amount', 'due_date', 'payment_date', 'status', 'notes',
            'installment_number', 'total_installments', 'parent_payable', 'installments',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'recurring_expense', 'payment_date', 'status', 'installment_number', 'total_installments',
            'parent_payable', 'created_by', 'created_at', 'updated_at'
        ]

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Amount must be greater than zero.')
        return value

    def create(self, validated_data):
        """Split into installment rows; the first row is returned, all rows land in ``created_rows``"""
        installments = validated_data.pop('installments', 1)
        user = validated_data.pop('created_by', None)
        self.created_rows = create_payable_installments(installments=installments, user=user, **validated_data)
        return self.created_rows[0]

    def update(self, instance, validated_data):
        validated_data.pop('installments', None)
        return super().update(instance, validated_data)


class AccountReceivableSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    order_number = serializers.CharField(source='order.order_number', read_only=True)
    installments = serializers.IntegerField(
        write_only=True, required=False, default=1,
        min_value=MIN_INSTALLMENTS, max_value=MAX_INSTALLMENTS,
    )

    class Meta:
        model = AccountReceivable
        fields = [
            'id', 'order', 'order_number', 'customer', 'customer_name',
            'description', 'amount', 'due_date', 'received_date', 'status', 'notes',
            'installment_number', 'total_installments', 'parent_receivable', 'installments',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'received_date', 'status', 'installment_number', 'total_installments',
            'parent_receivable', 'created_by', 'created_at', 'updated_at'
        ]

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Amount must be greater than zero.')
        return value

    def create(self, validated_data):
        """Split into installment rows; the first row is returned, all rows land in ``created_rows``"""
        installments = validated_data.pop('installments', 1)
        user = validated_data.pop('created_by', None)
        self.created_rows = create_receivable_installments(installments=installments, user=user, **validated_data)
        return self.created_rows[0]

    def update(self, instance, validated_data):
        validated_data.pop('installments', None)
        return super().update(instance, validated_data)


class RecurringExpenseSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)

    class Meta:
        model = RecurringExpense
        fields = [
            'id', 'name', 'category', 'supplier', 'supplier_name', 'amount', 'frequency',
            'day_of_month', 'start_date', 'end_date', 'status', 'last_generated', 'notes',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['last_generated', 'created_by', 'created_at', 'updated_at']

    def validate_day_of_month(self, value):
        if not 1 <= value <= 31:
            raise serializers.ValidationError('Day of month must be between 1 and 31.')
        return value

    def validate_amount(self, value):
        if value <= Decimal('0'):
            raise serializers.ValidationError('Amount must be greater than zero.')
        return value

    def validate(self, attrs):
        start_date = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        end_date = attrs.get('end_date', getattr(self.instance, 'end_date', None))
        if start_date and end_date and end_date < start_date:
            raise serializers.ValidationError({'end_date': 'End date cannot be before the start date.'})
        return attrs
