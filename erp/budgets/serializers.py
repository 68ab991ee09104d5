from decimal import Decimal
from rest_framework import serializers
from erp.catalog.models import Product
from erp.core.models import TaxSetting
from .calculator import BUDGET_DERIVED_FIELDS, BUDGET_INPUT_FIELDS, BUDGET_RATE_FIELDS, calculate_budget
from .models import Budget, BudgetItem, BudgetTemplate
from .services import create_budget, update_budget

STATE_LENGTH = 2
# money columns hold 12 integer digits
MAX_STORED_AMOUNT = 1e12


class BudgetItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)

    class Meta:
        model = BudgetItem
        fields = ['id', 'product', 'product_name', 'type', 'description', 'quantity', 'unit_price', 'total_price']
        read_only_fields = ['total_price']


class SelectedProductSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.01'))
    price = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal('0'))

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        value['product'] = value['product'].pk
        return value


class BudgetListSerializer(serializers.ModelSerializer):
    display_customer_name = serializers.CharField(source='get_display_customer_name', read_only=True)

    class Meta:
        model = Budget
        fields = [
            'id', 'budget_number', 'title', 'customer', 'display_customer_name',
            'status', 'final_price', 'installments', 'valid_until', 'created_at'
        ]


class BudgetSerializer(serializers.ModelSerializer):
    items = BudgetItemSerializer(many=True, read_only=True)
    selected_products = SelectedProductSerializer(many=True, write_only=True, required=False)
    display_customer_name = serializers.CharField(source='get_display_customer_name', read_only=True)
    cbs_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    ibs_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    irpj_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    csll_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    installments = serializers.IntegerField(required=False, default=1, min_value=1, max_value=120)

    class Meta:
        model = Budget
        fields = [
            'id', 'budget_number', 'customer', 'display_customer_name',
            'customer_name', 'customer_email', 'customer_phone', 'customer_document',
            'customer_address', 'customer_neighborhood', 'customer_city', 'customer_state',
            'customer_zip_code', 'title', 'description',
            'labor_hours', 'labor_rate', 'material_cost', 'third_party_cost',
            'other_direct_costs', 'indirect_costs_total', 'profit_margin',
            'cbs_rate', 'ibs_rate', 'irpj_rate', 'csll_rate',
            *BUDGET_DERIVED_FIELDS,
            'tax_regime', 'installments', 'status', 'valid_until', 'notes',
            'items', 'selected_products', 'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'budget_number', *BUDGET_DERIVED_FIELDS, 'status', 'created_by', 'created_at', 'updated_at'
        ]

    def validate_customer_state(self, value):
        if value and len(value) != STATE_LENGTH:
            raise serializers.ValidationError('Use the two-letter state code.')
        return value.upper() if value else value

    def validate_profit_margin(self, value):
        if value < 0:
            raise serializers.ValidationError('Profit margin cannot be negative.')
        return value

    def validate(self, attrs):
        for field in BUDGET_RATE_FIELDS:
            rate = attrs.get(field)
            if rate is not None and not Decimal('0') <= rate <= Decimal('100'):
                raise serializers.ValidationError({field: 'Rate must be between 0 and 100.'})
        if self.instance:
            # Stored rates stay put unless a new value is sent
            for field in BUDGET_RATE_FIELDS:
                if field in attrs and attrs[field] is None:
                    attrs.pop(field)
        self.validate_derived_amounts(attrs)
        return attrs

    def validate_derived_amounts(self, attrs):
        """Every derived amount has to fit the money columns"""
        inputs = self.instance.calculation_inputs() if self.instance else {}
        inputs.update({field: attrs[field] for field in BUDGET_INPUT_FIELDS if field in attrs})
        tax_setting = TaxSetting.get_active()
        for field in BUDGET_RATE_FIELDS:
            if inputs.get(field) is None and tax_setting is not None:
                inputs[field] = getattr(tax_setting, field)

        for field, value in calculate_budget(inputs).items():
            if abs(value) >= MAX_STORED_AMOUNT:
                raise serializers.ValidationError({
                    field: 'Calculated amount is too large. Reduce the costs or the profit margin.'
                })

    def create(self, validated_data):
        selected_products = validated_data.pop('selected_products', None)
        user = validated_data.pop('created_by', None)
        return create_budget(selected_products=selected_products, user=user, **validated_data)

    def update(self, instance, validated_data):
        selected_products = validated_data.pop('selected_products', None)
        return update_budget(instance, selected_products=selected_products, **validated_data)


class BudgetTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = BudgetTemplate
        fields = [
            'id', 'name', 'description', 'labor_hours', 'labor_rate', 'material_cost',
            'third_party_cost', 'other_direct_costs', 'indirect_costs_total', 'profit_margin',
            'created_by', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_by', 'created_at', 'updated_at']
