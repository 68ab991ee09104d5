from django.conf import settings
from django.db import models
from decimal import Decimal
from .calculator import calculate_budget, format_amounts


def money_field(**kwargs):
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(max_digits=14, decimal_places=2, **kwargs)


def rate_field(**kwargs):
    kwargs.setdefault('default', Decimal('0.00'))
    return models.DecimalField(max_digits=5, decimal_places=2, **kwargs)


class Budget(models.Model):
    """Customer quote with its full cost, margin and tax breakdown.

    Derived amounts are stored, not computed on read, so a quote keeps its
    figures when the tax settings change later.
    """
    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('sent', 'Sent'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
        ('converted', 'Converted'),
    ]
    REGIME_CHOICES = [
        ('new', 'New (CBS/IBS)'),
        ('old', 'Old'),
        ('transition', 'Transition'),
    ]

    budget_number = models.CharField(max_length=20, unique=True)
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='budgets')

    # Customer snapshot, kept even when no customer record exists yet
    customer_name = models.CharField(max_length=255, blank=True, null=True)
    customer_email = models.CharField(max_length=320, blank=True, null=True)
    customer_phone = models.CharField(max_length=20, blank=True, null=True)
    customer_document = models.CharField(max_length=20, blank=True, null=True)
    customer_address = models.TextField(blank=True, null=True)
    customer_neighborhood = models.CharField(max_length=100, blank=True, null=True)
    customer_city = models.CharField(max_length=100, blank=True, null=True)
    customer_state = models.CharField(max_length=2, blank=True, null=True)
    customer_zip_code = models.CharField(max_length=10, blank=True, null=True)

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)

    # Inputs
    labor_cost = money_field()
    labor_hours = money_field()
    labor_rate = money_field()
    material_cost = money_field()
    third_party_cost = money_field()
    other_direct_costs = money_field()
    indirect_costs_total = money_field()
    profit_margin = rate_field(default=Decimal('20.00'))
    cbs_rate = rate_field()
    ibs_rate = rate_field()
    irpj_rate = rate_field()
    csll_rate = rate_field()

    # Derived
    total_direct_costs = money_field()
    total_costs = money_field()
    gross_value = money_field()
    cbs_amount = money_field()
    ibs_amount = money_field()
    total_consumption_taxes = money_field()
    net_revenue = money_field()
    profit_before_taxes = money_field()
    irpj_amount = money_field()
    csll_amount = money_field()
    net_profit = money_field()
    final_price = money_field()

    tax_regime = models.CharField(max_length=20, choices=REGIME_CHOICES, default='new')
    installments = models.PositiveSmallIntegerField(default=1)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    valid_until = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='budgets_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.budget_number} - {self.title}"

    def calculation_inputs(self):
        return {
            'labor_hours': self.labor_hours,
            'labor_rate': self.labor_rate,
            'material_cost': self.material_cost,
            'third_party_cost': self.third_party_cost,
            'other_direct_costs': self.other_direct_costs,
            'indirect_costs_total': self.indirect_costs_total,
            'profit_margin': self.profit_margin,
            'cbs_rate': self.cbs_rate,
            'ibs_rate': self.ibs_rate,
            'irpj_rate': self.irpj_rate,
            'csll_rate': self.csll_rate,
        }

    def recalculate(self):
        """Recompute every derived amount (labor cost included) from the stored inputs"""
        for field, value in format_amounts(calculate_budget(self.calculation_inputs())).items():
            setattr(self, field, Decimal(value))
        return self

    def get_display_customer_name(self):
        if self.customer_id:
            return self.customer.name
        return self.customer_name or ''

    class Meta:
        db_table = 'budgets'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='budgets_status_61d0ab_idx'),
            models.Index(fields=['-created_at'], name='budgets_created_0e7f52_idx'),
        ]


class BudgetItem(models.Model):
    TYPE_CHOICES = [
        ('labor', 'Labor'),
        ('material', 'Material'),
        ('thirdparty', 'Third party'),
        ('indirect', 'Indirect'),
        ('other', 'Other'),
        ('service', 'Service'),
    ]

    budget = models.ForeignKey(Budget, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey('catalog.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='budget_items')
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='service')
    description = models.CharField(max_length=500)
    quantity = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('1.00'))
    unit_price = money_field()
    total_price = money_field()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.description} x {self.quantity}"

    def get_line_total(self):
        return (self.quantity * self.unit_price).quantize(Decimal('0.01'))

    def save(self, *args, **kwargs):
        self.total_price = self.get_line_total()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'budget_items'
        ordering = ['id']


class BudgetTemplate(models.Model):
    """Reusable starting values for the cost inputs of a new budget"""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    labor_hours = money_field()
    labor_rate = money_field()
    material_cost = money_field()
    third_party_cost = money_field()
    other_direct_costs = money_field()
    indirect_costs_total = money_field()
    profit_margin = rate_field(default=Decimal('20.00'))
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='budget_templates_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'budget_templates'
        ordering = ['name']
