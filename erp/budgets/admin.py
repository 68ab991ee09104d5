from django.contrib import admin
from .models import Budget, BudgetItem, BudgetTemplate


class BudgetItemInline(admin.TabularInline):
    model = BudgetItem
    extra = 0
    readonly_fields = ['total_price']


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ['budget_number', 'title', 'customer', 'customer_name', 'status', 'final_price', 'created_at']
    list_filter = ['status', 'tax_regime', 'created_at']
    search_fields = ['budget_number', 'title', 'customer__name', 'customer_name']
    readonly_fields = [
        'labor_cost', 'total_direct_costs', 'total_costs', 'gross_value', 'cbs_amount', 'ibs_amount',
        'total_consumption_taxes', 'net_revenue', 'profit_before_taxes', 'irpj_amount', 'csll_amount',
        'net_profit', 'final_price', 'created_at', 'updated_at'
    ]
    inlines = [BudgetItemInline]


@admin.register(BudgetTemplate)
class BudgetTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'profit_margin', 'created_at']
    search_fields = ['name']
