from django.contrib import admin
from .models import FinancialCategory, AccountPayable, AccountReceivable, RecurringExpense


@admin.register(FinancialCategory)
class FinancialCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'color', 'created_at']
    list_filter = ['type']
    search_fields = ['name']


@admin.register(AccountPayable)
class AccountPayableAdmin(admin.ModelAdmin):
    list_display = ['description', 'supplier', 'amount', 'due_date', 'status', 'installment_number', 'total_installments']
    list_filter = ['status', 'due_date', 'category']
    search_fields = ['description', 'supplier__name']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-due_date']


@admin.register(AccountReceivable)
class AccountReceivableAdmin(admin.ModelAdmin):
    list_display = ['description', 'customer', 'order', 'amount', 'due_date', 'status', 'installment_number', 'total_installments']
    list_filter = ['status', 'due_date']
    search_fields = ['description', 'customer__name', 'order__order_number']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-due_date']


@admin.register(RecurringExpense)
class RecurringExpenseAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'amount', 'frequency', 'day_of_month', 'status', 'last_generated']
    list_filter = ['status', 'frequency', 'category']
    search_fields = ['name', 'supplier__name']
