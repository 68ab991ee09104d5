from django.contrib import admin
from .models import Contract, ContractItem


class ContractItemInline(admin.TabularInline):
    model = ContractItem
    extra = 0


@admin.register(Contract)
class ContractAdmin(admin.ModelAdmin):
    list_display = ['title', 'customer', 'contract_type', 'monthly_value', 'status', 'billing_day', 'start_date']
    list_filter = ['status', 'contract_type']
    search_fields = ['title', 'customer__name']
    inlines = [ContractItemInline]
