from django.contrib import admin
from .models import Customer, Supplier


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'document', 'city', 'state', 'created_at']
    list_filter = ['state', 'created_at']
    search_fields = ['name', 'email', 'phone', 'document']
    ordering = ['name']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'email', 'phone', 'document', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'email', 'document']
    ordering = ['name']
