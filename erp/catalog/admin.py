from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'price', 'unit', 'category', 'is_active', 'updated_at']
    list_filter = ['type', 'is_active', 'category']
    search_fields = ['name', 'description', 'category']
    ordering = ['name']
