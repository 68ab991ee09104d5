from django.contrib import admin
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['subtotal']


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'customer', 'customer_name', 'status', 'total_amount', 'order_date']
    list_filter = ['status', 'order_date']
    search_fields = ['order_number', 'customer__name', 'customer_name']
    readonly_fields = ['order_date', 'created_at', 'updated_at']
    inlines = [OrderItemInline]
