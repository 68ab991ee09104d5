from django.db import models
from decimal import Decimal


class Product(models.Model):
    """Product or service sold in orders and quoted in budgets"""
    TYPE_CHOICES = [
        ('product', 'Product'),
        ('service', 'Service'),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='product')
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    unit = models.CharField(max_length=20, default='un')
    category = models.CharField(max_length=100, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'products'
        ordering = ['name']
        indexes = [
            models.Index(fields=['name'], name='products_name_8d41c0_idx'),
            models.Index(fields=['is_active'], name='products_is_acti_2f9b77_idx'),
        ]
