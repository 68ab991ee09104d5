from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal


class Contract(models.Model):
    """Recurring service agreement billed monthly"""
    TYPE_CHOICES = [
        ('maintenance', 'Maintenance'),
        ('hosting', 'Hosting'),
        ('support', 'Support'),
        ('software_license', 'Software license'),
        ('other', 'Other'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('suspended', 'Suspended'),
        ('cancelled', 'Cancelled'),
        ('expired', 'Expired'),
    ]

    customer = models.ForeignKey('parties.Customer', on_delete=models.PROTECT, related_name='contracts')
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    contract_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='other')
    contract_content = models.TextField(blank=True, null=True)
    monthly_value = models.DecimalField(max_digits=14, decimal_places=2)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    renewal_date = models.DateField(null=True, blank=True)
    adjustment_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    billing_day = models.PositiveSmallIntegerField(default=1, validators=[MinValueValidator(1), MaxValueValidator(31)])
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='contracts_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.title} ({self.customer})"

    def get_items_total(self):
        return sum((item.get_line_total() for item in self.items.all()), Decimal('0.00'))

    class Meta:
        db_table = 'contracts'
        ordering = ['-start_date', '-id']
        indexes = [
            models.Index(fields=['status'], name='contracts_status_d2e4a8_idx'),
        ]


class ContractItem(models.Model):
    contract = models.ForeignKey(Contract, on_delete=models.CASCADE, related_name='items')
    description = models.CharField(max_length=500)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.description} x {self.quantity}"

    def get_line_total(self):
        return self.quantity * self.unit_price

    class Meta:
        db_table = 'contract_items'
        ordering = ['id']
