from django.contrib.auth.models import AbstractUser
from django.db import models
from decimal import Decimal


class User(AbstractUser):
    """Extended user model with an application role"""
    ROLE_CHOICES = [
        ('user', 'User'),
        ('admin', 'Admin'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='user')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_admin(self):
        return self.role == 'admin' or self.is_superuser

    class Meta:
        db_table = 'users'


class Setting(models.Model):
    """System settings"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    description = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.key

    class Meta:
        db_table = 'settings'


class TaxSetting(models.Model):
    """Tax rates applied to new budgets. Only the active row is used."""
    REGIME_CHOICES = [
        ('new', 'New (CBS/IBS)'),
        ('old', 'Old'),
        ('transition', 'Transition'),
    ]

    cbs_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    ibs_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    irpj_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    csll_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    minimum_margin = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('20.00'))
    tax_regime = models.CharField(max_length=20, choices=REGIME_CHOICES, default='new')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Tax settings ({self.get_tax_regime_display()})"

    @classmethod
    def get_active(cls):
        return cls.objects.filter(is_active=True).order_by('-updated_at').first()

    class Meta:
        db_table = 'tax_settings'


class CompanySettings(models.Model):
    """Company identity printed on budgets, contracts and exports"""
    company_name = models.CharField(max_length=255)
    cnpj = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    neighborhood = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=2, blank=True)
    zip_code = models.CharField(max_length=10, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    owner_name = models.CharField(max_length=255, blank=True)
    owner_cpf = models.CharField(max_length=14, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.company_name

    class Meta:
        db_table = 'company_settings'
        verbose_name_plural = 'Company settings'


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('view', 'View'),
        ('status_change', 'Status Change'),
        ('budget_convert', 'Budget Converted'),
        ('project_from_budget', 'Project Created From Budget'),
        ('installments_create', 'Installments Created'),
        ('payment', 'Payment Registered'),
        ('receipt', 'Receipt Registered'),
        ('bills_generate', 'Recurring Bills Generated'),
        ('export', 'Export'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., customer name, budget title)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., order number, budget number)")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_a4f1e2_idx'),
            models.Index(fields=['action'], name='audit_logs_action_7b2c9d_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_3e8a61_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_object__c95d07_idx'),
        ]
