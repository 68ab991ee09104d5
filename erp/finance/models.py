import calendar
from datetime import date

from django.conf import settings
from django.db import models


class FinancialCategory(models.Model):
    TYPE_CHOICES = [
        ('expense', 'Expense'),
        ('income', 'Income'),
    ]

    name = models.CharField(max_length=100)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    color = models.CharField(max_length=7, default='#6366f1')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'financial_categories'
        ordering = ['name']
        verbose_name_plural = 'Financial categories'


class AccountPayable(models.Model):
    """Money owed by the business. Installment rows share ``parent_payable``."""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('overdue', 'Overdue'),
        ('cancelled', 'Cancelled'),
    ]

    supplier = models.ForeignKey('parties.Supplier', on_delete=models.SET_NULL, null=True, blank=True, related_name='payables')
    category = models.ForeignKey(FinancialCategory, on_delete=models.SET_NULL, null=True, blank=True, related_name='payables')
    recurring_expense = models.ForeignKey('RecurringExpense', on_delete=models.SET_NULL, null=True, blank=True, related_name='bills')
    description = models.CharField(max_length=500)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    due_date = models.DateField()
    payment_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    notes = models.TextField(blank=True, null=True)
    installment_number = models.PositiveSmallIntegerField(default=1)
    total_installments = models.PositiveSmallIntegerField(default=1)
    parent_payable = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='installment_rows')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='payables_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.description} ({self.amount})"

    class Meta:
        db_table = 'accounts_payable'
        ordering = ['-due_date', '-id']
        indexes = [
            models.Index(fields=['status', 'due_date'], name='accounts_pa_status_9c1e4b_idx'),
            models.Index(fields=['payment_date'], name='accounts_pa_payment_47d2a0_idx'),
        ]


class AccountReceivable(models.Model):
    """Money owed to the business. Installment rows share ``parent_receivable``."""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('received', 'Received'),
        ('overdue', 'Overdue'),
        ('cancelled', 'Cancelled'),
    ]

    order = models.ForeignKey('sales.Order', on_delete=models.SET_NULL, null=True, blank=True, related_name='receivables')
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='receivables')
    description = models.CharField(max_length=500)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    due_date = models.DateField()
    received_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    notes = models.TextField(blank=True, null=True)
    installment_number = models.PositiveSmallIntegerField(default=1)
    total_installments = models.PositiveSmallIntegerField(default=1)
    parent_receivable = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='installment_rows')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='receivables_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.description} ({self.amount})"

    class Meta:
        db_table = 'accounts_receivable'
        ordering = ['-due_date', '-id']
        indexes = [
            models.Index(fields=['status', 'due_date'], name='accounts_re_status_2b8f13_idx'),
            models.Index(fields=['received_date'], name='accounts_re_receive_e60a97_idx'),
        ]


class RecurringExpense(models.Model):
    """Fixed cost that turns into one payable per billing period"""
    CATEGORY_CHOICES = [
        ('electricity', 'Electricity'),
        ('water', 'Water'),
        ('phone', 'Phone'),
        ('internet', 'Internet'),
        ('rent', 'Rent'),
        ('insurance', 'Insurance'),
        ('software', 'Software'),
        ('maintenance', 'Maintenance'),
        ('other', 'Other'),
    ]
    FREQUENCY_CHOICES = [
        ('monthly', 'Monthly'),
        ('quarterly', 'Quarterly'),
        ('yearly', 'Yearly'),
    ]
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('paused', 'Paused'),
        ('cancelled', 'Cancelled'),
    ]

    name = models.CharField(max_length=255)
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default='other')
    supplier = models.ForeignKey('parties.Supplier', on_delete=models.SET_NULL, null=True, blank=True, related_name='recurring_expenses')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    frequency = models.CharField(max_length=10, choices=FREQUENCY_CHOICES, default='monthly')
    day_of_month = models.PositiveSmallIntegerField(default=1)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='active')
    last_generated = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='recurring_expenses_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def due_date_in(self, year, month):
        """Billing date inside ``year``/``month``, clamped to the month's last day"""
        last_day = calendar.monthrange(year, month)[1]
        return date(year, month, min(self.day_of_month, last_day))

    def is_due_in(self, year, month):
        """Whether this expense bills in ``year``/``month`` given its frequency and validity window"""
        if (year, month) < (self.start_date.year, self.start_date.month):
            return False
        if self.end_date and self.due_date_in(year, month) > self.end_date:
            return False
        months_since_start = (year - self.start_date.year) * 12 + (month - self.start_date.month)
        if self.frequency == 'quarterly':
            return months_since_start % 3 == 0
        if self.frequency == 'yearly':
            return months_since_start % 12 == 0
        return True

    class Meta:
        db_table = 'recurring_expenses'
        ordering = ['day_of_month', 'name']
