import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('parties', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Budget',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('budget_number', models.CharField(max_length=20, unique=True)),
                ('customer_name', models.CharField(blank=True, max_length=255, null=True)),
                ('customer_email', models.CharField(blank=True, max_length=320, null=True)),
                ('customer_phone', models.CharField(blank=True, max_length=20, null=True)),
                ('customer_document', models.CharField(blank=True, max_length=20, null=True)),
                ('customer_address', models.TextField(blank=True, null=True)),
                ('customer_neighborhood', models.CharField(blank=True, max_length=100, null=True)),
                ('customer_city', models.CharField(blank=True, max_length=100, null=True)),
                ('customer_state', models.CharField(blank=True, max_length=2, null=True)),
                ('customer_zip_code', models.CharField(blank=True, max_length=10, null=True)),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('labor_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('labor_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('labor_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('material_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('third_party_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('other_direct_costs', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('indirect_costs_total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('profit_margin', models.DecimalField(decimal_places=2, default=Decimal('20.00'), max_digits=5)),
                ('cbs_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('ibs_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('irpj_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('csll_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('total_direct_costs', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_costs', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('gross_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('cbs_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('ibs_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_consumption_taxes', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('net_revenue', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('profit_before_taxes', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('irpj_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('csll_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('net_profit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('final_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('tax_regime', models.CharField(choices=[('new', 'New (CBS/IBS)'), ('old', 'Old'), ('transition', 'Transition')], default='new', max_length=20)),
                ('installments', models.PositiveSmallIntegerField(default=1)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('sent', 'Sent'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('converted', 'Converted')], default='draft', max_length=20)),
                ('valid_until', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='budgets_created', to=settings.AUTH_USER_MODEL)),
                ('customer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='budgets', to='parties.customer')),
            ],
            options={
                'db_table': 'budgets',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status'], name='budgets_status_61d0ab_idx'),
                    models.Index(fields=['-created_at'], name='budgets_created_0e7f52_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BudgetItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('labor', 'Labor'), ('material', 'Material'), ('thirdparty', 'Third party'), ('indirect', 'Indirect'), ('other', 'Other'), ('service', 'Service')], default='service', max_length=20)),
                ('description', models.CharField(max_length=500)),
                ('quantity', models.DecimalField(decimal_places=2, default=Decimal('1.00'), max_digits=10)),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('total_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('budget', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='budgets.budget')),
                ('product', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='budget_items', to='catalog.product')),
            ],
            options={
                'db_table': 'budget_items',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='BudgetTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('labor_hours', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('labor_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('material_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('third_party_cost', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('other_direct_costs', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('indirect_costs_total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('profit_margin', models.DecimalField(decimal_places=2, default=Decimal('20.00'), max_digits=5)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='budget_templates_created', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'budget_templates',
                'ordering': ['name'],
            },
        ),
    ]
