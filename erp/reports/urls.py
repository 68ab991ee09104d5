from django.urls import path
from .views import (
    dashboard_stats, cash_flow, payments_due_today, recurring_expenses_due_today,
    export_payables, export_receivables, export_orders,
)

urlpatterns = [
    path('reports/dashboard/', dashboard_stats, name='report-dashboard'),
    path('reports/cash-flow/', cash_flow, name='report-cash-flow'),
    path('reports/payments-due-today/', payments_due_today, name='report-payments-due-today'),
    path('reports/recurring-due-today/', recurring_expenses_due_today, name='report-recurring-due-today'),
    path('reports/export/payables/', export_payables, name='report-export-payables'),
    path('reports/export/receivables/', export_receivables, name='report-export-receivables'),
    path('reports/export/orders/', export_orders, name='report-export-orders'),
]
