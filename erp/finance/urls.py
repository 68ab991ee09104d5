from django.urls import path
from .views import (
    category_list_create,
    payable_list_create, payable_detail, payable_mark_paid,
    receivable_list_create, receivable_detail, receivable_mark_received,
    recurring_expense_list_create, recurring_expense_detail,
    recurring_expense_mark_paid, recurring_expense_generate_bills,
)

urlpatterns = [
    # Category endpoints
    path('financial-categories/', category_list_create, name='financial-category-list-create'),

    # Accounts payable endpoints
    path('accounts-payable/', payable_list_create, name='payable-list-create'),
    path('accounts-payable/<int:pk>/', payable_detail, name='payable-detail'),
    path('accounts-payable/<int:pk>/mark-paid/', payable_mark_paid, name='payable-mark-paid'),

    # Accounts receivable endpoints
    path('accounts-receivable/', receivable_list_create, name='receivable-list-create'),
    path('accounts-receivable/<int:pk>/', receivable_detail, name='receivable-detail'),
    path('accounts-receivable/<int:pk>/mark-received/', receivable_mark_received, name='receivable-mark-received'),

    # Recurring expense endpoints
    path('recurring-expenses/', recurring_expense_list_create, name='recurring-expense-list-create'),
    path('recurring-expenses/generate-bills/', recurring_expense_generate_bills, name='recurring-expense-generate-bills'),
    path('recurring-expenses/<int:pk>/', recurring_expense_detail, name='recurring-expense-detail'),
    path('recurring-expenses/<int:pk>/mark-paid/', recurring_expense_mark_paid, name='recurring-expense-mark-paid'),
]
