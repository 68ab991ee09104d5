from django.urls import path
from .views import (
    budget_list_create, budget_detail, budget_transition,
    budget_convert_to_order, budget_create_project, budget_export,
    template_list_create, template_detail,
)

urlpatterns = [
    # Budget endpoints
    path('budgets/', budget_list_create, name='budget-list-create'),
    path('budgets/<int:pk>/', budget_detail, name='budget-detail'),
    path('budgets/<int:pk>/transition/', budget_transition, name='budget-transition'),
    path('budgets/<int:pk>/convert-to-order/', budget_convert_to_order, name='budget-convert-to-order'),
    path('budgets/<int:pk>/create-project/', budget_create_project, name='budget-create-project'),
    path('budgets/<int:pk>/export/', budget_export, name='budget-export'),

    # Budget template endpoints
    path('budget-templates/', template_list_create, name='budget-template-list-create'),
    path('budget-templates/<int:pk>/', template_detail, name='budget-template-detail'),
]
