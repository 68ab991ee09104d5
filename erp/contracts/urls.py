from django.urls import path
from .views import contract_list_create, contract_detail

urlpatterns = [
    path('contracts/', contract_list_create, name='contract-list-create'),
    path('contracts/<int:pk>/', contract_detail, name='contract-detail'),
]
