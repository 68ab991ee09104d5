from django.urls import path
from .views import order_list_create, order_detail, order_transition, order_calculate

urlpatterns = [
    path('orders/', order_list_create, name='order-list-create'),
    path('orders/calculate/', order_calculate, name='order-calculate'),
    path('orders/<int:pk>/', order_detail, name='order-detail'),
    path('orders/<int:pk>/transition/', order_transition, name='order-transition'),
]
