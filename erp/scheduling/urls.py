from django.urls import path
from .views import event_list_create, event_detail, agenda, financial_alerts

urlpatterns = [
    path('calendar/events/', event_list_create, name='calendar-event-list-create'),
    path('calendar/events/<int:pk>/', event_detail, name='calendar-event-detail'),
    path('calendar/agenda/', agenda, name='calendar-agenda'),
    path('calendar/financial-alerts/', financial_alerts, name='calendar-financial-alerts'),
]
