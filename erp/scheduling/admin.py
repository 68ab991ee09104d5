from django.contrib import admin
from .models import CalendarEvent


@admin.register(CalendarEvent)
class CalendarEventAdmin(admin.ModelAdmin):
    list_display = ['title', 'event_type', 'start_date', 'end_date', 'customer', 'project', 'location']
    list_filter = ['event_type', 'start_date']
    search_fields = ['title', 'customer__name', 'location']
