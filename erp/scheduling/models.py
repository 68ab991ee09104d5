from django.conf import settings
from django.db import models


class CalendarEvent(models.Model):
    """Meeting, visit or call on the shared calendar"""
    TYPE_CHOICES = [
        ('meeting', 'Meeting'),
        ('visit', 'Visit'),
        ('call', 'Call'),
        ('other', 'Other'),
    ]

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    event_type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='meeting')
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='calendar_events')
    project = models.ForeignKey('projects.Project', on_delete=models.SET_NULL, null=True, blank=True, related_name='calendar_events')
    location = models.CharField(max_length=255, blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='calendar_events_created')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'calendar_events'
        ordering = ['start_date']
        indexes = [
            models.Index(fields=['start_date'], name='calendar_ev_start_d_71f0c3_idx'),
        ]
