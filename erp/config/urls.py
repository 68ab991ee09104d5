"""
URL configuration for the ERP backend.

Every app mounts its function views under ``api/v1/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "ERP Management Admin Panel"
admin.site.site_title = "ERP Admin Portal"
admin.site.index_title = "Welcome to the ERP Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('erp.core.urls')),
    path('api/v1/', include('erp.parties.urls')),
    path('api/v1/', include('erp.catalog.urls')),
    path('api/v1/', include('erp.budgets.urls')),
    path('api/v1/', include('erp.sales.urls')),
    path('api/v1/', include('erp.finance.urls')),
    path('api/v1/', include('erp.projects.urls')),
    path('api/v1/', include('erp.contracts.urls')),
    path('api/v1/', include('erp.scheduling.urls')),
    path('api/v1/', include('erp.reports.urls')),
]
