from django.apps import AppConfig


class SalesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'erp.sales'

    def ready(self):
        """Register the order status side effects"""
        import erp.sales.services  # noqa: F401
