from django.apps import AppConfig


class ProjectsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'erp.projects'

    def ready(self):
        """Register the task status side effects"""
        import erp.projects.services  # noqa: F401
